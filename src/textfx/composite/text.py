"""
Text layer rasterization.

A text layer is drawn into a local tile, then mapped onto the export canvas
by one affine transform:

1. translate to the layer position (:py:func:`~textfx.api.geometry.to_pixel`
   on the native viewport),
2. tilt approximation, a 2D scale by ``cos(tilt_y)`` horizontally and
   ``cos(tilt_x)`` vertically standing in for the preview's 3D rotation,
3. in-plane rotation by ``rotation`` degrees, clockwise.

With zero letter spacing the whole string is emitted as one centered glyph
run. Otherwise each glyph is emitted at its cumulative offset: natural
advance from the font plus the spacing, with the whole run centered.

Shadows are applied in canvas space after the transform: the text alpha is
blurred and offset downward, both proportional to ``shadow_size``.
"""

import logging
import math
from typing import Dict, List, Optional, Protocol, Tuple

import numpy as np
from attrs import define
from PIL import Image, ImageDraw, ImageFilter, ImageFont

from textfx.api.geometry import Viewport, to_pixel
from textfx.api.layers import TextLayer
from textfx.composite.utils import parse_color

logger = logging.getLogger(__name__)

Font = ImageFont.FreeTypeFont

# Padding around the local tile so antialiased edges are not clipped.
TILE_PADDING = 2

BOLD_WEIGHT = 600


class FontResolver(Protocol):
    """Maps a font family to a renderable font."""

    def resolve(self, family: str, size: float, weight: int) -> Font: ...


class DefaultFontResolver(object):
    """
    Resolve fonts with :py:func:`PIL.ImageFont.truetype`.

    Candidates are tried in order: ``<family>-Bold.ttf`` for heavy weights,
    ``<family>.ttf``, then the fallback families, then Pillow's bundled
    default font.

    :param fallbacks: font file names tried when the family is not found.
    """

    def __init__(self, fallbacks: Tuple[str, ...] = ('DejaVuSans', 'Arial')):
        self._fallbacks = fallbacks
        self._cache: Dict[Tuple[str, int, int], Font] = {}

    def resolve(self, family: str, size: float, weight: int) -> Font:
        key = (family, max(1, int(round(size))), int(weight))
        if key not in self._cache:
            self._cache[key] = self._load(*key)
        return self._cache[key]

    def _candidates(self, family: str, weight: int) -> List[str]:
        names = []
        for name in (family,) + self._fallbacks:
            if weight >= BOLD_WEIGHT:
                names.append('%s-Bold.ttf' % name)
            names.append('%s.ttf' % name)
        return names

    def _load(self, family: str, size: int, weight: int) -> Font:
        for filename in self._candidates(family, weight):
            try:
                return ImageFont.truetype(filename, size)
            except OSError:
                continue
        logger.warning('Font %s not found, using the default font' % family)
        return ImageFont.load_default(size=size)  # type: ignore[return-value]


@define(frozen=True)
class GlyphRun:
    """A string drawn centered at horizontal offset ``x``."""

    text: str
    x: float


def layout_glyphs(text: str, font: Font, spacing: float) -> List[GlyphRun]:
    """
    Lay out ``text`` around the local origin.

    :return: a single centered run when ``spacing`` is 0, one run per glyph
        otherwise.
    """
    if not text:
        return []
    if spacing == 0:
        return [GlyphRun(text, 0.0)]

    advances = [font.getlength(char) for char in text]
    total = sum(advances) + spacing * (len(text) - 1)
    runs = []
    current = -total / 2.0
    for char, advance in zip(text, advances):
        runs.append(GlyphRun(char, current + advance / 2.0))
        current += advance + spacing
    return runs


def layer_matrix(layer: TextLayer) -> np.ndarray:
    """Linear part of the local-to-canvas transform, tilt then rotation."""
    tilt_x = math.radians(-layer.tilt_x)
    tilt_y = math.radians(-layer.tilt_y)
    tilt = np.array([[math.cos(tilt_y), 0.0], [0.0, math.cos(tilt_x)]])
    angle = math.radians(layer.rotation)
    rotation = np.array([
        [math.cos(angle), -math.sin(angle)],
        [math.sin(angle), math.cos(angle)],
    ])
    return tilt @ rotation


def _draw_tile(
    runs: List[GlyphRun], font: Font, fill: Tuple[int, int, int, int]
) -> Tuple[Image.Image, Tuple[float, float]]:
    """Draw glyph runs into a tile and return it with its local origin."""
    measure = ImageDraw.Draw(Image.new('L', (1, 1)))
    boxes = [
        measure.textbbox((run.x, 0), run.text, font=font, anchor='mm')
        for run in runs
    ]
    left = min(box[0] for box in boxes)
    top = min(box[1] for box in boxes)
    right = max(box[2] for box in boxes)
    bottom = max(box[3] for box in boxes)

    origin = (TILE_PADDING - left, TILE_PADDING - top)
    size = (
        int(math.ceil(right - left)) + 2 * TILE_PADDING,
        int(math.ceil(bottom - top)) + 2 * TILE_PADDING,
    )
    tile = Image.new('RGBA', size, fill[:3] + (0,))
    draw = ImageDraw.Draw(tile)
    for run in runs:
        draw.text(
            (origin[0] + run.x, origin[1]), run.text, font=font, fill=fill,
            anchor='mm',
        )
    return tile, origin


def _scale_alpha(image: Image.Image, factor: float) -> Image.Image:
    if factor >= 1:
        return image
    alpha = image.getchannel('A').point(lambda a: int(round(a * factor)))
    image.putalpha(alpha)
    return image


def _paste(target: Image.Image, image: Image.Image, offset: Tuple[int, int]) -> None:
    """Alpha-composite ``image`` onto ``target`` at a possibly negative offset."""
    if offset[0] < 0:
        if image.width <= -offset[0]:
            return
        image = image.crop((-offset[0], 0, image.width, image.height))
        offset = (0, offset[1])

    if offset[1] < 0:
        if image.height <= -offset[1]:
            return
        image = image.crop((0, -offset[1], image.width, image.height))
        offset = (offset[0], 0)

    if offset[0] >= target.width or offset[1] >= target.height:
        return
    target.alpha_composite(image, offset)


def draw_text_layer(
    target: Image.Image,
    layer: TextLayer,
    font_scale: float,
    fonts: FontResolver,
) -> Optional[Tuple[int, int, int, int]]:
    """
    Draw ``layer`` onto the RGBA ``target`` in place.

    :param target: native-resolution canvas.
    :param layer: :py:class:`~textfx.api.layers.TextLayer`.
    :param font_scale: ratio from preview pixels to native pixels.
    :param fonts: :py:class:`FontResolver`.
    :return: canvas bounding box of the drawn pixels, or `None`.
    """
    # Glyph runs are single-line.
    text = ' '.join(layer.text.splitlines())
    if not text:
        logger.debug('Empty text in %s' % layer.id)
        return None
    font = fonts.resolve(
        layer.font_family, layer.font_size * font_scale, layer.font_weight
    )
    runs = layout_glyphs(text, font, layer.letter_spacing * font_scale)

    tile, origin = _draw_tile(runs, font, parse_color(layer.color))

    matrix = layer_matrix(layer)
    if abs(np.linalg.det(matrix)) < 1e-9:
        logger.debug('Degenerate transform for %s' % layer.id)
        return None
    inverse = np.linalg.inv(matrix)
    x, y = to_pixel(layer.left, layer.top, Viewport.from_size(target.size))

    blur = layer.shadow_size * font_scale if layer.has_shadow else 0.0
    shadow_offset = blur / 2.0
    margin = int(math.ceil(1.5 * blur + shadow_offset)) + 1

    corners = np.array([
        (0, 0), (tile.width, 0), (0, tile.height), (tile.width, tile.height)
    ], dtype=np.float64) - origin
    mapped = corners @ matrix.T + (x, y)
    left = int(math.floor(mapped[:, 0].min())) - margin
    top = int(math.floor(mapped[:, 1].min())) - margin
    right = int(math.ceil(mapped[:, 0].max())) + margin
    bottom = int(math.ceil(mapped[:, 1].max())) + margin

    # Output pixel (u, v) maps to tile point inverse @ ((u, v) + offset - pos) + origin.
    shift = inverse @ np.array([left - x, top - y]) + origin
    data = (
        inverse[0, 0], inverse[0, 1], shift[0],
        inverse[1, 0], inverse[1, 1], shift[1],
    )
    rendered = tile.transform(
        (right - left, bottom - top),
        Image.Transform.AFFINE,
        data,
        resample=Image.Resampling.BICUBIC,
    )
    rendered = _scale_alpha(rendered, layer.opacity)

    if blur > 0:
        rendered = _with_shadow(rendered, layer.shadow_color, blur, shadow_offset)

    logger.debug('Drawing %s at (%g, %g)' % (layer.id, x, y))
    _paste(target, rendered, (left, top))
    return (left, top, right, bottom)


def _with_shadow(
    image: Image.Image, color: str, blur: float, offset: float
) -> Image.Image:
    """Put a blurred, downward-offset shadow of ``image`` behind it."""
    shadow_rgba = parse_color(color)
    mask = image.getchannel('A').filter(ImageFilter.GaussianBlur(blur / 2.0))
    mask = mask.point(lambda a: int(round(a * shadow_rgba[3] / 255.0)))

    shadow = Image.new('RGBA', image.size, shadow_rgba[:3] + (0,))
    shadow.putalpha(mask)
    result = Image.new('RGBA', image.size, (0, 0, 0, 0))
    result.paste(shadow, (0, int(round(offset))))
    result.alpha_composite(image)
    return result
