"""
Raster implementation of the filter pipeline.

The four channel adjustments follow the CSS filter-effects definitions so
the export matches the live preview's ``filter`` property:

- ``brightness(b)``: linear multiplier ``C * b``
- ``contrast(c)``: ``(C - 0.5) * c + 0.5``
- ``saturate(s)``: luminance-preserving color matrix
- ``hue-rotate(a)``: color matrix rotating hue by ``a`` radians

Each step clamps its result to [0, 1], like chained CSS filter functions.
Warmth is emulated by a full-surface orange or blue fill composited in
overlay blend mode with alpha ``|warmth|``.

Example::

    from textfx.api.filters import effective_settings
    from textfx.composite.filters import render_to_surface

    filtered = render_to_surface(image, effective_settings('vivid', 80))
"""

import logging
from typing import Dict, Optional, Tuple

import numpy as np
from PIL import Image

from textfx.api.filters import PRESETS, FilterSettings
from textfx.composite import utils
from textfx.composite.blend import composite_source
from textfx.constants import COOL_OVERLAY, WARM_OVERLAY, BlendMode

logger = logging.getLogger(__name__)


def saturate_matrix(s: float) -> np.ndarray:
    return np.array([
        [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
    ], dtype=np.float32)


def hue_rotate_matrix(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [0.213 + c * 0.787 - s * 0.213,
         0.715 - c * 0.715 - s * 0.715,
         0.072 - c * 0.072 + s * 0.928],
        [0.213 - c * 0.213 + s * 0.143,
         0.715 + c * 0.285 + s * 0.140,
         0.072 - c * 0.072 - s * 0.283],
        [0.213 - c * 0.213 - s * 0.787,
         0.715 - c * 0.715 + s * 0.715,
         0.072 + c * 0.928 + s * 0.072],
    ], dtype=np.float32)


def _apply_matrix(color: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    return utils.clip(np.einsum('ij,hwj->hwi', matrix, color))


def apply_channels(color: np.ndarray, settings: FilterSettings) -> np.ndarray:
    """Apply brightness, contrast, saturate and hue-rotate in that order."""
    if settings.brightness != 1:
        color = utils.clip(color * settings.brightness)
    if settings.contrast != 1:
        color = utils.clip((color - 0.5) * settings.contrast + 0.5)
    if settings.saturate != 1:
        color = _apply_matrix(color, saturate_matrix(settings.saturate))
    if settings.hue != 0:
        color = _apply_matrix(color, hue_rotate_matrix(settings.hue))
    return color.astype(np.float32)


def apply_warmth(
    color: np.ndarray, alpha: np.ndarray, warmth: float
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Composite the temperature overlay over ``color``.

    The overlay tints existing pixels only; ``alpha`` is returned unchanged.
    """
    if warmth == 0:
        return color, alpha
    rgb = WARM_OVERLAY if warmth > 0 else COOL_OVERLAY
    overlay = np.array(rgb, dtype=np.float32).reshape((1, 1, 3)) / 255.0
    opacity = min(1.0, abs(warmth))
    logger.debug('Warmth overlay %s at %g' % (rgb, opacity))
    color, _ = composite_source(color, alpha, overlay, opacity, BlendMode.OVERLAY)
    return color, alpha


def render_to_surface(
    source: Image.Image,
    settings: FilterSettings,
    target: Optional[Image.Image] = None,
) -> Image.Image:
    """
    Render ``source`` with ``settings`` applied.

    The source is copied into an intermediate float buffer, the four channel
    adjustments are applied, then the warmth overlay if any.

    :param source: `PIL.Image` to filter.
    :param settings: :py:class:`~textfx.api.filters.FilterSettings`.
    :param target: optional `PIL.Image` of the same size that receives the
        result in place.
    :return: filtered RGBA `PIL.Image` (``target`` when given).
    """
    color, alpha = utils.to_float(source)
    if not settings.is_neutral():
        color = apply_channels(color, settings)
        color, alpha = apply_warmth(color, alpha, settings.warmth)
    result = utils.to_image(color, alpha)

    if target is None:
        return result
    if target.size != result.size:
        raise ValueError(
            'Target size %s does not match source size %s'
            % (target.size, result.size)
        )
    target.paste(result.convert(target.mode), (0, 0))
    return target


def render_thumbnails(
    image: Image.Image, size: Tuple[int, int] = (96, 96)
) -> Dict[str, Image.Image]:
    """Render a small preview of ``image`` for every preset."""
    thumbnail = image.convert('RGBA')
    thumbnail.thumbnail(size)
    return {
        preset.name: render_to_surface(thumbnail, preset.settings)
        for preset in PRESETS
    }
