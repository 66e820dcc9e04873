"""Composite implementation for export rendering."""

import logging
from typing import Callable, Dict, Iterable, Optional

from PIL import Image

from textfx.api.filters import NEUTRAL, FilterSettings, FilterState
from textfx.api.geometry import Viewport, font_scale
from textfx.api.layers import BackgroundLayer, Layer, SubjectLayer, TextLayer
from textfx.api.store import sort_layers
from textfx.composite.filters import render_to_surface
from textfx.composite.text import DefaultFontResolver, FontResolver, draw_text_layer
from textfx.constants import LayerKind

logger = logging.getLogger(__name__)


class CompositeError(RuntimeError):
    """Export could not be rendered."""


def composite(
    layers: Iterable[Layer],
    background: Optional[Image.Image],
    viewport: Viewport,
    cutout: Optional[Image.Image] = None,
    filter_state: Optional[FilterState] = None,
    fonts: Optional[FontResolver] = None,
) -> Image.Image:
    """
    Render layers into a native-resolution RGBA image.

    Visible layers are drawn bottom to top. With
    ``filter_state.apply_to_full_image`` the filter runs once over the
    assembled raster; otherwise only the background is filtered and text and
    subject are drawn clean on top.

    Args:
        layers: Layer snapshot, in store insertion order
        background: Uploaded image at native resolution
        viewport: Preview rectangle the layout was made in; its fit scale
            converts preview font sizes to native pixels
        cutout: Subject cutout, or None while background removal is pending
        filter_state: Filter selection, default is no filter
        fonts: Font resolver shared with the preview

    Returns:
        RGBA PIL Image the size of ``background``

    Raises:
        CompositeError: when a source raster is missing or unreadable, or the
            surface cannot be created. No partial output is returned.
    """
    try:
        compositor = Compositor(background, viewport, cutout, filter_state, fonts)
        for layer in sort_layers(tuple(layers), visible_only=True):
            compositor.apply(layer)
        return compositor.finish()
    except CompositeError:
        raise
    except (OSError, ValueError, MemoryError) as e:
        raise CompositeError('Failed to render export: %s' % e) from e


class Compositor(object):
    """Composite context.

    Example::

        compositor = Compositor(background, viewport, cutout, filter_state)
        for layer in sort_layers(store.layers, visible_only=True):
            compositor.apply(layer)
        image = compositor.finish()
    """

    def __init__(
        self,
        background: Optional[Image.Image],
        viewport: Viewport,
        cutout: Optional[Image.Image] = None,
        filter_state: Optional[FilterState] = None,
        fonts: Optional[FontResolver] = None,
    ):
        if background is None:
            raise CompositeError('Background image is not available')
        if background.width == 0 or background.height == 0:
            raise CompositeError('Background image is empty')
        if viewport.is_empty():
            raise CompositeError('Viewport has no area: %r' % (viewport,))

        self._background = background.convert('RGBA')
        self._cutout = cutout
        self._fonts = fonts or DefaultFontResolver()
        self._font_scale = font_scale(self._background.size, viewport.size)
        self._settings: FilterSettings = NEUTRAL
        self._full_image = True
        if filter_state is not None:
            self._settings = filter_state.settings
            self._full_image = filter_state.apply_to_full_image

        self._canvas = Image.new('RGBA', self._background.size, (0, 0, 0, 0))
        self._renderers: Dict[LayerKind, Callable] = {
            LayerKind.BACKGROUND: self._apply_background,
            LayerKind.SUBJECT: self._apply_subject,
            LayerKind.TEXT: self._apply_text,
        }
        assert set(self._renderers) == set(LayerKind)

    @property
    def size(self):
        return self._canvas.size

    @property
    def font_scale(self) -> float:
        return self._font_scale

    def apply(self, layer: Layer) -> None:
        if not layer.visible:
            logger.debug('Ignore hidden %s' % layer.id)
            return
        logger.debug('Compositing %s' % layer.id)
        self._renderers[layer.kind](layer)

    def finish(self) -> Image.Image:
        if self._full_image and not self._settings.is_neutral():
            logger.debug('Filtering full composite')
            return render_to_surface(self._canvas, self._settings)
        return self._canvas

    def _apply_background(self, layer: BackgroundLayer) -> None:
        image = self._background
        if not self._full_image and not self._settings.is_neutral():
            logger.debug('Filtering background only')
            image = render_to_surface(image, self._settings)
        self._canvas.alpha_composite(image)

    def _apply_subject(self, layer: SubjectLayer) -> None:
        if self._cutout is None:
            logger.debug('No cutout for %s' % layer.id)
            return
        cutout = self._cutout.convert('RGBA')
        if cutout.size != self.size:
            cutout = cutout.resize(self.size, Image.Resampling.LANCZOS)
        self._canvas.alpha_composite(cutout)

    def _apply_text(self, layer: TextLayer) -> None:
        draw_text_layer(self._canvas, layer, self._font_scale, self._fonts)
