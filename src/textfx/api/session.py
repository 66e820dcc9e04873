"""
Editing session.

A :py:class:`Session` ties together the layer store, the filter state, the
uploaded rasters and the asynchronous background-removal collaborator, and
drives export into a save sink.

Example usage::

    import asyncio

    from textfx.api.geometry import Viewport
    from textfx.api.pil_io import FileSink
    from textfx.api.session import Session

    session = Session()
    session.upload('photo.jpg')
    asyncio.run(session.remove_background(remover))
    session.store.set_attribute('text-layer-1', 'text', 'HELLO')
    session.export(Viewport(0, 0, 960, 540), FileSink('.'))

Every upload increments a generation token. Background removal results
that arrive for an older generation are discarded, so a slow removal never
overwrites the cutout of a newer upload.
"""

import logging
import os
from typing import Any, Awaitable, BinaryIO, Callable, Optional, Union

from PIL import Image

from textfx.api.filters import FilterState
from textfx.api.geometry import Viewport
from textfx.api.pil_io import SaveSink, encode_png, open_image
from textfx.api.store import LayerStore
from textfx.composite import composite
from textfx.composite.text import DefaultFontResolver, FontResolver
from textfx.constants import BACKGROUND_REMOVAL_ERROR, EXPORT_FILENAME

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float, float], None]
BackgroundRemover = Callable[..., Awaitable[Image.Image]]


class BackgroundRemovalError(RuntimeError):
    """Raised by removers that cannot isolate the subject."""


class Session(object):
    """
    Transient editing state for one photo at a time.

    :param store: :py:class:`~textfx.api.store.LayerStore`, a default store
        is created when omitted.
    :param fonts: font resolver shared by preview measurement and export.
    :param filename: suggested export file name.
    """

    def __init__(
        self,
        store: Optional[LayerStore] = None,
        fonts: Optional[FontResolver] = None,
        filename: str = EXPORT_FILENAME,
    ):
        self.store = store if store is not None else LayerStore.default()
        self.filter = FilterState()
        self.fonts = fonts or DefaultFontResolver()
        self.filename = filename
        self._background: Optional[Image.Image] = None
        self._cutout: Optional[Image.Image] = None
        self._generation = 0
        self._loading = False
        self._error: Optional[str] = None

    def __repr__(self) -> str:
        return '%s(generation=%d, loading=%s, error=%r)' % (
            self.__class__.__name__, self._generation, self._loading,
            self._error,
        )

    @property
    def background(self) -> Optional[Image.Image]:
        return self._background

    @property
    def cutout(self) -> Optional[Image.Image]:
        return self._cutout

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> Optional[str]:
        """User-facing message when background removal failed."""
        return self._error

    def upload(self, source: Union[str, os.PathLike, BinaryIO, Image.Image]) -> int:
        """
        Start editing a new image.

        The previous cutout and error are cleared and the generation token
        advances.

        :param source: file path, file object or decoded `PIL.Image`.
        :return: the generation token of this upload.
        """
        if isinstance(source, Image.Image):
            image = source.convert('RGBA')
        else:
            image = open_image(source)
        self._generation += 1
        self._background = image
        self._cutout = None
        self._error = None
        self._loading = True
        self.store.ensure_image_layers()
        logger.debug('Upload %d: %dx%d' % ((self._generation,) + image.size))
        return self._generation

    def resolve_cutout(self, generation: int, cutout: Image.Image) -> bool:
        """
        Install the cutout for ``generation``.

        :return: `False` when the result is stale and was discarded.
        """
        if generation != self._generation:
            logger.debug(
                'Discard stale cutout %d (current %d)' %
                (generation, self._generation)
            )
            return False
        self._cutout = cutout.convert('RGBA')
        self._loading = False
        return True

    def fail_cutout(self, generation: int, error: Any = None) -> bool:
        """
        Record a background-removal failure for ``generation``.

        Only the subject layer is affected; the background and text layers
        stay usable.
        """
        if generation != self._generation:
            logger.debug('Discard stale failure %d' % generation)
            return False
        logger.warning('Background removal failed: %s' % (error,))
        self._cutout = None
        self._error = BACKGROUND_REMOVAL_ERROR
        self._loading = False
        return True

    async def remove_background(
        self,
        remover: BackgroundRemover,
        progress: Optional[ProgressCallback] = None,
    ) -> bool:
        """
        Await ``remover`` on the current background.

        ``remover(image, progress=progress)`` must return an awaitable that
        resolves to the cutout image or raises.

        :return: `True` when the cutout of the current upload was installed.
        """
        if self._background is None:
            raise ValueError('No image uploaded')
        generation = self._generation
        background = self._background
        try:
            if progress is None:
                cutout = await remover(background)
            else:
                cutout = await remover(background, progress=progress)
        except Exception as e:
            self.fail_cutout(generation, e)
            return False
        return self.resolve_cutout(generation, cutout)

    def set_filter(
        self,
        name: Optional[str] = None,
        intensity: Optional[float] = None,
        apply_to_full_image: Optional[bool] = None,
    ) -> FilterState:
        """Update the filter selection; unknown presets raise `ValueError`."""
        if name is not None:
            self.filter.name = name
        if intensity is not None:
            self.filter.intensity = intensity
        if apply_to_full_image is not None:
            self.filter.apply_to_full_image = apply_to_full_image
        return self.filter

    def render(self, viewport: Viewport) -> Image.Image:
        """
        Render the current snapshot at native resolution.

        :param viewport: preview rectangle the layout was made in.
        :raise ~textfx.composite.CompositeError: when rendering fails.
        """
        return composite(
            self.store.layers,
            self._background,
            viewport,
            cutout=self._cutout,
            filter_state=self.filter,
            fonts=self.fonts,
        )

    def export(self, viewport: Viewport, sink: SaveSink) -> bytes:
        """
        Render, encode as PNG and hand the result to ``sink``.

        The sink is not called when rendering fails.
        """
        data = encode_png(self.render(viewport))
        sink.save(data, self.filename)
        return data
