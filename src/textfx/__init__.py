"""
textfx: place text behind the subject of a photo.

A photo is split into a background and a subject cutout, and text layers
are stacked between or above them. The package keeps the layer state,
renders the preview layout and exports a native-resolution composite.

Basic usage::

    import asyncio

    from textfx import Session
    from textfx.api.geometry import Viewport
    from textfx.api.pil_io import FileSink

    session = Session()
    session.upload('photo.jpg')
    asyncio.run(session.remove_background(remover))
    session.store.set_attribute('text-layer-1', 'text', 'HELLO')
    session.export(Viewport(0, 0, 960, 540), FileSink('.'))

Architecture:

- :py:mod:`textfx.api`: Layer store, filters, gestures and the session
- :py:mod:`textfx.composite`: Export rendering with Pillow and NumPy
"""

from textfx.api.session import Session
from textfx.api.store import LayerStore
from textfx.version import __version__

__all__ = ["LayerStore", "Session", "__version__"]
