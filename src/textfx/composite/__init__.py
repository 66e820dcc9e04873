"""
Composite module for export rendering.

This subpackage renders a layer snapshot into a native-resolution raster
that reproduces the on-screen layout.

Key modules:

- :py:mod:`textfx.composite.composite`: Layer compositing
- :py:mod:`textfx.composite.text`: Text layer rasterization
- :py:mod:`textfx.composite.filters`: Filter preset raster implementation
- :py:mod:`textfx.composite.blend`: Blend mode implementations

Example usage::

    from textfx.api.geometry import Viewport
    from textfx.composite import composite

    image = composite(
        store.layers, background, Viewport(0, 0, 960, 540), cutout=cutout
    )
    image.save('output.png')

Compositing uses Pillow for drawing and NumPy for color math.
"""

from textfx.composite.composite import CompositeError, Compositor, composite

__all__ = [
    "CompositeError",
    "Compositor",
    "composite",
]
