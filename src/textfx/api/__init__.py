"""
Editing API.

Key modules:

- :py:mod:`textfx.api.layers`: Layer records and attribute updates
- :py:mod:`textfx.api.store`: Ordered layer collection with selection
- :py:mod:`textfx.api.geometry`: Normalized and pixel coordinate mapping
- :py:mod:`textfx.api.filters`: Filter presets and intensity scaling
- :py:mod:`textfx.api.gestures`: Drag, pinch, wheel and nudge handling
- :py:mod:`textfx.api.preview`: Style descriptors for the live preview
- :py:mod:`textfx.api.session`: Upload, background removal and export
- :py:mod:`textfx.api.pil_io`: Image decoding and PNG encoding
"""
