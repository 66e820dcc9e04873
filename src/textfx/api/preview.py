"""
Live preview descriptors.

The interactive preview is rendered by the UI as styled elements. This
module computes their styles from a layer snapshot so the preview uses the
same geometry and filter math as the export renderer.
"""

import logging
from typing import Dict, List, Optional, Tuple

from textfx.api.filters import FilterState, preview_descriptor, warmth_overlay
from textfx.api.geometry import Viewport, fit_rect
from textfx.api.layers import Layer, TextLayer
from textfx.api.store import Snapshot, sort_layers
from textfx.constants import LayerKind

logger = logging.getLogger(__name__)

# Perspective distance of the preview's 3D tilt, in CSS pixels.
PERSPECTIVE = 1000


def _px(value: float) -> str:
    return '%gpx' % round(value, 4)


def text_style(layer: TextLayer) -> Dict[str, str]:
    """CSS properties of a text element positioned inside the preview."""
    transform = ' '.join((
        'translate(-50%, -50%)',
        'rotate(%gdeg)' % layer.rotation,
        'perspective(%dpx)' % PERSPECTIVE,
        'rotateX(%gdeg)' % layer.tilt_x,
        'rotateY(%gdeg)' % layer.tilt_y,
    ))
    if layer.has_shadow:
        shadow = '0 %s %s %s' % (
            _px(layer.shadow_size / 2.0), _px(layer.shadow_size),
            layer.shadow_color,
        )
    else:
        shadow = 'none'
    return {
        'position': 'absolute',
        'left': '%g%%' % (layer.left + 50),
        'top': '%g%%' % (50 - layer.top),
        'transform': transform,
        'transform-style': 'preserve-3d',
        'color': layer.color,
        'text-align': 'center',
        'font-size': _px(layer.font_size),
        'font-weight': str(layer.font_weight),
        'font-family': '%s, sans-serif' % layer.font_family,
        'opacity': '%g' % layer.opacity,
        'letter-spacing': _px(layer.letter_spacing),
        'text-shadow': shadow,
        'white-space': 'pre',
    }


def filter_style(state: FilterState) -> Dict[str, str]:
    """CSS ``filter`` plus the optional warmth overlay of the preview."""
    style = {'filter': preview_descriptor(state.preset, state.intensity)}
    overlay = warmth_overlay(state.settings)
    if overlay is not None:
        style['overlay-color'], style['overlay-blend-mode'] = overlay
    return style


def layer_stack(
    layers: Snapshot, has_cutout: bool = True
) -> List[Tuple[Layer, Optional[Dict[str, str]]]]:
    """
    Visible layers bottom to top, paired with their element style.

    Image layers carry `None`; they fill the letterbox rectangle. The subject
    is left out while no cutout is available.
    """
    stack = []
    for layer in sort_layers(layers, visible_only=True):
        if layer.kind == LayerKind.SUBJECT and not has_cutout:
            continue
        if layer.kind == LayerKind.TEXT:
            stack.append((layer, text_style(layer)))  # type: ignore[arg-type]
        else:
            stack.append((layer, None))
    return stack


def image_rect(native_size: Tuple[float, float], viewport: Viewport) -> Viewport:
    """Where the background and cutout are drawn inside the preview."""
    return fit_rect(native_size, viewport)
