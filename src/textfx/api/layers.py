"""
Layer module.

Layers are immutable records that form a tagged union discriminated by the
``kind`` field:

- :py:class:`BackgroundLayer`: the uploaded photo at native resolution
- :py:class:`SubjectLayer`: the cutout produced by background removal
- :py:class:`TextLayer`: a styled text overlay

There is no common base class; code that handles layers dispatches on
``layer.kind`` (see :py:class:`~textfx.constants.LayerKind`)::

    RENDERERS = {
        LayerKind.BACKGROUND: draw_background,
        LayerKind.SUBJECT: draw_subject,
        LayerKind.TEXT: draw_text,
    }
    RENDERERS[layer.kind](layer)

Records are never modified in place. The
:py:class:`~textfx.api.store.LayerStore` replaces them with
:py:func:`attrs.evolve` copies.

Common layer properties:

- ``id``: Unique identifier, stable for the layer lifetime
- ``name``: Display name
- ``visible``: Visibility flag
- ``order``: Stacking position, ascending from bottom to top
- ``kind``: :py:class:`~textfx.constants.LayerKind`
"""

import logging
import secrets
from typing import Any, Union

from attrs import define, evolve, field, fields

from textfx.constants import (
    DEFAULT_COLOR,
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE,
    DEFAULT_FONT_WEIGHT,
    DEFAULT_SHADOW_COLOR,
    DEFAULT_SHADOW_SIZE,
    DEFAULT_TEXT,
    DEFAULT_TEXT_NAME,
    FALLBACK_TEXT_NAME,
    LayerKind,
)

logger = logging.getLogger(__name__)


BACKGROUND_LAYER_ID = 'full-layer'
SUBJECT_LAYER_ID = 'subject-layer'

# Fields that identify a record and never change through attribute updates.
STRUCTURAL_FIELDS = frozenset(('id', 'kind'))


@define(frozen=True)
class BackgroundLayer:
    """Full uploaded image."""

    id: str = BACKGROUND_LAYER_ID
    name: str = 'Full Image'
    visible: bool = True
    order: float = 0
    kind: LayerKind = field(default=LayerKind.BACKGROUND, init=False)


@define(frozen=True)
class SubjectLayer:
    """Foreground subject isolated by background removal."""

    id: str = SUBJECT_LAYER_ID
    name: str = 'Subject Only'
    visible: bool = True
    order: float = 0
    kind: LayerKind = field(default=LayerKind.SUBJECT, init=False)


@define(frozen=True)
class TextLayer:
    """
    Styled text overlay.

    Position is in normalized units (``[-50, 50]``, ``top`` positive is up).
    ``font_size``, ``letter_spacing`` and ``shadow_size`` are in preview
    pixels and get scaled to native pixels at export time.
    """

    id: str
    name: str = DEFAULT_TEXT_NAME
    visible: bool = True
    order: float = 0
    text: str = DEFAULT_TEXT
    font_family: str = DEFAULT_FONT_FAMILY
    left: float = 0.0
    top: float = 0.0
    font_size: float = DEFAULT_FONT_SIZE
    font_weight: int = DEFAULT_FONT_WEIGHT
    color: str = DEFAULT_COLOR
    opacity: float = 1.0
    rotation: float = 0.0
    tilt_x: float = 0.0
    tilt_y: float = 0.0
    letter_spacing: float = 0.0
    shadow_color: str = DEFAULT_SHADOW_COLOR
    shadow_size: float = DEFAULT_SHADOW_SIZE
    kind: LayerKind = field(default=LayerKind.TEXT, init=False)

    @property
    def has_shadow(self) -> bool:
        return self.shadow_size > 0


Layer = Union[BackgroundLayer, SubjectLayer, TextLayer]


def new_text_id() -> str:
    return 'text-layer-%s' % secrets.token_hex(5)[:9]


def display_name(text: str) -> str:
    """Name shown in the layer list for a text layer with ``text`` content."""
    return text or FALLBACK_TEXT_NAME


def field_names(layer: Layer) -> frozenset:
    """Attribute names declared by the variant of ``layer``."""
    return frozenset(f.name for f in fields(type(layer)))


def with_attribute(layer: Layer, key: str, value: Any) -> Layer:
    """
    Return a copy of ``layer`` with ``key`` set to ``value``.

    Setting ``text`` also derives the display name.

    :raise ValueError: when ``key`` is structural or not declared by the
        layer variant.
    """
    if key in STRUCTURAL_FIELDS:
        raise ValueError("Attribute %r cannot be changed" % key)
    if key not in field_names(layer):
        raise ValueError(
            "%s layer has no attribute %r" % (layer.kind.value, key)
        )
    changes = {key: value}
    if key == 'text':
        changes['name'] = display_name(value)
    return evolve(layer, **changes)
