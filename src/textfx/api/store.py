"""
Layer store.

:py:class:`LayerStore` is the sole mutable owner of layer data. Every
operation builds a new tuple of layer records and returns it as the current
snapshot; other components only read snapshots and request changes through
the store operations.

Example::

    from textfx.api.store import LayerStore

    store = LayerStore.default()
    store.add_text()
    layer = store.text_layers()[-1]
    store.set_attribute(layer.id, 'text', 'HELLO')
    store.set_attribute(layer.id, 'left', 80)  # clamped to 50

Ordering rules:

- Rendering order is ascending ``order`` among visible layers.
- Layers sharing an ``order`` value keep their insertion order.
- New and duplicated text layers are inserted right below the subject layer,
  shifting every layer at or above the insertion point up by one.
- Removing a layer leaves gaps; gaps never break ordering.
"""

import logging
from typing import Any, Iterator, Optional, Tuple

from attrs import evolve

from textfx.api.geometry import clamp_normalized
from textfx.api.layers import (
    BackgroundLayer,
    Layer,
    SubjectLayer,
    TextLayer,
    new_text_id,
    with_attribute,
)
from textfx.constants import (
    FALLBACK_TEXT_NAME,
    PREMIUM_ATTRIBUTES,
    LayerKind,
)

logger = logging.getLogger(__name__)

Snapshot = Tuple[Layer, ...]

POSITION_ATTRIBUTES = ('left', 'top')


def sort_layers(layers: Snapshot, visible_only: bool = False) -> Snapshot:
    """
    Sort ``layers`` bottom to top.

    :py:func:`sorted` is stable, so equal ``order`` values keep the
    insertion order of ``layers``.
    """
    if visible_only:
        layers = tuple(layer for layer in layers if layer.visible)
    return tuple(sorted(layers, key=lambda layer: layer.order))


class LayerStore(object):
    """
    Ordered collection of layers.

    :param layers: initial layers in insertion order.
    :param premium: when `False`, changes to tilt and letter spacing are
        ignored.
    """

    def __init__(self, layers: Tuple[Layer, ...] = (), premium: bool = True):
        self._layers: Snapshot = tuple(layers)
        self._premium = premium
        self._active_id: Optional[str] = None
        ids = [layer.id for layer in self._layers]
        assert len(ids) == len(set(ids)), 'Duplicate layer ids: %r' % ids

    @classmethod
    def default(cls, premium: bool = True) -> "LayerStore":
        """Store with a background, one text layer and a subject layer."""
        text = TextLayer(id='text-layer-1', name=FALLBACK_TEXT_NAME, order=1)
        store = cls(
            (BackgroundLayer(order=0), text, SubjectLayer(order=2)),
            premium=premium,
        )
        store.select(text.id)
        return store

    def __repr__(self) -> str:
        return '%s(size=%d)' % (self.__class__.__name__, len(self))

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers)

    def __contains__(self, layer_id: object) -> bool:
        return any(layer.id == layer_id for layer in self._layers)

    @property
    def layers(self) -> Snapshot:
        """Current snapshot in insertion order."""
        return self._layers

    @property
    def premium(self) -> bool:
        return self._premium

    def get(self, layer_id: str) -> Optional[Layer]:
        for layer in self._layers:
            if layer.id == layer_id:
                return layer
        return None

    def sorted_layers(self, visible_only: bool = False) -> Snapshot:
        return sort_layers(self._layers, visible_only)

    def text_layers(self) -> Tuple[TextLayer, ...]:
        """Text layers sorted bottom to top."""
        return tuple(
            layer for layer in self.sorted_layers()
            if layer.kind == LayerKind.TEXT
        )  # type: ignore[misc]

    def subject(self) -> Optional[SubjectLayer]:
        return self._first(LayerKind.SUBJECT)  # type: ignore[return-value]

    def background(self) -> Optional[BackgroundLayer]:
        return self._first(LayerKind.BACKGROUND)  # type: ignore[return-value]

    def _first(self, kind: LayerKind) -> Optional[Layer]:
        return next((x for x in self._layers if x.kind == kind), None)

    # Selection.

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    @property
    def active_text_layer(self) -> Optional[TextLayer]:
        layer = self.get(self._active_id) if self._active_id else None
        if layer is not None and layer.kind == LayerKind.TEXT:
            return layer  # type: ignore[return-value]
        return None

    def select(self, layer_id: Optional[str]) -> None:
        self._active_id = layer_id

    # Operations.

    def add_text(self) -> Snapshot:
        """Insert a default text layer below the subject layer."""
        return self._insert_text(TextLayer(id=new_text_id()))

    def duplicate(self, layer_id: str) -> Snapshot:
        """Insert a copy of a text layer with a fresh id."""
        source = self.get(layer_id)
        if source is None or source.kind != LayerKind.TEXT:
            logger.debug('Ignore duplicate of %s' % layer_id)
            return self._layers
        return self._insert_text(evolve(source, id=new_text_id()))

    def _insert_text(self, layer: TextLayer) -> Snapshot:
        subject = self.subject()
        new_order = subject.order if subject is not None else len(self._layers)
        shifted = tuple(
            evolve(x, order=x.order + 1) if x.order >= new_order else x
            for x in self._layers
        )
        layer = evolve(layer, order=new_order)
        logger.debug('Insert %s at order %s' % (layer.id, new_order))
        return self._commit(shifted + (layer,))

    def remove(self, layer_id: str) -> Snapshot:
        """Remove a layer; remaining orders are left untouched."""
        if self._active_id == layer_id:
            self._active_id = None
        return self._commit(tuple(x for x in self._layers if x.id != layer_id))

    def set_attribute(self, layer_id: str, key: str, value: Any) -> Snapshot:
        """
        Set a single attribute of a layer.

        ``left`` and ``top`` are always clamped to ``[-50, 50]``. Setting
        ``text`` also updates the display name.

        :raise ValueError: when the layer variant does not declare ``key``.
        """
        return self.update(layer_id, **{key: value})

    def update(self, layer_id: str, **changes: Any) -> Snapshot:
        """Set several attributes of a layer at once."""
        layers = list(self._layers)
        for index, layer in enumerate(layers):
            if layer.id != layer_id:
                continue
            for key, value in changes.items():
                if key in PREMIUM_ATTRIBUTES and not self._premium:
                    logger.debug('Ignore premium attribute %s' % key)
                    continue
                if key in POSITION_ATTRIBUTES:
                    value = clamp_normalized(value)
                layer = with_attribute(layer, key, value)
            layers[index] = layer
            return self._commit(tuple(layers))
        return self._layers

    def toggle_visibility(self, layer_id: str) -> Snapshot:
        return self._commit(tuple(
            evolve(x, visible=not x.visible) if x.id == layer_id else x
            for x in self._layers
        ))

    def move_up(self, layer_id: str) -> Snapshot:
        """Swap order with the next text layer above."""
        return self._swap_text(layer_id, 1)

    def move_down(self, layer_id: str) -> Snapshot:
        """Swap order with the next text layer below."""
        return self._swap_text(layer_id, -1)

    def _swap_text(self, layer_id: str, step: int) -> Snapshot:
        text_layers = self.text_layers()
        index = next(
            (i for i, x in enumerate(text_layers) if x.id == layer_id), -1
        )
        neighbor_index = index + step
        if index == -1 or not 0 <= neighbor_index < len(text_layers):
            return self._layers

        current, neighbor = text_layers[index], text_layers[neighbor_index]
        orders = {current.id: neighbor.order, neighbor.id: current.order}
        return self._commit(tuple(
            evolve(x, order=orders[x.id]) if x.id in orders else x
            for x in self._layers
        ))

    def ensure_image_layers(self) -> Snapshot:
        """
        Make sure a background and a subject layer exist for a new upload.

        A missing background goes to the bottom and a missing subject to the
        top of the stack.
        """
        layers = self._layers
        if self.background() is None:
            lowest = min((x.order for x in layers), default=1)
            layers = (BackgroundLayer(order=lowest - 1),) + layers
        if self.subject() is None:
            highest = max((x.order for x in layers), default=-1)
            layers = layers + (SubjectLayer(order=highest + 1),)
        return self._commit(layers)

    def _commit(self, layers: Snapshot) -> Snapshot:
        self._layers = layers
        return layers
