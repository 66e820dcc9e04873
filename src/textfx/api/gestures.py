"""
Gesture controller.

Turns pointer, touch and wheel input into position and size changes of a
text layer. The controller never touches the layer store; it reports
changes through callbacks::

    controller = GestureController(
        on_position=lambda layer_id, left, top: store.update(
            layer_id, left=left, top=top
        ),
        on_size_change=lambda delta: store.set_attribute(
            layer_id, 'font_size', max(10, layer.font_size + delta)
        ),
        events=window,
    )
    controller.pointer_down('text-layer-1', event, preview_surface)

States are ``Idle`` and ``Dragging``. A drag snapshots the initiating
surface's bounding rectangle once and maps every move sample through it,
snapping each axis to the center within :py:attr:`GestureSettings.snap_threshold`.
Global move/up/cancel listeners live in a :py:class:`DragSession` that is
released on pointer-up, cancel, or :py:meth:`GestureController.close`.

Transient state is an immutable :py:class:`GestureState` value replaced on
every event.
"""

import logging
import math
from typing import Callable, Dict, Optional, Protocol, Tuple

from attrs import define, evolve, field

from textfx.api.geometry import Viewport, clamp_normalized, to_normalized
from textfx.api.layers import TextLayer
from textfx.constants import (
    NUDGE_STEP,
    PINCH_SENSITIVITY,
    SCROLL_SENSITIVITY,
    SNAP_THRESHOLD,
    TRACKPAD_DELTA_THRESHOLD,
    TRACKPAD_SENSITIVITY_MULTIPLIER,
    Direction,
    EventType,
    SurfaceRole,
)

logger = logging.getLogger(__name__)

PositionCallback = Callable[[str, float, float], None]
SizeCallback = Callable[[float], None]
Handler = Callable[..., None]


@define(frozen=True)
class PointerEvent:
    """Pointer or touch sample in client coordinates."""

    x: float
    y: float
    pointer_id: int = 0


@define(frozen=True)
class WheelEvent:
    delta_y: float


class Surface(Protocol):
    """Element a drag can start on."""

    def bounding_rect(self) -> Optional[Viewport]: ...

    def capture_pointer(self, pointer_id: int) -> None: ...

    def release_pointer(self, pointer_id: int) -> None: ...


class EventTarget(Protocol):
    """Global event source, such as the browser window."""

    def add_listener(self, event_type: EventType, handler: Handler) -> None: ...

    def remove_listener(self, event_type: EventType, handler: Handler) -> None: ...


@define(frozen=True)
class GestureSettings:
    """
    Gesture tuning.

    .. py:attribute:: grid_step

        When set, dragged positions are rounded to multiples of this many
        normalized units.
    """

    snap_threshold: float = SNAP_THRESHOLD
    nudge_step: float = NUDGE_STEP
    pinch_sensitivity: float = PINCH_SENSITIVITY
    scroll_sensitivity: float = SCROLL_SENSITIVITY
    trackpad_multiplier: float = TRACKPAD_SENSITIVITY_MULTIPLIER
    trackpad_threshold: float = TRACKPAD_DELTA_THRESHOLD
    grid_step: Optional[float] = None


@define(frozen=True)
class SnapGuides:
    """Axes currently snapped to the center."""

    x: bool = False
    y: bool = False


@define(frozen=True)
class GestureState:
    layer_id: Optional[str] = None
    role: Optional[SurfaceRole] = None
    rect: Optional[Viewport] = None
    pointer_id: Optional[int] = None
    snap: SnapGuides = SnapGuides()
    pointers: Tuple[PointerEvent, ...] = field(default=())
    last_distance: Optional[float] = None

    @property
    def dragging(self) -> bool:
        return self.layer_id is not None


IDLE = GestureState()


class DragSession(object):
    """
    Pointer capture and global listeners of one drag.

    :py:meth:`close` is idempotent and releases everything
    :py:meth:`start` acquired.
    """

    def __init__(
        self,
        surface: Surface,
        pointer_id: int,
        events: Optional[EventTarget],
        handlers: Dict[EventType, Handler],
    ):
        self._surface = surface
        self._pointer_id = pointer_id
        self._events = events
        self._handlers = handlers
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> "DragSession":
        self._surface.capture_pointer(self._pointer_id)
        self._active = True
        if self._events is not None:
            for event_type, handler in self._handlers.items():
                self._events.add_listener(event_type, handler)
        return self

    def close(self) -> None:
        if not self._active:
            return
        self._active = False
        try:
            if self._events is not None:
                for event_type, handler in self._handlers.items():
                    self._events.remove_listener(event_type, handler)
        finally:
            self._surface.release_pointer(self._pointer_id)

    def __enter__(self) -> "DragSession":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.close()


class GestureController(object):
    """
    Drag, pinch, wheel and nudge handling for text layers.

    :param on_position: called with ``(layer_id, left, top)`` for every
        position change.
    :param on_size_change: called with a font size delta for pinch and
        wheel gestures.
    :param on_snap: called with :py:class:`SnapGuides` when the snapped
        axes change.
    :param events: global :py:class:`EventTarget` drag listeners attach to.
    :param settings: :py:class:`GestureSettings`.
    """

    def __init__(
        self,
        on_position: PositionCallback,
        on_size_change: Optional[SizeCallback] = None,
        on_snap: Optional[Callable[[SnapGuides], None]] = None,
        events: Optional[EventTarget] = None,
        settings: Optional[GestureSettings] = None,
    ):
        self._on_position = on_position
        self._on_size_change = on_size_change
        self._on_snap = on_snap
        self._events = events
        self._settings = settings or GestureSettings()
        self._state = IDLE
        self._session: Optional[DragSession] = None

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def settings(self) -> GestureSettings:
        return self._settings

    @property
    def dragging(self) -> bool:
        return self._state.dragging

    def __enter__(self) -> "GestureController":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # Drag.

    def pointer_down(
        self,
        layer_id: str,
        event: PointerEvent,
        surface: Surface,
        role: SurfaceRole = SurfaceRole.PREVIEW,
    ) -> bool:
        """
        Start dragging ``layer_id`` from ``surface``.

        :return: `False` when the surface geometry is unavailable; nothing
            changes in that case.
        """
        self._end_drag()
        rect = surface.bounding_rect()
        if rect is None or rect.is_empty():
            logger.debug('No geometry for %s drag of %s' % (role, layer_id))
            return False

        session = DragSession(surface, event.pointer_id, self._events, {
            EventType.POINTER_MOVE: self.pointer_move,
            EventType.POINTER_UP: self.pointer_up,
            EventType.POINTER_CANCEL: self.pointer_up,
        })
        session.start()
        self._session = session
        self._state = evolve(
            self._state,
            layer_id=layer_id,
            role=role,
            rect=rect,
            pointer_id=event.pointer_id,
            snap=SnapGuides(),
        )
        logger.debug('Drag %s from %s' % (layer_id, role))
        return True

    def pointer_move(self, event: PointerEvent) -> None:
        state = self._state
        if not state.dragging or event.pointer_id != state.pointer_id:
            return
        assert state.rect is not None
        assert state.layer_id is not None

        left, top = to_normalized(event.x, event.y, state.rect)
        threshold = self._settings.snap_threshold
        snap = SnapGuides(abs(left) < threshold, abs(top) < threshold)
        if snap.x:
            left = 0.0
        if snap.y:
            top = 0.0
        left, top = self._to_grid(left), self._to_grid(top)

        self._state = evolve(state, snap=snap)
        if snap != state.snap:
            self._emit_snap(snap)
        self._on_position(state.layer_id, left, top)

    def pointer_up(self, event: Optional[PointerEvent] = None) -> None:
        """End the drag on pointer-up or pointer-cancel."""
        if event is not None and event.pointer_id != self._state.pointer_id:
            return
        self._end_drag()

    def cancel(self) -> None:
        self._end_drag()

    def close(self) -> None:
        """Tear down: end any drag and forget pinch pointers."""
        self._end_drag()
        self._state = IDLE

    def _end_drag(self) -> None:
        if self._session is not None:
            session, self._session = self._session, None
            session.close()
        state = self._state
        if not state.dragging:
            return
        self._state = evolve(
            state, layer_id=None, role=None, rect=None, pointer_id=None,
            snap=SnapGuides(),
        )
        if state.snap != SnapGuides():
            self._emit_snap(SnapGuides())
        logger.debug('Drop %s' % state.layer_id)

    def _emit_snap(self, snap: SnapGuides) -> None:
        if self._on_snap is not None:
            self._on_snap(snap)

    def _to_grid(self, value: float) -> float:
        step = self._settings.grid_step
        if step:
            value = round(value / step) * step
        return clamp_normalized(value)

    # Pinch and wheel.

    def pinch_start(self, event: PointerEvent) -> None:
        pointers = self._state.pointers
        if len(pointers) >= 2 or any(
            p.pointer_id == event.pointer_id for p in pointers
        ):
            return
        self._state = evolve(self._state, pointers=pointers + (event,))

    def pinch_move(self, event: PointerEvent) -> None:
        pointers = tuple(
            event if p.pointer_id == event.pointer_id else p
            for p in self._state.pointers
        )
        last_distance = self._state.last_distance
        if len(pointers) == 2:
            a, b = pointers
            distance = math.hypot(a.x - b.x, a.y - b.y)
            if last_distance is not None:
                self._emit_size(
                    (distance - last_distance) * self._settings.pinch_sensitivity
                )
            last_distance = distance
        self._state = evolve(
            self._state, pointers=pointers, last_distance=last_distance
        )

    def pinch_end(self, event: PointerEvent) -> None:
        pointers = tuple(
            p for p in self._state.pointers if p.pointer_id != event.pointer_id
        )
        last_distance = self._state.last_distance if len(pointers) == 2 else None
        self._state = evolve(
            self._state, pointers=pointers, last_distance=last_distance
        )

    def wheel(self, event: WheelEvent) -> None:
        delta = -event.delta_y * self._settings.scroll_sensitivity
        # Small deltas come from trackpad pinch rather than a wheel notch.
        if abs(event.delta_y) < self._settings.trackpad_threshold:
            delta *= self._settings.trackpad_multiplier
        self._emit_size(delta)

    def _emit_size(self, delta: float) -> None:
        if self._on_size_change is not None:
            self._on_size_change(delta)

    # Discrete moves.

    def nudge(self, layer: TextLayer, direction: Direction) -> Tuple[float, float]:
        """Move ``layer`` by one step; independent of pointer state."""
        step = self._settings.nudge_step
        dx, dy = {
            Direction.UP: (0.0, step),
            Direction.DOWN: (0.0, -step),
            Direction.LEFT: (-step, 0.0),
            Direction.RIGHT: (step, 0.0),
        }[Direction(direction)]
        left = clamp_normalized(layer.left + dx)
        top = clamp_normalized(layer.top + dy)
        self._on_position(layer.id, left, top)
        return left, top

    def reset_position(self, layer_id: str) -> None:
        self._on_position(layer_id, 0.0, 0.0)
