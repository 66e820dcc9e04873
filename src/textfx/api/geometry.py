"""
Coordinate normalization shared by the live preview and the export renderer.

Text positions are stored in a resolution-independent normalized space that
spans ``[-50, 50]`` on both axes with the origin at the center. Positive
``top`` values are visually higher, so the vertical axis is inverted with
respect to pixel space.

Example::

    from textfx.api.geometry import Viewport, to_pixel, to_normalized

    viewport = Viewport(0, 0, 1920, 1080)
    x, y = to_pixel(10, 20, viewport)
    nx, ny = to_normalized(x, y, viewport)

The same :py:func:`fit_scale` ratio letterboxes the native image into the
preview surface and, inverted, scales preview font sizes to export pixels.
"""

import logging
from typing import Tuple

from attrs import define, field

from textfx.constants import NORMALIZED_MAX, NORMALIZED_MIN

logger = logging.getLogger(__name__)


@define(frozen=True)
class Viewport:
    """
    Axis-aligned rectangle in pixel space.

    .. py:attribute:: left
    .. py:attribute:: top
    .. py:attribute:: width
    .. py:attribute:: height
    """

    left: float = field(converter=float)
    top: float = field(converter=float)
    width: float = field(converter=float)
    height: float = field(converter=float)

    @classmethod
    def from_size(cls, size: Tuple[float, float]) -> "Viewport":
        """Viewport anchored at the origin with the given ``(width, height)``."""
        return cls(0, 0, size[0], size[1])

    @property
    def size(self) -> Tuple[float, float]:
        return (self.width, self.height)

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


def clamp_normalized(value: float) -> float:
    """Clamp a normalized coordinate to ``[-50, 50]``."""
    return max(NORMALIZED_MIN, min(NORMALIZED_MAX, float(value)))


def to_pixel(nx: float, ny: float, viewport: Viewport) -> Tuple[float, float]:
    """
    Convert a normalized position to pixel coordinates of ``viewport``.

    :param nx: horizontal normalized coordinate.
    :param ny: vertical normalized coordinate, positive is up.
    :param viewport: :py:class:`Viewport`.
    :return: `tuple` of ``(x, y)`` in pixels.
    """
    x = viewport.left + viewport.width * (nx + 50.0) / 100.0
    y = viewport.top + viewport.height * (50.0 - ny) / 100.0
    return x, y


def to_normalized(px: float, py: float, viewport: Viewport) -> Tuple[float, float]:
    """
    Convert pixel coordinates to a clamped normalized position.

    This is the exact inverse of :py:func:`to_pixel` inside the viewport;
    points outside the viewport are clamped to its edges.

    :raise ValueError: when the viewport has no area.
    """
    if viewport.is_empty():
        raise ValueError("Viewport has no area: %r" % (viewport,))
    nx = (px - viewport.left) / viewport.width * 100.0 - 50.0
    ny = 50.0 - (py - viewport.top) / viewport.height * 100.0
    return clamp_normalized(nx), clamp_normalized(ny)


def fit_scale(
    native_size: Tuple[float, float], viewport_size: Tuple[float, float]
) -> float:
    """
    Ratio that letterboxes ``native_size`` into ``viewport_size``.

    The inverse, ``1 / fit_scale(...)``, converts preview font sizes to
    native export pixels.
    """
    native_width, native_height = native_size
    viewport_width, viewport_height = viewport_size
    if native_width <= 0 or native_height <= 0:
        raise ValueError("Invalid native size: %r" % (native_size,))
    if viewport_width <= 0 or viewport_height <= 0:
        raise ValueError("Invalid viewport size: %r" % (viewport_size,))
    return min(viewport_width / native_width, viewport_height / native_height)


def font_scale(
    native_size: Tuple[float, float], viewport_size: Tuple[float, float]
) -> float:
    return 1.0 / fit_scale(native_size, viewport_size)


def fit_rect(native_size: Tuple[float, float], viewport: Viewport) -> Viewport:
    """Centered rectangle the native image occupies inside ``viewport``."""
    scale = fit_scale(native_size, viewport.size)
    width = native_size[0] * scale
    height = native_size[1] * scale
    return Viewport(
        viewport.left + (viewport.width - width) / 2.0,
        viewport.top + (viewport.height - height) / 2.0,
        width,
        height,
    )
