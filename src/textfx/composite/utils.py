"""Utility functions for composite operations."""

import re
from typing import Tuple, Union, overload

import numpy as np
from numpy.typing import NDArray
from PIL import Image, ImageColor

_RGBA_PATTERN = re.compile(
    r'rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+%?)\s*)?\)$'
)


def divide(a: NDArray[np.floating], b: NDArray[np.floating]) -> NDArray[np.floating]:
    """Safe division for color ops."""
    with np.errstate(divide="ignore", invalid="ignore"):
        c = np.true_divide(a, b)
        c[~np.isfinite(c)] = 1.0
    return c


@overload
def union(backdrop: float, source: float) -> float: ...


@overload
def union(
    backdrop: NDArray[np.floating], source: NDArray[np.floating]
) -> NDArray[np.floating]: ...


@overload
def union(backdrop: float, source: NDArray[np.floating]) -> NDArray[np.floating]: ...


@overload
def union(backdrop: NDArray[np.floating], source: float) -> NDArray[np.floating]: ...


def union(
    backdrop: Union[float, NDArray[np.floating]],
    source: Union[float, NDArray[np.floating]],
) -> Union[float, NDArray[np.floating]]:
    """Generalized union of shape."""
    return backdrop + source - (backdrop * source)


def clip(x: NDArray[np.floating]) -> NDArray[np.floating]:
    """Clip between [0, 1]."""
    return np.clip(x, 0.0, 1.0)


def parse_color(value: str) -> Tuple[int, int, int, int]:
    """
    Parse a CSS color into an RGBA tuple of 0-255 integers.

    Accepts everything :py:func:`PIL.ImageColor.getrgb` does, plus the CSS
    ``rgba(r, g, b, a)`` form with a fractional alpha.
    """
    match = _RGBA_PATTERN.match(value.strip().lower())
    if match:
        r, g, b, a = match.groups()
        if a is None:
            alpha = 1.0
        elif a.endswith('%'):
            alpha = float(a[:-1]) / 100.0
        else:
            alpha = float(a)
        alpha = max(0.0, min(1.0, alpha))
        return (
            min(255, int(round(float(r)))),
            min(255, int(round(float(g)))),
            min(255, int(round(float(b)))),
            int(round(alpha * 255)),
        )
    color = ImageColor.getrgb(value)
    if len(color) == 3:
        return color + (255,)  # type: ignore[return-value]
    return color  # type: ignore[return-value]


def to_float(image: Image.Image) -> Tuple[np.ndarray, np.ndarray]:
    """Split an image into float32 ``(color, alpha)`` arrays in [0, 1]."""
    data = np.asarray(image.convert('RGBA'), dtype=np.float32) / 255.0
    return data[:, :, :3], data[:, :, 3:4]


def to_image(color: np.ndarray, alpha: np.ndarray) -> Image.Image:
    """Inverse of :py:func:`to_float`."""
    data = np.concatenate((clip(color), clip(alpha)), axis=2)
    return Image.fromarray(np.round(255 * data).astype(np.uint8), 'RGBA')
