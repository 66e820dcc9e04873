"""
Blend mode implementations.

Separable blend functions take the backdrop color ``Cb`` and the source
color ``Cs`` as float arrays in [0, 1] and return the mixed color.
:py:func:`composite_source` applies one of them with source-over alpha
compositing.
"""
import logging
from typing import Union

import numpy as np

from textfx.composite import utils
from textfx.constants import BlendMode

logger = logging.getLogger(__name__)


# Separable blend functions
def normal(Cb, Cs):
    return Cs


def multiply(Cb, Cs):
    return Cb * Cs


def screen(Cb, Cs):
    return Cb + Cs - (Cb * Cs)


def overlay(Cb, Cs):
    return hard_light(Cs, Cb)


def hard_light(Cb, Cs):
    index = Cs > 0.5
    B = multiply(Cb, 2 * Cs)
    B[index] = screen(Cb, 2 * Cs - 1)[index]
    return B


"""Blend function table."""
BLEND_FUNC = {
    BlendMode.NORMAL: normal,
    BlendMode.MULTIPLY: multiply,
    BlendMode.SCREEN: screen,
    BlendMode.OVERLAY: overlay,
    BlendMode.HARD_LIGHT: hard_light,
}


def composite_source(
    color_b: np.ndarray,
    alpha_b: np.ndarray,
    color_s: np.ndarray,
    alpha_s: Union[float, np.ndarray],
    blend_mode: BlendMode = BlendMode.NORMAL,
):
    """
    Composite a source over a backdrop with a blend mode.

    Colors are non-premultiplied ``(H, W, 3)`` arrays and alphas
    ``(H, W, 1)`` arrays or scalars, all in [0, 1].

    :return: ``(color, alpha)`` of the result.
    """
    if not isinstance(alpha_s, np.ndarray):
        alpha_s = np.full(alpha_b.shape, alpha_s, dtype=np.float32)
    if color_s.shape != color_b.shape:
        color_s = np.broadcast_to(color_s, color_b.shape)

    blend_fn = BLEND_FUNC.get(blend_mode, normal)
    mixed = (1.0 - alpha_b) * color_s + alpha_b * blend_fn(color_b, color_s)
    alpha = utils.union(alpha_b, alpha_s)
    color = utils.divide(
        (1.0 - alpha_s) * alpha_b * color_b + alpha_s * mixed, alpha
    )
    return utils.clip(color), alpha
