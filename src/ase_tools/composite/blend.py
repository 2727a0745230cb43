"""
Blend mode implementations.

Every blend function takes the backdrop color ``Cb`` and the source color
``Cs`` as ``(height, width, 3)`` float arrays in [0, 1] and returns the
blended color ``B(Cb, Cs)``. :py:func:`blend` then composites the result
source-over onto the backdrop.
"""

import logging
from typing import Union

import numpy as np

from ase_tools.composite import utils
from ase_tools.constants import BlendMode
from ase_tools.exceptions import UnsupportedModeError

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


def darken(Cb, Cs):
    return np.minimum(Cb, Cs)


def lighten(Cb, Cs):
    return np.maximum(Cb, Cs)


def color_dodge(Cb, Cs):
    B = np.zeros_like(Cb, dtype=np.float32)
    B[Cs == 1] = 1
    B[Cb == 0] = 0
    index = (Cs != 1) & (Cb != 0)
    B[index] = np.minimum(1, Cb[index] / (1 - Cs[index]))
    return B


def color_burn(Cb, Cs):
    B = np.zeros_like(Cb, dtype=np.float32)
    B[Cb == 1] = 1
    index = (Cb != 1) & (Cs != 0)
    B[index] = 1 - np.minimum(1, (1 - Cb[index]) / Cs[index])
    return B


def hard_light(Cb, Cs):
    index = Cs > 0.5
    B = multiply(Cb, 2 * Cs)
    B[index] = screen(Cb, 2 * Cs - 1)[index]
    return B


def soft_light(Cb, Cs):
    index = Cb <= 0.25
    index_not = ~index
    D = np.zeros_like(Cb, dtype=np.float32)
    D[index] = ((16 * Cb[index] - 12) * Cb[index] + 4) * Cb[index]
    D[index_not] = np.sqrt(Cb[index_not])

    index = Cs <= 0.5
    index_not = ~index
    B = np.zeros_like(Cb, dtype=np.float32)
    B[index] = Cb[index] - (1 - 2 * Cs[index]) * Cb[index] * (1 - Cb[index])
    B[index_not] = Cb[index_not] + (2 * Cs[index_not] - 1) * (
        D[index_not] - Cb[index_not]
    )
    return B


def difference(Cb, Cs):
    return np.abs(Cb - Cs)


def exclusion(Cb, Cs):
    return Cb + Cs - 2 * Cb * Cs


def addition(Cb, Cs):
    return np.minimum(1, Cb + Cs)


def subtract(Cb, Cs):
    return np.maximum(0, Cb - Cs)


def divide(Cb, Cs):
    """
    Divides the base color by the blend color. A black blend color turns any
    non-black base color white.
    """
    B = np.zeros_like(Cb, dtype=np.float32)
    index = Cs != 0
    B[index] = np.minimum(1, Cb[index] / Cs[index])
    B[~index & (Cb != 0)] = 1
    return B


# Non-separable blend functions, from the PDF reference.
def hue(Cb, Cs):
    return _set_lum(_set_sat(Cs, _sat(Cb)), _lum(Cb))


def saturation(Cb, Cs):
    return _set_lum(_set_sat(Cb, _sat(Cs)), _lum(Cb))


def color(Cb, Cs):
    return _set_lum(Cs, _lum(Cb))


def luminosity(Cb, Cs):
    return _set_lum(Cb, _lum(Cs))


def _lum(C):
    return 0.3 * C[:, :, 0:1] + 0.59 * C[:, :, 1:2] + 0.11 * C[:, :, 2:3]


def _set_lum(C, l):
    d = l - _lum(C)
    return _clip_color(C + d)


def _clip_color(C):
    L = np.repeat(_lum(C), 3, axis=2)
    C_min = np.repeat(np.min(C, axis=2, keepdims=True), 3, axis=2)
    C_max = np.repeat(np.max(C, axis=2, keepdims=True), 3, axis=2)

    index = C_min < 0.0
    L_i = L[index]
    C[index] = L_i + (C[index] - L_i) * L_i / (L_i - C_min[index])

    index = C_max > 1.0
    L_i = L[index]
    C[index] = L_i + (C[index] - L_i) * (1 - L_i) / (C_max[index] - L_i)

    # For numerical stability.
    C[C < 0.0] = 0
    C[C > 1] = 1
    return C


def _sat(C):
    return np.max(C, axis=2, keepdims=True) - np.min(C, axis=2, keepdims=True)


def _set_sat(C, s):
    C_min = np.min(C, axis=2, keepdims=True)
    diff = np.max(C, axis=2, keepdims=True) - C_min
    return utils.divide((C - C_min) * s, np.repeat(diff, 3, axis=2)).astype(
        np.float32
    )


"""Blend function table."""
BLEND_FUNC = {
    BlendMode.NORMAL: normal,
    BlendMode.MULTIPLY: multiply,
    BlendMode.SCREEN: screen,
    BlendMode.OVERLAY: overlay,
    BlendMode.DARKEN: darken,
    BlendMode.LIGHTEN: lighten,
    BlendMode.COLOR_DODGE: color_dodge,
    BlendMode.COLOR_BURN: color_burn,
    BlendMode.HARD_LIGHT: hard_light,
    BlendMode.SOFT_LIGHT: soft_light,
    BlendMode.DIFFERENCE: difference,
    BlendMode.EXCLUSION: exclusion,
    BlendMode.HUE: hue,
    BlendMode.SATURATION: saturation,
    BlendMode.COLOR: color,
    BlendMode.LUMINOSITY: luminosity,
    BlendMode.ADDITION: addition,
    BlendMode.SUBTRACT: subtract,
    BlendMode.DIVIDE: divide,
}


def blend(
    backdrop: np.ndarray,
    source: np.ndarray,
    blend_mode: Union[BlendMode, int],
    opacity: float = 1.0,
    strict: bool = False,
) -> np.ndarray:
    """
    Composite ``source`` onto ``backdrop`` and return the new accumulator.

    Both inputs are ``(height, width, 4)`` RGBA float arrays of the same
    shape; neither is modified. The source alpha is scaled by ``opacity``.
    Where the backdrop is transparent the source color is used as is, where
    it is opaque the blended color ``B(Cb, Cs)`` is used, and the result is
    composited source-over.

    :param blend_mode: :py:class:`~ase_tools.constants.BlendMode` code.
    :param opacity: opacity factor in [0, 1].
    :param strict: raise for unknown blend codes instead of leaving the
        backdrop unchanged.
    :raise UnsupportedModeError: for unknown blend codes in strict mode.
    """
    blend_fn = BLEND_FUNC.get(blend_mode)
    if blend_fn is None:
        if strict:
            raise UnsupportedModeError("Unsupported blend mode: %r" % (blend_mode,))
        logger.warning("Unsupported blend mode %r, layer ignored" % (blend_mode,))
        return backdrop.copy()

    color_b, alpha_b = backdrop[:, :, :3], backdrop[:, :, 3:4]
    color_s, alpha_s = source[:, :, :3], source[:, :, 3:4] * opacity

    mixed = (1.0 - alpha_b) * color_s + alpha_b * utils.clip(
        blend_fn(color_b, color_s)
    )
    alpha = utils.union(alpha_b, alpha_s)
    color_t = alpha_s * mixed + (1.0 - alpha_s) * alpha_b * color_b
    color_r = utils.clip(utils.divide(color_t, alpha))
    return np.concatenate((color_r, alpha), axis=2).astype(np.float32)
