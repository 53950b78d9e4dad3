# -*- coding: utf-8 -*-
"""
Skein: Weaving the mathematics of color perception
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

CIELAB / CIELCh
===============
Uses exact rational constants (delta = 6/29) for the piecewise
non-linearity. Internally XYZ is scaled to Y = 100 against a white given on
the same scale (D65 by default); XYZ returned to callers is on Y = 1.

References:
    - CIE 15:2004 "Colorimetry"
"""

from __future__ import annotations

from typing import Any, Final

import numpy as np
from numba import njit

from .primitives import (
    ArrayFloat,
    cartesian_to_polar,
    handle_shapes,
    polar_to_cartesian,
)
from .records import Lab, Lch, Srgb, Xyz
from .xyz import WHITE_D65, _srgb_to_xyz_raw, _xyz_to_srgb_raw, resolve_white

__all__ = [
    "LAB_DELTA",
    "LAB_EPSILON",
    "xyz_to_lab",
    "lab_to_xyz",
    "lab_to_lch",
    "lch_to_lab",
    "srgb_to_lab",
    "lab_to_srgb",
    "srgb_to_lch",
    "lch_to_srgb",
]

# --- Exact Rational Math Constants ---
LAB_DELTA: Final[float] = 6.0 / 29.0
LAB_EPSILON: Final[float] = LAB_DELTA * LAB_DELTA * LAB_DELTA  # ~0.008856
_LAB_OFFSET: Final[float] = 4.0 / 29.0
_LAB_SLOPE: Final[float] = 1.0 / (3.0 * LAB_DELTA * LAB_DELTA)


@njit(cache=True)
def _lab_f_kernel(t: ArrayFloat) -> ArrayFloat:
    """Cube root above delta^3, linear segment below."""
    out = np.empty_like(t)
    for i in range(t.size):
        v = t[i]
        if v > LAB_EPSILON:
            out[i] = v ** (1.0 / 3.0)
        else:
            out[i] = v * _LAB_SLOPE + _LAB_OFFSET
    return out


@njit(cache=True)
def _lab_f_inv_kernel(t: ArrayFloat) -> ArrayFloat:
    out = np.empty_like(t)
    for i in range(t.size):
        v = t[i]
        if v > LAB_DELTA:
            out[i] = v * v * v
        else:
            out[i] = (v - _LAB_OFFSET) / _LAB_SLOPE
    return out


def _lab_f(t: ArrayFloat) -> ArrayFloat:
    t = np.ascontiguousarray(t, dtype=np.float64)
    return _lab_f_kernel(t.ravel()).reshape(t.shape)


def _lab_f_inv(t: ArrayFloat) -> ArrayFloat:
    t = np.ascontiguousarray(t, dtype=np.float64)
    return _lab_f_inv_kernel(t.ravel()).reshape(t.shape)


# =============================================================================
# RAW PIPELINES
# =============================================================================

def _xyz_to_lab_raw(xyz: ArrayFloat, white: Any = WHITE_D65) -> ArrayFloat:
    w = resolve_white(white)
    f = _lab_f(xyz * 100.0 / w)
    out = np.empty_like(f)
    out[:, 0] = 116.0 * f[:, 1] - 16.0
    out[:, 1] = 500.0 * (f[:, 0] - f[:, 1])
    out[:, 2] = 200.0 * (f[:, 1] - f[:, 2])
    return out


def _lab_to_xyz_raw(lab: ArrayFloat, white: Any = WHITE_D65) -> ArrayFloat:
    w = resolve_white(white)
    fy = (lab[:, 0] + 16.0) / 116.0
    f = np.empty_like(lab)
    f[:, 0] = fy + lab[:, 1] / 500.0
    f[:, 1] = fy
    f[:, 2] = fy - lab[:, 2] / 200.0
    return _lab_f_inv(f) * w / 100.0


# =============================================================================
# PUBLIC TRANSFORMS
# =============================================================================

@handle_shapes(Xyz, Lab)
def xyz_to_lab(xyz: ArrayFloat, white: Any = WHITE_D65) -> ArrayFloat:
    """
    XYZ (Y = 1) -> CIELAB.

    Args:
        xyz: Input tristimulus values.
        white: Reference white on the Y = 100 scale, as a name or triple.
    """
    return _xyz_to_lab_raw(xyz, white)


@handle_shapes(Lab, Xyz)
def lab_to_xyz(lab: ArrayFloat, white: Any = WHITE_D65) -> ArrayFloat:
    """CIELAB -> XYZ (Y = 1)."""
    return _lab_to_xyz_raw(lab, white)


@handle_shapes(Lab, Lch)
def lab_to_lch(lab: ArrayFloat) -> ArrayFloat:
    return cartesian_to_polar(lab)


@handle_shapes(Lch, Lab)
def lch_to_lab(lch: ArrayFloat) -> ArrayFloat:
    return polar_to_cartesian(lch)


@handle_shapes(Srgb, Lab)
def srgb_to_lab(rgb: ArrayFloat) -> ArrayFloat:
    """Direct conversion sRGB -> CIELAB (D65)."""
    return _xyz_to_lab_raw(_srgb_to_xyz_raw(rgb))


@handle_shapes(Lab, Srgb)
def lab_to_srgb(lab: ArrayFloat) -> ArrayFloat:
    """Direct conversion CIELAB (D65) -> sRGB, unclipped."""
    return _xyz_to_srgb_raw(_lab_to_xyz_raw(lab))


@handle_shapes(Srgb, Lch)
def srgb_to_lch(rgb: ArrayFloat) -> ArrayFloat:
    return cartesian_to_polar(_xyz_to_lab_raw(_srgb_to_xyz_raw(rgb)))


@handle_shapes(Lch, Srgb)
def lch_to_srgb(lch: ArrayFloat) -> ArrayFloat:
    return _xyz_to_srgb_raw(_lab_to_xyz_raw(polar_to_cartesian(lch)))
