# -*- coding: utf-8 -*-
"""
Skein: Weaving the mathematics of color perception
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Transfer Functions
==================
Encoding (OETF) and decoding (EOTF) curves for the RGB encodings.

All curves are branch-on-magnitude and total over the reals: values outside
[0, 1] are extended, never clamped, so HDR and out-of-gamut intermediates
survive a round trip.

References:
    - IEC 61966-2-1:1999 (sRGB)
    - SMPTE EG 432-1 (Display P3 uses the sRGB curve)
    - ITU-R BT.2020-2
"""

from __future__ import annotations

from typing import Callable, Final, Union

import numpy as np
from numba import njit

from .primitives import ArrayFloat

__all__ = [
    "REC2020_ALPHA",
    "REC2020_BETA",
    "srgb_encode",
    "srgb_decode",
    "display_p3_encode",
    "display_p3_decode",
    "rec2020_encode",
    "rec2020_decode",
]

REC2020_ALPHA: Final[float] = 1.09929682680944
REC2020_BETA: Final[float] = 0.018053968510807
_REC2020_EXPONENT: Final[float] = 0.45


# =============================================================================
# 1. KERNELS (Numba)
# =============================================================================
# Explicit loops over a flat view avoid allocating boolean masks.

@njit(cache=True)
def _srgb_encode_kernel(linear: ArrayFloat) -> ArrayFloat:
    out = np.empty_like(linear)
    for i in range(linear.size):
        v = linear[i]
        # IEC 61966-2-1 defines the slope as exactly 12.92
        if v <= 0.0031308:
            out[i] = 12.92 * v
        else:
            out[i] = 1.055 * (v ** (1.0 / 2.4)) - 0.055
    return out


@njit(cache=True)
def _srgb_decode_kernel(encoded: ArrayFloat) -> ArrayFloat:
    out = np.empty_like(encoded)
    for i in range(encoded.size):
        v = encoded[i]
        if v <= 0.04045:
            out[i] = v / 12.92
        else:
            out[i] = ((v + 0.055) / 1.055) ** 2.4
    return out


@njit(cache=True)
def _rec2020_encode_kernel(linear: ArrayFloat) -> ArrayFloat:
    """BT.2020 OETF with odd extension for negative inputs."""
    out = np.empty_like(linear)
    for i in range(linear.size):
        v = linear[i]
        sign = 1.0
        if v < 0.0:
            sign = -1.0
            v = -v
        if v < REC2020_BETA:
            out[i] = sign * 4.5 * v
        else:
            out[i] = sign * (REC2020_ALPHA * v ** _REC2020_EXPONENT - (REC2020_ALPHA - 1.0))
    return out


@njit(cache=True)
def _rec2020_decode_kernel(encoded: ArrayFloat) -> ArrayFloat:
    out = np.empty_like(encoded)
    for i in range(encoded.size):
        v = encoded[i]
        sign = 1.0
        if v < 0.0:
            sign = -1.0
            v = -v
        if v < 4.5 * REC2020_BETA:
            out[i] = sign * v / 4.5
        else:
            out[i] = sign * ((v + REC2020_ALPHA - 1.0) / REC2020_ALPHA) ** (1.0 / _REC2020_EXPONENT)
    return out


# =============================================================================
# 2. PUBLIC CURVES
# =============================================================================

def _apply_curve(kernel: Callable[[ArrayFloat], ArrayFloat],
                 values: Union[float, ArrayFloat]) -> Union[float, ArrayFloat]:
    """Runs a flat kernel over any input shape; scalars come back as float."""
    arr = np.asarray(values, dtype=np.float64)
    out = kernel(np.ascontiguousarray(arr).ravel()).reshape(arr.shape)
    if arr.ndim == 0:
        return float(out)
    return out


def srgb_encode(linear: Union[float, ArrayFloat]) -> Union[float, ArrayFloat]:
    """Linear light -> encoded sRGB (piecewise, threshold 0.0031308)."""
    return _apply_curve(_srgb_encode_kernel, linear)


def srgb_decode(encoded: Union[float, ArrayFloat]) -> Union[float, ArrayFloat]:
    """Encoded sRGB -> linear light (piecewise, threshold 0.04045)."""
    return _apply_curve(_srgb_decode_kernel, encoded)


# Display P3 shares the sRGB curve; only the primaries differ.
display_p3_encode = srgb_encode
display_p3_decode = srgb_decode


def rec2020_encode(linear: Union[float, ArrayFloat]) -> Union[float, ArrayFloat]:
    """Linear light -> encoded BT.2020."""
    return _apply_curve(_rec2020_encode_kernel, linear)


def rec2020_decode(encoded: Union[float, ArrayFloat]) -> Union[float, ArrayFloat]:
    """Encoded BT.2020 -> linear light."""
    return _apply_curve(_rec2020_decode_kernel, encoded)
