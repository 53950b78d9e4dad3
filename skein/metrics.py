# -*- coding: utf-8 -*-
"""
Skein: Weaving the mathematics of color perception
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Color Metrics
=============
Relative luminance, WCAG 2.x contrast, and color-difference formulas.

CIEDE2000 follows Sharma, Wu & Dalal (2005), including the four branch cases
for the hue difference and the mean hue when one chroma is zero or the two
hues straddle the 0/360 seam.
"""

from __future__ import annotations

import functools
from types import MappingProxyType
from typing import Any, Final, Mapping, Tuple, Type, Union

import numpy as np
from numba import float64, njit

from .css import parse_css
from .primitives import DEG2RAD, RAD2DEG, ArrayFloat
from .records import ColorRecord, Lab, OkLch, Srgb
from .transfer import srgb_decode

__all__ = [
    "LUMINANCE_WEIGHTS",
    "WCAG_THRESHOLDS",
    "relative_luminance",
    "wcag_contrast",
    "is_wcag_contrast_sufficient",
    "ciede2000",
    "delta_e_76",
    "oklch_difference",
]

# Rec. 709 / sRGB luminance coefficients
LUMINANCE_WEIGHTS: Final[ArrayFloat] = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)
LUMINANCE_WEIGHTS.flags.writeable = False

WCAG_THRESHOLDS: Final[Mapping[str, float]] = MappingProxyType({
    "AA": 4.5,
    "AA-large": 3.0,
    "AAA": 7.0,
    "AAA-large": 4.5,
})

C25_7: Final[float] = 25.0**7


# =============================================================================
# 1. LUMINANCE & CONTRAST
# =============================================================================

@functools.lru_cache(maxsize=256)
def _luminance_from_text(text: str) -> float:
    color = parse_css(text)
    if not isinstance(color, Srgb):
        raise ValueError(f"Not an sRGB color string: {text!r}")
    return float(np.dot(srgb_decode(color.to_array()), LUMINANCE_WEIGHTS))


def relative_luminance(color: Union[Srgb, str, ArrayFloat]) -> Union[float, ArrayFloat]:
    """
    CIE relative luminance Y of encoded sRGB.

    Args:
        color: ``Srgb`` record, hex / CSS sRGB string, ``(3,)`` or ``(N, 3)``
            array.

    Returns:
        Y in [0, 1] for in-gamut input; an ``(N,)`` array for batches.

    Raises:
        ValueError: If a string does not describe an sRGB color.
        TypeError: If a record other than ``Srgb`` is passed.
    """
    if isinstance(color, str):
        return _luminance_from_text(color)
    if isinstance(color, Srgb):
        return float(np.dot(srgb_decode(color.to_array()), LUMINANCE_WEIGHTS))
    if isinstance(color, ColorRecord):
        raise TypeError(f"Expected Srgb, got {type(color).__name__}")
    arr = np.asarray(color, dtype=np.float64)
    if arr.shape[-1:] != (3,):
        raise ValueError(f"Expected last dimension size 3, got shape {arr.shape}")
    y = np.dot(srgb_decode(arr), LUMINANCE_WEIGHTS)
    if np.ndim(y) == 0:
        return float(y)
    return y


def wcag_contrast(color1: Any, color2: Any) -> Union[float, ArrayFloat]:
    """WCAG contrast ratio ``(Y_light + 0.05) / (Y_dark + 0.05)``, in [1, 21]."""
    y1 = relative_luminance(color1)
    y2 = relative_luminance(color2)
    ratio = (np.maximum(y1, y2) + 0.05) / (np.minimum(y1, y2) + 0.05)
    if np.ndim(ratio) == 0:
        return float(ratio)
    return ratio


def is_wcag_contrast_sufficient(color1: Any, color2: Any, level: str = "AA") -> bool:
    """
    Raises:
        ValueError: If ``level`` is not a key of ``WCAG_THRESHOLDS``.
    """
    try:
        required = WCAG_THRESHOLDS[level]
    except KeyError:
        raise ValueError(
            f"Unknown WCAG level {level!r}; valid levels: {', '.join(WCAG_THRESHOLDS)}"
        ) from None
    return bool(np.all(wcag_contrast(color1, color2) >= required))


# =============================================================================
# 2. COLOR DIFFERENCE KERNELS
# =============================================================================

@njit(float64(float64, float64, float64, float64, float64, float64, float64, float64, float64), cache=True)
def _delta_e_2000_single(L1: float, a1: float, b1: float, L2: float, a2: float, b2: float,
                         k_L: float, k_C: float, k_H: float) -> float:
    """Single-pixel CIEDE2000 with parametric factors."""
    C1 = np.hypot(a1, b1)
    C2 = np.hypot(a2, b2)
    C_bar = (C1 + C2) * 0.5
    C_bar_7 = C_bar**7
    G = 0.5 * (1.0 - np.sqrt(C_bar_7 / (C_bar_7 + C25_7)))
    scale = 1.0 + G
    a1_p = scale * a1
    a2_p = scale * a2
    C1_p = np.hypot(a1_p, b1)
    C2_p = np.hypot(a2_p, b2)
    h1_p = (np.arctan2(b1, a1_p) * RAD2DEG) % 360.0
    h2_p = (np.arctan2(b2, a2_p) * RAD2DEG) % 360.0
    dL_p = L2 - L1
    dC_p = C2_p - C1_p

    chromatic = C1_p * C2_p != 0.0
    dh_p = 0.0
    if chromatic:
        diff = h2_p - h1_p
        if abs(diff) <= 180.0:
            dh_p = diff
        elif diff > 180.0:
            dh_p = diff - 360.0
        else:
            dh_p = diff + 360.0
    dH_p = 2.0 * np.sqrt(C1_p * C2_p) * np.sin((dh_p * DEG2RAD) * 0.5)

    L_bar_p = (L1 + L2) * 0.5
    C_bar_p = (C1_p + C2_p) * 0.5
    h_bar_p = h1_p + h2_p
    if chromatic:
        if abs(h1_p - h2_p) <= 180.0:
            h_bar_p *= 0.5
        elif h_bar_p < 360.0:
            h_bar_p = (h_bar_p + 360.0) * 0.5
        else:
            h_bar_p = (h_bar_p - 360.0) * 0.5

    T = (1.0 - 0.17 * np.cos((h_bar_p - 30.0) * DEG2RAD)
         + 0.24 * np.cos((2.0 * h_bar_p) * DEG2RAD)
         + 0.32 * np.cos((3.0 * h_bar_p + 6.0) * DEG2RAD)
         - 0.20 * np.cos((4.0 * h_bar_p - 63.0) * DEG2RAD))
    d_theta = 30.0 * np.exp(-((h_bar_p - 275.0) / 25.0)**2)
    C_bar_p_7 = C_bar_p**7
    RC = 2.0 * np.sqrt(C_bar_p_7 / (C_bar_p_7 + C25_7))
    RT = -np.sin((2.0 * d_theta) * DEG2RAD) * RC
    L_term = (L_bar_p - 50.0)**2
    SL = 1.0 + (0.015 * L_term) / np.sqrt(20.0 + L_term)
    SC = 1.0 + 0.045 * C_bar_p
    SH = 1.0 + 0.015 * C_bar_p * T

    tL = dL_p / (k_L * SL)
    tC = dC_p / (k_C * SC)
    tH = dH_p / (k_H * SH)
    return np.sqrt(tL * tL + tC * tC + tH * tH + RT * tC * tH)


@njit(cache=True)
def _batch_delta_e_2000(lab1: ArrayFloat, lab2: ArrayFloat,
                        k_L: float, k_C: float, k_H: float) -> ArrayFloat:
    n = len(lab1)
    res = np.empty(n, dtype=np.float64)
    for i in range(n):
        res[i] = _delta_e_2000_single(lab1[i, 0], lab1[i, 1], lab1[i, 2],
                                      lab2[i, 0], lab2[i, 1], lab2[i, 2],
                                      k_L, k_C, k_H)
    return res


@njit(cache=True)
def _batch_delta_e_76(lab1: ArrayFloat, lab2: ArrayFloat) -> ArrayFloat:
    n = len(lab1)
    res = np.empty(n, dtype=np.float64)
    for i in range(n):
        dL = lab1[i, 0] - lab2[i, 0]
        da = lab1[i, 1] - lab2[i, 1]
        db = lab1[i, 2] - lab2[i, 2]
        res[i] = np.sqrt(dL * dL + da * da + db * db)
    return res


# =============================================================================
# 3. PUBLIC DIFFERENCE API
# =============================================================================

def _as_rows(color: Any, record_type: Type[ColorRecord]) -> Tuple[ArrayFloat, bool]:
    """Returns a contiguous (N, 3) array and whether the input was a single color."""
    if isinstance(color, ColorRecord):
        if not isinstance(color, record_type):
            raise TypeError(f"Expected {record_type.__name__}, got {type(color).__name__}")
        return color.to_array()[np.newaxis, :], True
    arr = np.asarray(color, dtype=np.float64)
    if arr.ndim not in (1, 2) or arr.shape[-1] != 3:
        raise ValueError(f"Inputs must have shape (N, 3) or (3,), got {arr.shape}")
    return np.ascontiguousarray(np.atleast_2d(arr)), arr.ndim == 1


def _prepare_inputs(c1: Any, c2: Any,
                    record_type: Type[ColorRecord]) -> Tuple[ArrayFloat, ArrayFloat, bool]:
    """
    Broadcasting helper.

    A single color against a batch is expanded to the batch length; the
    expanded view is materialised so the kernels see dense C-contiguous
    memory. Records must be instances of ``record_type``.
    """
    l1, single1 = _as_rows(c1, record_type)
    l2, single2 = _as_rows(c2, record_type)
    if l1.shape[0] != l2.shape[0]:
        if l1.shape[0] == 1:
            l1 = np.ascontiguousarray(np.broadcast_to(l1, l2.shape))
        elif l2.shape[0] == 1:
            l2 = np.ascontiguousarray(np.broadcast_to(l2, l1.shape))
        else:
            raise ValueError(f"Shapes {l1.shape} and {l2.shape} are not broadcastable.")
    return l1, l2, single1 and single2


def ciede2000(lab1: Any, lab2: Any, k_l: float = 1.0, k_c: float = 1.0,
              k_h: float = 1.0) -> Union[float, ArrayFloat]:
    """
    CIEDE2000 color difference.

    Args:
        lab1: Reference color(s), ``Lab`` record, ``(3,)`` or ``(N, 3)``.
        lab2: Sample color(s). One side may be a single color.
        k_l: Parametric lightness weight.
        k_c: Parametric chroma weight.
        k_h: Parametric hue weight.

    Returns:
        A float for two single colors, otherwise an ``(N,)`` array.
    """
    l1, l2, single = _prepare_inputs(lab1, lab2, Lab)
    res = _batch_delta_e_2000(l1, l2, float(k_l), float(k_c), float(k_h))
    return float(res[0]) if single else res


def delta_e_76(lab1: Any, lab2: Any) -> Union[float, ArrayFloat]:
    """CIE 1976 difference (Euclidean distance in CIELAB)."""
    l1, l2, single = _prepare_inputs(lab1, lab2, Lab)
    res = _batch_delta_e_76(l1, l2)
    return float(res[0]) if single else res


def oklch_difference(oklch1: Any, oklch2: Any, w_l: float = 1.0, w_c: float = 1.0,
                     w_h: float = 0.5) -> Union[float, ArrayFloat]:
    """
    Weighted Euclidean difference in OkLCh.

    The hue difference is taken along the shorter arc and converted to a
    chroma-like length by multiplying the angle (radians) by the mean chroma.
    """
    c1, c2, single = _prepare_inputs(oklch1, oklch2, OkLch)
    dL = c2[:, 0] - c1[:, 0]
    dC = c2[:, 1] - c1[:, 1]
    dh = c2[:, 2] - c1[:, 2]
    dh = np.where(dh > 180.0, dh - 360.0, dh)
    dh = np.where(dh < -180.0, dh + 360.0, dh)
    dH = 0.5 * (c1[:, 1] + c2[:, 1]) * dh * DEG2RAD
    res = np.sqrt((w_l * dL)**2 + (w_c * dC)**2 + (w_h * dH)**2)
    return float(res[0]) if single else res
