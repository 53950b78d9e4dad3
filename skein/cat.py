# -*- coding: utf-8 -*-
"""
Skein: Weaving the mathematics of color perception
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Chromatic Adaptation
====================
von Kries style adaptation in a selectable cone-response basis:

    1. C_s = M W_s,  C_d = M W_d
    2. D = diag(C_d / C_s)
    3. XYZ_out = M^-1 D M XYZ_in

The composite ``M^-1 D M`` is cached per (method, source, destination). The
whites only enter through the ratio ``C_d / C_s``, so they may be given on
any common scale (the illuminant table uses Y = 100).

References:
    - Lindbloom, B. "Chromatic Adaptation".
    - Li, C. et al. (2017). "Comprehensive color solutions: CAM16, CAT16 and
      CAM16-UCS". Color Research & Application 42(6).
"""

from __future__ import annotations

import functools
from types import MappingProxyType
from typing import Any, Final, Mapping, Tuple, Union

import numpy as np

from .primitives import ArrayFloat, handle_shapes
from .records import Xyz
from .xyz import ILLUMINANTS, resolve_white

__all__ = [
    "CAT_METHODS",
    "adaptation_matrix",
    "chromatic_adaptation",
    "xyz_d65_to_d50",
    "xyz_d50_to_d65",
    "correlated_color_temperature",
    "white_point_from_temperature",
    "closest_illuminant",
    "needs_chromatic_adaptation",
]


def _frozen(rows: Any) -> ArrayFloat:
    arr = np.array(rows, dtype=np.float64)
    arr.flags.writeable = False
    return arr


# Cone-response matrices (column-vector convention, XYZ -> LMS)
CAT_METHODS: Final[Mapping[str, ArrayFloat]] = MappingProxyType({
    "bradford": _frozen([
        [ 0.8951,  0.2664, -0.1614],
        [-0.7502,  1.7135,  0.0367],
        [ 0.0389, -0.0685,  1.0296],
    ]),
    "cat02": _frozen([
        [ 0.7328,  0.4296, -0.1624],
        [-0.7036,  1.6975,  0.0061],
        [ 0.0030,  0.0136,  0.9834],
    ]),
    "cat16": _frozen([
        [ 0.401288,  0.650173, -0.051461],
        [-0.250268,  1.204414,  0.045854],
        [-0.002079,  0.048952,  0.953127],
    ]),
    "von_kries": _frozen([
        [ 0.4002,  0.7076, -0.0808],
        [-0.2263,  1.1653,  0.0457],
        [ 0.0000,  0.0000,  0.9182],
    ]),
})

_CAT_INVERSES: Final[Mapping[str, ArrayFloat]] = MappingProxyType({
    name: _frozen(np.linalg.inv(m)) for name, m in CAT_METHODS.items()
})


def _method_key(method: str) -> str:
    """Accepts ``"vonKries"``, ``"von-kries"``, ``"CAT16"`` and similar spellings."""
    key = str(method).strip().lower().replace("_", "").replace("-", "")
    if key == "vonkries":
        return "von_kries"
    if key not in CAT_METHODS:
        raise ValueError(
            f"Unknown adaptation method {method!r}; valid methods: {', '.join(CAT_METHODS)}"
        )
    return key


@functools.lru_cache(maxsize=64)
def _cached_composite(method: str, src: Tuple[float, ...], dst: Tuple[float, ...]) -> ArrayFloat:
    """
    Composite matrix for row vectors.

    M_composite = M^-1 * Gain * M, and since rows are multiplied from the
    left the transpose is returned.
    """
    m = CAT_METHODS[method]
    src_lms = m @ np.array(src, dtype=np.float64)
    dst_lms = m @ np.array(dst, dtype=np.float64)
    gains = dst_lms / src_lms
    composite = (_CAT_INVERSES[method] @ np.diag(gains) @ m).T.copy()
    composite.flags.writeable = False
    return composite


def adaptation_matrix(source_white: Any, dest_white: Any, method: str = "bradford") -> ArrayFloat:
    """
    Returns the (read-only) 3x3 adaptation matrix for row-vector XYZ.

    Raises:
        ValueError: On an unknown method or illuminant name.
    """
    key = _method_key(method)
    src = tuple(float(v) for v in resolve_white(source_white))
    dst = tuple(float(v) for v in resolve_white(dest_white))
    return _cached_composite(key, src, dst)


@handle_shapes(Xyz, Xyz)
def chromatic_adaptation(xyz: ArrayFloat, source_white: Any, dest_white: Any,
                         method: str = "bradford") -> ArrayFloat:
    """
    Adapts XYZ from one reference white to another.

    Args:
        xyz: Colors under the source white.
        source_white: Illuminant name, ``Xyz`` record or XYZ triple.
        dest_white: Illuminant name, ``Xyz`` record or XYZ triple.
        method: ``"bradford"``, ``"cat02"``, ``"cat16"`` or ``"von_kries"``.

    Returns:
        Adapted XYZ. Identical whites return the input values unchanged.

    Raises:
        ValueError: On an unknown method or illuminant name.
    """
    key = _method_key(method)
    src = resolve_white(source_white)
    dst = resolve_white(dest_white)
    if np.array_equal(src, dst):
        return xyz.copy()
    return np.dot(xyz, _cached_composite(key, tuple(src.tolist()), tuple(dst.tolist())))


def xyz_d65_to_d50(xyz: Any, method: str = "bradford") -> Any:
    """XYZ under D65 -> XYZ under D50 (ICC profile connection space)."""
    return chromatic_adaptation(xyz, "D65", "D50", method)


def xyz_d50_to_d65(xyz: Any, method: str = "bradford") -> Any:
    return chromatic_adaptation(xyz, "D50", "D65", method)


# =============================================================================
# WHITE POINT UTILITIES
# =============================================================================

def _as_xyz_array(xyz: Any) -> ArrayFloat:
    if isinstance(xyz, Xyz):
        return xyz.to_array()
    return np.asarray(xyz, dtype=np.float64)


def correlated_color_temperature(xyz: Any) -> Union[float, ArrayFloat]:
    """
    McCamy's cubic CCT estimate from XYZ (any scale).

    Informational only: valid near the Planckian locus, roughly 2000-12500 K.
    """
    arr = _as_xyz_array(xyz)
    with np.errstate(divide="ignore", invalid="ignore"):
        total = arr[..., 0] + arr[..., 1] + arr[..., 2]
        x = arr[..., 0] / total
        y = arr[..., 1] / total
        n = (x - 0.3320) / (0.1858 - y)
    cct = ((437.0 * n + 3601.0) * n + 6831.0) * n + 5517.0
    if np.ndim(cct) == 0:
        return float(cct)
    return cct


def white_point_from_temperature(temperature: float) -> Xyz:
    """
    White point (Y = 100) on the CIE daylight locus.

    Raises:
        ValueError: If ``temperature`` lies outside 4000-25000 K.
    """
    t = float(temperature)
    if 4000.0 <= t <= 7000.0:
        x = -4.6070e9 / t**3 + 2.9678e6 / t**2 + 0.09911e3 / t + 0.244063
    elif 7000.0 < t <= 25000.0:
        x = -2.0064e9 / t**3 + 1.9018e6 / t**2 + 0.24748e3 / t + 0.237040
    else:
        raise ValueError(f"Temperature {temperature} K outside the daylight range 4000-25000 K")
    y = -3.0 * x * x + 2.870 * x - 0.275
    return Xyz(100.0 * x / y, 100.0, 100.0 * (1.0 - x - y) / y)


def closest_illuminant(white: Any) -> str:
    """Name of the tabulated illuminant nearest in XYZ (Euclidean)."""
    w = resolve_white(white)
    return min(ILLUMINANTS, key=lambda name: float(np.linalg.norm(ILLUMINANTS[name] - w)))


def needs_chromatic_adaptation(white1: Any, white2: Any, threshold: float = 1e-3) -> bool:
    """True if the two whites differ by more than ``threshold`` in XYZ."""
    return bool(np.linalg.norm(resolve_white(white1) - resolve_white(white2)) > threshold)
