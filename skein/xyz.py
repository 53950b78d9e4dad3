# -*- coding: utf-8 -*-
"""
Skein: Weaving the mathematics of color perception
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

RGB <-> XYZ
===========
Linear-RGB to CIE XYZ (D65, white at Y = 1) for the sRGB, Display P3 and
Rec. 2020 primary sets, direct RGB-to-RGB matrices, and the standard
illuminant table.

The direct sRGB <-> P3 and sRGB <-> Rec. 2020 matrices are published
compositions. Using them instead of chaining through XYZ avoids a second
rounding step in double precision.

All matrices are stored pre-transposed (``_T``) so that row-vector batches
multiply as ``rgb @ M_T``.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Final, Mapping

import numpy as np

from .diagnostics import ShapeError
from .primitives import ArrayFloat, handle_shapes
from .records import DisplayP3, LinearSrgb, Rec2020, Srgb, Xyz
from .transfer import (
    display_p3_decode,
    display_p3_encode,
    rec2020_decode,
    rec2020_encode,
    srgb_decode,
    srgb_encode,
)

__all__ = [
    # --- Matrices ---
    "M_SRGB_TO_XYZ_T",
    "M_XYZ_TO_SRGB_T",
    "M_P3_TO_XYZ_T",
    "M_XYZ_TO_P3_T",
    "M_REC2020_TO_XYZ_T",
    "M_XYZ_TO_REC2020_T",
    "M_SRGB_TO_P3_T",
    "M_P3_TO_SRGB_T",
    "M_SRGB_TO_REC2020_T",
    "M_REC2020_TO_SRGB_T",

    # --- Illuminants ---
    "ILLUMINANTS",
    "WHITE_D65",
    "WHITE_D50",
    "get_illuminant",
    "resolve_white",

    # --- Transforms ---
    "srgb_to_linear_srgb",
    "linear_srgb_to_srgb",
    "linear_srgb_to_xyz",
    "xyz_to_linear_srgb",
    "srgb_to_xyz",
    "xyz_to_srgb",
    "srgb_to_display_p3",
    "display_p3_to_srgb",
    "display_p3_to_xyz",
    "xyz_to_display_p3",
    "srgb_to_rec2020",
    "rec2020_to_srgb",
    "rec2020_to_xyz",
    "xyz_to_rec2020",
]


def _frozen(rows: Any) -> ArrayFloat:
    arr = np.array(rows, dtype=np.float64)
    arr.flags.writeable = False
    return arr


def _frozen_t(rows: Any) -> ArrayFloat:
    return _frozen(np.array(rows, dtype=np.float64).T)


# =============================================================================
# 1. MATRICES
# =============================================================================

# sRGB (IEC 61966-2-1), seven decimal places
M_SRGB_TO_XYZ_T: Final[ArrayFloat] = _frozen_t([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
])
M_XYZ_TO_SRGB_T: Final[ArrayFloat] = _frozen_t([
    [ 3.2404542, -1.5371385, -0.4985314],
    [-0.9692660,  1.8760108,  0.0415560],
    [ 0.0556434, -0.2040259,  1.0572252],
])

# Display P3 (P3 primaries, D65 white)
M_P3_TO_XYZ_T: Final[ArrayFloat] = _frozen_t([
    [0.4865709, 0.2656677, 0.1982173],
    [0.2289746, 0.6917385, 0.0792869],
    [0.0000000, 0.0451134, 1.0439444],
])
M_XYZ_TO_P3_T: Final[ArrayFloat] = _frozen_t([
    [ 2.4934969, -0.9313836, -0.4027108],
    [-0.8294890,  1.7626641,  0.0236247],
    [ 0.0358458, -0.0761724,  0.9568845],
])

# ITU-R BT.2020
M_REC2020_TO_XYZ_T: Final[ArrayFloat] = _frozen_t([
    [0.6369580, 0.1446169, 0.1688810],
    [0.2627002, 0.6779981, 0.0593017],
    [0.0000000, 0.0280727, 1.0609851],
])
M_XYZ_TO_REC2020_T: Final[ArrayFloat] = _frozen_t([
    [ 1.7166511, -0.3556708, -0.2533663],
    [-0.6666844,  1.6164812,  0.0157685],
    [ 0.0176399, -0.0427706,  0.9421031],
])

# Direct linear-RGB compositions; the reverse directions are exact inverses
M_SRGB_TO_P3_T: Final[ArrayFloat] = _frozen_t([
    [0.8224621, 0.1775380, 0.0000000],
    [0.0331941, 0.9668058, 0.0000001],
    [0.0170827, 0.0723974, 0.9105199],
])
M_P3_TO_SRGB_T: Final[ArrayFloat] = _frozen(np.linalg.inv(M_SRGB_TO_P3_T))
M_SRGB_TO_REC2020_T: Final[ArrayFloat] = _frozen_t([
    [0.6274040, 0.3292820, 0.0433136],
    [0.0690970, 0.9195400, 0.0113612],
    [0.0163916, 0.0880132, 0.8955950],
])
M_REC2020_TO_SRGB_T: Final[ArrayFloat] = _frozen(np.linalg.inv(M_SRGB_TO_REC2020_T))


# =============================================================================
# 2. ILLUMINANTS (CIE 1931 2 deg, Y = 100)
# =============================================================================

ILLUMINANTS: Final[Mapping[str, ArrayFloat]] = MappingProxyType({
    "A":   _frozen([109.850, 100.0,  35.585]),
    "C":   _frozen([ 98.074, 100.0, 118.232]),
    "D50": _frozen([ 96.422, 100.0,  82.521]),
    "D55": _frozen([ 95.682, 100.0,  92.149]),
    "D65": _frozen([ 95.047, 100.0, 108.883]),
    "D75": _frozen([ 94.972, 100.0, 122.638]),
    "E":   _frozen([100.000, 100.0, 100.000]),
    "F2":  _frozen([ 99.187, 100.0,  67.395]),
    "F7":  _frozen([ 95.044, 100.0, 108.755]),
    "F11": _frozen([100.966, 100.0,  64.370]),
})

WHITE_D65: Final[ArrayFloat] = ILLUMINANTS["D65"]
WHITE_D50: Final[ArrayFloat] = ILLUMINANTS["D50"]


def get_illuminant(name: str) -> ArrayFloat:
    """
    Looks up a standard illuminant white point (Y = 100) by name.

    Raises:
        ValueError: If the name is not in the table.
    """
    key = str(name).strip().upper()
    try:
        return ILLUMINANTS[key]
    except KeyError:
        raise ValueError(
            f"Unknown illuminant {name!r}; valid names: {', '.join(ILLUMINANTS)}"
        ) from None


def resolve_white(white: Any) -> ArrayFloat:
    """Accepts an illuminant name, an ``Xyz`` record or a 3-sequence."""
    if isinstance(white, str):
        return get_illuminant(white)
    if isinstance(white, Xyz):
        return white.to_array()
    try:
        arr = np.asarray(white, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ShapeError("White point must be a name or three numbers") from exc
    if arr.shape != (3,):
        raise ShapeError(f"White point must have 3 components, got shape {arr.shape}")
    return arr


# =============================================================================
# 3. RAW PIPELINES (no shape checks, (N, 3) float64 in/out)
# =============================================================================

def _srgb_to_xyz_raw(rgb: ArrayFloat) -> ArrayFloat:
    return np.dot(srgb_decode(rgb), M_SRGB_TO_XYZ_T)


def _xyz_to_srgb_raw(xyz: ArrayFloat) -> ArrayFloat:
    return srgb_encode(np.dot(xyz, M_XYZ_TO_SRGB_T))


# =============================================================================
# 4. PUBLIC TRANSFORMS
# =============================================================================

@handle_shapes(Srgb, LinearSrgb)
def srgb_to_linear_srgb(rgb: ArrayFloat) -> ArrayFloat:
    """Removes the sRGB transfer curve."""
    return srgb_decode(rgb)


@handle_shapes(LinearSrgb, Srgb)
def linear_srgb_to_srgb(rgb: ArrayFloat) -> ArrayFloat:
    """Applies the sRGB transfer curve."""
    return srgb_encode(rgb)


@handle_shapes(LinearSrgb, Xyz)
def linear_srgb_to_xyz(rgb: ArrayFloat) -> ArrayFloat:
    return np.dot(rgb, M_SRGB_TO_XYZ_T)


@handle_shapes(Xyz, LinearSrgb)
def xyz_to_linear_srgb(xyz: ArrayFloat) -> ArrayFloat:
    return np.dot(xyz, M_XYZ_TO_SRGB_T)


@handle_shapes(Srgb, Xyz)
def srgb_to_xyz(rgb: ArrayFloat) -> ArrayFloat:
    """Encoded sRGB -> XYZ (D65, Y = 1). No clipping."""
    return _srgb_to_xyz_raw(rgb)


@handle_shapes(Xyz, Srgb)
def xyz_to_srgb(xyz: ArrayFloat) -> ArrayFloat:
    """XYZ (D65, Y = 1) -> encoded sRGB. Out-of-gamut values are kept."""
    return _xyz_to_srgb_raw(xyz)


@handle_shapes(Srgb, DisplayP3)
def srgb_to_display_p3(rgb: ArrayFloat) -> ArrayFloat:
    return display_p3_encode(np.dot(srgb_decode(rgb), M_SRGB_TO_P3_T))


@handle_shapes(DisplayP3, Srgb)
def display_p3_to_srgb(rgb: ArrayFloat) -> ArrayFloat:
    return srgb_encode(np.dot(display_p3_decode(rgb), M_P3_TO_SRGB_T))


@handle_shapes(DisplayP3, Xyz)
def display_p3_to_xyz(rgb: ArrayFloat) -> ArrayFloat:
    return np.dot(display_p3_decode(rgb), M_P3_TO_XYZ_T)


@handle_shapes(Xyz, DisplayP3)
def xyz_to_display_p3(xyz: ArrayFloat) -> ArrayFloat:
    return display_p3_encode(np.dot(xyz, M_XYZ_TO_P3_T))


@handle_shapes(Srgb, Rec2020)
def srgb_to_rec2020(rgb: ArrayFloat) -> ArrayFloat:
    return rec2020_encode(np.dot(srgb_decode(rgb), M_SRGB_TO_REC2020_T))


@handle_shapes(Rec2020, Srgb)
def rec2020_to_srgb(rgb: ArrayFloat) -> ArrayFloat:
    return srgb_encode(np.dot(rec2020_decode(rgb), M_REC2020_TO_SRGB_T))


@handle_shapes(Rec2020, Xyz)
def rec2020_to_xyz(rgb: ArrayFloat) -> ArrayFloat:
    return np.dot(rec2020_decode(rgb), M_REC2020_TO_XYZ_T)


@handle_shapes(Xyz, Rec2020)
def xyz_to_rec2020(xyz: ArrayFloat) -> ArrayFloat:
    return rec2020_encode(np.dot(xyz, M_XYZ_TO_REC2020_T))
