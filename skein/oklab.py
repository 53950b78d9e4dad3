# -*- coding: utf-8 -*-
"""
Skein: Weaving the mathematics of color perception
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Oklab / OkLCh
=============
Linear sRGB -> LMS (M1) -> cube root -> Oklab (M2), and the inverse chain.
The forward matrices carry Björn Ottosson's published constants to ten
decimal places; inverses are derived with ``np.linalg.inv`` so that the
round trip is exact to machine precision.

References:
    - Ottosson, B. (2020). "A perceptual color space for image processing".
"""

from __future__ import annotations

from typing import Final

import numpy as np

from .primitives import (
    ArrayFloat,
    cartesian_to_polar,
    handle_shapes,
    polar_to_cartesian,
)
from .records import LinearSrgb, Oklab, OkLch, Srgb
from .transfer import srgb_decode, srgb_encode

__all__ = [
    "M1_OKLAB_T",
    "M2_OKLAB_T",
    "M1_OKLAB_INV_T",
    "M2_OKLAB_INV_T",
    "linear_srgb_to_oklab",
    "oklab_to_linear_srgb",
    "oklab_to_oklch",
    "oklch_to_oklab",
    "srgb_to_oklab",
    "oklab_to_srgb",
    "srgb_to_oklch",
    "oklch_to_srgb",
    "oklch_to_linear_srgb",
]

# M1: linear sRGB to cone response (LMS)
_M1_OKLAB = np.array([
    [0.4122214708, 0.5363325363, 0.0514459929],
    [0.2119034982, 0.6806995451, 0.1073969566],
    [0.0883024619, 0.2817188376, 0.6299787005]
], dtype=np.float64)

# M2: non-linear LMS to Lab
_M2_OKLAB = np.array([
    [0.2104542553, 0.7936177850, -0.0040720468],
    [1.9779984951, -2.4285922050, 0.4505937099],
    [0.0259040371, 0.7827717662, -0.8086757660]
], dtype=np.float64)

M1_OKLAB_T: Final[ArrayFloat] = _M1_OKLAB.T.copy()
M2_OKLAB_T: Final[ArrayFloat] = _M2_OKLAB.T.copy()
M1_OKLAB_INV_T: Final[ArrayFloat] = np.linalg.inv(_M1_OKLAB).T.copy()
M2_OKLAB_INV_T: Final[ArrayFloat] = np.linalg.inv(_M2_OKLAB).T.copy()

for _m in (M1_OKLAB_T, M2_OKLAB_T, M1_OKLAB_INV_T, M2_OKLAB_INV_T):
    _m.flags.writeable = False
del _m


# =============================================================================
# RAW PIPELINES
# =============================================================================

def _linear_srgb_to_oklab_raw(rgb: ArrayFloat) -> ArrayFloat:
    lms = np.dot(rgb, M1_OKLAB_T)
    # np.cbrt is sign preserving
    return np.dot(np.cbrt(lms), M2_OKLAB_T)


def _oklab_to_linear_srgb_raw(lab: ArrayFloat) -> ArrayFloat:
    lms_ = np.dot(lab, M2_OKLAB_INV_T)
    return np.dot(lms_ * lms_ * lms_, M1_OKLAB_INV_T)


# =============================================================================
# PUBLIC TRANSFORMS
# =============================================================================

@handle_shapes(LinearSrgb, Oklab)
def linear_srgb_to_oklab(rgb: ArrayFloat) -> ArrayFloat:
    return _linear_srgb_to_oklab_raw(rgb)


@handle_shapes(Oklab, LinearSrgb)
def oklab_to_linear_srgb(lab: ArrayFloat) -> ArrayFloat:
    return _oklab_to_linear_srgb_raw(lab)


@handle_shapes(Oklab, OkLch)
def oklab_to_oklch(lab: ArrayFloat) -> ArrayFloat:
    return cartesian_to_polar(lab)


@handle_shapes(OkLch, Oklab)
def oklch_to_oklab(lch: ArrayFloat) -> ArrayFloat:
    return polar_to_cartesian(lch)


@handle_shapes(Srgb, Oklab)
def srgb_to_oklab(rgb: ArrayFloat) -> ArrayFloat:
    return _linear_srgb_to_oklab_raw(srgb_decode(rgb))


@handle_shapes(Oklab, Srgb)
def oklab_to_srgb(lab: ArrayFloat) -> ArrayFloat:
    return srgb_encode(_oklab_to_linear_srgb_raw(lab))


@handle_shapes(Srgb, OkLch)
def srgb_to_oklch(rgb: ArrayFloat) -> ArrayFloat:
    return cartesian_to_polar(_linear_srgb_to_oklab_raw(srgb_decode(rgb)))


@handle_shapes(OkLch, Srgb)
def oklch_to_srgb(lch: ArrayFloat) -> ArrayFloat:
    return srgb_encode(_oklab_to_linear_srgb_raw(polar_to_cartesian(lch)))


@handle_shapes(OkLch, LinearSrgb)
def oklch_to_linear_srgb(lch: ArrayFloat) -> ArrayFloat:
    """Used by the gamut engine, which tests linear channels for wide gamuts."""
    return _oklab_to_linear_srgb_raw(polar_to_cartesian(lch))
