# -*- coding: utf-8 -*-
"""
Skein: Weaving the mathematics of color perception
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Gamut Engine
============
Predicates, simple clip / scale repairs, and the CSS Color 4 style OkLCh
chroma reduction.

Transforms elsewhere in the package never gate on gamut; the predicates in
this module are the only place where a tolerance decides behavior.

The chroma reduction bisects C in [0, C_in] while holding L and h fixed, so
lightness and hue of the result are exactly those of the input. The bisection
runs over a whole batch at once: every row keeps its own bracket and rows
drop out of the update as soon as their bracket is narrower than the JND.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final, Tuple, Type, Union

import numpy as np

from .lab import _lab_to_xyz_raw
from .oklab import _linear_srgb_to_oklab_raw, _oklab_to_linear_srgb_raw
from .primitives import (
    ACHROMATIC_CHROMA,
    ArrayFloat,
    cartesian_to_polar,
    handle_shapes,
    polar_to_cartesian,
)
from .records import ColorRecord, DisplayP3, Lab, OkLch, Oklab, Rec2020, Srgb
from .transfer import display_p3_encode, rec2020_encode, srgb_decode, srgb_encode
from .xyz import (
    M_SRGB_TO_P3_T,
    M_SRGB_TO_REC2020_T,
    _xyz_to_srgb_raw,
    display_p3_to_srgb,
    rec2020_to_srgb,
    srgb_to_display_p3,
    srgb_to_rec2020,
)

__all__ = [
    "GAMUT_TARGETS",
    "OKLCH_JND",
    "MAX_GAMUT_ITERATIONS",
    "GamutInfo",
    "in_srgb_gamut",
    "is_lab_in_typical_range",
    "is_oklab_in_typical_range",
    "clip_srgb",
    "scale_to_srgb_gamut",
    "is_in_gamut",
    "is_display_p3_in_srgb_gamut",
    "is_rec2020_in_srgb_gamut",
    "benefits_from_display_p3",
    "benefits_from_rec2020",
    "gamut_map_oklch",
    "gamut_map_srgb",
    "max_chroma",
    "srgb_gamut_info",
]

GAMUT_TARGETS: Final[Tuple[str, ...]] = ("srgb", "display-p3", "rec2020")

OKLCH_JND: Final[float] = 0.02
MAX_GAMUT_ITERATIONS: Final[int] = 50
_DEFAULT_EPSILON: Final[float] = 1e-10
# Direct RGB matrices carry seven decimals; wide targets get matching slack.
_WIDE_TARGET_EPSILON: Final[float] = 1e-7
_WIDE_TO_SRGB_EPSILON: Final[float] = 1e-5
_WIDE_BENEFIT_THRESHOLD: Final[float] = 0.01


def _rows(color: Any, record_type: Type[ColorRecord]) -> Tuple[ArrayFloat, bool]:
    """(N, 3) float64 view of a record or array, and whether it was a single color."""
    if isinstance(color, ColorRecord):
        if not isinstance(color, record_type):
            raise TypeError(f"Expected {record_type.__name__}, got {type(color).__name__}")
        return color.to_array()[np.newaxis, :], True
    arr = np.asarray(color, dtype=np.float64)
    if arr.ndim not in (1, 2) or arr.shape[-1] != 3:
        raise ValueError(f"Expected last dimension size 3, got shape {arr.shape}")
    return np.atleast_2d(arr), arr.ndim == 1


def _reduce(mask: ArrayFloat, single: bool) -> Union[bool, ArrayFloat]:
    return bool(mask[0]) if single else mask


# =============================================================================
# 1. PREDICATES
# =============================================================================

def _within_unit(rgb: ArrayFloat, epsilon: float) -> ArrayFloat:
    """Row-wise test that every channel lies in [-eps, 1 + eps]. NaN fails."""
    return np.all((rgb >= -epsilon) & (rgb <= 1.0 + epsilon), axis=-1)


def in_srgb_gamut(rgb: Any, epsilon: float = _DEFAULT_EPSILON) -> Union[bool, ArrayFloat]:
    """
    True if all channels lie in ``[-epsilon, 1 + epsilon]``.

    Returns a bool for a single color and a boolean ``(N,)`` array for a batch.
    """
    arr, single = _rows(rgb, Srgb)
    return _reduce(_within_unit(arr, epsilon), single)


def is_lab_in_typical_range(lab: Any) -> Union[bool, ArrayFloat]:
    """Coarse sanity bounds: L in [0, 100], a and b in [-128, 127]."""
    arr, single = _rows(lab, Lab)
    ok = ((arr[:, 0] >= 0.0) & (arr[:, 0] <= 100.0)
          & (arr[:, 1] >= -128.0) & (arr[:, 1] <= 127.0)
          & (arr[:, 2] >= -128.0) & (arr[:, 2] <= 127.0))
    return _reduce(ok, single)


def is_oklab_in_typical_range(oklab: Any) -> Union[bool, ArrayFloat]:
    """Coarse sanity bounds: L in [0, 1], a and b in [-0.4, 0.4]."""
    arr, single = _rows(oklab, Oklab)
    ok = ((arr[:, 0] >= 0.0) & (arr[:, 0] <= 1.0)
          & (np.abs(arr[:, 1]) <= 0.4) & (np.abs(arr[:, 2]) <= 0.4))
    return _reduce(ok, single)


# =============================================================================
# 2. CLIP & SCALE
# =============================================================================

@handle_shapes(Srgb, Srgb)
def clip_srgb(rgb: ArrayFloat) -> ArrayFloat:
    """Hard clip to [0, 1]. Fast, but can shift hue."""
    return np.clip(rgb, 0.0, 1.0)


@handle_shapes(Srgb, Srgb)
def scale_to_srgb_gamut(rgb: ArrayFloat) -> ArrayFloat:
    """
    Shifts out negative channels, then divides by the largest channel.

    Rows already in [0, 1] are returned unchanged.
    """
    out = rgb.copy()
    lo = out.min(axis=1, keepdims=True)
    out = np.where(lo < 0.0, out - lo, out)
    hi = out.max(axis=1, keepdims=True)
    return np.where(hi > 1.0, out / np.where(hi > 1.0, hi, 1.0), out)


# =============================================================================
# 3. TARGET GAMUTS
# =============================================================================

def _target_key(target: str) -> str:
    key = str(target).strip().lower()
    if key == "p3":
        key = "display-p3"
    if key not in GAMUT_TARGETS:
        raise ValueError(
            f"Unsupported target gamut {target!r}; valid targets: {', '.join(GAMUT_TARGETS)}"
        )
    return key


def _encode_in_target(linear_srgb: ArrayFloat, target: str) -> ArrayFloat:
    """Re-expresses linear sRGB in the target's encoded RGB."""
    if target == "srgb":
        return srgb_encode(linear_srgb)
    if target == "display-p3":
        return display_p3_encode(np.dot(linear_srgb, M_SRGB_TO_P3_T))
    return rec2020_encode(np.dot(linear_srgb, M_SRGB_TO_REC2020_T))


def _target_epsilon(target: str) -> float:
    return _DEFAULT_EPSILON if target == "srgb" else _WIDE_TARGET_EPSILON


def _oklch_in_target(lch: ArrayFloat, target: str) -> ArrayFloat:
    linear = _oklab_to_linear_srgb_raw(polar_to_cartesian(lch))
    return _within_unit(_encode_in_target(linear, target), _target_epsilon(target))


def is_in_gamut(oklch: Any, target: str = "srgb") -> Union[bool, ArrayFloat]:
    """
    True if the OkLCh color is displayable in ``target``.

    Raises:
        ValueError: If ``target`` is not one of ``GAMUT_TARGETS``.
    """
    key = _target_key(target)
    arr, single = _rows(oklch, OkLch)
    return _reduce(_oklch_in_target(arr, key), single)


def is_display_p3_in_srgb_gamut(p3: Any) -> Union[bool, ArrayFloat]:
    """True if the Display P3 color survives conversion to sRGB unclipped."""
    arr, single = _rows(p3, DisplayP3)
    return _reduce(_within_unit(display_p3_to_srgb(arr), _WIDE_TO_SRGB_EPSILON), single)


def is_rec2020_in_srgb_gamut(rec2020: Any) -> Union[bool, ArrayFloat]:
    """True if the Rec. 2020 color survives conversion to sRGB unclipped."""
    arr, single = _rows(rec2020, Rec2020)
    return _reduce(_within_unit(rec2020_to_srgb(arr), _WIDE_TO_SRGB_EPSILON), single)


def _differs_from(encoded: ArrayFloat, srgb: ArrayFloat) -> ArrayFloat:
    return np.any(np.abs(encoded - srgb) > _WIDE_BENEFIT_THRESHOLD, axis=-1)


def benefits_from_display_p3(srgb: Any) -> Union[bool, ArrayFloat]:
    """
    True if any Display P3 channel of the sRGB color moves by more than 0.01.

    Neutrals keep their values because both spaces share the D65 white and
    the sRGB transfer curve.
    """
    arr, single = _rows(srgb, Srgb)
    return _reduce(_differs_from(srgb_to_display_p3(arr), arr), single)


def benefits_from_rec2020(srgb: Any) -> Union[bool, ArrayFloat]:
    """
    True if any Rec. 2020 channel of the sRGB color moves by more than 0.01.

    Rec. 2020 has its own transfer curve, so mid grays also qualify; only
    colors near black or white keep their values.
    """
    arr, single = _rows(srgb, Srgb)
    return _reduce(_differs_from(srgb_to_rec2020(arr), arr), single)


# =============================================================================
# 4. OKLCH CHROMA REDUCTION
# =============================================================================

def _gamut_map_oklch_rows(lch: ArrayFloat, target: str) -> ArrayFloat:
    out = np.array(lch, dtype=np.float64)
    inside = _oklch_in_target(out, target)
    achromatic = ~inside & (out[:, 1] < ACHROMATIC_CHROMA)
    out[achromatic, 0] = np.clip(out[achromatic, 0], 0.0, 1.0)
    out[achromatic, 1] = 0.0

    finite = ~np.isnan(out).any(axis=1)
    active = ~inside & ~achromatic & finite
    if not np.any(active):
        return out

    lo = np.zeros(out.shape[0])
    hi = out[:, 1].copy()
    trial = out.copy()
    for _ in range(MAX_GAMUT_ITERATIONS):
        active &= (hi - lo) > OKLCH_JND
        if not np.any(active):
            break
        mid = 0.5 * (lo + hi)
        trial[:, 1] = mid
        ok = _oklch_in_target(trial, target)
        lo = np.where(active & ok, mid, lo)
        hi = np.where(active & ~ok, mid, hi)

    mapped = ~inside & ~achromatic & finite
    out[mapped, 1] = lo[mapped]
    return out


def gamut_map_oklch(oklch: Any, target: str = "srgb") -> Any:
    """
    Reduces OkLCh chroma until the color fits ``target``.

    1. In-gamut colors are returned unchanged.
    2. Achromatic colors (C < 1e-7) get L clamped to [0, 1] and C = 0.
    3. Otherwise C is bisected over [0, C] until the bracket is narrower than
       the JND (0.02) or 50 iterations have run.
    4. The in-gamut lower bound of the bracket is returned with L and h
       untouched.

    Raises:
        ValueError: If ``target`` is not one of ``GAMUT_TARGETS``.
    """
    return _gamut_map_oklch(oklch, _target_key(target))


@handle_shapes(OkLch, OkLch)
def _gamut_map_oklch(lch: ArrayFloat, target: str) -> ArrayFloat:
    return _gamut_map_oklch_rows(lch, target)


def gamut_map_srgb(srgb: Any, target: str = "srgb") -> Any:
    """
    Maps an sRGB color into ``target`` through OkLCh chroma reduction.

    The result is still expressed in sRGB; for wide targets it may lie
    outside [0, 1].
    """
    return _gamut_map_srgb(srgb, _target_key(target))


@handle_shapes(Srgb, Srgb)
def _gamut_map_srgb(rgb: ArrayFloat, target: str) -> ArrayFloat:
    linear = srgb_decode(rgb)
    inside = _within_unit(_encode_in_target(linear, target), _target_epsilon(target))
    if np.all(inside):
        return rgb.copy()
    lch = cartesian_to_polar(_linear_srgb_to_oklab_raw(linear))
    mapped = _gamut_map_oklch_rows(lch, target)
    out = srgb_encode(_oklab_to_linear_srgb_raw(polar_to_cartesian(mapped)))
    return np.where(inside[:, np.newaxis], rgb, out)


def max_chroma(L: float, h: float, space: str = "oklch", precision: float = 1e-3) -> float:
    """
    Largest chroma at lightness ``L`` and hue ``h`` that stays in sRGB.

    Args:
        L: Lightness, 0-1 for ``"oklch"`` or 0-100 for ``"lch"``.
        h: Hue angle in degrees.
        space: ``"oklch"`` or ``"lch"``.
        precision: Bracket width at which the bisection stops.

    Raises:
        ValueError: On an unknown ``space``.
    """
    space = space.strip().lower()
    if space == "oklch":
        high = 0.5
    elif space == "lch":
        high = 150.0
    else:
        raise ValueError(f"Unknown space {space!r}; expected 'oklch' or 'lch'")

    def to_srgb(c: float) -> ArrayFloat:
        lab = polar_to_cartesian(np.array([[L, c, h]], dtype=np.float64))
        if space == "lch":
            return _xyz_to_srgb_raw(_lab_to_xyz_raw(lab))
        return srgb_encode(_oklab_to_linear_srgb_raw(lab))

    low = 0.0
    while high - low > precision:
        mid = 0.5 * (low + high)
        if _within_unit(to_srgb(mid), _DEFAULT_EPSILON)[0]:
            low = mid
        else:
            high = mid
    return low


@dataclass(slots=True, frozen=True)
class GamutInfo:
    """How far an sRGB color is outside [0, 1]."""
    in_gamut: bool
    channels: Tuple[float, float, float]
    max_excess: float
    min_deficit: float


def srgb_gamut_info(srgb: Any) -> GamutInfo:
    arr, _ = _rows(srgb, Srgb)
    if arr.shape[0] != 1:
        raise ValueError("srgb_gamut_info expects a single color")
    channels = tuple(float(v) for v in arr[0])
    max_excess = max(0.0, *(c - 1.0 for c in channels))
    min_deficit = max(0.0, *(-c for c in channels))
    return GamutInfo(
        in_gamut=max_excess == 0.0 and min_deficit == 0.0,
        channels=channels,
        max_excess=max_excess,
        min_deficit=min_deficit,
    )
