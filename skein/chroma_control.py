# -*- coding: utf-8 -*-
"""
Skein: Weaving the mathematics of color perception
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Chroma Control
==============
Joint solver for (AOk hue, AOk chroma, target CIELAB L*) -> displayable sRGB.

Physical luminance is the WCAG-relevant quantity while AOk carries hue and
surround-adapted lightness. The solver treats the relative luminance implied
by the target L* as a hard constraint and AOk chroma as a soft maximum:

    * ``find_aok_l_for_target_y``: bisects AOk L at fixed (C, h) until the
      back-projected sRGB has the target Y and lies in gamut.
    * ``find_max_aok_chroma_for_lab_l``: scans C downward from the search
      limit and returns the first value whose inner search succeeds.
    * ``adjust_aok_color_to_lab_l``: clips a requested chroma to that maximum
      and solves for the matching AOk L.

The inner bisection is a compiled scalar kernel; one outer scan runs at most
``max_chroma_search_limit / chroma_step + 1`` inner searches of at most
``max_iterations`` steps each.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Final, Literal, Optional, Tuple, Union

import numpy as np
from numba import njit

from .aoklab import AdaptiveOklab, AokConfig
from .diagnostics import AdvisoryLogger, advise
from .metrics import LUMINANCE_WEIGHTS
from .oklab import M1_OKLAB_INV_T, M2_OKLAB_INV_T
from .primitives import DEG2RAD, normalize_hue, sign_pow_scalar
from .records import AokLch, Srgb
from .transfer import _srgb_decode_kernel, _srgb_encode_kernel

__all__ = [
    "ChromaMode",
    "ChromaControlOptions",
    "LuminanceMatch",
    "ChromaControlResult",
    "lab_l_to_relative_y",
    "find_aok_l_for_target_y",
    "find_max_aok_chroma_for_lab_l",
    "adjust_aok_color_to_lab_l",
]

ChromaMode = Literal["clip", "target"]

# Channel slack for the in-gamut test inside the search.
GAMUT_EPSILON: Final[float] = 1e-7
# Bracket width at which the lightness bisection stops.
_BRACKET_FLOOR: Final[float] = 1e-7
# Acceptance is looser than the convergence tolerance by this factor.
_ACCEPT_FACTOR: Final[float] = 5.0

_LAB_OFFSET: Final[float] = 4.0 / 29.0


# =============================================================================
# 1. OPTIONS & RESULTS
# =============================================================================

@dataclass(slots=True, frozen=True)
class ChromaControlOptions:
    """
    Search configuration.

    Attributes:
        aok: AOk configuration (surround and x0) used for every conversion.
            A surround name is accepted and wrapped into an ``AokConfig``.
        tolerance: Convergence tolerance on relative luminance Y.
        max_iterations: Upper bound for the lightness bisection.
        chroma_step: Decrement of the outer chroma scan.
        max_chroma_search_limit: Starting chroma of the outer scan.
        surround_gamma: Exponent of the L* -> Y map (3 is standard CIELAB).
            Unrelated to the AOk exponent ``p``.
        reference_white_y: Y of the reference white on the 0-100 scale.
        global_target_aok_chroma: Requested chroma for ``mode="target"``.
        logger: Optional advisory sink for every repair made by these
            options and by the solver calls that use them.
    """
    aok: AokConfig = field(default_factory=AokConfig)
    tolerance: float = 1e-4
    max_iterations: int = 50
    chroma_step: float = 0.005
    max_chroma_search_limit: float = 0.4
    surround_gamma: float = 3.0
    reference_white_y: float = 100.0
    global_target_aok_chroma: Optional[float] = None
    logger: Optional[AdvisoryLogger] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.aok, str):
            object.__setattr__(self, "aok", AdaptiveOklab(self.aok, logger=self.logger).config)
        elif not isinstance(self.aok, AokConfig):
            raise ValueError(f"aok must be an AokConfig or surround name, got {self.aok!r}")
        if not self.tolerance > 0.0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if int(self.max_iterations) < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}")
        object.__setattr__(self, "max_iterations", int(self.max_iterations))
        if not self.chroma_step > 0.0:
            raise ValueError(f"chroma_step must be positive, got {self.chroma_step}")
        if not self.max_chroma_search_limit >= 0.0:
            raise ValueError(
                f"max_chroma_search_limit must be non-negative, got {self.max_chroma_search_limit}"
            )
        if not self.reference_white_y > 0.0:
            raise ValueError(f"reference_white_y must be positive, got {self.reference_white_y}")
        if not self.surround_gamma > 1.0:
            advise(f"surround_gamma = {self.surround_gamma} must exceed 1; using 3.0",
                   self.logger)
            object.__setattr__(self, "surround_gamma", 3.0)


@dataclass(slots=True, frozen=True)
class LuminanceMatch:
    """Outcome of the inner lightness search."""
    found_aok_l: float
    final_srgb: Srgb
    final_cie_y: float
    final_out_of_gamut: bool
    iterations: int


@dataclass(slots=True, frozen=True)
class ChromaControlResult:
    """Outcome of ``adjust_aok_color_to_lab_l``."""
    aok_lch: AokLch
    srgb: Srgb
    relative_luminance: float
    out_of_gamut: bool
    iterations: int


# =============================================================================
# 2. L* -> Y
# =============================================================================

def lab_l_to_relative_y(l_star: float, gamma: float = 3.0, white_y: float = 100.0,
                        logger: Optional[AdvisoryLogger] = None) -> float:
    """
    Relative luminance Y in [0, 1] implied by a CIELAB lightness.

    The CIELAB inverse is generalised to an arbitrary exponent ``gamma``.
    The linear toe keeps the standard offset 4/29 and joins the power
    branch with matching value and slope at

        pivot = (4/29) * gamma / (gamma - 1)

    For ``gamma = 3`` this is exactly the CIELAB inverse (pivot = 6/29).

    Args:
        l_star: CIELAB lightness.
        gamma: Surround exponent; values <= 1 fall back to 3 with an advisory.
        white_y: Y of the reference white on the 0-100 scale.
        logger: Optional advisory sink.
    """
    if not gamma > 1.0:
        advise(f"gamma = {gamma} must exceed 1; using 3.0", logger)
        gamma = 3.0
    pivot = _LAB_OFFSET * gamma / (gamma - 1.0)
    pivot_t = pivot**gamma
    slope = (1.0 / gamma) * pivot_t ** (1.0 / gamma - 1.0)

    fy = max((l_star + 16.0) / 116.0, 0.0)
    if fy > pivot:
        y = fy**gamma
    else:
        y = (fy - _LAB_OFFSET) / slope
    return min(max(y * white_y / 100.0, 0.0), 1.0)


# =============================================================================
# 3. INNER SEARCH KERNEL (Numba)
# =============================================================================

@njit(cache=True)
def _evaluate(l: float, a: float, b: float, inv_p: float,
              rgb_out: np.ndarray) -> float:
    """
    AOk (L, a, b) with a, b already divided by k -> encoded sRGB in
    ``rgb_out``. Returns Y of the clamped color.
    """
    lms = np.empty(3)
    for j in range(3):
        v = l * M2_OKLAB_INV_T[0, j] + a * M2_OKLAB_INV_T[1, j] + b * M2_OKLAB_INV_T[2, j]
        lms[j] = sign_pow_scalar(v, inv_p)
    linear = np.empty(3)
    for j in range(3):
        linear[j] = (lms[0] * M1_OKLAB_INV_T[0, j] + lms[1] * M1_OKLAB_INV_T[1, j]
                     + lms[2] * M1_OKLAB_INV_T[2, j])
    encoded = _srgb_encode_kernel(linear)
    clamped = np.empty(3)
    for j in range(3):
        rgb_out[j] = encoded[j]
        clamped[j] = min(max(encoded[j], 0.0), 1.0)
    lin_clamped = _srgb_decode_kernel(clamped)
    return (LUMINANCE_WEIGHTS[0] * lin_clamped[0] + LUMINANCE_WEIGHTS[1] * lin_clamped[1]
            + LUMINANCE_WEIGHTS[2] * lin_clamped[2])


@njit(cache=True)
def _out_of_gamut(rgb: np.ndarray) -> bool:
    for j in range(3):
        if rgb[j] < -GAMUT_EPSILON or rgb[j] > 1.0 + GAMUT_EPSILON:
            return True
    return False


@njit(cache=True)
def _find_aok_l_kernel(target_y: float, chroma: float, hue_deg: float,
                       p: float, k: float, tol: float, max_iter: int
                       ) -> Tuple[float, float, float, float, float, bool, int]:
    inv_p = 1.0 / p
    inv_k = 0.0 if k == 0.0 else 1.0 / k
    a = chroma * np.cos(hue_deg * DEG2RAD) * inv_k
    b = chroma * np.sin(hue_deg * DEG2RAD) * inv_k

    low = 0.0
    high = 1.0
    best_l = min(max(target_y, 0.0), 1.0)
    best_oog = True
    best_diff = np.inf

    rgb = np.empty(3)
    iterations = 0
    while iterations < max_iter:
        mid = 0.5 * (low + high)
        if high - low < _BRACKET_FLOOR:
            break
        y = _evaluate(mid, a, b, inv_p, rgb)
        oog = _out_of_gamut(rgb)
        diff = y - target_y

        if not oog:
            if best_oog or abs(diff) < abs(best_diff):
                best_l = mid
                best_oog = False
                best_diff = diff
            if abs(diff) < tol:
                break
        elif best_oog and abs(diff) < abs(best_diff):
            best_l = mid
            best_diff = diff

        # Out-of-gamut channels steer the bracket before the sign of dY does.
        if rgb[0] > 1.0 or rgb[1] > 1.0 or rgb[2] > 1.0:
            high = mid
        elif rgb[0] < 0.0 or rgb[1] < 0.0 or rgb[2] < 0.0:
            low = mid
        elif diff < 0.0:
            low = mid
        else:
            high = mid
        iterations += 1

    y = _evaluate(best_l, a, b, inv_p, rgb)
    final_oog = _out_of_gamut(rgb) or abs(y - target_y) > _ACCEPT_FACTOR * tol
    return best_l, rgb[0], rgb[1], rgb[2], y, final_oog, iterations


# =============================================================================
# 4. PUBLIC SOLVER
# =============================================================================

def _resolve_options(options: Optional[ChromaControlOptions]) -> ChromaControlOptions:
    if options is None:
        return ChromaControlOptions()
    if not isinstance(options, ChromaControlOptions):
        raise TypeError(f"options must be ChromaControlOptions, got {type(options).__name__}")
    return options


def _validate_l_star(l_star: float) -> float:
    value = float(l_star)
    if math.isnan(value) or value < 0.0 or value > 100.0:
        raise ValueError(f"Target L* must lie in [0, 100], got {l_star}")
    return value


def _match(converter: AdaptiveOklab, chroma: float, hue: float, target_y: float,
           options: ChromaControlOptions) -> LuminanceMatch:
    l, r, g, b, y, oog, iterations = _find_aok_l_kernel(
        float(target_y), float(chroma), float(hue),
        converter.p, converter.correction,
        float(options.tolerance), int(options.max_iterations),
    )
    return LuminanceMatch(
        found_aok_l=float(l),
        final_srgb=Srgb(float(r), float(g), float(b)),
        final_cie_y=float(y),
        final_out_of_gamut=bool(oog),
        iterations=int(iterations),
    )


def find_aok_l_for_target_y(chroma: float, hue: float, target_y: float,
                            options: Optional[ChromaControlOptions] = None) -> LuminanceMatch:
    """
    Bisects AOk lightness at fixed chroma and hue to hit a relative luminance.

    Each step converts (L, C, h) through the AOk inverse to sRGB and measures
    Y on the clamped color. The best in-gamut candidate (smallest |dY|) is
    kept; before any in-gamut candidate is seen the best out-of-gamut one is
    tracked instead. The search stops when an in-gamut candidate is within
    ``tolerance``, after ``max_iterations`` steps, or when the bracket is
    narrower than 1e-7.

    ``final_out_of_gamut`` is also set when the final |dY| exceeds
    5 * ``tolerance``; the color is then a best-effort approximation.
    """
    opts = _resolve_options(options)
    converter = AdaptiveOklab(opts.aok, logger=opts.logger)
    return _match(converter, max(float(chroma), 0.0), normalize_hue(float(hue)),
                  target_y, opts)


def _max_chroma(converter: AdaptiveOklab, hue: float, target_y: float,
                opts: ChromaControlOptions) -> float:
    accept = _ACCEPT_FACTOR * opts.tolerance
    current = opts.max_chroma_search_limit
    while current >= -opts.chroma_step / 2.0:
        chroma = max(0.0, current)
        res = _match(converter, chroma, hue, target_y, opts)
        if not res.final_out_of_gamut and abs(res.final_cie_y - target_y) < accept:
            return chroma
        current -= opts.chroma_step
    return 0.0


def find_max_aok_chroma_for_lab_l(hue: float, l_star: float,
                                  options: Optional[ChromaControlOptions] = None) -> float:
    """
    Largest AOk chroma at ``hue`` whose luminance-matched color is in gamut.

    Chroma is scanned downward from ``max_chroma_search_limit`` in steps of
    ``chroma_step``. Returns 0 when no chromatic solution exists.

    Raises:
        ValueError: If ``l_star`` is outside [0, 100].
    """
    opts = _resolve_options(options)
    l_value = _validate_l_star(l_star)
    target_y = lab_l_to_relative_y(l_value, opts.surround_gamma, opts.reference_white_y,
                                   logger=opts.logger)
    converter = AdaptiveOklab(opts.aok, logger=opts.logger)
    return _max_chroma(converter, normalize_hue(float(hue)), target_y, opts)


def _hint_components(hint: Any) -> Tuple[float, float]:
    if isinstance(hint, AokLch):
        return hint.C, hint.h
    arr = np.asarray(hint, dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"hint must be an AokLch or an (L, C, h) triple, got shape {arr.shape}")
    return float(arr[1]), float(arr[2])


def adjust_aok_color_to_lab_l(hint: Union[AokLch, Any], l_star: float,
                              mode: ChromaMode = "clip",
                              options: Optional[ChromaControlOptions] = None
                              ) -> ChromaControlResult:
    """
    Fits an AOk color to a target CIELAB lightness.

    Args:
        hint: AOk LCh giving the hue and, in ``"clip"`` mode, the requested
            chroma. Its L is ignored.
        l_star: Target CIELAB L* in [0, 100].
        mode: ``"clip"`` uses ``hint.C``; ``"target"`` uses
            ``options.global_target_aok_chroma``. Either is clipped to the
            maximum achievable chroma.
        options: Search configuration.

    Raises:
        ValueError: On an invalid mode, a missing target chroma in
            ``"target"`` mode, a NaN hint, or ``l_star`` outside [0, 100].
    """
    opts = _resolve_options(options)
    if mode not in ("clip", "target"):
        raise ValueError(f"mode must be 'clip' or 'target', got {mode!r}")
    requested_c, hint_h = _hint_components(hint)
    if math.isnan(requested_c) or math.isnan(hint_h):
        raise ValueError("hint chroma and hue must be numbers")
    if mode == "target":
        target_c = opts.global_target_aok_chroma
        if target_c is None or math.isnan(float(target_c)):
            raise ValueError("mode='target' requires options.global_target_aok_chroma")
        requested_c = float(target_c)

    l_value = _validate_l_star(l_star)
    hue = normalize_hue(hint_h)
    target_y = lab_l_to_relative_y(l_value, opts.surround_gamma, opts.reference_white_y,
                                   logger=opts.logger)
    converter = AdaptiveOklab(opts.aok, logger=opts.logger)

    max_c = _max_chroma(converter, hue, target_y, opts)
    final_c = max(0.0, min(requested_c, max_c))
    res = _match(converter, final_c, hue, target_y, opts)
    return ChromaControlResult(
        aok_lch=AokLch(res.found_aok_l, final_c, hue),
        srgb=res.final_srgb,
        relative_luminance=res.final_cie_y,
        out_of_gamut=res.final_out_of_gamut,
        iterations=res.iterations,
    )
