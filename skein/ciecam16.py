# -*- coding: utf-8 -*-
"""
Skein: Weaving the mathematics of color perception
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

CIECAM16
========
Forward CIECAM16 appearance model and the CAM16-UCS uniform space built on it.

Pipeline (CIE 224:2017):
    1. CAT16 cone responses of sample and white, von Kries gains with the
       degree of adaptation D.
    2. Post-adaptation compression 400 x^0.42 / (x^0.42 + 27.13) with
       x = F_L |R_c| / 100 (sign preserved).
    3. Opponent pair (a, b), hue h, eccentricity e_t.
    4. Achromatic response A; correlates J, Q, C, M, s.

Sample XYZ is expected on the Y = 100 scale of the reference white. The
correlates never carry NaN: non-finite intermediates resolve to 0.

CAM16-UCS (Li et al. 2017) with c1 = 0.007, c2 = 0.0228:

    J' = 1.7 J / (1 + c1 J)
    M' = ln(1 + c2 M) / c2
    a' = M' cos h,  b' = M' sin h

References:
    - Li, C. et al. (2017). "Comprehensive color solutions: CAM16, CAT16 and
      CAM16-UCS". Color Research & Application 42(6).
"""

from __future__ import annotations

import functools
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final, List, Literal, Mapping, NamedTuple, Optional, Tuple, Union

import numpy as np

from .cat import CAT_METHODS
from .css import parse_hex
from .diagnostics import AdvisoryLogger, advise
from .metrics import delta_e_76
from .primitives import DEG2RAD, RAD2DEG, ArrayFloat, cartesian_to_polar, handle_shapes, polar_to_cartesian
from .records import Cam16, Cam16Ucs, Cam16UcsPolar, ColorRecord, Srgb, Xyz
from .xyz import _srgb_to_xyz_raw, resolve_white

__all__ = [
    "CiecamSurround",
    "SURROUND_PARAMETERS",
    "UCS_C1",
    "UCS_C2",
    "ViewingConditions",
    "xyz_to_ciecam16",
    "srgb_to_ciecam16",
    "cam16_to_ucs",
    "ucs_to_cam16",
    "srgb_to_cam16_ucs",
    "ucs_to_polar",
    "polar_to_ucs",
    "cam16_ucs_difference",
    "interpolate_cam16_ucs",
    "interpolate_cam16_ucs_polar",
    "rotate_cam16_ucs_hue",
    "complementary_cam16_ucs",
    "analogous_cam16_ucs",
    "triadic_cam16_ucs",
]

CiecamSurround = Literal["average", "dim", "dark"]

# (F, c, N_c)
SURROUND_PARAMETERS: Final[Mapping[str, Tuple[float, float, float]]] = MappingProxyType({
    "average": (1.0, 0.69, 1.0),
    "dim": (0.9, 0.59, 0.9),
    "dark": (0.8, 0.525, 0.8),
})

UCS_C1: Final[float] = 0.007
UCS_C2: Final[float] = 0.0228

_M16_T: Final[ArrayFloat] = CAT_METHODS["cat16"].T.copy()
_M16_T.flags.writeable = False

_FL_FLOOR: Final[float] = 1e-4
_AW_FLOOR: Final[float] = 1e-5
_YB_MIN: Final[float] = 0.1
_YB_MAX: Final[float] = 100.0


# =============================================================================
# 1. VIEWING CONDITIONS
# =============================================================================

@dataclass(slots=True, frozen=True)
class ViewingConditions:
    """
    Observation environment of the CIECAM16 forward model.

    Attributes:
        adapting_luminance: L_A in cd/m^2. Negative values are mirrored
            with an advisory.
        background_luminance: Y_b relative to Y_w = 100. Non-positive values
            fall back to 0.1 with an advisory; the model clamps to [0.1, 100].
        surround: ``"average"``, ``"dim"`` or ``"dark"``. Unknown names fall
            back to ``"average"`` with an advisory.
        reference_white: Illuminant name, ``Xyz`` record or XYZ triple on the
            Y = 100 scale. Stored as a tuple.
        degree_of_adaptation: D in [0, 1]; ``None`` (or NaN) derives D from
            L_A and F.
        logger: Optional advisory sink for the repairs above. Not part of
            equality or the hash.

    Raises:
        ValueError: On non-finite luminances or a white with Y <= 0.
    """
    adapting_luminance: float = 40.0
    background_luminance: float = 20.0
    surround: CiecamSurround = "average"
    reference_white: Any = "D65"
    degree_of_adaptation: Optional[float] = None
    logger: Optional[AdvisoryLogger] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        la = float(self.adapting_luminance)
        yb = float(self.background_luminance)
        if not (math.isfinite(la) and math.isfinite(yb)):
            raise ValueError(
                f"Luminances must be finite, got L_A={self.adapting_luminance}, "
                f"Y_b={self.background_luminance}"
            )
        if la < 0.0:
            advise(f"adapting_luminance = {la} is negative; using {-la}", self.logger)
            la = -la
        if yb <= 0.0:
            advise(f"background_luminance = {yb} must be positive; using {_YB_MIN}", self.logger)
            yb = _YB_MIN
        object.__setattr__(self, "adapting_luminance", la)
        object.__setattr__(self, "background_luminance", yb)

        if self.surround not in SURROUND_PARAMETERS:
            advise(f"Unknown CIECAM16 surround {self.surround!r}; using 'average'", self.logger)
            object.__setattr__(self, "surround", "average")

        white = tuple(float(v) for v in resolve_white(self.reference_white))
        if not (all(math.isfinite(v) for v in white) and white[1] > 0.0):
            raise ValueError(f"Reference white must be finite with Y > 0, got {white}")
        object.__setattr__(self, "reference_white", white)

        d = self.degree_of_adaptation
        if d is not None:
            d = float(d)
            d = None if math.isnan(d) else min(max(d, 0.0), 1.0)
            object.__setattr__(self, "degree_of_adaptation", d)


class _Derived(NamedTuple):
    """Sample-independent quantities of one set of viewing conditions."""
    c: float
    n_c: float
    f_l: float
    n: float
    n_bb: float
    z: float
    gains: ArrayFloat
    a_w: float


def _compress(rgb_c: ArrayFloat, f_l: float) -> ArrayFloat:
    x = (f_l * np.abs(rgb_c) / 100.0) ** 0.42
    return np.sign(rgb_c) * 400.0 * x / (x + 27.13)


def _achromatic(rgb_a: ArrayFloat, n_bb: float) -> ArrayFloat:
    return (2.0 * rgb_a[..., 0] + rgb_a[..., 1] + rgb_a[..., 2] / 20.0 - 0.305) * n_bb


@functools.lru_cache(maxsize=32)
def _derive(conditions: ViewingConditions) -> _Derived:
    F, c, n_c = SURROUND_PARAMETERS[conditions.surround]
    la = conditions.adapting_luminance
    white = np.array(conditions.reference_white, dtype=np.float64)
    y_w = white[1]
    y_b = min(max(conditions.background_luminance, _YB_MIN), _YB_MAX)

    D = conditions.degree_of_adaptation
    if D is None:
        D = min(max(F * (1.0 - (1.0 / 3.6) * math.exp((-la - 42.0) / 92.0)), 0.0), 1.0)

    k4 = (1.0 / (5.0 * la + 1.0)) ** 4
    f_l = 0.2 * k4 * (5.0 * la) + 0.1 * (1.0 - k4) ** 2 * (5.0 * la) ** (1.0 / 3.0)
    f_l = max(f_l, _FL_FLOOR)

    n = y_b / y_w
    n_bb = 0.725 * (1.0 / n) ** 0.2
    z = 1.48 + math.sqrt(n_bb)

    rgb_w = np.dot(white, _M16_T)
    with np.errstate(divide="ignore", invalid="ignore"):
        gains = np.where(rgb_w != 0.0, D * y_w / rgb_w + (1.0 - D), 0.0)
    gains.flags.writeable = False

    a_w = float(_achromatic(_compress(rgb_w * gains, f_l), n_bb))
    return _Derived(c=c, n_c=n_c, f_l=f_l, n=n, n_bb=n_bb, z=z, gains=gains,
                    a_w=max(a_w, _AW_FLOOR))


def _resolve_conditions(conditions: Optional[ViewingConditions]) -> ViewingConditions:
    if conditions is None:
        return ViewingConditions()
    if not isinstance(conditions, ViewingConditions):
        raise TypeError(f"Expected ViewingConditions, got {type(conditions).__name__}")
    return conditions


# =============================================================================
# 2. FORWARD MODEL
# =============================================================================

def _brightness_and_saturation(J: ArrayFloat, M: ArrayFloat, d: _Derived
                               ) -> Tuple[ArrayFloat, ArrayFloat]:
    Q = (4.0 / d.c) * np.sqrt(J / 100.0) * (d.a_w + 4.0) * d.f_l**0.25
    s = 100.0 * np.sqrt(M / Q)
    return Q, s


def _xyz_to_ciecam16_raw(xyz: ArrayFloat, d: _Derived) -> ArrayFloat:
    """(N, 3) XYZ on the Y = 100 scale -> (N, 9) correlates."""
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        rgb_a = _compress(np.dot(xyz, _M16_T) * d.gains, d.f_l)
        Ra, Ga, Ba = rgb_a[:, 0], rgb_a[:, 1], rgb_a[:, 2]

        a = Ra - 12.0 * Ga / 11.0 + Ba / 11.0
        b = (Ra + Ga - 2.0 * Ba) / 9.0
        h_rad = np.arctan2(b, a)
        h = (h_rad * RAD2DEG) % 360.0
        e_t = 0.25 * (np.cos(h_rad + 2.0 * DEG2RAD) + 3.8)

        A = np.maximum(_achromatic(rgb_a, d.n_bb), 0.0)
        J = 100.0 * (A / d.a_w) ** (d.c * d.z)

        t = ((50000.0 / 13.0) * d.n_c * d.n_bb * e_t * np.hypot(a, b)
             / (Ra + Ga + (21.0 / 20.0) * Ba + 0.305))
        C = np.abs(t) ** 0.9 * np.sqrt(J / 100.0) * (1.64 - 0.29**d.n) ** 0.73
        M = C * d.f_l**0.25
        Q, s = _brightness_and_saturation(J, M, d)

        out = np.stack([J, Q, C, M, s, h, h, M * np.cos(h_rad), M * np.sin(h_rad)], axis=-1)
    return np.where(np.isfinite(out), out, 0.0)


def xyz_to_ciecam16(xyz: Any, conditions: Optional[ViewingConditions] = None) -> Any:
    """
    CIECAM16 correlates of XYZ (Y = 100 scale).

    Args:
        xyz: ``Xyz`` record, ``(3,)`` or ``(N, 3)`` array.
        conditions: Viewing conditions; defaults to ``ViewingConditions()``.

    Returns:
        ``Cam16`` for a record, otherwise ``(9,)`` / ``(N, 9)`` arrays in the
        field order of ``Cam16`` (J, Q, C, M, s, h, H, ac, bc). The hue
        quadrature H is reported as the hue angle.
    """
    return _xyz_to_ciecam16(xyz, _derive(_resolve_conditions(conditions)))


@handle_shapes(Xyz, Cam16)
def _xyz_to_ciecam16(xyz: ArrayFloat, derived: _Derived) -> ArrayFloat:
    return _xyz_to_ciecam16_raw(xyz, derived)


def srgb_to_ciecam16(srgb: Any, conditions: Optional[ViewingConditions] = None) -> Any:
    """
    CIECAM16 correlates of encoded sRGB.

    ``srgb`` may also be a hex string. The D65 XYZ of the color is scaled to
    Y = 100 before entering the model.

    Raises:
        ValueError: If a string is not a valid hex color.
    """
    if isinstance(srgb, str):
        parsed = parse_hex(srgb)
        if parsed is None:
            raise ValueError(f"Invalid hex color {srgb!r}")
        srgb = parsed
    return _srgb_to_ciecam16(srgb, _derive(_resolve_conditions(conditions)))


@handle_shapes(Srgb, Cam16)
def _srgb_to_ciecam16(rgb: ArrayFloat, derived: _Derived) -> ArrayFloat:
    return _xyz_to_ciecam16_raw(_srgb_to_xyz_raw(rgb) * 100.0, derived)


# =============================================================================
# 3. CAM16-UCS
# =============================================================================

def _cam16_rows(cam16: Any) -> Tuple[ArrayFloat, bool]:
    if isinstance(cam16, Cam16):
        return cam16.to_array()[np.newaxis, :], True
    arr = np.asarray(cam16, dtype=np.float64)
    if arr.ndim not in (1, 2) or arr.shape[-1] != 9:
        raise ValueError(f"Expected Cam16 correlates with last dimension 9, got shape {arr.shape}")
    return np.atleast_2d(arr), arr.ndim == 1


def cam16_to_ucs(cam16: Any) -> Any:
    """
    CAM16-UCS coordinates (J', a', b') from CIECAM16 correlates.

    Only J, M and h are used. Accepts a ``Cam16`` record or the ``(9,)`` /
    ``(N, 9)`` arrays produced by the forward model.
    """
    rows, single = _cam16_rows(cam16)
    J, M, h = rows[:, 0], rows[:, 3], rows[:, 5] * DEG2RAD
    j_p = (1.0 + 100.0 * UCS_C1) * J / (1.0 + UCS_C1 * J)
    m_p = np.log1p(UCS_C2 * M) / UCS_C2
    out = np.stack([j_p, m_p * np.cos(h), m_p * np.sin(h)], axis=-1)
    if isinstance(cam16, Cam16):
        return Cam16Ucs.from_array(out[0])
    return out[0] if single else out


def ucs_to_cam16(ucs: Any, conditions: Optional[ViewingConditions] = None) -> Any:
    """
    Inverts the UCS compression back to J, M and h.

    The remaining correlates depend on the viewing conditions
    (default ``ViewingConditions()``): C = M / F_L^0.25, Q and s follow the
    forward formulas, H = h.
    """
    return _ucs_to_cam16(ucs, _derive(_resolve_conditions(conditions)))


@handle_shapes(Cam16Ucs, Cam16)
def _ucs_to_cam16(ucs: ArrayFloat, derived: _Derived) -> ArrayFloat:
    j_p = ucs[:, 0]
    J = j_p / (1.0 + UCS_C1 * (100.0 - j_p))
    m_p = np.hypot(ucs[:, 1], ucs[:, 2])
    M = np.expm1(UCS_C2 * m_p) / UCS_C2
    h_rad = np.arctan2(ucs[:, 2], ucs[:, 1])
    h = (h_rad * RAD2DEG) % 360.0
    with np.errstate(divide="ignore", invalid="ignore"):
        C = M / derived.f_l**0.25
        Q, s = _brightness_and_saturation(J, M, derived)
        out = np.stack([J, Q, C, M, s, h, h, M * np.cos(h_rad), M * np.sin(h_rad)], axis=-1)
    return np.where(np.isfinite(out), out, 0.0)


def srgb_to_cam16_ucs(srgb: Any, conditions: Optional[ViewingConditions] = None) -> Any:
    """Encoded sRGB (record, array or hex string) -> CAM16-UCS."""
    return cam16_to_ucs(srgb_to_ciecam16(srgb, conditions))


@handle_shapes(Cam16Ucs, Cam16UcsPolar)
def ucs_to_polar(ucs: ArrayFloat) -> ArrayFloat:
    """(J', a', b') -> (J', M', h)."""
    return cartesian_to_polar(ucs)


@handle_shapes(Cam16UcsPolar, Cam16Ucs)
def polar_to_ucs(polar: ArrayFloat) -> ArrayFloat:
    return polar_to_cartesian(polar)


def _ucs_array(ucs: Any) -> Any:
    if isinstance(ucs, Cam16Ucs):
        return ucs.to_array()
    if hasattr(ucs, "to_array"):
        raise TypeError(f"Expected Cam16Ucs, got {type(ucs).__name__}")
    return ucs


def cam16_ucs_difference(ucs1: Any, ucs2: Any) -> Union[float, ArrayFloat]:
    """Euclidean distance Delta E' in CAM16-UCS. One side may be a batch."""
    return delta_e_76(_ucs_array(ucs1), _ucs_array(ucs2))


def interpolate_cam16_ucs_polar(polar1: Any, polar2: Any, t: float) -> Cam16UcsPolar:
    """
    Linear blend of two polar UCS colors, hue along the shorter arc.

    ``t = 0`` gives ``polar1``, ``t = 1`` gives ``polar2``. The result hue is
    normalized to [0, 360).
    """
    for polar in (polar1, polar2):
        if isinstance(polar, ColorRecord) and not isinstance(polar, Cam16UcsPolar):
            raise TypeError(f"Expected Cam16UcsPolar, got {type(polar).__name__}")
    j1, c1, h1 = (float(v) for v in polar1)
    j2, c2, h2 = (float(v) for v in polar2)
    dh = h2 - h1
    if dh > 180.0:
        dh -= 360.0
    elif dh < -180.0:
        dh += 360.0
    return Cam16UcsPolar(
        j1 + (j2 - j1) * t,
        c1 + (c2 - c1) * t,
        (h1 + dh * t) % 360.0,
    )


def interpolate_cam16_ucs(ucs1: Any, ucs2: Any, t: float) -> Any:
    """
    Straight-line blend in (J', a', b').

    Two ``Cam16Ucs`` records give a record; arrays broadcast like
    ``cam16_ucs_difference``.
    """
    start = np.asarray(_ucs_array(ucs1), dtype=np.float64)
    end = np.asarray(_ucs_array(ucs2), dtype=np.float64)
    out = start + (end - start) * t
    if isinstance(ucs1, Cam16Ucs) and isinstance(ucs2, Cam16Ucs):
        return Cam16Ucs.from_array(out)
    return out


# =============================================================================
# 4. HUE HARMONIES
# =============================================================================

@handle_shapes(Cam16Ucs, Cam16Ucs)
def rotate_cam16_ucs_hue(ucs: ArrayFloat, degrees: float) -> ArrayFloat:
    """Turns the UCS hue by ``degrees`` with J' and M' held fixed."""
    polar = cartesian_to_polar(ucs)
    polar[:, 2] = (polar[:, 2] + degrees) % 360.0
    return polar_to_cartesian(polar)


def complementary_cam16_ucs(ucs: Any) -> Any:
    return rotate_cam16_ucs_hue(ucs, 180.0)


def analogous_cam16_ucs(ucs: Any, angle: float = 30.0, count: int = 2) -> List[Any]:
    """
    Neighbours at ``-angle, +angle, -2 angle, +2 angle, ...``.

    Returns ``2 * count`` colors; the base color is not included.
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    colors = []
    for i in range(1, count + 1):
        colors.append(rotate_cam16_ucs_hue(ucs, -angle * i))
        colors.append(rotate_cam16_ucs_hue(ucs, angle * i))
    return colors


def triadic_cam16_ucs(ucs: Any) -> List[Any]:
    """The base color followed by its +120 and +240 degree rotations."""
    return [ucs, rotate_cam16_ucs_hue(ucs, 120.0), rotate_cam16_ucs_hue(ucs, 240.0)]
