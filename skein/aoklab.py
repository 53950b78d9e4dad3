# -*- coding: utf-8 -*-
"""
Skein: Weaving the mathematics of color perception
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Adaptive Oklab (AOk)
====================
Oklab with the 1/3 post-LMS exponent replaced by a surround-specific value
``p``. A scalar correction ``k = x0 ** (1/3 - p)`` on (a, b) keeps chroma in
the same units as standard Oklab for an LMS magnitude of ``x0``. Hue angles
do not depend on ``p`` for near-neutral colors; for fixed ``p`` they never
depend on ``x0``.

The preset exponents solve ``p = ln(0.40) / (3 ln(L*/100))`` for the
lightness at which each surround places its characteristic mid tone:

    ========  =========  =======
    Surround  L*_std     p
    ========  =========  =======
    white     55.9       0.526
    gray      48.3       0.420
    dark      41.7       0.349
    ========  =========  =======
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from types import MappingProxyType
from typing import Any, Final, Literal, Mapping, Optional, Union

import numpy as np

from .css import format_hex, parse_hex
from .diagnostics import AdvisoryLogger, advise
from .oklab import M1_OKLAB_INV_T, M1_OKLAB_T, M2_OKLAB_INV_T, M2_OKLAB_T
from .primitives import (
    ArrayFloat,
    cartesian_to_polar,
    handle_shapes,
    polar_to_cartesian,
    sign_pow,
)
from .records import AokLab, AokLch, LinearSrgb, Srgb, Xyz
from .transfer import srgb_decode, srgb_encode
from .xyz import M_SRGB_TO_XYZ_T, M_XYZ_TO_SRGB_T

__all__ = [
    "Surround",
    "SURROUND_EXPONENTS",
    "SURROUND_REFERENCE_LIGHTNESS",
    "DEFAULT_SURROUND",
    "DEFAULT_X0",
    "DARK_SURROUND_MAX_LUX",
    "GRAY_SURROUND_MAX_LUX",
    "recommended_surround",
    "derive_surround_exponent",
    "AokConfig",
    "AdaptiveOklab",
]

Surround = Literal["white", "gray", "dark"]

SURROUND_EXPONENTS: Final[Mapping[str, float]] = MappingProxyType({
    "white": 0.526,
    "gray": 0.420,
    "dark": 0.349,
})

SURROUND_REFERENCE_LIGHTNESS: Final[Mapping[str, float]] = MappingProxyType({
    "white": 55.9,
    "gray": 48.3,
    "dark": 41.7,
})

DEFAULT_SURROUND: Final[str] = "gray"
DEFAULT_X0: Final[float] = 0.5

# Ambient illuminance (lux) below which each darker surround applies
DARK_SURROUND_MAX_LUX: Final[float] = 50.0
GRAY_SURROUND_MAX_LUX: Final[float] = 300.0


def recommended_surround(lux: float) -> str:
    """
    Picks a surround preset for the ambient illuminance.

    Cinema and dim rooms (below 50 lx) map to ``"dark"``, office lighting
    (below 300 lx) to ``"gray"``, brighter rooms and daylight to ``"white"``.

    Raises:
        ValueError: If ``lux`` is negative or not finite.
    """
    lux = float(lux)
    if not math.isfinite(lux) or lux < 0.0:
        raise ValueError(f"lux must be a finite non-negative number, got {lux}")
    if lux < DARK_SURROUND_MAX_LUX:
        return "dark"
    if lux < GRAY_SURROUND_MAX_LUX:
        return "gray"
    return "white"


def derive_surround_exponent(l_star_std: float, adapted_l: float = 0.40) -> float:
    """
    Solves ``p = ln(adapted_l) / (3 ln(L*_std / 100))``.

    This is the exponent under which a color of CIELAB lightness
    ``l_star_std`` lands on AOk lightness ``adapted_l``.

    Raises:
        ValueError: If ``l_star_std`` is not in (0, 100) or ``adapted_l`` is
            not in (0, 1).
    """
    if not 0.0 < l_star_std < 100.0:
        raise ValueError(f"l_star_std must lie in (0, 100), got {l_star_std}")
    if not 0.0 < adapted_l < 1.0:
        raise ValueError(f"adapted_l must lie in (0, 1), got {adapted_l}")
    return math.log(adapted_l) / (3.0 * math.log(l_star_std / 100.0))


def _repair_surround(surround: Any, logger: Optional[AdvisoryLogger]) -> str:
    key = surround.strip().lower() if isinstance(surround, str) else None
    if key in SURROUND_EXPONENTS:
        return key
    advise(f"Unknown surround {surround!r}; falling back to '{DEFAULT_SURROUND}'", logger)
    return DEFAULT_SURROUND


def _repair_x0(x0: Any, logger: Optional[AdvisoryLogger]) -> float:
    if isinstance(x0, bool) or not isinstance(x0, (Real, np.floating, np.integer)):
        advise(f"x0 must be a number, got {x0!r}; falling back to {DEFAULT_X0}", logger)
        return DEFAULT_X0
    value = float(x0)
    if not math.isfinite(value) or value < 0.0 or value > 1.0:
        advise(f"x0 = {x0!r} outside (0, 1]; falling back to {DEFAULT_X0}", logger)
        return DEFAULT_X0
    return value


@dataclass(slots=True, frozen=True)
class AokConfig:
    """
    Immutable AOk configuration.

    Soft-invalid values are repaired on construction: an unknown surround
    becomes ``"gray"`` and an ``x0`` outside [0, 1] becomes 0.5, each with a
    ``ColorAdvisory``.
    """
    surround: str = DEFAULT_SURROUND
    x0: float = DEFAULT_X0

    def __post_init__(self) -> None:
        object.__setattr__(self, "surround", _repair_surround(self.surround, None))
        object.__setattr__(self, "x0", _repair_x0(self.x0, None))

    @property
    def p(self) -> float:
        return SURROUND_EXPONENTS[self.surround]

    @property
    def correction(self) -> float:
        return 0.0 if self.x0 == 0.0 else self.x0 ** (1.0 / 3.0 - self.p)


# =============================================================================
# KERNELS
# =============================================================================

def _aok_forward_raw(rgb: ArrayFloat, p: float, k: float) -> ArrayFloat:
    # Physical light: negative channels are clamped before the LMS step.
    lms = np.dot(np.maximum(rgb, 0.0), M1_OKLAB_T)
    lab = np.dot(sign_pow(lms, p), M2_OKLAB_T)
    lab[:, 1:] *= k
    return lab


def _aok_inverse_raw(aok: ArrayFloat, p: float, k: float) -> ArrayFloat:
    inv_k = 0.0 if k == 0.0 else 1.0 / k
    lab = np.array(aok, dtype=np.float64)
    lab[:, 1:] *= inv_k
    lms_ = np.dot(lab, M2_OKLAB_INV_T)
    return np.dot(sign_pow(lms_, 1.0 / p), M1_OKLAB_INV_T)


@handle_shapes(LinearSrgb, AokLab)
def _from_linear_srgb(rgb: ArrayFloat, p: float, k: float) -> ArrayFloat:
    return _aok_forward_raw(rgb, p, k)


@handle_shapes(AokLab, LinearSrgb)
def _to_linear_srgb(aok: ArrayFloat, p: float, k: float) -> ArrayFloat:
    return _aok_inverse_raw(aok, p, k)


@handle_shapes(Srgb, AokLab)
def _from_srgb(rgb: ArrayFloat, p: float, k: float) -> ArrayFloat:
    return _aok_forward_raw(srgb_decode(rgb), p, k)


@handle_shapes(AokLab, Srgb)
def _to_srgb(aok: ArrayFloat, p: float, k: float) -> ArrayFloat:
    return srgb_encode(_aok_inverse_raw(aok, p, k))


@handle_shapes(Xyz, AokLab)
def _from_xyz(xyz: ArrayFloat, p: float, k: float) -> ArrayFloat:
    return _aok_forward_raw(np.dot(xyz, M_XYZ_TO_SRGB_T), p, k)


@handle_shapes(AokLab, Xyz)
def _to_xyz(aok: ArrayFloat, p: float, k: float) -> ArrayFloat:
    return np.dot(_aok_inverse_raw(aok, p, k), M_SRGB_TO_XYZ_T)


@handle_shapes(AokLab, AokLch)
def _to_lch(aok: ArrayFloat) -> ArrayFloat:
    return cartesian_to_polar(aok)


@handle_shapes(AokLch, AokLab)
def _from_lch(lch: ArrayFloat) -> ArrayFloat:
    return polar_to_cartesian(lch)


@handle_shapes(AokLch, Srgb)
def _lch_to_srgb(lch: ArrayFloat, p: float, k: float) -> ArrayFloat:
    return srgb_encode(_aok_inverse_raw(polar_to_cartesian(lch), p, k))


# =============================================================================
# PUBLIC CLASS
# =============================================================================

class AdaptiveOklab:
    """
    Surround-adaptive Oklab converter.

    ``p`` and the hue correction ``k`` are computed once at construction and
    never change, so a single instance can be shared freely.

    Args:
        surround: ``"white"``, ``"gray"`` or ``"dark"``, or an ``AokConfig``.
        x0: Representative LMS magnitude for the correction factor.
        logger: Optional callable receiving advisory messages.

    Example:
        >>> aok = AdaptiveOklab("dark")
        >>> lab = aok.from_srgb(Srgb(0.7, 0.4, 0.2))
        >>> aok.to_srgb(lab)
    """

    __slots__ = ("_config", "_p", "_k")

    def __init__(self, surround: Union[str, AokConfig] = DEFAULT_SURROUND,
                 x0: float = DEFAULT_X0,
                 logger: Optional[AdvisoryLogger] = None) -> None:
        if isinstance(surround, AokConfig):
            config = surround
        else:
            config = AokConfig(_repair_surround(surround, logger), _repair_x0(x0, logger))
        if config.x0 == 0.0:
            advise("x0 = 0 zeroes the hue correction (k = 0); a and b collapse to 0", logger)
        self._config = config
        self._p = config.p
        self._k = config.correction

    def __repr__(self) -> str:
        return (f"AdaptiveOklab(surround={self._config.surround!r}, "
                f"x0={self._config.x0!r}, p={self._p}, k={self._k:.6f})")

    # --- Cached parameters ---

    @property
    def config(self) -> AokConfig:
        return self._config

    @property
    def surround(self) -> str:
        return self._config.surround

    @property
    def x0(self) -> float:
        return self._config.x0

    @property
    def p(self) -> float:
        """Post-LMS exponent for the configured surround."""
        return self._p

    @property
    def correction(self) -> float:
        """Hue-preserving factor ``k`` applied to a and b."""
        return self._k

    @property
    def params(self) -> Mapping[str, Any]:
        return MappingProxyType({
            "surround": self._config.surround,
            "x0": self._config.x0,
            "p": self._p,
            "correction": self._k,
        })

    # --- Conversions ---

    def from_linear_srgb(self, rgb: Any) -> Any:
        """Linear sRGB -> AOk. Negative channels are clamped to 0 first."""
        return _from_linear_srgb(rgb, self._p, self._k)

    def to_linear_srgb(self, aok: Any) -> Any:
        """AOk -> linear sRGB. With ``k = 0`` the chroma axes are dropped."""
        return _to_linear_srgb(aok, self._p, self._k)

    def from_srgb(self, rgb: Any) -> Any:
        return _from_srgb(rgb, self._p, self._k)

    def to_srgb(self, aok: Any) -> Any:
        """AOk -> encoded sRGB, unclipped."""
        return _to_srgb(aok, self._p, self._k)

    def from_xyz(self, xyz: Any) -> Any:
        return _from_xyz(xyz, self._p, self._k)

    def to_xyz(self, aok: Any) -> Any:
        return _to_xyz(aok, self._p, self._k)

    def from_hex(self, text: str) -> Optional[AokLab]:
        """Returns ``None`` when ``text`` is not a valid hex color."""
        srgb = parse_hex(text)
        if srgb is None:
            return None
        return self.from_srgb(srgb)

    def to_hex(self, aok: AokLab) -> str:
        return format_hex(self.to_srgb(aok))

    @staticmethod
    def to_lch(aok: Any) -> Any:
        return _to_lch(aok)

    @staticmethod
    def from_lch(lch: Any) -> Any:
        return _from_lch(lch)

    def to_srgb_from_lch(self, lch: Any) -> Any:
        """AOk LCh -> encoded sRGB, unclipped."""
        return _lch_to_srgb(lch, self._p, self._k)
