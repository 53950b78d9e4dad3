# -*- coding: utf-8 -*-
"""
Skein: Weaving the mathematics of color perception
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Typed Color Records
===================
Every color value is a small frozen record of floats. Records have no
identity and are never mutated; transforms always build new ones.

The records exist so that a CIELAB triple cannot be fed to a function that
expects Oklab by accident: typed transforms check the record class at the
call boundary and raise ``TypeError`` on a mismatch. Plain ``(3,)`` and
``(N, 3)`` arrays are still accepted everywhere for batch work.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Iterator, TypeVar

import numpy as np

from .diagnostics import ShapeError

__all__ = [
    "ColorRecord",
    "Srgb",
    "LinearSrgb",
    "Xyz",
    "Lab",
    "Lch",
    "Oklab",
    "OkLch",
    "AokLab",
    "AokLch",
    "DisplayP3",
    "Rec2020",
    "Cam16",
    "Cam16Ucs",
    "Cam16UcsPolar",
]

R = TypeVar("R", bound="ColorRecord")


class ColorRecord:
    """Shared behavior of all color records (slot-less mixin)."""

    __slots__ = ()

    def __iter__(self) -> Iterator[float]:
        return (getattr(self, name) for name in self.__slots__)

    def to_array(self) -> np.ndarray:
        """Components as a float64 vector, in declaration order."""
        return np.array(tuple(self), dtype=np.float64)

    @classmethod
    def from_array(cls: type[R], values: Any) -> R:
        """
        Builds a record from a flat sequence of components.

        Raises:
            ShapeError: If the number of components does not match the record.
        """
        try:
            arr = np.asarray(values, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise ShapeError(f"{cls.__name__} components must be numeric") from exc
        n_fields = len(fields(cls))  # type: ignore[arg-type]
        if arr.shape != (n_fields,):
            raise ShapeError(
                f"{cls.__name__} expects {n_fields} components, got shape {arr.shape}"
            )
        return cls(*(float(v) for v in arr))

    def replace(self: R, **changes: float) -> R:
        """Returns a copy with the given components replaced."""
        return replace(self, **changes)  # type: ignore[type-var]


# ---------------------------------------------------------------------------
# RGB encodings
# ---------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class Srgb(ColorRecord):
    """Encoded (non-linear) sRGB, nominal range [0, 1], never clamped."""
    r: float
    g: float
    b: float


@dataclass(slots=True, frozen=True)
class LinearSrgb(ColorRecord):
    """sRGB with the transfer curve removed; linear in light."""
    r: float
    g: float
    b: float


@dataclass(slots=True, frozen=True)
class DisplayP3(ColorRecord):
    """Encoded Display P3 (sRGB transfer curve, P3-D65 primaries)."""
    r: float
    g: float
    b: float


@dataclass(slots=True, frozen=True)
class Rec2020(ColorRecord):
    """Encoded ITU-R BT.2020."""
    r: float
    g: float
    b: float


# ---------------------------------------------------------------------------
# Tristimulus and perceptual spaces
# ---------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class Xyz(ColorRecord):
    """CIE XYZ (D65), white at Y = 1."""
    X: float
    Y: float
    Z: float


@dataclass(slots=True, frozen=True)
class Lab(ColorRecord):
    """CIELAB, L in [0, 100]."""
    L: float
    a: float
    b: float


@dataclass(slots=True, frozen=True)
class Lch(ColorRecord):
    """Cylindrical CIELAB, hue in degrees [0, 360)."""
    L: float
    C: float
    h: float


@dataclass(slots=True, frozen=True)
class Oklab(ColorRecord):
    """Oklab, L in [0, 1]."""
    L: float
    a: float
    b: float


@dataclass(slots=True, frozen=True)
class OkLch(ColorRecord):
    """Cylindrical Oklab, hue in degrees [0, 360)."""
    L: float
    C: float
    h: float


@dataclass(slots=True, frozen=True)
class AokLab(ColorRecord):
    """Adaptive Oklab coordinates (surround dependent)."""
    L: float
    a: float
    b: float


@dataclass(slots=True, frozen=True)
class AokLch(ColorRecord):
    """Cylindrical Adaptive Oklab."""
    L: float
    C: float
    h: float


# ---------------------------------------------------------------------------
# Color appearance
# ---------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class Cam16(ColorRecord):
    """CIECAM16 appearance correlates."""
    J: float
    Q: float
    C: float
    M: float
    s: float
    h: float
    H: float
    ac: float
    bc: float


@dataclass(slots=True, frozen=True)
class Cam16Ucs(ColorRecord):
    """CAM16-UCS rectangular coordinates (J', a', b')."""
    J: float
    a: float
    b: float


@dataclass(slots=True, frozen=True)
class Cam16UcsPolar(ColorRecord):
    """CAM16-UCS polar coordinates (J', M', h)."""
    J: float
    C: float
    h: float
