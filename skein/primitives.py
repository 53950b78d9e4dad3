# -*- coding: utf-8 -*-
"""
Skein: Weaving the mathematics of color perception
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Math Primitives
===============
Scalar helpers shared by every color module, plus the ``handle_shapes``
decorator that lets each transform accept a typed record, a single ``(3,)``
triple or an ``(N, 3)`` batch.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Final, Optional, Sequence, TypeAlias, Union

import numpy as np
import numpy.typing as npt
from numba import njit

from .diagnostics import ShapeError
from .records import ColorRecord

__all__ = [
    # --- Type Aliases ---
    "ArrayFloat",
    "ArrayLike3",

    # --- Constants ---
    "DEG2RAD",
    "RAD2DEG",
    "ACHROMATIC_CHROMA",

    # --- Scalar helpers ---
    "mat_vec",
    "sign_pow",
    "sign_pow_scalar",
    "clamp",
    "lerp",
    "deg_to_rad",
    "rad_to_deg",
    "normalize_hue",

    # --- Decorators ---
    "handle_shapes",

    # --- Kernels ---
    "cartesian_to_polar",
    "polar_to_cartesian",
]

# --- Type Aliases ---
ArrayFloat: TypeAlias = npt.NDArray[np.floating]
ArrayLike3: TypeAlias = Union[ColorRecord, ArrayFloat, Sequence[float]]

# --- Constants ---
DEG2RAD: Final[float] = np.pi / 180.0
RAD2DEG: Final[float] = 180.0 / np.pi

# Below this chroma a cylindrical hue is meaningless and reported as 0.
ACHROMATIC_CHROMA: Final[float] = 1e-7


# =============================================================================
# 1. SCALAR HELPERS
# =============================================================================

def mat_vec(matrix: Any, vector: Any) -> ArrayFloat:
    """
    Multiplies a 3x3 matrix by a 3-vector with an explicit unrolled sum.

    The vector may contain NaN (it propagates); the matrix must be finite.

    Raises:
        ShapeError: If the operands are not 3x3 / 3-long numeric arrays or the
            matrix holds non-finite entries.
    """
    try:
        m = np.asarray(matrix, dtype=np.float64)
        v = np.asarray(vector, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ShapeError("mat_vec operands must be numeric") from exc
    if m.shape != (3, 3):
        raise ShapeError(f"Expected a 3x3 matrix, got shape {m.shape}")
    if v.shape != (3,):
        raise ShapeError(f"Expected a 3-vector, got shape {v.shape}")
    if not np.all(np.isfinite(m)):
        raise ShapeError("Matrix entries must be finite")
    return np.array([
        m[0, 0] * v[0] + m[0, 1] * v[1] + m[0, 2] * v[2],
        m[1, 0] * v[0] + m[1, 1] * v[1] + m[1, 2] * v[2],
        m[2, 0] * v[0] + m[2, 1] * v[1] + m[2, 2] * v[2],
    ], dtype=np.float64)


def sign_pow(x: Union[float, ArrayFloat], exponent: float) -> Union[float, ArrayFloat]:
    """
    Sign-preserving power ``sign(x) * |x| ** exponent`` with ``f(0) = 0``.

    An infinite exponent yields the limit: 0 for ``|x| < 1`` and +/-inf for
    ``|x| > 1``.
    """
    arr = np.asarray(x, dtype=np.float64)
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        out = np.copysign(np.abs(arr) ** exponent, arr)
    out = np.where(arr == 0.0, 0.0, out)
    if out.ndim == 0:
        return float(out)
    return out


@njit(cache=True)
def sign_pow_scalar(x: float, exponent: float) -> float:
    """Scalar sign-preserving power for use inside compiled kernels."""
    if x == 0.0:
        return 0.0
    if x < 0.0:
        return -((-x) ** exponent)
    return x ** exponent


def clamp(value: Union[float, ArrayFloat], lo: float, hi: float) -> Union[float, ArrayFloat]:
    """Clamps into ``[lo, hi]``; NaN passes through."""
    if np.ndim(value) == 0:
        return float(min(max(value, lo), hi))
    return np.clip(value, lo, hi)


def lerp(a: Union[float, ArrayFloat], b: Union[float, ArrayFloat], t: float) -> Union[float, ArrayFloat]:
    return a + (b - a) * t


def deg_to_rad(degrees: Union[float, ArrayFloat]) -> Union[float, ArrayFloat]:
    return degrees * DEG2RAD


def rad_to_deg(radians: Union[float, ArrayFloat]) -> Union[float, ArrayFloat]:
    return radians * RAD2DEG


def normalize_hue(h: Union[float, ArrayFloat]) -> Union[float, ArrayFloat]:
    """
    Wraps a hue angle into ``[0, 360)`` via ``((h mod 360) + 360) mod 360``.

    Tiny negative inputs can round to exactly 360; those fold back to 0.
    """
    arr = np.asarray(h, dtype=np.float64)
    out = np.mod(np.mod(arr, 360.0) + 360.0, 360.0)
    out = np.where(out >= 360.0, 0.0, out)
    if out.ndim == 0:
        return float(out)
    return out


# =============================================================================
# 2. ROBUST DECORATORS
# =============================================================================

def handle_shapes(accepts: Optional[type[ColorRecord]] = None,
                  returns: Optional[type[ColorRecord]] = None
                  ) -> Callable[[Callable[..., ArrayFloat]], Callable[..., Any]]:
    """
    Decorator factory normalizing the first argument of a transform.

    The wrapped function always receives a C-contiguous float64 ``(N, 3)``
    array. The caller may pass:

    - a record of type ``accepts``: the result is wrapped into ``returns``;
    - a ``(3,)`` array or sequence: the result is ``(3,)``;
    - an ``(N, 3)`` array: the result is ``(N, 3)``.

    Args:
        accepts: Record class the transform consumes. Records of any other
            class raise ``TypeError``.
        returns: Record class the transform produces.

    Raises:
        ShapeError: If an array argument's last dimension is not 3.
        TypeError: If a record of the wrong color type is passed.
    """
    def decorator(func: Callable[..., ArrayFloat]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(color: Any, *args: Any, **kwargs: Any) -> Any:
            if isinstance(color, ColorRecord):
                if accepts is not None and not isinstance(color, accepts):
                    raise TypeError(
                        f"{func.__name__}() expects {accepts.__name__}, "
                        f"got {type(color).__name__}"
                    )
                res = func(color.to_array()[np.newaxis, :], *args, **kwargs)
                if returns is None:
                    return res[0]
                return returns.from_array(res[0])

            try:
                arr = np.asarray(color, dtype=np.float64)
            except (TypeError, ValueError) as exc:
                raise ShapeError(f"{func.__name__}() expects numeric color components") from exc
            if arr.ndim not in (1, 2) or arr.shape[-1] != 3:
                raise ShapeError(f"Expected last dimension size 3, got shape {arr.shape}")

            res = func(np.ascontiguousarray(np.atleast_2d(arr)), *args, **kwargs)
            if arr.ndim == 1:
                return res[0]
            return res
        return wrapper
    return decorator


# =============================================================================
# 3. POLAR KERNELS (Numba)
# =============================================================================
# fastmath stays off throughout the package: NaN must propagate unchanged.

@njit(cache=True)
def _cartesian_to_polar_kernel(arr: ArrayFloat) -> ArrayFloat:
    """(L, a, b) -> (L, C, h_deg) with hue in [0, 360) and h = 0 when achromatic."""
    n = arr.shape[0]
    out = np.empty_like(arr)
    for i in range(n):
        a = arr[i, 1]
        b = arr[i, 2]
        C = np.hypot(a, b)
        if C < ACHROMATIC_CHROMA:
            h = 0.0
        else:
            h = np.arctan2(b, a) * RAD2DEG
            h = h % 360.0
            if h >= 360.0:
                h = 0.0
        out[i, 0] = arr[i, 0]
        out[i, 1] = C
        out[i, 2] = h
    return out


@njit(cache=True)
def _polar_to_cartesian_kernel(arr: ArrayFloat) -> ArrayFloat:
    """(L, C, h_deg) -> (L, a, b)."""
    n = arr.shape[0]
    out = np.empty_like(arr)
    for i in range(n):
        C = arr[i, 1]
        h_rad = arr[i, 2] * DEG2RAD
        out[i, 0] = arr[i, 0]
        out[i, 1] = C * np.cos(h_rad)
        out[i, 2] = C * np.sin(h_rad)
    return out


def cartesian_to_polar(arr: ArrayFloat) -> ArrayFloat:
    """Batch rectangular-to-polar for an ``(N, 3)`` float64 array."""
    return _cartesian_to_polar_kernel(np.ascontiguousarray(arr, dtype=np.float64))


def polar_to_cartesian(arr: ArrayFloat) -> ArrayFloat:
    """Batch polar-to-rectangular for an ``(N, 3)`` float64 array."""
    return _polar_to_cartesian_kernel(np.ascontiguousarray(arr, dtype=np.float64))
