# -*- coding: utf-8 -*-
"""
Skein: Weaving the mathematics of color perception
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Hex and CSS Color I/O
=====================
Thin text front-end over the color records. Parsing never raises: invalid
input returns ``None``. Parsed values are returned in their own space
(``lab(...)`` gives a ``Lab`` record, not sRGB); convert explicitly with the
transforms if a different space is needed.

Supported syntax (CSS Color Module Level 4):
    - ``#rgb``, ``#rrggbb`` (the leading ``#`` is optional for ``parse_hex``)
    - ``rgb()`` / ``rgba()``, ``hsl()`` / ``hsla()``, legacy commas or spaces
    - ``lab()``, ``lch()``, ``oklab()``, ``oklch()``
    - ``color(srgb | display-p3 | rec2020 r g b)``
    - the sixteen CSS Level 1 color keywords

Alpha components are accepted and ignored.
"""

from __future__ import annotations

import math
import re
from types import MappingProxyType
from typing import Final, List, Mapping, Optional, Tuple, Union

from .records import DisplayP3, Lab, Lch, Oklab, OkLch, Rec2020, Srgb

__all__ = [
    "CssColor",
    "NAMED_COLORS",
    "parse_hex",
    "format_hex",
    "parse_css",
    "format_css",
]

CssColor = Union[Srgb, Lab, Lch, Oklab, OkLch, DisplayP3, Rec2020]

# CSS Level 1 keywords
NAMED_COLORS: Final[Mapping[str, str]] = MappingProxyType({
    "black": "#000000",
    "silver": "#c0c0c0",
    "gray": "#808080",
    "white": "#ffffff",
    "maroon": "#800000",
    "red": "#ff0000",
    "purple": "#800080",
    "fuchsia": "#ff00ff",
    "green": "#008000",
    "lime": "#00ff00",
    "olive": "#808000",
    "yellow": "#ffff00",
    "navy": "#000080",
    "blue": "#0000ff",
    "teal": "#008080",
    "aqua": "#00ffff",
})

_HEX_RE: Final = re.compile(r"^#?([0-9a-f]{3}|[0-9a-f]{6})$", re.IGNORECASE)
_FUNC_RE: Final = re.compile(r"^([a-z][a-z0-9-]*)\(\s*(.*?)\s*\)$", re.IGNORECASE | re.DOTALL)
_NUMBER_RE: Final = re.compile(r"^([+-]?(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?)([a-z%]*)$", re.IGNORECASE)

# Reference ranges for percentages (CSS Color 4, section 9)
_PERCENT_REFERENCE: Final[Mapping[str, Tuple[float, float, float]]] = MappingProxyType({
    "lab": (100.0, 125.0, 125.0),
    "lch": (100.0, 150.0, 1.0),
    "oklab": (1.0, 0.4, 0.4),
    "oklch": (1.0, 0.4, 1.0),
})

_ANGLE_UNITS: Final[Mapping[str, float]] = MappingProxyType({
    "": 1.0,
    "deg": 1.0,
    "rad": 180.0 / math.pi,
    "grad": 0.9,
    "turn": 360.0,
})


# =============================================================================
# 1. HEX
# =============================================================================

def parse_hex(text: str) -> Optional[Srgb]:
    """
    Parses ``#RGB`` / ``#RRGGBB`` (case-insensitive, ``#`` optional).

    Returns:
        An ``Srgb`` record with channels in [0, 1], or ``None``.
    """
    if not isinstance(text, str):
        return None
    match = _HEX_RE.match(text.strip())
    if match is None:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return Srgb(*(int(digits[i:i + 2], 16) / 255.0 for i in (0, 2, 4)))


def format_hex(srgb: Srgb) -> str:
    """Formats as ``#rrggbb``; each channel is clamped to [0, 1] then rounded half up."""
    out = []
    for v in srgb:
        if math.isnan(v):
            v = 0.0
        out.append(int(math.floor(min(max(v, 0.0), 1.0) * 255.0 + 0.5)))
    return "#{:02x}{:02x}{:02x}".format(*out)


# =============================================================================
# 2. TOKEN HELPERS
# =============================================================================

def _split_number(token: str) -> Optional[Tuple[float, str]]:
    match = _NUMBER_RE.match(token)
    if match is None:
        return None
    return float(match.group(1)), match.group(2).lower()


def _channel(token: str, scale: float, percent_ref: float) -> Optional[float]:
    """Plain numbers are divided by ``scale``; percentages by 100 times ``percent_ref``."""
    if token == "none":
        return 0.0
    parsed = _split_number(token)
    if parsed is None:
        return None
    value, unit = parsed
    if unit == "%":
        return value / 100.0 * percent_ref
    if unit:
        return None
    return value / scale


def _angle(token: str) -> Optional[float]:
    if token == "none":
        return 0.0
    parsed = _split_number(token)
    if parsed is None:
        return None
    value, unit = parsed
    factor = _ANGLE_UNITS.get(unit)
    if factor is None:
        return None
    return value * factor


def _arguments(body: str) -> Optional[List[str]]:
    """Splits a function body into exactly three component tokens."""
    if "," in body:
        parts = [p.strip() for p in body.split(",")]
        if len(parts) not in (3, 4) or any(not p for p in parts):
            return None
        return parts[:3]
    main, slash, alpha = body.partition("/")
    parts = main.split()
    if len(parts) != 3:
        return None
    if slash and not alpha.strip():
        return None
    return parts


def _hsl_to_srgb(h: float, s: float, l: float) -> Srgb:
    h = (h % 360.0) / 360.0
    s = min(max(s, 0.0), 1.0)
    l = min(max(l, 0.0), 1.0)
    if s == 0.0:
        return Srgb(l, l, l)
    q = l * (1.0 + s) if l < 0.5 else l + s - l * s
    p = 2.0 * l - q

    def hue_to_rgb(t: float) -> float:
        if t < 0.0:
            t += 1.0
        if t > 1.0:
            t -= 1.0
        if t < 1.0 / 6.0:
            return p + (q - p) * 6.0 * t
        if t < 0.5:
            return q
        if t < 2.0 / 3.0:
            return p + (q - p) * (2.0 / 3.0 - t) * 6.0
        return p

    return Srgb(hue_to_rgb(h + 1.0 / 3.0), hue_to_rgb(h), hue_to_rgb(h - 1.0 / 3.0))


# =============================================================================
# 3. FUNCTION PARSERS
# =============================================================================

def _parse_rgb(args: List[str]) -> Optional[Srgb]:
    values = [_channel(t, 255.0, 1.0) for t in args]
    if any(v is None for v in values):
        return None
    return Srgb(*values)


def _parse_hsl(args: List[str]) -> Optional[Srgb]:
    h = _angle(args[0])
    # Bare numbers for s and l are read as percentages (CSS Color 4).
    s = _channel(args[1], 100.0, 1.0)
    l = _channel(args[2], 100.0, 1.0)
    if h is None or s is None or l is None:
        return None
    return _hsl_to_srgb(h, s, l)


def _parse_lab_like(name: str, args: List[str]) -> Optional[CssColor]:
    ref = _PERCENT_REFERENCE[name]
    L = _channel(args[0], 1.0, ref[0])
    second = _channel(args[1], 1.0, ref[1])
    if name in ("lch", "oklch"):
        third = _angle(args[2])
    else:
        third = _channel(args[2], 1.0, ref[2])
    if L is None or second is None or third is None:
        return None
    record = {"lab": Lab, "lch": Lch, "oklab": Oklab, "oklch": OkLch}[name]
    return record(L, second, third)


def _parse_color_function(body: str) -> Optional[CssColor]:
    main, slash, alpha = body.partition("/")
    if slash and not alpha.strip():
        return None
    tokens = main.split()
    if len(tokens) != 4:
        return None
    record = {"srgb": Srgb, "display-p3": DisplayP3, "rec2020": Rec2020}.get(tokens[0])
    if record is None:
        return None
    values = [_channel(t, 1.0, 1.0) for t in tokens[1:]]
    if any(v is None for v in values):
        return None
    return record(*values)


def parse_css(text: str) -> Optional[CssColor]:
    """
    Parses a CSS color string into the matching record.

    Returns:
        ``Srgb`` for hex, keywords, ``rgb()`` and ``hsl()``; ``Lab``, ``Lch``,
        ``Oklab``, ``OkLch`` for the corresponding functions; ``Srgb``,
        ``DisplayP3`` or ``Rec2020`` for ``color()``. ``None`` if invalid.
    """
    if not isinstance(text, str):
        return None
    s = text.strip().lower()
    if not s:
        return None
    if s.startswith("#"):
        return parse_hex(s)
    if s in NAMED_COLORS:
        return parse_hex(NAMED_COLORS[s])

    match = _FUNC_RE.match(s)
    if match is None:
        return None
    name, body = match.group(1), match.group(2)

    if name == "color":
        return _parse_color_function(body)

    args = _arguments(body)
    if args is None:
        return None
    if name in ("rgb", "rgba"):
        return _parse_rgb(args)
    if name in ("hsl", "hsla"):
        return _parse_hsl(args)
    if name in _PERCENT_REFERENCE:
        return _parse_lab_like(name, args)
    return None


# =============================================================================
# 4. FORMATTING
# =============================================================================

def _fmt(value: float, precision: int) -> str:
    text = f"{value:.{precision}f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def format_css(color: CssColor, precision: int = 4) -> str:
    """
    Formats a record in its native CSS Color 4 notation.

    Raises:
        TypeError: If the record type has no CSS representation.
    """
    c = tuple(_fmt(v, precision) for v in color)
    if isinstance(color, Srgb):
        return f"color(srgb {c[0]} {c[1]} {c[2]})"
    if isinstance(color, DisplayP3):
        return f"color(display-p3 {c[0]} {c[1]} {c[2]})"
    if isinstance(color, Rec2020):
        return f"color(rec2020 {c[0]} {c[1]} {c[2]})"
    if isinstance(color, Lab):
        return f"lab({c[0]}% {c[1]} {c[2]})"
    if isinstance(color, Lch):
        return f"lch({c[0]}% {c[1]} {c[2]}deg)"
    if isinstance(color, Oklab):
        return f"oklab({c[0]} {c[1]} {c[2]})"
    if isinstance(color, OkLch):
        return f"oklch({c[0]} {c[1]} {c[2]}deg)"
    raise TypeError(f"No CSS notation for {type(color).__name__}")
