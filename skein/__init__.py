# -*- coding: utf-8 -*-
"""
Skein: Weaving the mathematics of color perception
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Skein
=====
Color conversions between sRGB, Display P3, Rec. 2020, XYZ, CIELAB, Oklab and
the surround-adaptive AOk space, with CIECAM16, WCAG contrast, CIEDE2000,
OkLCh gamut mapping and a luminance-targeted chroma solver.

    >>> import skein
    >>> skein.srgb_to_oklch(skein.Srgb(1.0, 0.0, 0.0))
    OkLch(L=0.627..., C=0.257..., h=29.2...)
"""

from .api import *  # noqa: F401,F403
from .api import __all__, __version__  # noqa: F401
