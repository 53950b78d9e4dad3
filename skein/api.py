# -*- coding: utf-8 -*-
"""
Skein: Weaving the mathematics of color perception
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Public API
==========
Single import surface for the typed transforms, the AOk model, chromatic
adaptation, gamut handling, chroma control and metrics.

Besides the named ``source_to_target`` functions, every record-to-record
transform is registered in ``CONVERSIONS`` under ``(source, target)``.
``convert`` walks that table breadth-first, in registration order, and
composes the shortest chain of edges:

    >>> convert(Srgb(1.0, 0.0, 0.0), Lch)
    Lch(L=53.2..., C=104.5..., h=39.9...)

AOk edges use a shared gray-surround model with x0 = 0.5; build an
``AdaptiveOklab`` explicitly for other surrounds. CIECAM16 edges use the
default ``ViewingConditions``.
"""

from __future__ import annotations

from collections import deque
from types import MappingProxyType
from typing import Any, Callable, Dict, Final, List, Mapping, Optional, Tuple, Type

from .__about__ import __version__
from .aoklab import (
    DEFAULT_SURROUND,
    DEFAULT_X0,
    SURROUND_EXPONENTS,
    SURROUND_REFERENCE_LIGHTNESS,
    AdaptiveOklab,
    AokConfig,
    Surround,
    derive_surround_exponent,
    recommended_surround,
)
from .cat import (
    CAT_METHODS,
    adaptation_matrix,
    chromatic_adaptation,
    closest_illuminant,
    correlated_color_temperature,
    needs_chromatic_adaptation,
    white_point_from_temperature,
    xyz_d50_to_d65,
    xyz_d65_to_d50,
)
from .chroma_control import (
    ChromaControlOptions,
    ChromaControlResult,
    ChromaMode,
    LuminanceMatch,
    adjust_aok_color_to_lab_l,
    find_aok_l_for_target_y,
    find_max_aok_chroma_for_lab_l,
    lab_l_to_relative_y,
)
from .ciecam16 import (
    SURROUND_PARAMETERS,
    ViewingConditions,
    analogous_cam16_ucs,
    cam16_to_ucs,
    cam16_ucs_difference,
    complementary_cam16_ucs,
    interpolate_cam16_ucs,
    interpolate_cam16_ucs_polar,
    polar_to_ucs,
    rotate_cam16_ucs_hue,
    srgb_to_cam16_ucs,
    srgb_to_ciecam16,
    triadic_cam16_ucs,
    ucs_to_cam16,
    ucs_to_polar,
    xyz_to_ciecam16,
)
from .css import NAMED_COLORS, format_css, format_hex, parse_css, parse_hex
from .diagnostics import ColorAdvisory, ShapeError, advise
from .gamut import (
    GAMUT_TARGETS,
    GamutInfo,
    benefits_from_display_p3,
    benefits_from_rec2020,
    clip_srgb,
    gamut_map_oklch,
    gamut_map_srgb,
    in_srgb_gamut,
    is_display_p3_in_srgb_gamut,
    is_in_gamut,
    is_lab_in_typical_range,
    is_oklab_in_typical_range,
    is_rec2020_in_srgb_gamut,
    max_chroma,
    scale_to_srgb_gamut,
    srgb_gamut_info,
)
from .lab import (
    lab_to_lch,
    lab_to_srgb,
    lab_to_xyz,
    lch_to_lab,
    lch_to_srgb,
    srgb_to_lab,
    srgb_to_lch,
    xyz_to_lab,
)
from .metrics import (
    WCAG_THRESHOLDS,
    ciede2000,
    delta_e_76,
    is_wcag_contrast_sufficient,
    oklch_difference,
    relative_luminance,
    wcag_contrast,
)
from .oklab import (
    linear_srgb_to_oklab,
    oklab_to_linear_srgb,
    oklab_to_oklch,
    oklab_to_srgb,
    oklch_to_linear_srgb,
    oklch_to_oklab,
    oklch_to_srgb,
    srgb_to_oklab,
    srgb_to_oklch,
)
from .records import (
    AokLab,
    AokLch,
    Cam16,
    Cam16Ucs,
    Cam16UcsPolar,
    ColorRecord,
    DisplayP3,
    Lab,
    Lch,
    LinearSrgb,
    Oklab,
    OkLch,
    Rec2020,
    Srgb,
    Xyz,
)
from .transfer import (
    display_p3_decode,
    display_p3_encode,
    rec2020_decode,
    rec2020_encode,
    srgb_decode,
    srgb_encode,
)
from .xyz import (
    ILLUMINANTS,
    WHITE_D50,
    WHITE_D65,
    display_p3_to_srgb,
    display_p3_to_xyz,
    get_illuminant,
    linear_srgb_to_srgb,
    linear_srgb_to_xyz,
    rec2020_to_srgb,
    rec2020_to_xyz,
    srgb_to_display_p3,
    srgb_to_linear_srgb,
    srgb_to_rec2020,
    srgb_to_xyz,
    xyz_to_display_p3,
    xyz_to_linear_srgb,
    xyz_to_rec2020,
    xyz_to_srgb,
)

Converter = Callable[[Any], Any]
RecordType = Type[ColorRecord]

_DEFAULT_AOK: Final[AdaptiveOklab] = AdaptiveOklab()


# =============================================================================
# CONVERSION REGISTRY
# =============================================================================

def _build_registry() -> Mapping[Tuple[RecordType, RecordType], Converter]:
    edges: Dict[Tuple[RecordType, RecordType], Converter] = {
        # RGB encodings and XYZ
        (Srgb, LinearSrgb): srgb_to_linear_srgb,
        (LinearSrgb, Srgb): linear_srgb_to_srgb,
        (Srgb, Xyz): srgb_to_xyz,
        (Xyz, Srgb): xyz_to_srgb,
        (LinearSrgb, Xyz): linear_srgb_to_xyz,
        (Xyz, LinearSrgb): xyz_to_linear_srgb,
        (Srgb, DisplayP3): srgb_to_display_p3,
        (DisplayP3, Srgb): display_p3_to_srgb,
        (DisplayP3, Xyz): display_p3_to_xyz,
        (Xyz, DisplayP3): xyz_to_display_p3,
        (Srgb, Rec2020): srgb_to_rec2020,
        (Rec2020, Srgb): rec2020_to_srgb,
        (Rec2020, Xyz): rec2020_to_xyz,
        (Xyz, Rec2020): xyz_to_rec2020,
        # CIELAB
        (Xyz, Lab): xyz_to_lab,
        (Lab, Xyz): lab_to_xyz,
        (Lab, Lch): lab_to_lch,
        (Lch, Lab): lch_to_lab,
        (Srgb, Lab): srgb_to_lab,
        (Lab, Srgb): lab_to_srgb,
        (Srgb, Lch): srgb_to_lch,
        (Lch, Srgb): lch_to_srgb,
        # Oklab
        (LinearSrgb, Oklab): linear_srgb_to_oklab,
        (Oklab, LinearSrgb): oklab_to_linear_srgb,
        (Oklab, OkLch): oklab_to_oklch,
        (OkLch, Oklab): oklch_to_oklab,
        (Srgb, Oklab): srgb_to_oklab,
        (Oklab, Srgb): oklab_to_srgb,
        (Srgb, OkLch): srgb_to_oklch,
        (OkLch, Srgb): oklch_to_srgb,
        (OkLch, LinearSrgb): oklch_to_linear_srgb,
        # Adaptive Oklab (shared default model)
        (Srgb, AokLab): _DEFAULT_AOK.from_srgb,
        (AokLab, Srgb): _DEFAULT_AOK.to_srgb,
        (LinearSrgb, AokLab): _DEFAULT_AOK.from_linear_srgb,
        (AokLab, LinearSrgb): _DEFAULT_AOK.to_linear_srgb,
        (Xyz, AokLab): _DEFAULT_AOK.from_xyz,
        (AokLab, Xyz): _DEFAULT_AOK.to_xyz,
        (AokLab, AokLch): AdaptiveOklab.to_lch,
        (AokLch, AokLab): AdaptiveOklab.from_lch,
        # Appearance (forward only, default viewing conditions)
        (Srgb, Cam16): srgb_to_ciecam16,
        (Xyz, Cam16): _xyz_to_ciecam16_unit,
        (Cam16, Cam16Ucs): cam16_to_ucs,
        (Cam16Ucs, Cam16): ucs_to_cam16,
        (Cam16Ucs, Cam16UcsPolar): ucs_to_polar,
        (Cam16UcsPolar, Cam16Ucs): polar_to_ucs,
    }
    return MappingProxyType(edges)


def _xyz_to_ciecam16_unit(xyz: Xyz) -> Cam16:
    """Registry XYZ is on the Y = 1 scale; the appearance model expects Y = 100."""
    return xyz_to_ciecam16(Xyz(100.0 * xyz.X, 100.0 * xyz.Y, 100.0 * xyz.Z))


CONVERSIONS: Final[Mapping[Tuple[RecordType, RecordType], Converter]] = _build_registry()


def conversion_path(source: RecordType, target: RecordType) -> List[Converter]:
    """
    Shortest chain of registered converters from ``source`` to ``target``.

    Ties are broken by registration order, so the result is deterministic.

    Raises:
        ValueError: If no chain exists.
    """
    if source is target:
        return []
    previous: Dict[RecordType, Tuple[RecordType, Converter]] = {}
    queue = deque([source])
    seen = {source}
    while queue:
        node = queue.popleft()
        for (src, dst), func in CONVERSIONS.items():
            if src is not node or dst in seen:
                continue
            previous[dst] = (src, func)
            if dst is target:
                chain: List[Converter] = []
                step = target
                while step is not source:
                    step, edge = previous[step]
                    chain.append(edge)
                return chain[::-1]
            seen.add(dst)
            queue.append(dst)
    raise ValueError(f"No conversion from {source.__name__} to {target.__name__}")


def convert(color: ColorRecord, target: RecordType) -> ColorRecord:
    """
    Converts a color record to the record type ``target``.

    Args:
        color: Any registered color record.
        target: Record class to produce, e.g. ``Lab``.

    Returns:
        A new ``target`` record (the input itself if it is already one).

    Raises:
        TypeError: If ``color`` is not a color record.
        ValueError: If the registry has no path to ``target``.
    """
    if not isinstance(color, ColorRecord):
        raise TypeError(f"convert() expects a color record, got {type(color).__name__}")
    result = color
    for func in conversion_path(type(color), target):
        result = func(result)
    return result


__all__ = [
    "__version__",
    # Records
    "ColorRecord", "Srgb", "LinearSrgb", "Xyz", "Lab", "Lch", "Oklab", "OkLch",
    "AokLab", "AokLch", "DisplayP3", "Rec2020", "Cam16", "Cam16Ucs", "Cam16UcsPolar",
    # Diagnostics
    "ShapeError", "ColorAdvisory", "advise",
    # Transfer
    "srgb_encode", "srgb_decode", "display_p3_encode", "display_p3_decode",
    "rec2020_encode", "rec2020_decode",
    # RGB / XYZ
    "ILLUMINANTS", "WHITE_D65", "WHITE_D50", "get_illuminant",
    "srgb_to_linear_srgb", "linear_srgb_to_srgb", "linear_srgb_to_xyz",
    "xyz_to_linear_srgb", "srgb_to_xyz", "xyz_to_srgb",
    "srgb_to_display_p3", "display_p3_to_srgb", "display_p3_to_xyz", "xyz_to_display_p3",
    "srgb_to_rec2020", "rec2020_to_srgb", "rec2020_to_xyz", "xyz_to_rec2020",
    # CIELAB
    "xyz_to_lab", "lab_to_xyz", "lab_to_lch", "lch_to_lab",
    "srgb_to_lab", "lab_to_srgb", "srgb_to_lch", "lch_to_srgb",
    # Oklab
    "linear_srgb_to_oklab", "oklab_to_linear_srgb", "oklab_to_oklch", "oklch_to_oklab",
    "srgb_to_oklab", "oklab_to_srgb", "srgb_to_oklch", "oklch_to_srgb",
    "oklch_to_linear_srgb",
    # AOk
    "Surround", "SURROUND_EXPONENTS", "SURROUND_REFERENCE_LIGHTNESS",
    "DEFAULT_SURROUND", "DEFAULT_X0", "recommended_surround", "derive_surround_exponent",
    "AokConfig", "AdaptiveOklab",
    # Chromatic adaptation
    "CAT_METHODS", "adaptation_matrix", "chromatic_adaptation",
    "xyz_d65_to_d50", "xyz_d50_to_d65", "correlated_color_temperature",
    "white_point_from_temperature", "closest_illuminant", "needs_chromatic_adaptation",
    # Metrics
    "WCAG_THRESHOLDS", "relative_luminance", "wcag_contrast",
    "is_wcag_contrast_sufficient", "ciede2000", "delta_e_76", "oklch_difference",
    # Gamut
    "GAMUT_TARGETS", "GamutInfo", "in_srgb_gamut", "is_lab_in_typical_range",
    "is_oklab_in_typical_range", "clip_srgb", "scale_to_srgb_gamut", "is_in_gamut",
    "is_display_p3_in_srgb_gamut", "is_rec2020_in_srgb_gamut",
    "benefits_from_display_p3", "benefits_from_rec2020",
    "gamut_map_oklch", "gamut_map_srgb", "max_chroma", "srgb_gamut_info",
    # Chroma control
    "ChromaMode", "ChromaControlOptions", "LuminanceMatch", "ChromaControlResult",
    "lab_l_to_relative_y", "find_aok_l_for_target_y",
    "find_max_aok_chroma_for_lab_l", "adjust_aok_color_to_lab_l",
    # CIECAM16
    "SURROUND_PARAMETERS", "ViewingConditions", "xyz_to_ciecam16", "srgb_to_ciecam16",
    "cam16_to_ucs", "ucs_to_cam16", "srgb_to_cam16_ucs", "ucs_to_polar",
    "polar_to_ucs", "cam16_ucs_difference", "interpolate_cam16_ucs",
    "interpolate_cam16_ucs_polar", "rotate_cam16_ucs_hue", "complementary_cam16_ucs",
    "analogous_cam16_ucs", "triadic_cam16_ucs",
    # CSS
    "NAMED_COLORS", "parse_hex", "format_hex", "parse_css", "format_css",
    # Registry
    "CONVERSIONS", "conversion_path", "convert",
]
