"""Tests for the conversion registry and the package surface."""

import numpy as np
import pytest

import skein
from skein import (
    CONVERSIONS,
    AdaptiveOklab,
    AokLch,
    Cam16,
    Cam16UcsPolar,
    Lab,
    LinearSrgb,
    OkLch,
    Srgb,
    Xyz,
    conversion_path,
    convert,
    lab_to_srgb,
    srgb_to_lab,
    srgb_to_oklch,
)


class TestConvert:

    def test_direct_edge(self):
        color = Srgb(0.8, 0.3, 0.1)
        assert convert(color, Lab) == srgb_to_lab(color)

    def test_composed_path(self):
        lab = Lab(60.0, 20.0, -10.0)
        assert convert(lab, OkLch) == srgb_to_oklch(lab_to_srgb(lab))

    def test_same_type(self):
        color = Srgb(0.1, 0.2, 0.3)
        assert conversion_path(Srgb, Srgb) == []
        assert convert(color, Srgb) is color

    def test_path_is_shortest(self):
        assert len(conversion_path(Lab, OkLch)) == 2
        assert len(conversion_path(LinearSrgb, Xyz)) == 1

    def test_aok_edges_use_default_model(self):
        color = Srgb(0.7, 0.4, 0.2)
        aok = AdaptiveOklab()
        assert convert(color, AokLch) == aok.to_lch(aok.from_srgb(color))

    def test_xyz_to_appearance_scales_to_hundred(self):
        cam = convert(Xyz.from_array(skein.WHITE_D65 / 100.0), Cam16)
        assert isinstance(cam, Cam16)
        assert cam.J == pytest.approx(100.0, abs=1e-6)

    def test_appearance_chain(self):
        polar = convert(Srgb(0.2, 0.5, 0.8), Cam16UcsPolar)
        assert isinstance(polar, Cam16UcsPolar)
        assert 0.0 <= polar.h < 360.0

    def test_no_path(self):
        with pytest.raises(ValueError, match="No conversion"):
            convert(Cam16(*([0.0] * 9)), Srgb)

    def test_rejects_arrays(self):
        with pytest.raises(TypeError):
            convert(np.array([0.1, 0.2, 0.3]), Lab)

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            CONVERSIONS[(Srgb, Lab)] = srgb_to_lab


class TestPackage:

    def test_version(self):
        assert skein.__version__ == "0.1.0"

    def test_all_names_resolve(self):
        missing = [name for name in skein.__all__ if not hasattr(skein, name)]
        assert missing == []

    def test_every_edge_source_reaches_srgb_or_is_appearance(self):
        appearance = {"Cam16", "Cam16Ucs", "Cam16UcsPolar"}
        for src, _ in CONVERSIONS:
            if src.__name__ in appearance:
                continue
            assert conversion_path(src, Srgb) or src is Srgb
