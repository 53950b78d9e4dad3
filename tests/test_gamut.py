"""Tests for gamut predicates, repairs and OkLCh chroma reduction."""

import numpy as np
import pytest

from skein import (
    DisplayP3,
    GamutInfo,
    Lab,
    OkLch,
    Oklab,
    Rec2020,
    Srgb,
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
    oklch_to_srgb,
    scale_to_srgb_gamut,
    srgb_gamut_info,
    srgb_to_display_p3,
    srgb_to_oklch,
)


class TestPredicates:

    def test_in_srgb_gamut(self):
        assert in_srgb_gamut(Srgb(0.0, 0.5, 1.0))
        assert not in_srgb_gamut(Srgb(1.01, 0.5, 0.5))
        assert in_srgb_gamut(Srgb(1.0 + 1e-12, 0.5, -1e-12))

    def test_batch_and_nan(self):
        mask = in_srgb_gamut(np.array([[0.5, 0.5, 0.5], [np.nan, 0.5, 0.5], [-0.2, 0.0, 0.0]]))
        np.testing.assert_array_equal(mask, [True, False, False])

    def test_typical_ranges(self):
        assert is_lab_in_typical_range((50.0, -128.0, 127.0))
        assert not is_lab_in_typical_range((50.0, 0.0, 130.0))
        assert is_oklab_in_typical_range((0.5, 0.3, -0.3))
        assert not is_oklab_in_typical_range((1.2, 0.0, 0.0))

    def test_targets(self):
        wide = OkLch(0.65, 0.35, 30.0)
        assert not is_in_gamut(wide, "srgb")
        assert is_in_gamut(srgb_to_oklch(Srgb(0.2, 0.4, 0.6)), "p3")

    def test_unknown_target(self):
        with pytest.raises(ValueError, match="valid targets"):
            is_in_gamut(OkLch(0.5, 0.1, 30.0), "adobe-rgb")


class TestRepairs:

    def test_clip(self):
        assert clip_srgb(Srgb(1.2, 0.5, -0.1)) == Srgb(1.0, 0.5, 0.0)

    def test_scale(self):
        out = scale_to_srgb_gamut(Srgb(1.2, 0.5, -0.1))
        np.testing.assert_allclose(out.to_array(), [1.0, 0.6 / 1.3, 0.0])

    def test_scale_leaves_in_gamut_rows(self):
        rows = np.array([[0.2, 0.4, 0.6], [1.5, 0.5, 0.5]])
        out = scale_to_srgb_gamut(rows)
        np.testing.assert_array_equal(out[0], rows[0])
        assert in_srgb_gamut(out[1])

    def test_gamut_info(self):
        info = srgb_gamut_info(Srgb(1.2, 0.5, -0.1))
        assert isinstance(info, GamutInfo)
        assert not info.in_gamut
        assert info.max_excess == pytest.approx(0.2)
        assert info.min_deficit == pytest.approx(0.1)
        assert srgb_gamut_info(Srgb(0.1, 0.2, 0.3)).in_gamut


class TestChromaReduction:

    def test_reduces_chroma_only(self):
        source = OkLch(0.7, 0.5, 30.0)
        mapped = gamut_map_oklch(source)
        assert mapped.C < 0.5
        assert mapped.L == source.L
        assert mapped.h == source.h
        assert in_srgb_gamut(oklch_to_srgb(mapped))

    @pytest.mark.parametrize("hue", [0.0, 90.0, 145.0, 200.0, 265.0, 330.0])
    def test_result_in_gamut(self, hue):
        source = OkLch(0.6, 0.4, hue)
        mapped = gamut_map_oklch(source)
        assert mapped.C <= source.C
        assert abs(mapped.L - source.L) < 1e-6
        assert abs(mapped.h - source.h) < 1e-6
        assert in_srgb_gamut(oklch_to_srgb(mapped))

    def test_close_to_boundary(self):
        mapped = gamut_map_oklch(OkLch(0.7, 0.5, 30.0))
        assert mapped.C > max_chroma(0.7, 30.0) - 0.03

    def test_in_gamut_unchanged(self):
        inside = srgb_to_oklch(Srgb(0.3, 0.5, 0.7))
        assert gamut_map_oklch(inside) == inside

    def test_achromatic_lightness_clamped(self):
        assert gamut_map_oklch(OkLch(1.2, 0.0, 0.0)) == OkLch(1.0, 0.0, 0.0)

    def test_nan_row_untouched(self):
        rows = np.array([[0.7, 0.5, 30.0], [np.nan, 0.1, 30.0]])
        out = gamut_map_oklch(rows)
        assert out[0, 1] < 0.5
        assert np.isnan(out[1, 0])
        assert out[1, 1] == 0.1

    def test_wider_target_keeps_more_chroma(self):
        source = OkLch(0.7, 0.5, 30.0)
        assert gamut_map_oklch(source, "rec2020").C >= gamut_map_oklch(source, "display-p3").C
        assert gamut_map_oklch(source, "display-p3").C >= gamut_map_oklch(source, "srgb").C

    def test_gamut_map_srgb(self):
        out = gamut_map_srgb(Srgb(1.2, 0.2, 0.1))
        assert in_srgb_gamut(out)
        assert gamut_map_srgb(Srgb(0.2, 0.4, 0.6)) == Srgb(0.2, 0.4, 0.6)


class TestMaxChroma:

    def test_oklch(self):
        c = max_chroma(0.7, 30.0)
        assert 0.1 < c < 0.5
        assert in_srgb_gamut(oklch_to_srgb(OkLch(0.7, c, 30.0)))

    def test_lch(self):
        assert max_chroma(50.0, 30.0, space="lch") > 40.0

    def test_unknown_space(self):
        with pytest.raises(ValueError):
            max_chroma(0.5, 0.0, space="hsl")


class TestRecordTypes:

    @pytest.mark.parametrize("func, color", [
        (in_srgb_gamut, OkLch(0.5, 0.1, 30.0)),
        (is_lab_in_typical_range, Srgb(0.5, 0.5, 0.5)),
        (is_oklab_in_typical_range, Lab(50.0, 0.0, 0.0)),
        (is_in_gamut, Lab(50.0, 0.0, 0.0)),
        (srgb_gamut_info, Lab(50.0, 0.0, 0.0)),
    ])
    def test_wrong_record_raises(self, func, color):
        with pytest.raises(TypeError):
            func(color)

    def test_matching_records_pass(self):
        assert is_lab_in_typical_range(Lab(50.0, 10.0, -10.0))
        assert is_oklab_in_typical_range(Oklab(0.5, 0.1, -0.1))


class TestWideGamutQueries:

    def test_display_p3_in_srgb(self):
        assert is_display_p3_in_srgb_gamut(DisplayP3(0.5, 0.5, 0.5))
        assert is_display_p3_in_srgb_gamut(srgb_to_display_p3(Srgb(0.2, 0.4, 0.6)))
        assert not is_display_p3_in_srgb_gamut(DisplayP3(1.0, 0.0, 0.0))

    def test_rec2020_in_srgb(self):
        assert is_rec2020_in_srgb_gamut(Rec2020(0.5, 0.5, 0.5))
        assert not is_rec2020_in_srgb_gamut(Rec2020(0.0, 1.0, 0.0))

    def test_wide_batch(self):
        mask = is_display_p3_in_srgb_gamut(np.array([[0.5, 0.5, 0.5], [1.0, 0.0, 0.0]]))
        np.testing.assert_array_equal(mask, [True, False])

    def test_benefits_from_display_p3(self):
        assert not benefits_from_display_p3(Srgb(0.5, 0.5, 0.5))
        assert benefits_from_display_p3(Srgb(1.0, 0.0, 0.0))

    def test_benefits_from_rec2020(self):
        assert not benefits_from_rec2020(Srgb(0.0, 0.0, 0.0))
        assert not benefits_from_rec2020(Srgb(1.0, 1.0, 1.0))
        assert benefits_from_rec2020(Srgb(1.0, 0.0, 0.0))

    def test_record_types(self):
        with pytest.raises(TypeError):
            is_display_p3_in_srgb_gamut(Rec2020(0.5, 0.5, 0.5))
        with pytest.raises(TypeError):
            benefits_from_rec2020(DisplayP3(0.5, 0.5, 0.5))
