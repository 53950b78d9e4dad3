"""Tests for the luminance-constrained AOk chroma solver."""

import math

import pytest

from skein import (
    AokConfig,
    AokLch,
    ChromaControlOptions,
    ChromaControlResult,
    ColorAdvisory,
    Lab,
    LuminanceMatch,
    adjust_aok_color_to_lab_l,
    find_aok_l_for_target_y,
    find_max_aok_chroma_for_lab_l,
    in_srgb_gamut,
    lab_l_to_relative_y,
    lab_to_xyz,
)


@pytest.fixture
def white_options():
    return ChromaControlOptions(aok=AokConfig("white"))


class TestLabLToY:

    def test_mid_gray(self):
        assert lab_l_to_relative_y(50.0) == pytest.approx(0.18419, abs=1e-5)

    @pytest.mark.parametrize("l_star", [5.0, 50.0, 90.0])
    def test_matches_cielab_inverse(self, l_star):
        expected = lab_to_xyz(Lab(l_star, 0.0, 0.0)).Y
        assert lab_l_to_relative_y(l_star) == pytest.approx(expected, rel=1e-9)

    def test_endpoints(self):
        assert lab_l_to_relative_y(0.0) == pytest.approx(0.0, abs=1e-12)
        assert lab_l_to_relative_y(100.0) == pytest.approx(1.0)

    def test_white_scale(self):
        assert lab_l_to_relative_y(100.0, white_y=50.0) == pytest.approx(0.5)

    def test_bad_gamma_falls_back(self):
        messages = []
        y = lab_l_to_relative_y(50.0, gamma=1.0, logger=messages.append)
        assert len(messages) == 1
        assert y == pytest.approx(lab_l_to_relative_y(50.0))

    def test_other_gamma_is_continuous_at_pivot(self):
        gamma = 2.4
        pivot = (4.0 / 29.0) * gamma / (gamma - 1.0)
        l_pivot = 116.0 * pivot - 16.0
        below = lab_l_to_relative_y(l_pivot - 1e-6, gamma=gamma)
        above = lab_l_to_relative_y(l_pivot + 1e-6, gamma=gamma)
        assert above == pytest.approx(below, abs=1e-7)


class TestInnerSearch:

    def test_gray_axis(self):
        target = lab_l_to_relative_y(50.0)
        res = find_aok_l_for_target_y(0.0, 0.0, target)
        assert isinstance(res, LuminanceMatch)
        assert not res.final_out_of_gamut
        assert res.final_cie_y == pytest.approx(target, abs=1e-4)
        assert 0.0 < res.found_aok_l < 1.0
        assert in_srgb_gamut(res.final_srgb, epsilon=1e-7)

    def test_impossible_chroma_is_flagged(self):
        res = find_aok_l_for_target_y(5.0, 265.0, lab_l_to_relative_y(50.0))
        assert res.final_out_of_gamut

    def test_iterations_bounded(self):
        opts = ChromaControlOptions(max_iterations=3)
        res = find_aok_l_for_target_y(0.05, 120.0, 0.3, opts)
        assert res.iterations <= 3


class TestMaxChroma:

    def test_blue_on_white(self, white_options):
        max_c = find_max_aok_chroma_for_lab_l(265.0, 50.0, white_options)
        assert max_c > 0.0
        target = lab_l_to_relative_y(50.0)
        res = find_aok_l_for_target_y(max_c, 265.0, target, white_options)
        assert not res.final_out_of_gamut
        assert abs(res.final_cie_y - target) < 5e-4

    def test_extreme_lightness_collapses_to_gray(self):
        assert find_max_aok_chroma_for_lab_l(30.0, 100.0) < 0.05

    def test_l_star_range(self):
        with pytest.raises(ValueError):
            find_max_aok_chroma_for_lab_l(30.0, 120.0)


class TestAdjust:

    def test_small_chroma_kept(self, white_options):
        max_c = find_max_aok_chroma_for_lab_l(265.0, 50.0, white_options)
        assert max_c >= 0.01
        res = adjust_aok_color_to_lab_l(AokLch(0.3, 0.01, 265.0), 50.0, options=white_options)
        assert isinstance(res, ChromaControlResult)
        assert res.aok_lch.C == 0.01
        assert res.aok_lch.h == 265.0
        assert not res.out_of_gamut
        assert res.relative_luminance == pytest.approx(lab_l_to_relative_y(50.0), abs=5e-4)

    def test_large_chroma_clipped(self, white_options):
        max_c = find_max_aok_chroma_for_lab_l(265.0, 50.0, white_options)
        res = adjust_aok_color_to_lab_l(AokLch(0.5, 5.0, 265.0), 50.0, options=white_options)
        assert res.aok_lch.C == max_c

    def test_triple_hint_and_hue_wrap(self):
        res = adjust_aok_color_to_lab_l((0.5, 0.02, 385.0), 60.0)
        assert res.aok_lch.h == pytest.approx(25.0)

    def test_target_mode(self):
        opts = ChromaControlOptions(global_target_aok_chroma=0.02)
        res = adjust_aok_color_to_lab_l(AokLch(0.5, 0.3, 140.0), 60.0, "target", opts)
        assert res.aok_lch.C == pytest.approx(0.02)

    def test_target_mode_requires_chroma(self):
        with pytest.raises(ValueError, match="global_target_aok_chroma"):
            adjust_aok_color_to_lab_l(AokLch(0.5, 0.1, 140.0), 60.0, "target")

    def test_invalid_mode(self):
        with pytest.raises(ValueError):
            adjust_aok_color_to_lab_l(AokLch(0.5, 0.1, 140.0), 60.0, "auto")

    def test_l_star_out_of_range(self):
        with pytest.raises(ValueError):
            adjust_aok_color_to_lab_l(AokLch(0.5, 0.1, 140.0), 120.0)

    def test_nan_hint(self):
        with pytest.raises(ValueError):
            adjust_aok_color_to_lab_l(AokLch(0.5, math.nan, 140.0), 50.0)

    def test_options_type(self):
        with pytest.raises(TypeError):
            adjust_aok_color_to_lab_l(AokLch(0.5, 0.1, 140.0), 50.0, options={"tolerance": 1e-3})


class TestOptions:

    def test_defaults(self):
        opts = ChromaControlOptions()
        assert opts.tolerance == 1e-4
        assert opts.max_iterations == 50
        assert opts.surround_gamma == 3.0

    def test_surround_name(self):
        opts = ChromaControlOptions(aok="white")
        assert isinstance(opts.aok, AokConfig)
        assert opts.aok.surround == "white"

    def test_non_positive_tolerance(self):
        with pytest.raises(ValueError):
            ChromaControlOptions(tolerance=0.0)

    def test_non_positive_step(self):
        with pytest.raises(ValueError):
            ChromaControlOptions(chroma_step=0.0)

    def test_surround_gamma_repaired(self):
        with pytest.warns(ColorAdvisory):
            opts = ChromaControlOptions(surround_gamma=1.0)
        assert opts.surround_gamma == 3.0

    def test_injected_logger_receives_repairs(self):
        messages = []
        opts = ChromaControlOptions(aok="neon", surround_gamma=0.5, logger=messages.append)
        assert len(messages) == 2
        assert opts.aok.surround == "gray"
        assert opts.surround_gamma == 3.0

    def test_logger_not_part_of_equality(self):
        assert ChromaControlOptions(logger=print) == ChromaControlOptions()
