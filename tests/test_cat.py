"""Tests for chromatic adaptation and white point utilities."""

import numpy as np
import pytest

from skein import (
    CAT_METHODS,
    ILLUMINANTS,
    WHITE_D50,
    WHITE_D65,
    Xyz,
    adaptation_matrix,
    chromatic_adaptation,
    closest_illuminant,
    correlated_color_temperature,
    needs_chromatic_adaptation,
    white_point_from_temperature,
    xyz_d50_to_d65,
    xyz_d65_to_d50,
)

METHODS = ("bradford", "cat02", "cat16", "vonKries")


class TestAdaptation:

    @pytest.mark.parametrize("method", METHODS)
    @pytest.mark.parametrize("src, dst", [("D65", "D50"), ("A", "D65"), ("F11", "E")])
    def test_symmetry(self, method, src, dst):
        xyz = np.array([[0.2, 0.3, 0.4], [0.9, 0.95, 1.0], [0.05, 0.02, 0.3]])
        there = chromatic_adaptation(xyz, src, dst, method)
        back = chromatic_adaptation(there, dst, src, method)
        np.testing.assert_allclose(back, xyz, atol=1e-2)

    @pytest.mark.parametrize("method", METHODS)
    @pytest.mark.parametrize("name", sorted(ILLUMINANTS))
    def test_identity_is_exact(self, method, name):
        white = ILLUMINANTS[name]
        np.testing.assert_array_equal(chromatic_adaptation(white, name, name, method), white)

    @pytest.mark.parametrize("method", METHODS)
    def test_white_maps_to_white(self, method):
        np.testing.assert_allclose(chromatic_adaptation(WHITE_D65, "D65", "D50", method),
                                   WHITE_D50, atol=0.5)

    def test_record_in_record_out(self):
        out = xyz_d65_to_d50(Xyz(0.3, 0.4, 0.5))
        assert isinstance(out, Xyz)
        np.testing.assert_allclose(xyz_d50_to_d65(out).to_array(), [0.3, 0.4, 0.5], atol=1e-6)

    def test_white_triples_accepted(self):
        a = chromatic_adaptation([0.3, 0.4, 0.5], WHITE_D65, WHITE_D50)
        b = chromatic_adaptation([0.3, 0.4, 0.5], "D65", "D50")
        np.testing.assert_allclose(a, b)

    def test_unknown_method(self):
        with pytest.raises(ValueError, match="valid methods"):
            chromatic_adaptation([0.3, 0.4, 0.5], "D65", "D50", "sharp")

    def test_unknown_illuminant(self):
        with pytest.raises(ValueError):
            chromatic_adaptation([0.3, 0.4, 0.5], "D65", "D42")

    def test_matrix_is_read_only(self):
        m = adaptation_matrix("D65", "D50", "cat16")
        assert m.shape == (3, 3)
        assert not m.flags.writeable
        np.testing.assert_allclose(np.dot(WHITE_D65, m), WHITE_D50, atol=1e-9)

    def test_cat16_matrix_constants(self):
        np.testing.assert_allclose(CAT_METHODS["cat16"][0], [0.401288, 0.650173, -0.051461])


class TestWhitePoints:

    def test_cct_of_d65(self):
        assert correlated_color_temperature(WHITE_D65) == pytest.approx(6504.0, abs=5.0)

    def test_cct_batch(self):
        cct = correlated_color_temperature(np.vstack([WHITE_D65, ILLUMINANTS["A"]]))
        assert cct.shape == (2,)
        assert cct[1] == pytest.approx(2856.0, abs=30.0)

    def test_daylight_white(self):
        white = white_point_from_temperature(6504.0)
        assert isinstance(white, Xyz)
        np.testing.assert_allclose(white.to_array(), WHITE_D65, atol=0.2)

    def test_daylight_range(self):
        with pytest.raises(ValueError):
            white_point_from_temperature(3000.0)

    def test_closest_illuminant(self):
        assert closest_illuminant(WHITE_D50) == "D50"
        assert closest_illuminant("A") == "A"

    def test_needs_adaptation(self):
        assert needs_chromatic_adaptation("D65", "D50")
        assert not needs_chromatic_adaptation("D65", WHITE_D65)
