"""Tests for the CIECAM16 forward model and CAM16-UCS."""

import numpy as np
import pytest

from skein import (
    ILLUMINANTS,
    SURROUND_PARAMETERS,
    Cam16,
    Cam16Ucs,
    Cam16UcsPolar,
    ColorAdvisory,
    Lab,
    Srgb,
    ViewingConditions,
    Xyz,
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


@pytest.fixture
def full_adaptation():
    return ViewingConditions(degree_of_adaptation=1.0)


class TestForwardModel:

    def test_reference_white_lightness(self):
        cam = xyz_to_ciecam16(Xyz.from_array(ILLUMINANTS["D65"]))
        assert isinstance(cam, Cam16)
        assert cam.J == pytest.approx(100.0, abs=1e-6)

    def test_black_is_all_zero(self):
        cam = xyz_to_ciecam16(np.zeros(3))
        np.testing.assert_array_equal(cam, np.zeros(9))

    def test_srgb_white(self, full_adaptation):
        cam = srgb_to_ciecam16(Srgb(1.0, 1.0, 1.0), full_adaptation)
        assert cam.J == pytest.approx(100.0, abs=0.5)
        assert cam.C < 0.5

    def test_full_adaptation_removes_white_chroma(self, full_adaptation):
        cam = xyz_to_ciecam16(ILLUMINANTS["D65"], full_adaptation)
        assert cam[2] == pytest.approx(0.0, abs=1e-6)
        assert cam[3] == pytest.approx(0.0, abs=1e-6)

    def test_red_hue(self):
        cam = srgb_to_ciecam16(Srgb(1.0, 0.0, 0.0))
        assert 15.0 < cam.h < 40.0
        assert cam.C > 50.0
        assert cam.H == cam.h

    def test_lightness_monotone_over_grays(self):
        grays = np.repeat(np.linspace(0.1, 0.9, 9)[:, np.newaxis], 3, axis=1)
        J = srgb_to_ciecam16(grays)[:, 0]
        assert np.all(np.diff(J) > 0.0)

    def test_nan_input_gives_finite_output(self):
        cam = xyz_to_ciecam16(np.array([[np.nan, 50.0, 50.0], [20.0, 20.0, 20.0]]))
        assert np.all(np.isfinite(cam))
        np.testing.assert_array_equal(cam[0], np.zeros(9))

    def test_batch_shape(self):
        rng = np.random.default_rng(11)
        cam = srgb_to_ciecam16(rng.uniform(size=(25, 3)))
        assert cam.shape == (25, 9)

    def test_cartesian_correlates(self):
        cam = srgb_to_ciecam16(Srgb(0.2, 0.6, 0.3))
        assert np.hypot(cam.ac, cam.bc) == pytest.approx(cam.M)

    def test_hex_input(self):
        assert srgb_to_ciecam16("#ff8000") == srgb_to_ciecam16(Srgb(1.0, 128 / 255, 0.0))

    def test_invalid_hex(self):
        with pytest.raises(ValueError):
            srgb_to_ciecam16("#zzzzzz")

    def test_conditions_type(self):
        with pytest.raises(TypeError):
            srgb_to_ciecam16(Srgb(0.5, 0.5, 0.5), "average")

    def test_surround_changes_result(self):
        color = Srgb(0.4, 0.3, 0.6)
        avg = srgb_to_ciecam16(color)
        dark = srgb_to_ciecam16(color, ViewingConditions(surround="dark"))
        assert dark.J != avg.J


class TestViewingConditions:

    def test_surround_table(self):
        assert SURROUND_PARAMETERS["average"] == (1.0, 0.69, 1.0)
        assert SURROUND_PARAMETERS["dark"] == (0.8, 0.525, 0.8)

    def test_defaults(self):
        vc = ViewingConditions()
        assert vc.adapting_luminance == 40.0
        assert vc.background_luminance == 20.0
        assert vc.surround == "average"
        assert vc.reference_white == tuple(float(v) for v in ILLUMINANTS["D65"])
        assert vc.degree_of_adaptation is None

    def test_negative_adapting_luminance(self):
        with pytest.warns(ColorAdvisory):
            vc = ViewingConditions(adapting_luminance=-64.0)
        assert vc.adapting_luminance == 64.0

    def test_non_positive_background(self):
        with pytest.warns(ColorAdvisory):
            vc = ViewingConditions(background_luminance=0.0)
        assert vc.background_luminance == 0.1

    def test_unknown_surround(self):
        with pytest.warns(ColorAdvisory):
            vc = ViewingConditions(surround="bright")
        assert vc.surround == "average"

    def test_non_finite_luminance(self):
        with pytest.raises(ValueError):
            ViewingConditions(adapting_luminance=float("inf"))

    def test_bad_white(self):
        with pytest.raises(ValueError):
            ViewingConditions(reference_white=(0.0, 0.0, 0.0))

    def test_degree_of_adaptation(self):
        assert ViewingConditions(degree_of_adaptation=2.0).degree_of_adaptation == 1.0
        assert ViewingConditions(degree_of_adaptation=float("nan")).degree_of_adaptation is None

    def test_injected_logger_receives_repairs(self):
        messages = []
        vc = ViewingConditions(adapting_luminance=-64.0, background_luminance=0.0,
                               surround="bright", logger=messages.append)
        assert len(messages) == 3
        assert vc.surround == "average"

    def test_logger_not_part_of_identity(self):
        vc = ViewingConditions(logger=print)
        assert vc == ViewingConditions()
        assert hash(vc) == hash(ViewingConditions())

    def test_white_as_list_is_hashable(self):
        vc = ViewingConditions(reference_white=[96.42, 100.0, 82.49])
        assert hash(vc) == hash(ViewingConditions(reference_white=(96.42, 100.0, 82.49)))


class TestUcs:

    def test_round_trip(self):
        vc = ViewingConditions(adapting_luminance=64.0, surround="dim")
        cam = srgb_to_ciecam16(Srgb(0.7, 0.4, 0.2), vc)
        back = ucs_to_cam16(cam16_to_ucs(cam), vc)
        assert isinstance(back, Cam16)
        np.testing.assert_allclose(back.to_array(), cam.to_array(), rtol=1e-9, atol=1e-9)

    def test_batch_round_trip(self):
        rng = np.random.default_rng(3)
        cam = srgb_to_ciecam16(rng.uniform(0.05, 0.95, size=(20, 3)))
        back = ucs_to_cam16(cam16_to_ucs(cam))
        np.testing.assert_allclose(back[:, :4], cam[:, :4], rtol=1e-9, atol=1e-9)

    def test_lightness_fixed_point(self):
        ucs = cam16_to_ucs(np.array([100.0, 0, 0, 0, 0, 0, 0, 0, 0]))
        assert ucs[0] == pytest.approx(100.0)

    def test_record_type(self):
        assert isinstance(srgb_to_cam16_ucs("#336699"), Cam16Ucs)

    def test_bad_width(self):
        with pytest.raises(ValueError):
            cam16_to_ucs(np.zeros(3))

    def test_polar(self):
        polar = ucs_to_polar(Cam16Ucs(50.0, 3.0, 4.0))
        assert isinstance(polar, Cam16UcsPolar)
        assert polar.J == 50.0
        assert polar.C == pytest.approx(5.0)
        assert polar.h == pytest.approx(53.1301, abs=1e-4)
        np.testing.assert_allclose(polar_to_ucs(polar).to_array(), [50.0, 3.0, 4.0])

    def test_difference(self):
        assert cam16_ucs_difference(Cam16Ucs(50.0, 3.0, 4.0), Cam16Ucs(50.0, 0.0, 0.0)) == pytest.approx(5.0)

    def test_difference_rejects_other_records(self):
        with pytest.raises(TypeError):
            cam16_ucs_difference(Lab(50.0, 3.0, 4.0), Cam16Ucs(50.0, 0.0, 0.0))

    def test_interpolation_shorter_arc(self):
        mid = interpolate_cam16_ucs_polar(Cam16UcsPolar(50.0, 10.0, 350.0),
                                          Cam16UcsPolar(60.0, 20.0, 10.0), 0.5)
        assert mid.J == pytest.approx(55.0)
        assert mid.C == pytest.approx(15.0)
        assert mid.h == pytest.approx(0.0, abs=1e-9)

    def test_interpolation_endpoints(self):
        a = Cam16UcsPolar(40.0, 12.0, 100.0)
        b = Cam16UcsPolar(70.0, 5.0, 200.0)
        assert interpolate_cam16_ucs_polar(a, b, 0.0) == a
        assert interpolate_cam16_ucs_polar(a, b, 1.0).h == pytest.approx(200.0)

    def test_polar_interpolation_rejects_cartesian(self):
        with pytest.raises(TypeError):
            interpolate_cam16_ucs_polar(Cam16Ucs(50.0, 3.0, 4.0), Cam16UcsPolar(50.0, 5.0, 0.0), 0.5)

    def test_cartesian_interpolation(self):
        mid = interpolate_cam16_ucs(Cam16Ucs(40.0, 10.0, -10.0), Cam16Ucs(60.0, -10.0, 10.0), 0.5)
        assert isinstance(mid, Cam16Ucs)
        np.testing.assert_allclose(mid.to_array(), [50.0, 0.0, 0.0], atol=1e-12)

    def test_cartesian_interpolation_batch(self):
        start = np.zeros((4, 3))
        end = np.full((4, 3), 10.0)
        out = interpolate_cam16_ucs(start, end, 0.25)
        assert out.shape == (4, 3)
        np.testing.assert_allclose(out, 2.5)


def _hue_gap(h, expected):
    return abs((h - expected + 180.0) % 360.0 - 180.0)


class TestHarmonies:

    base = Cam16Ucs(50.0, 3.0, 4.0)

    def test_complementary(self):
        comp = complementary_cam16_ucs(self.base)
        assert isinstance(comp, Cam16Ucs)
        np.testing.assert_allclose(comp.to_array(), [50.0, -3.0, -4.0], atol=1e-12)

    def test_rotation_keeps_lightness_and_colorfulness(self):
        turned = ucs_to_polar(rotate_cam16_ucs_hue(self.base, 75.0))
        assert turned.J == 50.0
        assert turned.C == pytest.approx(5.0)
        assert _hue_gap(turned.h, ucs_to_polar(self.base).h + 75.0) < 1e-9

    def test_rotation_batch(self):
        ucs = np.array([[50.0, 3.0, 4.0], [70.0, -2.0, 1.0]])
        out = rotate_cam16_ucs_hue(ucs, 180.0)
        np.testing.assert_allclose(out[:, 1:], -ucs[:, 1:], atol=1e-12)
        np.testing.assert_array_equal(out[:, 0], ucs[:, 0])

    def test_analogous_order(self):
        h0 = ucs_to_polar(self.base).h
        colors = analogous_cam16_ucs(self.base, angle=30.0, count=2)
        assert len(colors) == 4
        for color, offset in zip(colors, (-30.0, 30.0, -60.0, 60.0)):
            polar = ucs_to_polar(color)
            assert polar.C == pytest.approx(5.0)
            assert _hue_gap(polar.h, h0 + offset) < 1e-9

    def test_analogous_rejects_negative_count(self):
        with pytest.raises(ValueError):
            analogous_cam16_ucs(self.base, count=-1)

    def test_triadic(self):
        h0 = ucs_to_polar(self.base).h
        first, second, third = triadic_cam16_ucs(self.base)
        assert first == self.base
        assert _hue_gap(ucs_to_polar(second).h, h0 + 120.0) < 1e-9
        assert _hue_gap(ucs_to_polar(third).h, h0 + 240.0) < 1e-9

    def test_rejects_other_records(self):
        with pytest.raises(TypeError):
            complementary_cam16_ucs(Lab(50.0, 3.0, 4.0))
