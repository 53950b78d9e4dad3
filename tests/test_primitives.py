"""Tests for numeric helpers, records and the shape-normalizing decorator."""

import dataclasses
import warnings

import numpy as np
import pytest

from skein import Lab, Srgb, Xyz, srgb_to_xyz
from skein.__about__ import __version__, metadata_summary
from skein.diagnostics import ColorAdvisory, ShapeError, advise
from skein.primitives import (
    cartesian_to_polar,
    clamp,
    deg_to_rad,
    lerp,
    mat_vec,
    normalize_hue,
    polar_to_cartesian,
    rad_to_deg,
    sign_pow,
)


class TestScalarHelpers:
    """Sign-preserving power, clamping and hue wrapping."""

    def test_sign_pow_keeps_sign(self):
        assert sign_pow(-8.0, 1.0 / 3.0) == pytest.approx(-2.0)
        assert sign_pow(8.0, 1.0 / 3.0) == pytest.approx(2.0)

    def test_sign_pow_zero_is_zero(self):
        assert sign_pow(0.0, 0.5) == 0.0
        np.testing.assert_array_equal(sign_pow(np.zeros(3), 0.0), np.zeros(3))

    def test_sign_pow_infinite_exponent_limit(self):
        out = sign_pow(np.array([0.5, -2.0]), np.inf)
        assert out[0] == 0.0
        assert out[1] == -np.inf

    @pytest.mark.parametrize("h, expected", [
        (-30.0, 330.0),
        (720.0, 0.0),
        (359.5, 359.5),
        (-1e-15, 0.0),
    ])
    def test_normalize_hue(self, h, expected):
        assert normalize_hue(h) == pytest.approx(expected)
        assert 0.0 <= normalize_hue(h) < 360.0

    def test_clamp_passes_nan(self):
        assert np.isnan(clamp(float("nan"), 0.0, 1.0))
        assert clamp(1.5, 0.0, 1.0) == 1.0

    def test_lerp(self):
        assert lerp(2.0, 4.0, 0.25) == pytest.approx(2.5)

    def test_angle_conversion(self):
        assert deg_to_rad(180.0) == pytest.approx(np.pi)
        np.testing.assert_allclose(rad_to_deg(np.array([np.pi / 2, -np.pi])), [90.0, -180.0])


class TestMatVec:

    def test_identity(self):
        np.testing.assert_array_equal(mat_vec(np.eye(3), [1.0, 2.0, 3.0]), [1.0, 2.0, 3.0])

    def test_nan_in_vector_propagates(self):
        out = mat_vec(np.eye(3), [np.nan, 0.0, 0.0])
        assert np.all(np.isnan(out))

    def test_non_finite_matrix_rejected(self):
        m = np.eye(3)
        m[1, 1] = np.inf
        with pytest.raises(ShapeError):
            mat_vec(m, [1.0, 1.0, 1.0])

    def test_wrong_shapes_rejected(self):
        with pytest.raises(ShapeError):
            mat_vec(np.eye(2), [1.0, 1.0])
        with pytest.raises(ShapeError):
            mat_vec(np.eye(3), [1.0, 1.0])


class TestHandleShapes:
    """Record, vector and batch inputs of a decorated transform."""

    def test_record_in_record_out(self):
        assert isinstance(srgb_to_xyz(Srgb(0.2, 0.4, 0.6)), Xyz)

    def test_vector_in_vector_out(self):
        assert srgb_to_xyz([0.2, 0.4, 0.6]).shape == (3,)

    def test_batch_in_batch_out(self):
        assert srgb_to_xyz(np.full((5, 3), 0.5)).shape == (5, 3)

    def test_record_and_array_agree(self):
        rec = srgb_to_xyz(Srgb(0.2, 0.4, 0.6))
        arr = srgb_to_xyz(np.array([0.2, 0.4, 0.6]))
        np.testing.assert_allclose(rec.to_array(), arr, rtol=0, atol=0)

    def test_wrong_record_type_rejected(self):
        with pytest.raises(TypeError):
            srgb_to_xyz(Lab(50.0, 0.0, 0.0))

    def test_wrong_arity_rejected(self):
        with pytest.raises(ShapeError):
            srgb_to_xyz([0.1, 0.2, 0.3, 0.4])
        with pytest.raises(ValueError):
            srgb_to_xyz(np.zeros((2, 2)))

    def test_input_not_mutated(self):
        rgb = np.array([[0.2, 0.4, 0.6]])
        before = rgb.copy()
        srgb_to_xyz(rgb)
        np.testing.assert_array_equal(rgb, before)


class TestRecords:

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            Srgb(0.1, 0.2, 0.3).r = 0.5  # type: ignore[misc]

    def test_iteration_and_replace(self):
        c = Srgb(0.1, 0.2, 0.3)
        assert tuple(c) == (0.1, 0.2, 0.3)
        assert c.replace(g=0.9) == Srgb(0.1, 0.9, 0.3)

    def test_from_array_checks_length(self):
        assert Lab.from_array([50.0, 1.0, 2.0]) == Lab(50.0, 1.0, 2.0)
        with pytest.raises(ShapeError):
            Lab.from_array([50.0, 1.0])


class TestPolarKernels:

    def test_achromatic_hue_is_zero(self):
        out = cartesian_to_polar(np.array([[0.5, 0.0, 0.0]]))
        np.testing.assert_array_equal(out, [[0.5, 0.0, 0.0]])

    def test_quadrants(self):
        out = cartesian_to_polar(np.array([[0.5, 0.0, -1.0], [0.5, -1.0, 0.0]]))
        np.testing.assert_allclose(out[:, 2], [270.0, 180.0])

    def test_inverse(self):
        lch = np.array([[0.6, 0.1, 123.0]])
        np.testing.assert_allclose(cartesian_to_polar(polar_to_cartesian(lch)), lch, atol=1e-12)


class TestAdvisories:

    def test_logger_bypasses_warnings(self):
        messages = []
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            advise("repaired", messages.append)
        assert messages == ["repaired"]
        assert not caught

    def test_discarded_by_default(self):
        with warnings.catch_warnings(record=True) as caught:
            advise("repaired")
        assert not [w for w in caught if issubclass(w.category, ColorAdvisory)]

    def test_application_filter_takes_precedence(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", ColorAdvisory)
            advise("repaired")
        assert [str(w.message) for w in caught] == ["repaired"]

    def test_ignore_entry_is_last_for_category(self):
        entries = [f for f in warnings.filters if f[2] is ColorAdvisory]
        assert entries[-1][0] == "ignore"


class TestMetadata:

    def test_summary(self):
        meta = metadata_summary()
        assert meta["version"] == __version__
        assert meta["license"] == "LGPL-3.0-or-later"
