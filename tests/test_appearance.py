"""
Tests for IPT appearance rendering.
"""

import numpy as np
import pytest

from hdrtmo.adaptation import cone_sensitivity
from hdrtmo.appearance import colorfulness_surround, hunt_scale, ipt_color, reverse_ipt_color
from hdrtmo.color import D65_XYZ, xyz_to_lms


def _near_neutral(rng, shape):
    """Slightly tinted D65 colors, whose cone signals stay positive."""
    y = rng.uniform(0.5, 50, shape)[..., np.newaxis]
    return np.asarray(D65_XYZ) / 100.0 * y * rng.uniform(0.9, 1.1, shape + (3,))


class TestIPT:
    """Tests for the XYZ <-> IPT conversions."""

    def test_round_trip_non_negative_lms(self):
        """XYZ -> IPT -> XYZ is exact to 1e-6 when LMS is non-negative."""
        rng = np.random.default_rng(0)
        xyz = rng.uniform(0.1, 100, (50, 3))
        xyz = xyz[np.all(xyz_to_lms(xyz) >= 0, axis=-1)]
        assert len(xyz) > 0

        back = reverse_ipt_color(ipt_color(xyz))
        np.testing.assert_allclose(back, xyz, rtol=1e-6)

    def test_d65_is_achromatic(self):
        """The D65 white (X = 96.047) has almost no P and T."""
        ipt = ipt_color(np.asarray(D65_XYZ) / 100.0)
        assert abs(ipt[1]) < 0.02
        assert abs(ipt[2]) < 0.02

    def test_sign_is_discarded(self):
        """Negative LMS signals come back positive."""
        xyz = np.array([-10.0, 5.0, 2.0])
        back = reverse_ipt_color(ipt_color(xyz))
        assert np.all(xyz_to_lms(back) >= -1e-9)


class TestHuntScale:
    """Tests for the colorfulness boost."""

    def test_neutral_chroma(self):
        """Zero chroma keeps scale at (fl+1)^0.2."""
        assert float(hunt_scale(np.array(0.0), np.array(0.0))) == pytest.approx(1.0)
        assert float(hunt_scale(np.array(0.0), np.array(1.0))) == pytest.approx(2 ** 0.2)

    def test_large_chroma_limit(self):
        assert float(hunt_scale(np.array(1e6), np.array(0.0))) == pytest.approx(1.29, rel=1e-4)


class TestColorfulnessSurround:
    """Tests for the full appearance adjustment."""

    def test_intensity_unchanged(self):
        """Only P and T are scaled; I is kept."""
        rng = np.random.default_rng(1)
        xyz = _near_neutral(rng, (3, 4))
        base_y = rng.uniform(1, 1000, (3, 4))

        out = colorfulness_surround(xyz.copy(), base_y)
        np.testing.assert_allclose(ipt_color(out)[..., 0], ipt_color(xyz)[..., 0], rtol=1e-6)

    def test_chroma_scaled(self):
        rng = np.random.default_rng(2)
        xyz = _near_neutral(rng, (5,))
        base_y = np.full(5, 100.0)

        ipt_in = ipt_color(xyz)
        ipt_out = ipt_color(colorfulness_surround(xyz, base_y))
        chroma_in = np.hypot(ipt_in[:, 1], ipt_in[:, 2])
        expected = chroma_in * hunt_scale(chroma_in, cone_sensitivity(20.0))
        np.testing.assert_allclose(np.hypot(ipt_out[:, 1], ipt_out[:, 2]), expected, rtol=1e-6)
