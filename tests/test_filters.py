"""
Tests for the bilateral and Gaussian filters.
"""

import numpy as np
import pytest

from hdrtmo.filters import (
    auto_sigma_range,
    bilateral_filter,
    boxes_for_gauss,
    fast_gaussian,
    log10_image,
    pow10_image,
)


class TestLogPow:
    """Tests for the log-domain maps."""

    def test_pow10_inverts_log10(self):
        data = np.random.default_rng(0).uniform(1e-8, 2e4, (4, 4, 3))
        np.testing.assert_allclose(pow10_image(log10_image(data)), data, rtol=1e-12)


class TestBilateral:
    """Tests for the luminance-guided bilateral filter."""

    def test_constant_image_unchanged(self):
        data = np.full((12, 10, 3), -2.5)
        np.testing.assert_allclose(bilateral_filter(data, 2.0), data, rtol=1e-12)

    def test_smooths_noise(self):
        """Noise on a flat region is reduced."""
        rng = np.random.default_rng(1)
        data = 1.0 + rng.normal(0, 0.05, (40, 40, 3))
        out = bilateral_filter(data, 3.0, sigma_range=1.0)
        assert out[..., 1].std() < 0.5 * data[..., 1].std()

    def test_preserves_edge(self):
        """A strong step survives while a Gaussian of the same width smears it."""
        data = np.zeros((20, 40, 3))
        data[:, 20:, :] = 4.0
        out = bilateral_filter(data, 4.0, sigma_range=0.2)
        assert out[10, 17, 1] < 0.1
        assert out[10, 22, 1] > 3.9

    def test_tiny_sigma_is_near_identity(self):
        data = np.random.default_rng(2).uniform(-3, 3, (8, 8, 3))
        np.testing.assert_allclose(bilateral_filter(data, 0.16), data, atol=1e-6)

    def test_zero_sigma_returns_copy(self):
        data = np.ones((3, 3, 3))
        out = bilateral_filter(data, 0.0)
        assert out is not data
        np.testing.assert_array_equal(out, data)

    def test_input_not_modified(self):
        data = np.random.default_rng(3).uniform(size=(10, 10, 3))
        before = data.copy()
        bilateral_filter(data, 2.0)
        np.testing.assert_array_equal(data, before)

    def test_bad_shape_and_sigma(self):
        with pytest.raises(ValueError):
            bilateral_filter(np.ones((4, 4)), 1.0)
        with pytest.raises(ValueError, match="sigma_range must be positive"):
            bilateral_filter(np.ones((4, 4, 3)), 1.0, sigma_range=0.0)

    def test_auto_sigma_range_floor(self):
        assert auto_sigma_range(np.zeros((3, 3))) == pytest.approx(1e-3)
        assert auto_sigma_range(np.array([0.0, 10.0])) == pytest.approx(4.0)


class TestFastGaussian:
    """Tests for the box-blur Gaussian approximation."""

    def test_boxes_are_odd(self):
        for sigma in [1, 2.5, 4, 17, 300]:
            boxes = boxes_for_gauss(sigma)
            assert len(boxes) == 3
            assert all(b % 2 == 1 for b in boxes)

    def test_boxes_match_variance(self):
        """Summed box variances approximate sigma squared."""
        sigma = 10.0
        variance = sum((b * b - 1) / 12 for b in boxes_for_gauss(sigma))
        assert variance == pytest.approx(sigma * sigma, rel=0.1)

    def test_preserves_constant(self):
        data = np.full((9, 13, 3), 7.0)
        np.testing.assert_allclose(fast_gaussian(data, 6), data, rtol=1e-12)

    def test_preserves_mean_of_impulse(self):
        data = np.zeros((41, 41))
        data[20, 20] = 1.0
        out = fast_gaussian(data, 3)
        assert out.sum() == pytest.approx(1.0, rel=1e-9)
        assert out[20, 20] == out.max()

    def test_channels_not_mixed(self):
        """Only the spatial axes are blurred."""
        data = np.zeros((5, 5, 3))
        data[..., 0] = 1.0
        out = fast_gaussian(data, 2)
        np.testing.assert_allclose(out[..., 0], 1.0)
        np.testing.assert_allclose(out[..., 1:], 0.0)

    def test_small_radius_returns_copy(self):
        data = np.arange(9.0).reshape(3, 3)
        np.testing.assert_array_equal(fast_gaussian(data, 0), data)
