"""
Pytest configuration and fixtures.
"""

import numpy as np
import pytest

from hdrtmo.image import HDRImage

# D65 chromaticity: X and Z per unit Y
D65_X = 0.95047
D65_Z = 1.08883


@pytest.fixture
def d65_gray_xyz():
    """Create a uniform XYZ image with D65 chromaticity."""
    def _create(height=4, width=4, luminance=100.0):
        xyz = np.empty((height, width, 3), dtype=np.float64)
        xyz[:, :, 0] = D65_X * luminance
        xyz[:, :, 1] = luminance
        xyz[:, :, 2] = D65_Z * luminance
        return xyz

    return _create


@pytest.fixture
def bright_patch_image():
    """Create a dim D65 background with a bright square in the center."""
    def _create(size=8, patch=2, background=50.0, highlight=5000.0):
        y = np.full((size, size), background, dtype=np.float64)
        start = (size - patch) // 2
        y[start:start + patch, start:start + patch] = highlight

        xyz = np.stack([D65_X * y, y, D65_Z * y], axis=-1)
        return HDRImage.from_xyz(xyz)

    return _create


@pytest.fixture
def random_hdr_rgb():
    """Create a random linear RGB image spanning several decades."""
    def _create(height=24, width=32, decades=4, seed=42):
        rng = np.random.default_rng(seed)
        exponent = rng.uniform(-1, decades - 1, (height, width, 1))
        tint = rng.uniform(0.5, 1.5, (height, width, 3))
        return HDRImage.from_rgb(10.0 ** exponent * tint)

    return _create
