"""
Image filters used by the layer decomposition and white point estimation.

Provides:
- log10 / pow10 per-pixel maps
- Luminance-guided bilateral filter (bilateral grid)
- Fast large-radius Gaussian approximation (three box blurs)

All filters take a float array of shape (H, W, C) and return a new array;
inputs are never modified.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from scipy import ndimage

logger = logging.getLogger(__name__)

# Automatic range sigma as a fraction of the guide channel span
AUTO_RANGE_FACTOR = 0.4
MIN_SIGMA_RANGE = 1e-3

# Empty grid cells kept around the data so the grid blur has room to spread
GRID_PADDING = 2


def log10_image(data: np.ndarray) -> np.ndarray:
    """Per-pixel base-10 logarithm."""
    return np.log10(data)


def pow10_image(data: np.ndarray) -> np.ndarray:
    """Per-pixel base-10 exponentiation, inverse of :func:`log10_image`."""
    return np.power(10.0, data)


def auto_sigma_range(guide: np.ndarray) -> float:
    """Range sigma derived from the spread of the guide values."""
    span = float(np.max(guide) - np.min(guide))
    return max(AUTO_RANGE_FACTOR * span, MIN_SIGMA_RANGE)


def bilateral_filter(
    data: np.ndarray,
    sigma_spatial: float,
    sigma_range: float | None = None,
    guide_channel: int = 1,
) -> np.ndarray:
    """
    Edge-preserving blur driven by one channel of the image.

    Implements the bilateral grid of Paris & Durand: pixels are splatted
    into a coarse (y, x, guide) volume, the volume is Gaussian blurred,
    and each pixel reads back its value by trilinear interpolation. All
    channels share the weights computed from ``guide_channel`` (Y for XYZ
    data), so the chromaticity of a pixel is smoothed along with its
    luminance.

    Parameters
    ----------
    data : np.ndarray
        Image of shape (H, W, C). Negative values are allowed, which makes
        the filter usable on log-encoded luminance.
    sigma_spatial : float
        Spatial standard deviation in pixels. Values <= 0 return a copy.
    sigma_range : float or None, default None
        Standard deviation in guide units. None derives it from the
        guide's span with :func:`auto_sigma_range`.
    guide_channel : int, default 1
        Channel driving the range kernel.

    Returns
    -------
    np.ndarray
        Filtered float64 image of shape (H, W, C).
    """
    data = np.asarray(data, dtype=np.float64)
    if data.ndim != 3:
        raise ValueError(f"Expected array of shape (H, W, C), got {data.shape}")
    if sigma_spatial <= 0:
        return data.copy()

    height, width, n_channels = data.shape
    guide = data[..., guide_channel]
    gmin = float(np.min(guide))
    span = float(np.max(guide)) - gmin
    if sigma_range is None:
        sigma_range = auto_sigma_range(guide)
    elif sigma_range <= 0:
        raise ValueError(f"sigma_range must be positive, got {sigma_range}")

    # One grid cell per sigma, but never finer than a pixel
    cell = max(sigma_spatial, 1.0)
    grid_sigma = sigma_spatial / cell

    grid_h = int((height - 1) / cell) + 1 + 2 * GRID_PADDING
    grid_w = int((width - 1) / cell) + 1 + 2 * GRID_PADDING
    grid_d = int(span / sigma_range) + 1 + 2 * GRID_PADDING
    n_cells = grid_h * grid_w * grid_d

    logger.debug(
        "Bilateral grid %dx%dx%d (sigma_spatial=%.3f, sigma_range=%.4f)",
        grid_h, grid_w, grid_d, sigma_spatial, sigma_range,
    )

    yy, xx = np.mgrid[0:height, 0:width]
    gy = (yy / cell + GRID_PADDING).ravel()
    gx = (xx / cell + GRID_PADDING).ravel()
    gz = ((guide - gmin) / sigma_range + GRID_PADDING).ravel()

    # Splat to the nearest cell
    flat = (np.rint(gy).astype(np.intp) * grid_w + np.rint(gx).astype(np.intp)) * grid_d
    flat += np.rint(gz).astype(np.intp)

    coords = np.stack([gy, gx, gz])
    blur_sigma = (grid_sigma, grid_sigma, 1.0)

    def _slice(weights: np.ndarray | None) -> np.ndarray:
        grid = np.bincount(flat, weights=weights, minlength=n_cells).astype(np.float64)
        grid = ndimage.gaussian_filter(grid.reshape(grid_h, grid_w, grid_d), sigma=blur_sigma, mode="constant")
        return ndimage.map_coordinates(grid, coords, order=1, mode="nearest")

    norm = _slice(None)
    out = np.empty_like(data)
    for c in range(n_channels):
        out[..., c] = (_slice(data[..., c].ravel()) / norm).reshape(height, width)
    return out


def boxes_for_gauss(sigma: float, n: int = 3) -> list[int]:
    """
    Odd box widths whose successive application approximates a Gaussian.

    Parameters
    ----------
    sigma : float
        Target Gaussian standard deviation in pixels.
    n : int, default 3
        Number of box passes.

    Returns
    -------
    list[int]
        ``n`` odd box widths.
    """
    w_ideal = math.sqrt(12 * sigma * sigma / n + 1)
    wl = int(math.floor(w_ideal))
    if wl % 2 == 0:
        wl -= 1
    wu = wl + 2

    m_ideal = (12 * sigma * sigma - n * wl * wl - 4 * n * wl - 3 * n) / (-4 * wl - 4)
    m = round(m_ideal)
    return [wl if i < m else wu for i in range(n)]


def fast_gaussian(data: np.ndarray, radius: float) -> np.ndarray:
    """
    Large-radius Gaussian blur approximated by three box blurs.

    Cost does not depend on the radius, which matters for the
    near-global blur of the white point estimation. Edge pixels are
    replicated beyond the border. Only the two spatial axes are blurred.

    Parameters
    ----------
    data : np.ndarray
        Image of shape (H, W) or (H, W, C).
    radius : float
        Gaussian standard deviation in pixels. Values < 1 return a copy.

    Returns
    -------
    np.ndarray
        Blurred float64 image of the same shape.
    """
    out = np.array(data, dtype=np.float64, copy=True)
    if radius < 1:
        return out

    spatial_only = (1,) * (out.ndim - 2)
    for size in boxes_for_gauss(radius):
        out = ndimage.uniform_filter(out, size=(size, size) + spatial_only, mode="nearest")
    return out
