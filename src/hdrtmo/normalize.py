"""
Final display normalization: percentile clipping and sRGB encoding.

The appearance-space image is divided by its peak luminance and taken to
linear RGB. Black and white points are read from the sorted table of all
RGB samples; values are clipped between them, gamma encoded with the sRGB
transfer function and quantized to 16 bits.
"""

from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)

UINT16_MAX = 65535

SRGB_THRESHOLD = 0.0031308


class DegenerateRangeError(ValueError):
    """Black and white points coincide, no clipping range is left."""


class Percentiles:
    """
    Sorted table of samples queried by order statistic.

    Parameters
    ----------
    samples : array_like
        Samples in any order and shape; they are flattened and sorted.
    """

    def __init__(self, samples: np.ndarray):
        self._sorted = np.sort(np.asarray(samples, dtype=np.float64), axis=None)
        if self._sorted.size == 0:
            raise ValueError("Percentile table needs at least one sample")

    def __len__(self) -> int:
        return self._sorted.size

    @property
    def samples(self) -> np.ndarray:
        """Sorted samples (read-only view)."""
        view = self._sorted.view()
        view.setflags(write=False)
        return view

    def percentile(self, clipping: float) -> float:
        """
        Return the sample at index ``floor(clipping * n)``.

        ``clipping = 1.0`` would address one past the last sample; the
        index is held at ``n - 1`` so the largest sample is returned.
        """
        n = len(self)
        i = int(clipping * n)
        return float(self._sorted[min(max(i, 0), n - 1)])


def clipping_range(table: Percentiles, min_clipping: float, max_clipping: float) -> tuple[float, float]:
    """
    Black and white points of a percentile table.

    Returns
    -------
    tuple[float, float]
        ``(min_rgb, max_rgb)`` with ``min_rgb <= 0``.

    Raises
    ------
    DegenerateRangeError
        If ``max_rgb <= min_rgb``.
    """
    min_rgb = min(table.percentile(min_clipping), 0.0)
    max_rgb = table.percentile(max_clipping)
    if not max_rgb > min_rgb:
        raise DegenerateRangeError(
            f"Empty clipping range: min_rgb={min_rgb:g}, max_rgb={max_rgb:g}"
        )
    return min_rgb, max_rgb


def clip_channel(values: np.ndarray, min_rgb: float, max_rgb: float) -> np.ndarray:
    """Map ``[min_rgb, max_rgb]`` onto [0, 1], clamping outside values."""
    return np.clip((values - min_rgb) / (max_rgb - min_rgb), 0.0, 1.0)


def srgb_encode(values: np.ndarray) -> np.ndarray:
    """Apply the sRGB transfer function to values in [0, 1]."""
    values = np.asarray(values, dtype=np.float64)
    high = 1.055 * np.power(np.maximum(values, SRGB_THRESHOLD), 1.0 / 2.4) - 0.055
    return np.where(values <= SRGB_THRESHOLD, 12.92 * values, high)


def to_uint16(values: np.ndarray) -> np.ndarray:
    """Scale [0, 1] values to uint16 by truncation."""
    return (UINT16_MAX * np.clip(values, 0.0, 1.0)).astype(np.uint16)


def encode_rgba16(rgb: np.ndarray, min_rgb: float, max_rgb: float) -> np.ndarray:
    """
    Encode linear RGB into an opaque 16-bit RGBA block.

    Parameters
    ----------
    rgb : np.ndarray
        Linear RGB of shape (..., 3), normalized by the peak luminance.
    min_rgb, max_rgb : float
        Black and white points from :func:`clipping_range`.

    Returns
    -------
    np.ndarray
        uint16 array of shape (..., 4) with alpha 65535.
    """
    out = np.empty(rgb.shape[:-1] + (4,), dtype=np.uint16)
    out[..., :3] = to_uint16(srgb_encode(clip_channel(rgb, min_rgb, max_rgb)))
    out[..., 3] = UINT16_MAX
    return out
