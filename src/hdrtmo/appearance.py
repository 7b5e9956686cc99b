"""
IPT appearance space rendering.

Detail-combined XYZ is taken to IPT, its chroma is boosted to model the
Hunt effect, and the result is brought back to XYZ. The LMS gamma drops
the sign of negative cone signals, so the round trip is only exact for
non-negative LMS.
"""

from __future__ import annotations

import numpy as np

from .adaptation import cone_sensitivity
from .color import ipt_to_lms, lms_to_ipt, lms_to_xyz, xyz_to_lms

IPT_GAMMA = 0.43


def ipt_color(xyz: np.ndarray) -> np.ndarray:
    """XYZ to IPT through D65 LMS and the ``|v| ** 0.43`` nonlinearity."""
    lms = np.abs(xyz_to_lms(xyz)) ** IPT_GAMMA
    return lms_to_ipt(lms)


def reverse_ipt_color(ipt: np.ndarray) -> np.ndarray:
    """IPT back to XYZ, inverse of :func:`ipt_color` for non-negative LMS."""
    lms = np.abs(ipt_to_lms(ipt)) ** (1.0 / IPT_GAMMA)
    return lms_to_xyz(lms)


def hunt_scale(chroma: np.ndarray, fl: np.ndarray) -> np.ndarray:
    """Colorfulness gain for chroma ``chroma`` at adaptation factor ``fl``."""
    c2 = chroma * chroma
    return (fl + 1.0) ** 0.2 * (1.29 * c2 - 0.27 * chroma + 0.42) / (c2 - 0.31 * chroma + 0.42)


def colorfulness_surround(xyz: np.ndarray, base_y: np.ndarray) -> np.ndarray:
    """
    Apply the Hunt-effect colorfulness boost in IPT.

    The surround adjustment of I is the identity for an average surround,
    so only P and T are changed.

    Parameters
    ----------
    xyz : np.ndarray
        Detail combined XYZ, shape (..., 3).
    base_y : np.ndarray
        Base layer luminance, shape (...).

    Returns
    -------
    np.ndarray
        Appearance-space XYZ, same shape as ``xyz``.
    """
    ipt = ipt_color(xyz)
    chroma = np.hypot(ipt[..., 1], ipt[..., 2])
    scale = hunt_scale(chroma, cone_sensitivity(0.2 * base_y))
    ipt[..., 1] *= scale
    ipt[..., 2] *= scale
    return reverse_ipt_color(ipt)
