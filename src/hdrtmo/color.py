"""
Color-space conversions for the iCAM06 pipeline.

All functions are pure and operate on arrays whose last axis holds a
tristimulus triple, so they serve single pixels and whole rasters alike.

Spaces covered:
- linear sRGB (D65) <-> CIE XYZ
- XYZ <-> CAT02 cone space (chromatic adaptation)
- XYZ <-> Hunt-Pointer-Estevez cone space (tone compression)
- XYZ <-> D65 LMS and LMS' <-> IPT (appearance space)

Matrices are applied with an explicit per-row sum instead of ``@`` so that
the floating point result for a pixel does not depend on how the raster was
tiled.
"""

from __future__ import annotations

import numpy as np

# Linear sRGB (D65) to XYZ, Y normalised to 1 for reference white
RGB_TO_XYZ = np.array(
    [
        [0.4124108464885388, 0.3575845678529519, 0.18045380393360833],
        [0.21264934272065283, 0.7151691357059038, 0.07218152157344333],
        [0.019331758429150258, 0.11919485595098397, 0.9503900340503373],
    ]
)

XYZ_TO_CAT02 = np.array(
    [
        [0.7328, 0.4296, -0.1624],
        [-0.7036, 1.6975, 0.0061],
        [0.0030, 0.0136, 0.9834],
    ]
)

XYZ_TO_HPE = np.array(
    [
        [0.38971, 0.68898, -0.07868],
        [-0.22981, 1.18340, 0.04641],
        [0.0, 0.0, 1.0],
    ]
)

# Ebner & Fairchild IPT
XYZ_TO_LMS = np.array(
    [
        [0.4002, 0.7075, -0.0807],
        [-0.2280, 1.1500, 0.0612],
        [0.0, 0.0, 0.9184],
    ]
)

LMS_TO_IPT = np.array(
    [
        [0.4000, 0.4000, 0.2000],
        [4.4550, -4.8510, 0.3960],
        [0.8056, 0.3572, -1.1628],
    ]
)

# Exact inverses, so that every round trip is lossless to float precision
XYZ_TO_RGB = np.linalg.inv(RGB_TO_XYZ)
CAT02_TO_XYZ = np.linalg.inv(XYZ_TO_CAT02)
HPE_TO_XYZ = np.linalg.inv(XYZ_TO_HPE)
LMS_TO_XYZ = np.linalg.inv(XYZ_TO_LMS)
IPT_TO_LMS = np.linalg.inv(LMS_TO_IPT)

for _m in (
    RGB_TO_XYZ,
    XYZ_TO_RGB,
    XYZ_TO_CAT02,
    XYZ_TO_HPE,
    XYZ_TO_LMS,
    LMS_TO_IPT,
    CAT02_TO_XYZ,
    HPE_TO_XYZ,
    LMS_TO_XYZ,
    IPT_TO_LMS,
):
    _m.setflags(write=False)
del _m


def apply_matrix(matrix: np.ndarray, data: np.ndarray) -> np.ndarray:
    """
    Apply a 3x3 matrix to every triple on the last axis.

    Parameters
    ----------
    matrix : np.ndarray
        Matrix of shape (3, 3).
    data : np.ndarray
        Array of shape (..., 3).

    Returns
    -------
    np.ndarray
        New float64 array of shape (..., 3).
    """
    data = np.asarray(data, dtype=np.float64)
    a0 = data[..., 0]
    a1 = data[..., 1]
    a2 = data[..., 2]
    out = np.empty(data.shape, dtype=np.float64)
    for i in range(3):
        out[..., i] = matrix[i, 0] * a0 + matrix[i, 1] * a1 + matrix[i, 2] * a2
    return out


def rgb_to_xyz(rgb: np.ndarray) -> np.ndarray:
    """Linear sRGB to CIE XYZ."""
    return apply_matrix(RGB_TO_XYZ, rgb)


def xyz_to_rgb(xyz: np.ndarray) -> np.ndarray:
    """CIE XYZ to linear sRGB."""
    return apply_matrix(XYZ_TO_RGB, xyz)


def xyz_to_cat02(xyz: np.ndarray) -> np.ndarray:
    """CIE XYZ to CAT02 cone responses."""
    return apply_matrix(XYZ_TO_CAT02, xyz)


def cat02_to_xyz(lms: np.ndarray) -> np.ndarray:
    """CAT02 cone responses to CIE XYZ."""
    return apply_matrix(CAT02_TO_XYZ, lms)


def xyz_to_hpe(xyz: np.ndarray) -> np.ndarray:
    """CIE XYZ to Hunt-Pointer-Estevez cone responses."""
    return apply_matrix(XYZ_TO_HPE, xyz)


def hpe_to_xyz(lms: np.ndarray) -> np.ndarray:
    """Hunt-Pointer-Estevez cone responses to CIE XYZ."""
    return apply_matrix(HPE_TO_XYZ, lms)


def xyz_to_lms(xyz: np.ndarray) -> np.ndarray:
    """CIE XYZ to D65-normalised LMS (IPT cone space)."""
    return apply_matrix(XYZ_TO_LMS, xyz)


def lms_to_xyz(lms: np.ndarray) -> np.ndarray:
    """D65-normalised LMS to CIE XYZ."""
    return apply_matrix(LMS_TO_XYZ, lms)


def lms_to_ipt(lms: np.ndarray) -> np.ndarray:
    """Non-linear LMS' to IPT."""
    return apply_matrix(LMS_TO_IPT, lms)


def ipt_to_lms(ipt: np.ndarray) -> np.ndarray:
    """IPT to non-linear LMS'."""
    return apply_matrix(IPT_TO_LMS, ipt)


# D65 white point, computed once at import and read-only afterwards
D65_XYZ = np.array([96.047, 100.0, 108.883])
D65_XYZ.setflags(write=False)

D65_CAT02 = xyz_to_cat02(D65_XYZ)
D65_CAT02.setflags(write=False)
