"""
Visual adaptation models of iCAM06.

Covers the detail layer enhancement, the CAT02 chromatic adaptation to a
local white point, and the cone/rod tone compression. Equation numbers
refer to Kuang, Johnson & Fairchild, "iCAM06: A refined image appearance
model for HDR image rendering" (2007).

All functions are vectorised over arrays whose last axis is a color
triple; scalar adaptation quantities broadcast against the leading axes.
"""

from __future__ import annotations

import numpy as np

from .color import D65_CAT02, cat02_to_xyz, hpe_to_xyz, xyz_to_cat02, xyz_to_hpe
from .config import SURROUND
from .utils import clamp_to_zero_array


def cone_sensitivity(la: np.ndarray | float) -> np.ndarray:
    """
    Luminance-level adaptation factor FL (Equations 13, 14).

    Monotonically increasing in ``la``, zero at ``la = 0``.

    Parameters
    ----------
    la : array_like
        Adapting luminance La.

    Returns
    -------
    np.ndarray
        FL for each adapting luminance.
    """
    la5 = 5.0 * np.asarray(la, dtype=np.float64)
    k4 = (1.0 / (la5 + 1.0)) ** 4
    return 0.2 * k4 * la5 + 0.1 * (1.0 - k4) ** 2 * np.cbrt(la5)


def detail_layer(normalized: np.ndarray, base: np.ndarray) -> np.ndarray:
    """
    Enhanced detail layer (Equation 24, Stevens effect).

    The ratio of the image to its base layer is raised to an exponent
    driven by the base layer luminance. Non-finite ratios become 0;
    no other correction is made.

    Parameters
    ----------
    normalized : np.ndarray
        Normalized XYZ image, shape (..., 3).
    base : np.ndarray
        Base layer XYZ, same shape.

    Returns
    -------
    np.ndarray
        Enhanced detail layer, same shape.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = clamp_to_zero_array(normalized / base)
    fl = cone_sensitivity(0.2 * base[..., 1])
    exponent = (fl + 0.8) ** 0.25
    with np.errstate(invalid="ignore"):
        return ratio ** exponent[..., np.newaxis]


def degree_of_adaptation(la: np.ndarray | float, surround: float = SURROUND) -> np.ndarray:
    """Degree of chromatic adaptation D (Equation 7)."""
    la = np.asarray(la, dtype=np.float64)
    return surround * (1.0 - np.exp(-(la + 42.0) / 92.0) / 3.6)


def chromatic_adaptation(base: np.ndarray, white: np.ndarray, surround: float = SURROUND) -> np.ndarray:
    """
    Von Kries adaptation of the base layer to the local white point.

    Both inputs are taken to CAT02 cone space; each cone signal of the
    base layer is scaled towards the D65 white by the degree of
    adaptation D computed from the local white's M response.

    Parameters
    ----------
    base : np.ndarray
        Base layer XYZ, shape (..., 3).
    white : np.ndarray
        Local white point XYZ, same shape.
    surround : float, default 1.0
        Surround factor F.

    Returns
    -------
    np.ndarray
        Adapted XYZ, same shape.
    """
    lms_base = xyz_to_cat02(base)
    lms_white = xyz_to_cat02(white)
    d = degree_of_adaptation(0.2 * lms_white[..., 1], surround)[..., np.newaxis]

    adapted = lms_base * (D65_CAT02 * d / lms_white + (1.0 - d))
    return cat02_to_xyz(adapted)


def _signed_power(x: np.ndarray, exponent: float) -> np.ndarray:
    return np.sign(x) * np.abs(x) ** exponent


def cone_response(lms: np.ndarray, fl: np.ndarray, yw: np.ndarray, contrast: float) -> np.ndarray:
    """
    Photopic cone response (Equation 15).

    Parameters
    ----------
    lms : np.ndarray
        Hunt-Pointer-Estevez cone signals, shape (..., 3).
    fl : np.ndarray
        FL of the local white, shape (...).
    yw : np.ndarray
        Y of the local white, shape (...).
    contrast : float
        Response exponent.

    Returns
    -------
    np.ndarray
        Compressed cone signals, same shape as ``lms``.
    """
    p = _signed_power(fl[..., np.newaxis] * lms / yw[..., np.newaxis], contrast)
    return 400.0 * p / (27.13 + p) + 0.1


def rod_response(s: np.ndarray, sw: float, la: np.ndarray, contrast: float) -> np.ndarray:
    """
    Scotopic rod response (Equations 16 to 20).

    Parameters
    ----------
    s : np.ndarray
        Luminance of the adapted pixel, shape (...).
    sw : float
        Global white scale, the maximum Y of the local white image.
    la : np.ndarray
        Adapting luminance, shape (...).
    contrast : float
        Response exponent.

    Returns
    -------
    np.ndarray
        Rod response As, shape (...).
    """
    lls = 5.0 * la
    j = 1e-5 / (lls + 1e-5)
    j2 = j * j
    fls = 3800.0 * j2 * lls + 0.2 * (1.0 - j2) ** 4 * lls ** (1.0 / 6.0)

    st = s / sw
    bs = 0.5 / (1.0 + 0.3 * (lls * st) ** 0.3) + 0.5 / (1.0 + 5.0 * lls)
    p = (fls * st) ** contrast
    return 3.05 * bs * (400.0 * p / (27.13 + p)) + 0.3


def tone_compress(base: np.ndarray, white: np.ndarray, sw: float, contrast: float) -> np.ndarray:
    """
    Non-linear tone compression of one block of pixels.

    Parameters
    ----------
    base : np.ndarray
        Base layer XYZ, shape (..., 3).
    white : np.ndarray
        Local white point XYZ, same shape.
    sw : float
        Maximum Y over the whole local white image.
    contrast : float
        Cone and rod response exponent.

    Returns
    -------
    np.ndarray
        Tone compressed XYZ, same shape.
    """
    yw = white[..., 1]
    la = 0.2 * yw
    fl = cone_sensitivity(la)

    adapted = chromatic_adaptation(base, white)
    lms = xyz_to_hpe(adapted)
    s = np.abs(adapted[..., 1])

    cones = cone_response(lms, fl, yw, contrast)
    rods = rod_response(s, sw, la, contrast)
    return hpe_to_xyz(cones + rods[..., np.newaxis])
