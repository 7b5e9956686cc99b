"""
Reading HDR sources and writing tone mapped rasters.

Handles:
- FITS (astropy), float TIFF (tifffile) and any imageio-supported format
  (Radiance .hdr, OpenEXR, ...) as HDR input
- 16-bit TIFF, FITS and 8-bit PNG/JPEG output
"""

from __future__ import annotations

import logging
from pathlib import Path

import imageio.v3 as iio
import numpy as np
import tifffile
from astropy.io import fits

from .image import ColorSpace, HDRImage

logger = logging.getLogger(__name__)

FITS_SUFFIXES = {".fits", ".fit", ".fts"}
TIFF_SUFFIXES = {".tif", ".tiff"}


def _to_hwc(data: np.ndarray, path: Path) -> np.ndarray:
    """Bring a decoded raster to (H, W, 3) float64."""
    data = np.asarray(data, dtype=np.float64)
    if data.ndim == 2:
        data = np.repeat(data[:, :, np.newaxis], 3, axis=2)
    elif data.ndim == 3 and data.shape[0] in (3, 4) and data.shape[2] not in (3, 4):
        # Channel-first planes (FITS cubes)
        data = np.moveaxis(data, 0, -1)
    if data.ndim != 3 or data.shape[2] not in (3, 4):
        raise ValueError(f"Unsupported raster shape {data.shape} in {path}")
    return data[:, :, :3]


def read_fits(path: str | Path) -> np.ndarray:
    """
    Read the primary HDU of a FITS file.

    Returns
    -------
    np.ndarray
        Raw data with BZERO/BSCALE applied, as float64.
    """
    with fits.open(path) as hdul:
        data = hdul[0].data
        if data is None:
            raise ValueError(f"No image data in primary HDU of {path}")
        return data.astype(np.float64)


def read_hdr(path: str | Path, space: ColorSpace = ColorSpace.RGB) -> HDRImage:
    """
    Read an HDR raster.

    Parameters
    ----------
    path : str or Path
        Source file. FITS and TIFF are read with astropy and tifffile,
        anything else with imageio.
    space : ColorSpace, default ColorSpace.RGB
        Meaning of the decoded channels. Grayscale sources are replicated
        to three channels; alpha channels are dropped.

    Returns
    -------
    HDRImage
        Decoded image.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in FITS_SUFFIXES:
        data = read_fits(path)
    elif suffix in TIFF_SUFFIXES:
        data = tifffile.imread(path)
    else:
        data = iio.imread(path)

    data = _to_hwc(data, path)
    logger.info(
        "Read %s: %dx%d, range [%.4g, %.4g]",
        path.name, data.shape[1], data.shape[0], float(data.min()), float(data.max()),
    )
    return HDRImage(data, space)


def write_ldr(path: str | Path, raster: np.ndarray, alpha: bool = False) -> Path:
    """
    Write a tone mapped uint16 RGBA raster.

    TIFF and FITS keep the full 16 bits; other formats (PNG, JPEG, ...)
    are written with 8 bits per channel.

    Parameters
    ----------
    path : str or Path
        Output file, format chosen from the suffix.
    raster : np.ndarray
        uint16 array of shape (H, W, 4).
    alpha : bool, default False
        Keep the (always opaque) alpha channel.

    Returns
    -------
    Path
        Path written.
    """
    path = Path(path)
    raster = np.asarray(raster)
    if raster.dtype != np.uint16 or raster.ndim != 3 or raster.shape[2] != 4:
        raise ValueError(f"Expected uint16 array of shape (H, W, 4), got {raster.dtype} {raster.shape}")

    data = raster if alpha else raster[:, :, :3]
    data = np.ascontiguousarray(data)
    path.parent.mkdir(parents=True, exist_ok=True)

    suffix = path.suffix.lower()
    if suffix in TIFF_SUFFIXES:
        tifffile.imwrite(path, data, photometric="rgb")
    elif suffix in FITS_SUFFIXES:
        header = fits.Header()
        header["COLORTYP"] = ("RGBA" if alpha else "RGB", "Channel order of NAXIS3")
        header["TMO"] = ("iCAM06", "Tone mapping operator")
        fits.PrimaryHDU(data=np.moveaxis(data, -1, 0), header=header).writeto(path, overwrite=True)
    else:
        iio.imwrite(path, (data >> 8).astype(np.uint8))

    logger.info("Wrote %s (%dx%d)", path, data.shape[1], data.shape[0])
    return path
