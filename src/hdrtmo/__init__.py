"""
hdrtmo - Perceptual HDR to LDR tone mapping with the iCAM06 appearance model.

Converts high dynamic range rasters (luminances up to ~20000 cd/m2) into
16-bit display-ready images, modelling cone/rod adaptation, local
chromatic adaptation and appearance-space detail enhancement.

Example
-------
>>> from hdrtmo import HDRImage, ICam06
>>> image = HDRImage.from_rgb(linear_rgb)   # (H, W, 3) float array
>>> raster = ICam06(image, contrast=0.75).perform()
>>> raster.shape, raster.dtype
((H, W, 4), dtype('uint16'))

Example (with run metadata)
---------------------------
>>> from hdrtmo import ICam06Config, tonemap
>>> result = tonemap(image, ICam06Config(max_clipping=0.995, workers=4))
>>> print(result.peak_luminance, result.durations)
"""

from .config import (
    MAX_LUMINANCE,
    SURROUND,
    ICam06Config,
    ToneMapResult,
)
from .utils import __version__, __version_info__, get_version_banner

# Primary entry point
from .icam06 import ICam06, tonemap

# Pixel colors and images
from .image import (
    RAW,
    RGB,
    XYZ,
    ColorSpace,
    HDRImage,
    as_rgb,
    as_xyz,
    to_ldr_rgba,
    to_raw_triple,
    to_rgba,
    to_xyza,
)

# Pipeline building blocks
from .appearance import colorfulness_surround, ipt_color, reverse_ipt_color
from .normalize import DegenerateRangeError, Percentiles

# I/O functions
from .io import read_hdr, write_ldr

# Reports
from .report import build_report, write_report_json

__all__ = [
    # Version
    "__version__",
    "__version_info__",
    "get_version_banner",
    # Config
    "ICam06Config",
    "ToneMapResult",
    "MAX_LUMINANCE",
    "SURROUND",
    # Main entry
    "ICam06",
    "tonemap",
    # Colors and images
    "RGB",
    "XYZ",
    "RAW",
    "ColorSpace",
    "HDRImage",
    "as_rgb",
    "as_xyz",
    "to_ldr_rgba",
    "to_raw_triple",
    "to_rgba",
    "to_xyza",
    # Building blocks
    "colorfulness_surround",
    "ipt_color",
    "reverse_ipt_color",
    "DegenerateRangeError",
    "Percentiles",
    # I/O
    "read_hdr",
    "write_ldr",
    # Reports
    "build_report",
    "write_report_json",
]
