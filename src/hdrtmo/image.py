"""
HDR pixel colors and the immutable HDR image container.

A pixel color is one of three variants:
- RGB: linear display RGB
- XYZ: CIE tristimulus values
- RAW: three stored channels with no color-space meaning

Every variant can be viewed as linear RGB, as XYZ, or as its raw triple.
A RAW color answers the RGB and XYZ queries with its stored channels.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .color import rgb_to_xyz, xyz_to_rgb

logger = logging.getLogger(__name__)

ALPHA_OPAQUE = 0xFFFF


class ColorSpace(Enum):
    """Interpretation of the three stored channels of an image."""

    RGB = "rgb"
    XYZ = "xyz"
    RAW = "raw"


@dataclass(frozen=True)
class RGB:
    """HDR color in linear RGB."""

    r: float
    g: float
    b: float


@dataclass(frozen=True)
class XYZ:
    """HDR color in CIE XYZ."""

    x: float
    y: float
    z: float


@dataclass(frozen=True)
class RAW:
    """HDR color with no specific color space."""

    p1: float
    p2: float
    p3: float


Color = RGB | XYZ | RAW


def _convert(func, a: float, b: float, c: float) -> tuple[float, float, float]:
    out = func(np.array([a, b, c], dtype=np.float64))
    return float(out[0]), float(out[1]), float(out[2])


def to_rgba(color: Color) -> tuple[float, float, float, int]:
    """Return the linear RGB view and alpha of a color."""
    if isinstance(color, RGB):
        return color.r, color.g, color.b, ALPHA_OPAQUE
    elif isinstance(color, XYZ):
        return (*_convert(xyz_to_rgb, color.x, color.y, color.z), ALPHA_OPAQUE)
    elif isinstance(color, RAW):
        return to_raw_triple(color)
    raise TypeError(f"Unsupported color type: {type(color).__name__}")


def to_xyza(color: Color) -> tuple[float, float, float, int]:
    """Return the XYZ view and alpha of a color."""
    if isinstance(color, RGB):
        return (*_convert(rgb_to_xyz, color.r, color.g, color.b), ALPHA_OPAQUE)
    elif isinstance(color, XYZ):
        return color.x, color.y, color.z, ALPHA_OPAQUE
    elif isinstance(color, RAW):
        return to_raw_triple(color)
    raise TypeError(f"Unsupported color type: {type(color).__name__}")


def to_raw_triple(color: Color) -> tuple[float, float, float, int]:
    """Return the stored channels and alpha of a color."""
    if isinstance(color, RGB):
        return color.r, color.g, color.b, ALPHA_OPAQUE
    elif isinstance(color, XYZ):
        return color.x, color.y, color.z, ALPHA_OPAQUE
    elif isinstance(color, RAW):
        return color.p1, color.p2, color.p3, ALPHA_OPAQUE
    raise TypeError(f"Unsupported color type: {type(color).__name__}")


def as_rgb(color: Color) -> RGB:
    """Convert any color to the RGB variant."""
    if isinstance(color, RGB):
        return color
    r, g, b, _ = to_rgba(color)
    return RGB(r, g, b)


def as_xyz(color: Color) -> XYZ:
    """
    Convert any color to the XYZ variant.

    Non-XYZ colors go through their RGB view, so a RAW color is treated
    as linear RGB here.
    """
    if isinstance(color, XYZ):
        return color
    r, g, b, _ = to_rgba(color)
    return XYZ(*_convert(rgb_to_xyz, r, g, b))


def to_ldr_rgba(color: Color) -> tuple[int, int, int, int]:
    """
    Return a 16-bit per channel view of a color's RGB values.

    Channels are scaled by 0xFFFF and truncated, without clamping, so
    values outside [0, 1] are not meaningful.
    """
    r, g, b, _ = to_rgba(color)
    return int(r * 0xFFFF), int(g * 0xFFFF), int(b * 0xFFFF), ALPHA_OPAQUE


class HDRImage:
    """
    Immutable HDR raster.

    Pixels are stored as a read-only float64 array of shape (height, width, 3)
    tagged with the color space of its channels.

    Parameters
    ----------
    data : np.ndarray
        Array of shape (height, width, 3).
    space : ColorSpace, default ColorSpace.RGB
        Meaning of the three channels.
    """

    def __init__(self, data: np.ndarray, space: ColorSpace = ColorSpace.RGB):
        data = np.array(data, dtype=np.float64, copy=True)
        if data.ndim != 3 or data.shape[2] != 3:
            raise ValueError(f"Expected array of shape (H, W, 3), got {data.shape}")
        if data.shape[0] == 0 or data.shape[1] == 0:
            raise ValueError(f"Image must not be empty, got {data.shape}")
        if not np.all(np.isfinite(data)):
            raise ValueError("Image contains NaN or infinite values")
        data.setflags(write=False)
        self._data = data
        self.space = ColorSpace(space)

    @classmethod
    def from_rgb(cls, data: np.ndarray) -> HDRImage:
        """Create an image from linear RGB values."""
        return cls(data, ColorSpace.RGB)

    @classmethod
    def from_xyz(cls, data: np.ndarray) -> HDRImage:
        """Create an image from CIE XYZ values."""
        return cls(data, ColorSpace.XYZ)

    @classmethod
    def from_raw(cls, data: np.ndarray) -> HDRImage:
        """Create an image from channels without color-space meaning."""
        return cls(data, ColorSpace.RAW)

    @property
    def width(self) -> int:
        return self._data.shape[1]

    @property
    def height(self) -> int:
        return self._data.shape[0]

    def bounds(self) -> tuple[int, int]:
        """Return (width, height)."""
        return self.width, self.height

    def size(self) -> int:
        """Return the number of pixels."""
        return self.width * self.height

    def color_at(self, x: int, y: int) -> Color:
        """Return the pixel color at column ``x``, row ``y``."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside bounds {self.bounds()}")
        a, b, c = (float(v) for v in self._data[y, x])
        if self.space is ColorSpace.RGB:
            return RGB(a, b, c)
        elif self.space is ColorSpace.XYZ:
            return XYZ(a, b, c)
        return RAW(a, b, c)

    def raw(self) -> np.ndarray:
        """Return the stored channels (read-only view)."""
        return self._data

    def xyz(self) -> np.ndarray:
        """Return the whole raster as XYZ."""
        if self.space is ColorSpace.RGB:
            return rgb_to_xyz(self._data)
        return self._data

    def rgb(self) -> np.ndarray:
        """Return the whole raster as linear RGB."""
        if self.space is ColorSpace.XYZ:
            return xyz_to_rgb(self._data)
        return self._data

    def __repr__(self) -> str:
        return f"HDRImage(width={self.width}, height={self.height}, space={self.space.value})"


def as_hdr_image(image: HDRImage | np.ndarray, space: ColorSpace = ColorSpace.RGB) -> HDRImage:
    """Wrap a bare array into an :class:`HDRImage`, passing images through."""
    if isinstance(image, HDRImage):
        return image
    logger.debug("Wrapping array of shape %s as %s image", np.shape(image), space.value)
    return HDRImage(image, space)
