"""
Configuration and result dataclasses for the iCAM06 tone mapper.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from .utils import clamp

logger = logging.getLogger(__name__)

# Maximum working luminance (cd/m2)
MAX_LUMINANCE = 20000.0

# Average surround only
SURROUND = 1.0

# Lower bound of normalized input, keeps log10 and ratios finite
MIN_NORMALIZED = 1e-8

CONTRAST_RANGE = (0.6, 0.85)
CLIPPING_RANGE = (0.0, 1.0)

DEFAULT_CONTRAST = 0.75
DEFAULT_MIN_CLIPPING = 0.01
DEFAULT_MAX_CLIPPING = 0.99
DEFAULT_TILE_SIZE = 256


@dataclass
class ICam06Config:
    """
    Configuration for an iCAM06 tone mapping run.

    Tunables are clamped into their valid range on construction;
    out-of-range values are corrected, never rejected.
    """

    # --- Tone mapping ---
    contrast: float = DEFAULT_CONTRAST
    """Exponent of the cone and rod responses, clamped into [0.6, 0.85]."""

    min_clipping: float = DEFAULT_MIN_CLIPPING
    """Percentile used as black point, clamped into [0, 1]."""

    max_clipping: float = DEFAULT_MAX_CLIPPING
    """Percentile used as white point, clamped into [0, 1]."""

    # --- Parallelism ---
    workers: int | None = None
    """Number of worker threads. None = auto-detect, 1 = sequential."""

    tile_size: int = DEFAULT_TILE_SIZE
    """Edge length in pixels of the square tiles processed per task."""

    show_progress: bool = False
    """Show a progress bar for each tiled stage."""

    def __post_init__(self) -> None:
        self.contrast = self._clamped("contrast", self.contrast, CONTRAST_RANGE)
        self.min_clipping = self._clamped("min_clipping", self.min_clipping, CLIPPING_RANGE)
        self.max_clipping = self._clamped("max_clipping", self.max_clipping, CLIPPING_RANGE)

        if self.min_clipping >= self.max_clipping:
            logger.warning(
                "min_clipping (%.3f) >= max_clipping (%.3f): output range may collapse",
                self.min_clipping,
                self.max_clipping,
            )

    @staticmethod
    def _clamped(name: str, value: float, bounds: tuple[float, float]) -> float:
        value = float(value)
        corrected = clamp(bounds[0], bounds[1], value)
        if corrected != value:
            logger.debug("%s=%g clamped to %g", name, value, corrected)
        return corrected

    def validate(self) -> None:
        """Validate execution parameters."""
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.tile_size < 1:
            raise ValueError(f"tile_size must be >= 1, got {self.tile_size}")


@dataclass
class ToneMapResult:
    """
    Result of a tone mapping run.

    Holds the output raster together with the global quantities the
    pipeline derived from the image.
    """

    raster: np.ndarray
    """Output raster of shape (height, width, 4), uint16 RGBA."""

    # --- Global reductions ---
    peak_luminance: float = 0.0
    """Input peak luminance, never below MAX_LUMINANCE."""

    white_scale: float = 0.0
    """Maximum Y of the local white point image (Sw)."""

    appearance_peak: float = 0.0
    """Maximum Y of the appearance-space image."""

    min_rgb: float = 0.0
    """Black point used for the final clipping."""

    max_rgb: float = 0.0
    """White point used for the final clipping."""

    # --- Timing ---
    durations: dict[str, float] = field(default_factory=dict)
    """Wall time in seconds per pipeline stage."""

    # --- Configuration ---
    config: ICam06Config | None = None
    """Configuration used for this run."""

    # --- Metadata ---
    version: str = ""
    """Library version."""

    timestamp: str = ""
    """ISO format timestamp of run completion."""

    platform: str = ""
    """Platform information."""
