"""
Utility functions for the hdrtmo package.

Includes:
- Version and platform info
- Scalar clamping helpers shared by the pipeline stages
- Image dimension helpers
"""

from __future__ import annotations

import math
import platform
import sys
from datetime import datetime, timezone

import numpy as np

__version__ = "0.4.0"
__version_info__ = {
    "major": 0,
    "minor": 4,
    "patch": 0,
    "status": "stable",
    "date": "2026-10-18",
}


def get_version_banner() -> str:
    """Return a formatted version banner for logging."""
    return f"hdrtmo v{__version__} | iCAM06 HDR Tone Mapping"


def get_version() -> str:
    """Return the library version string."""
    return __version__


def get_platform_info() -> str:
    """Return platform information string."""
    return f"{platform.system()} {platform.release()} / Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"


def get_timestamp_iso() -> str:
    """Return current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def clamp(low: float, high: float, value: float) -> float:
    """Clamp ``value`` into ``[low, high]``."""
    return max(low, min(high, value))


def clamp_to_zero(value: float) -> float:
    """
    Replace NaN and infinities with 0.

    Finite values, negative ones included, are returned unchanged.
    """
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def clamp_to_zero_array(data: np.ndarray) -> np.ndarray:
    """Vectorised :func:`clamp_to_zero`, returning a new array."""
    return np.where(np.isfinite(data), data, 0.0)


def min_dim(width: int, height: int) -> int:
    """Return the shorter side of an image."""
    return min(width, height)


def max_dim(width: int, height: int) -> int:
    """Return the longer side of an image."""
    return max(width, height)


def format_duration(seconds: float) -> str:
    """
    Format duration in human-readable form.

    Parameters
    ----------
    seconds : float
        Duration in seconds.

    Returns
    -------
    str
        Formatted string like "2m 30s", "45.2s" or "120ms".
    """
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds // 60)
    secs = seconds % 60
    return f"{minutes}m {secs:.0f}s"
