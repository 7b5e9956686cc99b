"""
JSON run report for tone mapping runs.

The report records the configuration, the global quantities derived from
the image and stage timings, so a rendering can be reproduced and audited.
The output raster itself is not included.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

import numpy as np

from .config import ToneMapResult

logger = logging.getLogger(__name__)


def _to_native(obj: Any) -> Any:
    """Convert numpy types to native Python types for JSON serialization."""
    if isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, dict):
        return {k: _to_native(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_to_native(v) for v in obj]
    return obj


def build_report(result: ToneMapResult, source: str = "", output: str = "") -> dict[str, Any]:
    """
    Build a JSON-compatible summary of a run.

    Parameters
    ----------
    result : ToneMapResult
        Completed run.
    source, output : str
        Input and output paths, if any.

    Returns
    -------
    dict
        Report dictionary.
    """
    height, width = result.raster.shape[:2]
    report = {
        "version": result.version,
        "timestamp": result.timestamp,
        "platform": result.platform,
        "source": source,
        "output": output,
        "width": width,
        "height": height,
        "config": asdict(result.config) if result.config is not None else None,
        "reductions": {
            "peak_luminance": result.peak_luminance,
            "white_scale": result.white_scale,
            "appearance_peak": result.appearance_peak,
            "min_rgb": result.min_rgb,
            "max_rgb": result.max_rgb,
        },
        "durations_s": dict(result.durations),
    }
    return _to_native(report)


def write_report_json(
    result: ToneMapResult,
    path: str | Path,
    source: str = "",
    output: str = "",
) -> Path:
    """
    Write the run report as JSON.

    Returns
    -------
    Path
        Path to the written report.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(build_report(result, source, output), f, indent=2)

    logger.info("Wrote report: %s", path)
    return path
