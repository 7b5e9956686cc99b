"""
Command-line interface for hdrtmo.

Usage:
    python -m hdrtmo icam06 <input> <output> [options]
    hdrtmo icam06 <input> <output> [options]
    hdrtmo info <input>
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import numpy as np

from .cli_output import (
    print_error,
    print_header,
    print_info,
    print_metric,
    print_path,
    print_success,
    print_warning,
)
from .config import (
    DEFAULT_CONTRAST,
    DEFAULT_MAX_CLIPPING,
    DEFAULT_MIN_CLIPPING,
    DEFAULT_TILE_SIZE,
    MAX_LUMINANCE,
    ICam06Config,
)
from .icam06 import tonemap
from .image import ColorSpace
from .io import read_hdr, write_ldr
from .normalize import DegenerateRangeError
from .report import write_report_json
from .utils import format_duration, get_version, get_version_banner

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%H:%M:%S",
    )


def run_icam06(args: argparse.Namespace) -> int:
    """Tone map one file with iCAM06."""
    input_path = Path(args.input)
    if not input_path.exists():
        print_error(f"Input file not found: {input_path}")
        return 1

    config = ICam06Config(
        contrast=args.contrast,
        min_clipping=args.min_clip,
        max_clipping=args.max_clip,
        workers=args.workers,
        tile_size=args.tile_size,
        show_progress=not args.quiet,
    )
    try:
        config.validate()
    except ValueError as e:
        print_error(str(e))
        return 1

    logger.info(get_version_banner())
    if not args.quiet:
        print_header("iCAM06 tone mapping")
        print_path("Input", str(input_path))
        print_metric("Contrast", f"{config.contrast:.3f}")
        print_metric("Clipping", f"[{config.min_clipping:.3f}, {config.max_clipping:.3f}]")

    try:
        image = read_hdr(input_path, ColorSpace(args.space))
        result = tonemap(image, config)
    except DegenerateRangeError as e:
        print_error(f"Cannot normalize output: {e}")
        return 1
    except Exception as e:
        print_error(f"Tone mapping failed: {e}")
        logger.exception("Tone mapping failed: %s", e)
        return 1

    output_path = write_ldr(args.output, result.raster, alpha=args.alpha)

    if args.report:
        write_report_json(result, args.report, source=str(input_path), output=str(output_path))

    if not args.quiet:
        print_metric("Peak luminance", f"{result.peak_luminance:.4g}", "cd/m2")
        print_metric("Black / white point", f"{result.min_rgb:.4g} / {result.max_rgb:.4g}")
        print_metric("Elapsed", format_duration(sum(result.durations.values())))
        print_success(f"Wrote {output_path}")
    return 0


def run_info(args: argparse.Namespace) -> int:
    """Print bounds and luminance statistics of an HDR file."""
    try:
        image = read_hdr(args.input, ColorSpace(args.space))
    except (FileNotFoundError, ValueError) as e:
        print_error(str(e))
        return 1

    y = image.xyz()[..., 1]
    print_header(f"{Path(args.input).name}")
    print_metric("Size", f"{image.width}x{image.height}", "px")
    print_metric("Space", image.space.value)
    print_metric("Min Y", f"{float(np.min(y)):.4g}")
    print_metric("Max Y", f"{float(np.max(y)):.4g}")
    print_metric("Median Y", f"{float(np.median(y)):.4g}")
    if float(np.max(y)) > MAX_LUMINANCE:
        print_warning(f"Peak above {MAX_LUMINANCE:g}, input will be rescaled")
    else:
        print_info("Peak within working range")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="hdrtmo",
        description="Perceptual HDR to LDR tone mapping (iCAM06)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"hdrtmo {get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # iCAM06 command
    icam_parser = subparsers.add_parser(
        "icam06",
        help="Tone map an HDR image with iCAM06",
    )
    icam_parser.add_argument(
        "input",
        type=str,
        help="HDR input (.hdr, .exr, .tif, .fits, ...)",
    )
    icam_parser.add_argument(
        "output",
        type=str,
        help="Output image (.tif/.fits keep 16 bits, others are 8-bit)",
    )
    icam_parser.add_argument(
        "--contrast",
        type=float,
        default=DEFAULT_CONTRAST,
        help=f"Response exponent, clamped to [0.6, 0.85] (default: {DEFAULT_CONTRAST})",
    )
    icam_parser.add_argument(
        "--min-clip",
        type=float,
        default=DEFAULT_MIN_CLIPPING,
        help=f"Black point percentile in [0, 1] (default: {DEFAULT_MIN_CLIPPING})",
    )
    icam_parser.add_argument(
        "--max-clip",
        type=float,
        default=DEFAULT_MAX_CLIPPING,
        help=f"White point percentile in [0, 1] (default: {DEFAULT_MAX_CLIPPING})",
    )
    icam_parser.add_argument(
        "--space",
        choices=["rgb", "xyz"],
        default="rgb",
        help="Color space of the input channels (default: rgb)",
    )
    icam_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads (default: CPU count - 1, 1 = sequential)",
    )
    icam_parser.add_argument(
        "--tile-size",
        type=int,
        default=DEFAULT_TILE_SIZE,
        help=f"Tile edge length in pixels (default: {DEFAULT_TILE_SIZE})",
    )
    icam_parser.add_argument(
        "--alpha",
        action="store_true",
        help="Keep the alpha channel in the output",
    )
    icam_parser.add_argument(
        "--report",
        type=str,
        default=None,
        help="Write a JSON run report to this path",
    )
    icam_parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress progress bars and summary",
    )
    icam_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    # Info command
    info_parser = subparsers.add_parser(
        "info",
        help="Show size and luminance statistics of an HDR file",
    )
    info_parser.add_argument(
        "input",
        type=str,
        help="HDR input file",
    )
    info_parser.add_argument(
        "--space",
        choices=["rgb", "xyz"],
        default="rgb",
        help="Color space of the input channels (default: rgb)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "icam06":
        setup_logging(args.verbose)
        return run_icam06(args)

    elif args.command == "info":
        setup_logging()
        return run_info(args)

    return 1
