# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
CLI argument parsing for PNGDefilter.

Handles command-line argument definition, filter-name parsing and geometry
construction from the decode options.
"""

from __future__ import annotations

import argparse

from . import __version__
from .core import constants
from .core.constants import FilterType
from .core.geometry import ImageGeometry


def parse_filter_type(spec: str) -> FilterType:
    """Parse a filter given by name (``paeth``) or number (``4``).

    Raises:
        argparse.ArgumentTypeError: If the name or number is not a filter.
    """
    spec = spec.strip()
    if spec.isdigit():
        value = int(spec)
        if value not in constants.VALID_FILTER_TAGS:
            raise argparse.ArgumentTypeError(f"Invalid filter type: '{spec}'")
        return FilterType(value)
    try:
        return FilterType[spec.upper()]
    except KeyError:
        names = ", ".join(f.name.lower() for f in FilterType)
        raise argparse.ArgumentTypeError(f"Invalid filter type: '{spec}' (expected one of: {names})")


def _positive_int(spec: str) -> int:
    try:
        value = int(spec)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected an integer, got '{spec}'")
    if value < 1:
        raise argparse.ArgumentTypeError(f"Value must be positive: '{spec}'")
    return value


def geometry_from_args(args: argparse.Namespace) -> ImageGeometry:
    """Build the image geometry for the decode command.

    ``--color-type`` takes precedence over ``--channels``; the former also
    validates the bit depth against what PNG allows for the color type.
    """
    if args.color_type is not None:
        return ImageGeometry.from_color_type(args.width, args.color_type, args.bit_depth)
    return ImageGeometry(args.width, args.bit_depth, args.channels)


def build_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the PNGDefilter argument parser.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="pngdefilter",
        description="PNGDefilter - PNG scanline defiltering engine",
    )

    parser.add_argument(
        "-V", "--version", action="version",
        version=f"PNGDefilter {__version__}"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose (debug) logging"
    )
    parser.add_argument(
        "--strategy",
        choices=constants.STRATEGIES,
        help="Kernel strategy (default: $PNGDEFILTER_STRATEGY or auto)"
    )
    parser.add_argument(
        "--no-vectorize", action="store_true",
        help="Use the scalar reference kernels only"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # decode
    decode = subparsers.add_parser(
        "decode", help="Defilter an inflated scanline stream into raw pixel rows"
    )
    decode.add_argument("inputfile", help="Inflated IDAT stream ('-' for stdin)")
    decode.add_argument(
        "-o", "--output", dest="outputfile", default="-",
        help="Output file for reconstructed rows (default: stdout)"
    )
    decode.add_argument("--width", type=_positive_int, required=True, help="Image width in pixels")
    decode.add_argument("--height", type=int, required=True, help="Image height in rows")
    decode.add_argument(
        "--bit-depth", type=int, default=8, choices=sorted(constants.VALID_BIT_DEPTHS),
        help="Bits per channel (default: 8)"
    )
    decode.add_argument(
        "--channels", type=int, default=1, choices=(1, 2, 3, 4),
        help="Channels per pixel (default: 1)"
    )
    decode.add_argument(
        "--color-type", type=int, choices=sorted(constants.COLOR_TYPE_CHANNELS),
        help="PNG IHDR color type (overrides --channels)"
    )
    decode.add_argument(
        "--interlaced", action="store_true",
        help="Stream holds the seven Adam7 passes; rows are written pass by pass"
    )
    decode.add_argument(
        "--chunk-size", type=_positive_int, default=65536,
        help="Read size in bytes (default: 65536)"
    )

    # verify
    verify = subparsers.add_parser(
        "verify", help="Cross-check vectorized kernels against the scalar reference"
    )
    verify.add_argument("--rows", type=_positive_int, default=1000, help="Random rows to test (default: 1000)")
    verify.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    verify.add_argument(
        "--max-stride", type=_positive_int, default=300,
        help="Longest random row in bytes (default: 300)"
    )
    verify.add_argument(
        "--all-filters", action="store_true",
        help="Check every filter type, not just Sub"
    )

    # bench
    bench = subparsers.add_parser("bench", help="Time reconstruction per strategy")
    bench.add_argument("--width", type=_positive_int, default=4096, help="Row length in bytes (default: 4096)")
    bench.add_argument("--bpp", type=_positive_int, default=4, help="Bytes per pixel (default: 4)")
    bench.add_argument("--rows", type=_positive_int, default=256, help="Rows per run (default: 256)")
    bench.add_argument(
        "--filter", dest="filter_type", type=parse_filter_type, default=FilterType.SUB,
        help="Filter to time: none, sub, up, average, paeth or 0-4 (default: sub)"
    )
    bench.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    bench.add_argument(
        "--profile", action="store_true",
        help="Run under cProfile and write a report"
    )
    bench.add_argument(
        "--profile-output",
        help="Output file for profiling results (default: auto-generated)"
    )

    return parser
