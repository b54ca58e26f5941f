#!/usr/bin/env python3
# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
PNGDefilter - command line entry point

Commands:
    decode  defilter an already-inflated scanline stream into raw rows
    verify  cross-check the vectorized kernels against the scalar ones
    bench   time reconstruction per strategy

Usage:
    pngdefilter decode idat.bin --width 640 --height 480 --color-type 6 -o pixels.raw
    pngdefilter verify --rows 1000 --all-filters
    pngdefilter bench --width 8192 --bpp 3 --filter paeth

Errors are reported as ``PNGDefilter Error: ...`` with the row index and byte
offset of the failing scanline, and exit status 1.
"""

from __future__ import annotations

import logging
import sys

from .cli_args import build_argument_parser, geometry_from_args
from .core import acceleration
from .core import constants
from .core.error import DefilterError, GeometryError
from .stream import iter_rows
from .utils import benchmark
from .utils import profiler as pd_profiler

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _run_decode(args) -> int:
    geometry = geometry_from_args(args)
    if args.height < 0:
        print("PNGDefilter Error: Image height must not be negative.", file=sys.stderr)
        return 1

    source = sys.stdin.buffer if args.inputfile == "-" else open(args.inputfile, "rb")
    try:
        target = sys.stdout.buffer if args.outputfile == "-" else open(args.outputfile, "wb")
        try:
            rows = 0
            for row in iter_rows(source, geometry, args.height,
                                 chunk_size=args.chunk_size, interlaced=args.interlaced):
                target.write(row)
                rows += 1
            target.flush()
        finally:
            if target is not sys.stdout.buffer:
                target.close()
    finally:
        if source is not sys.stdin.buffer:
            source.close()

    logger.info("Wrote %d rows of %d bytes", rows, geometry.row_stride)
    return 0


def _run_verify(args) -> int:
    filter_types = tuple(constants.FilterType) if args.all_filters else (constants.FilterType.SUB,)
    mismatches = benchmark.verify_equivalence(
        args.rows, args.seed, max_stride=args.max_stride, filter_types=filter_types)
    checked = args.rows * len(filter_types)
    if mismatches:
        for m in mismatches:
            print(f"MISMATCH filter={m.filter_type.name.lower()} bpp={m.bpp} "
                  f"row_stride={m.row_stride} first_difference={m.first_difference}")
        print(f"PNGDefilter Error: {len(mismatches)} of {checked} rows differ "
              f"between scalar and vectorized kernels.")
        return 1
    print(f"OK: {checked} rows identical (seed {args.seed})")
    return 0


def _time_strategies(args, strategies):
    return [benchmark.run_benchmark(args.width, args.bpp, args.filter_type,
                                    rows=args.rows, strategy=s, seed=args.seed)
            for s in strategies]


def _run_bench(args) -> int:
    if args.strategy:
        strategies = [args.strategy]
    elif args.no_vectorize:
        strategies = [constants.STRATEGY_SCALAR]
    else:
        strategies = [constants.STRATEGY_SCALAR, constants.STRATEGY_VECTORIZED]

    print(f"{args.filter_type.name.lower()} filter, {args.rows} rows x {args.width} bytes, bpp={args.bpp}")
    run = None
    if args.profile:
        with pd_profiler.profile_bench(args.profile_output) as run:
            results = _time_strategies(args, strategies)
    else:
        results = _time_strategies(args, strategies)
    for result in results:
        print(f"  {result.strategy:<11} {result.seconds * 1000:9.2f} ms "
              f"{result.megabytes_per_second:9.2f} MB/s")

    if run is not None:
        print(run.report)
        print(f"Profiling results saved to: {run.stats_path} and {run.report_path}")
    return 0


_COMMANDS = {
    "decode": _run_decode,
    "verify": _run_verify,
    "bench": _run_bench,
}


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for PNGDefilter.

    Returns:
        Exit code: 0 for success, 1 for error
    """
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        if args.strategy:
            acceleration.set_default_strategy(args.strategy)
        elif args.no_vectorize:
            acceleration.disable_vectorization()
        return _COMMANDS[args.command](args)
    except DefilterError as e:
        print(f"PNGDefilter Error: {e}", file=sys.stderr)
        return 1
    except GeometryError as e:
        print(f"PNGDefilter Error: Invalid image geometry: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"PNGDefilter Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
