# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Benchmark profiling.

``pngdefilter bench --profile`` runs the timed strategies under cProfile,
then writes the binary stats (loadable with ``python -m pstats``) and a
text report listing the overall top functions followed by the defilter
kernels alone.

Usage:
    with profile_bench("sub.prof") as run:
        run_benchmark(4096, 4)
    print(run.report)         # also written to sub_report.txt
"""

from __future__ import annotations

import cProfile
import io
import os
import pstats
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

# Row kernels, the Sub scan and the decoder loop
KERNEL_PATTERN = 'reconstruct|sub_scan|paeth_predictor|pop_row'


@dataclass
class ProfileRun:
    stats_path: str
    report_path: str
    report: str = ""


def default_stats_path() -> str:
    return time.strftime("pngdefilter_bench_%Y%m%d_%H%M%S.prof")


def report_path_for(stats_path: str) -> str:
    """``sub.prof`` -> ``sub_report.txt``"""
    root, _ = os.path.splitext(stats_path)
    return root + "_report.txt"


def kernel_report(profile: cProfile.Profile, limit: int = 20) -> str:
    """Top ``limit`` functions by cumulative time, then the kernels only."""
    out = io.StringIO()
    stats = pstats.Stats(profile, stream=out)
    stats.sort_stats('cumulative').print_stats(limit)
    out.write("\nDefilter kernels:\n")
    stats.print_stats(KERNEL_PATTERN)
    return out.getvalue()


@contextmanager
def profile_bench(stats_path: str | None = None) -> Iterator[ProfileRun]:
    """Profile the enclosed block and save stats plus report on exit.

    Nothing is written when the block raises.
    """
    run = ProfileRun(stats_path or default_stats_path(), "")
    run.report_path = report_path_for(run.stats_path)
    profile = cProfile.Profile()
    profile.enable()
    try:
        yield run
    finally:
        profile.disable()

    run.report = kernel_report(profile)
    profile.dump_stats(run.stats_path)
    with open(run.report_path, 'w', encoding='utf-8') as f:
        f.write("PNGDefilter Benchmark Profile\n")
        f.write("=" * 50 + "\n\n")
        f.write(run.report)
