# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from pngdefilter.utils import profiler
from pngdefilter.utils.benchmark import run_benchmark


def test_report_path_for():
    assert profiler.report_path_for("out/sub.prof") == "out/sub_report.txt"
    assert profiler.report_path_for("sub") == "sub_report.txt"


def test_default_stats_path():
    path = profiler.default_stats_path()
    assert path.startswith("pngdefilter_bench_")
    assert path.endswith(".prof")


def test_profile_bench_writes_stats_and_report(tmp_path):
    stats_path = tmp_path / "sub.prof"
    with profiler.profile_bench(str(stats_path)) as run:
        run_benchmark(128, 4, rows=8, strategy="vectorized")

    assert stats_path.stat().st_size > 0
    report = (tmp_path / "sub_report.txt").read_text(encoding="utf-8")
    assert "Defilter kernels:" in report
    assert "sub_scan" in run.report
    assert run.report in report


def test_profile_bench_writes_nothing_on_error(tmp_path):
    stats_path = tmp_path / "fail.prof"
    with pytest.raises(RuntimeError):
        with profiler.profile_bench(str(stats_path)):
            raise RuntimeError("boom")
    assert not stats_path.exists()
    assert not (tmp_path / "fail_report.txt").exists()
