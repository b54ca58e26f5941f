# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
Kernel benchmarking and cross-checking.

run_benchmark() times reconstruction of a synthetic image under one strategy.
verify_equivalence() reconstructs random rows with the scalar and vectorized
kernels and reports every row where they disagree.
"""

import logging
import time
from dataclasses import dataclass

import numpy as np

from ..core import constants
from ..core.constants import FilterType
from ..engine import reconstruct_row

logger = logging.getLogger(__name__)

VERIFY_BPPS = (1, 2, 3, 4, 6, 8)


@dataclass
class BenchResult:
    strategy: str
    filter_type: FilterType
    row_stride: int
    rows: int
    seconds: float

    @property
    def total_bytes(self) -> int:
        return self.row_stride * self.rows

    @property
    def megabytes_per_second(self) -> float:
        if self.seconds <= 0:
            return float('inf')
        return self.total_bytes / self.seconds / 1e6


@dataclass
class Mismatch:
    filter_type: FilterType
    bpp: int
    row_stride: int
    first_difference: int
    seed: int


def synthetic_rows(row_stride: int, count: int, seed: int = 0) -> list[bytes]:
    """Random filtered payloads; the filter tag is chosen by the caller."""
    rng = np.random.default_rng(seed)
    data = rng.integers(0, 256, size=(count, row_stride), dtype=np.uint8)
    return [row.tobytes() for row in data]


def run_benchmark(row_stride: int, bpp: int, filter_type: int = FilterType.SUB, *,
                  rows: int = 256, strategy: str = constants.STRATEGY_AUTO,
                  seed: int = 0) -> BenchResult:
    """Time reconstruction of ``rows`` chained rows.

    Each row uses the previous reconstruction as its prior row, as a real
    decode does.
    """
    payloads = synthetic_rows(row_stride, rows, seed)
    prev = None
    start = time.perf_counter()
    for payload in payloads:
        prev = reconstruct_row(filter_type, payload, prev, bpp, strategy=strategy)
    elapsed = time.perf_counter() - start
    result = BenchResult(strategy, FilterType(filter_type), row_stride, rows, elapsed)
    logger.debug("%s/%s: %d x %d bytes in %.4fs", strategy, result.filter_type.name,
                 rows, row_stride, elapsed)
    return result


def compare_strategies(row_stride: int, bpp: int, filter_type: int = FilterType.SUB, *,
                       rows: int = 256, seed: int = 0) -> list[BenchResult]:
    return [run_benchmark(row_stride, bpp, filter_type, rows=rows, strategy=s, seed=seed)
            for s in (constants.STRATEGY_SCALAR, constants.STRATEGY_VECTORIZED)]


def _first_difference(a: bytes | bytearray, b: bytes | bytearray) -> int:
    for i, (x, y) in enumerate(zip(a, b)):
        if x != y:
            return i
    return min(len(a), len(b))


def verify_equivalence(rows: int = 1000, seed: int = 0, *,
                       max_stride: int = 300,
                       filter_types: tuple[int, ...] = (FilterType.SUB,),
                       bpps: tuple[int, ...] = VERIFY_BPPS) -> list[Mismatch]:
    """Compare scalar and vectorized output on random rows.

    Row lengths are drawn from 1..max_stride, so most are not multiples of
    the vector width or of bpp.
    """
    rng = np.random.default_rng(seed)
    mismatches = []
    for _ in range(rows):
        stride = int(rng.integers(1, max_stride + 1))
        bpp = int(rng.choice(bpps))
        raw = rng.integers(0, 256, size=stride, dtype=np.uint8).tobytes()
        prev = rng.integers(0, 256, size=stride, dtype=np.uint8).tobytes()
        for filter_type in filter_types:
            expected = reconstruct_row(filter_type, raw, prev, bpp,
                                       strategy=constants.STRATEGY_SCALAR)
            actual = reconstruct_row(filter_type, raw, prev, bpp,
                                     strategy=constants.STRATEGY_VECTORIZED)
            if expected != actual:
                mismatch = Mismatch(FilterType(filter_type), bpp, stride,
                                    _first_difference(expected, actual), seed)
                logger.warning("Kernel mismatch: %s", mismatch)
                mismatches.append(mismatch)
    return mismatches
