# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shared fixtures for the PNGDefilter test suite."""

import numpy as np
import pytest

from pngdefilter.core import acceleration
from pngdefilter.core.geometry import ImageGeometry


@pytest.fixture(autouse=True)
def default_strategy(monkeypatch):
    """Every test starts from the auto strategy with no environment override."""
    monkeypatch.delenv(acceleration.ENV_VAR, raising=False)
    acceleration.reset()
    yield
    acceleration.reset()


@pytest.fixture
def rng():
    return np.random.default_rng(20261018)


@pytest.fixture
def gray8():
    """5 pixels of 8-bit grayscale: bpp 1, row_stride 5."""
    return ImageGeometry(width=5, bit_depth=8, channel_count=1)


def random_rows(rng, count, row_stride):
    return [rng.integers(0, 256, size=row_stride, dtype=np.uint8).tobytes()
            for _ in range(count)]


def smooth_rows(count, row_stride, bpp):
    """Gradient rows; adaptive filtering picks a mix of filter types for these."""
    rows = []
    for y in range(count):
        rows.append(bytes(((x // bpp) * 3 + y * 5 + (x % bpp) * 40) & 0xFF
                          for x in range(row_stride)))
    return rows
