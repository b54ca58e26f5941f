# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
PNGDefilter Constants Module

Filter type tags, IHDR color types and the tunables that control which
reconstruction kernel the engine dispatches to.
"""

from enum import IntEnum


class FilterType(IntEnum):
    """Per-scanline filter tag (PNG specification, Section 9.2)"""
    NONE = 0
    SUB = 1
    UP = 2
    AVERAGE = 3
    PAETH = 4


VALID_FILTER_TAGS = frozenset(int(f) for f in FilterType)

# IHDR color types -> channel count
COLOR_TYPE_GRAY = 0
COLOR_TYPE_RGB = 2
COLOR_TYPE_INDEXED = 3
COLOR_TYPE_GRAY_ALPHA = 4
COLOR_TYPE_RGBA = 6

COLOR_TYPE_CHANNELS = {
    COLOR_TYPE_GRAY: 1,
    COLOR_TYPE_RGB: 3,
    COLOR_TYPE_INDEXED: 1,
    COLOR_TYPE_GRAY_ALPHA: 2,
    COLOR_TYPE_RGBA: 4,
}

# Bit depths PNG permits for each color type
COLOR_TYPE_BIT_DEPTHS = {
    COLOR_TYPE_GRAY: frozenset({1, 2, 4, 8, 16}),
    COLOR_TYPE_RGB: frozenset({8, 16}),
    COLOR_TYPE_INDEXED: frozenset({1, 2, 4, 8}),
    COLOR_TYPE_GRAY_ALPHA: frozenset({8, 16}),
    COLOR_TYPE_RGBA: frozenset({8, 16}),
}

VALID_BIT_DEPTHS = frozenset({1, 2, 4, 8, 16})

# Kernel dispatch
STRATEGY_AUTO = 'auto'
STRATEGY_SCALAR = 'scalar'
STRATEGY_VECTORIZED = 'vectorized'
STRATEGIES = (STRATEGY_AUTO, STRATEGY_SCALAR, STRATEGY_VECTORIZED)

VECTOR_WIDTH = 16                           # Bytes per scan block (one SSE register)
VECTORIZE_MIN_BYTES = 64                    # Below this, numpy setup costs more than the scalar loop

# Adam7 passes: (x_start, y_start, x_step, y_step)
ADAM7_PASSES = (
    (0, 0, 8, 8),
    (4, 0, 8, 8),
    (0, 4, 4, 8),
    (2, 0, 4, 4),
    (0, 2, 2, 4),
    (1, 0, 2, 2),
    (0, 1, 1, 2),
)
