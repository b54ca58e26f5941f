# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
Scanline Defilter Engine

Reconstructs one filtered scanline given its filter tag, the previous
reconstructed row and the pixel stride. The engine holds no state between
calls: the caller threads the previous row through (see stream.py).

Two entry points share one dispatch path:

    reconstruct_row          returns a new bytearray, inputs untouched
    reconstruct_row_inplace  overwrites the given bytearray and returns it

Kernel selection (strategy):
    scalar      filters.scalar for every tag
    vectorized  filters.vectorized for None, Sub and Up; Paeth and Up on a
                zero previous row are promoted to their cheaper equivalents
                (Sub and None); Average and remaining Paeth rows stay scalar
    auto        vectorized for rows of at least VECTORIZE_MIN_BYTES bytes,
                scalar below

All strategies produce identical bytes.
"""

import logging

from .core import acceleration
from .core import constants
from .core.error import GeometryError, InvalidFilterType, RowLengthMismatch
from .filters import scalar
from .filters import vectorized
from .filters.scalar import paeth_predictor

logger = logging.getLogger(__name__)

__all__ = [
    "reconstruct_row",
    "reconstruct_row_inplace",
    "select_kernel",
    "validate_row",
    "paeth_predictor",
]


def validate_row(filter_tag: int, filtered_row, previous_row, bpp: int,
                 row_stride: int | None = None) -> None:
    """Check tag, stride and row lengths before any byte is written.

    Raises:
        InvalidFilterType: tag outside 0..4.
        RowLengthMismatch: row and previous row differ in length, or the row
            is not row_stride bytes.
        GeometryError: bpp < 1.
    """
    if filter_tag not in constants.VALID_FILTER_TAGS:
        raise InvalidFilterType(filter_tag)
    if bpp < 1:
        raise GeometryError(f"Bytes per pixel must be at least 1, got {bpp}")
    actual = len(filtered_row)
    if row_stride is not None and actual != row_stride:
        raise RowLengthMismatch(row_stride, actual)
    if previous_row is not None and len(previous_row) != actual:
        raise RowLengthMismatch(
            actual, len(previous_row),
            message=f"Previous row has {len(previous_row)} bytes, current row has {actual}")


def _as_buffer(data):
    """Rows given as other sequences of ints (lists, arrays) become bytes."""
    if data is None or isinstance(data, (bytes, bytearray, memoryview)):
        return data
    return bytes(data)


def _is_zero_row(row) -> bool:
    if isinstance(row, memoryview):
        row = row.tobytes()
    return row.count(0) == len(row)


def select_kernel(filter_tag: int, row_length: int, first_row: bool,
                  strategy: str | None = None):
    """Pick the kernel for one row.

    Args:
        filter_tag: Validated filter tag.
        row_length: Row stride in bytes.
        first_row: True when the previous row is all zero.
        strategy: Strategy name, or None for the configured default.

    Returns:
        (kernel, name) where name identifies the kernel for logging.
    """
    strategy = acceleration.resolve(strategy)
    if strategy == constants.STRATEGY_AUTO:
        if row_length >= constants.VECTORIZE_MIN_BYTES:
            strategy = constants.STRATEGY_VECTORIZED
        else:
            strategy = constants.STRATEGY_SCALAR

    if strategy == constants.STRATEGY_VECTORIZED:
        if first_row and filter_tag == constants.FilterType.PAETH:
            # Paeth(a, 0, 0) == a: the row is a Sub row
            return vectorized.reconstruct_sub, "vectorized-sub(paeth)"
        if first_row and filter_tag == constants.FilterType.UP:
            return vectorized.reconstruct_none, "vectorized-none(up)"
        kernel = vectorized.KERNELS.get(filter_tag)
        if kernel is not None:
            return kernel, f"vectorized-{constants.FilterType(filter_tag).name.lower()}"

    return scalar.KERNELS[filter_tag], f"scalar-{constants.FilterType(filter_tag).name.lower()}"


def _run(filter_tag: int, raw, out: bytearray, previous_row, bpp: int,
         strategy: str | None) -> None:
    n = len(raw)
    if n == 0:
        return
    first_row = previous_row is None or _is_zero_row(previous_row)
    prev = bytes(n) if previous_row is None else previous_row
    kernel, name = select_kernel(filter_tag, n, first_row, strategy)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Row of %d bytes, bpp=%d, filter %d -> %s", n, bpp, filter_tag, name)
    kernel(raw, out, prev, bpp)


def reconstruct_row(filter_tag: int, filtered_row, previous_row, bpp: int, *,
                    row_stride: int | None = None,
                    strategy: str | None = None) -> bytearray:
    """Reconstruct one scanline into a new buffer.

    Args:
        filter_tag: PNG filter type, 0..4.
        filtered_row: Filtered payload without the tag byte.
        previous_row: Previous reconstructed row, or None for the first row
            of an image or interlace pass (treated as all zeros).
        bpp: Bytes per pixel, at least 1.
        row_stride: Expected row length; checked when given.
        strategy: 'auto', 'scalar', 'vectorized', or None for the default.

    Returns:
        A new bytearray holding the reconstructed row. Neither input is
        modified.
    """
    filtered_row = _as_buffer(filtered_row)
    previous_row = _as_buffer(previous_row)
    validate_row(filter_tag, filtered_row, previous_row, bpp, row_stride)
    out = bytearray(len(filtered_row))
    _run(filter_tag, filtered_row, out, previous_row, bpp, strategy)
    return out


def reconstruct_row_inplace(filter_tag: int, row: bytearray, previous_row, bpp: int, *,
                            row_stride: int | None = None,
                            strategy: str | None = None) -> bytearray:
    """Reconstruct one scanline over its own buffer.

    ``row`` holds the filtered payload on entry and the reconstruction on
    return; the same object is returned. Arguments as for reconstruct_row.
    """
    if not isinstance(row, bytearray):
        raise TypeError(f"In-place reconstruction needs a bytearray, got {type(row).__name__}")
    previous_row = _as_buffer(previous_row)
    validate_row(filter_tag, row, previous_row, bpp, row_stride)
    if previous_row is row:
        raise ValueError("previous_row must not be the row being reconstructed")
    _run(filter_tag, row, row, previous_row, bpp, strategy)
    return row
