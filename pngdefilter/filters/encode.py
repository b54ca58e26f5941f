# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

# Forward Filtering
#
# The encode-side inverse of the reconstruction kernels: each prediction is
# taken from the unfiltered neighbours and subtracted modulo 256. Used to
# produce test streams and benchmark input.

from collections.abc import Iterable

from ..core.constants import FilterType
from ..core.error import RowLengthMismatch
from ..core.geometry import ImageGeometry
from ..engine import validate_row
from .scalar import paeth_predictor


def filter_row(filter_tag: int, row, previous_row, bpp: int) -> bytearray:
    """Filter one unfiltered row with the given filter type.

    Args:
        filter_tag: PNG filter type, 0..4.
        row: Unfiltered row bytes.
        previous_row: Previous unfiltered row, or None for the first row.
        bpp: Bytes per pixel.

    Returns:
        The filtered payload (without the tag byte).
    """
    validate_row(filter_tag, row, previous_row, bpp)
    n = len(row)
    prev = previous_row if previous_row is not None else bytes(n)
    encoded = bytearray(n)

    if filter_tag == FilterType.NONE:
        encoded[:] = row
    elif filter_tag == FilterType.SUB:
        for i in range(n):
            left = row[i - bpp] if i >= bpp else 0
            encoded[i] = (row[i] - left) & 0xFF
    elif filter_tag == FilterType.UP:
        for i in range(n):
            encoded[i] = (row[i] - prev[i]) & 0xFF
    elif filter_tag == FilterType.AVERAGE:
        for i in range(n):
            left = row[i - bpp] if i >= bpp else 0
            encoded[i] = (row[i] - ((left + prev[i]) >> 1)) & 0xFF
    else:
        for i in range(n):
            a = row[i - bpp] if i >= bpp else 0
            c = prev[i - bpp] if i >= bpp else 0
            encoded[i] = (row[i] - paeth_predictor(a, prev[i], c)) & 0xFF

    return encoded


def _signed_cost(encoded: bytearray) -> int:
    # Minimum sum of absolute differences, bytes read as signed
    return sum(b if b < 128 else 256 - b for b in encoded)


def choose_filter(row, previous_row, bpp: int) -> tuple[FilterType, bytearray]:
    """Pick the filter whose output has the smallest signed magnitude sum.

    Ties go to the lower filter type.
    """
    best_tag = FilterType.NONE
    best_row = None
    best_cost = None
    for tag in FilterType:
        encoded = filter_row(tag, row, previous_row, bpp)
        cost = _signed_cost(encoded)
        if best_cost is None or cost < best_cost:
            best_tag, best_row, best_cost = tag, encoded, cost
    return best_tag, best_row


def filter_image(rows: Iterable[bytes], geometry: ImageGeometry,
                 filter_tag: int | None = None) -> bytes:
    """Serialise unfiltered rows as a tagged scanline stream.

    Args:
        rows: Unfiltered rows, each geometry.row_stride bytes.
        geometry: Layout shared by every row.
        filter_tag: Fixed filter type for every row, or None to choose one
            per row with choose_filter.

    Returns:
        Concatenated (tag, payload) records ready for defiltering.
    """
    stream = bytearray()
    prev = None
    for index, row in enumerate(rows):
        if len(row) != geometry.row_stride:
            raise RowLengthMismatch(geometry.row_stride, len(row), row_index=index)
        if filter_tag is None:
            tag, encoded = choose_filter(row, prev, geometry.bpp)
        else:
            tag = filter_tag
            encoded = filter_row(tag, row, prev, geometry.bpp)
        stream.append(int(tag))
        stream += encoded
        prev = row
    return bytes(stream)
