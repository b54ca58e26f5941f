# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from pngdefilter import (
    FilterType,
    ImageGeometry,
    InvalidFilterType,
    RowLengthMismatch,
    choose_filter,
    defilter_stream,
    filter_image,
    filter_row,
)

from conftest import smooth_rows


def test_filter_row_sub():
    assert filter_row(FilterType.SUB, bytes([1, 2, 3, 4, 5]), None, 1) == bytes([1, 1, 1, 1, 1])


def test_filter_row_up():
    assert filter_row(FilterType.UP, bytes([1, 2, 3]), bytes([1, 2, 3]), 1) == bytes(3)


def test_filter_row_average_wraps():
    # 0 - floor((0 + 255) / 2) == -127 == 129 mod 256
    assert filter_row(FilterType.AVERAGE, bytes([0]), bytes([255]), 1) == bytes([129])


def test_filter_row_validates():
    with pytest.raises(InvalidFilterType):
        filter_row(6, bytes(2), None, 1)
    with pytest.raises(RowLengthMismatch):
        filter_row(FilterType.UP, bytes(2), bytes(3), 1)


def test_choose_filter_prefers_up_for_repeated_rows():
    row = bytes([10, 200, 30, 77, 150, 3])
    tag, encoded = choose_filter(row, row, 1)
    assert tag == FilterType.UP
    assert encoded == bytes(6)


def test_choose_filter_prefers_sub_for_ramp():
    row = bytes(range(0, 64, 2))
    tag, _ = choose_filter(row, None, 1)
    assert tag == FilterType.SUB


def test_choose_filter_tie_goes_to_none():
    tag, _ = choose_filter(bytes(8), None, 1)
    assert tag == FilterType.NONE


def test_filter_image_tags_every_row():
    geometry = ImageGeometry(6, 8, 1)
    rows = smooth_rows(3, 6, 1)
    data = filter_image(rows, geometry, FilterType.AVERAGE)
    assert len(data) == geometry.image_size(3)
    assert data[0::geometry.scanline_length] == bytes([3, 3, 3])


def test_filter_image_adaptive_round_trip():
    geometry = ImageGeometry(20, 8, 4)
    rows = smooth_rows(10, geometry.row_stride, geometry.bpp)
    data = filter_image(rows, geometry)
    assert defilter_stream(data, geometry, 10) == rows


def test_filter_image_rejects_wrong_row_length():
    with pytest.raises(RowLengthMismatch) as exc_info:
        filter_image([bytes(4), bytes(3)], ImageGeometry(4), FilterType.NONE)
    assert exc_info.value.row_index == 1
