# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Public row reconstruction contract: validation, purity, dispatch."""

import pytest

from pngdefilter import (
    FilterType,
    GeometryError,
    InvalidFilterType,
    RowLengthMismatch,
    filter_row,
    reconstruct_row,
    reconstruct_row_inplace,
)
from pngdefilter.core import constants
from pngdefilter.engine import select_kernel
from pngdefilter.filters import scalar, vectorized

from conftest import random_rows

STRATEGIES = list(constants.STRATEGIES)


@pytest.mark.parametrize("strategy", STRATEGIES)
class TestConcreteScenarios:
    def test_sub(self, strategy):
        out = reconstruct_row(FilterType.SUB, bytes([1, 1, 1, 1, 1]), bytes([9] * 5), 1,
                              strategy=strategy)
        assert out == bytes([1, 2, 3, 4, 5])

    def test_up(self, strategy):
        out = reconstruct_row(FilterType.UP, bytes(5), bytes([1, 2, 3, 4, 5]), 1,
                              strategy=strategy)
        assert out == bytes([1, 2, 3, 4, 5])

    def test_average_first_byte(self, strategy):
        out = reconstruct_row(FilterType.AVERAGE, bytes([1, 0, 0, 0, 0]),
                              bytes([1, 2, 3, 4, 5]), 1, strategy=strategy)
        assert out[0] == 1

    def test_invalid_tag(self, strategy):
        with pytest.raises(InvalidFilterType) as exc_info:
            reconstruct_row(5, bytes(5), None, 1, strategy=strategy)
        assert exc_info.value.filter_tag == 5


class TestValidation:
    @pytest.mark.parametrize("tag", [-1, 5, 255])
    def test_invalid_tags(self, tag):
        with pytest.raises(InvalidFilterType):
            reconstruct_row(tag, bytes(4), bytes(4), 1)

    def test_previous_row_length_mismatch(self):
        with pytest.raises(RowLengthMismatch):
            reconstruct_row(FilterType.UP, bytes(4), bytes(5), 1)

    def test_row_stride_mismatch(self):
        with pytest.raises(RowLengthMismatch) as exc_info:
            reconstruct_row(FilterType.NONE, bytes(4), None, 1, row_stride=6)
        assert exc_info.value.expected == 6
        assert exc_info.value.actual == 4

    def test_bpp_must_be_positive(self):
        with pytest.raises(GeometryError):
            reconstruct_row(FilterType.SUB, bytes(4), None, 0)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            reconstruct_row(FilterType.SUB, bytes(4), None, 1, strategy="simd")

    def test_invalid_tag_leaves_buffer_untouched(self):
        row = bytearray([1, 2, 3])
        with pytest.raises(InvalidFilterType):
            reconstruct_row_inplace(9, row, None, 1)
        assert row == bytearray([1, 2, 3])

    def test_decode_errors_are_io_errors(self):
        with pytest.raises(IOError):
            reconstruct_row(7, bytes(1), None, 1)


class TestPurityAndInPlace:
    @pytest.mark.parametrize("strategy", STRATEGIES)
    @pytest.mark.parametrize("tag", list(FilterType))
    def test_inputs_not_mutated(self, rng, tag, strategy):
        raw, prev = (bytearray(r) for r in random_rows(rng, 2, 96))
        raw_copy, prev_copy = bytes(raw), bytes(prev)
        reconstruct_row(tag, raw, prev, 3, strategy=strategy)
        assert raw == raw_copy
        assert prev == prev_copy

    @pytest.mark.parametrize("strategy", STRATEGIES)
    @pytest.mark.parametrize("tag", list(FilterType))
    def test_in_place_matches_pure(self, rng, tag, strategy):
        raw, prev = random_rows(rng, 2, 130)
        expected = reconstruct_row(tag, raw, prev, 4, strategy=strategy)
        buf = bytearray(raw)
        result = reconstruct_row_inplace(tag, buf, prev, 4, strategy=strategy)
        assert result is buf
        assert buf == expected

    def test_in_place_needs_bytearray(self):
        with pytest.raises(TypeError):
            reconstruct_row_inplace(FilterType.SUB, bytes(3), None, 1)

    def test_in_place_rejects_aliased_previous_row(self):
        row = bytearray(3)
        with pytest.raises(ValueError):
            reconstruct_row_inplace(FilterType.UP, row, row, 1)

    def test_accepts_memoryview(self):
        data = memoryview(bytes([1, 1, 1, 1]))
        assert reconstruct_row(FilterType.SUB, data, None, 1) == bytes([1, 2, 3, 4])

    @pytest.mark.parametrize("strategy", STRATEGIES)
    @pytest.mark.parametrize("tag", list(FilterType))
    def test_accepts_int_lists(self, rng, tag, strategy):
        raw, prev = random_rows(rng, 2, 100)
        expected = reconstruct_row(tag, raw, prev, 2, strategy="scalar")
        assert reconstruct_row(tag, list(raw), list(prev), 2, strategy=strategy) == expected
        buf = bytearray(raw)
        assert reconstruct_row_inplace(tag, buf, list(prev), 2, strategy=strategy) == expected

    @pytest.mark.parametrize("length", [constants.VECTORIZE_MIN_BYTES - 1,
                                        constants.VECTORIZE_MIN_BYTES])
    def test_int_list_either_side_of_auto_threshold(self, length):
        row = reconstruct_row(FilterType.SUB, [1] * length, None, 1, strategy="auto")
        assert row == bytes(i % 256 for i in range(1, length + 1))

    def test_empty_row(self):
        assert reconstruct_row(FilterType.PAETH, b"", None, 3) == bytearray()


class TestProperties:
    @pytest.mark.parametrize("strategy", STRATEGIES)
    @pytest.mark.parametrize("bpp", [1, 2, 3, 4, 6, 8])
    @pytest.mark.parametrize("tag", list(FilterType))
    def test_round_trip(self, rng, tag, bpp, strategy):
        for stride in (1, 7, 64, 257):
            prev, row = random_rows(rng, 2, stride)
            encoded = filter_row(tag, row, prev, bpp)
            assert reconstruct_row(tag, encoded, prev, bpp, strategy=strategy) == row

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_none_is_identity(self, rng, strategy):
        row, prev = random_rows(rng, 2, 100)
        assert reconstruct_row(FilterType.NONE, row, prev, 3, strategy=strategy) == row
        assert reconstruct_row(FilterType.NONE, row, None, 3, strategy=strategy) == row

    @pytest.mark.parametrize("strategy", STRATEGIES)
    @pytest.mark.parametrize("tag", list(FilterType))
    def test_none_sentinel_equals_zero_row(self, rng, tag, strategy):
        for stride in (3, 80, 200):
            (row,) = random_rows(rng, 1, stride)
            assert (reconstruct_row(tag, row, None, 3, strategy=strategy)
                    == reconstruct_row(tag, row, bytes(stride), 3, strategy=strategy))

    @pytest.mark.parametrize("tag", list(FilterType))
    def test_strategies_agree(self, rng, tag):
        for stride in (5, 63, 64, 65, 1000):
            row, prev = random_rows(rng, 2, stride)
            results = {s: reconstruct_row(tag, row, prev, 3, strategy=s) for s in STRATEGIES}
            assert results["scalar"] == results["vectorized"] == results["auto"]

    @pytest.mark.parametrize("bpp", [1, 3, 8])
    def test_boundary_left_is_zero(self, bpp):
        # With a zero previous row, the first bpp bytes of every filter equal raw
        raw = bytes(range(10, 10 + bpp + 5))
        for tag in FilterType:
            out = reconstruct_row(tag, raw, None, bpp)
            assert out[:bpp] == raw[:bpp]


class TestKernelSelection:
    def test_scalar_strategy(self):
        for tag in FilterType:
            kernel, name = select_kernel(tag, 4096, False, "scalar")
            assert kernel is scalar.KERNELS[tag]
            assert name.startswith("scalar-")

    def test_vectorized_sub_and_up(self):
        assert select_kernel(FilterType.SUB, 8, False, "vectorized")[0] is vectorized.reconstruct_sub
        assert select_kernel(FilterType.UP, 8, False, "vectorized")[0] is vectorized.reconstruct_up

    def test_average_stays_scalar(self):
        kernel, _ = select_kernel(FilterType.AVERAGE, 4096, True, "vectorized")
        assert kernel is scalar.reconstruct_average

    def test_paeth_first_row_promoted_to_sub(self):
        kernel, name = select_kernel(FilterType.PAETH, 4096, True, "vectorized")
        assert kernel is vectorized.reconstruct_sub
        assert "paeth" in name

    def test_paeth_later_rows_scalar(self):
        kernel, _ = select_kernel(FilterType.PAETH, 4096, False, "vectorized")
        assert kernel is scalar.reconstruct_paeth

    def test_up_first_row_promoted_to_none(self):
        kernel, _ = select_kernel(FilterType.UP, 4096, True, "vectorized")
        assert kernel is vectorized.reconstruct_none

    def test_auto_threshold(self):
        short = constants.VECTORIZE_MIN_BYTES - 1
        assert select_kernel(FilterType.SUB, short, False, "auto")[0] is scalar.reconstruct_sub
        assert (select_kernel(FilterType.SUB, constants.VECTORIZE_MIN_BYTES, False, "auto")[0]
                is vectorized.reconstruct_sub)
