# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Decode error types.

Every decode error is fatal for the image being decoded: later rows depend on
earlier reconstructed rows through Up, Average and Paeth, so there is nothing
meaningful to resume from.
"""

from __future__ import annotations


class DefilterError(IOError):
    """Base class for scanline decode failures"""

    def __init__(self, message: str, row_index: int | None = None,
                 byte_offset: int | None = None) -> None:
        self.row_index = row_index
        self.byte_offset = byte_offset
        self.reason = message
        super().__init__(self._format())

    def _format(self) -> str:
        where = []
        if self.row_index is not None:
            where.append(f"row {self.row_index}")
        if self.byte_offset is not None:
            where.append(f"byte offset {self.byte_offset}")
        if where:
            return f"{self.reason} (at {', '.join(where)})"
        return self.reason

    def locate(self, row_index: int, byte_offset: int) -> DefilterError:
        """Attach stream position to an error raised by a row-level call."""
        self.row_index = row_index
        self.byte_offset = byte_offset
        self.args = (self._format(),)
        return self

    def __str__(self) -> str:
        return self._format()


class InvalidFilterType(DefilterError):
    """Filter tag outside 0..4"""

    def __init__(self, filter_tag: int, row_index: int | None = None,
                 byte_offset: int | None = None) -> None:
        self.filter_tag = filter_tag
        super().__init__(f"Invalid filter type {filter_tag}", row_index, byte_offset)


class RowLengthMismatch(DefilterError):
    """Row is not exactly row_stride bytes"""

    def __init__(self, expected: int, actual: int, row_index: int | None = None,
                 byte_offset: int | None = None, message: str | None = None) -> None:
        self.expected = expected
        self.actual = actual
        if message is None:
            message = f"Row length mismatch: expected {expected} bytes, got {actual}"
        super().__init__(message, row_index, byte_offset)


class TruncatedStream(DefilterError):
    """Fewer bytes available than the image geometry requires"""

    def __init__(self, expected: int, actual: int, row_index: int | None = None,
                 byte_offset: int | None = None) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Truncated scanline stream: expected {expected} bytes, got {actual}",
            row_index, byte_offset)


class GeometryError(ValueError):
    """Invalid image geometry or stride configuration"""
