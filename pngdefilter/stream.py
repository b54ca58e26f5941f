# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
Streaming scanline decoder.

Consumes the inflated image data stream - for every row one filter tag byte
followed by row_stride payload bytes - and hands back reconstructed rows in
top-to-bottom order. Input may arrive in chunks of any size; the decoder keeps
at most one partial scanline of input plus the previous reconstructed row.

For Adam7-interlaced images the seven passes are decoded one after another,
each starting from a zero previous row. Rows come back in stream order (pass
by pass); scattering pass pixels into the full image is left to the caller.

Any decode error aborts the image: the failing row and everything after it
are never emitted, and the decoder refuses further input.
"""

import logging
from collections.abc import Iterator
from typing import BinaryIO

from .core.error import DefilterError, RowLengthMismatch, TruncatedStream
from .core.geometry import ImageGeometry, PassLayout, adam7_passes
from .engine import reconstruct_row_inplace

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 65536


class ScanlineDecoder:
    """Push-style decoder for one image."""

    def __init__(self, geometry: ImageGeometry, height: int, *,
                 interlaced: bool = False, strategy: str | None = None) -> None:
        if height < 0:
            raise ValueError(f"Image height must not be negative, got {height}")
        self.geometry = geometry
        self.height = height
        self.interlaced = interlaced
        self.strategy = strategy

        if interlaced:
            self._passes = adam7_passes(geometry, height)
        elif height:
            self._passes = [PassLayout(0, geometry, height)]
        else:
            self._passes = []
        self.expected_size = sum(p.rows * p.geometry.scanline_length for p in self._passes)

        self._buffer = bytearray()
        self._buf_pos = 0
        self._pass_pos = 0
        self._rows_in_pass = 0
        self._prev_row: bytearray | None = None  # None = zero row (start of image or pass)
        self._error: DefilterError | None = None
        self._finished = False

        self.rows_emitted = 0
        self.bytes_consumed = 0

        logger.debug("Scanline decoder: width=%d height=%d bit_depth=%d channels=%d "
                     "bpp=%d row_stride=%d interlaced=%s expected=%d bytes",
                     geometry.width, height, geometry.bit_depth, geometry.channel_count,
                     geometry.bpp, geometry.row_stride, interlaced, self.expected_size)

    @property
    def done(self) -> bool:
        """All rows of the image have been reconstructed."""
        return self._pass_pos >= len(self._passes)

    @property
    def current_pass(self) -> int | None:
        """Adam7 index (0-6) of the pass the next row belongs to, or None when done."""
        if self.done:
            return None
        return self._passes[self._pass_pos].index

    @property
    def buffered(self) -> int:
        return len(self._buffer) - self._buf_pos

    def _check_usable(self) -> None:
        if self._error is not None:
            raise DefilterError(f"Decoder already failed: {self._error}") from self._error
        if self._finished:
            raise DefilterError("Decoder already finished")

    def _fail(self, exc: DefilterError) -> DefilterError:
        self._error = exc
        logger.warning("Aborting image decode: %s", exc)
        return exc

    def _compact(self) -> None:
        # Drop consumed input so only the unread tail stays alive
        if self._buf_pos:
            del self._buffer[:self._buf_pos]
            self._buf_pos = 0

    def push(self, data: bytes | bytearray | memoryview) -> None:
        """Append filtered stream bytes without decoding them."""
        self._check_usable()
        self._compact()
        self._buffer += data

    def pop_row(self) -> bytes | None:
        """Reconstruct the next row if enough input is buffered.

        Returns:
            The reconstructed row, or None when more input is needed or the
            image is complete.

        Raises:
            InvalidFilterType: the row's tag byte is outside 0..4.
        """
        self._check_usable()
        if self.done:
            return None

        layout = self._passes[self._pass_pos]
        geometry = layout.geometry
        need = geometry.scanline_length
        start = self._buf_pos
        if len(self._buffer) - start < need:
            return None

        tag = self._buffer[start]
        row = self._buffer[start + 1:start + need]
        try:
            reconstruct_row_inplace(tag, row, self._prev_row, geometry.bpp,
                                    row_stride=geometry.row_stride, strategy=self.strategy)
        except DefilterError as exc:
            raise self._fail(exc.locate(self.rows_emitted, self.bytes_consumed))

        self._buf_pos += need
        self.bytes_consumed += need
        self.rows_emitted += 1
        self._rows_in_pass += 1
        if self._rows_in_pass == layout.rows:
            self._pass_pos += 1
            self._rows_in_pass = 0
            self._prev_row = None
            if self.interlaced and not self.done:
                logger.debug("Adam7 pass %d complete, starting pass %d",
                             layout.index, self._passes[self._pass_pos].index)
        else:
            self._prev_row = row
        return bytes(row)

    def feed(self, data: bytes | bytearray | memoryview) -> list[bytes]:
        """Append a chunk and return every row it completes."""
        self.push(data)
        rows = []
        while True:
            row = self.pop_row()
            if row is None:
                break
            rows.append(row)
        self._compact()
        return rows

    def finish(self) -> None:
        """Declare end of input.

        Raises:
            TruncatedStream: fewer bytes arrived than the geometry requires.
            RowLengthMismatch: bytes remain after the last row.
        """
        self._check_usable()
        self._finished = True
        received = self.bytes_consumed + self.buffered
        if not self.done:
            raise self._fail(TruncatedStream(self.expected_size, received,
                                             row_index=self.rows_emitted,
                                             byte_offset=self.bytes_consumed))
        if self.buffered:
            raise self._fail(RowLengthMismatch(
                self.expected_size, received, row_index=self.rows_emitted,
                byte_offset=self.bytes_consumed,
                message=f"{self.buffered} bytes of trailing data after the last scanline"))
        logger.debug("Decoded %d rows (%d bytes)", self.rows_emitted, self.bytes_consumed)


def iter_rows(source: BinaryIO, geometry: ImageGeometry, height: int, *,
              chunk_size: int = DEFAULT_CHUNK_SIZE, interlaced: bool = False,
              strategy: str | None = None) -> Iterator[bytes]:
    """Pull rows from a binary file-like object holding the inflated stream.

    Rows are yielded as soon as they are complete. Reading stops once the
    image is complete; bytes already read past the last row are an error.

    Raises:
        InvalidFilterType, TruncatedStream, RowLengthMismatch
    """
    decoder = ScanlineDecoder(geometry, height, interlaced=interlaced, strategy=strategy)
    while not decoder.done:
        chunk = source.read(chunk_size)
        if not chunk:
            break
        decoder.push(chunk)
        while True:
            row = decoder.pop_row()
            if row is None:
                break
            yield row
        decoder._compact()
    decoder.finish()


def defilter_stream(data: bytes | bytearray | memoryview, geometry: ImageGeometry,
                    height: int, *, interlaced: bool = False,
                    strategy: str | None = None) -> list[bytes]:
    """Reconstruct every row of an in-memory scanline stream."""
    decoder = ScanlineDecoder(geometry, height, interlaced=interlaced, strategy=strategy)
    rows = decoder.feed(data)
    decoder.finish()
    return rows


def defilter_image(data: bytes | bytearray | memoryview, geometry: ImageGeometry,
                   height: int, *, interlaced: bool = False,
                   strategy: str | None = None) -> bytes:
    """Reconstruct an in-memory scanline stream into one contiguous buffer."""
    return b"".join(defilter_stream(data, geometry, height,
                                    interlaced=interlaced, strategy=strategy))
