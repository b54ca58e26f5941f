# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
Image geometry — row stride and pixel stride derived from IHDR fields.

Filtering always works on whole bytes: for sub-byte bit depths several pixels
share a byte and ``bpp`` is clamped to 1.
"""

from dataclasses import dataclass
from typing import NamedTuple

from . import constants
from .error import GeometryError


@dataclass(frozen=True)
class ImageGeometry:
    """Per-image (or per-pass) scanline layout."""

    width: int
    bit_depth: int = 8
    channel_count: int = 1

    def __post_init__(self) -> None:
        if not isinstance(self.width, int) or self.width < 1:
            raise GeometryError(f"Image width must be a positive integer, got {self.width!r}")
        if self.bit_depth not in constants.VALID_BIT_DEPTHS:
            raise GeometryError(f"Unsupported bit depth {self.bit_depth!r}")
        if self.channel_count not in (1, 2, 3, 4):
            raise GeometryError(f"Unsupported channel count {self.channel_count!r}")

    @classmethod
    def from_color_type(cls, width: int, color_type: int, bit_depth: int) -> ImageGeometry:
        """Build a geometry from IHDR color type and bit depth.

        Raises:
            GeometryError: unknown color type or a bit depth PNG does not
                allow for that color type (e.g. 4-bit RGB).
        """
        if color_type not in constants.COLOR_TYPE_CHANNELS:
            raise GeometryError(f"Unknown PNG color type {color_type!r}")
        if bit_depth not in constants.COLOR_TYPE_BIT_DEPTHS[color_type]:
            raise GeometryError(
                f"Bit depth {bit_depth} is not permitted for color type {color_type}")
        return cls(width, bit_depth, constants.COLOR_TYPE_CHANNELS[color_type])

    @property
    def bits_per_pixel(self) -> int:
        return self.bit_depth * self.channel_count

    @property
    def bpp(self) -> int:
        """Byte distance between corresponding bytes of adjacent pixels."""
        return max(1, (self.bits_per_pixel + 7) // 8)

    @property
    def row_stride(self) -> int:
        return (self.width * self.bits_per_pixel + 7) // 8

    @property
    def scanline_length(self) -> int:
        """Filtered row length: tag byte plus payload."""
        return 1 + self.row_stride

    def image_size(self, height: int) -> int:
        """Filtered bytes required for ``height`` non-interlaced rows."""
        if height < 0:
            raise GeometryError(f"Image height must not be negative, got {height}")
        return height * self.scanline_length

    def with_width(self, width: int) -> ImageGeometry:
        return ImageGeometry(width, self.bit_depth, self.channel_count)


class PassLayout(NamedTuple):
    """One non-empty Adam7 pass"""
    index: int
    geometry: ImageGeometry
    rows: int


def _pass_extent(size: int, start: int, step: int) -> int:
    if size <= start:
        return 0
    return (size - start + step - 1) // step


def adam7_passes(geometry: ImageGeometry, height: int) -> list[PassLayout]:
    """Return the non-empty Adam7 passes of an interlaced image, in order.

    Passes with zero columns or zero rows carry no scanlines (not even a
    filter byte) and are omitted. Each pass starts from a zero previous row.
    """
    if height < 0:
        raise GeometryError(f"Image height must not be negative, got {height}")
    layouts = []
    for index, (x0, y0, dx, dy) in enumerate(constants.ADAM7_PASSES):
        cols = _pass_extent(geometry.width, x0, dx)
        rows = _pass_extent(height, y0, dy)
        if cols and rows:
            layouts.append(PassLayout(index, geometry.with_width(cols), rows))
    return layouts


def interlaced_image_size(geometry: ImageGeometry, height: int) -> int:
    """Filtered bytes required for an Adam7-interlaced image."""
    return sum(p.rows * p.geometry.scanline_length for p in adam7_passes(geometry, height))
