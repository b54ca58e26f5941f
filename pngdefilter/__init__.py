# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
PNGDefilter - PNG scanline defiltering engine

Reconstructs PNG scanlines (filter types None, Sub, Up, Average and Paeth)
from an already-inflated image data stream, one row at a time.

**Usage:**
```python
from pngdefilter import ImageGeometry, ScanlineDecoder, reconstruct_row

geometry = ImageGeometry.from_color_type(width=640, color_type=6, bit_depth=8)
decoder = ScanlineDecoder(geometry, height=480)
for chunk in inflated_chunks:
    for row in decoder.feed(chunk):
        consume(row)
decoder.finish()
```
"""

__version__ = "0.3.0"

from .core.constants import FilterType
from .core.error import (
    DefilterError,
    GeometryError,
    InvalidFilterType,
    RowLengthMismatch,
    TruncatedStream,
)
from .core.geometry import ImageGeometry, adam7_passes, interlaced_image_size
from .engine import paeth_predictor, reconstruct_row, reconstruct_row_inplace
from .filters.encode import choose_filter, filter_image, filter_row
from .stream import ScanlineDecoder, defilter_image, defilter_stream, iter_rows

__all__ = [
    "FilterType",
    "DefilterError",
    "GeometryError",
    "InvalidFilterType",
    "RowLengthMismatch",
    "TruncatedStream",
    "ImageGeometry",
    "adam7_passes",
    "interlaced_image_size",
    "paeth_predictor",
    "reconstruct_row",
    "reconstruct_row_inplace",
    "choose_filter",
    "filter_image",
    "filter_row",
    "ScanlineDecoder",
    "defilter_image",
    "defilter_stream",
    "iter_rows",
]
