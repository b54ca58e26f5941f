# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Vectorized Reconstruction Kernels

numpy implementations of the filters that parallelise across a row.

Sub is a per-channel prefix sum: byte i of the result is the wrapping sum of
every filtered byte at i, i - bpp, i - 2*bpp, ... . It is computed as a
two-phase scan over fixed-width blocks:

  1. local scan  - wrapping cumulative sum inside every block at once,
                   one lane per channel
  2. carry       - the exclusive cumulative sum of each block's last pixel
                   is broadcast-added into the blocks that follow

Bytes past the last whole block (a short block, or a partial trailing pixel
when the row length is not a multiple of bpp) are finished with the scalar
recurrence.

Up is a single wrapping add. Average and Paeth depend on the reconstructed
left neighbour through a division and a three-way compare and stay scalar.

Kernels share the scalar signature kernel(raw, out, prev, bpp); out may be
the same bytearray as raw.
"""

import numpy as np

from ..core.constants import VECTOR_WIDTH


def _view(buffer):
    return np.frombuffer(buffer, dtype=np.uint8)


def sub_scan(filtered, bpp, vector_width=VECTOR_WIDTH):
    """Two-phase block scan over the whole blocks of a row.

    Args:
        filtered: uint8 array holding the filtered row.
        bpp: Bytes per pixel (number of independent lanes).
        vector_width: Block width in bytes; rounded down to whole pixels,
            minimum one pixel per block.

    Returns:
        (body, length) where body is a new uint8 array with the reconstructed
        prefix and length the number of bytes it covers.
    """
    pixels_per_block = max(1, vector_width // bpp)
    block_bytes = pixels_per_block * bpp
    num_blocks = len(filtered) // block_bytes
    if num_blocks == 0:
        return np.empty(0, dtype=np.uint8), 0

    length = num_blocks * block_bytes
    blocks = filtered[:length].reshape(num_blocks, pixels_per_block, bpp)

    # Phase 1: local prefix sums, all blocks and lanes at once
    local = np.cumsum(blocks, axis=1, dtype=np.uint8)

    # Phase 2: carry-propagate block totals
    if num_blocks > 1:
        carry = np.cumsum(local[:, -1, :], axis=0, dtype=np.uint8)
        local[1:] += carry[:-1, np.newaxis, :]

    return local.reshape(-1), length


def reconstruct_sub(raw, out, prev, bpp, vector_width=VECTOR_WIDTH):
    body, length = sub_scan(_view(raw), bpp, vector_width)
    if length:
        _view(out)[:length] = body

    # Scalar tail
    for i in range(length, len(raw)):
        left = out[i - bpp] if i >= bpp else 0
        out[i] = (raw[i] + left) & 0xFF


def reconstruct_up(raw, out, prev, bpp):
    np.add(_view(raw), _view(prev), out=_view(out))


def reconstruct_none(raw, out, prev, bpp):
    if out is not raw:
        _view(out)[:] = _view(raw)


KERNELS = {
    0: reconstruct_none,
    1: reconstruct_sub,
    2: reconstruct_up,
}
