# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

# Scalar Reconstruction Kernels
#
# Reference implementations of the five PNG filter reconstructions
# (PNG specification Section 9.2). All arithmetic wraps modulo 256.
#
# Every kernel has the signature kernel(raw, out, prev, bpp):
#   raw  - filtered payload (tag byte already stripped)
#   out  - bytearray of the same length receiving the reconstruction;
#          may be the same object as raw for in-place decoding
#   prev - previous reconstructed row (all zeros for the first row)
#   bpp  - bytes per complete pixel, at least 1

from collections.abc import Callable

Buffer = bytes | bytearray | memoryview


def paeth_predictor(a: int, b: int, c: int) -> int:
    """PNG Paeth predictor: a = left, b = above, c = upper left.

    Ties go to a over b, and to b over c.
    """
    p = a + b - c
    pa = abs(p - a)
    pb = abs(p - b)
    pc = abs(p - c)
    if pa <= pb and pa <= pc:
        return a
    elif pb <= pc:
        return b
    else:
        return c


def reconstruct_none(raw: Buffer, out: bytearray, prev: Buffer, bpp: int) -> None:
    if out is not raw:
        out[:] = raw


def reconstruct_sub(raw: Buffer, out: bytearray, prev: Buffer, bpp: int) -> None:
    # Recon[i] = Filt[i] + Recon[i - bpp]
    n = len(raw)
    head = min(bpp, n)
    out[:head] = raw[:head]
    for i in range(bpp, n):
        out[i] = (raw[i] + out[i - bpp]) & 0xFF


def reconstruct_up(raw: Buffer, out: bytearray, prev: Buffer, bpp: int) -> None:
    # Recon[i] = Filt[i] + Prior[i]
    for i in range(len(raw)):
        out[i] = (raw[i] + prev[i]) & 0xFF


def reconstruct_average(raw: Buffer, out: bytearray, prev: Buffer, bpp: int) -> None:
    # Recon[i] = Filt[i] + floor((Recon[i - bpp] + Prior[i]) / 2)
    # Python ints never truncate the 9-bit sum before the shift.
    n = len(raw)
    head = min(bpp, n)
    for i in range(head):
        out[i] = (raw[i] + (prev[i] >> 1)) & 0xFF
    for i in range(bpp, n):
        out[i] = (raw[i] + ((out[i - bpp] + prev[i]) >> 1)) & 0xFF


def reconstruct_paeth(raw: Buffer, out: bytearray, prev: Buffer, bpp: int) -> None:
    # Recon[i] = Filt[i] + PaethPredictor(Recon[i - bpp], Prior[i], Prior[i - bpp])
    n = len(raw)
    head = min(bpp, n)
    for i in range(head):
        # left and upper left are both zero, so the predictor is Prior[i]
        out[i] = (raw[i] + prev[i]) & 0xFF
    for i in range(bpp, n):
        out[i] = (raw[i] + paeth_predictor(out[i - bpp], prev[i], prev[i - bpp])) & 0xFF


KERNELS: dict[int, Callable[[Buffer, bytearray, Buffer, int], None]] = {
    0: reconstruct_none,
    1: reconstruct_sub,
    2: reconstruct_up,
    3: reconstruct_average,
    4: reconstruct_paeth,
}
