# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

# Reconstruction kernels: scalar reference, numpy vectorized, and the
# forward (encode) filters.
