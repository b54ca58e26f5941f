# PNGDefilter - A PNG Scanline Defiltering Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
Default kernel strategy.

Every reconstruction call may name a strategy explicitly; calls that don't
use the process-wide default kept here. The default is read lazily from the
PNGDEFILTER_STRATEGY environment variable and can be overridden from the CLI
(--strategy, --no-vectorize).

Strategies:
  auto        numpy kernels for rows of VECTORIZE_MIN_BYTES or more, scalar below
  scalar      pure Python reference kernels only
  vectorized  numpy kernels wherever one exists
"""

import logging
import os

from . import constants

logger = logging.getLogger(__name__)

ENV_VAR = "PNGDEFILTER_STRATEGY"

# Module-level state
_default_strategy = constants.STRATEGY_AUTO
_initialized = False          # Lazy init flag
_overridden = False           # Set by set_default_strategy / disable_vectorization


def validate_strategy(name: str) -> str:
    """Normalise a strategy name, raising ValueError for unknown names."""
    normalized = name.strip().lower()
    if normalized not in constants.STRATEGIES:
        raise ValueError(
            f"Unknown strategy '{name}' (expected one of: {', '.join(constants.STRATEGIES)})")
    return normalized


def _ensure_initialized() -> None:
    global _default_strategy, _initialized
    if _initialized:
        return
    _initialized = True
    if _overridden:
        return
    env_value = os.environ.get(ENV_VAR)
    if env_value:
        try:
            _default_strategy = validate_strategy(env_value)
        except ValueError as exc:
            logger.warning("Ignoring %s: %s", ENV_VAR, exc)
        else:
            logger.debug("Default strategy from %s: %s", ENV_VAR, _default_strategy)


def set_default_strategy(name: str) -> None:
    """Set the process-wide strategy. Called from CLI --strategy."""
    global _default_strategy, _overridden
    _default_strategy = validate_strategy(name)
    _overridden = True


def disable_vectorization() -> None:
    """Force scalar kernels everywhere. Called from CLI --no-vectorize."""
    set_default_strategy(constants.STRATEGY_SCALAR)


def get_default_strategy() -> str:
    _ensure_initialized()
    return _default_strategy


def resolve(strategy: str | None) -> str:
    """Explicit strategy if given, else the configured default."""
    if strategy is None:
        return get_default_strategy()
    return validate_strategy(strategy)


def reset() -> None:
    """Forget overrides and re-read the environment on next use."""
    global _default_strategy, _initialized, _overridden
    _default_strategy = constants.STRATEGY_AUTO
    _initialized = False
    _overridden = False
