# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# validators.py
# -----------------------------------------------------------------------------
# Purpose:
#   Small argument checks shared by the engine, the pool and the generators.
#
# Usage:
#   require_positive("arrival_rate", rate)
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from .errors import ConfigurationError

def require_positive(name: str, value: float) -> None:
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number > 0, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"{name} must be > 0, got {value!r}")

def require_int_at_least(name: str, value: int, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ConfigurationError(f"{name} must be an integer >= {minimum}, got {value!r}")
