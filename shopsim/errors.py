# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# errors.py
# -----------------------------------------------------------------------------
# Purpose:
#   Exception types raised by the engine. Bad configuration and calls made in
#   the wrong lifecycle state are rejected synchronously; nothing else fails.
#
# Usage:
#   from shopsim.errors import ConfigurationError, InvalidStateError
# -----------------------------------------------------------------------------


class SimulationError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(SimulationError, ValueError):
    """A rate, capacity or step size outside its valid range."""


class InvalidStateError(SimulationError, RuntimeError):
    """Operation not allowed in the engine's current lifecycle state."""
