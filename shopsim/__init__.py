"""
shopsim package initializer.

This package contains the discrete-event engine for a single-queue,
multi-server coffee shop: the event list and clock, random streams,
entities, the server pool (including resizing mid-run), statistics, and
the simulation driver.
"""
from .errors import ConfigurationError, InvalidStateError, SimulationError
from .simulation import HORIZON_MINUTES, EngineState, ShopSimulation, Snapshot, run_one_day

__all__ = [
    "queues", "arrivals", "entities", "policies", "stations",
    "metrics", "simulation", "config",
    "ShopSimulation", "EngineState", "Snapshot", "run_one_day", "HORIZON_MINUTES",
    "SimulationError", "ConfigurationError", "InvalidStateError",
]
