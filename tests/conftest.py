"""Shared fixtures for the shopsim test suite."""

from __future__ import annotations
import pytest

from shopsim.arrivals import RandomStreams
from shopsim.metrics import Metrics
from shopsim.queues import Env
from shopsim.simulation import ShopSimulation
from shopsim.stations import ServerPool


@pytest.fixture
def env():
    return Env()


@pytest.fixture
def metrics():
    return Metrics(recent_wait_window=5)


@pytest.fixture
def make_pool(metrics):
    def _make(capacity, seed=3, service_rate=1.0):
        return ServerPool(capacity, service_rate, RandomStreams(seed), metrics)
    return _make


@pytest.fixture
def engine():
    sim = ShopSimulation(arrival_rate=0.5, service_rate=1.0, servers=1, seed=1)
    sim.initialize()
    return sim
