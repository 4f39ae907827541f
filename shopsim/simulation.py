# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# simulation.py
# -----------------------------------------------------------------------------
# Purpose:
#   The engine: owns the clock/FEL, the random stream, the server pool and the
#   metrics, and exposes the host-facing lifecycle (initialize, advance,
#   resize_pool, reset, snapshot). Also runs a whole day headlessly.
#
# Design notes:
#   - Fully synchronous; an event is processed to completion before the next
#     one is popped. Hosts get progress by calling advance() repeatedly.
#   - The arrival stream is unbroken: handling one arrival always schedules
#     the next. The Customer itself is only built when its arrival is popped.
#   - An event past the horizon is never processed and the clock stays put.
#
# Usage:
#   from shopsim.simulation import ShopSimulation, run_one_day
#   results = run_one_day(cfg)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple
from .arrivals import RandomStreams
from .entities import Customer
from .errors import ConfigurationError, InvalidStateError
from .metrics import Metrics, utilization_percent
from .queues import Env, Event, ARRIVAL, DEPARTURE, SAMPLE
from .stations import ServerPool
from .validators import require_int_at_least, require_positive

logger = logging.getLogger(__name__)

HORIZON_MINUTES = 480.0   # one eight-hour shift

class EngineState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"

@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the engine for rendering and reporting."""
    state: EngineState
    clock: float
    queue_length: int
    served_count: int
    max_queue_length: int
    average_wait_time: float
    utilization_percent: float
    time_series: Dict[str, Tuple[Tuple[float, float], ...]]
    pool_size: int
    busy_servers: int
    customer_count: int
    total_wait_time: float

    def status_line(self) -> str:
        hours, minutes = int(self.clock // 60), int(self.clock % 60)
        if self.served_count == 0:
            stats = "No customers served yet"
        else:
            stats = (
                f"Avg wait: {self.average_wait_time:.2f} min | "
                f"Max queue: {self.max_queue_length} | "
                f"Current utilization: {self.utilization_percent:.1f}%"
            )
        return (
            f"Simulation time: {hours:02d}:{minutes:02d} | "
            f"Customers served: {self.served_count} | "
            f"Current queue: {self.queue_length} | {stats}"
        )

class ShopSimulation:
    """Single queue, multi-server coffee shop driven by discrete events.

    Parameters
    ----------
    arrival_rate : float
        Poisson arrival rate, customers per minute (> 0).
    service_rate : float
        Exponential service rate per server, customers per minute (> 0).
    servers : int
        Initial pool size (>= 1).
    seed : int, optional
        Seed for the single shared random stream.
    reporting_interval : float
        Minutes between statistics samples (> 0).
    recent_wait_window : int
        Number of most recently served customers averaged in the wait series.
    """
    def __init__(self, arrival_rate: float = 0.5, service_rate: float = 1.0, servers: int = 1,
                 seed: Optional[int] = None, reporting_interval: float = 1.0,
                 recent_wait_window: int = 5):
        require_positive("arrival_rate", arrival_rate)
        require_positive("service_rate", service_rate)
        require_int_at_least("servers", servers, 1)
        require_positive("reporting_interval", reporting_interval)
        self.arrival_rate = arrival_rate
        self.service_rate = service_rate
        self.pool_capacity = servers
        self.reporting_interval = reporting_interval
        self.horizon = HORIZON_MINUTES
        self.env = Env()
        self.streams = RandomStreams(seed)
        self.M = Metrics(recent_wait_window)
        self.pool = ServerPool(servers, service_rate, self.streams, self.M)
        self._state = EngineState.UNINITIALIZED
        self._next_cid = 0
        self._past_horizon = False

    @classmethod
    def from_cfg(cls, cfg: Dict) -> "ShopSimulation":
        sim_cfg = cfg.get("sim", {})
        shop = cfg.get("shop", {})
        return cls(
            arrival_rate=shop.get("arrival_rate", 0.5),
            service_rate=shop.get("service_rate", 1.0),
            servers=shop.get("servers", 1),
            seed=sim_cfg.get("seed"),
            reporting_interval=sim_cfg.get("reporting_interval", 1.0),
            recent_wait_window=sim_cfg.get("recent_wait_window", 5),
        )

    # --- lifecycle ---------------------------------------------------------
    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def clock(self) -> float:
        return self.env.t

    def configure(self, arrival_rate: Optional[float] = None, service_rate: Optional[float] = None,
                  servers: Optional[int] = None):
        """Change rates and/or pool size; every value is validated before anything changes."""
        if arrival_rate is not None:
            require_positive("arrival_rate", arrival_rate)
        if service_rate is not None:
            require_positive("service_rate", service_rate)
        if servers is not None:
            require_int_at_least("servers", servers, 1)
        if arrival_rate is not None:
            self.arrival_rate = arrival_rate
        if service_rate is not None:
            self.service_rate = service_rate
            self.pool.service_rate = service_rate
        if servers is not None:
            self.resize_pool(servers)

    def initialize(self) -> EngineState:
        """Prime the FEL with the first arrival and the first statistics sample."""
        if self._state is not EngineState.UNINITIALIZED:
            raise InvalidStateError(f"initialize() called in state {self._state.value}; reset() first")
        first = self.streams.next_inter_arrival_time(self.arrival_rate)
        self.env.schedule(Event(first, ARRIVAL))
        self.env.schedule(Event(self.reporting_interval, SAMPLE))
        self._state = EngineState.READY
        logger.info("initialized: first arrival at t=%.3f, %d server(s)", first, self.pool.capacity)
        return self._state

    def advance(self, max_events: int) -> EngineState:
        """
        Process up to ``max_events`` events, stopping early when the FEL is
        empty or the horizon is reached. Returns the resulting state.

        An event scheduled past the horizon is never processed; it stays in
        the FEL so every busy server keeps its pending completion.
        """
        if self._state is EngineState.UNINITIALIZED:
            raise InvalidStateError("advance() called before initialize()")
        require_int_at_least("max_events", max_events, 1)
        processed = 0
        while processed < max_events and not self._finished():
            if self.env.peek().t > self.horizon:
                # left unprocessed in the FEL; the clock stays at or before the horizon
                self._past_horizon = True
                logger.info("horizon %.1f reached; next event %r not processed", self.horizon, self.env.peek())
                break
            ev = self.env.pop_next()
            self.env.t = ev.t
            self._process(ev)
            processed += 1
        if self._finished():
            self._state = EngineState.COMPLETED
        elif processed:
            self._state = EngineState.RUNNING
        return self._state

    def resize_pool(self, capacity: int):
        """Change the number of servers, reconciling work already in progress."""
        require_int_at_least("capacity", capacity, 1)
        self.pool_capacity = capacity
        if self._state is EngineState.UNINITIALIZED:
            self.pool.rebuild(capacity)
            return
        before = self.pool.capacity
        self.pool.resize(self.env, capacity)
        logger.info("pool resized %d -> %d at t=%.2f", before, capacity, self.env.t)

    def reset(self):
        """Discard all events, customers and statistics and replay from the seed."""
        self.env.clear()
        self.streams.reseed()
        self.M.reset()
        self.pool.clear(self.pool_capacity)
        self._next_cid = 0
        self._past_horizon = False
        self._state = EngineState.UNINITIALIZED
        logger.info("reset: %d server(s), seed=%s", self.pool_capacity, self.streams.seed)

    def snapshot(self) -> Snapshot:
        busy = self.pool.busy_count
        size = self.pool.capacity
        return Snapshot(
            state=self._state,
            clock=self.env.t,
            queue_length=len(self.pool.queue),
            served_count=len(self.M.served),
            max_queue_length=self.M.max_queue_length,
            average_wait_time=self.M.average_wait(),
            utilization_percent=utilization_percent(busy, size),
            time_series=self.M.series_snapshot(),
            pool_size=size,
            busy_servers=busy,
            customer_count=self.M.customer_count,
            total_wait_time=self.M.total_wait_time,
        )

    def summary(self) -> Dict:
        return self.M.summary(self.env.t, len(self.pool.queue), self.pool.busy_count, self.pool.capacity)

    # --- event handling ----------------------------------------------------
    def _finished(self) -> bool:
        return self._past_horizon or not self.env.FEL or self.env.t >= self.horizon

    def _process(self, ev: Event):
        logger.debug("t=%.4f %s", ev.t, ev.kind)
        if ev.kind == ARRIVAL:
            self._on_arrival()
        elif ev.kind == DEPARTURE:
            self.pool.on_departure(self.env, ev.data["server_id"], ev.data["customer"])
        elif ev.kind == SAMPLE:
            self._on_sample()

    def _on_arrival(self):
        customer = Customer(self._next_cid, arrival_time=self.env.t)
        self._next_cid += 1
        self.pool.enqueue(customer)
        self.M.note_arrival(len(self.pool.queue))
        # next arrival is drawn before any service draw for this customer
        gap = self.streams.next_inter_arrival_time(self.arrival_rate)
        self.env.schedule(Event(self.env.t + gap, ARRIVAL))
        self.pool.dispatch(self.env)

    def _on_sample(self):
        self.M.record_sample(self.env.t, len(self.pool.queue), self.pool.busy_count, self.pool.capacity)
        self.env.schedule(Event(self.env.t + self.reporting_interval, SAMPLE))

def _apply_staffing_changes(sim: ShopSimulation, pending: list) -> list:
    """Apply every change whose at_minute has been reached; return the rest."""
    remaining = []
    for change in pending:
        if sim.clock >= float(change["at_minute"]):
            sim.resize_pool(int(change["servers"]))
        else:
            remaining.append(change)
    return remaining

def run_one_day(cfg: Dict) -> Dict:
    """Simulate one shift from ``cfg`` and return the metrics summary."""
    sim = ShopSimulation.from_cfg(cfg)
    step = cfg.get("sim", {}).get("events_per_step", 25)
    if isinstance(step, bool) or not isinstance(step, int) or step < 1:
        raise ConfigurationError(f"events_per_step must be an integer >= 1, got {step!r}")
    pending = sorted(cfg.get("shop", {}).get("staffing_changes") or [], key=lambda c: float(c["at_minute"]))

    sim.initialize()
    while sim.state is not EngineState.COMPLETED:
        pending = _apply_staffing_changes(sim, pending)
        sim.advance(step)
    return sim.summary()
