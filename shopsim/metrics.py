# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# metrics.py
# -----------------------------------------------------------------------------
# Purpose:
#   Collect running counters (arrivals, queue high-water mark, waits, served
#   history) and the periodic time series sampled by the driver.
#
# Design notes:
#   - Side-effect methods (note_*) are called by the pool and the driver.
#   - Summaries return JSON-serializable dicts for easy tabulation.
#
# Usage:
#   M = Metrics(recent_wait_window=5); M.summary(...)
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Dict, List, Optional, Tuple
from .entities import Customer
from .validators import require_int_at_least

SERIES = ("queue_length", "wait_time", "utilization")

def utilization_percent(busy: int, pool_size: int) -> float:
    # never divide by an empty pool
    if pool_size <= 0:
        return 0.0
    return busy / pool_size * 100.0

class Metrics:
    def __init__(self, recent_wait_window: int = 5):
        require_int_at_least("recent_wait_window", recent_wait_window, 1)
        self.recent_wait_window = recent_wait_window
        self.reset()

    def reset(self):
        self.customer_count = 0
        self.max_queue_length = 0
        self.total_wait_time = 0.0        # summed at every service start
        self.services_started = 0
        self.requeued = 0
        self.served: List[Customer] = []  # append-only, completion order
        self.time_series: Dict[str, List[Tuple[float, float]]] = {name: [] for name in SERIES}

    def note_arrival(self, queue_length: int):
        self.customer_count += 1
        if queue_length > self.max_queue_length:
            self.max_queue_length = queue_length

    def note_service_start(self, customer: Customer, wait: float):
        self.total_wait_time += wait
        self.services_started += 1

    def note_served(self, customer: Customer):
        self.served.append(customer)

    def note_requeue(self, customer: Customer):
        self.requeued += 1

    def recent_wait(self) -> Optional[float]:
        """Mean wait of the last ``recent_wait_window`` served customers, None if nobody was served."""
        recent = self.served[-self.recent_wait_window:]
        if not recent:
            return None
        return sum(c.wait_time for c in recent) / len(recent)

    def average_wait(self) -> float:
        """Total wait over every service start divided by the number served."""
        if not self.served:
            return 0.0
        return self.total_wait_time / len(self.served)

    def record_sample(self, t: float, queue_length: int, busy: int, pool_size: int):
        """Append one point to each series; the wait series is skipped until someone is served."""
        self.time_series["queue_length"].append((t, float(queue_length)))
        recent = self.recent_wait()
        if recent is not None:
            self.time_series["wait_time"].append((t, recent))
        self.time_series["utilization"].append((t, utilization_percent(busy, pool_size)))

    def series_snapshot(self) -> Dict[str, Tuple[Tuple[float, float], ...]]:
        return {name: tuple(points) for name, points in self.time_series.items()}

    def summary(self, clock: float, queue_length: int, busy: int, pool_size: int) -> Dict:
        util_points = [v for _, v in self.time_series["utilization"]]
        waits = [c.wait_time for c in self.served]
        return {
            "clock_minutes": clock,
            "customers_arrived": self.customer_count,
            "customers_served": len(self.served),
            "customers_waiting": queue_length,
            "customers_in_service": busy,
            "customers_requeued": self.requeued,
            "max_queue_length": self.max_queue_length,
            "avg_wait_minutes": self.average_wait(),
            "max_wait_minutes": max(waits) if waits else 0.0,
            "total_wait_minutes": self.total_wait_time,
            "pool_size": pool_size,
            "utilization_pct": utilization_percent(busy, pool_size),
            "mean_sampled_utilization_pct": (
                sum(util_points) / len(util_points) if util_points else 0.0
            ),
            "time_series": {name: [list(p) for p in pts] for name, pts in self.time_series.items()},
        }
