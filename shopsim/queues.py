# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# queues.py
# -----------------------------------------------------------------------------
# Purpose:
#   Discrete-event primitives: Event and Env (simulation clock plus the
#   Future Event List).
#
# Design notes:
#   - Ties on time are broken by scheduling order, so a fixed seed always
#     replays the same event sequence.
#   - cancel() is a linear scan followed by a heapify, O(len(FEL)). The FEL
#     only ever holds one arrival, one sample and one departure per busy
#     server, so this stays small.
#
# Usage:
#   from shopsim.queues import Env, Event, ARRIVAL, DEPARTURE, SAMPLE
# -----------------------------------------------------------------------------

from __future__ import annotations
import heapq
from typing import Callable, List, Optional

ARRIVAL = "arrival"
DEPARTURE = "departure"     # service completion
SAMPLE = "sample"           # recurring statistics sample

EVENT_KINDS = (ARRIVAL, DEPARTURE, SAMPLE)

class Event:
    """Immutable entry of the Future Event List (FEL).

    ``data`` carries the payload: nothing for arrivals and samples,
    ``{"server_id": int, "customer": Customer}`` for departures.
    """
    __slots__ = ("t", "kind", "data", "seq")
    def __init__(self, t: float, kind: str, data: Optional[dict] = None, seq: int = 0):
        if kind not in EVENT_KINDS:
            raise ValueError(f"unknown event kind {kind!r}")
        self.t = t; self.kind = kind; self.data = data or {}; self.seq = seq
    def __lt__(self, other: "Event"):
        return (self.t, self.seq) < (other.t, other.seq)
    def __repr__(self):
        return f"Event(t={self.t:.4f}, kind={self.kind!r}, seq={self.seq})"

class Env:
    """Simulation environment holding the clock and the FEL.

    Attributes
    ----------
    t : float
        Simulation time (minutes). Only the driver moves it forward.
    FEL : list[Event]
        Min-heap of scheduled events ordered by (time, insertion order).
    """
    def __init__(self):
        self.t: float = 0.0
        self.FEL: List[Event] = []
        self._seq = 0

    def __len__(self) -> int:
        return len(self.FEL)

    def schedule(self, ev: Event) -> Event:
        """Insert ``ev``, stamping it with the next insertion sequence number."""
        if ev.t < self.t:
            raise ValueError(f"cannot schedule {ev!r} before current time {self.t}")
        self._seq += 1
        stamped = Event(ev.t, ev.kind, ev.data, self._seq)
        heapq.heappush(self.FEL, stamped)
        return stamped

    def pop_next(self) -> Optional[Event]:
        """Remove and return the earliest event, or None when the FEL is empty."""
        if not self.FEL:
            return None
        return heapq.heappop(self.FEL)

    def peek(self) -> Optional[Event]:
        return self.FEL[0] if self.FEL else None

    def cancel(self, predicate: Callable[[Event], bool]) -> int:
        """Remove every pending event matching ``predicate``.

        Runs in O(len(FEL)): the heap is filtered and re-heapified. Returns
        the number of events removed.
        """
        kept = [ev for ev in self.FEL if not predicate(ev)]
        removed = len(self.FEL) - len(kept)
        if removed:
            heapq.heapify(kept)
            self.FEL = kept
        return removed

    def pending(self, kind: Optional[str] = None) -> List[Event]:
        """Pending events in pop order, optionally filtered by kind."""
        return sorted(ev for ev in self.FEL if kind is None or ev.kind == kind)

    def clear(self):
        self.t = 0.0
        self.FEL = []
        self._seq = 0
