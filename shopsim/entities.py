# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# entities.py
# -----------------------------------------------------------------------------
# Purpose:
#   Entity definitions for the coffee shop DES: Customer and Server.
#
# Design notes:
#   - A customer is in exactly one place: the wait queue, a server, or the
#     served history. Ownership moves, it is never shared.
#   - Servers are addressed by a stable integer id; departure events and
#     cancellation refer to that id, not to the object.
#
# Usage:
#   from shopsim.entities import Customer, Server
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

@dataclass
class Customer:
    cid: int
    arrival_time: float                       # minutes, fixed at creation
    wait_time: Optional[float] = None         # overwritten at each service start
    service_start_time: Optional[float] = None
    service_end_time: Optional[float] = None
    requeues: int = 0                         # times displaced by a pool shrink

    @property
    def served(self) -> bool:
        return self.service_end_time is not None

    def start_service(self, now: float) -> float:
        """Record the start of service at ``now`` and return the wait."""
        self.wait_time = now - self.arrival_time
        self.service_start_time = now
        return self.wait_time

@dataclass
class Server:
    sid: int
    customer: Optional[Customer] = None
    completed: int = 0

    @property
    def busy(self) -> bool:
        return self.customer is not None

    def assign(self, customer: Customer):
        if self.customer is not None:
            raise RuntimeError(f"server {self.sid} already holds customer {self.customer.cid}")
        self.customer = customer

    def release(self) -> Optional[Customer]:
        """Drop the held customer (if any) and hand it back to the caller."""
        customer, self.customer = self.customer, None
        return customer
