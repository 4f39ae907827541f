# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# stations.py
# -----------------------------------------------------------------------------
# Purpose:
#   The counter: one FIFO wait queue feeding a homogeneous pool of servers
#   (baristas). Owns every capacity change, including resizing while
#   customers are in service.
#
# Design notes:
#   - Invariant after every public call: if any server is idle, the wait
#     queue is empty.
#   - A shrink that displaces a busy server cancels that server's pending
#     departure in the FEL and puts its customer back at the tail of the
#     queue. Ids are never renumbered or reused.
#
# Usage:
#   pool = ServerPool(2, service_rate=1.0, streams=streams, metrics=M)
#   pool.enqueue(customer); pool.dispatch(env)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from collections import deque
from typing import Deque, List, Optional
from .entities import Customer, Server
from .queues import Env, Event, DEPARTURE
from .policies import partition_for_capacity
from .validators import require_int_at_least, require_positive

logger = logging.getLogger(__name__)

class ServerPool:
    """Single wait queue in front of ``capacity`` identical servers.

    Parameters
    ----------
    capacity : int
        Number of servers, at least 1.
    service_rate : float
        Exponential service rate (customers per minute per server).
    streams : RandomStreams
        Shared random stream used for service draws.
    metrics : Metrics, optional
        Receives note_service_start / note_served / note_requeue calls.
    """
    def __init__(self, capacity: int, service_rate: float, streams, metrics=None):
        require_int_at_least("capacity", capacity, 1)
        require_positive("service_rate", service_rate)
        self.service_rate = service_rate
        self.streams = streams
        self.metrics = metrics
        self.queue: Deque[Customer] = deque()
        self.servers: List[Server] = []
        self._next_sid = 0
        self.rebuild(capacity)

    # --- views -------------------------------------------------------------
    @property
    def capacity(self) -> int:
        return len(self.servers)

    @property
    def busy_count(self) -> int:
        return sum(1 for s in self.servers if s.busy)

    @property
    def idle_count(self) -> int:
        return self.capacity - self.busy_count

    def get(self, sid: int) -> Optional[Server]:
        for s in self.servers:
            if s.sid == sid:
                return s
        return None

    def first_idle(self) -> Optional[Server]:
        """First idle server in id order."""
        for s in self.servers:
            if not s.busy:
                return s
        return None

    # --- customer flow -----------------------------------------------------
    def enqueue(self, customer: Customer):
        self.queue.append(customer)

    def dispatch(self, env: Env) -> int:
        """Start the head of the queue on idle servers; return how many started."""
        started = 0
        while self.queue:
            server = self.first_idle()
            if server is None:
                break
            self.start_service(env, server, self.queue.popleft())
            started += 1
        return started

    def start_service(self, env: Env, server: Server, customer: Customer):
        wait = customer.start_service(env.t)
        if self.metrics is not None:
            self.metrics.note_service_start(customer, wait)
        st = self.streams.next_service_time(self.service_rate)
        server.assign(customer)
        env.schedule(Event(env.t + st, DEPARTURE, {"server_id": server.sid, "customer": customer}))

    def on_departure(self, env: Env, server_id: int, customer: Customer) -> bool:
        """
        Complete service for ``customer`` on server ``server_id``. If someone
        is waiting, that server takes the head of the queue straight away.

        Returns False for a completion whose server no longer holds the
        customer (it was displaced by a shrink); such events are skipped.
        """
        server = self.get(server_id)
        if server is None or server.customer is not customer:
            logger.debug("skipping stale departure for server %s", server_id)
            return False
        server.release()
        server.completed += 1
        customer.service_end_time = env.t
        if self.metrics is not None:
            self.metrics.note_served(customer)
        if self.queue:
            self.start_service(env, server, self.queue.popleft())
        return True

    # --- capacity changes --------------------------------------------------
    def rebuild(self, capacity: int):
        """Fresh idle pool with ids 0..capacity-1 (only valid before a run starts)."""
        require_int_at_least("capacity", capacity, 1)
        self.servers = [Server(i) for i in range(capacity)]
        self._next_sid = capacity

    def resize(self, env: Env, capacity: int) -> List[Customer]:
        """
        Grow or shrink the pool while the simulation is in flight.

        Growing appends idle servers with fresh ids and lets each one take
        the head of the queue. Shrinking follows partition_for_capacity:
        displaced busy servers lose their pending departure and their
        customer rejoins the tail of the queue.

        Returns the customers that were requeued.
        """
        require_int_at_least("capacity", capacity, 1)
        current = self.capacity
        requeued: List[Customer] = []
        if capacity > current:
            for _ in range(capacity - current):
                server = Server(self._next_sid)
                self._next_sid += 1
                self.servers.append(server)
                if self.queue:
                    self.start_service(env, server, self.queue.popleft())
        elif capacity < current:
            kept, displaced, dropped = partition_for_capacity(self.servers, capacity)
            for server in displaced:
                sid = server.sid
                env.cancel(lambda ev: ev.kind == DEPARTURE and ev.data["server_id"] == sid)
                customer = server.release()
                customer.requeues += 1
                self.queue.append(customer)
                requeued.append(customer)
                if self.metrics is not None:
                    self.metrics.note_requeue(customer)
            self.servers = kept
            logger.info(
                "pool shrunk %d -> %d at t=%.2f (dropped idle=%d, requeued=%d)",
                current, capacity, env.t, len(dropped), len(requeued),
            )
        return requeued

    def clear(self, capacity: int):
        self.queue.clear()
        self.rebuild(capacity)
