# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# arrivals.py
# -----------------------------------------------------------------------------
# Purpose:
#   Generate exogenous randomness: exponential inter-arrival gaps (Poisson
#   arrivals) and exponential service durations.
#
# Design notes:
#   - One shared, seedable stream. Arrival and service draws interleave in
#     call order, so replaying a seed requires the same call order.
#   - Inverse transform -ln(1 - U) / rate keeps each draw tied to exactly one
#     uniform, which makes runs easy to trace.
#
# Usage:
#   streams = RandomStreams(seed=42)
#   gap = streams.next_inter_arrival_time(0.5)
# -----------------------------------------------------------------------------

from __future__ import annotations
import math, random
from typing import Optional
from .validators import require_positive

class RandomStreams:
    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.rng = random.Random(seed)
        self.draws = 0

    def reseed(self, seed: Optional[int] = None):
        """Restart the stream; ``seed=None`` replays the construction seed."""
        if seed is not None:
            self.seed = seed
        self.rng = random.Random(self.seed)
        self.draws = 0

    def exponential(self, rate: float) -> float:
        require_positive("rate", rate)
        u = self.rng.random()
        self.draws += 1
        return -math.log(1.0 - u) / rate

    def next_inter_arrival_time(self, rate: float) -> float:
        return self.exponential(rate)

    def next_service_time(self, rate: float) -> float:
        return self.exponential(rate)
