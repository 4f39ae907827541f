# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# policies.py
# -----------------------------------------------------------------------------
# Purpose:
#   Staffing policy applied when the server pool shrinks while customers are
#   in service.
#
# Design notes:
#   - Pure function (servers, capacity) -> decision; the pool applies it.
#   - Busy servers are kept before idle ones so in-progress work survives.
#
# Usage:
#   from shopsim.policies import partition_for_capacity
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import List, Sequence, Tuple
from .entities import Server

def partition_for_capacity(servers: Sequence[Server], capacity: int) -> Tuple[List[Server], List[Server], List[Server]]:
    """
    Split ``servers`` into (kept, displaced, dropped) for a smaller pool.

    kept
        At most ``capacity`` servers: busy ones first (in their current
        order), then idle ones filling any remaining slots. Sorted by id.
    displaced
        Busy servers that did not fit. Their customers must be requeued and
        their pending completions cancelled.
    dropped
        Idle servers that did not fit. Nothing to undo.
    """
    busy = [s for s in servers if s.busy]
    idle = [s for s in servers if not s.busy]
    kept = busy[:capacity]
    displaced = busy[capacity:]
    room = capacity - len(kept)
    kept += idle[:room]
    dropped = idle[room:]
    kept.sort(key=lambda s: s.sid)
    return kept, displaced, dropped
