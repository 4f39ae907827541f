"""
experiments/scenarios.py

Holds scenario definitions (decision variables) to sweep during experiments.
Add staffing levels, arrival rates, and mid-day staffing changes here.
"""

from __future__ import annotations

BASELINE = {
    "name": "baseline",
    "overrides": {},  # override config keys here per scenario
}

TWO_BARISTAS = {
    "name": "two_baristas",
    "overrides": {
        "shop": {"servers": 2},
    },
}

RUSH_HOUR = {
    "name": "rush_hour",
    "overrides": {
        "shop": {
            "arrival_rate": 2.0,
            "service_rate": 1.0,
            "servers": 3,
        },
    },
}

# Start short-staffed and call in help after the morning rush builds a queue.
CALL_IN_HELP = {
    "name": "call_in_help",
    "overrides": {
        "shop": {
            "arrival_rate": 1.5,
            "servers": 1,
            "staffing_changes": [
                {"at_minute": 60, "servers": 2},
                {"at_minute": 120, "servers": 3},
            ],
        },
    },
}

# Send two of three baristas on break mid-shift; in-progress orders are requeued.
LUNCH_BREAK = {
    "name": "lunch_break",
    "overrides": {
        "shop": {
            "arrival_rate": 1.2,
            "servers": 3,
            "staffing_changes": [
                {"at_minute": 240, "servers": 1},
                {"at_minute": 300, "servers": 3},
            ],
        },
    },
}

SCENARIOS = [BASELINE, TWO_BARISTAS, RUSH_HOUR, CALL_IN_HELP, LUNCH_BREAK]
