# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# config.py
# -----------------------------------------------------------------------------
# Purpose:
#   Load the YAML configuration and merge scenario overrides on top of it.
#
# Design notes:
#   - Configuration stays a plain nested dict; DEFAULTS fill in whatever the
#     YAML file leaves out.
#   - Times are in MINUTES, rates in customers per minute.
#
# Usage:
#   cfg = load_cfg()
#   cfg = apply_overrides(cfg, {"shop": {"servers": 2}})
# -----------------------------------------------------------------------------

from __future__ import annotations
import copy, os
from typing import Dict, Optional
import yaml

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG_PATH = os.path.join(ROOT, "config", "baseline.yaml")

DEFAULTS: Dict = {
    "sim": {
        "seed": None,
        "reporting_interval": 1.0,
        "recent_wait_window": 5,
        "events_per_step": 25,
    },
    "shop": {
        "arrival_rate": 0.5,
        "service_rate": 1.0,
        "servers": 1,
        "staffing_changes": [],
    },
    "experiments": {
        "replications": 1,
        "confidence_level": 0.95,
    },
}

def apply_overrides(cfg: Dict, overrides: Dict) -> Dict:
    """Apply overrides (recursive merge) on top of ``cfg`` without mutating either."""
    new = copy.deepcopy(cfg)

    def _merge(dst: Dict, src: Dict):
        for key, val in src.items():
            if isinstance(val, dict) and isinstance(dst.get(key), dict):
                _merge(dst[key], val)
            else:
                dst[key] = copy.deepcopy(val)

    _merge(new, overrides or {})
    return new

def load_cfg(path: Optional[str] = None) -> Dict:
    """Read ``path`` (default config/baseline.yaml) and merge it over DEFAULTS."""
    with open(path or DEFAULT_CONFIG_PATH, "r") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"config root must be a mapping, got {type(raw).__name__}")
    return apply_overrides(DEFAULTS, raw)
