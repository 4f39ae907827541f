"""
experiments/run_experiments.py

Experiment harness that loads the baseline config, applies scenario overrides,
runs multiple seeded replications of one shift, and reports KPIs with
confidence intervals.

Run from the repository root:
    python -m experiments.run_experiments
"""

from __future__ import annotations
import copy, math
from typing import Callable, Dict, List, Optional
from statistics import mean, stdev
from scipy.stats import t

from shopsim.config import apply_overrides, load_cfg
from shopsim.simulation import run_one_day
from experiments.scenarios import SCENARIOS

def mean_ci(values: List[float], confidence_level: float) -> tuple[float, float]:
    """Return (mean, half-width) using a t-distribution critical value."""
    if not values:
        return 0.0, 0.0
    mu = mean(values)
    n = len(values)
    if n < 2:
        return mu, 0.0
    level = min(max(confidence_level, 0.0), 0.999999)
    alpha = 1.0 - level
    tcrit = t.ppf(1 - alpha / 2.0, n - 1)
    half = tcrit * (stdev(values) / math.sqrt(n))
    return mu, float(half)

def series(results: List[Dict], extractor: Callable[[Dict], float]) -> List[float]:
    """Collect a numeric series from each replication result."""
    return [float(extractor(res)) for res in results]

def run_scenario(cfg: Dict, scenario: Dict, replications: int) -> List[Dict]:
    """Run ``replications`` shifts of one scenario, advancing the seed per replication."""
    sc_base_cfg = apply_overrides(cfg, scenario["overrides"])
    base_seed = sc_base_cfg.get("sim", {}).get("seed") or 0
    results = []
    for rep in range(replications):
        sc_cfg = copy.deepcopy(sc_base_cfg)
        sc_cfg.setdefault("sim", {})["seed"] = base_seed + rep
        results.append(run_one_day(sc_cfg))
    return results

def report(name: str, results: List[Dict], confidence: float) -> Dict[str, tuple]:
    """Print the KPI block for one scenario and return the (mean, half-width) pairs."""
    kpis = {
        "avg_wait": mean_ci(series(results, lambda r: r["avg_wait_minutes"]), confidence),
        "max_wait": mean_ci(series(results, lambda r: r["max_wait_minutes"]), confidence),
        "max_queue": mean_ci(series(results, lambda r: r["max_queue_length"]), confidence),
        "served": mean_ci(series(results, lambda r: r["customers_served"]), confidence),
        "requeued": mean_ci(series(results, lambda r: r["customers_requeued"]), confidence),
        "utilization": mean_ci(series(results, lambda r: r["mean_sampled_utilization_pct"]), confidence),
    }
    print(f"Scenario: {name} (replications={len(results)}, {confidence*100:.1f}% CI)")
    print(f"  Avg wait: {kpis['avg_wait'][0]:.2f} ± {kpis['avg_wait'][1]:.2f} min")
    print(f"  Max wait: {kpis['max_wait'][0]:.2f} ± {kpis['max_wait'][1]:.2f} min")
    print(f"  Max queue length: {kpis['max_queue'][0]:.2f} ± {kpis['max_queue'][1]:.2f}")
    print(f"  Customers served/shift: {kpis['served'][0]:.1f} ± {kpis['served'][1]:.1f}")
    print(f"  Customers requeued by staffing cuts: {kpis['requeued'][0]:.2f} ± {kpis['requeued'][1]:.2f}")
    print(f"  Mean barista utilization: {kpis['utilization'][0]:.1f}% ± {kpis['utilization'][1]:.1f}%")
    print("-")
    return kpis

def main(config_path: Optional[str] = None):
    """Entry point: drive all scenarios, replications, and report KPIs."""
    cfg = load_cfg(config_path)
    exp_cfg = cfg.get("experiments", {})
    replications = max(1, int(exp_cfg.get("replications", 1)))
    confidence = float(exp_cfg.get("confidence_level", 0.95))
    for sc in SCENARIOS:
        results = run_scenario(cfg, sc, replications)
        report(sc["name"], results, confidence)

if __name__ == "__main__":
    main()
