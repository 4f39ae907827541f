"""Tests for the engine lifecycle, event handling and end-to-end runs."""

from __future__ import annotations
import pytest

from shopsim.config import DEFAULTS, apply_overrides
from shopsim.errors import ConfigurationError, InvalidStateError
from shopsim.queues import ARRIVAL, DEPARTURE, SAMPLE
from shopsim.simulation import HORIZON_MINUTES, EngineState, ShopSimulation, run_one_day


def _run_to_end(sim, step=50):
    while sim.advance(step) is not EngineState.COMPLETED:
        pass
    return sim


def _fel_view(sim):
    return [(ev.t, ev.kind, ev.seq) for ev in sim.env.pending()]


def _assert_invariants(sim):
    pool = sim.pool
    assert pool.busy_count + pool.idle_count == pool.capacity

    waiting = [c.cid for c in pool.queue]
    in_service = [s.customer.cid for s in pool.servers if s.busy]
    served = [c.cid for c in sim.M.served]
    everyone = waiting + in_service + served
    assert len(everyone) == len(set(everyone))
    assert len(everyone) == sim.M.customer_count

    if pool.idle_count:
        assert not pool.queue

    departures = sim.env.pending(DEPARTURE)
    sids = [ev.data["server_id"] for ev in departures]
    assert len(sids) == len(set(sids))
    busy = {s.sid: s.customer for s in pool.servers if s.busy}
    assert set(sids) == set(busy)
    for ev in departures:
        assert ev.data["customer"] is busy[ev.data["server_id"]]
        assert ev.t >= sim.clock

    for c in sim.M.served:
        assert c.wait_time >= 0.0
        assert c.service_end_time >= c.arrival_time + c.wait_time - 1e-9


# --- lifecycle --------------------------------------------------------------

def test_initialize_primes_one_arrival_and_one_sample(engine):
    assert engine.state is EngineState.READY
    assert engine.clock == 0.0
    assert [ev.kind for ev in engine.env.pending(ARRIVAL)] == [ARRIVAL]
    samples = engine.env.pending(SAMPLE)
    assert len(samples) == 1 and samples[0].t == engine.reporting_interval
    assert len(engine.env) == 2


def test_first_advance_processes_only_the_arrival(engine):
    arrival = engine.env.pending(ARRIVAL)[0]
    # seed 1 draws an arrival before the first sample at t=1.0
    assert arrival.t < 1.0

    state = engine.advance(1)

    assert state is EngineState.RUNNING
    assert engine.clock == arrival.t
    snap = engine.snapshot()
    assert snap.customer_count == 1
    assert snap.queue_length + snap.busy_servers == 1
    assert snap.time_series["queue_length"] == ()


def test_advance_before_initialize_is_rejected():
    sim = ShopSimulation(seed=1)
    with pytest.raises(InvalidStateError):
        sim.advance(1)
    assert sim.state is EngineState.UNINITIALIZED
    assert len(sim.env) == 0


def test_initialize_twice_is_rejected(engine):
    with pytest.raises(InvalidStateError):
        engine.initialize()
    assert len(engine.env) == 2


def test_advance_needs_at_least_one_event(engine):
    with pytest.raises(ConfigurationError):
        engine.advance(0)


@pytest.mark.parametrize("kwargs", [
    {"arrival_rate": 0.0},
    {"service_rate": -1.0},
    {"servers": 0},
    {"reporting_interval": 0.0},
])
def test_constructor_rejects_bad_configuration(kwargs):
    with pytest.raises(ConfigurationError):
        ShopSimulation(**kwargs)


def test_configure_validates_everything_before_changing_anything(engine):
    with pytest.raises(ConfigurationError):
        engine.configure(arrival_rate=1.0, service_rate=0.0)
    assert engine.arrival_rate == 0.5
    assert engine.service_rate == 1.0


def test_configure_applies_rates_and_pool_size(engine):
    engine.configure(arrival_rate=1.5, service_rate=2.0, servers=3)
    assert engine.arrival_rate == 1.5
    assert engine.pool.service_rate == 2.0
    assert engine.pool.capacity == 3


def test_resize_before_start_rebuilds_pool():
    sim = ShopSimulation(servers=2, seed=1)
    sim.resize_pool(4)
    assert [s.sid for s in sim.pool.servers] == [0, 1, 2, 3]
    sim.resize_pool(1)
    assert [s.sid for s in sim.pool.servers] == [0]


def test_resize_to_zero_changes_nothing(engine):
    engine.advance(20)
    snap, fel = engine.snapshot(), _fel_view(engine)

    with pytest.raises(ConfigurationError):
        engine.resize_pool(0)

    assert engine.snapshot() == snap
    assert _fel_view(engine) == fel
    assert engine.pool_capacity == 1


def test_snapshot_is_idempotent(engine):
    engine.advance(40)
    assert engine.snapshot() == engine.snapshot()


def test_fresh_status_line():
    sim = ShopSimulation(seed=1)
    assert sim.snapshot().status_line() == (
        "Simulation time: 00:00 | Customers served: 0 | Current queue: 0 | No customers served yet"
    )


def test_status_line_reports_statistics(engine):
    _run_to_end(engine)
    line = engine.snapshot().status_line()
    assert line.startswith("Simulation time: 08:00 | Customers served: ")
    assert "Avg wait: " in line and "Max queue: " in line and "Current utilization: " in line


# --- event handling ---------------------------------------------------------

def test_two_arrivals_before_first_completion_leave_one_waiting():
    # service is so slow the first customer is still being served
    sim = ShopSimulation(arrival_rate=10.0, service_rate=0.001, servers=1, seed=5)
    sim.initialize()
    while sim.M.customer_count < 2:
        sim.advance(1)

    snap = sim.snapshot()
    assert snap.queue_length == 1
    assert snap.busy_servers == 1
    assert snap.served_count == 0


def test_samples_recur_at_reporting_interval():
    sim = ShopSimulation(arrival_rate=1.0, service_rate=1.5, servers=2, seed=4, reporting_interval=2.0)
    sim.initialize()
    while sim.clock < 10.0:
        sim.advance(1)
    times = [t for t, _ in sim.M.time_series["queue_length"]]
    assert times[:5] == [2.0, 4.0, 6.0, 8.0, 10.0]
    assert all(0.0 <= u <= 100.0 for _, u in sim.M.time_series["utilization"])


def test_invariants_hold_through_live_resizing():
    sim = ShopSimulation(arrival_rate=2.0, service_rate=0.8, servers=2, seed=21)
    sim.initialize()
    last_clock = sim.clock
    for step in range(120):
        state = sim.advance(7)
        assert sim.clock >= last_clock
        last_clock = sim.clock
        _assert_invariants(sim)
        if state is EngineState.COMPLETED:
            break
        if step % 5 == 4:
            sim.resize_pool(step % 4 + 1)
            _assert_invariants(sim)
    assert sim.M.customer_count > 0


def test_shrink_mid_run_requeues_and_cancels():
    sim = ShopSimulation(arrival_rate=3.0, service_rate=0.2, servers=3, seed=8)
    sim.initialize()
    while sim.pool.busy_count < 3:
        sim.advance(1)
    displaced = sim.pool.servers[2]
    customer = displaced.customer

    sim.resize_pool(1)

    assert sim.pool.capacity == 1
    assert sim.pool.queue[-1] is customer
    assert all(ev.data["server_id"] != displaced.sid for ev in sim.env.pending(DEPARTURE))
    assert sim.M.requeued == 2
    _assert_invariants(sim)


def test_run_to_horizon_never_passes_it():
    sim = ShopSimulation(arrival_rate=2.0, service_rate=1.0, servers=1, seed=3)
    sim.initialize()
    _run_to_end(sim, step=200)

    assert sim.state is EngineState.COMPLETED
    assert sim.clock <= HORIZON_MINUTES
    for pts in sim.M.time_series.values():
        assert all(t <= HORIZON_MINUTES for t, _ in pts)
    assert all(c.service_end_time <= HORIZON_MINUTES for c in sim.M.served)
    assert all(ev.t >= sim.clock for ev in sim.env.pending())
    # completed engines stay completed
    assert sim.advance(10) is EngineState.COMPLETED
    _assert_invariants(sim)


def test_event_past_horizon_stays_pending():
    # samples at 7, 14, ..., 476; the next one falls at 483
    sim = ShopSimulation(arrival_rate=1.0, service_rate=1.0, servers=1, seed=2, reporting_interval=7.0)
    sim.initialize()
    _run_to_end(sim)

    assert sim.state is EngineState.COMPLETED
    assert sim.clock <= HORIZON_MINUTES
    assert len(sim.env) > 0
    assert sim.env.peek().t > HORIZON_MINUTES
    assert any(ev.t == pytest.approx(483.0) for ev in sim.env.pending(SAMPLE))
    assert sim.M.time_series["queue_length"][-1][0] == pytest.approx(476.0)
    _assert_invariants(sim)


def test_average_wait_includes_customers_still_in_service():
    sim = ShopSimulation(arrival_rate=2.0, service_rate=1.0, servers=1, seed=3)
    sim.initialize()
    _run_to_end(sim, step=200)
    snap = sim.snapshot()

    assert snap.busy_servers == 1
    assert snap.served_count > 0
    assert snap.average_wait_time == pytest.approx(snap.total_wait_time / snap.served_count)
    served_only = sum(c.wait_time for c in sim.M.served) / snap.served_count
    assert snap.average_wait_time > served_only
    assert sim.summary()["avg_wait_minutes"] == pytest.approx(snap.average_wait_time)


def test_identical_seeds_give_identical_series():
    runs = []
    for _ in range(2):
        sim = ShopSimulation(arrival_rate=1.2, service_rate=0.7, servers=2, seed=11)
        sim.initialize()
        sim.advance(150)
        sim.resize_pool(1)
        sim.advance(150)
        sim.resize_pool(3)
        _run_to_end(sim)
        runs.append(sim.snapshot())
    assert runs[0].time_series == runs[1].time_series
    assert runs[0] == runs[1]


def test_reset_discards_everything_and_replays_the_seed(engine):
    _run_to_end(engine)
    first = engine.snapshot()

    engine.reset()

    snap = engine.snapshot()
    assert engine.state is EngineState.UNINITIALIZED
    assert snap.clock == 0.0 and snap.queue_length == 0 and snap.served_count == 0
    assert all(not pts for pts in snap.time_series.values())
    assert len(engine.env) == 0

    engine.initialize()
    _run_to_end(engine)
    assert engine.snapshot().time_series == first.time_series


# --- headless day -----------------------------------------------------------

def test_run_one_day_applies_staffing_changes():
    cfg = apply_overrides(DEFAULTS, {
        "sim": {"seed": 9},
        "shop": {
            "arrival_rate": 1.2,
            "servers": 3,
            "staffing_changes": [
                {"at_minute": 300, "servers": 2},
                {"at_minute": 240, "servers": 1},
            ],
        },
    })
    summary = run_one_day(cfg)

    assert summary["pool_size"] == 2
    assert summary["customers_served"] > 0
    assert summary["clock_minutes"] <= HORIZON_MINUTES
    assert summary["customers_arrived"] == (
        summary["customers_served"] + summary["customers_waiting"] + summary["customers_in_service"]
    )


def test_run_one_day_rejects_bad_step():
    cfg = apply_overrides(DEFAULTS, {"sim": {"events_per_step": 0}})
    with pytest.raises(ConfigurationError):
        run_one_day(cfg)
