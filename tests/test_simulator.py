"""Tests for the sorting line simulator (timer chain, routing, clamping)."""

import random

from sorting_line.models import WasteItem
from sorting_line.simulators import SortingSimulator


def _collect():
    events = []
    return events, lambda item, dest, record: events.append((item, dest, record))


def test_start_stop_are_idempotent(make_simulator):
    events, cb = _collect()
    sim = make_simulator(cb)

    assert sim.start() is True
    assert sim.start() is False
    assert sim.is_running()
    assert sim.stop() is True
    assert sim.stop() is False
    assert not sim.is_running()


def test_tick_reports_in_flight_then_finished(make_simulator, timers):
    events, cb = _collect()
    sim = make_simulator(cb)
    sim.start()

    timers.fire_last()  # produce
    assert len(events) == 1
    item, dest, record = events[0]
    assert record is None
    assert sim.current_item is item
    assert timers.last.interval == 1.0  # settle delay at 1x

    timers.fire_last()  # finish
    assert len(events) == 2
    item2, dest2, record = events[1]
    assert item2 is item and dest2 == dest
    assert record is not None
    assert record.item_id == item.item_id
    assert record.sorted_to == dest
    assert record.timestamp == 50_000
    assert record.device == 'TEST'
    assert sim.current_item is None
    assert timers.last.interval == 2.0  # next production tick


def test_zero_settle_time_combines_callbacks(make_simulator, timers):
    events, cb = _collect()
    sim = make_simulator(cb, settle_time=0)
    sim.start()
    timers.fire_last()

    assert len(events) == 1
    assert events[0][2] is not None


def test_each_item_yields_at_most_one_record(make_simulator, timers):
    events, cb = _collect()
    sim = make_simulator(cb)
    sim.start()
    for _ in range(10):
        timers.fire_last()

    records = [r for _, _, r in events if r is not None]
    assert len(records) == 5
    assert len({r.item_id for r in records}) == 5


def test_stop_cancels_pending_timer(make_simulator, timers):
    events, cb = _collect()
    sim = make_simulator(cb)
    sim.start()
    pending = timers.last
    sim.stop()

    assert pending.cancelled
    pending.fire()  # already due when stop() ran
    assert events == []


def test_item_in_flight_at_stop_never_finishes(make_simulator, timers):
    events, cb = _collect()
    sim = make_simulator(cb)
    sim.start()
    timers.fire_last()
    finish = timers.last
    sim.stop()
    finish.fire()

    assert all(record is None for _, _, record in events)


def test_stop_while_finish_step_runs_drops_record(timers):
    events, cb = _collect()
    holder = {}

    def stopping_clock():
        holder['sim'].stop()
        return 50_000

    sim = SortingSimulator(cb, {'settle_time': 1.0}, device_id='TEST',
                           rng=random.Random(3), clock=stopping_clock, timer_factory=timers)
    holder['sim'] = sim
    sim.start()
    timers.fire_last()  # produce
    scheduled = len(timers.timers)
    timers.fire_last()  # finish, stopped mid-step

    assert len(events) == 1
    assert events[0][2] is None
    assert not sim.is_running()
    assert len(timers.timers) == scheduled


def test_restart_ignores_timers_from_previous_run(make_simulator, timers):
    events, cb = _collect()
    sim = make_simulator(cb)
    sim.start()
    stale = timers.last
    sim.stop()
    sim.start()
    stale.fire()

    assert events == []


def test_reset_rejected_while_running(make_simulator, timers):
    events, cb = _collect()
    sim = make_simulator(cb)
    sim.start()
    timers.fire_last()
    assert sim.reset() is False
    assert sim.current_item is not None

    sim.stop()
    count = len(events)
    assert sim.reset() is True
    assert sim.current_item is None
    assert len(events) == count


def test_speed_is_clamped_and_applies_to_next_tick(make_simulator, timers):
    sim = make_simulator(lambda *a: None, min_speed=0.5, max_speed=4.0)

    assert sim.set_speed(100) == 4.0
    assert sim.set_speed(-3) == 0.5
    assert sim.set_speed("2") == 2.0
    assert sim.set_speed("fast") == 2.0
    assert sim.set_speed(float("nan")) == 2.0

    sim.start()
    timers.fire_last()
    assert timers.last.interval == 0.5  # settle_time / 2
    timers.fire_last()
    assert timers.last.interval == 1.0  # base_interval / 2


def test_fault_rate_is_clamped(make_simulator):
    sim = make_simulator(lambda *a: None)
    assert sim.set_fault_rate(1.7) == 1.0
    assert sim.set_fault_rate(-0.2) == 0.0
    assert sim.set_fault_rate("0.3") == 0.3
    assert sim.set_fault_rate(None) == 0.3


def test_zero_fault_rate_never_misroutes():
    sim = SortingSimulator(lambda *a: None, {'faults_enabled': True, 'fault_rate': 0.0},
                           rng=random.Random(1))
    for _ in range(200):
        item = sim.make_item()
        dest, fault = sim.route(item)
        assert dest == item.category
        assert not fault


def test_full_fault_rate_always_misroutes():
    sim = SortingSimulator(lambda *a: None, {'faults_enabled': True, 'fault_rate': 1.0},
                           rng=random.Random(2))
    for _ in range(200):
        item = sim.make_item()
        dest, fault = sim.route(item)
        assert dest != item.category
        assert fault


def test_disabled_faults_ignore_rate():
    sim = SortingSimulator(lambda *a: None, {'faults_enabled': False, 'fault_rate': 1.0},
                           rng=random.Random(3))
    item = WasteItem.create('Soda Can', 'METAL')
    assert sim.route(item) == ('METAL', False)

    sim.toggle_faults(True)
    dest, fault = sim.route(item)
    assert fault and dest != 'METAL'


def test_misrouted_record_is_marked_incorrect(make_simulator, timers):
    events, cb = _collect()
    sim = make_simulator(cb, faults_enabled=True, fault_rate=1.0, settle_time=0)
    sim.start()
    timers.fire_last()

    record = events[0][2]
    assert record.fault_injected
    assert not record.is_correct
