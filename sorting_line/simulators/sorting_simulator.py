"""Sorting line simulator - produces waste items and routes them to bins"""

import random

from sorting_line.models import BINS, CATALOGUE, ProcessedRecord, WasteItem, now_ms
from sorting_line.simulators.base_simulator import BaseSimulator


def _clamp(value, low, high):
    return max(low, min(high, value))


class SortingSimulator(BaseSimulator):
    """
    Production loop for the sorting line.

    Every tick synthesizes one item, decides its bin and reports it twice:
      callback(item, sorted_to, None)    - item is on its way
      callback(item, sorted_to, record)  - item settled in the bin
    With settle_time == 0 both phases collapse into the second call. An item
    still in flight when stop() is called never produces a record.

    Parameters:
        callback      (callable) - callback(item, sorted_to, record_or_None)
        settings      (dict)     - 'simulation' section of settings.json
        device_id     (str)      - stamped onto every record
        rng           (Random)   - random source, injectable for tests
        clock         (callable) - returns epoch milliseconds
        timer_factory (callable) - see BaseSimulator
    """

    def __init__(self, callback, settings=None, device_id='UNKNOWN',
                 rng=None, clock=None, timer_factory=None):
        super().__init__(timer_factory)
        settings = settings or {}
        self.callback  = callback
        self.device_id = device_id
        self._rng      = rng or random.Random()
        self._clock    = clock or now_ms

        self.base_interval = float(settings.get('base_interval', 2.0))
        self.settle_time   = float(settings.get('settle_time', 1.0))
        self.min_speed     = float(settings.get('min_speed', 0.25))
        self.max_speed     = float(settings.get('max_speed', 5.0))

        self._speed          = _clamp(float(settings.get('speed', 1.0)), self.min_speed, self.max_speed)
        self._faults_enabled = bool(settings.get('faults_enabled', False))
        self._fault_rate     = _clamp(float(settings.get('fault_rate', 0.1)), 0.0, 1.0)
        self._current_item   = None

    # ========== PUBLIC API ==========

    @property
    def speed(self):
        return self._speed

    @property
    def faults_enabled(self):
        return self._faults_enabled

    @property
    def fault_rate(self):
        return self._fault_rate

    @property
    def current_item(self):
        with self._lock:
            return self._current_item

    def reset(self):
        """Clear the in-flight item. Only valid while idle."""
        with self._lock:
            if self._running:
                print("[SIM] Reset ignored while running")
                return False
            self._current_item = None
        return True

    def set_speed(self, multiplier):
        """Clamp to [min_speed, max_speed]; takes effect on the next scheduled tick."""
        try:
            value = float(multiplier)
        except (TypeError, ValueError):
            print(f"[SIM] Invalid speed {multiplier!r}, keeping {self._speed}x")
            return self._speed
        if value != value:  # NaN
            return self._speed
        with self._lock:
            self._speed = _clamp(value, self.min_speed, self.max_speed)
        return self._speed

    def toggle_faults(self, enabled):
        with self._lock:
            self._faults_enabled = bool(enabled)
        print(f"[SIM] Fault injection {'ON' if self._faults_enabled else 'OFF'}")

    def set_fault_rate(self, probability):
        """Clamp to [0, 1]; applies from the next produced item."""
        try:
            value = float(probability)
        except (TypeError, ValueError):
            print(f"[SIM] Invalid fault rate {probability!r}, keeping {self._fault_rate}")
            return self._fault_rate
        if value != value:
            return self._fault_rate
        with self._lock:
            self._fault_rate = _clamp(value, 0.0, 1.0)
        return self._fault_rate

    def production_interval(self):
        return self.base_interval / self._speed

    def settle_delay(self):
        return self.settle_time / self._speed

    # ========== ITEM GENERATION ==========

    def make_item(self):
        category = self._rng.choice(list(CATALOGUE))
        name = self._rng.choice(CATALOGUE[category])
        return WasteItem.create(name, category)

    def route(self, item):
        """Return (sorted_to, fault_injected) for an item."""
        with self._lock:
            faulty = self._faults_enabled and self._rng.random() < self._fault_rate
        if not faulty:
            return item.category, False
        wrong_bins = [b for b in BINS if b != item.category]
        return self._rng.choice(wrong_bins), True

    # ========== TICK LOOP ==========

    def _on_start(self):
        print(f"[SIM] Line started ({self._speed}x)")
        self._schedule(0.0, self._produce)

    def _on_stop(self):
        print("[SIM] Line stopped")

    def _produce(self):
        item = self.make_item()
        sorted_to, fault = self.route(item)
        with self._lock:
            self._current_item = item

        if self.settle_time <= 0:
            self._finish(item, sorted_to, fault)
            return

        self.callback(item, sorted_to, None)
        self._schedule(self.settle_delay(), self._finish, item, sorted_to, fault)

    def _finish(self, item, sorted_to, fault):
        record = ProcessedRecord.from_item(
            item, sorted_to, fault, self._clock(), device=self.device_id
        )
        with self._lock:
            if self._current_item is item:
                self._current_item = None
            # stop() may have landed after the timer fired
            if not self._step_is_current_locked():
                return
        self.callback(item, sorted_to, record)
        self._schedule(self.production_interval(), self._produce)
