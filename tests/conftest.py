import os
import random
import sys

import pytest

# Ensure project root is on path
ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from sorting_line.models import ProcessedRecord, WasteItem
from sorting_line.simulators import SortingSimulator
from sorting_line.ui.base import BaseUI


class FakeTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args, **self.kwargs)


class TimerQueue:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function, args=None, kwargs=None):
        timer = FakeTimer(interval, function, args, kwargs)
        self.timers.append(timer)
        return timer

    @property
    def last(self):
        return self.timers[-1]

    def fire_last(self):
        self.last.fire()


class FakeUI(BaseUI):
    def __init__(self, confirm_answer=True):
        super().__init__()
        self.confirm_answer = confirm_answer
        self.statuses = []
        self.analytics = []
        self.animations = []
        self.confirm_calls = []
        self.cleared_animation = 0

    def update_status(self, status):
        self.statuses.append(status)

    def update_analytics(self, records):
        self.analytics.append(list(records))

    def update_sorting_animation(self, item, destination):
        self.animations.append((item, destination))

    def clear_sorting_animation(self):
        self.cleared_animation += 1

    def confirm(self, title, message):
        self.confirm_calls.append((title, message))
        return self.confirm_answer


class FakeSink:
    def __init__(self, online=False):
        self.online = online
        self.sent = []
        self.on_record = None
        self.closed = False

    def init_remote(self, on_record=None):
        self.on_record = on_record
        return self.online

    def send_record(self, record):
        self.sent.append(record)

    def close(self):
        self.closed = True


class FakeStorage:
    def __init__(self, initial=None, fail=False):
        self.initial = list(initial or [])
        self.fail = fail
        self.writes = []

    def load(self):
        return list(self.initial)

    def write(self, records):
        if self.fail:
            return False
        self.writes.append(list(records))
        return True


def make_record(timestamp=1_000, category='PLASTIC', sorted_to=None, fault=False):
    item = WasteItem.create('Plastic Bottle', category)
    return ProcessedRecord.from_item(item, sorted_to or category, fault, timestamp, device='TEST')


@pytest.fixture
def timers():
    return TimerQueue()


@pytest.fixture
def make_simulator(timers):
    def factory(callback, **settings):
        cfg = {'base_interval': 2.0, 'settle_time': 1.0}
        cfg.update(settings)
        return SortingSimulator(
            callback, cfg, device_id='TEST',
            rng=random.Random(42), clock=lambda: 50_000, timer_factory=timers,
        )
    return factory
