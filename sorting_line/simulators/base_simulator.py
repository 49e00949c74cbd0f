"""Base simulator - cancellable timer chain shared by line simulators"""

import threading


class BaseSimulator:
    """
    Base class for timer-driven simulators.

    Work is scheduled as a chain of one-shot timers: each step schedules the
    next one only after it finished, so steps never overlap. stop() cancels
    the pending timer and bumps a generation counter, which invalidates any
    timer that was already due but had not yet acquired the lock.

    Parameters:
        timer_factory (callable) - Timer(interval, function, args) constructor,
                                   threading.Timer by default
    """

    def __init__(self, timer_factory=None):
        self._timer_factory = timer_factory or threading.Timer
        self._lock       = threading.RLock()
        self._running    = False
        self._generation = 0
        self._step_generation = None
        self._timer      = None

    # ========== LIFECYCLE ==========

    def is_running(self):
        with self._lock:
            return self._running

    def start(self):
        """Idle -> Running. Returns False if already running."""
        with self._lock:
            if self._running:
                return False
            self._running = True
            self._generation += 1
        self._on_start()
        return True

    def stop(self):
        """Running -> Idle. Returns False if already idle."""
        with self._lock:
            if not self._running:
                return False
            self._running = False
            self._generation += 1
            self._cancel_timer_locked()
        self._on_stop()
        return True

    def _on_start(self):
        raise NotImplementedError("Subclasses must implement _on_start()")

    def _on_stop(self):
        pass

    # ========== TIMERS ==========

    def _schedule(self, delay, step, *args):
        """Run step(*args) after delay seconds unless stopped in between."""
        with self._lock:
            if not self._running:
                return
            generation = self._generation
            self._timer = self._timer_factory(delay, self._fire, args=(generation, step, args))
            self._timer.daemon = True
            self._timer.start()

    def _fire(self, generation, step, args):
        with self._lock:
            if not self._running or generation != self._generation:
                return
            self._timer = None
            self._step_generation = generation
        step(*args)

    def _step_is_current_locked(self):
        """True while the step being run still belongs to the live run (hold _lock)."""
        return self._running and self._step_generation == self._generation

    def _cancel_timer_locked(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
