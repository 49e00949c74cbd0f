"""Application controller - session lifecycle and online/offline routing"""

import atexit
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import List, Optional

from sorting_line.analytics import FILTER_ALL, filter_records
from sorting_line.models import ProcessedRecord, now_ms
from sorting_line.simulators import SortingSimulator
from sorting_line.ui.base import Status, UIHandlers

REMOTE_HISTORY = 5000

LOCKED_WHILE_RUNNING = ('start', 'clear', 'fault_toggle', 'speed', 'fault_rate')


@dataclass
class AppState:
    """Session state owned by the controller. Only all_data is ever persisted."""
    is_online: bool = False
    is_running: bool = False
    has_unsaved_changes: bool = False
    time_filter: str = FILTER_ALL
    all_data: List[ProcessedRecord] = field(default_factory=list)
    remote_data: deque = field(default_factory=lambda: deque(maxlen=REMOTE_HISTORY))
    simulation: Optional[SortingSimulator] = None


class AppController:
    """
    Orchestrates the sorting line.

    Parameters:
        settings          (dict)          - full settings.json
        ui                (BaseUI)        - UI collaborator
        remote            (RemoteSink)    - MQTT sink, decides online/offline mode
        storage           (OfflineStorage)- local persistence for offline mode
        clock             (callable)      - epoch milliseconds
        simulator_factory (callable)      - builds the engine from the update callback
        register_exit     (callable)      - exit-hook registration (atexit.register)
    """

    def __init__(self, settings, ui, remote, storage, clock=None,
                 simulator_factory=None, register_exit=atexit.register):
        self.settings = settings
        self.ui = ui
        self.remote = remote
        self.storage = storage
        self.state = AppState()
        history = int(settings.get('mqtt', {}).get('history', REMOTE_HISTORY))
        self.state.remote_data = deque(maxlen=history)
        self._clock = clock or now_ms
        self._simulator_factory = simulator_factory or self._make_simulator
        self._register_exit = register_exit
        self._lock = threading.RLock()

    def _make_simulator(self, callback):
        return SortingSimulator(
            callback,
            self.settings.get('simulation', {}),
            device_id=self.settings.get('device', {}).get('id', 'UNKNOWN'),
            clock=self._clock,
        )

    # ========== STARTUP ==========

    def initialize(self):
        """Load offline data, wire the UI, decide the mode, build the engine."""
        print("[APP] Application initializing...")
        self.state.all_data = self.storage.load()

        self.ui.init_ui(UIHandlers(
            on_start=self.start_app,
            on_stop=self.stop_app,
            on_clear=self.clear_data,
            on_fault_toggle=self.on_fault_toggle,
            on_speed_change=self.on_speed_change,
            on_fault_rate_change=self.on_fault_rate_change,
            on_filter_change=self.on_filter_change,
        ))

        self.state.is_online = bool(self.remote.init_remote(on_record=self._on_remote_record))
        self.ui.update_status(Status.ONLINE if self.state.is_online else Status.OFFLINE)
        self.ui.control('clear').hidden = self.state.is_online

        if not self.state.is_online:
            self.trigger_analytics_update()

        self._register_exit(self.save_offline_data)

        self.state.simulation = self._simulator_factory(self.handle_simulation_update)
        sim = self.state.simulation
        self.ui.control('speed').value = sim.speed
        self.ui.control('fault_toggle').checked = sim.faults_enabled
        self.ui.control('fault_rate').value = sim.fault_rate
        self._enable_idle_controls()
        self.ui.control('stop').disabled = True

        print(f"[APP] Running in {'ONLINE' if self.state.is_online else 'OFFLINE'} mode")

    # ========== LIFECYCLE ==========

    def start_app(self):
        with self._lock:
            if self.state.is_running:
                return
            self.state.is_running = True
            self.state.simulation.start()
            self.ui.update_status(Status.RUNNING)
            for name in LOCKED_WHILE_RUNNING:
                self.ui.control(name).disabled = True
            self.ui.control('stop').disabled = False

    def stop_app(self):
        with self._lock:
            if not self.state.is_running:
                return
            self.state.is_running = False
            self.state.simulation.stop()
            self.ui.update_status(Status.ONLINE if self.state.is_online else Status.STOPPED)

            self.save_offline_data()

            self._enable_idle_controls()
            self.ui.control('stop').disabled = True
            self.ui.clear_sorting_animation()

    def clear_data(self):
        """Wipe offline data after confirmation. Returns True if data was cleared."""
        with self._lock:
            if self.state.is_online or self.state.is_running:
                return False

        confirmed = self.ui.confirm(
            "Clear Local Data",
            "Are you sure you want to clear all locally saved data? "
            "This action cannot be undone.",
        )
        if not confirmed:
            return False

        with self._lock:
            # state may have changed while the prompt was open
            if self.state.is_online or self.state.is_running:
                return False
            self.state.all_data = []
            self.state.has_unsaved_changes = True
            self.save_offline_data()
            self.state.simulation.reset()
            self.trigger_analytics_update()
        print("[APP] Offline data cleared")
        return True

    def cleanup(self):
        """Stop the line, flush offline data and close the broker connection."""
        self.stop_app()
        self.save_offline_data()
        self.remote.close()

    def _enable_idle_controls(self):
        for name in LOCKED_WHILE_RUNNING:
            self.ui.control(name).disabled = False
        self.ui.control('fault_rate').disabled = not self.ui.control('fault_toggle').checked
        self.ui.control('clear').hidden = self.state.is_online

    # ========== PERSISTENCE ==========

    def save_offline_data(self):
        """Write all_data to the local store if offline and dirty. Returns True if written."""
        with self._lock:
            if self.state.is_online or not self.state.has_unsaved_changes:
                return False
            if self.storage.write(self.state.all_data):
                self.state.has_unsaved_changes = False
                return True
            return False

    # ========== CALLBACKS ==========

    def handle_simulation_update(self, item, sorted_to, record):
        with self._lock:
            # a tick racing stop_app() must not land after the stop save
            if not self.state.is_running:
                return
            self.ui.update_sorting_animation(item, sorted_to)
            if record is None:
                return
            if self.state.is_online:
                self.remote.send_record(record)
            else:
                self.state.all_data.append(record)
                self.state.has_unsaved_changes = True
                self.trigger_analytics_update()

    def _on_remote_record(self, record):
        with self._lock:
            self.state.remote_data.append(record)
            self.trigger_analytics_update()

    def on_fault_toggle(self, enabled):
        with self._lock:
            enabled = bool(enabled)
            self.state.simulation.toggle_faults(enabled)
            self.ui.control('fault_toggle').checked = enabled
            self.ui.control('fault_rate').disabled = not enabled

    def on_speed_change(self, value):
        with self._lock:
            speed = self.state.simulation.set_speed(value)
            self.ui.control('speed').value = speed

    def on_fault_rate_change(self, value):
        with self._lock:
            rate = self.state.simulation.set_fault_rate(value)
            self.ui.control('fault_rate').value = rate

    def on_filter_change(self, value):
        with self._lock:
            self.state.time_filter = str(value)
            self.trigger_analytics_update()

    # ========== ANALYTICS ==========

    def analytics_source(self):
        return self.state.remote_data if self.state.is_online else self.state.all_data

    def trigger_analytics_update(self):
        with self._lock:
            filtered = filter_records(self.analytics_source(), self.state.time_filter, self._clock())
        self.ui.update_analytics(filtered)
