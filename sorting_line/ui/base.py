"""UI collaborator interface used by the application controller"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

CONTROL_NAMES = ('start', 'stop', 'clear', 'fault_toggle', 'speed', 'fault_rate')


class Status(Enum):
    ONLINE = 'ONLINE'
    OFFLINE = 'OFFLINE'
    RUNNING = 'RUNNING'
    STOPPED = 'STOPPED'


@dataclass
class Control:
    """Handle for one interactive control; the controller flips these directly."""
    name: str
    disabled: bool = True
    hidden: bool = False
    checked: bool = False
    value: Any = None


@dataclass
class UIHandlers:
    """One callback per control, registered through init_ui()."""
    on_start: Callable[[], None]
    on_stop: Callable[[], None]
    on_clear: Callable[[], Any]
    on_fault_toggle: Callable[[bool], None]
    on_speed_change: Callable[[Any], None]
    on_fault_rate_change: Callable[[Any], None]
    on_filter_change: Callable[[str], None]


class BaseUI:
    """
    Base class for UI front-ends.

    Subclasses render status, analytics and the item animation; the
    controller owns all decisions and only talks to this interface.
    """

    def __init__(self):
        self.controls = {name: Control(name) for name in CONTROL_NAMES}
        self.handlers: Optional[UIHandlers] = None

    def control(self, name):
        return self.controls[name]

    def is_enabled(self, name):
        c = self.controls[name]
        return not c.disabled and not c.hidden

    def init_ui(self, handlers):
        self.handlers = handlers

    def update_analytics(self, records):
        raise NotImplementedError

    def update_status(self, status):
        raise NotImplementedError

    def update_sorting_animation(self, item, destination):
        raise NotImplementedError

    def clear_sorting_animation(self):
        pass

    def confirm(self, title, message):
        """Ask the user to confirm a destructive action. Returns a bool."""
        raise NotImplementedError
