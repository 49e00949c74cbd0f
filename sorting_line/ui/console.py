"""Console front-end - command loop in the style of the device CLIs"""

from sorting_line.analytics import summarize
from sorting_line.ui.base import BaseUI

HELP = """
==================================================
COMMANDS
==================================================
  s - Start line       x - Stop line
  c - Clear local data p - Print analytics
  h - Help             q - Quit

  SETTINGS (only while stopped):
  f          - Toggle fault injection
  v <x>      - Speed multiplier   (e.g. v 2)
  r <p>      - Fault rate 0..1    (e.g. r 0.25)

  ANALYTICS:
  t all      - Show all records
  t <ms>     - Only the last <ms> milliseconds (e.g. t 60000)
=================================================="""

# command -> control that must be enabled for it to run
COMMAND_CONTROLS = {
    's': 'start',
    'x': 'stop',
    'c': 'clear',
    'f': 'fault_toggle',
    'v': 'speed',
    'r': 'fault_rate',
}


class ConsoleUI(BaseUI):
    """
    Text UI. Commands are routed to the registered handlers; disabled or
    hidden controls refuse their command the way a greyed-out button would.
    """

    def __init__(self, input_fn=input, output=print, verbose_belt=True):
        super().__init__()
        self._input = input_fn
        self._out = output
        self.verbose_belt = verbose_belt
        self.status = None
        self.last_summary = None
        self.time_filter = 'all'

    # ========== RENDERING ==========

    def update_status(self, status):
        self.status = status
        self._out(f"[STATUS] {status.value}")

    def update_analytics(self, records):
        self.last_summary = summarize(records)

    def update_sorting_animation(self, item, destination):
        if not self.verbose_belt:
            return
        marker = "" if destination == item.category else "  ✗ MISROUTED"
        self._out(f"[BELT] {item.name} ({item.category}) -> {destination}{marker}")

    def clear_sorting_animation(self):
        self._out("[BELT] Belt cleared")

    def show_analytics(self):
        s = self.last_summary
        if s is None:
            self._out("No analytics yet.")
            return
        accuracy = "-" if s['accuracy'] is None else f"{s['accuracy'] * 100:.1f}%"
        self._out("\n" + "=" * 50)
        self._out(f"  ANALYTICS  (filter: {self.time_filter})")
        self._out("=" * 50)
        self._out(f"  Items:     {s['total']}")
        self._out(f"  Correct:   {s['correct']}   Misrouted: {s['misrouted']}")
        self._out(f"  Faults:    {s['faults']}   Accuracy: {accuracy}")
        for bin_name, count in s['by_bin'].items():
            self._out(f"  {bin_name:<8} {count}")
        self._out("=" * 50)

    # ========== INPUT ==========

    def confirm(self, title, message):
        self._out(f"\n{title}\n{message}")
        answer = self._input("Confirm? [y/N] ").strip().lower()
        return answer in ('y', 'yes')

    def handle_command(self, line):
        """Dispatch one command line. Returns False for unknown commands."""
        parts = line.strip().split(maxsplit=1)
        if not parts:
            return True
        cmd = parts[0].lower()
        arg = parts[1] if len(parts) > 1 else None
        h = self.handlers

        control = COMMAND_CONTROLS.get(cmd)
        if control is not None and not self.is_enabled(control):
            self._out(f"'{cmd}' is not available right now.")
            return True

        if cmd == 's':
            h.on_start()
        elif cmd == 'x':
            h.on_stop()
        elif cmd == 'c':
            h.on_clear()
        elif cmd == 'f':
            h.on_fault_toggle(not self.control('fault_toggle').checked)
            self._out(f"Fault injection: {'ON' if self.control('fault_toggle').checked else 'OFF'}")
        elif cmd == 'v':
            if arg is None:
                self._out("Usage: v <multiplier>")
                return True
            h.on_speed_change(arg)
            self._out(f"Speed: {self.control('speed').value}x")
        elif cmd == 'r':
            if arg is None:
                self._out("Usage: r <0..1>")
                return True
            h.on_fault_rate_change(arg)
            self._out(f"Fault rate: {self.control('fault_rate').value * 100:.0f}%")
        elif cmd == 't':
            self.time_filter = arg or 'all'
            h.on_filter_change(self.time_filter)
            self.show_analytics()
        elif cmd == 'p':
            self.show_analytics()
        elif cmd == 'h':
            self._out(HELP)
        else:
            return False
        return True

    def run(self):
        """Blocking command loop; returns when the user quits."""
        self._out(HELP)
        while True:
            try:
                line = self._input("\n> ")
            except (KeyboardInterrupt, EOFError):
                self._out("\n\nExiting...")
                return
            if line.strip().lower() == 'q':
                self._out("\nExiting...")
                return
            try:
                if not self.handle_command(line):
                    self._out("Unknown command. Press 'h' for help.")
            except Exception as e:
                self._out(f"[ERROR] {e}")
