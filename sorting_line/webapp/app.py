"""Web dashboard for the sorting line - JSON status, analytics and controls."""

import threading
import time

from flask import Flask, jsonify, request

from sorting_line.analytics import summarize
from sorting_line.ui.base import BaseUI, Status

app = Flask(__name__)

web_ui = None


class WebUI(BaseUI):
    """
    UI collaborator backed by an in-memory snapshot that the HTTP routes
    read. Confirmation for destructive actions travels with the request
    ({"confirm": true}) instead of a modal dialog.
    """

    RECENT_LIMIT = 20

    def __init__(self):
        super().__init__()
        self._state_lock = threading.Lock()
        self._request = threading.local()
        self.status_state = {
            "status": Status.OFFLINE.value,
            "current_item": None,
            "recent": [],
            "analytics": summarize([]),
            "updated": None,
        }

    def _update(self, update):
        with self._state_lock:
            self.status_state.update(update)
            self.status_state["updated"] = time.time()

    def snapshot(self):
        with self._state_lock:
            snap = dict(self.status_state)
            snap["recent"] = list(snap["recent"])
        snap["controls"] = {
            name: {"disabled": c.disabled, "hidden": c.hidden,
                   "checked": c.checked, "value": c.value}
            for name, c in self.controls.items()
        }
        return snap

    # ========== BaseUI ==========

    def update_status(self, status):
        self._update({"status": status.value})

    def update_analytics(self, records):
        recent = [r.to_dict() for r in records[-self.RECENT_LIMIT:]]
        self._update({"analytics": summarize(records), "recent": recent})

    def update_sorting_animation(self, item, destination):
        self._update({"current_item": {
            "item_id": item.item_id,
            "name": item.name,
            "category": item.category,
            "sorted_to": destination,
        }})

    def clear_sorting_animation(self):
        self._update({"current_item": None})

    def confirm(self, title, message):
        return bool(getattr(self._request, "confirmed", False))

    def run_confirmed(self, confirmed, action):
        """Run action with the confirmation answer bound to this request thread."""
        self._request.confirmed = confirmed
        try:
            return action()
        finally:
            self._request.confirmed = False


def bind_ui(ui):
    global web_ui
    web_ui = ui
    return app


def _payload():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _guarded(control, action):
    if web_ui is None or web_ui.handlers is None:
        return jsonify({"ok": False, "error": "line not initialized"}), 503
    if control is not None and not web_ui.is_enabled(control):
        return jsonify({"ok": False, "error": f"{control} is not available"}), 409
    result = action()
    body = {"ok": True}
    if result is not None:
        body["result"] = result
    return jsonify(body)


@app.route("/api/status")
def api_status():
    if web_ui is None:
        return jsonify({"status": None}), 503
    return jsonify(web_ui.snapshot())


@app.route("/api/analytics")
def api_analytics():
    if web_ui is None:
        return jsonify({}), 503
    snap = web_ui.snapshot()
    return jsonify({"analytics": snap["analytics"], "recent": snap["recent"]})


@app.route("/api/start", methods=["POST"])
def api_start():
    return _guarded("start", lambda: web_ui.handlers.on_start())


@app.route("/api/stop", methods=["POST"])
def api_stop():
    return _guarded("stop", lambda: web_ui.handlers.on_stop())


@app.route("/api/clear", methods=["POST"])
def api_clear():
    confirmed = bool(_payload().get("confirm", False))
    return _guarded("clear", lambda: web_ui.run_confirmed(confirmed, web_ui.handlers.on_clear))


@app.route("/api/speed", methods=["POST"])
def api_speed():
    value = _payload().get("speed", 1.0)
    return _guarded("speed", lambda: web_ui.handlers.on_speed_change(value))


@app.route("/api/faults", methods=["POST"])
def api_faults():
    enabled = bool(_payload().get("enabled", False))
    return _guarded("fault_toggle", lambda: web_ui.handlers.on_fault_toggle(enabled))


@app.route("/api/fault-rate", methods=["POST"])
def api_fault_rate():
    rate = _payload().get("rate", 0.0)
    return _guarded("fault_rate", lambda: web_ui.handlers.on_fault_rate_change(rate))


@app.route("/api/filter", methods=["POST"])
def api_filter():
    value = str(_payload().get("filter", "all"))
    return _guarded(None, lambda: web_ui.handlers.on_filter_change(value))
