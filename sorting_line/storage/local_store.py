"""File-backed key-value store (string keys -> string values)"""

import json
import os
import tempfile
import threading


class LocalStore:
    """
    Minimal persistent key-value store kept in one JSON file.

    Values are strings, like browser localStorage. Every set/remove rewrites
    the whole file through a temp file + os.replace so a crash never leaves a
    half-written file behind.
    """

    def __init__(self, path):
        self.path = path
        self._lock = threading.Lock()

    def get_item(self, key):
        """Return the stored string or None when missing."""
        with self._lock:
            return self._read_all().get(key)

    def set_item(self, key, value):
        """Store a string value. Raises OSError on write failure."""
        if not isinstance(value, str):
            raise TypeError("LocalStore values must be strings")
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._write_all(data)

    def remove_item(self, key):
        with self._lock:
            data = self._read_all()
            if key in data:
                del data[key]
                self._write_all(data)

    # ========== FILE I/O ==========

    def _read_all(self):
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            print(f"[STORAGE] Store file unreadable, starting empty: {exc}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data):
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
