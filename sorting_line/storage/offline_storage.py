"""Offline record persistence on top of a key-value store"""

import json

from sorting_line.models import ProcessedRecord

DEFAULT_KEY = 'wasteSortingData_offline'


class OfflineStorage:
    """
    Loads and writes the offline record list under one fixed key.

    The dirty-flag guard lives in the controller; this class only knows how
    to read and write the blob.
    """

    def __init__(self, store, key=DEFAULT_KEY):
        self.store = store
        self.key = key

    def load(self):
        """Return the stored records, or [] when missing or corrupted. Never raises."""
        try:
            raw = self.store.get_item(self.key)
            if raw is None:
                return []
            items = json.loads(raw)
            if not isinstance(items, list):
                raise ValueError("stored blob is not a list")
            records = [ProcessedRecord.from_dict(item) for item in items]
        except Exception as exc:
            print(f"[STORAGE] Failed to load offline data, clearing it: {exc}")
            self._discard()
            return []
        print(f"[STORAGE] Loaded {len(records)} items from local storage")
        return records

    def write(self, records):
        """Write the full record list. Returns True on success."""
        try:
            payload = json.dumps([r.to_dict() for r in records])
            self.store.set_item(self.key, payload)
        except (OSError, TypeError, ValueError) as exc:
            print(f"[STORAGE] Failed to save offline data: {exc}")
            return False
        print(f"[STORAGE] Offline data saved ({len(records)} items)")
        return True

    def _discard(self):
        try:
            self.store.remove_item(self.key)
        except OSError as exc:
            print(f"[STORAGE] Could not remove corrupted entry: {exc}")
