from sorting_line.storage.local_store import LocalStore
from sorting_line.storage.offline_storage import OfflineStorage, DEFAULT_KEY

__all__ = [
    'LocalStore',
    'OfflineStorage',
    'DEFAULT_KEY',
]
