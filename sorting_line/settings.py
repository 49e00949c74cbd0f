"""Settings loader - reads the JSON settings file shipped with the package"""

import json
import os

SETTINGS_ENV = 'SORTING_LINE_SETTINGS'


def load_settings(filePath=None):
    """
    Load settings from a JSON file.

    The path comes from the argument, then the SORTING_LINE_SETTINGS
    environment variable, then the bundled settings.json. Relative paths are
    resolved against the package directory.
    """
    if filePath is None:
        filePath = os.environ.get(SETTINGS_ENV, 'settings.json')
    if not os.path.isabs(filePath):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        filePath = os.path.join(base_dir, filePath)
    with open(filePath, 'r', encoding='utf-8') as f:
        settings = json.load(f)
    return settings


def resolve_path(path):
    """Resolve a data file path from settings relative to the working directory."""
    return os.path.abspath(os.path.expanduser(path))
