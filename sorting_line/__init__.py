"""Simulated waste sorting line with online (MQTT) and offline (local store) recording."""

__version__ = "0.1.0"
