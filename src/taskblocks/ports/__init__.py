"""Ports - interfaces/protocols for external dependencies."""

from .settings_store import SettingsStore

__all__ = [
    "SettingsStore",
]
