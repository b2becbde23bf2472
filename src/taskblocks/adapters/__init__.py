"""Adapters - I/O implementations of ports."""

from .file_settings import FileSettingsStore
from .http_settings import HttpSettingsStore

__all__ = [
    "FileSettingsStore",
    "HttpSettingsStore",
]
