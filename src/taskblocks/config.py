"""Configuration management for taskblocks."""

import locale
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .adapters.file_settings import FileSettingsStore
from .adapters.http_settings import HttpSettingsStore
from .ports.settings_store import SettingsStore

logger = logging.getLogger(__name__)

TASKBLOCKS_HOME = Path(os.environ.get("TASKBLOCKS_HOME", Path.home() / "taskblocks"))
CONFIG_FILE = TASKBLOCKS_HOME / "config" / "taskblocks.conf"
DATA_DIR = TASKBLOCKS_HOME / "data"

BACKENDS = ("file", "http")


@dataclass
class Config:
    """taskblocks configuration."""

    store_backend: str = "file"
    data_file: str = ""
    http_url: str = ""
    http_key: str = "taskblocks"
    http_token: str = ""
    locale: str = ""

    @property
    def data_path(self) -> Path:
        if self.data_file:
            return Path(self.data_file).expanduser()
        return DATA_DIR / "tasks.json"


def _unquote(value: str) -> str:
    """Strip surrounding quotes, or an inline comment from an unquoted value."""
    if value[:1] in ('"', "'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def load_config(config_file: Path | None = None) -> Config:
    """Load configuration from taskblocks.conf file."""
    config = Config()
    config_file = config_file or CONFIG_FILE

    if not config_file.exists():
        return config

    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "store_backend":
                backend = value.lower()
                if backend in BACKENDS:
                    config.store_backend = backend
                else:
                    logger.warning(f"Unknown STORE_BACKEND {value!r}, using file")
            case "data_file":
                config.data_file = value
            case "http_url":
                config.http_url = value
            case "http_key":
                config.http_key = value or config.http_key
            case "http_token":
                config.http_token = value
            case "locale":
                config.locale = value

    return config


def detect_locale() -> str:
    """Best-effort language tag of the host, e.g. 'fr_FR'."""
    for var in ("LC_ALL", "LC_MESSAGES", "LANG"):
        value = os.environ.get(var, "")
        if value and value not in ("C", "POSIX"):
            return value.split(".")[0]
    lang, _ = locale.getlocale()
    return lang or ""


def resolve_locale(config: Config) -> str:
    return config.locale or detect_locale()


def build_settings_store(config: Config) -> SettingsStore:
    """Pick the storage backend named in the config."""
    if config.store_backend == "http":
        if not config.http_url:
            raise ValueError("HTTP_URL must be set when STORE_BACKEND = http")
        return HttpSettingsStore(config.http_url, key=config.http_key, token=config.http_token)
    return FileSettingsStore(config.data_path)
