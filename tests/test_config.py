"""Tests for configuration loading."""

import pytest

from taskblocks.adapters.file_settings import FileSettingsStore
from taskblocks.adapters.http_settings import HttpSettingsStore
from taskblocks.config import (
    DATA_DIR,
    Config,
    build_settings_store,
    detect_locale,
    load_config,
    resolve_locale,
)


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.conf")
        assert config == Config()
        assert config.data_path == DATA_DIR / "tasks.json"

    def test_parses_values(self, tmp_path):
        conf = tmp_path / "taskblocks.conf"
        conf.write_text(
            "# taskblocks settings\n"
            "STORE_BACKEND = http\n"
            'HTTP_URL = "https://kv.example.com/v1" # remote\n'
            "HTTP_KEY = personal # comment\n"
            "HTTP_TOKEN = 'abc#123'\n"
            "LOCALE = fr_FR\n"
            "not a setting\n"
            "UNKNOWN = ignored\n"
        )
        config = load_config(conf)

        assert config.store_backend == "http"
        assert config.http_url == "https://kv.example.com/v1"
        assert config.http_key == "personal"
        assert config.http_token == "abc#123"
        assert config.locale == "fr_FR"

    def test_unknown_backend_falls_back_to_file(self, tmp_path):
        conf = tmp_path / "taskblocks.conf"
        conf.write_text("STORE_BACKEND = redis\n")
        assert load_config(conf).store_backend == "file"

    def test_data_file_expands_user(self, tmp_path):
        conf = tmp_path / "taskblocks.conf"
        conf.write_text("DATA_FILE = ~/tasks/tasks.json\n")
        assert "~" not in str(load_config(conf).data_path)


class TestBuildSettingsStore:
    def test_file_backend(self, tmp_path):
        store = build_settings_store(Config(data_file=str(tmp_path / "t.json")))
        assert isinstance(store, FileSettingsStore)
        assert store.path == tmp_path / "t.json"

    def test_http_backend(self):
        store = build_settings_store(Config(store_backend="http", http_url="https://kv.example.com", http_key="k"))
        assert isinstance(store, HttpSettingsStore)
        assert store.url == "https://kv.example.com/k"

    def test_http_backend_requires_url(self):
        with pytest.raises(ValueError, match="HTTP_URL"):
            build_settings_store(Config(store_backend="http"))


class TestLocale:
    def test_config_wins(self, monkeypatch):
        monkeypatch.setenv("LANG", "de_DE.UTF-8")
        assert resolve_locale(Config(locale="fr_CA")) == "fr_CA"

    def test_detect_from_env(self, monkeypatch):
        monkeypatch.delenv("LC_ALL", raising=False)
        monkeypatch.delenv("LC_MESSAGES", raising=False)
        monkeypatch.setenv("LANG", "fr_FR.UTF-8")
        assert detect_locale() == "fr_FR"

    def test_skips_c_locale(self, monkeypatch):
        monkeypatch.setenv("LC_ALL", "C")
        monkeypatch.delenv("LC_MESSAGES", raising=False)
        monkeypatch.setenv("LANG", "en_GB.UTF-8")
        assert detect_locale() == "en_GB"
