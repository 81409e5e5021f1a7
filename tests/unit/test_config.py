"""Tests for config loading."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from tracker import config as config_mod
from tracker.config import TrackerConfig, load_config, reload_config


class TestLoadConfig:

    def test_defaults_without_file(self, tmp_path):
        cfg = load_config(str(tmp_path / "nope.yml"))
        assert cfg == TrackerConfig()
        assert cfg.store.backend == "memory"
        assert cfg.store.database_url.startswith("sqlite+aiosqlite://")

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "tracker.yml"
        path.write_text(
            "store:\n"
            "  backend: json\n"
            "  json_path: /tmp/t.json\n"
            "logging:\n"
            "  level: DEBUG\n"
        )
        cfg = load_config(str(path))
        assert cfg.store.backend == "json"
        assert cfg.store.json_path == "/tmp/t.json"
        assert cfg.logging.level == "DEBUG"

    def test_empty_yaml_file(self, tmp_path):
        path = tmp_path / "tracker.yml"
        path.write_text("")
        assert load_config(str(path)) == TrackerConfig()

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "tracker.yml"
        path.write_text("store:\n  backend: json\n")
        monkeypatch.setenv("TRACKER__STORE__BACKEND", "sql")
        monkeypatch.setenv("TRACKER__STORE__ECHO", "true")
        cfg = load_config(str(path))
        assert cfg.store.backend == "sql"
        assert cfg.store.echo is True

    def test_database_url_shortcut(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgres://u:p@db/tracker")
        cfg = load_config(str(tmp_path / "nope.yml"))
        assert cfg.store.database_url == "postgresql+asyncpg://u:p@db/tracker"

    def test_log_level_shortcut(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        assert load_config(str(tmp_path / "nope.yml")).logging.level == "WARNING"

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yml"
        path.write_text("store:\n  backend: sql\n")
        monkeypatch.setenv("TRACKER_CONFIG", str(path))
        assert load_config().store.backend == "sql"

    def test_unknown_backend_rejected(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TRACKER__STORE__BACKEND", "mongo")
        with pytest.raises(PydanticValidationError):
            load_config(str(tmp_path / "nope.yml"))


def test_reload_replaces_singleton(tmp_path, monkeypatch):
    monkeypatch.setattr(config_mod, "_config", None)
    path = tmp_path / "tracker.yml"
    path.write_text("store:\n  backend: json\n")
    assert reload_config(str(path)).store.backend == "json"
    assert config_mod.get_config().store.backend == "json"
