"""Tests for configuration loading."""

from pathlib import Path

from mama_gateway.config import (
    DEFAULT_CHECKPOINT_THRESHOLD_MS,
    PluginConfig,
    default_db_path,
    get_config,
    get_data_dir,
)


class TestGetConfig:
    def test_defaults(self):
        config = get_config()
        assert config.db_path is None
        assert config.backend is None
        assert config.checkpoint_threshold_ms == DEFAULT_CHECKPOINT_THRESHOLD_MS == 300000
        assert config.log_level == "INFO"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("MAMA_BACKEND", "pkg.mod:factory")
        monkeypatch.setenv("MAMA_CHECKPOINT_THRESHOLD_MS", "1200000")
        monkeypatch.setenv("MAMA_LOG_LEVEL", "DEBUG")
        config = get_config()
        assert config.backend == "pkg.mod:factory"
        assert config.checkpoint_threshold_ms == 1200000
        assert config.log_level == "DEBUG"

    def test_bad_threshold_ignored(self, monkeypatch):
        monkeypatch.setenv("MAMA_CHECKPOINT_THRESHOLD_MS", "five minutes")
        assert get_config().checkpoint_threshold_ms == DEFAULT_CHECKPOINT_THRESHOLD_MS


class TestFromMapping:
    def test_camel_case_db_path(self):
        assert PluginConfig.from_mapping({"dbPath": "/a.db"}).db_path == "/a.db"

    def test_snake_case_db_path(self):
        assert PluginConfig.from_mapping({"db_path": "/b.db"}).db_path == "/b.db"

    def test_non_string_ignored(self):
        assert PluginConfig.from_mapping({"dbPath": 42}).db_path is None

    def test_backend_overrides_environment(self, monkeypatch):
        monkeypatch.setenv("MAMA_BACKEND", "env:factory")
        assert PluginConfig.from_mapping({"backend": "cfg:factory"}).backend == "cfg:factory"

    def test_none(self):
        assert PluginConfig.from_mapping(None) == get_config()


class TestPaths:
    def test_default_db_path(self):
        assert default_db_path() == str(Path.home() / ".claude" / "mama-memory.db")

    def test_data_dir_from_env(self, isolated_env):
        assert get_data_dir() == isolated_env / "data"

    def test_data_dir_default(self, monkeypatch):
        monkeypatch.delenv("MAMA_DATA_DIR")
        assert get_data_dir() == Path.home() / ".mama"
