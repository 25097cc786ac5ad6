"""Tests for configuration loading."""

import os
import tempfile

import pytest
import yaml

from job_tracker.config import AppConfig, load_config, validate_config


@pytest.fixture
def config_file():
    """Create a temporary config file."""
    config_data = {
        "storage": {
            "backend": "sql",
            "database_url": "sqlite:///tmp/tracker.db",
            "key_prefix": "mine-",
        },
        "export": {"directory": "backups"},
        "dashboard": {"recent_limit": 5},
        "log_level": "DEBUG",
    }

    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(config_data, f)
        path = f.name

    yield path
    os.unlink(path)


class TestLoadConfig:
    def test_loads_valid_config(self, config_file, monkeypatch):
        monkeypatch.delenv("JOB_TRACKER_DATABASE_URL", raising=False)
        config = load_config(config_file)
        assert config.storage.database_url == "sqlite:///tmp/tracker.db"
        assert config.storage.key_prefix == "mine-"
        assert config.export.directory == "backups"
        assert config.dashboard.recent_limit == 5
        assert config.log_level == "DEBUG"

    def test_missing_file_raises(self):
        with pytest.raises(FileNotFoundError):
            load_config("nonexistent.yaml")

    def test_defaults_applied(self, monkeypatch):
        monkeypatch.delenv("JOB_TRACKER_DATABASE_URL", raising=False)
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write("")
            path = f.name

        try:
            config = load_config(path)
            assert config.storage.backend == "sql"
            assert config.storage.database_url == "sqlite:///data/job_tracker.db"
            assert config.storage.key_prefix == "jobTracker-"
            assert config.dashboard.recent_limit == 3
        finally:
            os.unlink(path)

    def test_recent_limit_string_coerced(self, monkeypatch):
        monkeypatch.delenv("JOB_TRACKER_DATABASE_URL", raising=False)
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            yaml.dump({"dashboard": {"recent_limit": "4"}}, f)
            path = f.name
        try:
            assert load_config(path).dashboard.recent_limit == 4
        finally:
            os.unlink(path)

    def test_recent_limit_non_numeric_uses_default(self, monkeypatch):
        monkeypatch.delenv("JOB_TRACKER_DATABASE_URL", raising=False)
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            yaml.dump({"dashboard": {"recent_limit": "lots"}}, f)
            path = f.name
        try:
            config = load_config(path)
        finally:
            os.unlink(path)
        assert config.dashboard.recent_limit == 3
        assert validate_config(config) == []

    def test_env_overrides_database_url(self, config_file, monkeypatch):
        monkeypatch.setenv("JOB_TRACKER_DATABASE_URL", "postgres://user@host/db")
        config = load_config(config_file)
        assert config.storage.database_url == "postgresql://user@host/db"


class TestValidateConfig:
    def test_default_config_is_clean(self):
        assert validate_config(AppConfig()) == []

    def test_unknown_backend_warns(self):
        config = AppConfig()
        config.storage.backend = "redis"
        warnings = validate_config(config)
        assert any("backend" in w.lower() for w in warnings)

    def test_memory_backend_warns(self):
        config = AppConfig()
        config.storage.backend = "memory"
        assert any("not survive" in w for w in validate_config(config))

    def test_bad_recent_limit_warns(self):
        config = AppConfig()
        config.dashboard.recent_limit = 0
        assert any("recent_limit" in w for w in validate_config(config))

    def test_unknown_log_level_warns(self):
        config = AppConfig()
        config.log_level = "LOUD"
        assert any("log level" in w.lower() for w in validate_config(config))
        assert config.log_level_value == 20
