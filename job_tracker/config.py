"""YAML config loading and validation."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from job_tracker.models import normalize_database_url
from job_tracker.models.base import DEFAULT_DATABASE_URL
from job_tracker.storage.slots import DEFAULT_KEY_PREFIX

STORAGE_BACKENDS = ("sql", "memory")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class StorageConfig:
    backend: str = "sql"
    database_url: str = DEFAULT_DATABASE_URL
    key_prefix: str = DEFAULT_KEY_PREFIX


@dataclass
class ExportConfig:
    directory: str = "exports"


@dataclass
class DashboardConfig:
    recent_limit: int = 3


@dataclass
class AppConfig:
    storage: StorageConfig = field(default_factory=StorageConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    log_dir: str = "logs"
    log_level: str = "INFO"

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.INFO)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    """Load configuration from a YAML file."""
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Copy config.example.yaml to config.yaml and adjust it."
        )

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    config = AppConfig()

    # Storage (env var takes precedence for the database URL)
    storage_raw = raw.get("storage", {}) or {}
    config.storage = StorageConfig(
        backend=storage_raw.get("backend", "sql"),
        database_url=normalize_database_url(
            os.environ.get(
                "JOB_TRACKER_DATABASE_URL",
                storage_raw.get("database_url", DEFAULT_DATABASE_URL),
            )
        ),
        key_prefix=storage_raw.get("key_prefix", DEFAULT_KEY_PREFIX),
    )

    export_raw = raw.get("export", {}) or {}
    config.export = ExportConfig(directory=export_raw.get("directory", "exports"))

    dashboard_raw = raw.get("dashboard", {}) or {}
    config.dashboard = DashboardConfig(recent_limit=_as_int(dashboard_raw.get("recent_limit", 3), 3))

    config.log_dir = raw.get("log_dir", "logs")
    config.log_level = str(raw.get("log_level", "INFO"))

    return config


def _as_int(value, default: int) -> int:
    """Coerce a YAML scalar such as "3" to int; unusable values give the default."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def validate_config(config: AppConfig) -> list[str]:
    """Return list of validation warnings (empty = OK)."""
    warnings = []

    if config.storage.backend not in STORAGE_BACKENDS:
        warnings.append(
            f"Unknown storage backend '{config.storage.backend}' (expected one of: {', '.join(STORAGE_BACKENDS)})"
        )

    if config.storage.backend == "memory":
        warnings.append("Memory storage backend selected - data will not survive this session")

    if not config.storage.key_prefix:
        warnings.append("Empty storage key prefix - slots will be named after the bare collections")

    if not isinstance(config.dashboard.recent_limit, int) or config.dashboard.recent_limit <= 0:
        warnings.append("dashboard.recent_limit should be a positive integer")

    if config.log_level.upper() not in LOG_LEVELS:
        warnings.append(f"Unknown log level '{config.log_level}' - falling back to INFO")

    return warnings
