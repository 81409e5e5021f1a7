"""Configuration for the tracker service.

Loads from YAML config file with environment variable overrides.
Pattern: TRACKER__{SECTION}__{KEY} overrides nested YAML keys.
Example: TRACKER__STORE__BACKEND=sql
"""

import logging
import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel

DEFAULT_CONFIG_PATH = "config/tracker.yml"
DEFAULT_DB_URL = "sqlite+aiosqlite:///data/tracker.db"


class StoreConfig(BaseModel):
    backend: Literal["memory", "json", "sql"] = "memory"
    json_path: str = "data/tracker.json"
    database_url: str = DEFAULT_DB_URL
    echo: bool = False  # log SQL statements


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class TrackerConfig(BaseModel):
    store: StoreConfig = StoreConfig()
    logging: LoggingConfig = LoggingConfig()


def _apply_env_overrides(config_dict: dict, prefix: str = "TRACKER") -> dict:
    """Apply environment variable overrides to config dict.

    Pattern: TRACKER__SECTION__KEY=value maps to config[section][key] = value
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}__"):
            continue
        parts = key[len(prefix) + 2 :].lower().split("__")
        target = config_dict
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        # Type coercion for common cases
        if value.lower() in ("true", "false"):
            value = value.lower() == "true"
        elif value.isdigit():
            value = int(value)
        target[parts[-1]] = value
    return config_dict


def load_config(config_path: Optional[str] = None) -> TrackerConfig:
    """Load configuration from YAML file with env overrides.

    Priority: env vars > YAML file > defaults
    """
    config_dict = {}

    # 1. Load YAML if exists
    if config_path is None:
        config_path = os.getenv("TRACKER_CONFIG", DEFAULT_CONFIG_PATH)
    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            config_dict = yaml.safe_load(f) or {}

    # 2. Common shortcuts: DATABASE_URL and LOG_LEVEL
    if os.getenv("DATABASE_URL"):
        url = os.environ["DATABASE_URL"]
        # Heroku/Cloud SQL pattern: postgres:// -> postgresql+asyncpg://
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+asyncpg://", 1)
        config_dict.setdefault("store", {})["database_url"] = url
    if os.getenv("LOG_LEVEL"):
        config_dict.setdefault("logging", {})["level"] = os.environ["LOG_LEVEL"]

    # 3. Apply env overrides
    config_dict = _apply_env_overrides(config_dict)

    return TrackerConfig(**config_dict)


def configure_logging(config: LoggingConfig) -> None:
    logging.basicConfig(level=config.level.upper(), format=config.format)


# Singleton for the service
_config: Optional[TrackerConfig] = None


def get_config() -> TrackerConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(config_path: Optional[str] = None) -> TrackerConfig:
    global _config
    _config = load_config(config_path)
    return _config
