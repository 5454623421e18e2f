"""Application configuration loaded from config.yaml + environment variables."""

from __future__ import annotations

import yaml
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml() -> dict:
    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH) as f:
            return yaml.safe_load(f) or {}
    return {}


_yaml = _load_yaml()


class StoreConfig(BaseSettings):
    timeout_seconds: float = 10.0


class SchedulingConfig(BaseSettings):
    default_pickup_time: str = "09:00"
    pickup_timezone: str = "UTC"


class SessionsConfig(BaseSettings):
    max_cached: int = 200


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///data/pawlink.db"
    log_level: str = "INFO"
    store: StoreConfig = Field(default_factory=StoreConfig)
    scheduling: SchedulingConfig = Field(default_factory=SchedulingConfig)
    sessions: SessionsConfig = Field(default_factory=SessionsConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "PAWLINK_"}


def get_settings() -> Settings:
    """Build Settings by merging YAML defaults with env overrides."""
    y = _yaml
    overrides = {}
    if "url" in y.get("database", {}):
        overrides["database_url"] = y["database"]["url"]
    if "log_level" in y:
        overrides["log_level"] = y["log_level"]
    return Settings(
        store=StoreConfig(**y.get("store", {})),
        scheduling=SchedulingConfig(**y.get("scheduling", {})),
        sessions=SessionsConfig(**y.get("sessions", {})),
        **overrides,
    )
