from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class EventChannelConfig(BaseModel):
    log_limit: int | None = Field(10_000)
    async_workers: int = Field(4, ge=1, le=64)

    @field_validator("log_limit")
    @classmethod
    def _validate_log_limit(cls, value: int | None) -> int | None:
        if value is None:
            return value
        if value < 1:
            raise ValueError("log_limit must be >= 1 when provided.")
        return value


class AppConfig(BaseModel):
    event_channel: EventChannelConfig = Field(default_factory=EventChannelConfig)
    log_level: LogLevel = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value


def load_app_config(path: Path) -> AppConfig:
    data = _load_config_data(path)
    return AppConfig.model_validate(data)


@lru_cache(maxsize=1)
def load_env_config() -> AppConfig:
    """Load configuration from ``LOCALLEND_*`` environment variables."""

    channel: dict[str, object] = {}
    log_limit = os.getenv("LOCALLEND_EVENT_LOG_LIMIT")
    if log_limit is not None:
        channel["log_limit"] = None if log_limit.strip().lower() in {"", "none", "unbounded"} else log_limit
    async_workers = os.getenv("LOCALLEND_ASYNC_WORKERS")
    if async_workers is not None:
        channel["async_workers"] = async_workers

    return AppConfig.model_validate(
        {
            "event_channel": channel,
            "log_level": os.getenv("LOCALLEND_LOG_LEVEL", "INFO"),
        }
    )


def _load_config_data(path: Path) -> dict:
    if path.suffix.lower() in {".yaml", ".yml"}:
        try:
            import yaml
        except ImportError as exc:
            raise ImportError("PyYAML is required to load YAML configs.") from exc

        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle) or {}

    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)
