"""Unified configuration via pydantic-settings."""

import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_STATE_SIZE = 5 * 1024 * 1024


class SchemaUIConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SCHEMAUI_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Plugin scopes
    default_max_state_size: int | None = DEFAULT_MAX_STATE_SIZE

    # Component registry
    warn_unnamespaced: bool = True
    remove_components_on_unload: bool = False

    # Logging
    log_level: str = "INFO"
    log_dir: Path | None = None
    log_max_bytes: int = 10_485_760
    log_backup_count: int = 5

    @field_validator("default_max_state_size")
    @classmethod
    def normalize_max_state_size(cls, v: int | None) -> int | None:
        if v is None or v == 0:
            return None
        if v < 0:
            raise ValueError("default_max_state_size must not be negative")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def parse_log_level(cls, v: str) -> str:
        level = str(v).strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {v}")
        return level

    @field_validator("log_max_bytes", "log_backup_count")
    @classmethod
    def non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must not be negative")
        return v
