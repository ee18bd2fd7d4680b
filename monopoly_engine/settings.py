"""
Process-level configuration using pydantic-settings.

Environment variables (prefix: MONOPOLY_):
    MONOPOLY_STORAGE_BACKEND   - memory | sql (default: memory)
    MONOPOLY_DATABASE_URL      - SQLAlchemy URL for the sql backend
    MONOPOLY_STATE_TTL_SECONDS - expiry for persisted game states (default: 24h)
    MONOPOLY_LOG_LEVEL         - logging level name (default: INFO)

Game rules (cash, jail fine, supply limits) live in `config.GameSettings`
because they travel with each game's state.
"""

from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageBackend(str, Enum):
    """Supported persistence adapters."""

    MEMORY = "memory"
    SQL = "sql"


class EngineSettings(BaseSettings):
    """Configuration for the engine host process."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="MONOPOLY_",
    )

    storage_backend: StorageBackend = Field(
        default=StorageBackend.MEMORY,
        description="Where serialized game states are kept (memory | sql).",
    )
    database_url: str = Field(
        default="sqlite:///monopoly_engine.db",
        description="SQLAlchemy URL used by the sql storage backend.",
    )
    state_ttl_seconds: int = Field(
        default=24 * 60 * 60,
        gt=0,
        description="Seconds a saved game state stays loadable.",
    )
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache
def get_engine_settings() -> EngineSettings:
    """Return cached engine settings instance."""
    return EngineSettings()


def configure_logging(settings: EngineSettings | None = None) -> None:
    """Apply the configured level to the engine's loggers."""
    settings = settings or get_engine_settings()
    logging.getLogger("monopoly_engine").setLevel(settings.log_level)
