"""
Centralized settings for jsonshred.

All fields can be set through ``JSONSHRED_*`` environment variables or a
``.env`` file. List fields take JSON (``JSONSHRED_SCHEMA_REPOSITORIES='["./iglu"]'``).

Tags:
    configuration, settings, pydantic, jsonshred
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ShredderSettings(BaseSettings):
    """jsonshred configuration.

    Fields
    ──────
    schema_repositories : Static Iglu repository roots, highest priority first
    cache_max_size      : Resolved-schema cache capacity
    cache_ttl_seconds   : Resolved-schema TTL (``None`` → never expires)
    ref_root            : Root table name stamped into ``ref_root``/``ref_parent``
    table_schema        : Warehouse schema prefixed onto table names
    workers             : Thread pool size for the batch job
    log_level           : Structlog log level
    log_format          : ``json`` or ``console``
    """

    model_config = SettingsConfigDict(
        env_prefix="JSONSHRED_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Schema resolution ────────────────────────────────────────
    schema_repositories: list[Path] = Field(default_factory=list)
    cache_max_size: int = Field(default=500, ge=1)
    cache_ttl_seconds: int | None = Field(default=None, ge=1)

    # ── Shredding ────────────────────────────────────────────────
    ref_root: str = Field(default="events", min_length=1)
    table_schema: str = Field(default="atomic")

    # ── Execution ────────────────────────────────────────────────
    workers: int = Field(default=4, ge=1)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return level


_settings_cache: dict[str, ShredderSettings] = {}


def get_settings(*, _force_reload: bool = False) -> ShredderSettings:
    """Load, validate, and cache a :class:`ShredderSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = ShredderSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = ["ShredderSettings", "get_settings", "clear_settings_cache"]
