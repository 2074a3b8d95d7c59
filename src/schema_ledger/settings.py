"""
Centralized settings for schema-ledger.

Manifesto:
    One validated, cached settings object feeds the runner and the CLI.
    Every value can come from a ``SCHEMA_LEDGER_*`` environment variable or
    a ``.env`` file; CLI options override individual fields on top.

Tags:
    schema-ledger, configuration, settings, pydantic, caching, validation
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from schema_ledger.errors import ConfigError
from schema_ledger.migrations.ledger import DEFAULT_TABLE, validate_table_name
from schema_ledger.migrations.models import ChecksumMode
from schema_ledger.migrations.source import DEFAULT_SUFFIX
from schema_ledger.migrations.statements import DEFAULT_TERMINATOR

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_LOG_FORMATS = {"console", "json"}


class MigrateSettings(BaseSettings):
    """schema-ledger configuration.

    All fields can be set via ``SCHEMA_LEDGER_*`` environment variables
    (e.g. ``SCHEMA_LEDGER_DATABASE_URL=postgresql://localhost/app``).
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_url: str = Field(default="sqlite:///data/schema_ledger.db")
    connect_timeout: int = Field(default=10, ge=1, description="Seconds")

    # ── Migrations ───────────────────────────────────────────────
    migrations_dir: str = Field(default="migrations")
    ledger_table: str = Field(default=DEFAULT_TABLE)
    script_suffix: str = Field(default=DEFAULT_SUFFIX)
    statement_terminator: str = Field(default=DEFAULT_TERMINATOR)
    checksum_mode: ChecksumMode = Field(default=ChecksumMode.WARN)
    transactional: bool = Field(default=True, description="One transaction per script")
    advisory_lock: bool = Field(default=True, description="Serialize runs on PostgreSQL")

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    @field_validator("ledger_table")
    @classmethod
    def _check_table(cls, value: str) -> str:
        try:
            return validate_table_name(value)
        except ConfigError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("script_suffix")
    @classmethod
    def _check_suffix(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            raise ValueError(f"script suffix must start with '.': {value!r}")
        return value

    @field_validator("statement_terminator")
    @classmethod
    def _check_terminator(cls, value: str) -> str:
        if not value:
            raise ValueError("statement terminator must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level: {value!r}")
        return level

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        fmt = value.lower()
        if fmt not in _LOG_FORMATS:
            raise ValueError(f"log format must be one of {sorted(_LOG_FORMATS)}")
        return fmt

    @property
    def json_logs(self) -> bool:
        return self.log_format == "json"


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, MigrateSettings] = {}


def get_settings(*, _force_reload: bool = False) -> MigrateSettings:
    """Load, validate, and cache a :class:`MigrateSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = MigrateSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = ["MigrateSettings", "get_settings", "clear_settings_cache"]
