"""
Database settings loaded from the environment.

Manifesto:
    Configuration is validated once, at the edge. ``DatabaseSettings``
    reads ``STRATA_DB_*`` environment variables (and ``.env`` files),
    rejects unknown driver ids, and produces the immutable
    :class:`~strata.core.adapters.DatabaseConfiguration` the rest of the
    library trusts without re-checking.

Examples:
    >>> import os
    >>> os.environ["STRATA_DB_DRIVER"] = "pgsql"
    >>> os.environ["STRATA_DB_HOST"] = "db.internal"
    >>> get_settings(_force_reload=True).to_configuration().dialect
    <Dialect.POSTGRESQL: 'postgresql'>

Tags:
    settings, configuration, pydantic, environment, strata-core
"""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from strata.core.adapters.types import DatabaseConfiguration, DatabaseDriver


class DatabaseSettings(BaseSettings):
    """Validated database connection settings (``STRATA_DB_*``)."""

    model_config = SettingsConfigDict(
        env_prefix="STRATA_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    driver: DatabaseDriver = Field(default=DatabaseDriver.SQLITE)
    host: str = Field(default="", description="Host name, or database file path for SQLite")
    port: int | None = Field(default=None, ge=1, le=65535)
    database: str = Field(default="")
    username: str | None = Field(default=None)
    password: SecretStr | None = Field(default=None)
    charset: str = Field(default="utf8mb4")

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    def to_configuration(self) -> DatabaseConfiguration:
        return DatabaseConfiguration(
            driver=self.driver,
            host=self.host,
            port=self.port,
            database=self.database,
            username=self.username,
            password=self.password.get_secret_value() if self.password else None,
            charset=self.charset,
        )


_settings_cache: dict[str, DatabaseSettings] = {}


def get_settings(*, _force_reload: bool = False) -> DatabaseSettings:
    """Load, validate, and cache the settings."""
    if _force_reload or "default" not in _settings_cache:
        _settings_cache["default"] = DatabaseSettings()
    return _settings_cache["default"]


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = [
    "DatabaseSettings",
    "get_settings",
    "clear_settings_cache",
]
