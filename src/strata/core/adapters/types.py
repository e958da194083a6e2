"""Database driver ids, dialects and the immutable connection descriptor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Dialect(str, Enum):
    """Closed set of SQL dialects an adapter can speak."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"

    @property
    def default_port(self) -> int | None:
        match self:
            case Dialect.POSTGRESQL:
                return 5432
            case Dialect.MYSQL:
                return 3306
            case _:
                return None


class DatabaseDriver(str, Enum):
    """Driver ids accepted in configuration."""

    SQLITE = "sqlite"
    SQLITE2 = "sqlite2"
    PGSQL = "pgsql"
    MYSQL = "mysql"
    MARIADB = "mariadb"

    @property
    def dialect(self) -> Dialect:
        """Dialect spoken by this driver."""
        match self:
            case DatabaseDriver.SQLITE | DatabaseDriver.SQLITE2:
                return Dialect.SQLITE
            case DatabaseDriver.PGSQL:
                return Dialect.POSTGRESQL
            case DatabaseDriver.MYSQL | DatabaseDriver.MARIADB:
                return Dialect.MYSQL


@dataclass(frozen=True)
class DatabaseConfiguration:
    """
    Immutable connection descriptor.

    ``host`` doubles as the database file path for SQLite drivers (an
    empty host means an in-memory database).
    """

    driver: DatabaseDriver = DatabaseDriver.SQLITE
    host: str = ""
    port: int | None = None
    database: str = ""
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    charset: str = "utf8mb4"

    def __post_init__(self) -> None:
        # Accept plain strings from callers that skip the settings layer
        if not isinstance(self.driver, DatabaseDriver):
            object.__setattr__(self, "driver", DatabaseDriver(self.driver))

    @property
    def dialect(self) -> Dialect:
        return self.driver.dialect

    @property
    def effective_port(self) -> int | None:
        """Configured port, or the dialect's default one."""
        return self.port if self.port is not None else self.dialect.default_port

    @property
    def database_source_name(self) -> str:
        """Generic ``driver:key=value;...`` source name; adapters may refine it."""
        parts = []
        if self.host:
            parts.append(f"host={self.host}")
        if self.effective_port is not None:
            parts.append(f"port={self.effective_port}")
        if self.database:
            parts.append(f"dbname={self.database}")
        return f"{self.driver.value}:{';'.join(parts)}"

    def to_dict(self) -> dict[str, Any]:
        """Render the configuration for logging, with the password redacted."""
        return {
            "driver": self.driver.value,
            "host": self.host,
            "port": self.effective_port,
            "database": self.database,
            "username": self.username,
            "password": "***" if self.password else None,
            "charset": self.charset,
        }


__all__ = [
    "Dialect",
    "DatabaseDriver",
    "DatabaseConfiguration",
]
