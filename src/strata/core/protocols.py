"""
Canonical protocol definitions for strata.

Manifesto:
    Protocols define contracts without inheritance. The connector accepts
    any DB-API 2.0 connection (``sqlite3``, ``psycopg2``,
    ``mysql.connector``) and tests can pass hand-written fakes, as long as
    the shape matches.

Architecture:
    ::

        protocols.py
        ├── Cursor           : DB-API cursor used by DatabaseStatement
        ├── Connection       : DB-API connection owned by DatabaseConnector
        └── ParameterSource  : request parameter access (HTTP layer)

Tags:
    protocol, connection, cursor, dbapi, strata-core
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Cursor(Protocol):
    """Minimal DB-API 2.0 cursor."""

    @property
    def description(self) -> Sequence[Sequence[Any]] | None:
        ...

    @property
    def lastrowid(self) -> Any:
        ...

    def execute(self, sql: str, params: Sequence[Any] | Mapping[str, Any] = ()) -> Any:
        ...

    def fetchone(self) -> Any:
        ...

    def fetchall(self) -> list:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class Connection(Protocol):
    """
    Minimal SYNCHRONOUS DB-API 2.0 connection.

    Transactions are driven by explicit ``BEGIN``/``COMMIT``/``ROLLBACK``
    statements issued through cursors, so the connection is expected to be
    opened in autocommit mode.
    """

    def cursor(self) -> Cursor:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class ParameterSource(Protocol):
    """Read access to request parameters, implemented by the HTTP layer."""

    def get_parameter(self, name: str, default: Any = None) -> Any:
        ...


__all__ = [
    "Cursor",
    "Connection",
    "ParameterSource",
]
