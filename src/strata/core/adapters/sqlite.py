"""SQLite database adapter.

Uses the built-in ``sqlite3`` module, so it is always available. The
configured ``host`` is the database file path; an empty host opens an
in-memory database. Handles both the ``sqlite`` and ``sqlite2`` driver ids.

SQLite has no session variables: the environment-variable clause writes
into a connection-local ``temp.environment_variables`` table, created
when the connection opens.
"""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING, Any

from strata.core.protocols import Connection

from .base import DatabaseAdapter
from .schema import SchemaInterrogator, SqliteSchemaInterrogator
from .types import Dialect

if TYPE_CHECKING:
    from strata.core.database import Database

MEMORY_PATH = ":memory:"


class SqliteAdapter(DatabaseAdapter):
    """SQLite adapter: ``?`` placeholders, file path DSN."""

    dialect = Dialect.SQLITE
    placeholder = "?"
    begin_statement = "BEGIN"

    def get_dsn(self) -> str:
        return self.source.host or MEMORY_PATH

    def _connect(self) -> Connection:
        path = self.get_dsn()
        uri = path.startswith("file:")
        # isolation_level=None: autocommit, transactions are explicit
        connection = sqlite3.connect(
            path,
            isolation_level=None,
            check_same_thread=False,
            uri=uri,
        )
        return connection

    def _on_connect(self, connection: Connection) -> None:
        cursor = connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys = ON")
            cursor.execute(
                "CREATE TEMP TABLE IF NOT EXISTS environment_variables "
                "(name TEXT PRIMARY KEY, value TEXT)"
            )
        finally:
            cursor.close()

    def get_add_environment_variable_clause(self, name: str, value: str) -> str:
        name = self.validate_variable_name(name)
        return (
            "INSERT OR REPLACE INTO temp.environment_variables (name, value) "
            f"VALUES ({self.quote_literal(name)}, {self.quote_literal(value)})"
        )

    def get_add_environment_variable_statement(self, name: str, value: str) -> tuple[str, tuple[Any, ...]]:
        name = self.validate_variable_name(name)
        return "INSERT OR REPLACE INTO temp.environment_variables (name, value) VALUES (?, ?)", (name, value)

    def get_last_insert_id_query(self, sequence_name: str | None = None) -> str:
        return "SELECT last_insert_rowid()"

    def build_schema_interrogator(self, database: Database) -> SchemaInterrogator:
        return SqliteSchemaInterrogator(database)


__all__ = [
    "SqliteAdapter",
]
