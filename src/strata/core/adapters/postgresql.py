"""PostgreSQL database adapter.

Uses ``psycopg2``; the connection is switched to autocommit so that the
connector controls transactions with explicit ``BEGIN``/``COMMIT``.

Install the driver::

    pip install psycopg2-binary
    # or:  pip install strata[postgresql]

This adapter is import-guarded: if ``psycopg2`` is not installed a clear
:class:`~strata.core.errors.ConfigError` is raised when connecting.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from strata.core.errors import ConfigError
from strata.core.protocols import Connection

from .base import DatabaseAdapter
from .schema import PostgresSchemaInterrogator, SchemaInterrogator
from .types import Dialect

if TYPE_CHECKING:
    from strata.core.database import Database


class PostgresAdapter(DatabaseAdapter):
    """PostgreSQL adapter: ``%s`` placeholders, libpq keyword DSN."""

    dialect = Dialect.POSTGRESQL
    placeholder = "%s"
    begin_statement = "BEGIN"

    def get_dsn(self) -> str:
        source = self.source
        parts = []
        if source.host:
            parts.append(f"host={source.host}")
        if source.effective_port is not None:
            parts.append(f"port={source.effective_port}")
        if source.database:
            parts.append(f"dbname={source.database}")
        return " ".join(parts)

    def _connect(self) -> Connection:
        try:
            import psycopg2
        except ImportError:
            raise ConfigError(
                "psycopg2 is required for PostgreSQL. Install with: pip install psycopg2-binary"
            ) from None

        connection = psycopg2.connect(
            self.get_dsn(),
            user=self.source.username,
            password=self.source.password,
        )
        connection.autocommit = True
        return connection

    @staticmethod
    def quote_literal(value: Any) -> str:
        """Quote *value*; backslashes switch to an ``E''`` literal.

        An escape-string literal reads ``\\`` the same way whatever
        ``standard_conforming_strings`` is set to.
        """
        text = str(value).replace("'", "''")
        if "\\" in text:
            return "E'" + text.replace("\\", "\\\\") + "'"
        return f"'{text}'"

    def get_add_environment_variable_clause(self, name: str, value: str) -> str:
        name = self.validate_variable_name(name)
        identifier = ".".join('"' + part + '"' for part in name.split("."))
        return f"SET SESSION {identifier} TO {self.quote_literal(value)}"

    def get_add_environment_variable_statement(self, name: str, value: str) -> tuple[str, tuple[Any, ...]]:
        # SET takes no bind parameters; set_config is its callable form
        name = self.validate_variable_name(name)
        return "SELECT set_config(%s, %s, false)", (name, value)

    def get_last_insert_id_query(self, sequence_name: str | None = None) -> str:
        if sequence_name is None:
            return "SELECT lastval()"
        return f"SELECT currval({self.quote_literal(sequence_name)})"

    def build_schema_interrogator(self, database: Database) -> SchemaInterrogator:
        return PostgresSchemaInterrogator(database)


__all__ = [
    "PostgresAdapter",
]
