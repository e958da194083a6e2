"""MySQL / MariaDB database adapter.

Uses ``mysql.connector`` from the ``mysql-connector-python`` package.
MySQL uses **format** (``%s``) placeholder style. Handles both the
``mysql`` and ``mariadb`` driver ids.

Install the driver::

    pip install mysql-connector-python
    # or:  pip install strata[mysql]

This adapter is import-guarded: if ``mysql.connector`` is not installed
a clear :class:`~strata.core.errors.ConfigError` is raised when connecting.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from strata.core.errors import ConfigError
from strata.core.protocols import Connection

from .base import DatabaseAdapter
from .schema import MysqlSchemaInterrogator, SchemaInterrogator
from .types import Dialect

if TYPE_CHECKING:
    from strata.core.database import Database


class MysqlAdapter(DatabaseAdapter):
    """MySQL / MariaDB adapter: ``%s`` placeholders, charset-aware DSN."""

    dialect = Dialect.MYSQL
    placeholder = "%s"
    begin_statement = "START TRANSACTION"

    def get_dsn(self) -> str:
        return f"{super().get_dsn()};charset={self.source.charset}"

    def _connect(self) -> Connection:
        try:
            import mysql.connector
        except ImportError:
            raise ConfigError(
                "mysql-connector-python is required for MySQL. "
                "Install with: pip install mysql-connector-python"
            ) from None

        source = self.source
        return mysql.connector.connect(
            host=source.host or "localhost",
            port=source.effective_port,
            database=source.database or None,
            user=source.username,
            password=source.password,
            charset=source.charset,
            autocommit=True,
        )

    @staticmethod
    def quote_literal(value: Any) -> str:
        """Quote *value* for MySQL, where ``\\`` is an escape character by default."""
        text = str(value).replace("\\", "\\\\").replace("'", "''")
        return f"'{text}'"

    def get_add_environment_variable_clause(self, name: str, value: str) -> str:
        name = self.validate_variable_name(name)
        return f"SET @`{name}` = {self.quote_literal(value)}"

    def get_add_environment_variable_statement(self, name: str, value: str) -> tuple[str, tuple[Any, ...]]:
        name = self.validate_variable_name(name)
        return f"SET @`{name}` = %s", (value,)

    def get_last_insert_id_query(self, sequence_name: str | None = None) -> str:
        return "SELECT LAST_INSERT_ID()"

    def build_schema_interrogator(self, database: Database) -> SchemaInterrogator:
        return MysqlSchemaInterrogator(database)


__all__ = [
    "MysqlAdapter",
]
