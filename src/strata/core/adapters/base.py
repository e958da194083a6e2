"""Database adapter base class.

Manifesto:
    Every dialect difference the facade cares about (DSN format, LIMIT
    syntax, session variables, schema metadata, transaction start, last
    insert id) lives behind one abstract class. The facade never branches
    on the database vendor.

Features:
    - Abstract ``_connect()``, ``get_add_environment_variable_clause()``,
      ``get_add_environment_variable_statement()``,
      ``build_schema_interrogator()``, ``get_last_insert_id_query()``
    - ``build_connector()`` translating every connection failure into a
      single ``FatalDatabaseError``
    - Overridable ``get_dsn()`` and ``get_sql_limit()`` defaults

Tags:
    strata-core, database, abstract-base, adapter-pattern
"""

from __future__ import annotations

import html
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from strata.core.connector import DatabaseConnector
from strata.core.errors import FatalDatabaseError, StrataError, ValidationError
from strata.core.logging import get_logger
from strata.core.protocols import Connection

from .types import DatabaseConfiguration, Dialect

if TYPE_CHECKING:
    from strata.core.database import Database

    from .schema import SchemaInterrogator

logger = get_logger(__name__)

_VARIABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")


class DatabaseAdapter(ABC):
    """
    Dialect strategy built from a :class:`DatabaseConfiguration`.

    Subclasses declare their :attr:`dialect`, bind :attr:`placeholder`
    style and :attr:`begin_statement`, and implement the abstract hooks.
    """

    dialect: Dialect
    placeholder: str = "?"
    begin_statement: str = "BEGIN"

    def __init__(self, configuration: DatabaseConfiguration):
        self._configuration = configuration

    @property
    def source(self) -> DatabaseConfiguration:
        """Configuration this adapter was built from."""
        return self._configuration

    # -- Connection --------------------------------------------------------

    def build_connector(self) -> DatabaseConnector:
        """Open the live connection.

        Driver failures are caught here, once, and re-raised as a fatal,
        non-retryable :class:`FatalDatabaseError` carrying the driver's
        message. A missing driver package surfaces as ``ConfigError``.
        A connection whose session setup fails is closed before raising.
        """
        try:
            connection = self._connect()
            try:
                self._on_connect(connection)
            except BaseException:
                connection.close()
                raise
        except StrataError:
            raise
        except Exception as e:
            logger.error(
                "database_connection_failed",
                dialect=self.dialect.value,
                source=self._configuration.to_dict(),
                error=str(e),
            )
            raise FatalDatabaseError.connection_failed(str(e), cause=e).with_context(
                dialect=self.dialect.value
            ) from e

        logger.debug("database_connected", dialect=self.dialect.value, dsn=self.get_dsn())
        return DatabaseConnector(connection, begin_statement=self.begin_statement)

    @abstractmethod
    def _connect(self) -> Connection:
        """Open a DB-API connection in autocommit mode."""
        ...

    def _on_connect(self, connection: Connection) -> None:
        """Session setup right after connecting (override when needed)."""

    # -- SQL generation ----------------------------------------------------

    def get_dsn(self) -> str:
        """Data source name; dialects override when their driver wants another format."""
        return self._configuration.database_source_name

    def get_sql_limit(self, limit: int, offset: int | None = None) -> str:
        """``LIMIT n`` clause, with ``OFFSET m`` when an offset is given."""
        sql = f"LIMIT {int(limit)}"
        if offset is not None:
            sql += f" OFFSET {int(offset)}"
        return sql

    @abstractmethod
    def get_add_environment_variable_clause(self, name: str, value: str) -> str:
        """Literal SQL setting session variable *name* to *value* (for scripts and display)."""
        ...

    @abstractmethod
    def get_add_environment_variable_statement(
        self, name: str, value: str
    ) -> tuple[str, tuple[Any, ...]]:
        """Parametrized form of the clause: ``(sql, parameters)``, *value* is bound."""
        ...

    @abstractmethod
    def get_last_insert_id_query(self, sequence_name: str | None = None) -> str:
        """Query returning the last generated id as a single-column row."""
        ...

    @abstractmethod
    def build_schema_interrogator(self, database: Database) -> SchemaInterrogator:
        """Dialect-specific metadata inspector bound to *database*."""
        ...

    # -- Helpers -----------------------------------------------------------

    def purify(self, data: str) -> str:
        """Trim then HTML-escape *data*, quotes included."""
        return html.escape(data.strip(), quote=True)

    @staticmethod
    def quote_literal(value: Any) -> str:
        """Render *value* as a single-quoted SQL string literal (ANSI quoting)."""
        return "'" + str(value).replace("'", "''") + "'"

    @staticmethod
    def validate_variable_name(name: str) -> str:
        if not _VARIABLE_NAME.match(name):
            raise ValidationError(f"Invalid environment variable name « {name} »")
        return name

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(dialect={self.dialect.value})"


__all__ = [
    "DatabaseAdapter",
]
