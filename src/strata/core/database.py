"""
Database facade - the single entry point for query execution and transactions.

A ``Database`` owns exactly one :class:`~strata.core.adapters.DatabaseAdapter`
and one :class:`~strata.core.connector.DatabaseConnector`. Everything a
repository does against the database goes through :meth:`Database.query`
and the transaction methods, which apply the error policy:

    ========================  ===========================================
    failure                   raised as
    ========================  ===========================================
    prepare / bind / execute  QueryError (recoverable, carries the SQL)
    commit / rollback         FatalDatabaseError (instance unusable)
    connection                FatalDatabaseError (raised by the adapter)
    nested begin              TransactionStateError (recoverable)
    ========================  ===========================================

Architecture:
    ::

        DatabaseConfiguration ──► build_adapter() ──► adapter.build_connector()
                                        │                      │
                                        ▼                      ▼
                              ┌────────────────────────────────────────┐
                              │               Database                 │
                              │  query(sql, params) → DatabaseStatement│
                              │  begin_transaction / commit / rollback │
                              │  get_last_inserted_id(sequence)        │
                              │  get_schema_interrogator()             │
                              └────────────────────────────────────────┘

Examples:
    >>> from strata.core import Database, DatabaseConfiguration
    >>> db = Database(DatabaseConfiguration(driver="sqlite"))
    >>> db.query("SELECT ? AS price", [12.3]).next()
    {'price': '12.3'}

Guardrails:
    ❌ DON'T: Share one Database between threads without a lock
    ✅ DO: One Database per thread, or serialize access externally

    ❌ DON'T: Keep using a Database after a FatalDatabaseError
    ✅ DO: Build a new one from the same configuration

Tags:
    database, facade, transactions, strata-core
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from strata.core.adapters import DatabaseAdapter, DatabaseConfiguration, SchemaInterrogator, build_adapter
from strata.core.connector import DatabaseConnector
from strata.core.errors import FatalDatabaseError, QueryError, StrataError
from strata.core.logging import get_logger
from strata.core.parameters import bind_parameters
from strata.core.statement import DatabaseStatement

logger = get_logger(__name__)

Parameters = Sequence[Any] | Mapping[str, Any]


class Database:
    """
    Facade over one adapter and one live connection.

    Build it from a configuration, or inject an adapter and connector
    (useful with fake connections in tests).

    Parameters:
        configuration: Connection descriptor; the adapter and connector are
            built from it.
        adapter: Pre-built adapter (requires *connector* too).
        connector: Pre-built connector (requires *adapter* too).
    """

    def __init__(
        self,
        configuration: DatabaseConfiguration | None = None,
        *,
        adapter: DatabaseAdapter | None = None,
        connector: DatabaseConnector | None = None,
    ):
        if configuration is not None:
            if adapter is not None or connector is not None:
                raise ValueError("Pass either a configuration or an adapter/connector pair, not both")
            adapter = build_adapter(configuration)
            connector = adapter.build_connector()
        elif adapter is None or connector is None:
            raise ValueError("Database requires a configuration or both an adapter and a connector")

        self._adapter = adapter
        self._connector = connector

    # -- Accessors ---------------------------------------------------------

    @property
    def adapter(self) -> DatabaseAdapter:
        return self._adapter

    @property
    def connector(self) -> DatabaseConnector:
        return self._connector

    @property
    def source(self) -> DatabaseConfiguration:
        return self._adapter.source

    @property
    def placeholder(self) -> str:
        """Positional placeholder of the current dialect (``?`` or ``%s``)."""
        return self._adapter.placeholder

    @property
    def in_transaction(self) -> bool:
        return self._connector.in_transaction

    # -- Queries -----------------------------------------------------------

    def query(
        self,
        sql: str,
        parameters: Parameters | None = None,
        *,
        allowed_tags: str | Iterable[str] | None = None,
    ) -> DatabaseStatement:
        """
        Execute a parametrized query.

        Each parameter is bound with the storage kind given by
        :class:`~strata.core.parameters.Parameter` (raw values are inferred).
        The returned statement is positioned before its first row.

        Raises:
            QueryError: The statement could not be prepared, bound or executed.
        """
        try:
            cursor = self._connector.execute(sql, bind_parameters(parameters))
        except Exception as e:
            logger.warning(
                "query_failed",
                dialect=self._adapter.dialect.value,
                sql=sql,
                error=str(e),
            )
            raise QueryError(
                f"Error while preparing query « {sql} » ({e})",
                sql=sql,
                cause=e,
            ).with_context(dialect=self._adapter.dialect.value, operation="query") from e
        return DatabaseStatement(cursor, allowed_tags=allowed_tags)

    def get_last_inserted_id(self, sequence_name: str | None = None) -> str:
        """Id generated by the last INSERT (PostgreSQL may name the sequence)."""
        row = self.query(self._adapter.get_last_insert_id_query(sequence_name)).next()
        value = next(iter(row.values())) if row else None
        return "" if value is None else str(value)

    def add_environment_variable(self, name: str, value: str) -> None:
        """Set a session-scoped variable visible to SQL (triggers, RLS policies...)."""
        sql, parameters = self._adapter.get_add_environment_variable_statement(name, value)
        self.query(sql, parameters)

    def get_sql_limit(self, limit: int, offset: int | None = None) -> str:
        return self._adapter.get_sql_limit(limit, offset)

    def get_schema_interrogator(self) -> SchemaInterrogator:
        return self._adapter.build_schema_interrogator(self)

    # -- Transactions ------------------------------------------------------

    def begin_transaction(self) -> None:
        """
        Start a transaction; changes are only persisted by :meth:`commit`.

        Nested transactions are rejected with ``TransactionStateError``.
        """
        try:
            self._connector.begin_transaction()
        except StrataError:
            raise
        except Exception as e:
            raise QueryError(
                f"Error while preparing query « {self._adapter.begin_statement} » ({e})",
                sql=self._adapter.begin_statement,
                cause=e,
            ) from e
        logger.debug("transaction_begun", dialect=self._adapter.dialect.value)

    def commit(self) -> None:
        """
        Commit the active transaction.

        Raises:
            FatalDatabaseError: The commit failed; transactional state is undefined.
        """
        try:
            self._connector.commit()
        except StrataError:
            raise
        except Exception as e:
            logger.error("transaction_commit_failed", error=str(e))
            raise FatalDatabaseError.transaction_commit_failed(str(e), cause=e) from e
        logger.debug("transaction_committed", dialect=self._adapter.dialect.value)

    def rollback(self) -> None:
        """
        Cancel every change made inside the active transaction.

        Raises:
            FatalDatabaseError: The rollback failed; transactional state is undefined.
        """
        try:
            self._connector.rollback()
        except StrataError:
            raise
        except Exception as e:
            logger.error("transaction_rollback_failed", error=str(e))
            raise FatalDatabaseError.transaction_rollback_failed(str(e), cause=e) from e
        logger.debug("transaction_rolled_back", dialect=self._adapter.dialect.value)

    # -- Lifecycle ---------------------------------------------------------

    def close(self) -> None:
        self._connector.close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Database(adapter={self._adapter!r})"


__all__ = [
    "Database",
]
