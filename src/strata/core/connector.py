"""Live connection handle owned by a ``Database``.

The connector wraps one DB-API connection opened in autocommit mode and
drives transactions with explicit SQL statements, so the three supported
drivers behave the same way:

    ==========  ===================  =========  ===========
    dialect     begin                commit     rollback
    ==========  ===================  =========  ===========
    sqlite      BEGIN                COMMIT     ROLLBACK
    postgresql  BEGIN                COMMIT     ROLLBACK
    mysql       START TRANSACTION    COMMIT     ROLLBACK
    ==========  ===================  =========  ===========

Driver exceptions are NOT translated here; the ``Database`` facade owns
the error policy.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from strata.core.errors import TransactionStateError
from strata.core.protocols import Connection, Cursor


class DatabaseConnector:
    """One live DB-API connection plus its transaction state."""

    def __init__(self, connection: Connection, *, begin_statement: str = "BEGIN"):
        self._connection = connection
        self._begin_statement = begin_statement
        self._in_transaction = False
        self._closed = False

    @property
    def connection(self) -> Connection:
        return self._connection

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    @property
    def closed(self) -> bool:
        return self._closed

    def execute(self, sql: str, parameters: Sequence[Any] | Mapping[str, Any] = ()) -> Cursor:
        """Prepare and execute *sql*; the open cursor is returned to the caller."""
        cursor = self._connection.cursor()
        try:
            # format-style drivers would interpolate a literal % against empty params
            if parameters:
                cursor.execute(sql, parameters)
            else:
                cursor.execute(sql)
        except Exception:
            cursor.close()
            raise
        return cursor

    def begin_transaction(self) -> None:
        if self._in_transaction:
            raise TransactionStateError(
                "A transaction is already active; nested transactions are not supported"
            )
        self._run(self._begin_statement)
        self._in_transaction = True

    def commit(self) -> None:
        if not self._in_transaction:
            raise TransactionStateError("Cannot commit, no transaction is active")
        try:
            self._run("COMMIT")
        finally:
            self._in_transaction = False

    def rollback(self) -> None:
        if not self._in_transaction:
            raise TransactionStateError("Cannot rollback, no transaction is active")
        try:
            self._run("ROLLBACK")
        finally:
            self._in_transaction = False

    def close(self) -> None:
        if not self._closed:
            self._connection.close()
            self._closed = True

    def _run(self, sql: str) -> None:
        cursor = self._connection.cursor()
        try:
            cursor.execute(sql)
        finally:
            cursor.close()


__all__ = [
    "DatabaseConnector",
]
