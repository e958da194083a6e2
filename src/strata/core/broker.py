"""Repository base class with guarded query and transaction helpers.

Provides :class:`Broker`: the access-pattern contract every repository
inherits. A broker borrows a shared :class:`~strata.core.database.Database`
for its whole lifetime (passed in explicitly, there is no global instance).

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                             Broker                                 │
    │                                                                    │
    │   database: Database        ← shared, injected                     │
    │                                                                    │
    │   query(sql, params)        → DatabaseStatement                    │
    │   select_unique(sql, params)→ dict | None   (raises on ≥2 rows)    │
    │   select_all(sql, params)   → list[dict]                           │
    │   transaction(callback)     → callback result (atomic)             │
    │   natural_sort(objects, key)→ list          ("A2" before "A10")    │
    └────────────────────────────────────────────────────────────────────┘

Usage:
    >>> class UserBroker(Broker):
    ...     def find_by_id(self, user_id: int):
    ...         return self.select_unique(
    ...             f"SELECT * FROM users WHERE id = {self.ph(1)}",
    ...             (user_id,),
    ...         )

Tags:
    repository, broker, database, transactions
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from strata.core.database import Database, Parameters
from strata.core.errors import FatalDatabaseError, TransactionError, UniqueRowViolation
from strata.core.logging import get_logger
from strata.core.statement import DatabaseStatement

logger = get_logger(__name__)

T = TypeVar("T")

_DIGIT_RUNS = re.compile(r"(\d+)")


def natural_key(value: Any) -> tuple:
    """Sort key splitting *value* into text and integer runs."""
    parts = _DIGIT_RUNS.split(str(value))
    # Even indexes are text runs, odd indexes are digit runs
    return tuple(
        (1, int(part), part) if index % 2 else (0, part)
        for index, part in enumerate(parts)
    )


class Broker:
    """Base class for repositories.

    Parameters:
        database: Shared database the broker issues its queries against.

    Subclasses may set :attr:`allowed_html_tags` (``"<b><i>"`` or an
    iterable of tag names) to strip every other HTML tag from string
    fields of the rows they select. ``None`` (default) leaves rows intact;
    an empty string strips every tag.
    """

    SQL_FORMAT_DATE = "%Y-%m-%d"
    SQL_FORMAT_DATE_TIME = "%Y-%m-%d %H:%M:%S"

    allowed_html_tags: str | Iterable[str] | None = None

    def __init__(self, database: Database) -> None:
        self._database = database

    @property
    def database(self) -> Database:
        return self._database

    # -- Convenience shortcuts ---------------------------------------------

    def ph(self, count: int = 1) -> str:
        """Comma-separated placeholders in the database's dialect.

            f"SELECT * FROM t WHERE id IN ({self.ph(3)})"
        """
        return ", ".join(self._database.placeholder for _ in range(count))

    def get_sql_limit(self, limit: int, offset: int | None = None) -> str:
        return self._database.get_sql_limit(limit, offset)

    def get_last_inserted_id(self, sequence_name: str | None = None) -> str:
        return self._database.get_last_inserted_id(sequence_name)

    # -- Query helpers -----------------------------------------------------

    def query(self, sql: str, parameters: Parameters | None = None) -> DatabaseStatement:
        """Execute any statement and return the cursor ready to be fetched."""
        return self._database.query(sql, parameters)

    def select_unique(
        self,
        sql: str,
        parameters: Parameters | None = None,
        allowed_tags: str | Iterable[str] | None = None,
    ) -> dict[str, Any] | None:
        """
        Execute a SELECT expected to return at most one row.

        Best suited for lookups by primary key. Returns ``None`` when no row
        matches.

        Raises:
            UniqueRowViolation: The query returned more than one row. This
                signals a broken uniqueness assumption in the caller's query.
        """
        statement = self._select(sql, parameters, allowed_tags)
        count = statement.count()
        if count == 0:
            return None
        if count > 1:
            raise UniqueRowViolation(sql, count)
        return statement.next()

    def select_all(
        self,
        sql: str,
        parameters: Parameters | None = None,
        allowed_tags: str | Iterable[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Execute a SELECT and return every row, in order (empty list when none)."""
        return list(self._select(sql, parameters, allowed_tags))

    def _select(
        self,
        sql: str,
        parameters: Parameters | None,
        allowed_tags: str | Iterable[str] | None,
    ) -> DatabaseStatement:
        statement = self.query(sql, parameters)
        tags = allowed_tags if allowed_tags is not None else self.allowed_html_tags
        if tags is not None:
            statement.set_allowed_html_tags(tags)
        return statement

    # -- Transactions ------------------------------------------------------

    def transaction(self, callback: Callable[[Database], T]) -> T:
        """
        Run *callback* inside a transaction and return its result.

        The callback always receives the Database. Any failure inside it,
        database or application level, rolls the transaction back and is
        re-raised as :class:`TransactionError` with the original message.
        A ``FatalDatabaseError`` (failed commit or rollback) propagates
        unchanged: the Database is no longer usable. Interrupts
        (``KeyboardInterrupt``, ``SystemExit``...) roll back too and
        propagate unchanged.
        """
        database = self._database
        database.begin_transaction()
        try:
            result = callback(database)
            database.commit()
        except FatalDatabaseError:
            self._rollback_if_active()
            raise
        except Exception as e:
            logger.info(
                "transaction_rolled_back",
                broker=self.__class__.__name__,
                error=str(e),
            )
            self._rollback_if_active()
            raise TransactionError(str(e), cause=e) from e
        except BaseException:
            self._rollback_if_active()
            raise
        return result

    def _rollback_if_active(self) -> None:
        # The callback may already have committed or rolled back itself
        if self._database.in_transaction:
            self._database.rollback()

    # -- Sorting -----------------------------------------------------------

    @staticmethod
    def natural_sort(
        objects: Iterable[T],
        key: Callable[[T], Any] | str | None = None,
    ) -> list[T]:
        """
        Stable natural sort: digit runs compare numerically.

        *key* is a callable or an attribute name; attribute values that are
        methods are called (``key="get_number"``). Defaults to identity.

        >>> Broker.natural_sort(["A10", "A2", "A1"])
        ['A1', 'A2', 'A10']
        """
        if key is None:
            accessor: Callable[[T], Any] = lambda item: item
        elif isinstance(key, str):
            attribute = key

            def accessor(item: T) -> Any:
                value = getattr(item, attribute)
                return value() if callable(value) else value
        else:
            accessor = key
        return sorted(objects, key=lambda item: natural_key(accessor(item)))


__all__ = [
    "Broker",
    "natural_key",
]
