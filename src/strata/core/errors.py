"""
Structured error types for the strata data-access layer.

Every error raised by strata carries enough metadata for a caller to decide
what to do next: whether the failure is retryable, whether the owning
``Database`` instance is still usable, and which SQL statement was involved.

Manifesto:
    - **Two tiers:** Recoverable query errors vs fatal connection errors
    - **Carry the SQL:** A failing statement is always attached to the error
    - **Explicit retry semantics:** Each error knows if it is retryable
    - **Error chaining:** Driver exceptions are kept as ``cause``

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                         StrataError                           │
        │        (category, retryable, context, cause)                  │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  ConfigError        ValidationError      DatabaseError        │
        │  (CONFIG)           (VALIDATION)         (DATABASE)           │
        │                          │                    │               │
        │                     FilterError         QueryError            │
        │                                           UniqueRowViolation  │
        │                                         TransactionError      │
        │                                         TransactionStateError │
        │                                         FatalDatabaseError    │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> error = QueryError("Error while preparing query", sql="SELECT 1")
    >>> error.sql
    'SELECT 1'
    >>> is_fatal(FatalDatabaseError.connection_failed("refused"))
    True

Guardrails:
    ❌ DON'T: Raise a bare driver exception out of the facade
    ✅ DO: Wrap it in QueryError / FatalDatabaseError with ``cause=``

    ❌ DON'T: Retry after a FatalDatabaseError on the same instance
    ✅ DO: Build a new Database from the configuration

Tags:
    error-handling, exception-hierarchy, database, strata-core
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        DATABASE: Query, transaction and connection failures
        CONFIG: Missing or invalid configuration
        VALIDATION: Malformed caller input (filters, identifiers)
        INTERNAL: Bugs, unexpected state
    """

    DATABASE = "DATABASE"
    CONFIG = "CONFIG"
    VALIDATION = "VALIDATION"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        sql: The SQL statement involved in the failure
        dialect: Dialect name of the adapter in use (``sqlite``, ...)
        operation: Facade operation that failed (``query``, ``commit``, ...)
        metadata: Additional key-value pairs
    """

    sql: str | None = None
    dialect: str | None = None
    operation: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["sql", "dialect", "operation"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class StrataError(Exception):
    """
    Base exception for all strata errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    the common case needs nothing but a message.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False
    # A fatal error means the owning Database must not be used any further
    fatal: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> StrataError:
        """
        Add context to this error (fluent API).

        Usage:
            raise QueryError("Failed", sql=sql).with_context(dialect="sqlite")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
            "fatal": self.fatal,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION / VALIDATION ERRORS (Never Retryable)
# =============================================================================


class ConfigError(StrataError):
    """Configuration error: missing driver package, invalid settings."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class ValidationError(StrataError):
    """Caller input is malformed and must be fixed before retrying."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False


class FilterError(ValidationError):
    """A filter definition uses an operator the parser does not know."""

    def __init__(self, message: str, *, operator: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.operator = operator


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(StrataError):
    """Base class for errors raised by the database facade."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


class QueryError(DatabaseError):
    """
    Recoverable query failure: bad SQL, bind mismatch, cardinality violation.

    The failing statement is kept in :attr:`sql` so the caller can inspect
    it and retry with corrected input.
    """

    def __init__(self, message: str, *, sql: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.sql = sql
        if sql is not None:
            self.context.sql = sql


class UniqueRowViolation(QueryError):
    """A query expected to yield at most one row yielded several."""

    def __init__(self, sql: str, row_count: int):
        super().__init__(
            f"Specified SELECT query « {sql} » should return a unique row, but {row_count} rows found",
            sql=sql,
        )
        self.row_count = row_count


class TransactionError(DatabaseError):
    """
    A transaction callback failed and the transaction was rolled back.

    Only the message of the original failure is part of the contract;
    callers must not rely on the original exception type.
    """


class TransactionStateError(DatabaseError):
    """Transaction control was called in the wrong state (nested begin, commit without begin)."""


class FatalDatabaseError(DatabaseError):
    """
    Connection, commit or rollback failure.

    The Database instance that raised it is in an undefined state and must
    not be used again. Never retryable.
    """

    default_retryable = False
    fatal = True

    @classmethod
    def connection_failed(cls, message: str, *, cause: Exception | None = None) -> FatalDatabaseError:
        return cls(f"Connection failed to database ({message})", cause=cause).with_context(
            operation="connect"
        )

    @classmethod
    def transaction_commit_failed(cls, message: str, *, cause: Exception | None = None) -> FatalDatabaseError:
        return cls(f"Transaction commit failed ({message})", cause=cause).with_context(
            operation="commit"
        )

    @classmethod
    def transaction_rollback_failed(cls, message: str, *, cause: Exception | None = None) -> FatalDatabaseError:
        return cls(f"Transaction rollback failed ({message})", cause=cause).with_context(
            operation="rollback"
        )


# =============================================================================
# HELPERS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, StrataError):
        return error.retryable
    return False


def is_fatal(error: Exception) -> bool:
    """Check if an error leaves its Database instance unusable."""
    return isinstance(error, StrataError) and error.fatal


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "StrataError",
    "ConfigError",
    "ValidationError",
    "FilterError",
    "DatabaseError",
    "QueryError",
    "UniqueRowViolation",
    "TransactionError",
    "TransactionStateError",
    "FatalDatabaseError",
    "is_retryable",
    "is_fatal",
]
