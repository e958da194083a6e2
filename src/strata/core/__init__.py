"""
strata.core - multi-DBMS data access.

Modules
-------
adapters        Dialect strategies (SQLite, PostgreSQL, MySQL/MariaDB)
connector       Live DB-API connection + transaction state
parameters      Typed query parameters
statement       Forward-only result cursor
database        Database facade (queries, transactions)
broker          Repository base class
where           Parametrized WHERE clause tree
filters         Request filters → WhereClause
errors          Typed error hierarchy
logging         structlog configuration
settings        Environment-driven settings (pydantic-settings)
factory         Settings → Database
"""

from strata.core.adapters import (
    DatabaseAdapter,
    DatabaseConfiguration,
    DatabaseDriver,
    Dialect,
    MysqlAdapter,
    PostgresAdapter,
    SchemaInterrogator,
    SqliteAdapter,
    build_adapter,
)
from strata.core.broker import Broker
from strata.core.connector import DatabaseConnector
from strata.core.database import Database
from strata.core.errors import (
    ConfigError,
    DatabaseError,
    FatalDatabaseError,
    FilterError,
    QueryError,
    StrataError,
    TransactionError,
    TransactionStateError,
    UniqueRowViolation,
)
from strata.core.filters import FilterParser, MappingParameterSource
from strata.core.parameters import Parameter, ParameterKind
from strata.core.statement import DatabaseStatement
from strata.core.where import WhereClause, WhereCondition

__all__ = [
    # Configuration / adapters
    "DatabaseConfiguration",
    "DatabaseDriver",
    "Dialect",
    "DatabaseAdapter",
    "SqliteAdapter",
    "PostgresAdapter",
    "MysqlAdapter",
    "SchemaInterrogator",
    "build_adapter",
    # Execution
    "DatabaseConnector",
    "Database",
    "DatabaseStatement",
    "Parameter",
    "ParameterKind",
    "Broker",
    # Filtering
    "FilterParser",
    "MappingParameterSource",
    "WhereClause",
    "WhereCondition",
    # Errors
    "StrataError",
    "ConfigError",
    "FilterError",
    "DatabaseError",
    "QueryError",
    "UniqueRowViolation",
    "TransactionError",
    "TransactionStateError",
    "FatalDatabaseError",
]
