"""Database adapters -- one dialect strategy per supported backend.

Architecture::

    DatabaseAdapter (base.py)        Abstract base: DSN, LIMIT, env vars, connector
        |-- SqliteAdapter            stdlib sqlite3 (always available)
        |-- PostgresAdapter          psycopg2 (optional)
        |-- MysqlAdapter             mysql.connector (optional, MySQL + MariaDB)

    build_adapter (registry.py)      Dialect -> adapter class
    DatabaseConfiguration (types.py) Immutable connection descriptor
    SchemaInterrogator (schema.py)   Per-dialect metadata queries

Guardrails:
    ❌ ``db.query("SELECT * FROM t WHERE id=" + user_input)``
    ✅ ``db.query("SELECT * FROM t WHERE id=?", [user_input])``
    ❌ Importing optional drivers at module scope
    ✅ Import-guarded at connect time with clear ``ConfigError``

Tags:
    strata-core, database, adapters, multi-backend, import-guarded
"""

from .base import DatabaseAdapter
from .mysql import MysqlAdapter
from .postgresql import PostgresAdapter
from .registry import adapter_class_for, build_adapter
from .schema import (
    ColumnDefinition,
    MysqlSchemaInterrogator,
    PostgresSchemaInterrogator,
    SchemaInterrogator,
    SqliteSchemaInterrogator,
)
from .sqlite import SqliteAdapter
from .types import DatabaseConfiguration, DatabaseDriver, Dialect

__all__ = [
    # Types
    "Dialect",
    "DatabaseDriver",
    "DatabaseConfiguration",
    # Base class
    "DatabaseAdapter",
    # Implementations
    "SqliteAdapter",
    "PostgresAdapter",
    "MysqlAdapter",
    # Schema
    "ColumnDefinition",
    "SchemaInterrogator",
    "SqliteSchemaInterrogator",
    "PostgresSchemaInterrogator",
    "MysqlSchemaInterrogator",
    # Factory
    "adapter_class_for",
    "build_adapter",
]
