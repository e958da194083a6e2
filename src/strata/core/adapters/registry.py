"""Adapter factory.

Consumers never instantiate adapter classes by name: ``build_adapter``
maps the configuration's dialect (a closed enum) onto its adapter class.
Driver ids are validated upstream by the settings layer, so every
configuration reaching this point has a known dialect.
"""

from __future__ import annotations

from .base import DatabaseAdapter
from .mysql import MysqlAdapter
from .postgresql import PostgresAdapter
from .sqlite import SqliteAdapter
from .types import DatabaseConfiguration, Dialect


def adapter_class_for(dialect: Dialect) -> type[DatabaseAdapter]:
    match dialect:
        case Dialect.SQLITE:
            return SqliteAdapter
        case Dialect.POSTGRESQL:
            return PostgresAdapter
        case Dialect.MYSQL:
            return MysqlAdapter


def build_adapter(configuration: DatabaseConfiguration) -> DatabaseAdapter:
    """
    Build the adapter matching *configuration*.

    Usage:
        adapter = build_adapter(DatabaseConfiguration(driver="pgsql", host="db"))
        connector = adapter.build_connector()
    """
    return adapter_class_for(configuration.dialect)(configuration)


__all__ = [
    "adapter_class_for",
    "build_adapter",
]
