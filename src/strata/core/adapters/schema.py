"""Schema interrogators: read-only metadata queries per dialect."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from strata.core.database import Database


@dataclass(frozen=True)
class ColumnDefinition:
    name: str
    data_type: str
    nullable: bool
    default: Any = None


class SchemaInterrogator(ABC):
    """Inspects tables and columns through the owning :class:`Database`."""

    def __init__(self, database: Database):
        self._database = database

    @abstractmethod
    def get_tables(self) -> list[str]:
        """Names of the user tables, sorted."""
        ...

    @abstractmethod
    def get_columns(self, table: str) -> list[ColumnDefinition]:
        """Columns of *table* in declaration order (empty when it does not exist)."""
        ...

    def table_exists(self, table: str) -> bool:
        return table in self.get_tables()

    def _first_column(self, sql: str, parameters: tuple = ()) -> list[Any]:
        return [next(iter(row.values())) for row in self._database.query(sql, parameters)]


class SqliteSchemaInterrogator(SchemaInterrogator):
    def get_tables(self) -> list[str]:
        return self._first_column(
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )

    def get_columns(self, table: str) -> list[ColumnDefinition]:
        # PRAGMA arguments cannot be bound
        quoted = '"' + table.replace('"', '""') + '"'
        return [
            ColumnDefinition(
                name=row["name"],
                data_type=row["type"],
                nullable=not row["notnull"],
                default=row["dflt_value"],
            )
            for row in self._database.query(f"PRAGMA table_info({quoted})")
        ]


class PostgresSchemaInterrogator(SchemaInterrogator):
    def get_tables(self) -> list[str]:
        return self._first_column(
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_schema = current_schema() AND table_type = 'BASE TABLE' "
            "ORDER BY table_name"
        )

    def get_columns(self, table: str) -> list[ColumnDefinition]:
        rows = self._database.query(
            "SELECT column_name, data_type, is_nullable, column_default "
            "FROM information_schema.columns "
            "WHERE table_schema = current_schema() AND table_name = %s "
            "ORDER BY ordinal_position",
            (table,),
        )
        return [
            ColumnDefinition(
                name=row["column_name"],
                data_type=row["data_type"],
                nullable=row["is_nullable"] == "YES",
                default=row["column_default"],
            )
            for row in rows
        ]


class MysqlSchemaInterrogator(SchemaInterrogator):
    def get_tables(self) -> list[str]:
        return self._first_column(
            "SELECT TABLE_NAME AS table_name FROM INFORMATION_SCHEMA.TABLES "
            "WHERE TABLE_SCHEMA = DATABASE() AND TABLE_TYPE = 'BASE TABLE' "
            "ORDER BY TABLE_NAME"
        )

    def get_columns(self, table: str) -> list[ColumnDefinition]:
        rows = self._database.query(
            "SELECT COLUMN_NAME AS column_name, DATA_TYPE AS data_type, "
            "IS_NULLABLE AS is_nullable, COLUMN_DEFAULT AS column_default "
            "FROM INFORMATION_SCHEMA.COLUMNS "
            "WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = %s "
            "ORDER BY ORDINAL_POSITION",
            (table,),
        )
        return [
            ColumnDefinition(
                name=row["column_name"],
                data_type=row["data_type"],
                nullable=row["is_nullable"] == "YES",
                default=row["column_default"],
            )
            for row in rows
        ]


__all__ = [
    "ColumnDefinition",
    "SchemaInterrogator",
    "SqliteSchemaInterrogator",
    "PostgresSchemaInterrogator",
    "MysqlSchemaInterrogator",
]
