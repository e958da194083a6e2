"""
Shared pytest fixtures for strata tests.

This module provides:
- In-memory SQLite configuration / Database / Broker fixtures
- A scriptable fake DB-API connection for dialects without a live server
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from strata.core.adapters import DatabaseConfiguration, DatabaseDriver
from strata.core.broker import Broker
from strata.core.database import Database


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test without an explicit marker as a unit test."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Fake DB-API connection
# =============================================================================


class FakeCursor:
    """Records executed statements; returns scripted rows."""

    def __init__(self, connection: FakeConnection):
        self._connection = connection
        self.description: list[tuple] | None = None
        self.lastrowid: Any = None
        self._rows: list[tuple] = []

    def execute(self, sql: str, params: Any = None) -> None:
        self._connection.executed.append((sql, params))
        failure = self._connection.failures.get(sql)
        if failure is not None:
            raise failure
        columns, rows = self._connection.results.get(sql, ([], []))
        self.description = [(name,) for name in columns] if columns else None
        self._rows = list(rows)

    def fetchone(self) -> tuple | None:
        return self._rows.pop(0) if self._rows else None

    def fetchall(self) -> list[tuple]:
        rows, self._rows = self._rows, []
        return rows

    def close(self) -> None:
        pass


class FakeConnection:
    """DB-API connection double.

    ``results[sql] = (columns, rows)`` scripts a result set;
    ``failures[sql] = exception`` makes executing *sql* raise.
    """

    def __init__(self) -> None:
        self.executed: list[tuple[str, Any]] = []
        self.results: dict[str, tuple[list[str], list[tuple]]] = {}
        self.failures: dict[str, Exception] = {}
        self.closed = False

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_connection() -> FakeConnection:
    return FakeConnection()


# =============================================================================
# SQLite fixtures
# =============================================================================


@pytest.fixture
def sqlite_configuration() -> DatabaseConfiguration:
    """In-memory SQLite configuration."""
    return DatabaseConfiguration(driver=DatabaseDriver.SQLITE)


@pytest.fixture
def file_configuration(tmp_path: Path) -> DatabaseConfiguration:
    """SQLite configuration backed by a temporary file."""
    return DatabaseConfiguration(driver=DatabaseDriver.SQLITE, host=str(tmp_path / "strata.db"))


@pytest.fixture
def database(sqlite_configuration: DatabaseConfiguration) -> Generator[Database, None, None]:
    """In-memory Database with an ``items`` table."""
    db = Database(sqlite_configuration)
    db.query(
        """
        CREATE TABLE items (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            code TEXT,
            price TEXT,
            active BOOLEAN
        )
        """
    )
    yield db
    db.close()


@pytest.fixture
def seeded_database(database: Database) -> Database:
    """``items`` holding three rows."""
    for name, code in [("alpha", "A1"), ("beta", "B2"), ("gamma", "C3")]:
        database.query("INSERT INTO items (name, code) VALUES (?, ?)", (name, code))
    return database


@pytest.fixture
def broker(seeded_database: Database) -> Broker:
    return Broker(seeded_database)
