"""Tests for ``strata.core.adapters``: dialect strategies and factory."""

from __future__ import annotations

import sqlite3
import sys
from unittest.mock import MagicMock, patch

import pytest

from strata.core.adapters import (
    DatabaseConfiguration,
    DatabaseDriver,
    Dialect,
    MysqlAdapter,
    PostgresAdapter,
    SqliteAdapter,
    SqliteSchemaInterrogator,
    adapter_class_for,
    build_adapter,
)
from strata.core.connector import DatabaseConnector
from strata.core.errors import ConfigError, FatalDatabaseError, ValidationError


@pytest.fixture(params=["sqlite", "pgsql", "mysql"])
def adapter(request: pytest.FixtureRequest):
    """Parametric fixture: run each test against every dialect."""
    return build_adapter(DatabaseConfiguration(driver=request.param, host="db", database="app"))


class TestDatabaseConfiguration:
    def test_driver_maps_to_dialect(self):
        assert DatabaseDriver.SQLITE.dialect is Dialect.SQLITE
        assert DatabaseDriver.SQLITE2.dialect is Dialect.SQLITE
        assert DatabaseDriver.PGSQL.dialect is Dialect.POSTGRESQL
        assert DatabaseDriver.MYSQL.dialect is Dialect.MYSQL
        assert DatabaseDriver.MARIADB.dialect is Dialect.MYSQL

    def test_string_driver_is_coerced(self):
        configuration = DatabaseConfiguration(driver="mariadb")
        assert configuration.driver is DatabaseDriver.MARIADB

    def test_unknown_driver_rejected(self):
        with pytest.raises(ValueError):
            DatabaseConfiguration(driver="oracle")

    def test_immutable(self):
        configuration = DatabaseConfiguration()
        with pytest.raises(AttributeError):
            configuration.host = "elsewhere"  # type: ignore[misc]

    def test_default_ports(self):
        assert DatabaseConfiguration(driver="pgsql").effective_port == 5432
        assert DatabaseConfiguration(driver="mysql").effective_port == 3306
        assert DatabaseConfiguration(driver="pgsql", port=6543).effective_port == 6543
        assert DatabaseConfiguration(driver="sqlite").effective_port is None

    def test_database_source_name(self):
        configuration = DatabaseConfiguration(driver="pgsql", host="db", database="app")
        assert configuration.database_source_name == "pgsql:host=db;port=5432;dbname=app"

    def test_password_redacted(self):
        configuration = DatabaseConfiguration(driver="pgsql", username="bob", password="s3cret")
        assert configuration.to_dict()["password"] == "***"
        assert "s3cret" not in repr(configuration)


class TestBuildAdapter:
    @pytest.mark.parametrize(
        "driver, expected",
        [
            ("sqlite", SqliteAdapter),
            ("sqlite2", SqliteAdapter),
            ("pgsql", PostgresAdapter),
            ("mysql", MysqlAdapter),
            ("mariadb", MysqlAdapter),
        ],
    )
    def test_dispatch(self, driver, expected):
        adapter = build_adapter(DatabaseConfiguration(driver=driver))
        assert isinstance(adapter, expected)

    def test_every_dialect_has_an_adapter(self):
        for dialect in Dialect:
            assert adapter_class_for(dialect).dialect is dialect

    def test_source_kept(self):
        configuration = DatabaseConfiguration(driver="pgsql")
        assert build_adapter(configuration).source is configuration


class TestSqlLimit:
    def test_limit_with_offset(self, adapter):
        assert adapter.get_sql_limit(10, 20) == "LIMIT 10 OFFSET 20"

    def test_limit_without_offset(self, adapter):
        assert adapter.get_sql_limit(10, None) == "LIMIT 10"
        assert adapter.get_sql_limit(10) == "LIMIT 10"

    def test_zero_offset_kept(self, adapter):
        assert adapter.get_sql_limit(5, 0) == "LIMIT 5 OFFSET 0"


class TestDsn:
    def test_sqlite_memory(self):
        assert SqliteAdapter(DatabaseConfiguration()).get_dsn() == ":memory:"

    def test_sqlite_path(self):
        adapter = SqliteAdapter(DatabaseConfiguration(host="/var/data/app.db"))
        assert adapter.get_dsn() == "/var/data/app.db"

    def test_postgres_keywords(self):
        adapter = PostgresAdapter(DatabaseConfiguration(driver="pgsql", host="db", database="app"))
        assert adapter.get_dsn() == "host=db port=5432 dbname=app"

    def test_mysql_charset(self):
        adapter = MysqlAdapter(
            DatabaseConfiguration(driver="mysql", host="db", database="app", charset="utf8")
        )
        assert adapter.get_dsn() == "mysql:host=db;port=3306;dbname=app;charset=utf8"


class TestEnvironmentVariableClause:
    def test_postgres(self):
        adapter = build_adapter(DatabaseConfiguration(driver="pgsql"))
        clause = adapter.get_add_environment_variable_clause("app.user_id", "42")
        assert clause == 'SET SESSION "app"."user_id" TO \'42\''

    def test_mysql(self):
        adapter = build_adapter(DatabaseConfiguration(driver="mysql"))
        assert adapter.get_add_environment_variable_clause("user_id", "42") == "SET @`user_id` = '42'"

    def test_sqlite(self):
        adapter = build_adapter(DatabaseConfiguration(driver="sqlite"))
        clause = adapter.get_add_environment_variable_clause("user_id", "42")
        assert "temp.environment_variables" in clause
        assert "'user_id', '42'" in clause

    def test_value_quotes_escaped(self, adapter):
        clause = adapter.get_add_environment_variable_clause("name", "O'Brien")
        assert "'O''Brien'" in clause

    @pytest.mark.parametrize(
        "driver, expected",
        [
            ("sqlite", r"'\'''"),
            ("pgsql", r"E'\\'''"),
            ("mysql", r"'\\'''"),
        ],
    )
    def test_backslash_cannot_close_literal(self, driver, expected):
        adapter = build_adapter(DatabaseConfiguration(driver=driver))
        assert adapter.quote_literal("\\'") == expected

    def test_mysql_injection_stays_inside_literal(self):
        adapter = build_adapter(DatabaseConfiguration(driver="mysql"))
        clause = adapter.get_add_environment_variable_clause("tenant", "\\', @pwned = (SELECT 1) #")
        assert clause == r"SET @`tenant` = '\\'', @pwned = (SELECT 1) #'"

    @pytest.mark.parametrize(
        "driver, expected",
        [
            ("sqlite", ("INSERT OR REPLACE INTO temp.environment_variables (name, value) VALUES (?, ?)", ("app.user", "v"))),
            ("pgsql", ("SELECT set_config(%s, %s, false)", ("app.user", "v"))),
            ("mysql", ("SET @`app.user` = %s", ("v",))),
        ],
    )
    def test_statement_binds_value(self, driver, expected):
        adapter = build_adapter(DatabaseConfiguration(driver=driver))
        assert adapter.get_add_environment_variable_statement("app.user", "v") == expected

    def test_statement_validates_name(self, adapter):
        with pytest.raises(ValidationError):
            adapter.get_add_environment_variable_statement("x; DROP TABLE t", "v")

    @pytest.mark.parametrize("name", ["1abc", "x; DROP TABLE t", "a-b", ""])
    def test_invalid_name_rejected(self, adapter, name):
        with pytest.raises(ValidationError):
            adapter.get_add_environment_variable_clause(name, "v")


class TestLastInsertIdQuery:
    def test_sqlite(self):
        assert build_adapter(DatabaseConfiguration()).get_last_insert_id_query() == "SELECT last_insert_rowid()"

    def test_postgres_sequence(self):
        adapter = build_adapter(DatabaseConfiguration(driver="pgsql"))
        assert adapter.get_last_insert_id_query() == "SELECT lastval()"
        assert adapter.get_last_insert_id_query("users_id_seq") == "SELECT currval('users_id_seq')"

    def test_mysql(self):
        adapter = build_adapter(DatabaseConfiguration(driver="mysql"))
        assert adapter.get_last_insert_id_query("ignored") == "SELECT LAST_INSERT_ID()"


class TestPurify:
    def test_trims_and_escapes(self, adapter):
        assert adapter.purify("  <b>\"Tom\" & 'Jerry'</b> ") == (
            "&lt;b&gt;&quot;Tom&quot; &amp; &#x27;Jerry&#x27;&lt;/b&gt;"
        )


class TestBuildConnector:
    def test_sqlite_connects(self):
        connector = SqliteAdapter(DatabaseConfiguration()).build_connector()
        assert isinstance(connector, DatabaseConnector)
        assert isinstance(connector.connection, sqlite3.Connection)
        connector.close()

    def test_sqlite_file(self, file_configuration):
        connector = build_adapter(file_configuration).build_connector()
        cursor = connector.execute("PRAGMA foreign_keys")
        assert cursor.fetchone()[0] == 1
        connector.close()

    @patch("sqlite3.connect", side_effect=sqlite3.OperationalError("unable to open database file"))
    def test_sqlite_failure_is_fatal(self, mock_connect):
        adapter = SqliteAdapter(DatabaseConfiguration(host="/nonexistent/dir/app.db"))
        with pytest.raises(FatalDatabaseError) as exc_info:
            adapter.build_connector()
        error = exc_info.value
        assert "unable to open database file" in error.message
        assert error.fatal is True
        assert error.retryable is False
        assert isinstance(error.cause, sqlite3.OperationalError)

    def test_session_setup_failure_closes_connection(self):
        connection = MagicMock()
        connection.cursor.return_value.execute.side_effect = sqlite3.OperationalError("disk I/O error")
        with patch("sqlite3.connect", return_value=connection):
            with pytest.raises(FatalDatabaseError, match="disk I/O error"):
                SqliteAdapter(DatabaseConfiguration()).build_connector()
        connection.close.assert_called_once()

    def test_postgres_missing_driver(self):
        adapter = build_adapter(DatabaseConfiguration(driver="pgsql"))
        with patch.dict(sys.modules, {"psycopg2": None}):
            with pytest.raises(ConfigError, match="psycopg2"):
                adapter.build_connector()

    def test_mysql_missing_driver(self):
        adapter = build_adapter(DatabaseConfiguration(driver="mariadb"))
        with patch.dict(sys.modules, {"mysql": None, "mysql.connector": None}):
            with pytest.raises(ConfigError, match="mysql-connector-python"):
                adapter.build_connector()

    def test_postgres_connection_failure_is_fatal(self):
        driver = MagicMock()
        driver.connect.side_effect = RuntimeError("could not connect to server")
        adapter = build_adapter(DatabaseConfiguration(driver="pgsql", host="db", password="pw"))
        with patch.dict(sys.modules, {"psycopg2": driver}):
            with pytest.raises(FatalDatabaseError, match="could not connect to server"):
                adapter.build_connector()

    def test_postgres_connects_in_autocommit(self):
        driver = MagicMock()
        adapter = build_adapter(
            DatabaseConfiguration(driver="pgsql", host="db", database="app", username="u", password="p")
        )
        with patch.dict(sys.modules, {"psycopg2": driver}):
            connector = adapter.build_connector()
        driver.connect.assert_called_once_with("host=db port=5432 dbname=app", user="u", password="p")
        assert connector.connection.autocommit is True

    def test_mysql_connects_with_charset(self):
        package = MagicMock()
        adapter = build_adapter(
            DatabaseConfiguration(driver="mysql", host="db", database="app", charset="latin1")
        )
        with patch.dict(sys.modules, {"mysql": package, "mysql.connector": package.connector}):
            connector = adapter.build_connector()
        kwargs = package.connector.connect.call_args.kwargs
        assert kwargs["charset"] == "latin1"
        assert kwargs["autocommit"] is True
        assert kwargs["port"] == 3306
        assert connector.connection is package.connector.connect.return_value


class TestSchemaInterrogator:
    def test_sqlite(self, database):
        interrogator = database.get_schema_interrogator()
        assert isinstance(interrogator, SqliteSchemaInterrogator)
        assert interrogator.get_tables() == ["items"]
        assert interrogator.table_exists("items")
        assert not interrogator.table_exists("missing")

    def test_sqlite_columns(self, database):
        columns = database.get_schema_interrogator().get_columns("items")
        assert [column.name for column in columns] == ["id", "name", "code", "price", "active"]
        name = columns[1]
        assert name.data_type == "TEXT"
        assert name.nullable is False
        assert columns[2].nullable is True

    def test_sqlite_unknown_table(self, database):
        assert database.get_schema_interrogator().get_columns("missing") == []
