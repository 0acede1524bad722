"""
Tests for the relational connector, run against a SQLite file
"""
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import NullPool

from apiforge.connections.connectors.sqlalchemy_connector import SQLAlchemyConnector
from apiforge.core.errors import RemoteExecutionError
from apiforge.query.plan import SqlStatement

CREATE_TODO = SqlStatement(
    "CREATE TABLE todo (id INTEGER PRIMARY KEY, title VARCHAR(255) NOT NULL, "
    "due DATETIME DEFAULT '2024-01-01 10:00:00', note VARCHAR(255) DEFAULT 'at :noon')"
)


class SQLiteConnector(SQLAlchemyConnector):
    """Same execution path as MySQL/PostgreSQL; credentials are a file path."""
    label = "SQLite"
    drivername = "sqlite"

    def build_url(self) -> URL:
        return URL.create(self.drivername, database=self.credentials)

    def connect(self) -> None:
        self._engine = create_engine(self.build_url(), poolclass=NullPool)
        self._connection = self._engine.connect()


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "remote.db")


@pytest.fixture
def connector(db_path):
    connector = SQLiteConnector(db_path)
    connector.execute_raw(CREATE_TODO)
    yield connector
    connector.disconnect()


def count_rows(db_path):
    """Row count seen from a separate connection."""
    engine = create_engine(URL.create("sqlite", database=db_path), poolclass=NullPool)
    try:
        with engine.connect() as connection:
            return connection.execute(text("SELECT COUNT(*) FROM todo")).scalar()
    finally:
        engine.dispose()


class TestExecuteRaw:
    """Statement execution, commit and result mapping"""

    def test_insert_is_committed(self, connector, db_path):
        result = connector.execute_raw(
            SqlStatement("INSERT INTO todo (title) VALUES (:title)", {"title": "buy milk"})
        )

        assert not result.returns_rows
        assert result.rowcount == 1
        assert result.rows == []
        assert count_rows(db_path) == 1

    def test_select_maps_rows(self, connector):
        connector.execute_raw(SqlStatement("INSERT INTO todo (title) VALUES (:title)", {"title": "buy milk"}))

        result = connector.execute_raw(SqlStatement("SELECT * FROM todo WHERE id = :id", {"id": 1}))

        assert result.returns_rows
        assert result.rows == [{
            "id": 1, "title": "buy milk", "due": "2024-01-01 10:00:00", "note": "at :noon"
        }]

    def test_colons_in_ddl_defaults_are_literal(self, connector):
        connector.execute_raw(SqlStatement("INSERT INTO todo (title) VALUES ('plain')"))

        result = connector.execute_raw(SqlStatement("SELECT note FROM todo"))

        assert result.rows == [{"note": "at :noon"}]

    def test_rejected_statement(self, connector):
        with pytest.raises(RemoteExecutionError) as exc_info:
            connector.execute_raw(
                SqlStatement("INSERT INTO missing (title) VALUES (:title)", {"title": "x"})
            )

        assert exc_info.value.original_message == "no such table: missing"
        assert exc_info.value.message == "Query execution failed: no such table: missing"
        assert exc_info.value.status_code == 502

    def test_connection_usable_after_rejection(self, connector, db_path):
        with pytest.raises(RemoteExecutionError):
            connector.execute_raw(SqlStatement("INSERT INTO todo (title) VALUES (:title)", {"title": None}))

        connector.execute_raw(SqlStatement("INSERT INTO todo (title) VALUES (:title)", {"title": "ok"}))
        assert count_rows(db_path) == 1

    def test_failed_rollback_still_reports_execution_error(self, db_path):
        connector = SQLiteConnector(db_path)
        connection = MagicMock()
        connection.execute.side_effect = OperationalError("SELECT 1", {}, Exception("server has gone away"))
        connection.rollback.side_effect = OperationalError("ROLLBACK", {}, Exception("server has gone away"))
        connector._connection = connection

        with pytest.raises(RemoteExecutionError) as exc_info:
            connector.execute_raw(SqlStatement("SELECT 1"))

        assert exc_info.value.original_message == "server has gone away"
        connection.rollback.assert_called_once()

    def test_health_check(self, connector):
        result = connector.test_connection()
        assert result.is_healthy
        assert result.error_message is None
