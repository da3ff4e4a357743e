"""
Unit tests for the PostgreSQL statement layer.

A MagicMock connection stands in for psycopg2; the tests check that table
names only ever reach the server as quoted identifiers and that cutoff and
limit are bound parameters.
"""

from unittest.mock import MagicMock

import pytest
from psycopg2 import sql

from tests.conftest import CUTOFF
from utils import db as db_module
from utils.db import SourceDatabase, delete_expired_query, select_expired_query


def _flatten(composable):
    if isinstance(composable, sql.Composed):
        for part in composable.seq:
            yield from _flatten(part)
    else:
        yield composable


def _sql_text(composable) -> str:
    return "".join(part.string for part in _flatten(composable) if isinstance(part, sql.SQL))


@pytest.fixture
def conn():
    conn = MagicMock()
    conn.closed = 0
    return conn


@pytest.fixture
def cursor(conn):
    return conn.cursor.return_value.__enter__.return_value


class TestQueries:
    """Tests for statement composition."""

    def test_select_uses_identifier_for_table(self):
        parts = list(_flatten(select_expired_query("iot_data")))

        assert sql.Identifier("iot_data") in parts
        assert "iot_data" not in _sql_text(select_expired_query("iot_data"))

    def test_select_shape(self):
        text = _sql_text(select_expired_query("iot_data"))

        assert text.startswith("SELECT ")
        assert "WHERE" in text and "< %s" in text
        assert "DESC" in text
        assert text.endswith("LIMIT %s")

    def test_schema_qualified_table(self):
        parts = list(_flatten(delete_expired_query("telemetry.readings")))

        assert sql.Identifier("telemetry", "readings") in parts

    def test_delete_shape(self):
        text = _sql_text(delete_expired_query("iot_data"))

        assert text.startswith("DELETE FROM ")
        assert "< %s" in text
        assert "LIMIT" not in text


class TestSourceDatabase:
    """Tests for SourceDatabase against a mocked connection."""

    def test_fetch_expired_binds_cutoff_and_limit(self, conn, cursor):
        cursor.fetchall.return_value = [(1, CUTOFF, "d", 1.0)]

        rows = SourceDatabase(conn).fetch_expired("iot_data", CUTOFF, 100)

        query, params = cursor.execute.call_args.args
        assert query == select_expired_query("iot_data")
        assert params == (CUTOFF, 100)
        assert rows == [(1, CUTOFF, "d", 1.0)]

    def test_delete_expired_returns_rowcount(self, conn, cursor):
        cursor.rowcount = 7

        deleted = SourceDatabase(conn).delete_expired("iot_data", CUTOFF)

        query, params = cursor.execute.call_args.args
        assert query == delete_expired_query("iot_data")
        assert params == (CUTOFF,)
        assert deleted == 7

    def test_ping(self, conn, cursor):
        SourceDatabase(conn).ping()

        cursor.execute.assert_called_once_with("SELECT 1")

    def test_close_only_once(self, conn):
        database = SourceDatabase(conn)
        database.close()
        conn.closed = 1
        database.close()

        conn.close.assert_called_once()

    def test_connect_enables_autocommit_and_utc_session(self, monkeypatch):
        fake_conn = MagicMock()
        connect = MagicMock(return_value=fake_conn)
        monkeypatch.setattr(db_module.psycopg2, "connect", connect)

        database = SourceDatabase.connect("postgresql://localhost/iot")

        connect.assert_called_once_with("postgresql://localhost/iot", options="-c timezone=UTC")
        assert database.conn is fake_conn
        assert fake_conn.autocommit is True
