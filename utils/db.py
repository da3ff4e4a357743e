"""
Database utilities for PostgreSQL source tables.

Provides connection management and the two statements the archiver issues
against each source table: a bounded range read and a range delete. Table
names are composed as quoted identifiers; cutoff and limit are always bound
parameters.
"""

import logging
from datetime import datetime
from typing import Any

import psycopg2
from psycopg2 import sql
from psycopg2.extensions import connection as PGConnection

logger = logging.getLogger(__name__)

SOURCE_COLUMNS = ("id", "timestamp", "device_id", "value")

SESSION_OPTIONS = "-c timezone=UTC"


def get_conn(dsn: str) -> PGConnection:
    """
    Open a PostgreSQL connection in autocommit mode.

    Each DELETE commits on its own, so a failure on one table never rolls back
    another table that was already purged. The session time zone is pinned to
    UTC so naive `timestamp` columns compare against the cutoff in the same
    zone the archived rows are read in.

    Args:
        dsn: libpq connection string or URI

    Returns:
        Open psycopg2 connection

    Raises:
        psycopg2.Error: If the connection cannot be established
    """
    conn = psycopg2.connect(dsn, options=SESSION_OPTIONS)
    conn.autocommit = True
    return conn


def table_identifier(table: str) -> sql.Identifier:
    """Quote a plain or schema-qualified table name."""
    return sql.Identifier(*table.split("."))


def select_expired_query(table: str) -> sql.Composed:
    """Bounded newest-first read of rows older than the cutoff."""
    return sql.SQL(
        "SELECT {columns} FROM {table} "
        "WHERE {ts} < %s "
        "ORDER BY {ts} DESC "
        "LIMIT %s"
    ).format(
        columns=sql.SQL(", ").join(sql.Identifier(c) for c in SOURCE_COLUMNS),
        table=table_identifier(table),
        ts=sql.Identifier("timestamp"),
    )


def delete_expired_query(table: str) -> sql.Composed:
    """Delete every row older than the cutoff."""
    return sql.SQL("DELETE FROM {table} WHERE {ts} < %s").format(
        table=table_identifier(table),
        ts=sql.Identifier("timestamp"),
    )


class SourceDatabase:
    """Thin wrapper over a psycopg2 connection holding the archiver's statements."""

    def __init__(self, conn: PGConnection) -> None:
        self.conn = conn

    @classmethod
    def connect(cls, dsn: str) -> "SourceDatabase":
        return cls(get_conn(dsn))

    def ping(self) -> None:
        """Round-trip a trivial query to prove the connection is usable."""
        with self.conn.cursor() as cur:
            cur.execute("SELECT 1")
            cur.fetchone()

    def fetch_expired(self, table: str, cutoff: datetime, limit: int) -> list[tuple[Any, ...]]:
        """
        Read up to `limit` rows with timestamp < cutoff, newest first.

        Returns:
            Raw rows as (id, timestamp, device_id, value) tuples

        Raises:
            psycopg2.Error: If the query fails
        """
        with self.conn.cursor() as cur:
            cur.execute(select_expired_query(table), (cutoff, limit))
            return cur.fetchall()

    def delete_expired(self, table: str, cutoff: datetime) -> int:
        """
        Delete all rows with timestamp < cutoff.

        Returns:
            Number of rows deleted

        Raises:
            psycopg2.Error: If the statement fails
        """
        with self.conn.cursor() as cur:
            cur.execute(delete_expired_query(table), (cutoff,))
            return cur.rowcount

    def close(self) -> None:
        if not self.conn.closed:
            self.conn.close()
            logger.debug("Database connection closed")
