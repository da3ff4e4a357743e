"""
Shared pytest fixtures.

FakeSourceDatabase mirrors the SourceDatabase interface over in-memory tables
so pipeline behaviour can be checked without a PostgreSQL server.
"""

from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import MagicMock

import psycopg2
import pytest

from utils.config import Settings

NOW = datetime(2024, 6, 30, 12, 0, 0, tzinfo=timezone.utc)
CUTOFF = NOW - timedelta(days=90)


def ts(*args: int) -> datetime:
    """Shorthand for an aware UTC datetime."""
    return datetime(*args, tzinfo=timezone.utc)


class FakeSourceDatabase:
    """In-memory stand-in for SourceDatabase."""

    def __init__(self, tables: dict[str, list[tuple[Any, ...]]]):
        self.tables = {name: list(rows) for name, rows in tables.items()}
        self.fail_on_fetch: set[str] = set()
        self.fail_on_delete: set[str] = set()
        self.calls: list[tuple[Any, ...]] = []
        self.closed = False

    def ping(self) -> None:
        self.calls.append(("ping",))

    def fetch_expired(self, table: str, cutoff: datetime, limit: int) -> list[tuple[Any, ...]]:
        self.calls.append(("fetch", table, cutoff, limit))
        if table in self.fail_on_fetch:
            raise psycopg2.ProgrammingError(f'relation "{table}" does not exist')
        rows = [row for row in self.tables.get(table, []) if row[1] < cutoff]
        rows.sort(key=lambda row: row[1], reverse=True)
        return rows[:limit]

    def delete_expired(self, table: str, cutoff: datetime) -> int:
        self.calls.append(("delete", table, cutoff))
        if table in self.fail_on_delete:
            raise psycopg2.OperationalError("server closed the connection unexpectedly")
        before = len(self.tables.get(table, []))
        self.tables[table] = [row for row in self.tables.get(table, []) if row[1] >= cutoff]
        return before - len(self.tables[table])

    def close(self) -> None:
        self.closed = True

    def calls_of(self, kind: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == kind]


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings for two tables with the work dir in a temp directory."""
    return Settings(
        PG_CONN_STRING="postgresql://test@localhost:5432/test",
        TABLE_NAMES="a,b",
        S3_BUCKET="test-bucket",
        WORK_DIR=str(tmp_path / "work"),
    )


@pytest.fixture
def source_db() -> FakeSourceDatabase:
    """Table a: three expired rows and one fresh row. Table b: one fresh row."""
    return FakeSourceDatabase(
        {
            "a": [
                (1, ts(2024, 3, 10, 6, 0, 0), "sensor-1", 21.5),
                (2, ts(2024, 3, 20, 8, 15, 0), "sensor-2", 22.25),
                (3, ts(2024, 2, 1, 0, 0, 0), "sensor-1", -4.0),
                (4, ts(2024, 6, 1, 0, 0, 0), "sensor-3", 19.0),
            ],
            "b": [
                (1, ts(2024, 6, 15, 0, 0, 0), "sensor-9", 1.0),
            ],
        }
    )


@pytest.fixture
def s3_client() -> MagicMock:
    return MagicMock()
