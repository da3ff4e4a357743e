"""
Encoder - Parquet Serialization of the Archive Batch

Writes the whole batch to one Snappy-compressed Parquet file with a fixed
five-column schema. Timestamps are stored as int64 nanoseconds since the Unix
epoch (UTC) so any query engine can read them without a logical type.

Rows are written in batch order: grouped by table, newest first within a
table. Nothing is re-sorted.
"""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Sequence

import pyarrow as pa
import pyarrow.parquet as pq

from apps.archiver.errors import EncodeError
from utils.schemas import ArchiveRecord

logger = logging.getLogger(__name__)

COMPRESSION = "snappy"

ARCHIVE_SCHEMA = pa.schema(
    [
        pa.field("id", pa.int64(), nullable=False),
        pa.field("timestamp", pa.int64(), nullable=False),
        pa.field("device_id", pa.string(), nullable=False),
        pa.field("value", pa.float64(), nullable=False),
        pa.field("table_name", pa.string(), nullable=False),
    ]
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MICROSECOND = timedelta(microseconds=1)


def to_nanos(dt: datetime) -> int:
    """Exact nanoseconds since the epoch for an aware datetime."""
    return (dt - _EPOCH) // _MICROSECOND * 1000


def from_nanos(ns: int) -> datetime:
    """Inverse of to_nanos (sub-microsecond digits are dropped)."""
    return _EPOCH + timedelta(microseconds=ns // 1000)


def _to_columns(records: Sequence[ArchiveRecord]) -> dict[str, list]:
    return {
        "id": [r.id for r in records],
        "timestamp": [to_nanos(r.timestamp) for r in records],
        "device_id": [r.device_id for r in records],
        "value": [r.value for r in records],
        "table_name": [r.table_name for r in records],
    }


def write_archive(records: Sequence[ArchiveRecord], path: str | Path) -> Path:
    """
    Write records to a Parquet file.

    The writer is closed whether or not the write succeeds. On failure the
    partial file stays on disk and must not be uploaded.

    Args:
        records: Batch to encode, in output order
        path: Destination file (parent directories are created)

    Returns:
        Path of the finalized file

    Raises:
        EncodeError: If the table cannot be built, written or finalized
    """
    path = Path(path)
    logger.info("Starting to write %d records to parquet file: %s", len(records), path)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        table = pa.Table.from_pydict(_to_columns(records), schema=ARCHIVE_SCHEMA)
        with pq.ParquetWriter(str(path), ARCHIVE_SCHEMA, compression=COMPRESSION) as writer:
            writer.write_table(table)
    except (pa.ArrowException, OSError, OverflowError) as e:
        raise EncodeError(f"writing parquet file {path}: {e}") from e

    logger.info("Wrote %d records to %s", table.num_rows, path)
    return path


def read_archive(path: str | Path) -> list[ArchiveRecord]:
    """
    Decode an archive file back into records.

    Args:
        path: Parquet file produced by write_archive

    Returns:
        Records in file order
    """
    table = pq.read_table(str(path))
    return [
        ArchiveRecord(
            id=row["id"],
            timestamp=from_nanos(row["timestamp"]),
            device_id=row["device_id"],
            value=row["value"],
            table_name=row["table_name"],
        )
        for row in table.to_pylist()
    ]
