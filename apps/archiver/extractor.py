"""
Extractor - Read Expired Rows From Source Tables

Reads rows older than the run's cutoff from each configured table, newest
first and at most `batch_size` per table, and tags each one with the table it
came from. Rows are only read here, so aborting halfway needs no rollback.
"""

import logging
from datetime import datetime
from typing import Iterable

import psycopg2

from apps.archiver.errors import ExtractError
from utils.db import SourceDatabase
from utils.schemas import ArchiveRecord

logger = logging.getLogger(__name__)

# Emit a progress line every this many rows
PROGRESS_EVERY = 100


def extract_table(
    db: SourceDatabase,
    table: str,
    cutoff: datetime,
    batch_size: int,
) -> list[ArchiveRecord]:
    """
    Read one table's expired rows.

    Args:
        db: Source database
        table: Table name (already validated against the identifier allow-list)
        cutoff: Rows with timestamp strictly before this are returned
        batch_size: Maximum number of rows to return

    Returns:
        Records in newest-first order, each tagged with `table`

    Raises:
        ValueError: If table is empty or batch_size is not positive
        ExtractError: If the query fails or a row cannot be converted
    """
    if not table:
        raise ValueError("table name must be a non-empty string")
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    logger.info("Executing query for table %s with cutoff date: %s", table, cutoff.isoformat())

    try:
        rows = db.fetch_expired(table, cutoff, batch_size)
    except psycopg2.Error as e:
        raise ExtractError(f"querying old records from {table}: {e}", table=table) from e

    logger.info("Starting to read records from table: %s", table)

    records: list[ArchiveRecord] = []
    for row_num, row in enumerate(rows, 1):
        try:
            records.append(ArchiveRecord.from_row(row, table_name=table))
        except ValueError as e:
            raise ExtractError(f"scanning row {row_num} from {table}: {e}", table=table) from e

        if row_num % PROGRESS_EVERY == 0:
            logger.info("Read %d records from %s", row_num, table)

    logger.info("Finished reading %d records from %s", len(records), table)
    return records


def extract_batch(
    db: SourceDatabase,
    tables: Iterable[str],
    cutoff: datetime,
    batch_size: int,
) -> list[ArchiveRecord]:
    """
    Collect the run's batch across all tables.

    Tables are read in the order given; the first failure aborts the whole
    batch and records already read are dropped with it.

    Returns:
        All records, grouped by table, newest first within each table
    """
    batch: list[ArchiveRecord] = []
    for table in tables:
        batch.extend(extract_table(db, table, cutoff, batch_size))
    return batch
