"""
Purger - Delete Archived Rows

Deletes every row older than the run's cutoff from each table. Must only be
called after the upload has succeeded, and always with the cutoff computed at
run start, never a fresh one.
"""

import logging
from datetime import datetime
from typing import Iterable

import psycopg2

from apps.archiver.errors import PurgeError
from utils.db import SourceDatabase

logger = logging.getLogger(__name__)


def purge_table(db: SourceDatabase, table: str, cutoff: datetime) -> int:
    """
    Delete one table's rows with timestamp < cutoff.

    Returns:
        Number of rows deleted

    Raises:
        PurgeError: If the delete fails
    """
    try:
        deleted = db.delete_expired(table, cutoff)
    except psycopg2.Error as e:
        raise PurgeError(f"deleting archived records from {table}: {e}", table=table) from e

    logger.info("Deleted %d records from table %s", deleted, table)
    return deleted


def purge_sources(db: SourceDatabase, tables: Iterable[str], cutoff: datetime) -> dict[str, int]:
    """
    Purge every table in order.

    Tables purged before a failure stay purged; the remaining ones are left
    for the next run.

    Returns:
        Mapping of table name to rows deleted
    """
    deleted: dict[str, int] = {}
    for table in tables:
        deleted[table] = purge_table(db, table, cutoff)
    return deleted
