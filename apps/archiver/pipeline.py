"""
Archival Pipeline - Extract, Encode, Upload, Purge

Runs the four stages strictly in order, each finishing for every table before
the next begins. A failure in any stage marks the run FAILED and propagates;
later stages never run. In particular nothing is deleted unless the upload
returned successfully.

Usage:
    from apps.archiver.pipeline import run_archival
    from utils.config import get_settings

    result = run_archival(get_settings())
"""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import psycopg2
from botocore.exceptions import BotoCoreError

from apps.archiver.encoder import write_archive
from apps.archiver.errors import ConnectivityError
from apps.archiver.extractor import extract_batch
from apps.archiver.purger import purge_sources
from apps.archiver.uploader import build_object_key, latest_timestamp, upload_archive
from utils.config import BATCH_SIZE, RETENTION_DAYS, Settings
from utils.db import SourceDatabase
from utils.s3 import get_s3_client
from utils.schemas import ArchiveRunResult, RunStage

logger = logging.getLogger(__name__)


def compute_cutoff(now: datetime, retention_days: int) -> datetime:
    """Instant separating rows to archive (strictly older) from rows to keep."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now - timedelta(days=retention_days)


class ArchivePipeline:
    """
    One archival run over the configured tables.

    Handles:
    - Cutoff computation, once per run
    - Stage ordering and the run state machine
    - Local artifact placement under WORK_DIR
    """

    def __init__(
        self,
        settings: Settings,
        db: SourceDatabase,
        s3_client: Any,
        batch_size: int = BATCH_SIZE,
        retention_days: int = RETENTION_DAYS,
    ) -> None:
        self.settings = settings
        self.db = db
        self.s3_client = s3_client
        self.batch_size = batch_size
        self.retention_days = retention_days
        self.tables = settings.table_names
        self.stage = RunStage.IDLE

    def run(self, now: datetime | None = None) -> ArchiveRunResult:
        """
        Execute one run.

        Args:
            now: Reference time for the cutoff; defaults to the current UTC time

        Returns:
            Run summary; object_key is None when there was nothing to archive

        Raises:
            ArchiveError: If any stage fails (the run is left in FAILED)
        """
        started_at = datetime.now(timezone.utc)
        cutoff = compute_cutoff(now or started_at, self.retention_days)

        logger.info(
            "Starting archival process for tables: %s with batch size: %d",
            self.tables, self.batch_size,
        )

        try:
            self.stage = RunStage.EXTRACTING
            records = extract_batch(self.db, self.tables, cutoff, self.batch_size)

            if not records:
                logger.info("No records to archive")
                self.stage = RunStage.DONE
                return ArchiveRunResult(
                    started_at=started_at,
                    finished_at=datetime.now(timezone.utc),
                    cutoff=cutoff,
                    records_extracted=0,
                )

            # Key is fixed by the newest record across every table
            key = build_object_key(latest_timestamp(records))
            local_path = Path(self.settings.WORK_DIR) / Path(key).name

            self.stage = RunStage.ENCODING
            write_archive(records, local_path)
            logger.info("Successfully wrote parquet file")

            self.stage = RunStage.UPLOADING
            uri = upload_archive(self.s3_client, local_path, self.settings.S3_BUCKET, key)

            self.stage = RunStage.PURGING
            deleted = purge_sources(self.db, self.tables, cutoff)

        except Exception:
            failed_stage = self.stage
            self.stage = RunStage.FAILED
            logger.debug("Run failed during stage %s", failed_stage.value)
            raise

        self.stage = RunStage.DONE
        logger.info("Successfully archived %d total records to %s", len(records), uri)

        return ArchiveRunResult(
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
            cutoff=cutoff,
            records_extracted=len(records),
            object_key=key,
            local_path=str(local_path),
            deleted=deleted,
        )


def run_archival(settings: Settings) -> ArchiveRunResult:
    """
    Connect to the source database and object store, then run the pipeline.

    The database connection is always closed before returning.

    Raises:
        ConnectivityError: If the database or S3 client cannot be set up
        ArchiveError: If any stage fails
    """
    try:
        db = SourceDatabase.connect(settings.PG_CONN_STRING)
    except psycopg2.Error as e:
        raise ConnectivityError(f"connecting to postgres: {e}") from e

    try:
        try:
            db.ping()
        except psycopg2.Error as e:
            raise ConnectivityError(f"testing database connection: {e}") from e

        logger.info("Successfully connected to database")

        try:
            s3_client = get_s3_client(settings.S3_ENDPOINT_URL)
        except BotoCoreError as e:
            raise ConnectivityError(f"loading AWS config: {e}") from e

        return ArchivePipeline(settings, db, s3_client).run()

    finally:
        db.close()
