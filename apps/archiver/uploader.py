"""
Uploader - Object Storage Transfer

Derives the time-partitioned object key from the newest record in the batch
and transfers the encoded file with a single PUT.

Key layout:
    year=<YYYY>/month=<MM>/multi_table_<YYYYMMDD_HHMMSS>.parquet
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from apps.archiver.errors import UploadError
from utils.s3 import put_file
from utils.schemas import ArchiveRecord

logger = logging.getLogger(__name__)

DISCRIMINATOR = "multi_table"


def latest_timestamp(records: Sequence[ArchiveRecord]) -> datetime:
    """
    Newest timestamp across the whole batch.

    Raises:
        ValueError: If records is empty
    """
    if not records:
        raise ValueError("cannot take the latest timestamp of an empty batch")
    return max(record.timestamp for record in records)


def build_object_key(latest: datetime, discriminator: str = DISCRIMINATOR) -> str:
    """
    Build the partitioned object key for an artifact.

    Args:
        latest: Newest record timestamp in the batch
        discriminator: Token naming the sources the artifact covers

    Returns:
        Key such as "year=2024/month=03/multi_table_20240317_081500.parquet"
    """
    latest = latest.astimezone(timezone.utc)
    return (
        f"year={latest.year:04d}/month={latest.month:02d}/"
        f"{discriminator}_{latest.strftime('%Y%m%d_%H%M%S')}.parquet"
    )


def upload_archive(client: Any, local_path: str | Path, bucket: str, key: str) -> str:
    """
    Upload the finalized archive exactly once.

    Args:
        client: boto3 S3 client
        local_path: Finalized Parquet file
        bucket: Destination bucket
        key: Destination object key

    Returns:
        The s3:// URI of the stored object

    Raises:
        UploadError: If the file cannot be read or the PUT fails
    """
    uri = f"s3://{bucket}/{key}"
    logger.info("Uploading to S3: %s", uri)

    try:
        put_file(client, str(local_path), bucket, key)
    except (BotoCoreError, ClientError, OSError, ValueError) as e:
        raise UploadError(f"uploading to S3 {uri}: {e}") from e

    logger.info("Successfully uploaded to S3")
    return uri
