"""
S3 Client Utilities

Provides an S3 client built from the standard boto3 credential chain and a
single-attempt file upload.
"""

import logging
from pathlib import Path
from typing import Any

import boto3

logger = logging.getLogger(__name__)


def get_s3_client(endpoint_url: str | None = None) -> Any:
    """
    Create an S3 client.

    Credentials and region come from the usual boto3 sources (environment,
    shared config, instance metadata).

    Args:
        endpoint_url: Optional endpoint override for S3-compatible stores

    Returns:
        boto3 S3 client

    Raises:
        botocore.exceptions.BotoCoreError: If the client cannot be configured
    """
    return boto3.client("s3", endpoint_url=endpoint_url or None)


def put_file(client: Any, local_path: str, bucket: str, key: str) -> None:
    """
    Upload a local file as a single object with one PUT request.

    The file is read fully into memory first; archives are small enough for a
    single request.

    Args:
        client: boto3 S3 client
        local_path: Path to local file to upload
        bucket: Destination bucket
        key: Destination object key

    Raises:
        FileNotFoundError: If local file doesn't exist
        ValueError: If local path is not a regular file
        botocore.exceptions.BotoCoreError, botocore.exceptions.ClientError:
            If the PUT fails
    """
    local_file = Path(local_path)
    if not local_file.exists():
        raise FileNotFoundError(f"Local file not found: {local_path}")

    if not local_file.is_file():
        raise ValueError(f"Local path is not a file: {local_path}")

    body = local_file.read_bytes()

    client.put_object(Bucket=bucket, Key=key, Body=body)

    logger.debug("PUT s3://%s/%s (%d bytes)", bucket, key, len(body))
