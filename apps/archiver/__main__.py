"""
Archiver Module Entry Point

Allows execution via: python -m apps.archiver (or the iot-archiver script)

Performs exactly one archival run and exits:
- 0 on success, including when there was nothing to archive
- 1 on a configuration error or a failed stage
- 1 with a traceback on any unexpected fault
"""

import logging
import sys

from pydantic import ValidationError

from apps.archiver.errors import ArchiveError
from apps.archiver.pipeline import run_archival
from utils.config import get_settings
from utils.logging import setup_logging

logger = logging.getLogger(__name__)


def main() -> int:
    """Load settings, run the archival once, and map the outcome to an exit code."""
    setup_logging()

    try:
        settings = get_settings()
    except ValidationError as e:
        logger.error("error: invalid configuration: %s", e)
        return 1

    setup_logging(settings.LOG_LEVEL)

    try:
        result = run_archival(settings)
    except ArchiveError as e:
        logger.error("error: %s", e)
        return 1

    if result.object_key is not None:
        logger.info(
            "Run complete: extracted=%d, deleted=%d, key=%s",
            result.records_extracted, result.records_deleted, result.object_key,
        )
    return 0


def cli() -> None:
    """Process entry point; nothing escapes without a diagnostic."""
    try:
        code = main()
    except Exception as e:
        logger.critical("Unrecovered fault: %s", e, exc_info=True)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    cli()
