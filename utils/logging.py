"""
Logging Utility - Human-Readable Status Logging

Provides centralized logging configuration for the archiver. Progress lines go
to stdout; warnings, errors and tracebacks go to stderr so that a failed run
is visible on the error stream.

Usage:
    import logging
    from utils.logging import setup_logging

    setup_logging("INFO")
    logger = logging.getLogger(__name__)
    logger.info("Read %d records from %s", count, table)
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class _BelowLevelFilter(logging.Filter):
    """Pass only records strictly below a given level."""

    def __init__(self, level: int) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


def setup_logging(level: str = "INFO") -> None:
    """Configure application-wide logging.

    Replaces any handlers already installed on the root logger, so calling it
    twice (e.g. once with defaults, once after settings load) is safe.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    formatter = logging.Formatter(LOG_FORMAT)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    stdout_handler.addFilter(_BelowLevelFilter(logging.WARNING))

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(logging.WARNING)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[stdout_handler, stderr_handler],
        force=True,
    )

    # botocore is chatty at DEBUG
    logging.getLogger("botocore").setLevel(logging.WARNING)
