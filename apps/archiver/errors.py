"""
Archiver exceptions.

Every stage wraps the library error it hits in one of these, naming the stage
and (where there is one) the table, and lets it propagate to the entry point.
"""

from utils.schemas import RunStage


class ArchiveError(Exception):
    """Base class for failures of an archival run."""

    stage: RunStage = RunStage.FAILED

    def __init__(self, message: str, table: str | None = None) -> None:
        super().__init__(message)
        self.table = table


class ConnectivityError(ArchiveError):
    """Database or object store unreachable."""

    stage = RunStage.IDLE


class ExtractError(ArchiveError):
    stage = RunStage.EXTRACTING


class EncodeError(ArchiveError):
    stage = RunStage.ENCODING


class UploadError(ArchiveError):
    stage = RunStage.UPLOADING


class PurgeError(ArchiveError):
    stage = RunStage.PURGING
