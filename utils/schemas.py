"""
Pydantic Schemas - Data Validation Models

Defines the schemas that flow through the archival pipeline:
- ArchiveRecord: one source row tagged with its table
- ArchiveRunResult: outcome of one run
- RunStage: position of a run in its state machine

Usage:
    from utils.schemas import ArchiveRecord

    record = ArchiveRecord.from_row(row, table_name="iot_data")
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Sequence

from pydantic import BaseModel, Field, validator


class RunStage(str, Enum):
    """Stages of one archival run."""

    IDLE = "idle"
    EXTRACTING = "extracting"
    ENCODING = "encoding"
    UPLOADING = "uploading"
    PURGING = "purging"
    DONE = "done"
    FAILED = "failed"


class ArchiveRecord(BaseModel):
    """One archived data point.

    Validates against the source schema contract:
    - id: integer
    - timestamp: instant, normalized to UTC (naive values are taken as UTC)
    - device_id: string
    - value: float
    - table_name: source table, not stored in the source row itself
    """

    id: int = Field(..., description="Source-assigned row ID")
    timestamp: datetime = Field(..., description="Measurement time (UTC)")
    device_id: str = Field(..., description="Origin device")
    value: float = Field(..., description="Measurement value")
    table_name: str = Field(..., min_length=1, description="Source table")

    class Config:
        frozen = True

    @validator("timestamp")
    def normalize_timestamp(cls, v: datetime) -> datetime:
        """Make every timestamp timezone-aware UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @classmethod
    def from_row(cls, row: Sequence[Any], table_name: str) -> "ArchiveRecord":
        """Build a record from an (id, timestamp, device_id, value) row.

        Raises:
            ValueError: If the row does not have exactly four columns
            pydantic.ValidationError: If a column has the wrong type
        """
        if len(row) != 4:
            raise ValueError(f"expected 4 columns, got {len(row)}")

        row_id, timestamp, device_id, value = row
        return cls(
            id=row_id,
            timestamp=timestamp,
            device_id=device_id,
            value=value,
            table_name=table_name,
        )


class ArchiveRunResult(BaseModel):
    """Summary of one archival run."""

    started_at: datetime
    finished_at: datetime
    cutoff: datetime
    records_extracted: int
    object_key: Optional[str] = None
    local_path: Optional[str] = None
    deleted: dict[str, int] = Field(default_factory=dict)

    @property
    def records_deleted(self) -> int:
        return sum(self.deleted.values())
