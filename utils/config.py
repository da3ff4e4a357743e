"""
Configuration Utility - Environment Variables Management

Centralized configuration loading from environment variables (and an optional
.env file) using pydantic-settings. The settings object is built once at
process start and handed to every stage explicitly.

Usage:
    from utils.config import get_settings

    settings = get_settings()
    tables = settings.table_names
    bucket = settings.S3_BUCKET
"""

import re
from functools import lru_cache

from pydantic import Field, validator
from pydantic_settings import BaseSettings

# Rows read per table per run
BATCH_SIZE = 100

# Rows older than this are archived and purged
RETENTION_DAYS = 90

# Plain or schema-qualified identifier, no quoting allowed
_TABLE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def parse_table_names(raw: str) -> list[str]:
    """Split a comma-separated table list and validate every entry.

    Args:
        raw: Value such as "iot_data, telemetry.readings"

    Returns:
        Table names in the order given, whitespace stripped

    Raises:
        ValueError: If an entry is empty, duplicated, or not a plain identifier
    """
    names = [name.strip() for name in raw.split(",")]

    seen: set[str] = set()
    for name in names:
        if not name:
            raise ValueError(f"TABLE_NAMES contains an empty entry: {raw!r}")
        if not _TABLE_NAME_RE.match(name):
            raise ValueError(f"Invalid table name: {name!r}")
        if name in seen:
            raise ValueError(f"Duplicate table name: {name!r}")
        seen.add(name)

    return names


class Settings(BaseSettings):
    """Archiver settings loaded from environment variables."""

    # Source database
    PG_CONN_STRING: str = Field(default="postgresql://localhost:5432/iot?sslmode=disable")
    TABLE_NAMES: str = Field(default="iot_data")

    # Object storage
    S3_BUCKET: str = Field(default="my-iot-archive", min_length=1)
    S3_ENDPOINT_URL: str | None = Field(default=None)

    # Local scratch space for the encoded file
    WORK_DIR: str = Field(default="/tmp")

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")

    @validator("TABLE_NAMES")
    def validate_table_names(cls, v: str) -> str:
        """Reject table lists that would need quoting or are ambiguous."""
        parse_table_names(v)
        return v

    @property
    def table_names(self) -> list[str]:
        return parse_table_names(self.TABLE_NAMES)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Singleton Settings instance
    """
    return Settings()
