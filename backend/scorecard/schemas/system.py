"""
Schemas for database status, backup and initialization.
"""
from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from scorecard.schemas.common import CamelModel


class DatabaseStatus(CamelModel):
    """Contents of the status file kept next to the database."""
    init_date: datetime
    last_backup_date: Optional[datetime] = None

    @field_validator("init_date", "last_backup_date")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class StatusResponse(CamelModel):
    initialized: bool
    init_date: datetime
    last_backup_date: Optional[datetime] = None


class BackupResponse(CamelModel):
    success: bool
    message: str
    backup_path: Optional[str] = None
    backup_date: Optional[datetime] = None
    init_date: Optional[datetime] = None
    last_backup_date: Optional[datetime] = None
    min_backup_age: Optional[str] = None


class InitializeResponse(BaseModel):
    success: bool = True
    message: str
    people: int = 0
    metrics: int = 0
    weeks: int = 0
    values: int = Field(0, description="Weekly values written")
