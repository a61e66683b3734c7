"""
Database backup service.

Keeps a small status file (``status.json``) next to the database with the
date the database was first seen and the date of the last backup, and copies
the database to ``scorecard.YYYY-MM-DD.db`` at most once per backup period.
"""
import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from pydantic import ValidationError

from scorecard.core.errors import BackupError
from scorecard.db.store import DataStore
from scorecard.schemas.system import DatabaseStatus

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StatusFile:
    """Read/write access to the database status file."""

    def __init__(self, path: str, clock: Callable[[], datetime] = _utcnow):
        self.path = path
        self._clock = clock

    def read(self) -> DatabaseStatus:
        """Current status; a fresh one (initialized now) is written if missing or unreadable."""
        if os.path.exists(self.path):
            try:
                with open(self.path, "r", encoding="utf-8") as fh:
                    return DatabaseStatus.model_validate(json.load(fh))
            except (OSError, ValueError, ValidationError) as e:
                logger.error(f"Error reading status file {self.path}: {e}")

        status = DatabaseStatus(init_date=self._clock())
        self.write(status)
        return status

    def write(self, status: DatabaseStatus) -> None:
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as fh:
            fh.write(status.model_dump_json(by_alias=True, indent=2))

    def update(self, **changes) -> DatabaseStatus:
        status = self.read().model_copy(update=changes)
        self.write(status)
        return status


@dataclass
class BackupResult:
    success: bool
    message: str
    backup_path: Optional[str] = None
    backup_date: Optional[datetime] = None
    init_date: Optional[datetime] = None
    last_backup_date: Optional[datetime] = None
    min_backup_age: Optional[str] = None


class BackupService:
    """Creates dated snapshots of the database, respecting the minimum backup age."""

    def __init__(
        self,
        store: DataStore,
        status_file: StatusFile,
        *,
        min_age_days: int = 7,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.status_file = status_file
        self.min_age = timedelta(days=min_age_days)
        self._clock = clock

    def backup_path_for(self, when: datetime) -> str:
        directory = os.path.dirname(os.path.abspath(self.store.database_file or "."))
        return os.path.join(directory, f"scorecard.{when.date().isoformat()}.db")

    def _skip(self, message: str, status: DatabaseStatus) -> BackupResult:
        logger.info(f"Skipping backup: {message}")
        return BackupResult(
            success=False,
            message=message,
            init_date=status.init_date,
            last_backup_date=status.last_backup_date,
            min_backup_age=f"{self.min_age.days} days",
        )

    async def run(self, force: bool = False) -> BackupResult:
        """
        Back up the database unless it is too new or was backed up recently.

        ``force`` skips both age checks. Raises BackupError if the copy fails.
        """
        status = self.status_file.read()
        now = self._clock()

        if not force:
            if now - status.init_date < self.min_age:
                return self._skip(
                    f"Database is too new for backup (less than {self.min_age.days} days since initialization)",
                    status,
                )
            if status.last_backup_date and now - status.last_backup_date < self.min_age:
                return self._skip(
                    f"Last backup is too recent (less than {self.min_age.days} days ago)",
                    status,
                )

        path = self.backup_path_for(now)
        try:
            await self.store.snapshot(path)
        except Exception as e:
            logger.error(f"Error creating database backup: {e}")
            raise BackupError(f"Failed to create backup: {e}") from e

        self.status_file.update(last_backup_date=now)
        logger.info(f"Database backup created: {path}")
        return BackupResult(
            success=True,
            message="Backup created successfully",
            backup_path=path,
            backup_date=now,
        )
