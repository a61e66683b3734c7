"""
System endpoints: health, database status, backup and initialization.

A database is "initialized" once it holds at least one person. Sample data
and EOS imports are only accepted on an uninitialized database.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError

from scorecard.api.deps import get_backup_service, get_calendar, get_hub, get_store
from scorecard.db.store import DataStore
from scorecard.realtime.hub import ChangeHub
from scorecard.schemas.common import HealthResponse
from scorecard.schemas.eos import EosImportRequest
from scorecard.schemas.system import BackupResponse, InitializeResponse, StatusResponse
from scorecard.services.backup import BackupService
from scorecard.services.eos_import import import_eos_data
from scorecard.services.seed import SeedSummary, create_sample_data
from scorecard.services.weeks import WeekCalendar

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(code=200, message="API is healthy.")


@router.get("/status", response_model=StatusResponse)
async def get_status(
    store: DataStore = Depends(get_store),
    backup: BackupService = Depends(get_backup_service)
):
    """Whether the database holds data, plus its init and last backup dates."""
    async with store.transaction() as session:
        initialized = await store.is_initialized(session)
    db_status = backup.status_file.read()
    return StatusResponse(
        initialized=initialized,
        init_date=db_status.init_date,
        last_backup_date=db_status.last_backup_date
    )


@router.post("/backup", response_model=BackupResponse, response_model_exclude_none=True)
async def create_backup(
    force: bool = Query(False),
    backup: BackupService = Depends(get_backup_service)
):
    """
    Back up the database.

    Skipped (``success: false``) while the database or the last backup is
    younger than the minimum backup age, unless ``force`` is set.
    """
    result = await backup.run(force=force)
    return BackupResponse(
        success=result.success,
        message=result.message,
        backup_path=result.backup_path,
        backup_date=result.backup_date,
        init_date=result.init_date,
        last_backup_date=result.last_backup_date,
        min_backup_age=result.min_backup_age
    )


async def _ensure_uninitialized(store: DataStore) -> None:
    async with store.transaction() as session:
        if await store.is_initialized(session):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Database already initialized"
            )


async def _announce_initialized(hub: ChangeHub, summary: SeedSummary, source: str) -> None:
    await hub.notify("database_initialized", {
        "source": source,
        "people": summary.people,
        "metrics": summary.metrics,
        "weeks": summary.weeks,
        "values": summary.values,
    })


@router.post("/initialize/sample", response_model=InitializeResponse)
async def initialize_sample(
    store: DataStore = Depends(get_store),
    calendar: WeekCalendar = Depends(get_calendar),
    hub: ChangeHub = Depends(get_hub)
):
    """Fill an empty database with sample people, metrics, weeks and values."""
    await _ensure_uninitialized(store)

    async with store.transaction() as session:
        summary = await create_sample_data(session, calendar.today())

    logger.info("Database initialized with sample data")
    await _announce_initialized(hub, summary, "sample")
    return InitializeResponse(
        message="Database initialized with sample data",
        people=summary.people,
        metrics=summary.metrics,
        weeks=summary.weeks,
        values=summary.values
    )


@router.post("/initialize/eos", response_model=InitializeResponse)
async def initialize_eos(
    data: EosImportRequest,
    store: DataStore = Depends(get_store),
    hub: ChangeHub = Depends(get_hub)
):
    """Import an EOS One scorecard export into an empty database."""
    await _ensure_uninitialized(store)

    try:
        async with store.transaction() as session:
            summary = await import_eos_data(session, data.data)
    except IntegrityError as e:
        logger.error(f"EOS import failed: {e.orig}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Import data is inconsistent (duplicate weeks or people)"
        )

    logger.info("Database initialized from EOS export")
    await _announce_initialized(hub, summary, "eos")
    return InitializeResponse(
        message="Database initialized from EOS export",
        people=summary.people,
        metrics=summary.metrics,
        weeks=summary.weeks,
        values=summary.values
    )
