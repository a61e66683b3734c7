"""
Scorecard FastAPI Application - Main entry point.

Scorecard tracks weekly business metrics against their targets:

- People own metrics
- Metrics are measured once per completed Monday..Sunday week
- Each measurement (weekly value) is compared against the metric's target

REST endpoints live under /api; connected browsers receive change events
over the /api/ws WebSocket. Two background jobs run in-process: rolling the
week calendar forward and taking periodic database backups.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scorecard import __version__
from scorecard.api.v1 import api_router
from scorecard.core.config import Settings, settings as default_settings
from scorecard.core.errors import ScorecardError, scorecard_error_handler
from scorecard.core.logging import configure_logging
from scorecard.db.store import DataStore
from scorecard.realtime.hub import ChangeHub
from scorecard.services.backup import BackupService, StatusFile
from scorecard.services.scheduler import Scheduler
from scorecard.services.weeks import WeekCalendar

logger = logging.getLogger(__name__)


def build_services(app: FastAPI, config: Settings, store: Optional[DataStore] = None) -> None:
    """Create the long-lived collaborators and attach them to ``app.state``."""
    store = store or DataStore(config.database_url, echo=config.DEBUG and config.LOG_LEVEL == "DEBUG")
    hub = ChangeHub()
    app.state.store = store
    app.state.hub = hub
    app.state.calendar = WeekCalendar(store, hub, timezone=config.SCORECARD_TIMEZONE)
    app.state.backup = BackupService(
        store,
        StatusFile(config.status_file_path),
        min_age_days=config.MIN_BACKUP_AGE_DAYS
    )


async def _scheduled_backup(backup: BackupService) -> None:
    if backup.store.database_file is None:
        logger.debug("Skipping scheduled backup: database is not a SQLite file")
        return
    result = await backup.run()
    if result.success:
        logger.info(f"Scheduled backup written to {result.backup_path}")


def create_app(config: Settings = default_settings) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan - startup and shutdown."""
        build_services(app, config)
        await app.state.store.create_all()
        app.state.backup.status_file.read()

        # Catch up on weeks that ended while the server was down
        try:
            await app.state.calendar.roll_forward()
        except ScorecardError as e:
            logger.error(f"Initial week update failed: {e.message}")

        scheduler = Scheduler()
        scheduler.every("week-update", config.WEEK_CHECK_INTERVAL_SECONDS, app.state.calendar.roll_forward)
        scheduler.every(
            "backup",
            config.BACKUP_CHECK_INTERVAL_SECONDS,
            lambda: _scheduled_backup(app.state.backup)
        )
        logger.info(f"{config.APP_NAME} started ({config.APP_ENV}), database {config.database_url}")
        yield
        await scheduler.shutdown()
        await app.state.store.dispose()
        logger.info(f"{config.APP_NAME} stopped")

    app = FastAPI(
        title=config.APP_NAME,
        version=__version__,
        description="""
Weekly scorecard for business metrics.

## Resources

- **People**: metric owners
- **Metrics**: KPIs with a target (value, unit, operator)
- **Weeks**: completed Monday..Sunday weeks, added automatically
- **Weekly values**: one value per metric and week
- **Scorecard**: the assembled grid, also as CSV
        """,
        lifespan=lifespan,
        docs_url="/api/docs" if config.DEBUG else None,
        redoc_url="/api/redoc" if config.DEBUG else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ScorecardError, scorecard_error_handler)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"detail": str(exc) if config.DEBUG else "Internal server error"}
        )

    app.include_router(api_router, prefix="/api")
    return app


configure_logging(default_settings.APP_ENV, default_settings.LOG_LEVEL)
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "scorecard.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.DEBUG
    )
