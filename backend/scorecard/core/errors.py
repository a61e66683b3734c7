"""Domain errors and their HTTP rendering."""
import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ScorecardError(Exception):
    code = "scorecard_error"
    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code


class InvalidValueError(ScorecardError, ValueError):
    """A value fed to the normalizer or evaluator is not a usable number."""
    code = "invalid_value"
    status_code = 400


class NotFoundError(ScorecardError):
    code = "not_found"
    status_code = 404


class ConflictError(ScorecardError):
    code = "conflict"
    status_code = 409


class WeekRollForwardError(ScorecardError):
    code = "week_roll_forward_failed"
    status_code = 500


class MissingWeeksError(WeekRollForwardError):
    """The database holds data but no week to roll forward from."""
    code = "no_weeks"


class InvalidImportError(ScorecardError):
    """An import payload that cannot be stored as a consistent scorecard."""
    code = "invalid_import"
    status_code = 400


class BackupError(ScorecardError):
    code = "backup_failed"
    status_code = 500


async def scorecard_error_handler(request: Request, exc: ScorecardError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )
