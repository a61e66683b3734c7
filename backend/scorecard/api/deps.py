"""
Shared FastAPI dependencies.

Long-lived collaborators (data store, change hub, week calendar, backup
service) are created in the application lifespan and kept on ``app.state``.
"""
from datetime import date

from fastapi import Request

from scorecard.db.store import DataStore
from scorecard.realtime.hub import ChangeHub
from scorecard.services.backup import BackupService
from scorecard.services.weeks import WeekCalendar


def get_store(request: Request) -> DataStore:
    return request.app.state.store


def get_hub(request: Request) -> ChangeHub:
    return request.app.state.hub


def get_calendar(request: Request) -> WeekCalendar:
    return request.app.state.calendar


def get_backup_service(request: Request) -> BackupService:
    return request.app.state.backup


def get_today(request: Request) -> date:
    """Today's date in the scorecard timezone."""
    return request.app.state.calendar.today()
