"""
Week endpoints.

Only completed weeks are listed; the current week appears once it has ended.
"""
import logging
from datetime import date
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from scorecard.api.deps import get_calendar, get_today
from scorecard.core.errors import WeekRollForwardError
from scorecard.db.base import get_db
from scorecard.schemas.week import WeekResponse, WeekUpdateResponse
from scorecard.services.scorecard import completed_weeks_query
from scorecard.services.weeks import WeekCalendar

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[WeekResponse])
async def list_weeks(
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today)
):
    """List completed weeks, oldest first."""
    result = await db.execute(completed_weeks_query(today))
    return result.scalars().all()


@router.post("/update", response_model=WeekUpdateResponse, response_model_by_alias=True)
async def update_weeks(
    calendar: WeekCalendar = Depends(get_calendar)
):
    """
    Append any completed weeks missing since the latest stored week.

    Does nothing on an uninitialized database. An initialized database
    without weeks cannot be rolled forward and is reported as an error.
    """
    try:
        new_weeks = await calendar.roll_forward()
    except WeekRollForwardError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message
        )

    if not new_weeks:
        return WeekUpdateResponse(message="Weeks are up to date")

    logger.info(f"Week update created {len(new_weeks)} week(s)")
    return WeekUpdateResponse(
        message=f"Created {len(new_weeks)} new week(s)",
        new_weeks=[WeekResponse.model_validate(w) for w in new_weeks]
    )
