"""
Weekly value endpoints.

A weekly value is the measurement of one metric for one week. Posting a value
for a pair that already has one replaces it.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from scorecard.api.deps import get_hub
from scorecard.core.errors import NotFoundError
from scorecard.db.base import get_db
from scorecard.models.metric import Metric
from scorecard.models.week import Week
from scorecard.models.weekly_value import WeeklyValue
from scorecard.realtime.hub import ChangeHub
from scorecard.schemas.weekly_value import WeeklyValueUpsert, WeeklyValueResponse

router = APIRouter()


@router.get("", response_model=List[WeeklyValueResponse])
async def list_weekly_values(
    metric_id: Optional[str] = Query(None, alias="metricId"),
    week_id: Optional[str] = Query(None, alias="weekId"),
    db: AsyncSession = Depends(get_db)
):
    """List weekly values, optionally filtered by metric and/or week."""
    query = select(WeeklyValue)
    if metric_id:
        query = query.where(WeeklyValue.metric_id == metric_id)
    if week_id:
        query = query.where(WeeklyValue.week_id == week_id)
    result = await db.execute(query.order_by(WeeklyValue.metric_id, WeeklyValue.week_id))
    return result.scalars().all()


@router.post("", response_model=WeeklyValueResponse, status_code=status.HTTP_201_CREATED)
async def upsert_weekly_value(
    data: WeeklyValueUpsert,
    response: Response,
    db: AsyncSession = Depends(get_db),
    hub: ChangeHub = Depends(get_hub)
):
    """
    Record a value for a metric/week pair.

    Returns 201 when the value is new and 200 when an existing value was
    replaced.
    """
    if await db.get(Metric, data.metric_id) is None:
        raise NotFoundError(f"Metric {data.metric_id} not found")
    if await db.get(Week, data.week_id) is None:
        raise NotFoundError(f"Week {data.week_id} not found")

    result = await db.execute(
        select(WeeklyValue).where(
            WeeklyValue.metric_id == data.metric_id,
            WeeklyValue.week_id == data.week_id
        )
    )
    entry = result.scalar_one_or_none()

    if entry:
        entry.value = data.value
        entry.unit = data.unit
        event = "weekly_value_updated"
        response.status_code = status.HTTP_200_OK
    else:
        entry = WeeklyValue(
            metric_id=data.metric_id,
            week_id=data.week_id,
            value=data.value,
            unit=data.unit
        )
        db.add(entry)
        event = "weekly_value_created"

    await db.commit()

    payload = WeeklyValueResponse.model_validate(entry)
    await hub.notify(event, payload.model_dump(mode="json", by_alias=True))
    return payload
