"""
Metric endpoints.

Metrics are the rows of the scorecard. Each carries an embedded target and an
owner; rows are shown in ``display_order``.
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload

from scorecard.api.deps import get_hub
from scorecard.db.base import get_db
from scorecard.models.metric import Metric
from scorecard.models.person import Person
from scorecard.realtime.hub import ChangeHub
from scorecard.schemas.common import DeletedResponse
from scorecard.schemas.metric import MetricCreate, MetricUpdate, MetricResponse, MetricReorderRequest
from scorecard.services.scorecard import build_metric_response, ordered_metrics_query

router = APIRouter()


async def get_metric_or_404(db: AsyncSession, metric_id: str) -> Metric:
    result = await db.execute(
        select(Metric)
        .options(selectinload(Metric.owner))
        .where(Metric.id == metric_id)
        .execution_options(populate_existing=True)
    )
    metric = result.scalar_one_or_none()
    if not metric:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Metric not found"
        )
    return metric


async def get_owner_or_400(db: AsyncSession, owner_id: str) -> Person:
    """Resolve the owner reference of a metric payload."""
    result = await db.execute(select(Person).where(Person.id == owner_id))
    owner = result.scalar_one_or_none()
    if not owner:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Owner {owner_id} does not exist"
        )
    return owner


def _payload(metric: Metric) -> dict:
    return build_metric_response(metric).model_dump(mode="json", by_alias=True)


@router.get("", response_model=List[MetricResponse])
async def list_metrics(db: AsyncSession = Depends(get_db)):
    """List metrics in display order."""
    result = await db.execute(ordered_metrics_query())
    return [build_metric_response(m) for m in result.scalars().all()]


@router.get("/{metric_id}", response_model=MetricResponse)
async def get_metric(metric_id: str, db: AsyncSession = Depends(get_db)):
    metric = await get_metric_or_404(db, metric_id)
    return build_metric_response(metric)


@router.post("", response_model=MetricResponse, status_code=status.HTTP_201_CREATED)
async def create_metric(
    data: MetricCreate,
    db: AsyncSession = Depends(get_db),
    hub: ChangeHub = Depends(get_hub)
):
    """Create a metric and append it to the end of the scorecard."""
    owner = await get_owner_or_400(db, data.owner.id)

    max_order = (await db.execute(select(func.max(Metric.display_order)))).scalar()
    next_order = 0 if max_order is None else max_order + 1

    metric = Metric(
        name=data.name,
        target_value=data.target.value,
        target_unit=data.target.unit,
        target_operator=data.target.operator,
        owner_id=owner.id,
        display_order=next_order,
        value_type=data.value_type
    )
    db.add(metric)
    await db.commit()

    metric = await get_metric_or_404(db, metric.id)
    await hub.notify("metric_created", _payload(metric))
    return build_metric_response(metric)


@router.post("/reorder", response_model=List[MetricResponse])
async def reorder_metrics(
    data: MetricReorderRequest,
    db: AsyncSession = Depends(get_db),
    hub: ChangeHub = Depends(get_hub)
):
    """
    Rewrite display orders of all metrics as 0..n-1.

    Submitted metrics come first, in the submitted order; metrics left out
    follow in their current order. Every submitted id must exist and appear
    only once; otherwise nothing changes.
    """
    ids = [ref.id for ref in data.metrics]
    if len(set(ids)) != len(ids):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Duplicate metric ids in reorder request"
        )

    result = await db.execute(ordered_metrics_query())
    current = result.scalars().all()
    metrics = {m.id: m for m in current}
    missing = [metric_id for metric_id in ids if metric_id not in metrics]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Metrics not found: {', '.join(missing)}"
        )

    submitted = set(ids)
    ordered_ids = ids + [m.id for m in current if m.id not in submitted]
    for index, metric_id in enumerate(ordered_ids):
        metrics[metric_id].display_order = index
    await db.commit()

    result = await db.execute(ordered_metrics_query())
    ordered = [build_metric_response(m) for m in result.scalars().all()]
    await hub.notify(
        "metrics_reordered",
        [{"id": m.id, "displayOrder": m.display_order} for m in ordered]
    )
    return ordered


@router.put("/{metric_id}", response_model=MetricResponse)
async def update_metric(
    metric_id: str,
    data: MetricUpdate,
    db: AsyncSession = Depends(get_db),
    hub: ChangeHub = Depends(get_hub)
):
    """Update a metric. ``displayOrder`` and ``valueType`` are kept when omitted."""
    metric = await get_metric_or_404(db, metric_id)
    owner = await get_owner_or_400(db, data.owner.id)

    metric.name = data.name
    metric.target_value = data.target.value
    metric.target_unit = data.target.unit
    metric.target_operator = data.target.operator
    metric.owner_id = owner.id
    if data.display_order is not None:
        metric.display_order = data.display_order
    if data.value_type is not None:
        metric.value_type = data.value_type
    await db.commit()

    metric = await get_metric_or_404(db, metric_id)
    await hub.notify("metric_updated", _payload(metric))
    return build_metric_response(metric)


@router.delete("/{metric_id}", response_model=DeletedResponse)
async def delete_metric(
    metric_id: str,
    db: AsyncSession = Depends(get_db),
    hub: ChangeHub = Depends(get_hub)
):
    """Delete a metric together with its weekly values."""
    metric = await get_metric_or_404(db, metric_id)

    await db.delete(metric)
    await db.commit()

    await hub.notify("metric_deleted", {"id": metric_id})
    return DeletedResponse(id=metric_id)
