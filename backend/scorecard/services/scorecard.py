"""
Scorecard grid assembly.

Joins completed weeks, ordered metrics and their weekly values into the rows
the UI renders, marking each entered value on or off target. The same grid is
available as CSV for reporting.
"""
import csv
import io
from datetime import date
from typing import Dict, List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scorecard.models.metric import Metric
from scorecard.models.week import Week
from scorecard.models.weekly_value import WeeklyValue
from scorecard.schemas.metric import MetricResponse, TargetSchema
from scorecard.schemas.person import PersonResponse
from scorecard.schemas.scorecard import ScorecardCell, ScorecardResponse, ScorecardRow
from scorecard.schemas.week import WeekResponse
from scorecard.services.targets import format_date_range, format_goal, format_value, is_on_target


def build_metric_response(metric: Metric) -> MetricResponse:
    """Build MetricResponse from a Metric model with its owner loaded."""
    return MetricResponse(
        id=metric.id,
        name=metric.name,
        target=TargetSchema(
            value=metric.target_value,
            unit=metric.target_unit,
            operator=metric.target_operator
        ),
        owner=PersonResponse.model_validate(metric.owner),
        display_order=metric.display_order,
        value_type=metric.value_type
    )


def ordered_metrics_query():
    """Metrics in grid order; equal display orders keep insertion order."""
    return select(Metric).options(
        selectinload(Metric.owner)
    ).order_by(Metric.display_order, Metric.created, Metric.id)


def completed_weeks_query(today: date):
    return select(Week).where(Week.end_date < today).order_by(Week.start_date)


async def build_scorecard(db: AsyncSession, today: date) -> ScorecardResponse:
    weeks = (await db.execute(completed_weeks_query(today))).scalars().all()
    metrics = (await db.execute(ordered_metrics_query())).scalars().all()

    week_ids = [w.id for w in weeks]
    values: Dict[Tuple[str, str], WeeklyValue] = {}
    if week_ids:
        result = await db.execute(select(WeeklyValue).where(WeeklyValue.week_id.in_(week_ids)))
        values = {(v.metric_id, v.week_id): v for v in result.scalars().all()}

    rows: List[ScorecardRow] = []
    for metric in metrics:
        target = metric.target
        cells = []
        on_target_count = 0
        for week in weeks:
            entry = values.get((metric.id, week.id))
            if entry is None:
                cells.append(ScorecardCell(week_id=week.id))
                continue
            hit = is_on_target(entry, target)
            on_target_count += int(hit)
            cells.append(ScorecardCell(
                week_id=week.id,
                value=entry.value,
                unit=entry.unit,
                on_target=hit,
                display=format_value(entry.value, entry.unit, metric.value_type)
            ))
        rows.append(ScorecardRow(
            metric=build_metric_response(metric),
            goal=format_goal(target, metric.value_type),
            cells=cells,
            on_target_count=on_target_count,
            entered_count=sum(1 for c in cells if c.value is not None)
        ))

    return ScorecardResponse(
        weeks=[WeekResponse.model_validate(w) for w in weeks],
        rows=rows
    )


def scorecard_to_csv(scorecard: ScorecardResponse) -> str:
    """
    Render the grid as CSV: one row per metric, one column per week.

    Off-target cells are suffixed with ``*``; empty cells stay empty.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(
        ["Metric", "Owner", "Goal"]
        + [format_date_range(w.start_date, w.end_date) for w in scorecard.weeks]
    )
    for row in scorecard.rows:
        cells = []
        for cell in row.cells:
            if cell.value is None:
                cells.append("")
            elif cell.on_target:
                cells.append(cell.display)
            else:
                cells.append(f"{cell.display}*")
        writer.writerow([row.metric.name, row.metric.owner.name, row.goal] + cells)
    return buffer.getvalue()
