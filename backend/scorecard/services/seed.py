"""
Sample data for a fresh scorecard.

Creates three people, five metrics covering every value type, twelve
completed weeks and a value for every metric/week pair, all inside the
caller's transaction.
"""
import logging
import math
import random
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from scorecard.models.metric import Metric, ValueUnit, ComparisonOperator, MetricValueType
from scorecard.models.person import Person
from scorecard.models.week import Week
from scorecard.models.weekly_value import WeeklyValue
from scorecard.services.weeks import completed_weeks_ending, most_recent_completed_sunday, week_name

logger = logging.getLogger(__name__)

SAMPLE_WEEK_COUNT = 12

SAMPLE_PEOPLE = [
    {"name": "Alice Smith", "email": "alice@example.com"},
    {"name": "Bob Johnson", "email": "bob@example.com"},
    {"name": "Carol Williams", "email": "carol@example.com"},
]

# owner is an index into SAMPLE_PEOPLE
SAMPLE_METRICS = [
    {
        "name": "New Customers",
        "target_value": 100,
        "target_unit": ValueUnit.NONE,
        "target_operator": ComparisonOperator.GTE,
        "owner": 0,
        "value_type": MetricValueType.NUMBER,
    },
    {
        "name": "Revenue",
        "target_value": 1,
        "target_unit": ValueUnit.MILLION,
        "target_operator": ComparisonOperator.GTE,
        "owner": 1,
        "value_type": MetricValueType.DOLLARS,
    },
    {
        "name": "Support Tickets",
        "target_value": 50,
        "target_unit": ValueUnit.NONE,
        "target_operator": ComparisonOperator.LTE,
        "owner": 2,
        "value_type": MetricValueType.NUMBER,
    },
    {
        "name": "Customer Satisfaction",
        "target_value": 95,
        "target_unit": ValueUnit.PERCENT,
        "target_operator": ComparisonOperator.GTE,
        "owner": 1,
        "value_type": MetricValueType.PERCENT,
    },
    {
        "name": "Response Time",
        "target_value": 8,
        "target_unit": ValueUnit.HOUR,
        "target_operator": ComparisonOperator.LTE,
        "owner": 2,
        "value_type": MetricValueType.TIME,
    },
]


@dataclass
class SeedSummary:
    people: int = 0
    metrics: int = 0
    weeks: int = 0
    values: int = 0


# ============================================================================
# VALUE PATTERNS
# ``age`` is how many weeks before the newest week the value belongs to.
# ============================================================================

def _new_customers(rng: random.Random, age: int) -> tuple[float, ValueUnit]:
    # Around 100-130, trending up
    base = 100 + (SAMPLE_WEEK_COUNT - 1 - age) * 2
    return float(base + rng.randint(-15, 14)), ValueUnit.NONE


def _revenue(rng: random.Random, age: int) -> tuple[float, ValueUnit]:
    # Around 1m with a seasonal swing, kept within 0.8m..1.5m
    seasonal = math.sin((age / 12) * math.pi * 2) * 0.3
    value = 1.0 + seasonal + rng.uniform(-0.1, 0.1)
    return round(max(0.8, min(1.5, value)), 2), ValueUnit.MILLION


def _support_tickets(rng: random.Random, age: int) -> tuple[float, ValueUnit]:
    # Cycles around the 50 ticket target
    base = 35 + math.sin((age / 6) * math.pi) * 20
    return float(max(20, round(base + rng.randint(-8, 7)))), ValueUnit.NONE


def _satisfaction(rng: random.Random, age: int) -> tuple[float, ValueUnit]:
    return float(min(100, max(85, 92 + rng.randint(-3, 6)))), ValueUnit.PERCENT


def _response_time(rng: random.Random, age: int) -> tuple[float, ValueUnit]:
    value = 6 + rng.uniform(-3, 3)
    return round(max(3.0, min(12.0, value)), 1), ValueUnit.HOUR


VALUE_GENERATORS: Dict[str, Callable[[random.Random, int], tuple[float, ValueUnit]]] = {
    "New Customers": _new_customers,
    "Revenue": _revenue,
    "Support Tickets": _support_tickets,
    "Customer Satisfaction": _satisfaction,
    "Response Time": _response_time,
}


async def _get_or_create_people(session: AsyncSession, summary: SeedSummary) -> List[Person]:
    people = []
    for data in SAMPLE_PEOPLE:
        result = await session.execute(select(Person).where(Person.email == data["email"]))
        person = result.scalar_one_or_none()
        if person:
            logger.info(f"Person with email {data['email']} already exists, reusing it")
        else:
            person = Person(name=data["name"], email=data["email"])
            session.add(person)
            summary.people += 1
        people.append(person)
    await session.flush()
    return people


async def _count(session: AsyncSession, model) -> int:
    result = await session.execute(select(func.count(model.id)))
    return result.scalar() or 0


async def create_sample_data(
    session: AsyncSession,
    today: date,
    rng: Optional[random.Random] = None,
) -> SeedSummary:
    """
    Populate an empty scorecard with sample data.

    Metrics, weeks and values are only created when their table is empty, so
    a partially seeded database is completed rather than duplicated. The
    caller owns the transaction.
    """
    rng = rng or random.Random()
    summary = SeedSummary()

    people = await _get_or_create_people(session, summary)

    metrics: List[Metric] = []
    if await _count(session, Metric) == 0:
        for order, data in enumerate(SAMPLE_METRICS):
            fields = {k: v for k, v in data.items() if k != "owner"}
            metric = Metric(owner_id=people[data["owner"]].id, display_order=order, **fields)
            session.add(metric)
            metrics.append(metric)
        summary.metrics = len(metrics)
    else:
        logger.info("Metrics already exist, skipping metrics creation")

    weeks: List[Week] = []
    if await _count(session, Week) == 0:
        spans = completed_weeks_ending(most_recent_completed_sunday(today), SAMPLE_WEEK_COUNT)
        for number, (start, end) in enumerate(spans, start=1):
            week = Week(name=week_name(number), start_date=start, end_date=end)
            session.add(week)
            weeks.append(week)
        summary.weeks = len(weeks)
    else:
        logger.info("Weeks already exist, skipping weeks creation")

    await session.flush()

    if metrics and weeks and await _count(session, WeeklyValue) == 0:
        for metric in metrics:
            generate = VALUE_GENERATORS[metric.name]
            for index, week in enumerate(weeks):
                age = len(weeks) - 1 - index
                value, unit = generate(rng, age)
                session.add(WeeklyValue(metric_id=metric.id, week_id=week.id, value=value, unit=unit))
                summary.values += 1
        await session.flush()

    logger.info(
        f"Sample data created: {summary.people} people, {summary.metrics} metrics, "
        f"{summary.weeks} weeks, {summary.values} values"
    )
    return summary
