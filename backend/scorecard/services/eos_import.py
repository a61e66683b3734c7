"""
Import of an EOS One scorecard export.

Owners become people, EOS intervals become weeks, measurables become metrics
and their recorded values become weekly values. The caller owns the
transaction, so a failing insert leaves nothing behind.
"""
import logging
import re
from typing import Dict, List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from scorecard.core.errors import InvalidImportError
from scorecard.models.metric import Metric, ValueUnit, ComparisonOperator, MetricValueType
from scorecard.models.person import Person
from scorecard.models.week import Week
from scorecard.models.weekly_value import WeeklyValue
from scorecard.schemas.eos import EosData, EosDate, EosMeasurable
from scorecard.services.seed import SeedSummary
from scorecard.services.weeks import week_name

logger = logging.getLogger(__name__)

OPERATOR_MAP = {
    "Greater": ComparisonOperator.GT,
    "GreaterOrEqual": ComparisonOperator.GTE,
    "Less": ComparisonOperator.LT,
    "LessOrEqual": ComparisonOperator.LTE,
    "Equal": ComparisonOperator.EQ,
}

UNIT_MAP = {
    "Number": ValueUnit.NONE,
    "Percent": ValueUnit.PERCENT,
    "Dollar": ValueUnit.DOLLAR,
    "Hours": ValueUnit.HOUR,
}

# Scale only applies to plain numbers
VALUE_SCALE_MAP = {
    "One": ValueUnit.NONE,
    "Thousand": ValueUnit.THOUSAND,
    "Million": ValueUnit.MILLION,
    "Billion": ValueUnit.BILLION,
}

VALUE_TYPE_MAP = {
    "Number": MetricValueType.NUMBER,
    "Percent": MetricValueType.PERCENT,
    "Dollar": MetricValueType.DOLLARS,
    "Hours": MetricValueType.TIME,
}

Key = Union[str, int]


def owner_email(name: str, taken: Optional[set[str]] = None) -> str:
    """Placeholder address derived from the owner's name ("Jane Doe" -> jane.doe@example.com)."""
    local = re.sub(r"\s+", ".", name.strip().lower())
    email = f"{local}@example.com"
    suffix = 2
    while taken is not None and email in taken:
        email = f"{local}.{suffix}@example.com"
        suffix += 1
    return email


def measurable_unit(measurable: EosMeasurable) -> ValueUnit:
    unit = UNIT_MAP.get(measurable.unit_of_measure or "", ValueUnit.NONE)
    if measurable.unit_of_measure == "Number" and measurable.value_scale:
        unit = VALUE_SCALE_MAP.get(measurable.value_scale, ValueUnit.NONE)
    return unit


def measurable_operator(measurable: EosMeasurable) -> ComparisonOperator:
    return OPERATOR_MAP.get(measurable.comparison or "", ComparisonOperator.GTE)


def measurable_value_type(measurable: EosMeasurable) -> MetricValueType:
    return VALUE_TYPE_MAP.get(measurable.unit_of_measure or "", MetricValueType.NUMBER)


def _key(value: Key) -> str:
    return str(value)


def check_intervals(dates: List[EosDate]) -> List[EosDate]:
    """
    Intervals sorted by start date.

    Raises InvalidImportError when an interval id repeats or two intervals
    overlap.
    """
    ids: set[str] = set()
    for interval in dates:
        key = _key(interval.interval_id)
        if key in ids:
            raise InvalidImportError(f"Duplicate interval id {interval.interval_id}")
        ids.add(key)

    ordered = sorted(dates, key=lambda d: d.from_date)
    for prev, nxt in zip(ordered, ordered[1:]):
        if nxt.from_date <= prev.to_date:
            raise InvalidImportError(
                f"Intervals {prev.interval_id} and {nxt.interval_id} overlap "
                f"({nxt.from_date.isoformat()} <= {prev.to_date.isoformat()})"
            )
    return ordered


async def import_eos_data(session: AsyncSession, data: EosData) -> SeedSummary:
    """Write the export into an empty database using the given session."""
    summary = SeedSummary()
    intervals = check_intervals(data.dates)

    # Step 1: owners -> people (one person per distinct EOS owner id)
    people: Dict[str, Person] = {}
    emails: set[str] = set()
    for measurable in data.measurables:
        key = _key(measurable.owner_id)
        if key in people:
            continue
        person = Person(name=measurable.owner_name, email=owner_email(measurable.owner_name, emails))
        emails.add(person.email)
        session.add(person)
        people[key] = person
        logger.info(f"Imported person: {person.name}")
    await session.flush()
    summary.people = len(people)

    # Step 2: intervals -> weeks
    weeks: Dict[str, Week] = {}
    for interval in intervals:
        week = Week(
            name=week_name(interval.interval_no),
            start_date=interval.from_date,
            end_date=interval.to_date,
        )
        session.add(week)
        weeks[_key(interval.interval_id)] = week
    await session.flush()
    summary.weeks = len(weeks)

    # Step 3: measurables -> metrics, with their values
    for measurable in data.measurables:
        unit = measurable_unit(measurable)
        metric = Metric(
            name=measurable.title,
            target_value=measurable.goal_value,
            target_unit=unit,
            target_operator=measurable_operator(measurable),
            owner_id=people[_key(measurable.owner_id)].id,
            display_order=measurable.sequence,
            value_type=measurable_value_type(measurable),
        )
        session.add(metric)
        await session.flush()
        summary.metrics += 1
        logger.info(f"Imported metric: {metric.name}")

        seen_weeks: set[str] = set()
        for eos_value in measurable.values:
            week: Optional[Week] = weeks.get(_key(eos_value.interval_id))
            if week is None:
                logger.warning(f"No week found for interval {eos_value.interval_id}; skipping value")
                continue
            if week.id in seen_weeks:
                logger.warning(f"Duplicate value for {metric.name} in {week.name}; keeping the first")
                continue
            seen_weeks.add(week.id)
            session.add(WeeklyValue(metric_id=metric.id, week_id=week.id, value=eos_value.value, unit=unit))
            summary.values += 1

    await session.flush()
    logger.info(
        f"EOS import completed: {summary.people} people, {summary.metrics} metrics, "
        f"{summary.weeks} weeks, {summary.values} values"
    )
    return summary
