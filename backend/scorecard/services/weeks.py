"""
Week calendar - rolls the sequence of completed weeks forward as time passes.

Provides:
- Pure date arithmetic for completed Monday..Sunday spans
- WeekCalendar, which reads the latest stored week, inserts the missing
  completed weeks in one transaction and announces them to connected clients

The calendar never creates the first weeks; that is done by seeding or import.
"""
import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Protocol, Sequence, Tuple
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta, MO
from sqlalchemy.exc import SQLAlchemyError

from scorecard.core.errors import MissingWeeksError, WeekRollForwardError
from scorecard.db.store import DataStore
from scorecard.models.week import Week
from scorecard.schemas.week import WeekResponse

logger = logging.getLogger(__name__)

WEEK_LENGTH = timedelta(days=7)
WEEKS_UPDATED_EVENT = "weeks_updated"


class Broadcaster(Protocol):
    async def notify(self, event: str, payload) -> None: ...


def local_today(tz_name: str = "UTC") -> date:
    """Current calendar date in the given timezone."""
    return datetime.now(ZoneInfo(tz_name)).date()


def as_date(value) -> date:
    """Truncate a datetime to its date; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Expected a date, got {value!r}")


def most_recent_completed_sunday(today: date) -> date:
    """
    The last Sunday strictly before ``today``.

    When ``today`` is itself a Sunday its week is still running, so the
    Sunday a full week earlier is returned.
    """
    days_back = (today.weekday() + 1) % 7 or 7
    return today - timedelta(days=days_back)


def week_name(number: int) -> str:
    return f"Week {number}"


def compute_week_spans(today: date, latest_end: date) -> List[Tuple[date, date]]:
    """
    Completed week spans that follow ``latest_end``, oldest first.

    The first span starts on the Monday on or after the day following
    ``latest_end``; every span ends strictly before ``today``.
    """
    today = as_date(today)
    latest_end = as_date(latest_end)

    if latest_end >= most_recent_completed_sunday(today):
        return []

    start = latest_end + timedelta(days=1) + relativedelta(weekday=MO)
    spans: List[Tuple[date, date]] = []
    while True:
        end = start + timedelta(days=6)
        if end >= today:
            break
        spans.append((start, end))
        start += WEEK_LENGTH
    return spans


def completed_weeks_ending(last_sunday: date, count: int) -> List[Tuple[date, date]]:
    """``count`` consecutive spans ending on ``last_sunday``, oldest first."""
    last_monday = last_sunday - timedelta(days=6)
    starts = [last_monday - WEEK_LENGTH * i for i in range(count - 1, -1, -1)]
    return [(start, start + timedelta(days=6)) for start in starts]


class WeekCalendar:
    """
    Appends newly completed weeks to the data store.

    One instance per process; ``roll_forward`` calls are serialized so two
    overlapping triggers can't both insert the same weeks.
    """

    def __init__(
        self,
        store: DataStore,
        broadcaster: Optional[Broadcaster] = None,
        *,
        timezone: str = "UTC",
        clock: Optional[Callable[[], date]] = None,
    ):
        self.store = store
        self.broadcaster = broadcaster
        self.timezone = timezone
        self._clock = clock
        self._lock = asyncio.Lock()

    def today(self) -> date:
        if self._clock is not None:
            return as_date(self._clock())
        return local_today(self.timezone)

    async def roll_forward(self, today: Optional[date] = None) -> List[Week]:
        """
        Insert every completed week missing after the latest stored week.

        Returns the new weeks (possibly none; always none on an uninitialized
        database). Raises MissingWeeksError when the database is initialized
        but holds no week, and WeekRollForwardError if the batch could not be
        stored; in both cases nothing was written and nothing was broadcast.
        """
        today = as_date(today) if today is not None else self.today()

        async with self._lock:
            try:
                new_weeks = await self._insert_missing_weeks(today)
            except SQLAlchemyError as e:
                logger.error(f"Failed to store new weeks (today={today.isoformat()}): {e}")
                raise WeekRollForwardError(f"Could not store new weeks: {e}") from e

        if new_weeks:
            logger.info(
                f"Created {len(new_weeks)} new completed week(s): "
                f"{new_weeks[0].start_date.isoformat()}..{new_weeks[-1].end_date.isoformat()}"
            )
            await self._announce(new_weeks)
        return new_weeks

    async def _insert_missing_weeks(self, today: date) -> List[Week]:
        async with self.store.transaction() as session:
            latest = await self.store.get_latest_week(session)
            if latest is None:
                if await self.store.is_initialized(session):
                    raise MissingWeeksError("No existing weeks found in database")
                logger.info("No weeks found - database not initialized yet")
                return []

            spans = compute_week_spans(today, latest.end_date)
            if not spans:
                logger.debug(f"Weeks are up to date (latest ends {latest.end_date.isoformat()})")
                return []

            count = await self.store.get_week_count(session)
            weeks = [
                Week(name=week_name(count + i + 1), start_date=start, end_date=end)
                for i, (start, end) in enumerate(spans)
            ]
            await self.store.insert_weeks(session, weeks)
        return weeks

    async def _announce(self, weeks: Sequence[Week]) -> None:
        if self.broadcaster is None:
            return
        payload = [
            WeekResponse.model_validate(week).model_dump(mode="json", by_alias=True)
            for week in weeks
        ]
        await self.broadcaster.notify(WEEKS_UPDATED_EVENT, payload)
