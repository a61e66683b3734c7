"""
Test configuration and fixtures for the scorecard backend tests.

Every test gets its own SQLite file under ``tmp_path`` and a calendar pinned
to Monday 2024-01-22, so "completed weeks" are those ending on or before
Sunday 2024-01-21.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Any, AsyncGenerator, List

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from scorecard.core.config import Settings
from scorecard.db.store import DataStore
from scorecard.main import create_app
from scorecard.models.metric import Metric, ValueUnit, ComparisonOperator, MetricValueType
from scorecard.models.person import Person
from scorecard.models.week import Week
from scorecard.realtime.hub import ChangeHub
from scorecard.services.backup import BackupService, StatusFile
from scorecard.services.weeks import WeekCalendar

TODAY = date(2024, 1, 22)


class FakeClock:
    """Settable clock for code that asks for "now"."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingSocket:
    """Stands in for a WebSocket registered with the hub; keeps what it is sent."""

    def __init__(self):
        self.messages: List[dict] = []

    async def send_json(self, data: Any) -> None:
        self.messages.append(data)

    def events(self, event_type: str = None) -> List[dict]:
        return [m for m in self.messages if event_type is None or m["type"] == event_type]


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(APP_ENV="test", DEBUG=False, DATA_DIR=str(tmp_path))


@pytest_asyncio.fixture
async def store(settings: Settings) -> AsyncGenerator[DataStore, None]:
    """A data store backed by a fresh SQLite file."""
    data_store = DataStore(settings.database_url)
    await data_store.create_all()
    yield data_store
    await data_store.dispose()


@pytest.fixture
def hub() -> ChangeHub:
    return ChangeHub()


@pytest_asyncio.fixture
async def listener(hub: ChangeHub) -> RecordingSocket:
    """A connected client that records every broadcast."""
    socket = RecordingSocket()
    await hub.register(socket)
    return socket


@pytest.fixture
def calendar(store: DataStore, hub: ChangeHub) -> WeekCalendar:
    return WeekCalendar(store, hub, clock=lambda: TODAY)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 22, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def backup_service(store: DataStore, settings: Settings, clock: FakeClock) -> BackupService:
    return BackupService(
        store,
        StatusFile(settings.status_file_path, clock=clock),
        min_age_days=settings.MIN_BACKUP_AGE_DAYS,
        clock=clock
    )


@pytest_asyncio.fixture
async def client(
    settings: Settings,
    store: DataStore,
    hub: ChangeHub,
    calendar: WeekCalendar,
    backup_service: BackupService
) -> AsyncGenerator[AsyncClient, None]:
    """API client wired to the test store, hub, calendar and backup service."""
    app = create_app(settings)
    app.state.store = store
    app.state.hub = hub
    app.state.calendar = calendar
    app.state.backup = backup_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def alice(store: DataStore) -> Person:
    async with store.transaction() as session:
        person = Person(name="Alice Smith", email="alice@example.com")
        session.add(person)
    return person


@pytest_asyncio.fixture
async def bob(store: DataStore) -> Person:
    async with store.transaction() as session:
        person = Person(name="Bob Johnson", email="bob@example.com")
        session.add(person)
    return person


@pytest_asyncio.fixture
async def revenue(store: DataStore, alice: Person) -> Metric:
    """Revenue, goal >= 1m dollars."""
    async with store.transaction() as session:
        metric = Metric(
            name="Revenue",
            target_value=1,
            target_unit=ValueUnit.MILLION,
            target_operator=ComparisonOperator.GTE,
            owner_id=alice.id,
            display_order=0,
            value_type=MetricValueType.DOLLARS,
        )
        session.add(metric)
    return metric


@pytest_asyncio.fixture
async def tickets(store: DataStore, bob: Person) -> Metric:
    """Support tickets, goal <= 50."""
    async with store.transaction() as session:
        metric = Metric(
            name="Support Tickets",
            target_value=50,
            target_unit=ValueUnit.NONE,
            target_operator=ComparisonOperator.LTE,
            owner_id=bob.id,
            display_order=1,
            value_type=MetricValueType.NUMBER,
        )
        session.add(metric)
    return metric


async def add_weeks(store: DataStore, first_monday: date, count: int) -> List[Week]:
    weeks = []
    async with store.transaction() as session:
        for i in range(count):
            start = first_monday + timedelta(days=7 * i)
            week = Week(name=f"Week {i + 1}", start_date=start, end_date=start + timedelta(days=6))
            session.add(week)
            weeks.append(week)
    return weeks


@pytest_asyncio.fixture
async def weeks(store: DataStore) -> List[Week]:
    """Two completed weeks: 2024-01-01..07 and 2024-01-08..14."""
    return await add_weeks(store, date(2024, 1, 1), 2)
