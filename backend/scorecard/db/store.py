"""
Data store - owns the database engine and the queries the week calendar relies on.

A single DataStore is created at startup and handed to whatever needs it
(request handlers via ``get_db``, the week calendar, the backup job). Nothing
reaches for a module-level connection.
"""
import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Sequence

from sqlalchemy import event, func, select
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from scorecard.db.base import Base
from scorecard.models.person import Person
from scorecard.models.week import Week

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DataStore:
    """Async SQLAlchemy engine + session factory for the scorecard database."""

    def __init__(self, database_url: str, *, echo: bool = False, engine: Optional[AsyncEngine] = None):
        self.database_url = database_url
        self.engine = engine or create_async_engine(database_url, echo=echo, future=True)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )
        self._backup_lock = asyncio.Lock()

    @property
    def database_file(self) -> Optional[str]:
        """Path of the SQLite file, or None for in-memory / non-SQLite databases."""
        url = make_url(self.database_url)
        if not url.drivername.startswith("sqlite"):
            return None
        if not url.database or url.database == ":memory:":
            return None
        return url.database

    async def create_all(self) -> None:
        """Create tables that don't exist yet."""
        path = self.database_file
        if path:
            os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Session wrapped in one transaction: committed on exit, rolled back on error."""
        async with self.session_maker() as session:
            async with session.begin():
                yield session

    # ------------------------------------------------------------------
    # Queries used by the week calendar
    # ------------------------------------------------------------------

    async def get_latest_week(self, session: AsyncSession) -> Optional[Week]:
        result = await session.execute(
            select(Week).order_by(Week.end_date.desc()).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_week_count(self, session: AsyncSession) -> int:
        result = await session.execute(select(func.count(Week.id)))
        return result.scalar() or 0

    async def insert_weeks(self, session: AsyncSession, weeks: Sequence[Week]) -> None:
        session.add_all(list(weeks))
        await session.flush()

    async def is_initialized(self, session: AsyncSession) -> bool:
        """The database counts as initialized once it has at least one person."""
        result = await session.execute(select(func.count(Person.id)))
        return (result.scalar() or 0) > 0

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    async def snapshot(self, destination: str) -> str:
        """
        Write a consistent copy of the database to ``destination``.

        Uses SQLite's ``VACUUM INTO`` so the live engine keeps serving requests;
        concurrent snapshots are serialized by the store's backup lock.
        """
        if self.database_file is None:
            raise RuntimeError("Snapshots are only supported for file-backed SQLite databases")

        async with self._backup_lock:
            if os.path.exists(destination):
                os.remove(destination)
            quoted = destination.replace("'", "''")
            async with self.engine.connect() as conn:
                conn = await conn.execution_options(isolation_level="AUTOCOMMIT")
                await conn.exec_driver_sql(f"VACUUM INTO '{quoted}'")
        logger.info(f"Database snapshot written to {destination}")
        return destination
