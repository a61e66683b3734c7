"""
Scorecard command line.

Usage:
    python -m scorecard.cli serve [--host HOST] [--port PORT]
    python -m scorecard.cli update-weeks
    python -m scorecard.cli backup [--force]
    python -m scorecard.cli seed

The maintenance commands work directly on the configured database; they do
not need a running server.
"""
import argparse
import asyncio
import sys
from typing import Optional, Sequence

from scorecard.core.config import Settings, get_settings
from scorecard.core.errors import ScorecardError
from scorecard.core.logging import configure_logging
from scorecard.db.store import DataStore
from scorecard.services.backup import BackupService, StatusFile
from scorecard.services.seed import create_sample_data
from scorecard.services.weeks import WeekCalendar


async def update_weeks(config: Settings) -> int:
    store = DataStore(config.database_url)
    try:
        await store.create_all()
        calendar = WeekCalendar(store, timezone=config.SCORECARD_TIMEZONE)
        new_weeks = await calendar.roll_forward()
    finally:
        await store.dispose()

    if not new_weeks:
        print("Weeks are up to date.")
    for week in new_weeks:
        print(f"Created {week.name}: {week.start_date.isoformat()} - {week.end_date.isoformat()}")
    return 0


async def backup(config: Settings, force: bool = False) -> int:
    store = DataStore(config.database_url)
    try:
        service = BackupService(
            store,
            StatusFile(config.status_file_path),
            min_age_days=config.MIN_BACKUP_AGE_DAYS
        )
        result = await service.run(force=force)
    finally:
        await store.dispose()

    print(result.message)
    if result.backup_path:
        print(f"Backup written to {result.backup_path}")
    return 0


async def seed(config: Settings) -> int:
    store = DataStore(config.database_url)
    try:
        await store.create_all()
        async with store.transaction() as session:
            if await store.is_initialized(session):
                print("Database already initialized; nothing to do.")
                return 1
        calendar = WeekCalendar(store, timezone=config.SCORECARD_TIMEZONE)
        async with store.transaction() as session:
            summary = await create_sample_data(session, calendar.today())
    finally:
        await store.dispose()

    print(
        f"Sample data created: {summary.people} people, {summary.metrics} metrics, "
        f"{summary.weeks} weeks, {summary.values} values"
    )
    return 0


def serve(config: Settings, host: Optional[str], port: Optional[int]) -> int:
    import uvicorn
    uvicorn.run(
        "scorecard.main:app",
        host=host or config.HOST,
        port=port or config.PORT,
        reload=config.DEBUG
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scorecard", description="Weekly metrics scorecard")
    commands = parser.add_subparsers(dest="command", required=True)

    serve_parser = commands.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: HOST setting)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default: PORT setting)")

    commands.add_parser("update-weeks", help="Add completed weeks missing from the database")

    backup_parser = commands.add_parser("backup", help="Back up the database")
    backup_parser.add_argument(
        "--force",
        action="store_true",
        help="Ignore the minimum backup age"
    )

    commands.add_parser("seed", help="Fill an empty database with sample data")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_settings()
    configure_logging(config.APP_ENV, config.LOG_LEVEL)

    if args.command == "serve":
        return serve(config, args.host, args.port)

    try:
        if args.command == "update-weeks":
            return asyncio.run(update_weeks(config))
        if args.command == "backup":
            return asyncio.run(backup(config, force=args.force))
        return asyncio.run(seed(config))
    except ScorecardError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
