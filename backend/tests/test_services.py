"""
Tests for seeding, the background scheduler and the command line.
"""
import asyncio
import os
import random

import pytest
from sqlalchemy import func, select

from scorecard import cli
from scorecard.models.person import Person
from scorecard.models.weekly_value import WeeklyValue
from scorecard.services.scheduler import Scheduler, run_periodically
from scorecard.services.seed import SAMPLE_WEEK_COUNT, create_sample_data

from conftest import TODAY


class TestSampleData:

    @pytest.mark.asyncio
    async def test_reuses_existing_people(self, store, alice):
        async with store.transaction() as session:
            summary = await create_sample_data(session, TODAY, rng=random.Random(7))

        assert summary.people == 2
        assert summary.weeks == SAMPLE_WEEK_COUNT
        async with store.transaction() as session:
            count = (await session.execute(select(func.count(Person.id)))).scalar()
        assert count == 3

    @pytest.mark.asyncio
    async def test_values_stay_in_range(self, store):
        async with store.transaction() as session:
            await create_sample_data(session, TODAY, rng=random.Random(1))

        async with store.transaction() as session:
            values = (await session.execute(select(WeeklyValue))).scalars().all()
        assert len(values) == 5 * SAMPLE_WEEK_COUNT
        assert all(v.value > 0 for v in values)

    @pytest.mark.asyncio
    async def test_existing_weeks_are_kept(self, store, weeks):
        async with store.transaction() as session:
            summary = await create_sample_data(session, TODAY)

        assert summary.weeks == 0
        assert summary.values == 0
        assert summary.metrics == 5


class TestScheduler:

    @pytest.mark.asyncio
    async def test_failing_run_does_not_stop_the_loop(self):
        calls = []

        async def job():
            calls.append(len(calls))
            if len(calls) == 1:
                raise RuntimeError("boom")

        task = asyncio.create_task(run_periodically("test", 0, job))
        while len(calls) < 3:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert calls[:3] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_shutdown_cancels_jobs(self):
        scheduler = Scheduler()
        task = scheduler.every("idle", 3600, lambda: asyncio.sleep(0))

        await scheduler.shutdown()
        assert task.cancelled()


class TestCli:

    @pytest.fixture(autouse=True)
    def use_test_settings(self, settings, monkeypatch):
        monkeypatch.setattr(cli, "get_settings", lambda: settings)

    def test_seed_then_refuse(self, capsys):
        assert cli.main(["seed"]) == 0
        assert "Sample data created: 3 people" in capsys.readouterr().out

        assert cli.main(["seed"]) == 1
        assert "already initialized" in capsys.readouterr().out

    def test_update_weeks_after_seed(self, capsys):
        cli.main(["seed"])
        capsys.readouterr()

        assert cli.main(["update-weeks"]) == 0
        assert "Weeks are up to date." in capsys.readouterr().out

    def test_backup_force(self, settings, capsys):
        cli.main(["seed"])
        assert cli.main(["backup", "--force"]) == 0
        out = capsys.readouterr().out
        assert "Backup created successfully" in out
        backups = [f for f in os.listdir(settings.DATA_DIR) if f.startswith("scorecard.2") and f.endswith(".db")]
        assert len(backups) == 1

    def test_backup_respects_minimum_age(self, capsys):
        cli.main(["seed"])
        assert cli.main(["backup"]) == 0
        assert "too new" in capsys.readouterr().out

    def test_requires_a_command(self):
        with pytest.raises(SystemExit):
            cli.main([])
