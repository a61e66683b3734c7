"""
Tests for the weekly value endpoints.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import delete, select

from scorecard.models.week import Week
from scorecard.models.weekly_value import WeeklyValue


@pytest.mark.asyncio
async def test_upsert_creates_then_updates(client: AsyncClient, tickets, weeks, listener):
    payload = {"metricId": tickets.id, "weekId": weeks[0].id, "value": 42, "unit": ""}

    response = await client.post("/api/weekly-values", json=payload)
    assert response.status_code == 201
    created = response.json()
    assert created["value"] == 42
    assert created["metricId"] == tickets.id

    response = await client.post("/api/weekly-values", json={**payload, "value": 55})
    assert response.status_code == 200
    updated = response.json()
    assert updated["id"] == created["id"]
    assert updated["value"] == 55

    response = await client.get("/api/weekly-values", params={"metricId": tickets.id})
    assert [v["value"] for v in response.json()] == [55]

    assert len(listener.events("weekly_value_created")) == 1
    assert listener.events("weekly_value_updated")[0]["data"]["value"] == 55


@pytest.mark.asyncio
async def test_unknown_metric_or_week(client: AsyncClient, tickets, weeks):
    response = await client.post(
        "/api/weekly-values",
        json={"metricId": "missing", "weekId": weeks[0].id, "value": 1}
    )
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"

    response = await client.post(
        "/api/weekly-values",
        json={"metricId": tickets.id, "weekId": "missing", "value": 1}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_rejects_bad_values(client: AsyncClient, tickets, weeks):
    base = {"metricId": tickets.id, "weekId": weeks[0].id}

    response = await client.post("/api/weekly-values", json={**base, "value": "lots"})
    assert response.status_code == 422

    response = await client.post("/api/weekly-values", json={**base, "value": 3, "unit": "parsecs"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_filters(client: AsyncClient, revenue, tickets, weeks):
    for metric, value, unit in [(revenue, 1.1, "m"), (tickets, 30, "")]:
        for week in weeks:
            await client.post(
                "/api/weekly-values",
                json={"metricId": metric.id, "weekId": week.id, "value": value, "unit": unit}
            )

    response = await client.get("/api/weekly-values")
    assert len(response.json()) == 4

    response = await client.get("/api/weekly-values", params={"weekId": weeks[1].id})
    assert {v["metricId"] for v in response.json()} == {revenue.id, tickets.id}

    response = await client.get(
        "/api/weekly-values",
        params={"metricId": revenue.id, "weekId": weeks[1].id}
    )
    values = response.json()
    assert len(values) == 1
    assert values[0]["unit"] == "m"


@pytest.mark.asyncio
async def test_deleting_a_week_removes_its_values(client: AsyncClient, store, revenue, tickets, weeks):
    for metric in (revenue, tickets):
        for week in weeks:
            response = await client.post(
                "/api/weekly-values",
                json={"metricId": metric.id, "weekId": week.id, "value": 5, "unit": ""}
            )
            assert response.status_code == 201

    # plain DELETE statement, so only the foreign key removes the values
    async with store.transaction() as session:
        await session.execute(delete(Week).where(Week.id == weeks[0].id))

    async with store.transaction() as session:
        remaining = (await session.execute(select(WeeklyValue))).scalars().all()
    assert len(remaining) == 2
    assert {v.week_id for v in remaining} == {weeks[1].id}
