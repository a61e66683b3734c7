"""
Tests for the week endpoints.
"""
from datetime import date

import pytest
from httpx import AsyncClient

from conftest import add_weeks


@pytest.mark.asyncio
async def test_lists_completed_weeks_only(client: AsyncClient, store):
    # 2024-01-15..21 is complete on 2024-01-22, 2024-01-22..28 is not
    await add_weeks(store, date(2024, 1, 15), 2)

    response = await client.get("/api/weeks")
    assert response.status_code == 200
    assert response.json() == [{
        "id": response.json()[0]["id"],
        "name": "Week 1",
        "startDate": "2024-01-15",
        "endDate": "2024-01-21",
    }]


@pytest.mark.asyncio
async def test_update_on_uninitialized_database(client: AsyncClient):
    response = await client.post("/api/weeks/update")
    assert response.status_code == 200
    assert response.json()["newWeeks"] == []


@pytest.mark.asyncio
async def test_update_initialized_without_weeks_fails(client: AsyncClient, alice):
    response = await client.post("/api/weeks/update")
    assert response.status_code == 500
    assert "No existing weeks" in response.json()["detail"]


@pytest.mark.asyncio
async def test_update_rolls_forward(client: AsyncClient, alice, weeks, listener):
    response = await client.post("/api/weeks/update")
    assert response.status_code == 200
    body = response.json()
    assert [w["startDate"] for w in body["newWeeks"]] == ["2024-01-15"]
    assert body["newWeeks"][0]["name"] == "Week 3"

    response = await client.post("/api/weeks/update")
    assert response.json() == {"message": "Weeks are up to date", "newWeeks": []}

    assert len(listener.events("weeks_updated")) == 1

    response = await client.get("/api/weeks")
    assert [w["name"] for w in response.json()] == ["Week 1", "Week 2", "Week 3"]
