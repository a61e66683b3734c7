"""
Tests for the assembled scorecard grid and its CSV export.
"""
import csv
import io

import pytest
import pytest_asyncio
from httpx import AsyncClient


@pytest_asyncio.fixture
async def entered_values(client: AsyncClient, revenue, tickets, weeks):
    entries = [
        (revenue, weeks[0], 1.2, "m"),
        (revenue, weeks[1], 900, "k"),
        (tickets, weeks[0], 40, ""),
    ]
    for metric, week, value, unit in entries:
        response = await client.post(
            "/api/weekly-values",
            json={"metricId": metric.id, "weekId": week.id, "value": value, "unit": unit}
        )
        assert response.status_code == 201


@pytest.mark.asyncio
async def test_scorecard_grid(client: AsyncClient, entered_values, weeks):
    response = await client.get("/api/scorecard")
    assert response.status_code == 200
    grid = response.json()

    assert [w["id"] for w in grid["weeks"]] == [w.id for w in weeks]

    revenue_row, tickets_row = grid["rows"]
    assert revenue_row["metric"]["name"] == "Revenue"
    assert revenue_row["goal"] == "≥$1m"
    assert [c["onTarget"] for c in revenue_row["cells"]] == [True, False]
    assert [c["display"] for c in revenue_row["cells"]] == ["$1.20m", "$900k"]
    assert revenue_row["onTargetCount"] == 1
    assert revenue_row["enteredCount"] == 2

    assert tickets_row["goal"] == "≤50"
    entered, empty = tickets_row["cells"]
    assert entered["onTarget"] is True
    assert entered["display"] == "40"
    assert empty == {"weekId": weeks[1].id, "value": None, "unit": None, "onTarget": None, "display": ""}


@pytest.mark.asyncio
async def test_scorecard_respects_metric_order(client: AsyncClient, revenue, tickets):
    await client.post("/api/metrics/reorder", json={"metrics": [{"id": tickets.id}, {"id": revenue.id}]})

    response = await client.get("/api/scorecard")
    assert [r["metric"]["name"] for r in response.json()["rows"]] == ["Support Tickets", "Revenue"]
    assert response.json()["weeks"] == []


@pytest.mark.asyncio
async def test_scorecard_csv_export(client: AsyncClient, entered_values):
    response = await client.get("/api/scorecard/export")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "scorecard-2024-01-22.csv" in response.headers["content-disposition"]

    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == ["Metric", "Owner", "Goal", "1/1-1/7", "1/8-1/14"]
    assert rows[1] == ["Revenue", "Alice Smith", "≥$1m", "$1.20m", "$900k*"]
    assert rows[2] == ["Support Tickets", "Bob Johnson", "≤50", "40", ""]
