"""
Tests for importing an EOS One scorecard export.
"""
import pytest
from httpx import AsyncClient

from scorecard.core.errors import InvalidImportError
from scorecard.models.metric import ValueUnit, ComparisonOperator, MetricValueType
from scorecard.schemas.eos import EosDate, EosMeasurable
from scorecard.services.eos_import import (
    check_intervals,
    measurable_operator,
    measurable_unit,
    measurable_value_type,
    owner_email,
)


def eos_export() -> dict:
    return {
        "measurables": [
            {
                "id": 1,
                "title": "Qualified Leads",
                "ownerId": 501,
                "ownerName": "Jane Doe",
                "goalValue": 25,
                "comparison": "GreaterOrEqual",
                "unitOfMeasure": "Number",
                "valueScale": "One",
                "sequence": 0,
                "values": [
                    {"id": 11, "intervalId": 9001, "value": 30},
                    {"id": 12, "intervalId": 9002, "value": 20},
                    {"id": 13, "intervalId": 7777, "value": 99},
                ],
            },
            {
                "id": 2,
                "title": "Bookings",
                "ownerId": 502,
                "ownerName": "John Roe",
                "goalValue": 2.5,
                "comparison": "Greater",
                "unitOfMeasure": "Number",
                "valueScale": "Million",
                "sequence": 1,
                "values": [{"id": 21, "intervalId": 9001, "value": 3}],
            },
            {
                "id": 3,
                "title": "Churn",
                "ownerId": 501,
                "ownerName": "Jane Doe",
                "goalValue": 2,
                "comparison": "LessOrEqual",
                "unitOfMeasure": "Percent",
                "sequence": 2,
                "values": [],
            },
        ],
        "dates": [
            {"intervalId": 9002, "intervalNo": 2, "fromDate": "2024-01-08T00:00:00Z", "toDate": "2024-01-14T00:00:00Z"},
            {"intervalId": 9001, "intervalNo": 1, "fromDate": "2024-01-01T00:00:00Z", "toDate": "2024-01-07T00:00:00Z"},
        ],
    }


def test_owner_email():
    assert owner_email("Jane Doe") == "jane.doe@example.com"
    assert owner_email("  Mary Ann  Smith ") == "mary.ann.smith@example.com"
    assert owner_email("Jane Doe", {"jane.doe@example.com"}) == "jane.doe.2@example.com"


@pytest.mark.parametrize("unit,scale,expected", [
    ("Number", "One", ValueUnit.NONE),
    ("Number", "Thousand", ValueUnit.THOUSAND),
    ("Number", "Million", ValueUnit.MILLION),
    ("Number", "Billion", ValueUnit.BILLION),
    ("Percent", "Million", ValueUnit.PERCENT),
    ("Dollar", None, ValueUnit.DOLLAR),
    ("Hours", None, ValueUnit.HOUR),
    ("Furlongs", None, ValueUnit.NONE),
])
def test_measurable_unit(unit, scale, expected):
    measurable = EosMeasurable(
        title="x", owner_id=1, owner_name="x", goal_value=1, unit_of_measure=unit, value_scale=scale
    )
    assert measurable_unit(measurable) == expected


def test_measurable_operator_and_type():
    measurable = EosMeasurable(
        title="x", owner_id=1, owner_name="x", goal_value=1, comparison="Less", unit_of_measure="Dollar"
    )
    assert measurable_operator(measurable) == ComparisonOperator.LT
    assert measurable_value_type(measurable) == MetricValueType.DOLLARS

    unknown = EosMeasurable(title="x", owner_id=1, owner_name="x", goal_value=1, comparison="Around")
    assert measurable_operator(unknown) == ComparisonOperator.GTE
    assert measurable_value_type(unknown) == MetricValueType.NUMBER


@pytest.mark.asyncio
async def test_import_eos_export(client: AsyncClient, listener):
    response = await client.post("/api/initialize/eos", json={"data": eos_export()})
    assert response.status_code == 200
    body = response.json()
    assert (body["people"], body["metrics"], body["weeks"], body["values"]) == (2, 3, 2, 3)

    people = (await client.get("/api/people")).json()
    assert {p["email"] for p in people} == {"jane.doe@example.com", "john.roe@example.com"}

    weeks = (await client.get("/api/weeks")).json()
    assert [(w["name"], w["startDate"], w["endDate"]) for w in weeks] == [
        ("Week 1", "2024-01-01", "2024-01-07"),
        ("Week 2", "2024-01-08", "2024-01-14"),
    ]

    metrics = (await client.get("/api/metrics")).json()
    assert [m["name"] for m in metrics] == ["Qualified Leads", "Bookings", "Churn"]
    bookings = metrics[1]
    assert bookings["target"] == {"value": 2.5, "unit": "m", "operator": "gt"}
    assert metrics[2]["target"]["unit"] == "%"
    assert metrics[2]["valueType"] == "percent"
    assert metrics[0]["owner"]["id"] == metrics[2]["owner"]["id"]

    values = (await client.get("/api/weekly-values", params={"metricId": bookings["id"]})).json()
    assert [(v["value"], v["unit"]) for v in values] == [(3, "m")]

    assert listener.events("database_initialized")[0]["data"]["source"] == "eos"


@pytest.mark.asyncio
async def test_import_refuses_initialized_database(client: AsyncClient, alice):
    response = await client.post("/api/initialize/eos", json={"data": eos_export()})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_import_rejects_malformed_payload(client: AsyncClient):
    response = await client.post("/api/initialize/eos", json={"data": {"measurables": []}})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_inconsistent_import_leaves_nothing_behind(client: AsyncClient):
    data = eos_export()
    # two intervals starting on the same day
    data["dates"].append(
        {"intervalId": 9003, "intervalNo": 3, "fromDate": "2024-01-08", "toDate": "2024-01-14"}
    )
    response = await client.post("/api/initialize/eos", json={"data": data})
    assert response.status_code == 400

    assert (await client.get("/api/people")).json() == []
    assert (await client.get("/api/status")).json()["initialized"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize("from_date,to_date", [
    ("2024-01-03", "2024-01-02"),  # ends before it starts
    ("2024-01-03", "2024-01-09"),  # Wednesday start
    ("2024-01-01", "2024-01-14"),  # two weeks long
])
async def test_import_rejects_intervals_that_are_not_weeks(client: AsyncClient, from_date, to_date):
    data = eos_export()
    data["dates"][0] = {"intervalId": 9002, "intervalNo": 2, "fromDate": from_date, "toDate": to_date}

    response = await client.post("/api/initialize/eos", json={"data": data})
    assert response.status_code == 422

    assert (await client.get("/api/weeks")).json() == []
    assert (await client.get("/api/status")).json()["initialized"] is False


@pytest.mark.asyncio
async def test_import_rejects_repeated_interval_ids(client: AsyncClient):
    data = eos_export()
    data["dates"].append(
        {"intervalId": 9001, "intervalNo": 3, "fromDate": "2024-01-15", "toDate": "2024-01-21"}
    )
    response = await client.post("/api/initialize/eos", json={"data": data})
    assert response.status_code == 400
    assert response.json()["code"] == "invalid_import"
    assert (await client.get("/api/weeks")).json() == []


def test_check_intervals_orders_and_detects_overlap():
    first = EosDate(interval_id=1, interval_no=1, from_date="2024-01-08", to_date="2024-01-14")
    second = EosDate(interval_id=2, interval_no=2, from_date="2024-01-01", to_date="2024-01-07")
    assert [d.interval_id for d in check_intervals([first, second])] == [2, 1]

    twin = EosDate(interval_id=3, interval_no=3, from_date="2024-01-08", to_date="2024-01-14")
    with pytest.raises(InvalidImportError):
        check_intervals([first, second, twin])
