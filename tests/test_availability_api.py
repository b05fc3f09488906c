"""
Tests for the availability HTTP endpoints.
"""

from datetime import datetime, timedelta

import httpx
import pytest
import pytz
from sqlalchemy.ext.asyncio import async_sessionmaker

from tutor_availability.core.database import get_db
from tutor_availability.main import app


def utc_today():
    return datetime.now(pytz.utc).date()


class TestCalendarEndpoint:

    @pytest.mark.asyncio
    async def test_calendar_by_tutor_id(self, client, everyday_tutor):
        response = await client.get("/api/v1/availability/calendar", params={"tutorId": "tutor-2", "days": "3"})

        assert response.status_code == 200
        body = response.json()
        assert body["timezone"] == "UTC"
        assert [day["date"] for day in body["days"]] == [
            (utc_today() + timedelta(days=i)).isoformat() for i in range(3)
        ]
        assert all(day["slots"] == ["09:00", "09:30"] for day in body["days"])

    @pytest.mark.asyncio
    async def test_calendar_by_email(self, client, everyday_tutor):
        response = await client.get("/api/v1/availability/calendar", params={"email": "daily@example.com", "days": 1})

        assert response.status_code == 200
        assert response.json()["days"][0]["slots"] == ["09:00", "09:30"]

    @pytest.mark.asyncio
    async def test_tutor_id_takes_precedence(self, client, everyday_tutor):
        response = await client.get(
            "/api/v1/availability/calendar",
            params={"tutorId": "tutor-404", "email": "daily@example.com", "days": 2}
        )

        assert response.status_code == 200
        assert [day["slots"] for day in response.json()["days"]] == [[], []]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("days,expected", [(None, 30), ("0", 30), ("61", 60), ("abc", 30), ("45", 45)])
    async def test_window_length(self, client, everyday_tutor, days, expected):
        params = {"tutorId": "tutor-2"}
        if days is not None:
            params["days"] = days

        response = await client.get("/api/v1/availability/calendar", params=params)

        assert response.status_code == 200
        assert len(response.json()["days"]) == expected

    @pytest.mark.asyncio
    async def test_missing_identifier(self, client):
        response = await client.get("/api/v1/availability/calendar")

        assert response.status_code == 400
        assert response.json()["error"] == "tutorId or email required"

    @pytest.mark.asyncio
    async def test_unknown_email(self, client, everyday_tutor):
        response = await client.get("/api/v1/availability/calendar", params={"email": "nobody@example.com"})

        assert response.status_code == 404
        assert response.json()["error"] == "Tutor not found"

    @pytest.mark.asyncio
    async def test_tutor_without_availability(self, client):
        response = await client.get("/api/v1/availability/calendar", params={"tutorId": "tutor-404", "days": 7})

        assert response.status_code == 200
        body = response.json()
        assert body["timezone"] == "UTC"
        assert len(body["days"]) == 7
        assert all(day["slots"] == [] for day in body["days"])

    @pytest.mark.asyncio
    async def test_repeated_requests_match(self, client, everyday_tutor):
        params = {"tutorId": "tutor-2", "days": 10}

        first = await client.get("/api/v1/availability/calendar", params=params)
        second = await client.get("/api/v1/availability/calendar", params=params)

        assert first.content == second.content

    @pytest.mark.asyncio
    async def test_storage_failure(self, broken_engine):
        factory = async_sessionmaker(broken_engine)

        async def override_get_db():
            async with factory() as session:
                yield session

        app.dependency_overrides[get_db] = override_get_db
        try:
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
                response = await client.get("/api/v1/availability/calendar", params={"email": "daily@example.com"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Internal Server Error"
        assert "details" in body


class TestWeeklyAvailabilityEndpoint:

    @pytest.mark.asyncio
    async def test_lists_active_rules(self, client, tutor):
        response = await client.get("/api/v1/availability", params={"email": "tutor@example.com"})

        assert response.status_code == 200
        body = response.json()
        assert body["timezone"] == "America/New_York"
        assert [(s["dayOfWeek"], s["start"], s["end"]) for s in body["slots"]] == [
            (1, "09:00", "10:00"),
            (1, "13:00", "14:00"),
            (3, "09:00", "10:00"),
        ]

    @pytest.mark.asyncio
    async def test_missing_identifier(self, client):
        response = await client.get("/api/v1/availability")

        assert response.status_code == 400


class TestExceptionEndpoint:

    @pytest.mark.asyncio
    async def test_added_range_shows_in_calendar(self, client, everyday_tutor):
        today = utc_today().isoformat()

        response = await client.post("/api/v1/availability/exception", json={
            "userEmail": "daily@example.com",
            "date": today,
            "start": "17:00",
            "end": "18:00",
            "isActive": True,
        })

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["exception"]["tutorId"] == "tutor-2"
        assert body["exception"]["isActive"] is True

        calendar = await client.get("/api/v1/availability/calendar", params={"tutorId": "tutor-2", "days": 1})
        assert calendar.json()["days"][0]["slots"] == ["09:00", "09:30", "17:00", "17:30"]

    @pytest.mark.asyncio
    async def test_removed_range_shows_in_calendar(self, client, everyday_tutor):
        response = await client.post("/api/v1/availability/exception", json={
            "tutorId": "tutor-2",
            "date": utc_today().isoformat(),
            "start": "09:00",
            "end": "09:30",
            "isActive": False,
        })

        assert response.status_code == 201

        calendar = await client.get("/api/v1/availability/calendar", params={"tutorId": "tutor-2", "days": 1})
        assert calendar.json()["days"][0]["slots"] == ["09:30"]

    @pytest.mark.asyncio
    async def test_missing_fields(self, client, everyday_tutor):
        response = await client.post("/api/v1/availability/exception", json={"tutorId": "tutor-2", "date": "2026-10-21"})

        assert response.status_code == 400
        assert response.json()["error"] == "date, start, end, isActive required"

    @pytest.mark.asyncio
    async def test_start_after_end(self, client, everyday_tutor):
        response = await client.post("/api/v1/availability/exception", json={
            "tutorId": "tutor-2",
            "date": "2026-10-21",
            "start": "18:00",
            "end": "17:00",
            "isActive": True,
        })

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_email(self, client, everyday_tutor):
        response = await client.post("/api/v1/availability/exception", json={
            "userEmail": "nobody@example.com",
            "date": "2026-10-21",
            "start": "17:00",
            "end": "18:00",
            "isActive": True,
        })

        assert response.status_code == 404


class TestExceptionPayloadTypes:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field,value", [
        ("isActive", "maybe"),
        ("isActive", "false"),
        ("isActive", 1),
        ("date", 20261021),
        ("start", 1700),
    ])
    async def test_badly_typed_field_is_rejected(self, client, everyday_tutor, field, value):
        payload = {
            "tutorId": "tutor-2",
            "date": utc_today().isoformat(),
            "start": "17:00",
            "end": "18:00",
            "isActive": True,
        }
        payload[field] = value

        response = await client.post("/api/v1/availability/exception", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid request"
        assert body["details"]

        stored = await client.get("/api/v1/availability/calendar", params={"tutorId": "tutor-2", "days": 1})
        assert stored.json()["days"][0]["slots"] == ["09:00", "09:30"]


class TestWeeklyRuleWriteEndpoints:

    @pytest.mark.asyncio
    async def test_created_rule_shows_in_calendar(self, client):
        today = utc_today()
        weekday = today.isoweekday() % 7

        response = await client.post("/api/v1/availability", json={
            "tutorId": "tutor-9",
            "dayOfWeek": weekday,
            "start": "14:00",
            "end": "15:00",
            "timezone": "UTC",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["slot"]["tutorId"] == "tutor-9"
        assert body["slot"]["dayOfWeek"] == weekday
        assert body["slot"]["start"] == "14:00"
        assert body["slot"]["end"] == "15:00"
        assert body["slot"]["timezone"] == "UTC"

        calendar = await client.get("/api/v1/availability/calendar", params={"tutorId": "tutor-9", "days": 8})
        days = calendar.json()["days"]
        assert days[0]["slots"] == ["14:00", "14:30"]
        assert days[7]["slots"] == ["14:00", "14:30"]
        assert all(day["slots"] == [] for day in days[1:7])

    @pytest.mark.asyncio
    async def test_create_by_email(self, client, tutor):
        response = await client.post("/api/v1/availability", json={
            "email": "tutor@example.com",
            "dayOfWeek": 6,
            "start": "10:00",
            "end": "11:00",
        })

        assert response.status_code == 201
        assert response.json()["slot"]["tutorId"] == "tutor-1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"tutorId": "tutor-9", "dayOfWeek": 7, "start": "09:00", "end": "10:00"},
        {"tutorId": "tutor-9", "dayOfWeek": 1, "start": "10:00", "end": "09:00"},
        {"tutorId": "tutor-9", "dayOfWeek": 1, "start": "09:00"},
        {"tutorId": "tutor-9", "dayOfWeek": 1, "start": "09:00", "end": "10:00", "timezone": "Mars/Olympus"},
        {"tutorId": "tutor-9", "dayOfWeek": "monday", "start": "09:00", "end": "10:00"},
        {"dayOfWeek": 1, "start": "09:00", "end": "10:00"},
    ])
    async def test_create_rejects_invalid_payload(self, client, payload):
        response = await client.post("/api/v1/availability", json=payload)

        assert response.status_code == 400
        assert "error" in response.json()

    @pytest.mark.asyncio
    async def test_deleted_rule_leaves_calendar(self, client):
        weekday = utc_today().isoweekday() % 7
        created = await client.post("/api/v1/availability", json={
            "tutorId": "tutor-9", "dayOfWeek": weekday, "start": "14:00", "end": "15:00",
        })
        rule_id = created.json()["slot"]["id"]

        response = await client.delete(f"/api/v1/availability/{rule_id}")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        calendar = await client.get("/api/v1/availability/calendar", params={"tutorId": "tutor-9", "days": 1})
        assert calendar.json()["days"][0]["slots"] == []

    @pytest.mark.asyncio
    async def test_delete_unknown_rule(self, client):
        response = await client.delete("/api/v1/availability/rule-404")

        assert response.status_code == 404
        assert response.json()["error"] == "Availability rule not found"


class TestUnexpectedErrors:

    @pytest.mark.asyncio
    async def test_failure_outside_endpoint_is_json(self):
        async def failing_get_db():
            raise RuntimeError("connection pool exhausted")
            yield

        app.dependency_overrides[get_db] = failing_get_db
        try:
            transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
                response = await client.get("/api/v1/availability/calendar", params={"tutorId": "tutor-2"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error", "details": "connection pool exhausted"}
