"""
Tests for event registration endpoints including the capacity/waitlist scenario.
"""

import pytest
from datetime import timedelta
from io import BytesIO

from httpx import AsyncClient
from openpyxl import load_workbook

from tests.conftest import create_event


def registration(event_id: int, n: int, **extra) -> dict:
    return {"event_id": event_id, "name": f"Attendee {n}", "email": f"attendee{n}@example.com", **extra}


@pytest.mark.asyncio
async def test_capacity_two_three_registrations(client: AsyncClient, small_event):
    """First two are confirmed, the third goes to the waitlist."""
    statuses = []
    for n in range(3):
        response = await client.post("/api/event-registrations", json=registration(small_event.id, n))
        assert response.status_code == 201
        statuses.append(response.json()["registration"]["status"])

    assert statuses == ["CONFIRMED", "CONFIRMED", "WAITLISTED"]

    data = response.json()
    assert data["message"].startswith("You have been added to the waitlist")
    assert data["event_status"] == "UPCOMING"

    response = await client.get(f"/api/events/{small_event.id}/availability")
    assert response.status_code == 200
    availability = response.json()
    assert availability["capacity"] == 2
    assert availability["confirmed"] == 2
    assert availability["remaining"] == 0
    assert availability["is_full"] is True
    assert availability["waitlisted"] == 1
    assert availability["is_waitlist_available"] is True


@pytest.mark.asyncio
async def test_confirmed_response_shape(client: AsyncClient, test_event):
    response = await client.post(
        "/api/event-registrations",
        json=registration(test_event.id, 1, organization="Luton AI", phone="07700900123"),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Registration successful"
    assert data["registration"]["email"] == "attendee1@example.com"
    assert data["registration"]["organization"] == "Luton AI"
    assert data["availability"]["confirmed"] == 1
    assert data["availability"]["remaining"] == 99


@pytest.mark.asyncio
async def test_duplicate_registration(client: AsyncClient, test_event):
    await client.post("/api/event-registrations", json=registration(test_event.id, 1))
    response = await client.post(
        "/api/event-registrations",
        json={**registration(test_event.id, 1), "email": "Attendee1@example.com"},
    )
    assert response.status_code == 409
    assert response.json()["error"]["message"] == "You have already registered for this event"


@pytest.mark.asyncio
async def test_unknown_event(client: AsyncClient):
    response = await client.post("/api/event-registrations", json=registration(9999, 1))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_past_event(client: AsyncClient, database):
    event = await create_event(database, starts_in=timedelta(days=-3))
    response = await client.post("/api/event-registrations", json=registration(event.id, 1))
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Cannot register for past events"


@pytest.mark.asyncio
async def test_registration_closed(client: AsyncClient, database):
    event = await create_event(database, starts_in=timedelta(hours=3))
    response = await client.post("/api/event-registrations", json=registration(event.id, 1))
    assert response.status_code == 400
    assert response.json()["error"]["message"].startswith("Registration is closed")


@pytest.mark.asyncio
async def test_invalid_body(client: AsyncClient, test_event):
    response = await client.post(
        "/api/event-registrations",
        json={"event_id": test_event.id, "name": "", "email": "not-an-email"},
    )
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    paths = {d["path"] for d in error["details"]}
    assert {"name", "email"} <= paths


@pytest.mark.asyncio
async def test_list_registrations(client: AsyncClient, small_event):
    for n in range(3):
        await client.post("/api/event-registrations", json=registration(small_event.id, n))

    response = await client.get(
        f"/api/event-registrations?event_id={small_event.id}&limit=2&sort_by=name&sort_order=asc"
    )
    assert response.status_code == 200
    data = response.json()
    assert [r["name"] for r in data["registrations"]] == ["Attendee 0", "Attendee 1"]
    assert data["pagination"] == {
        "total": 3, "pages": 2, "current_page": 1, "per_page": 2, "has_more": True,
    }
    assert data["availability"]["is_full"] is True
    assert data["event_status"] == "UPCOMING"

    response = await client.get(f"/api/event-registrations?event_id={small_event.id}&status=WAITLISTED")
    assert [r["email"] for r in response.json()["registrations"]] == ["attendee2@example.com"]

    response = await client.get(f"/api/event-registrations?event_id={small_event.id}&search=attendee1")
    assert response.json()["pagination"]["total"] == 1


@pytest.mark.asyncio
async def test_list_requires_event_id(client: AsyncClient):
    response = await client.get("/api/event-registrations")
    assert response.status_code == 400

    response = await client.get("/api/event-registrations?event_id=1&limit=500")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_admin_status_changes(client: AsyncClient, small_event, admin_headers):
    ids = []
    for n in range(3):
        response = await client.post("/api/event-registrations", json=registration(small_event.id, n))
        ids.append(response.json()["registration"]["id"])

    # confirming a waitlisted registration while the event is full is refused
    response = await client.patch(
        f"/api/event-registrations/{ids[2]}", json={"status": "CONFIRMED"}, headers=admin_headers
    )
    assert response.status_code == 400

    response = await client.patch(
        f"/api/event-registrations/{ids[0]}", json={"status": "CANCELLED"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "CANCELLED"

    # cancelling frees a place but nobody is promoted automatically
    availability = (await client.get(f"/api/events/{small_event.id}/availability")).json()
    assert availability["confirmed"] == 1
    assert availability["waitlisted"] == 1

    response = await client.patch(
        f"/api/event-registrations/{ids[2]}", json={"status": "CONFIRMED"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "CONFIRMED"


@pytest.mark.asyncio
async def test_admin_get_and_delete(client: AsyncClient, test_event, admin_headers, user_headers):
    response = await client.post("/api/event-registrations", json=registration(test_event.id, 1))
    registration_id = response.json()["registration"]["id"]

    response = await client.get(f"/api/event-registrations/{registration_id}", headers=user_headers)
    assert response.status_code == 403

    response = await client.get(f"/api/event-registrations/{registration_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Attendee 1"

    response = await client.delete(f"/api/event-registrations/{registration_id}", headers=admin_headers)
    assert response.status_code == 200

    response = await client.get(f"/api/event-registrations/{registration_id}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_export(client: AsyncClient, test_event, admin_headers):
    for n in range(2):
        await client.post("/api/event-registrations", json=registration(test_event.id, n))

    response = await client.get(
        f"/api/event-registrations/export?event_id={test_event.id}", headers=admin_headers
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert "intro-to-machine-learning-registrations.xlsx" in response.headers["content-disposition"]

    sheet = load_workbook(BytesIO(response.content)).active
    rows = list(sheet.iter_rows(values_only=True))
    assert rows[0][:3] == ("ID", "Name", "Email")
    assert [r[1] for r in rows[1:]] == ["Attendee 0", "Attendee 1"]


@pytest.mark.asyncio
async def test_export_requires_admin(client: AsyncClient, test_event):
    response = await client.get(f"/api/event-registrations/export?event_id={test_event.id}")
    assert response.status_code == 401
