"""
Tests for event endpoints.
"""

import pytest
from datetime import datetime, timezone, timedelta
from httpx import AsyncClient

from lutonai.core.timeutils import as_utc
from lutonai.models.event import EventState
from tests.conftest import create_event, png_upload


def event_form(**overrides) -> dict:
    start = datetime.now(timezone.utc) + timedelta(days=30)
    form = {
        "title": "Generative AI Meetup",
        "description": "Talks and demos",
        "start_datetime": start.isoformat(),
        "end_datetime": (start + timedelta(hours=3)).isoformat(),
        "venue": "The Hat Factory",
        "city": "Luton",
        "capacity": "50",
        "price": "0",
        "contact_email": "events@example.com",
    }
    form.update(overrides)
    return form


@pytest.mark.asyncio
async def test_create_event(client: AsyncClient, admin_headers, storage):
    response = await client.post(
        "/api/events", data=event_form(), files=png_upload(), headers=admin_headers
    )
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Generative AI Meetup"
    assert data["capacity"] == 50
    assert data["state"] == "PUBLISHED"
    assert data["thumbnail"].startswith("/uploads/events/")
    assert data["thumbnail"].endswith("-thumb.png")

    stored = list((storage.root / "events").iterdir())
    assert len(stored) == 1


@pytest.mark.asyncio
async def test_create_event_unauthenticated(client: AsyncClient):
    response = await client.post("/api/events", data=event_form(), files=png_upload())
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_event_requires_admin(client: AsyncClient, user_headers):
    response = await client.post(
        "/api/events", data=event_form(), files=png_upload(), headers=user_headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_event_end_before_start(client: AsyncClient, admin_headers):
    start = datetime.now(timezone.utc) + timedelta(days=5)
    response = await client.post(
        "/api/events",
        data=event_form(start_datetime=start.isoformat(), end_datetime=(start - timedelta(hours=1)).isoformat()),
        files=png_upload(),
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_create_event_negative_capacity(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/events", data=event_form(capacity="-1"), files=png_upload(), headers=admin_headers
    )
    assert response.status_code == 400
    assert any(d["path"] == "capacity" for d in response.json()["error"]["details"])


@pytest.mark.asyncio
async def test_create_event_rejects_non_image(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/events",
        data=event_form(),
        files={"thumbnail": ("notes.txt", b"hello", "text/plain")},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Unsupported file type: text/plain"


@pytest.mark.asyncio
async def test_list_events(client: AsyncClient, database):
    await create_event(database, title="Later", starts_in=timedelta(days=20))
    await create_event(database, title="Sooner", starts_in=timedelta(days=2))
    await create_event(database, title="Finished", starts_in=timedelta(days=-5))

    response = await client.get("/api/events")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["cached"] is False
    assert [e["title"] for e in data["events"]] == ["Finished", "Sooner", "Later"]

    response = await client.get("/api/events?upcoming_only=true&limit=1")
    data = response.json()
    assert data["total"] == 2
    assert data["has_more"] is True
    assert [e["title"] for e in data["events"]] == ["Sooner"]


@pytest.mark.asyncio
async def test_list_events_filters(client: AsyncClient, database):
    await create_event(database, title="Robotics Night")
    await create_event(database, title="Draft Event", state=EventState.DRAFT)

    response = await client.get("/api/events?search=robotics")
    assert [e["title"] for e in response.json()["events"]] == ["Robotics Night"]

    response = await client.get("/api/events?state=DRAFT")
    assert [e["title"] for e in response.json()["events"]] == ["Draft Event"]


@pytest.mark.asyncio
async def test_get_event_with_availability(client: AsyncClient, test_event):
    response = await client.get(f"/api/events/{test_event.id}")
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == test_event.title
    assert data["status"] == "UPCOMING"
    assert data["availability"]["capacity"] == 100
    assert data["availability"]["remaining"] == 100
    assert data["availability"]["is_registration_open"] is True


@pytest.mark.asyncio
async def test_get_event_not_found(client: AsyncClient):
    response = await client.get("/api/events/99999")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_event_without_capacity_is_never_full(client: AsyncClient, database):
    event = await create_event(database, capacity=None)
    availability = (await client.get(f"/api/events/{event.id}/availability")).json()
    assert availability["capacity"] is None
    assert availability["remaining"] is None
    assert availability["is_full"] is False


@pytest.mark.asyncio
async def test_update_event(client: AsyncClient, admin_headers, storage):
    created = (
        await client.post("/api/events", data=event_form(), files=png_upload(), headers=admin_headers)
    ).json()

    response = await client.put(
        f"/api/events/{created['id']}",
        data={"title": "Renamed Meetup", "capacity": "75"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Renamed Meetup"
    assert data["capacity"] == 75
    assert data["venue"] == "The Hat Factory"
    assert data["thumbnail"] == created["thumbnail"]

    response = await client.put(
        f"/api/events/{created['id']}",
        data={"state": "CANCELLED"},
        files=png_upload(name="new.png"),
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["state"] == "CANCELLED"
    assert response.json()["thumbnail"].endswith("-new.png")
    # the replaced thumbnail is removed
    assert [p.name.endswith("-new.png") for p in (storage.root / "events").iterdir()] == [True]


@pytest.mark.asyncio
async def test_update_event_can_remove_capacity_and_deadline(client: AsyncClient, admin_headers, database):
    start = datetime.now(timezone.utc) + timedelta(days=30)
    event = await create_event(
        database, capacity=2, starts_in=timedelta(days=30), registration_deadline=start - timedelta(days=7)
    )

    response = await client.put(
        f"/api/events/{event.id}",
        data={"capacity": "", "registration_deadline": "", "venue": ""},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["capacity"] is None
    assert data["registration_deadline"] is None
    # blanks outside the clearable set still mean "unchanged"
    assert data["venue"] == "Luton Library"

    availability = (await client.get(f"/api/events/{event.id}/availability")).json()
    assert availability["capacity"] is None
    assert availability["remaining"] is None
    assert availability["is_full"] is False
    deadline = datetime.fromisoformat(availability["registration_deadline"].replace("Z", "+00:00"))
    assert deadline == as_utc(event.start_datetime) - timedelta(hours=24)

    # a later edit can put a limit back
    response = await client.put(f"/api/events/{event.id}", data={"capacity": "5"}, headers=admin_headers)
    assert response.json()["capacity"] == 5


@pytest.mark.asyncio
async def test_update_event_window_check(client: AsyncClient, admin_headers, test_event):
    end = test_event.start_datetime - timedelta(hours=1)
    response = await client.put(
        f"/api/events/{test_event.id}",
        data={"end_datetime": end.isoformat()},
        headers=admin_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_event_removes_registrations(client: AsyncClient, admin_headers, test_event):
    response = await client.post(
        "/api/event-registrations",
        json={"event_id": test_event.id, "name": "Ada", "email": "ada@example.com"},
    )
    registration_id = response.json()["registration"]["id"]

    response = await client.delete(f"/api/events/{test_event.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Event deleted successfully"

    assert (await client.get(f"/api/events/{test_event.id}")).status_code == 404
    response = await client.get(f"/api/event-registrations/{registration_id}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_event_survives_missing_file(client: AsyncClient, admin_headers, database):
    event = await create_event(database, thumbnail="/uploads/events/already-gone.png")
    response = await client.delete(f"/api/events/{event.id}", headers=admin_headers)
    assert response.status_code == 200
