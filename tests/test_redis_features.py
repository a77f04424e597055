"""
Tests for the Redis-backed rate limiter and event list cache, against fakeredis.
"""

from typing import Optional

import fakeredis
import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from lutonai.api.routes import events as events_routes
from lutonai.services import cache_service, rate_limit_service
from lutonai.services.rate_limit_service import RateLimiter, client_identifier

from tests.conftest import create_event


@pytest_asyncio.fixture
async def fake_redis(monkeypatch):
    client = fakeredis.FakeAsyncRedis(decode_responses=True)

    async def get_fake_redis():
        return client

    monkeypatch.setattr(rate_limit_service, "get_redis", get_fake_redis)
    monkeypatch.setattr(cache_service, "get_redis", get_fake_redis)
    yield client
    await client.aclose()


class TestRateLimiter:
    @pytest.mark.asyncio
    async def test_allows_up_to_limit(self, fake_redis):
        limiter = RateLimiter("test", requests=3, window_seconds=30)
        results = [await limiter.check("1.2.3.4") for _ in range(4)]

        assert [r.success for r in results] == [True, True, True, False]
        assert [r.remaining for r in results] == [2, 1, 0, 0]

    @pytest.mark.asyncio
    async def test_rejected_requests_do_not_count(self, fake_redis):
        limiter = RateLimiter("test", requests=1, window_seconds=30)
        await limiter.check("1.2.3.4")
        await limiter.check("1.2.3.4")
        await limiter.check("1.2.3.4")
        assert await fake_redis.zcard(limiter.key("1.2.3.4")) == 1

    @pytest.mark.asyncio
    async def test_clients_are_independent(self, fake_redis):
        limiter = RateLimiter("test", requests=1, window_seconds=30)
        assert (await limiter.check("1.1.1.1")).success
        assert (await limiter.check("2.2.2.2")).success
        assert not (await limiter.check("1.1.1.1")).success

    @pytest.mark.asyncio
    async def test_reset(self, fake_redis):
        limiter = RateLimiter("test", requests=1, window_seconds=30)
        await limiter.check("1.2.3.4")
        await limiter.reset("1.2.3.4")
        assert (await limiter.check("1.2.3.4")).success

    @pytest.mark.asyncio
    async def test_fails_open_without_redis(self, monkeypatch):
        async def no_redis():
            return None

        monkeypatch.setattr(rate_limit_service, "get_redis", no_redis)
        limiter = RateLimiter("test", requests=1, window_seconds=30)
        assert all([(await limiter.check("x")).success for _ in range(5)])

    @pytest.mark.asyncio
    async def test_fails_open_on_redis_error(self, fake_redis, monkeypatch):
        def broken_pipeline(*args, **kwargs):
            raise ConnectionError("redis went away")

        monkeypatch.setattr(fake_redis, "pipeline", broken_pipeline)
        limiter = RateLimiter("test", requests=1, window_seconds=30)
        assert (await limiter.check("x")).success
        assert (await limiter.check("x")).success


CONTACT_FORM = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "subject": "Hello",
    "message": "Hi there",
}


def request_from(peer: str, forwarded: Optional[str] = None) -> Request:
    headers = [(b"x-forwarded-for", forwarded.encode())] if forwarded else []
    return Request({"type": "http", "headers": headers, "client": (peer, 50000)})


class TestClientIdentifier:
    def test_direct_peer_ignores_forwarded_header(self):
        assert client_identifier(request_from("203.0.113.7", "10.0.0.1")) == "203.0.113.7"

    def test_trusted_proxy_uses_nearest_untrusted_hop(self, monkeypatch):
        monkeypatch.setattr(rate_limit_service.settings, "TRUSTED_PROXIES", ["10.0.0.2", "10.0.0.3"])
        request = request_from("10.0.0.2", "6.6.6.6, 198.51.100.4, 10.0.0.3")
        assert client_identifier(request) == "198.51.100.4"

    def test_trusted_proxy_without_header(self, monkeypatch):
        monkeypatch.setattr(rate_limit_service.settings, "TRUSTED_PROXIES", ["10.0.0.2"])
        assert client_identifier(request_from("10.0.0.2")) == "10.0.0.2"


@pytest.mark.asyncio
async def test_contact_form_rate_limited(client: AsyncClient, fake_redis):
    statuses = [
        (await client.post("/api/contact", json=CONTACT_FORM)).status_code
        for _ in range(6)
    ]
    assert statuses == [201] * 5 + [429]

    response = await client.post("/api/contact", json=CONTACT_FORM)
    assert response.json()["error"]["code"] == "RATE_LIMITED"
    assert int(response.headers["retry-after"]) >= 1


@pytest.mark.asyncio
async def test_forwarded_header_does_not_reset_limit(client: AsyncClient, fake_redis):
    statuses = [
        (
            await client.post(
                "/api/contact", json=CONTACT_FORM, headers={"X-Forwarded-For": f"10.0.0.{n}"}
            )
        ).status_code
        for n in range(10)
    ]
    assert statuses == [201] * 5 + [429] * 5


@pytest.mark.asyncio
async def test_clients_behind_trusted_proxy_are_limited_separately(
    client: AsyncClient, fake_redis, monkeypatch
):
    monkeypatch.setattr(rate_limit_service.settings, "TRUSTED_PROXIES", ["127.0.0.1"])
    headers = {"X-Forwarded-For": "203.0.113.7"}
    statuses = [
        (await client.post("/api/contact", json=CONTACT_FORM, headers=headers)).status_code
        for _ in range(6)
    ]
    assert statuses == [201] * 5 + [429]

    response = await client.post(
        "/api/contact", json=CONTACT_FORM, headers={"X-Forwarded-For": "198.51.100.1"}
    )
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_event_list_cached_and_invalidated(client: AsyncClient, database, admin_headers, fake_redis):
    event = await create_event(database, title="Cached Meetup")

    first = (await client.get("/api/events")).json()
    assert first["cached"] is False
    second = (await client.get("/api/events")).json()
    assert second["cached"] is True
    assert second["events"][0]["title"] == "Cached Meetup"

    response = await client.put(
        f"/api/events/{event.id}", data={"title": "Renamed Meetup"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert await fake_redis.keys(f"{cache_service.EVENT_LIST_PREFIX}*") == []

    third = (await client.get("/api/events")).json()
    assert third["cached"] is False
    assert third["events"][0]["title"] == "Renamed Meetup"


@pytest.mark.asyncio
async def test_search_is_not_cached(client: AsyncClient, database, fake_redis):
    await create_event(database)
    await client.get("/api/events?search=machine")
    assert await fake_redis.keys(f"{cache_service.EVENT_LIST_PREFIX}*") == []



@pytest.mark.asyncio
async def test_event_cache_invalidated_after_commit(client: AsyncClient, database, admin_headers, monkeypatch):
    event = await create_event(database)
    calls = []
    original_commit = AsyncSession.commit

    async def recording_commit(self):
        calls.append("commit")
        await original_commit(self)

    async def recording_invalidate():
        calls.append("invalidate")

    monkeypatch.setattr(AsyncSession, "commit", recording_commit)
    monkeypatch.setattr(events_routes, "invalidate_event_cache", recording_invalidate)

    response = await client.put(f"/api/events/{event.id}", data={"title": "Renamed"}, headers=admin_headers)
    assert response.status_code == 200
    assert "invalidate" in calls
    assert calls.index("commit") < calls.index("invalidate")
