"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags capacity     # Test capacity overshoot
  locust -f locustfile.py --tags throughput   # Test cache
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests

Creating events needs an admin account:
  LOAD_ADMIN_EMAIL=admin@example.com LOAD_ADMIN_PASSWORD=... locust -f locustfile.py

Registration is rate limited per client IP. Every simulated user sends its
own X-Forwarded-For address, which the API only honours from a trusted peer,
so start the target with the load generator listed as a proxy:
  TRUSTED_PROXIES='["127.0.0.1"]' uvicorn lutonai.main:app
"""

import io
import os
import random
from locust import HttpUser, task, between, tag, events
from datetime import datetime, timezone, timedelta

API = "/api"
CAPACITY = 10

# Shared state
EVENT_IDS = []
CAPACITY_EVENT_ID = None

ADMIN_EMAIL = os.environ.get("LOAD_ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.environ.get("LOAD_ADMIN_PASSWORD", "change-me-please")


def random_email():
    return f"load_{random.randint(100000, 999999)}@example.com"


def random_ip():
    return ".".join(str(random.randint(1, 254)) for _ in range(4))


def event_form(title, capacity, days_ahead=30):
    start = datetime.now(timezone.utc) + timedelta(days=days_ahead)
    return {
        "title": title,
        "description": "Load test event",
        "start_datetime": start.isoformat(),
        "end_datetime": (start + timedelta(hours=3)).isoformat(),
        "venue": "Test venue",
        "capacity": str(capacity),
    }


def thumbnail():
    return {"thumbnail": ("thumb.png", io.BytesIO(b"\x89PNG\r\n\x1a\n" + b"0" * 64), "image/png")}


def admin_headers(client):
    resp = client.post(f"{API}/auth/signin", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    if resp.status_code != 200:
        return {}
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "="*60)
    print(f"SETUP: capacity scenario uses one event with {CAPACITY} places")
    print("="*60)


class CapacityUser(HttpUser):
    """
    TEST 1: Capacity - 100 registrations -> 10 confirmed places

    Run: locust -f locustfile.py --tags capacity -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT COUNT(*) FROM event_registrations
      WHERE event_id = X AND status = 'CONFIRMED';
    Should be <= 10; everyone else is WAITLISTED (up to the waitlist cap).
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.ip = random_ip()
        if CAPACITY_EVENT_ID:
            return
        headers = admin_headers(self.client)
        if not headers:
            return
        resp = self.client.post(
            f"{API}/events",
            data=event_form("Capacity Test Event", CAPACITY),
            files=thumbnail(),
            headers=headers,
        )
        if resp.status_code == 201 and not CAPACITY_EVENT_ID:
            globals()["CAPACITY_EVENT_ID"] = resp.json()["id"]
            print(f"\nCreated event {CAPACITY_EVENT_ID} with {CAPACITY} places\n")

    @tag("capacity")
    @task
    def register(self):
        """All users compete for the same places."""
        if not CAPACITY_EVENT_ID:
            return

        with self.client.post(
            f"{API}/event-registrations",
            json={"event_id": CAPACITY_EVENT_ID, "name": "Load Tester", "email": random_email()},
            headers={"X-Forwarded-For": self.ip},
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code in (400, 429):
                resp.success()  # Expected: waitlist full or rate limited
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false on the API, run again

    Compare:
      - Avg response time
      - Requests/sec
      - P95/P99 latency
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_events_cached(self):
        """Hammer the cached endpoint."""
        page = random.randint(1, 5)
        resp = self.client.get(f"{API}/events?page={page}&limit=20", name=f"{API}/events [cached]")
        if resp.status_code == 200:
            for event in resp.json().get("events", []):
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @tag("throughput", "read")
    @task(3)
    def get_event_detail(self):
        """Event detail recomputes availability on every call."""
        if EVENT_IDS:
            event_id = random.choice(EVENT_IDS)
            self.client.get(f"{API}/events/{event_id}", name=f"{API}/events/{{id}}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.ip = random_ip()

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def invalid_event_id(self):
        """Register for a non-existent event."""
        with self.client.post(
            f"{API}/event-registrations",
            json={"event_id": 999999, "name": "Nobody", "email": random_email()},
            headers={"X-Forwarded-For": self.ip},
            catch_response=True,
        ) as resp:
            self._expect(resp, [404, 429])

    @tag("edge")
    @task
    def invalid_email(self):
        with self.client.post(
            f"{API}/event-registrations",
            json={"event_id": 1, "name": "Nobody", "email": "not-an-email"},
            headers={"X-Forwarded-For": self.ip},
            catch_response=True,
        ) as resp:
            self._expect(resp, [400, 429])

    @tag("edge")
    @task
    def malformed_json(self):
        """Send garbage data."""
        with self.client.post(
            f"{API}/event-registrations",
            data="not json at all",
            headers={"X-Forwarded-For": self.ip, "Content-Type": "application/json"},
            catch_response=True,
        ) as resp:
            self._expect(resp, [400, 429])

    @tag("edge")
    @task
    def missing_auth(self):
        """Admin stats without a token."""
        with self.client.get(f"{API}/admin/stats", catch_response=True) as resp:
            self._expect(resp, [401])


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Simulates real traffic:
      - Mostly browsing
      - Some registrations
      - Occasional community forms
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.ip = random_ip()

    @task(50)
    def browse_events(self):
        resp = self.client.get(f"{API}/events?page=1&limit=20&upcoming_only=true")
        if resp.status_code == 200:
            for event in resp.json().get("events", []):
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @task(20)
    def view_event(self):
        if EVENT_IDS:
            self.client.get(f"{API}/events/{random.choice(EVENT_IDS)}", name=f"{API}/events/{{id}}")

    @task(10)
    def browse_content(self):
        path = random.choice(["sponsors", "projects", "posts", "opportunities"])
        self.client.get(f"{API}/{path}", name=f"{API}/[content]")

    @task(5)
    def register(self):
        if EVENT_IDS:
            self.client.post(
                f"{API}/event-registrations",
                json={"event_id": random.choice(EVENT_IDS), "name": "Visitor", "email": random_email()},
                headers={"X-Forwarded-For": self.ip},
            )

    @task(1)
    def contact(self):
        self.client.post(
            f"{API}/contact",
            json={
                "first_name": "Load",
                "last_name": "Tester",
                "email": random_email(),
                "subject": "Hello",
                "message": "Just saying hi.",
            },
            headers={"X-Forwarded-For": self.ip},
        )
