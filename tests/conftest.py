"""
Pytest fixtures for the test database, client, and authentication.

Every test gets a fresh in-memory SQLite database behind the real
``Database`` class, so requests go through the production ``get_db``
(commit on success, rollback on error). Redis and e-mail are disabled;
uploads go to a per-test temporary directory.
"""

import os
import tempfile

os.environ["ENVIRONMENT"] = "test"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="lutonai-uploads-")
os.environ["REDIS_ENABLED"] = "false"
os.environ["EMAIL_ENABLED"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from lutonai.main import app
from lutonai.db.base import Base
from lutonai.db.session import Database
from lutonai.core.security import create_access_token, hash_password
from lutonai.models.user import User, UserRole
from lutonai.models.event import Event
from lutonai.services.storage_service import LocalStorage, get_storage

TEST_DATABASE_URL = "sqlite+aiosqlite://"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Fresh schema per test on a single shared in-memory connection."""
    db = Database(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    db.connect()
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield db

    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await db.disconnect()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Session for service-level tests; committed when the test finishes."""
    async with database.session() as session:
        yield session


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(root=tmp_path / "uploads")


@pytest_asyncio.fixture
async def client(database: Database, storage: LocalStorage) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the test database and upload directory."""
    app.state.database = database
    app.dependency_overrides[get_storage] = lambda: storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def create_user(
    database: Database,
    email: str,
    role: UserRole = UserRole.USER,
    password: str = "testpassword123",
    name: str = "Test User",
) -> User:
    async with database.session() as session:
        user = User(name=name, email=email, hashed_password=hash_password(password), role=role)
        session.add(user)
        await session.flush()
        await session.refresh(user)
    return user


async def create_event(
    database: Database,
    capacity: Optional[int] = 100,
    starts_in: timedelta = timedelta(days=30),
    duration: timedelta = timedelta(hours=3),
    **fields,
) -> Event:
    start = datetime.now(timezone.utc) + starts_in
    async with database.session() as session:
        event = Event(
            title=fields.pop("title", "Intro to Machine Learning"),
            description=fields.pop("description", "A hands-on evening workshop"),
            start_datetime=start,
            end_datetime=start + duration,
            venue=fields.pop("venue", "Luton Library"),
            capacity=capacity,
            **fields,
        )
        session.add(event)
        await session.flush()
        await session.refresh(event)
    return event


def bearer(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id), "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


def png_upload(field: str = "thumbnail", name: str = "thumb.png") -> dict:
    return {field: (name, PNG_BYTES, "image/png")}


@pytest_asyncio.fixture
async def admin_user(database: Database) -> User:
    return await create_user(database, "admin@example.com", role=UserRole.ADMIN, name="Admin")


@pytest_asyncio.fixture
async def regular_user(database: Database) -> User:
    return await create_user(database, "member@example.com", name="Member")


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return bearer(admin_user)


@pytest.fixture
def user_headers(regular_user: User) -> dict:
    return bearer(regular_user)


@pytest_asyncio.fixture
async def test_event(database: Database) -> Event:
    """Upcoming event with 100 places."""
    return await create_event(database, capacity=100)


@pytest_asyncio.fixture
async def small_event(database: Database) -> Event:
    """Upcoming event with 2 places."""
    return await create_event(database, capacity=2, title="Small Group Session")
