"""
Tests for authentication endpoints: registration, sign-in and session.
"""

import pytest
from datetime import timedelta
from httpx import AsyncClient

from lutonai.core.security import create_access_token, decode_access_token, hash_password, verify_password


@pytest.mark.asyncio
async def test_register_user(client: AsyncClient):
    """Successful registration returns user data."""
    response = await client.post("/api/auth/register", json={
        "name": "New Member",
        "email": "new@example.com",
        "password": "securepassword123",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "new@example.com"
    assert data["role"] == "USER"
    assert "hashed_password" not in data  # Never expose password hash


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, regular_user):
    """Duplicate email returns 409, regardless of case."""
    response = await client.post("/api/auth/register", json={
        "name": "Someone",
        "email": "MEMBER@example.com",
        "password": "securepassword123",
    })
    assert response.status_code == 409
    assert response.json()["error"]["message"] == "User with this email already exists"


@pytest.mark.asyncio
async def test_register_short_password(client: AsyncClient):
    response = await client.post("/api/auth/register", json={
        "name": "Someone",
        "email": "short@example.com",
        "password": "abc",
    })
    assert response.status_code == 400
    assert response.json()["error"]["details"][0]["path"] == "password"


@pytest.mark.asyncio
async def test_signin(client: AsyncClient, regular_user):
    """Valid credentials return a token carrying the user id and role."""
    response = await client.post("/api/auth/signin", json={
        "email": "member@example.com",
        "password": "testpassword123",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["id"] == regular_user.id

    payload = decode_access_token(data["access_token"])
    assert payload["sub"] == str(regular_user.id)
    assert payload["role"] == "USER"


@pytest.mark.asyncio
async def test_signin_wrong_password(client: AsyncClient, regular_user):
    response = await client.post("/api/auth/signin", json={
        "email": "member@example.com",
        "password": "wrongpassword",
    })
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_signin_unknown_email(client: AsyncClient):
    response = await client.post("/api/auth/signin", json={
        "email": "nobody@example.com",
        "password": "whatever123",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_session(client: AsyncClient, regular_user, user_headers):
    response = await client.get("/api/auth/session", headers=user_headers)
    assert response.status_code == 200
    assert response.json()["email"] == "member@example.com"


@pytest.mark.asyncio
async def test_session_without_token(client: AsyncClient):
    response = await client.get("/api/auth/session")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_session_with_bad_token(client: AsyncClient):
    response = await client.get("/api/auth/session", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid authentication token"


@pytest.mark.asyncio
async def test_session_with_expired_token(client: AsyncClient, regular_user):
    token = create_access_token({"sub": str(regular_user.id)}, expires_delta=timedelta(seconds=-1))
    response = await client.get("/api/auth/session", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Session expired"


@pytest.mark.asyncio
async def test_session_for_deleted_user(client: AsyncClient):
    token = create_access_token({"sub": "4242"})
    response = await client.get("/api/auth/session", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_password_hashing():
    hashed = hash_password("correct horse battery staple")
    assert hashed != "correct horse battery staple"
    assert verify_password("correct horse battery staple", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("anything", "not-a-bcrypt-hash")
