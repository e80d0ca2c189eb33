# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Auth endpoint tests: registration, login, logout and /me."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from conftest import register_and_login, unique_email
from todolist_server.config import settings
from todolist_server.main import app
from todolist_server.models import User

pytestmark = pytest.mark.anyio


async def test_register_returns_user_without_password(client: AsyncClient):
    email = unique_email()
    r = await client.post(
        "/api/auth/register",
        json={"email": email, "password": "secret1", "firstName": "Ada", "lastName": "Lovelace"},
    )
    assert r.status_code == 201
    data = r.json()
    assert data["message"] == "User created successfully"
    user = data["user"]
    assert user["email"] == email
    assert user["firstName"] == "Ada"
    assert user["lastName"] == "Lovelace"
    assert "id" in user
    assert "password" not in user
    assert "passwordHash" not in user


async def test_register_duplicate_email_rejected(client: AsyncClient, db):
    email = unique_email()
    first = await client.post("/api/auth/register", json={"email": email, "password": "secret1"})
    assert first.status_code == 201

    second = await client.post("/api/auth/register", json={"email": email, "password": "secret2"})
    assert second.status_code == 400
    assert second.json()["detail"] == "Email already registered"

    count = await db.scalar(select(func.count()).select_from(User).where(User.email == email))
    assert count == 1


async def test_register_invalid_data(client: AsyncClient):
    """Bad email and short password give 400 with field errors."""
    r = await client.post("/api/auth/register", json={"email": "not-an-email", "password": "123"})
    assert r.status_code == 400
    body = r.json()
    assert body["detail"] == "Invalid request data"
    fields = {err["loc"][-1] for err in body["errors"]}
    assert {"email", "password"} <= fields


async def test_login_sets_session_cookie(client: AsyncClient):
    email = unique_email()
    await client.post("/api/auth/register", json={"email": email, "password": "secret1"})

    r = await client.post("/api/auth/login", json={"email": email, "password": "secret1"})
    assert r.status_code == 200
    assert r.json()["message"] == "Login successful"
    assert r.json()["user"]["email"] == email

    set_cookie = r.headers["set-cookie"]
    assert settings.session_cookie_name in set_cookie
    assert "HttpOnly" in set_cookie
    assert client.cookies.get(settings.session_cookie_name)

    me = await client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["email"] == email


async def test_login_failures_look_identical(client: AsyncClient):
    """Wrong password and unknown email cannot be told apart."""
    email = unique_email()
    await client.post("/api/auth/register", json={"email": email, "password": "secret1"})

    wrong_password = await client.post("/api/auth/login", json={"email": email, "password": "wrong"})
    unknown_email = await client.post(
        "/api/auth/login", json={"email": unique_email("ghost"), "password": "wrong"}
    )
    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()
    assert settings.session_cookie_name not in wrong_password.headers.get("set-cookie", "")


async def test_me_requires_auth(client: AsyncClient):
    """GET /auth/me without a session returns 401."""
    r = await client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json()["detail"] == "Authentication required"


async def test_unknown_session_cookie_rejected(client: AsyncClient):
    r = await client.get("/api/auth/me", headers={"Cookie": f"{settings.session_cookie_name}=forged"})
    assert r.status_code == 401


async def test_logout_invalidates_session_server_side(client: AsyncClient):
    await register_and_login(client)
    sid = client.cookies.get(settings.session_cookie_name)
    assert sid

    r = await client.post("/api/auth/logout")
    assert r.status_code == 200
    assert r.json()["message"] == "Logout successful"
    assert (await client.get("/api/auth/me")).status_code == 401

    # Replaying the old cookie from elsewhere does not work either
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as replay:
        r = await replay.get("/api/auth/me", headers={"Cookie": f"{settings.session_cookie_name}={sid}"})
    assert r.status_code == 401


async def test_logout_without_session_is_ok(client: AsyncClient):
    r = await client.post("/api/auth/logout")
    assert r.status_code == 200


async def test_health(client: AsyncClient):
    r = await client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


async def test_login_again_revokes_previous_session(client: AsyncClient):
    email = await register_and_login(client)
    first_sid = client.cookies.get(settings.session_cookie_name)

    r = await client.post("/api/auth/login", json={"email": email, "password": "secret1"})
    assert r.status_code == 200
    second_sid = client.cookies.get(settings.session_cookie_name)
    assert second_sid and second_sid != first_sid
    assert (await client.get("/api/auth/me")).status_code == 200

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as replay:
        r = await replay.get("/api/auth/me", headers={"Cookie": f"{settings.session_cookie_name}={first_sid}"})
    assert r.status_code == 401
