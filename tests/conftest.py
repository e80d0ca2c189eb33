# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pytest fixtures. Uses DATABASE_URL if set, else a throwaway SQLite file."""

import os
import tempfile
import uuid
from pathlib import Path

_DB_DIR = tempfile.mkdtemp(prefix="todolist-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{Path(_DB_DIR) / 'test.db'}")
os.environ["ENVIRONMENT"] = "development"
os.environ["SESSION_PRUNE_INTERVAL_MINUTES"] = "0"
# No SMTP: reset emails are never delivered and the token comes back in the response
os.environ.pop("SMTP_HOST", None)

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from todolist_server.database import async_session_maker, init_db  # noqa: E402
from todolist_server.main import app  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def tables():
    await init_db()


@pytest.fixture
async def client(tables):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def other_client(tables):
    """Second, independent browser (own cookie jar)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db(tables):
    async with async_session_maker() as session:
        yield session


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}@example.com"


async def register_and_login(client: AsyncClient, email: str | None = None, password: str = "secret1") -> str:
    """Register a fresh account and log the client in. Returns the email."""
    email = email or unique_email()
    reg = await client.post("/api/auth/register", json={"email": email, "password": password})
    assert reg.status_code == 201, reg.text
    login = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert login.status_code == 200, login.text
    return email
