# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Server-side sessions keyed by an opaque cookie value."""

import logging
import secrets
from datetime import timedelta

from fastapi import Response
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from todolist_server.models import Session
from todolist_server.models.timestamp import utcnow

logger = logging.getLogger(__name__)


class SessionManager:
    """Issues, resolves and revokes login sessions stored in the ``sessions`` table.

    One instance is created per application and handed to request handlers
    through a dependency; it holds configuration only, never per-request state.
    """

    def __init__(self, cookie_name: str, max_age: timedelta, secure: bool = False) -> None:
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.secure = secure

    async def create(self, db: AsyncSession, user_id: int) -> str:
        """Persist a new session for ``user_id`` and return its id."""
        sid = secrets.token_urlsafe(32)
        db.add(Session(sid=sid, sess={"user_id": user_id}, expire=utcnow() + self.max_age))
        await db.flush()
        return sid

    async def resolve(self, db: AsyncSession, sid: str) -> int | None:
        """User id for a live session, or None if unknown or expired."""
        result = await db.execute(
            select(Session).where(Session.sid == sid, Session.expire > utcnow())
        )
        record = result.scalar_one_or_none()
        if not record:
            return None
        user_id = (record.sess or {}).get("user_id")
        return int(user_id) if user_id is not None else None

    async def destroy(self, db: AsyncSession, sid: str) -> None:
        await db.execute(delete(Session).where(Session.sid == sid))

    async def purge_expired(self, db: AsyncSession) -> int:
        """Delete expired rows. Returns the number removed."""
        result = await db.execute(delete(Session).where(Session.expire <= utcnow()))
        count = result.rowcount or 0
        if count:
            logger.info("Purged %d expired sessions", count)
        return count

    def set_cookie(self, response: Response, sid: str) -> None:
        response.set_cookie(
            self.cookie_name,
            sid,
            max_age=int(self.max_age.total_seconds()),
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(
            self.cookie_name,
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )
