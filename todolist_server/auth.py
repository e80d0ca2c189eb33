# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Authentication: the session gate for protected routes."""

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from todolist_server.database import get_db
from todolist_server.models import User
from todolist_server.services import credentials
from todolist_server.services.sessions import SessionManager

AUTH_REQUIRED = "Authentication required"


def get_session_manager(request: Request) -> SessionManager:
    """Session manager bound to the running application."""
    return request.app.state.session_manager


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=AUTH_REQUIRED,
    )


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
) -> User:
    """Resolve the session cookie to a user. Raises 401 if absent, expired or orphaned."""
    sid = request.cookies.get(sessions.cookie_name)
    if not sid:
        raise _unauthorized()
    user_id = await sessions.resolve(db, sid)
    if user_id is None:
        raise _unauthorized()
    user = await credentials.get_user(db, user_id)
    if not user:
        raise _unauthorized()
    return user


async def get_current_user_id(user: User = Depends(get_current_user)) -> int:
    """Id of the authenticated user."""
    return user.id
