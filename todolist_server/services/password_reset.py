# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Password reset: single-use, time-limited tokens.

A token moves from pending to consumed (``used = True``) exactly once, or
becomes unusable when ``expires_at`` passes. Requesting a new token does not
revoke earlier ones for the same email.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from todolist_server.config import settings
from todolist_server.models import PasswordResetToken
from todolist_server.models.timestamp import as_utc, utcnow
from todolist_server.services import credentials
from todolist_server.services.email import send_password_reset_email

logger = logging.getLogger(__name__)

INVALID_TOKEN = "Invalid or expired reset token"
EXPIRED_TOKEN = "Reset token has expired"


class InvalidResetToken(Exception):
    """Token is unknown, already used, or expired."""

    def __init__(self, message: str = INVALID_TOKEN) -> None:
        super().__init__(message)
        self.message = message


@dataclass
class ResetRequestResult:
    token: str | None
    delivered: bool


async def create_password_reset(db: AsyncSession, email: str) -> PasswordResetToken:
    prt = PasswordResetToken(
        email=email,
        token=secrets.token_hex(32),
        expires_at=utcnow() + timedelta(minutes=settings.reset_token_expire_minutes),
    )
    db.add(prt)
    await db.flush()
    return prt


async def get_password_reset(db: AsyncSession, token: str) -> PasswordResetToken | None:
    """Unused token row, expired or not."""
    result = await db.execute(
        select(PasswordResetToken).where(
            PasswordResetToken.token == token,
            PasswordResetToken.used == False,  # noqa: E712
        )
    )
    return result.scalar_one_or_none()


async def mark_password_reset_used(db: AsyncSession, token: str) -> bool:
    """Flip ``used`` on an unused token. False if another request got there first."""
    result = await db.execute(
        update(PasswordResetToken)
        .where(
            PasswordResetToken.token == token,
            PasswordResetToken.used == False,  # noqa: E712
        )
        .values(used=True)
        .execution_options(synchronize_session=False)
    )
    return (result.rowcount or 0) == 1


async def request_password_reset(db: AsyncSession, email: str) -> ResetRequestResult:
    """Mint and send a token if the account exists.

    When delivery fails the token stays valid and is logged so the flow can
    still be completed.
    """
    user = await credentials.get_user_by_email(db, email)
    if not user:
        return ResetRequestResult(token=None, delivered=False)
    prt = await create_password_reset(db, user.email)
    # Token must be durable before the link goes out
    await db.commit()
    delivered = await send_password_reset_email(user.email, prt.token)
    if not delivered:
        logger.warning("Password reset email not delivered; token for %s: %s", user.email, prt.token)
    return ResetRequestResult(token=prt.token, delivered=delivered)


async def confirm_password_reset(db: AsyncSession, token: str, new_password: str) -> None:
    """Consume ``token`` and set the owner's password. Raises InvalidResetToken."""
    prt = await get_password_reset(db, token)
    if not prt:
        raise InvalidResetToken(INVALID_TOKEN)
    if utcnow() > as_utc(prt.expires_at):
        raise InvalidResetToken(EXPIRED_TOKEN)
    if not await mark_password_reset_used(db, token):
        raise InvalidResetToken(INVALID_TOKEN)
    await credentials.update_user_password(db, prt.email, new_password)
    logger.info("Password reset completed for %s", prt.email)


async def purge_stale_tokens(db: AsyncSession) -> int:
    """Delete used or expired tokens. Returns the number removed."""
    result = await db.execute(
        delete(PasswordResetToken).where(
            or_(
                PasswordResetToken.used == True,  # noqa: E712
                PasswordResetToken.expires_at <= utcnow(),
            )
        )
    )
    return result.rowcount or 0
