# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""User credential storage, password hashing and verification."""

import logging

from passlib.context import CryptContext
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from todolist_server.models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a password for storage."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain, hashed)


def dummy_verify() -> None:
    """Spend roughly one verification worth of time when there is no hash to check."""
    pwd_context.dummy_verify()


class EmailAlreadyRegistered(Exception):
    """Raised when registering an email that already has an account."""


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
) -> User:
    """Insert a user with a hashed password.

    The unique index on ``users.email`` is the final arbiter; a concurrent
    registration that slips past the lookup surfaces as the same error.
    """
    if await get_user_by_email(db, email):
        raise EmailAlreadyRegistered(email)
    user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise EmailAlreadyRegistered(email) from e
    await db.refresh(user)
    logger.info("Registered user id=%s", user.id)
    return user


async def update_user_password(db: AsyncSession, email: str, password: str) -> None:
    await db.execute(
        update(User).where(User.email == email).values(password_hash=hash_password(password))
    )


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User | None:
    """Return the user when the password matches, else None.

    Unknown email and wrong password give the same result.
    """
    user = await get_user_by_email(db, email)
    if not user:
        dummy_verify()
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user
