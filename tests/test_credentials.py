# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Credential store tests."""

import pytest

from conftest import unique_email
from todolist_server.services import credentials

pytestmark = pytest.mark.anyio


async def test_password_is_stored_hashed(db):
    user = await credentials.create_user(db, unique_email(), "secret1", first_name="Ada")
    await db.commit()
    assert user.password_hash != "secret1"
    assert credentials.verify_password("secret1", user.password_hash)
    assert user.first_name == "Ada"
    assert user.last_name is None
    assert user.created_at is not None


async def test_lookup_by_id_and_email(db):
    email = unique_email()
    user = await credentials.create_user(db, email, "secret1")
    await db.commit()
    assert (await credentials.get_user(db, user.id)).email == email
    assert (await credentials.get_user_by_email(db, email)).id == user.id
    assert await credentials.get_user_by_email(db, unique_email("missing")) is None


async def test_email_lookup_is_case_sensitive(db):
    email = unique_email("CaseUser")
    await credentials.create_user(db, email, "secret1")
    await db.commit()
    assert await credentials.get_user_by_email(db, email.lower()) is None


async def test_duplicate_email_raises(db):
    email = unique_email()
    await credentials.create_user(db, email, "secret1")
    await db.commit()
    with pytest.raises(credentials.EmailAlreadyRegistered):
        await credentials.create_user(db, email, "secret2")


async def test_authenticate(db):
    email = unique_email()
    user = await credentials.create_user(db, email, "secret1")
    await db.commit()
    assert (await credentials.authenticate_user(db, email, "secret1")).id == user.id
    assert await credentials.authenticate_user(db, email, "wrong") is None
    assert await credentials.authenticate_user(db, unique_email("ghost"), "secret1") is None


async def test_update_password_rehashes(db):
    email = unique_email()
    user = await credentials.create_user(db, email, "secret1")
    await db.commit()
    old_hash = user.password_hash

    await credentials.update_user_password(db, email, "secret2")
    await db.commit()
    await db.refresh(user)

    assert user.password_hash != old_hash
    assert await credentials.authenticate_user(db, email, "secret2") is not None
    assert await credentials.authenticate_user(db, email, "secret1") is None
