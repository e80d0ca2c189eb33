#!/usr/bin/env python3
# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Delete expired sessions and stale reset tokens. Run: python -m todolist_server.scripts.purge_expired"""

import asyncio

from todolist_server.database import async_session_maker, init_db
from todolist_server.main import build_session_manager
from todolist_server.services.password_reset import purge_stale_tokens


async def main():
    await init_db()
    sessions = build_session_manager()
    async with async_session_maker() as session:
        removed_sessions = await sessions.purge_expired(session)
        removed_tokens = await purge_stale_tokens(session)
        await session.commit()
    print(f"Removed {removed_sessions} expired sessions and {removed_tokens} reset tokens.")


if __name__ == "__main__":
    asyncio.run(main())
