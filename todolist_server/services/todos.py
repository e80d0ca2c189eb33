# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Owner-scoped todo storage.

Every query filters on both the todo id and the owner id, so a row that
belongs to someone else is indistinguishable from one that does not exist.
"""

from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from todolist_server.models import Todo
from todolist_server.models.timestamp import utcnow

# Upper bound of the integer primary key column
MAX_TODO_ID = 2**31 - 1


def _valid_id(todo_id: int) -> bool:
    return 0 < todo_id <= MAX_TODO_ID


async def list_todos(db: AsyncSession, user_id: int) -> list[Todo]:
    result = await db.execute(
        select(Todo).where(Todo.user_id == user_id).order_by(Todo.created_at, Todo.id)
    )
    return list(result.scalars().all())


async def get_todo(db: AsyncSession, todo_id: int, user_id: int) -> Todo | None:
    if not _valid_id(todo_id):
        return None
    result = await db.execute(
        select(Todo).where(Todo.id == todo_id, Todo.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def create_todo(db: AsyncSession, user_id: int, text: str, completed: bool = False) -> Todo:
    todo = Todo(
        user_id=user_id,
        text=text,
        completed=completed,
        completed_at=utcnow() if completed else None,
    )
    db.add(todo)
    await db.flush()
    await db.refresh(todo)
    return todo


async def update_todo(
    db: AsyncSession, todo_id: int, user_id: int, changes: dict[str, Any]
) -> Todo | None:
    """Apply a partial update. Only keys present in ``changes`` are touched."""
    todo = await get_todo(db, todo_id, user_id)
    if not todo:
        return None
    if "text" in changes:
        todo.text = changes["text"]
    if "completed" in changes:
        completed = bool(changes["completed"])
        # Every completed=true write restamps, even on an already completed todo
        todo.completed_at = utcnow() if completed else None
        todo.completed = completed
    await db.flush()
    return todo


async def delete_todo(db: AsyncSession, todo_id: int, user_id: int) -> bool:
    if not _valid_id(todo_id):
        return False
    result = await db.execute(
        delete(Todo).where(Todo.id == todo_id, Todo.user_id == user_id)
    )
    return (result.rowcount or 0) > 0
