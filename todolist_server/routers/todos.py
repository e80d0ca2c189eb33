# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Todo API routes. All require a session; rows of other users answer 404."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from todolist_server.auth import get_current_user_id
from todolist_server.database import get_db
from todolist_server.api.schemas import MessageResponse, TodoCreate, TodoResponse, TodoUpdate
from todolist_server.services import todos

router = APIRouter(prefix="/todos", tags=["todos"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found")


@router.get("", response_model=list[TodoResponse])
async def list_todos(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[TodoResponse]:
    """List current user's todos, oldest first."""
    rows = await todos.list_todos(db, user_id)
    return [TodoResponse.model_validate(t) for t in rows]


@router.post("", response_model=TodoResponse, status_code=status.HTTP_201_CREATED)
async def create_todo(
    data: TodoCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> TodoResponse:
    todo = await todos.create_todo(db, user_id, data.text, completed=data.completed)
    return TodoResponse.model_validate(todo)


@router.get("/{todo_id}", response_model=TodoResponse)
async def get_todo(
    todo_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> TodoResponse:
    todo = await todos.get_todo(db, todo_id, user_id)
    if not todo:
        raise _not_found()
    return TodoResponse.model_validate(todo)


@router.patch("/{todo_id}", response_model=TodoResponse)
async def update_todo(
    todo_id: int,
    data: TodoUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> TodoResponse:
    """Partial update; fields left out of the body are unchanged."""
    changes = data.model_dump(exclude_unset=True)
    todo = await todos.update_todo(db, todo_id, user_id, changes)
    if not todo:
        raise _not_found()
    return TodoResponse.model_validate(todo)


@router.delete("/{todo_id}", response_model=MessageResponse)
async def delete_todo(
    todo_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    if not await todos.delete_todo(db, todo_id, user_id):
        raise _not_found()
    return MessageResponse(message="Todo deleted successfully")
