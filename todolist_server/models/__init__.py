# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Database models."""

from todolist_server.models.base import Base
from todolist_server.models.todo import Todo
from todolist_server.models.user import User
from todolist_server.models.session import Session
from todolist_server.models.password_reset import PasswordResetToken

__all__ = [
    "Base",
    "User",
    "Todo",
    "Session",
    "PasswordResetToken",
]
