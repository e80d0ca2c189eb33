# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Server-side login session model."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from todolist_server.models.base import Base


class Session(Base):
    """Session row keyed by the opaque value carried in the session cookie."""

    __tablename__ = "sessions"
    __table_args__ = (Index("ix_sessions_expire", "expire"),)

    sid: Mapped[str] = mapped_column(String(64), primary_key=True)
    sess: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    expire: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
