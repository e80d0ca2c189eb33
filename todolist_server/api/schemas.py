# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pydantic schemas for API request/response. JSON keys are camelCase."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MessageResponse(ApiModel):
    message: str


# Auth
class UserCreate(ApiModel):
    email: EmailStr
    password: str = Field(min_length=6)
    first_name: str | None = None
    last_name: str | None = None


class UserLogin(ApiModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ForgotPasswordRequest(ApiModel):
    email: EmailStr


class ForgotPasswordResponse(ApiModel):
    message: str
    reset_token: str | None = None


class ResetPasswordRequest(ApiModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=6)


class UserResponse(ApiModel):
    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    created_at: datetime


class AuthResponse(ApiModel):
    message: str
    user: UserResponse


# Todos
class TodoCreate(ApiModel):
    text: str = Field(min_length=1)
    completed: bool = False


class TodoUpdate(ApiModel):
    text: str | None = Field(default=None, min_length=1)
    completed: bool | None = None

    @field_validator("text", "completed")
    @classmethod
    def not_null(cls, value):
        # Omit a field to leave it unchanged; null is not a value these columns take
        if value is None:
            raise ValueError("must not be null")
        return value


class TodoResponse(ApiModel):
    id: int
    text: str
    completed: bool
    user_id: int
    created_at: datetime
    completed_at: datetime | None = None
