# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Authentication API routes."""

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from todolist_server.auth import get_current_user, get_session_manager
from todolist_server.config import settings
from todolist_server.database import get_db
from todolist_server.models import User
from todolist_server.api.schemas import (
    AuthResponse,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    MessageResponse,
    ResetPasswordRequest,
    UserCreate,
    UserLogin,
    UserResponse,
)
from todolist_server.services import credentials, password_reset
from todolist_server.services.sessions import SessionManager

router = APIRouter(prefix="/auth", tags=["auth"])

RESET_REQUESTED = "If an account with this email exists, a password reset link has been sent."
RESET_UNDELIVERED = "Email service is currently unavailable. For demo purposes, use the reset token provided."


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """Create a new user account."""
    try:
        user = await credentials.create_user(
            db,
            email=data.email,
            password=data.password,
            first_name=data.first_name,
            last_name=data.last_name,
        )
    except credentials.EmailAlreadyRegistered:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    return AuthResponse(message="User created successfully", user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    data: UserLogin,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
) -> AuthResponse:
    """Check credentials and start a session (cookie)."""
    user = await credentials.authenticate_user(db, data.email, data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    previous = request.cookies.get(sessions.cookie_name)
    if previous:
        await sessions.destroy(db, previous)
    sid = await sessions.create(db, user.id)
    sessions.set_cookie(response, sid)
    return AuthResponse(message="Login successful", user=UserResponse.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
) -> MessageResponse:
    """End the current session, if any."""
    sid = request.cookies.get(sessions.cookie_name)
    if sid:
        await sessions.destroy(db, sid)
    sessions.clear_cookie(response)
    return MessageResponse(message="Logout successful")


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)) -> UserResponse:
    """Get current user profile."""
    return UserResponse.model_validate(user)


@router.post("/forgot-password", response_model=ForgotPasswordResponse, response_model_exclude_none=True)
async def forgot_password(
    data: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> ForgotPasswordResponse:
    """Request password reset. The reply never reveals whether the account exists."""
    result = await password_reset.request_password_reset(db, data.email)
    if result.token and not result.delivered and settings.is_development:
        return ForgotPasswordResponse(message=RESET_UNDELIVERED, reset_token=result.token)
    return ForgotPasswordResponse(message=RESET_REQUESTED)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    data: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Reset password with a token from the reset email."""
    try:
        await password_reset.confirm_password_reset(db, data.token, data.password)
    except password_reset.InvalidResetToken as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    return MessageResponse(message="Password reset successfully")
