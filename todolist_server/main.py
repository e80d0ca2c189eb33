# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""TodoList Server - Main FastAPI application."""

import asyncio
import contextlib
import logging
import time
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from todolist_server.config import settings
from todolist_server.database import async_session_maker, init_db
from todolist_server.errors import register_exception_handlers
from todolist_server.routers import auth, todos
from todolist_server.services.sessions import SessionManager

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def _get_cors_origins() -> list[str]:
    raw = (settings.cors_origins or "*").strip()
    if raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


def build_session_manager() -> SessionManager:
    return SessionManager(
        cookie_name=settings.session_cookie_name,
        max_age=timedelta(days=settings.session_max_age_days),
        secure=settings.session_cookie_secure,
    )


async def _prune_sessions_loop(sessions: SessionManager, interval_minutes: float) -> None:
    while True:
        await asyncio.sleep(interval_minutes * 60)
        try:
            async with async_session_maker() as db:
                await sessions.purge_expired(db)
                await db.commit()
        except Exception as e:
            logger.warning("Session cleanup failed: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    await init_db()
    if not settings.smtp_host:
        logger.info("SMTP_HOST not set - password reset emails will not be delivered")
    if settings.is_development:
        logger.warning("ENVIRONMENT=development - undelivered reset tokens are returned in API responses")

    prune_task = None
    if settings.session_prune_interval_minutes > 0:
        prune_task = asyncio.create_task(
            _prune_sessions_loop(app.state.session_manager, settings.session_prune_interval_minutes)
        )
    yield
    if prune_task:
        prune_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await prune_task


app = FastAPI(
    title="TodoList Server",
    description="Personal task tracking API",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)
app.state.session_manager = build_session_manager()

app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status, and duration for each request (no body or cookies)."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, duration_ms)
    return response


app.include_router(auth.router, prefix="/api")
app.include_router(todos.router, prefix="/api")


@app.get("/")
async def root():
    """API info."""
    return {
        "name": "TodoList Server",
        "version": VERSION,
        "api": "/api",
        "docs": "/api/docs",
    }


@app.get("/api/health")
async def health():
    """Health check for load balancers."""
    return {"status": "ok"}


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
