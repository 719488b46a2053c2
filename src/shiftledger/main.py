# File: src/shiftledger/main.py
"""FastAPI application factory for the shift ledger."""

import os
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI

from shiftledger.core.logging import configure_logging, get_logger
from shiftledger.ledger.registers import PreviewRegister, UndoRegister

configure_logging()
logger = get_logger(__name__)

DEFAULT_UNDO_WINDOW_SECONDS = 10


def undo_window() -> timedelta:
    """UNDO_WINDOW_SECONDS, falling back to 10 seconds on bad input."""
    raw = os.getenv("UNDO_WINDOW_SECONDS", str(DEFAULT_UNDO_WINDOW_SECONDS))
    try:
        seconds = float(raw)
    except ValueError:
        logger.warning("config.invalid", key="UNDO_WINDOW_SECONDS", value=raw)
        seconds = DEFAULT_UNDO_WINDOW_SECONDS
    if seconds <= 0:
        seconds = DEFAULT_UNDO_WINDOW_SECONDS
    return timedelta(seconds=seconds)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for startup and shutdown events."""
    logger.info("app.startup", message="Shift ledger starting up")

    from shiftledger.api.health import set_app_start_time

    set_app_start_time()

    yield

    logger.info("app.shutdown", message="Shift ledger shutting down gracefully")


def _setup_middleware(app: FastAPI) -> None:
    """Configure all middleware in correct order."""
    from shiftledger.middleware.logging import RequestIDMiddleware

    app.add_middleware(RequestIDMiddleware)


def _register_routers(app: FastAPI) -> None:
    """Register all API routers."""
    from shiftledger.api.daily_expenses import router as daily_expenses_router
    from shiftledger.api.health import router as health_router
    from shiftledger.api.sales import router as sales_router
    from shiftledger.api.shifts import router as shifts_router

    app.include_router(health_router)
    app.include_router(sales_router)
    app.include_router(daily_expenses_router)
    app.include_router(shifts_router)


def create_app() -> FastAPI:
    """Application factory for the shift ledger."""
    from shiftledger.core.sentry import init_sentry

    init_sentry()

    app = FastAPI(
        title="Shift Ledger API",
        description="Retail shift reconciliation and cash-drawer accounting",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Single register: one draft preview and one pending undo per process
    app.state.preview_register = PreviewRegister()
    app.state.undo_register = UndoRegister(window=undo_window())

    from shiftledger.core.exception_handlers import register_exception_handlers

    register_exception_handlers(app)
    _setup_middleware(app)
    _register_routers(app)

    logger.info("app.configured", message="FastAPI application created successfully")

    return app


def run() -> None:
    """Development server entrypoint."""
    uvicorn.run(
        "shiftledger.main:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("ENVIRONMENT", "development") == "development",
    )
