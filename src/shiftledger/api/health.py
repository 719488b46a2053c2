"""
Liveness endpoint for Docker/orchestrator health checks.

Always answers 200; a broken database shows up as ``"degraded"`` so the
probe can tell "process up" from "ledger usable".
"""

import time
from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.core.db import get_db
from shiftledger.core.logging import get_logger
from shiftledger.models.app_config import AppConfig

logger = get_logger(__name__)

router = APIRouter(tags=["health"])

# Monotonic start mark, set in lifespan
_started_at: float | None = None


def set_app_start_time(start: float | None = None) -> None:
    global _started_at
    _started_at = time.monotonic() if start is None else start


def get_uptime_seconds() -> int:
    if _started_at is None:
        return 0
    return max(0, int(time.monotonic() - _started_at))


async def check_database(db: AsyncSession) -> dict[str, Any]:
    """Round-trip ``SELECT 1``; returns status, latency and the error class if down."""
    started = time.perf_counter()
    result: dict[str, Any] = {"status": "ok"}
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("health.database_down", error=type(exc).__name__)
        result = {"status": "down", "error": type(exc).__name__}
    result["response_time_ms"] = int((time.perf_counter() - started) * 1000)
    return result


@router.get("/health", status_code=status.HTTP_200_OK, summary="Health check")
async def health_check(db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    """
    Example response:
        {
            "status": "ok",
            "uptime_seconds": 3600,
            "last_shift_report_time": "2025-01-01T18:00:00",
            "checks": {"database": {"status": "ok", "response_time_ms": 5}}
        }
    """
    database = await check_database(db)
    healthy = database["status"] == "ok"
    cutoff = await AppConfig.read_cutoff(db) if healthy else None

    return {
        "status": "ok" if healthy else "degraded",
        "uptime_seconds": get_uptime_seconds(),
        "last_shift_report_time": cutoff.isoformat() if cutoff else None,
        "checks": {"database": database},
    }
