"""Health endpoint: liveness plus a database round-trip."""

from __future__ import annotations

import logging

import asyncpg
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


def _get_pool() -> asyncpg.Pool:
    """Dependency stub -- overridden at app startup or in tests."""
    raise RuntimeError("Database pool not initialized")


@router.get("/health")
async def health(pool: asyncpg.Pool = Depends(_get_pool)):
    try:
        await pool.fetchval("SELECT 1")
    except Exception:
        logger.warning("Health check failed: database unreachable", exc_info=True)
        return JSONResponse(status_code=503, content={"status": "error", "db": "unreachable"})
    return {"status": "ok", "db": "connected"}
