"""Stats endpoint: per-day counts and the most-seen people."""

from __future__ import annotations

import asyncpg
from fastapi import APIRouter, Depends, Query

from people_network.api.models import StatsResponse
from people_network.store import parse_range_filter, stats_compute

router = APIRouter(prefix="/api/stats", tags=["stats"])


def _get_pool() -> asyncpg.Pool:
    """Dependency stub -- overridden at app startup or in tests."""
    raise RuntimeError("Database pool not initialized")


@router.get("", response_model=StatsResponse, response_model_by_alias=True)
async def get_stats(
    filter: str = Query("all", description="all, year or month"),
    period: str | None = Query(None, description="YYYY for year, YYYY-MM for month"),
    pool: asyncpg.Pool = Depends(_get_pool),
) -> StatsResponse:
    """Aggregate interactions over a window.

    A period that does not fit the filter widens the window to all time.
    """
    result = await stats_compute(pool, parse_range_filter(filter, period))
    return StatsResponse.model_validate(result)
