"""Per-day interaction counts and the most-seen people.

Both queries are read-only and share one ``RangeFilter`` window.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
import re
from dataclasses import dataclass
from typing import Any, Literal

import asyncpg

logger = logging.getLogger(__name__)

TOP_PEOPLE_LIMIT = 10

_YEAR_PERIOD = re.compile(r"^[0-9]{4}$")
_MONTH_PERIOD = re.compile(r"^([0-9]{4})-([0-9]{2})$")


@dataclass(frozen=True)
class RangeFilter:
    """A half-open ``[start, end)`` date window; ``kind == "all"`` is unbounded."""

    kind: Literal["all", "year", "month"] = "all"
    start: datetime.date | None = None
    end: datetime.date | None = None

    @classmethod
    def all(cls) -> RangeFilter:
        return cls()

    @classmethod
    def year(cls, year: int) -> RangeFilter:
        return cls("year", datetime.date(year, 1, 1), datetime.date(year + 1, 1, 1))

    @classmethod
    def month(cls, year: int, month: int) -> RangeFilter:
        start = datetime.date(year, month, 1)
        if month == 12:
            end = datetime.date(year + 1, 1, 1)
        else:
            end = datetime.date(year, month + 1, 1)
        return cls("month", start, end)

    @property
    def is_bounded(self) -> bool:
        return self.start is not None and self.end is not None


def parse_range_filter(filter: str | None, period: str | None) -> RangeFilter:
    """Build a RangeFilter from the ``filter``/``period`` query parameters.

    ``year`` wants ``YYYY`` and ``month`` wants ``YYYY-MM``. Anything that
    does not match exactly, including an unknown or differently-cased filter,
    surrounding whitespace, or an impossible month or year, falls back to the
    unbounded filter.
    """
    filter = filter or "all"
    period = period or ""

    try:
        if filter == "year" and _YEAR_PERIOD.fullmatch(period):
            return RangeFilter.year(int(period))
        if filter == "month":
            match = _MONTH_PERIOD.fullmatch(period)
            if match:
                return RangeFilter.month(int(match.group(1)), int(match.group(2)))
    except ValueError:
        # month 00/13, year 0000 or 9999 rolling past date.max
        pass

    if filter != "all":
        logger.debug("Falling back to unbounded stats for filter=%r period=%r", filter, period)
    return RangeFilter.all()


def _where(range_filter: RangeFilter) -> tuple[str, list[Any]]:
    if not range_filter.is_bounded:
        return "", []
    return "WHERE i.date >= $1 AND i.date < $2", [range_filter.start, range_filter.end]


async def stats_per_day(pool: asyncpg.Pool, range_filter: RangeFilter) -> list[dict[str, Any]]:
    """Member count for every in-range day that has at least one member, newest first."""
    where, params = _where(range_filter)
    rows = await pool.fetch(
        f"""
        SELECT i.date, count(ip.person_id)::int AS count
        FROM interaction i
        JOIN interaction_person ip ON ip.interaction_id = i.id
        {where}
        GROUP BY i.date
        ORDER BY i.date DESC
        """,
        *params,
    )
    return [dict(row) for row in rows]


async def stats_top_people(
    pool: asyncpg.Pool,
    range_filter: RangeFilter,
    limit: int = TOP_PEOPLE_LIMIT,
) -> list[dict[str, Any]]:
    """People ranked by in-range interaction count, ties broken by name."""
    where, params = _where(range_filter)
    params.append(min(limit, TOP_PEOPLE_LIMIT))
    rows = await pool.fetch(
        f"""
        SELECT p.id AS person_id, p.name, count(*)::int AS count
        FROM interaction_person ip
        JOIN interaction i ON i.id = ip.interaction_id
        JOIN person p ON p.id = ip.person_id
        {where}
        GROUP BY p.id, p.name
        ORDER BY count DESC, p.name ASC
        LIMIT ${len(params)}
        """,
        *params,
    )
    return [dict(row) for row in rows]


async def stats_compute(
    pool: asyncpg.Pool,
    range_filter: RangeFilter | None = None,
) -> dict[str, list[dict[str, Any]]]:
    """Return ``{"perDay": [...], "top": [...]}`` for the window."""
    range_filter = range_filter or RangeFilter.all()
    per_day, top = await asyncio.gather(
        stats_per_day(pool, range_filter),
        stats_top_people(pool, range_filter),
    )
    return {"perDay": per_day, "top": top}
