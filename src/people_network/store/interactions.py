"""Interaction-days: one row per calendar day, with the people seen that day.

The ``interaction.date`` column is unique, so a date resolves to zero or one
interaction-day. Membership rows are keyed by ``(interaction_id, person_id)``
and every write to them is idempotent.
"""

from __future__ import annotations

import datetime
import logging
import uuid
from collections.abc import Iterable
from typing import Any

import asyncpg

from people_network.store.people import PERSON_COLUMNS, _parse_person

logger = logging.getLogger(__name__)

_INTERACTION_COLUMNS = "id, date, created_at"


def coerce_date(value: datetime.date | str) -> datetime.date:
    """Accept a ``date`` or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime.datetime):
        raise ValueError("date must be a calendar date, not a timestamp")
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        try:
            return datetime.date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValueError(f"date must be in YYYY-MM-DD format (got {value!r})")


def _coerce_person_ids(person_ids: Iterable[uuid.UUID | str]) -> list[uuid.UUID]:
    """Parse ids and drop duplicates, keeping first-seen order."""
    ids: dict[uuid.UUID, None] = {}
    for pid in person_ids:
        try:
            parsed = pid if isinstance(pid, uuid.UUID) else uuid.UUID(str(pid))
        except ValueError:
            raise ValueError(f"Invalid person id: {pid!r}") from None
        ids[parsed] = None
    return list(ids)


def _added_count(status: str) -> int:
    # asyncpg returns the command tag, e.g. "INSERT 0 3"
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


async def interaction_record(
    pool: asyncpg.Pool,
    date: datetime.date | str,
    person_ids: Iterable[uuid.UUID | str] = (),
) -> dict[str, Any]:
    """Find or create the interaction-day for *date* and attach *person_ids*.

    Runs in a single transaction: either the day row and every new membership
    commit together or nothing does. A concurrent caller that loses the race
    to insert the date falls through to the SELECT and sees the winner's row.
    Duplicate ids collapse and ids with no matching person are skipped.
    """
    day = coerce_date(date)
    ids = _coerce_person_ids(person_ids)

    added = 0
    async with pool.acquire() as conn:
        async with conn.transaction():
            row = await conn.fetchrow(
                f"""
                INSERT INTO interaction (date)
                VALUES ($1)
                ON CONFLICT (date) DO NOTHING
                RETURNING {_INTERACTION_COLUMNS}
                """,
                day,
            )
            created = row is not None
            if row is None:
                row = await conn.fetchrow(
                    f"SELECT {_INTERACTION_COLUMNS} FROM interaction WHERE date = $1",
                    day,
                )

            if ids:
                status = await conn.execute(
                    """
                    INSERT INTO interaction_person (interaction_id, person_id)
                    SELECT $1, p.id FROM person p WHERE p.id = ANY($2::uuid[])
                    ON CONFLICT (interaction_id, person_id) DO NOTHING
                    """,
                    row["id"],
                    ids,
                )
                added = _added_count(status)

    logger.info(
        "Recorded interaction %s on %s (new_day=%s, people_added=%d, people_requested=%d)",
        row["id"],
        day.isoformat(),
        created,
        added,
        len(ids),
    )
    return dict(row)


async def interaction_get(pool: asyncpg.Pool, interaction_id: uuid.UUID) -> dict[str, Any] | None:
    row = await pool.fetchrow(
        f"SELECT {_INTERACTION_COLUMNS} FROM interaction WHERE id = $1",
        interaction_id,
    )
    return dict(row) if row is not None else None


async def interaction_get_by_date(
    pool: asyncpg.Pool,
    date: datetime.date | str,
) -> dict[str, Any] | None:
    """Resolve a date to its interaction-day; None means nothing was recorded."""
    row = await pool.fetchrow(
        f"SELECT {_INTERACTION_COLUMNS} FROM interaction WHERE date = $1",
        coerce_date(date),
    )
    return dict(row) if row is not None else None


async def interaction_list(pool: asyncpg.Pool) -> list[dict[str, Any]]:
    """List every interaction-day, most recent first, with its member count."""
    rows = await pool.fetch(
        """
        SELECT i.id, i.date, i.created_at, count(ip.person_id)::int AS people_count
        FROM interaction i
        LEFT JOIN interaction_person ip ON ip.interaction_id = i.id
        GROUP BY i.id
        ORDER BY i.date DESC
        """
    )
    return [dict(row) for row in rows]


async def interaction_people(
    pool: asyncpg.Pool,
    interaction_id: uuid.UUID,
) -> list[dict[str, Any]]:
    """People attached to an interaction-day, by name."""
    columns = ", ".join(f"p.{col.strip()}" for col in PERSON_COLUMNS.split(","))
    rows = await pool.fetch(
        f"""
        SELECT {columns}
        FROM interaction_person ip
        JOIN person p ON p.id = ip.person_id
        WHERE ip.interaction_id = $1
        ORDER BY p.name ASC
        """,
        interaction_id,
    )
    return [_parse_person(row) for row in rows]


async def interaction_remove_person(
    pool: asyncpg.Pool,
    interaction_id: uuid.UUID,
    person_id: uuid.UUID,
) -> bool:
    """Delete one membership. A missing row is not an error.

    Returns True when a row was actually removed.
    """
    status = await pool.execute(
        "DELETE FROM interaction_person WHERE interaction_id = $1 AND person_id = $2",
        interaction_id,
        person_id,
    )
    return status != "DELETE 0"


async def interaction_remove_person_on_date(
    pool: asyncpg.Pool,
    date: datetime.date | str,
    person_id: uuid.UUID,
) -> bool:
    """Undo one person on one date; a date with nothing recorded is a no-op."""
    interaction = await interaction_get_by_date(pool, date)
    if interaction is None:
        return False
    return await interaction_remove_person(pool, interaction["id"], person_id)


async def interaction_delete(pool: asyncpg.Pool, interaction_id: uuid.UUID) -> bool:
    """Delete an interaction-day and, by cascade, all of its memberships."""
    status = await pool.execute("DELETE FROM interaction WHERE id = $1", interaction_id)
    return status != "DELETE 0"


async def interaction_delete_by_date(pool: asyncpg.Pool, date: datetime.date | str) -> bool:
    status = await pool.execute("DELETE FROM interaction WHERE date = $1", coerce_date(date))
    return status != "DELETE 0"
