"""Groups are display tags that people's ``context`` labels refer to.

Group names are matched case-insensitively everywhere in the store. They are
not database-unique; every write that sets a name takes a transaction-scoped
advisory lock on the lower-cased name and checks for an existing match, so no
path creates a case-variant of an existing name.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

import asyncpg

from people_network.store._validation import DEFAULT_GROUP_COLOR, require_color, require_name

logger = logging.getLogger(__name__)

_GROUP_COLUMNS = "group_id, group_name, color"
_UPDATABLE_FIELDS = ("group_name", "color")

_LOCK_NAME_SQL = "SELECT pg_advisory_xact_lock(hashtext(lower($1)))"
_FIND_BY_NAME_SQL = f"""
    SELECT {_GROUP_COLUMNS} FROM group_context
    WHERE lower(group_name) = lower($1)
    ORDER BY created_at ASC
    LIMIT 1
"""


async def _insert_group(conn: asyncpg.Connection, name: str, color: str) -> asyncpg.Record:
    return await conn.fetchrow(
        f"INSERT INTO group_context (group_name, color) VALUES ($1, $2) RETURNING {_GROUP_COLUMNS}",
        name,
        color,
    )


async def group_create(
    pool: asyncpg.Pool,
    group_name: str,
    color: str = DEFAULT_GROUP_COLOR,
) -> dict[str, Any]:
    """Create a group.

    Raises ValueError when a group with the same name in any case exists.
    """
    name = require_name(group_name, "group_name")
    clean_color = require_color(color)
    async with pool.acquire() as conn:
        async with conn.transaction():
            await conn.execute(_LOCK_NAME_SQL, name)
            existing = await conn.fetchrow(_FIND_BY_NAME_SQL, name)
            if existing is not None:
                raise ValueError(f"Group {existing['group_name']!r} already exists")
            row = await _insert_group(conn, name, clean_color)
    logger.info("Created group %s (%s)", row["group_id"], name)
    return dict(row)


async def group_get(pool: asyncpg.Pool, group_id: uuid.UUID) -> dict[str, Any] | None:
    """Return one group, or None when it does not exist."""
    row = await pool.fetchrow(
        f"SELECT {_GROUP_COLUMNS} FROM group_context WHERE group_id = $1",
        group_id,
    )
    return dict(row) if row is not None else None


async def group_list(pool: asyncpg.Pool) -> list[dict[str, Any]]:
    """List all groups by name."""
    rows = await pool.fetch(f"SELECT {_GROUP_COLUMNS} FROM group_context ORDER BY group_name ASC")
    return [dict(row) for row in rows]


async def group_find_by_name(pool: asyncpg.Pool, group_name: str) -> dict[str, Any] | None:
    """Case-insensitive lookup; the oldest match wins when names have drifted."""
    row = await pool.fetchrow(_FIND_BY_NAME_SQL, require_name(group_name, "group_name"))
    return dict(row) if row is not None else None


async def group_ensure_locked(conn: asyncpg.Connection, group_name: str) -> dict[str, Any]:
    """Find-or-create *group_name* on *conn*, which must be inside a transaction.

    The advisory lock is held until the caller's transaction ends, so the
    group only becomes visible together with the caller's other writes.
    """
    name = require_name(group_name, "group_name")
    await conn.execute(_LOCK_NAME_SQL, name)
    row = await conn.fetchrow(_FIND_BY_NAME_SQL, name)
    if row is not None:
        return dict(row)
    row = await _insert_group(conn, name, DEFAULT_GROUP_COLOR)
    logger.info("Created group %s (%s) from person context", row["group_id"], name)
    return dict(row)


async def group_ensure(pool: asyncpg.Pool, group_name: str) -> dict[str, Any]:
    """Return the group named *group_name* (any case), creating it if absent.

    A transaction-scoped advisory lock on the lower-cased name serialises
    concurrent ensures of the same name.
    """
    async with pool.acquire() as conn:
        async with conn.transaction():
            return await group_ensure_locked(conn, group_name)


async def group_update(
    pool: asyncpg.Pool,
    group_id: uuid.UUID,
    **fields: Any,
) -> dict[str, Any] | None:
    """Apply a sparse update; only the keys present in *fields* are written.

    Renaming to a name another group already holds (in any case) raises
    ValueError. Returns the updated group, or None when it does not exist.
    """
    unknown = set(fields) - set(_UPDATABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown group field(s): {', '.join(sorted(unknown))}")

    to_update: dict[str, Any] = {}
    if "group_name" in fields:
        to_update["group_name"] = require_name(fields["group_name"], "group_name")
    if "color" in fields:
        to_update["color"] = require_color(fields["color"])

    if not to_update:
        return await group_get(pool, group_id)

    set_clauses = []
    params: list[Any] = [group_id]
    for col, val in to_update.items():
        params.append(val)
        set_clauses.append(f"{col} = ${len(params)}")
    update_sql = (
        f"UPDATE group_context SET {', '.join(set_clauses)} WHERE group_id = $1 "  # noqa: S608
        f"RETURNING {_GROUP_COLUMNS}"
    )

    async with pool.acquire() as conn:
        async with conn.transaction():
            if "group_name" in to_update:
                new_name = to_update["group_name"]
                await conn.execute(_LOCK_NAME_SQL, new_name)
                clash = await conn.fetchval(
                    """
                    SELECT group_name FROM group_context
                    WHERE lower(group_name) = lower($1) AND group_id <> $2
                    LIMIT 1
                    """,
                    new_name,
                    group_id,
                )
                if clash is not None:
                    raise ValueError(f"Group {clash!r} already exists")
            row = await conn.fetchrow(update_sql, *params)
    return dict(row) if row is not None else None


async def group_delete(pool: asyncpg.Pool, group_id: uuid.UUID) -> bool:
    """Delete a group. Returns False when nothing was deleted.

    People whose ``context`` names the group keep that label.
    """
    status = await pool.execute("DELETE FROM group_context WHERE group_id = $1", group_id)
    return status != "DELETE 0"
