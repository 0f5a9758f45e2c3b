"""Create, read, sparsely update and delete person records."""

from __future__ import annotations

import logging
import uuid
from typing import Any

import asyncpg

from people_network.store._validation import (
    PersonSource,
    normalize_context,
    normalize_source,
    require_name,
)
from people_network.store.groups import group_ensure_locked

logger = logging.getLogger(__name__)

PERSON_COLUMNS = "id, name, context, source, created_at"
_UPDATABLE_FIELDS = ("name", "context", "source")


def _parse_person(row: asyncpg.Record) -> dict[str, Any]:
    result = dict(row)
    result["source"] = PersonSource(result["source"])
    return result


async def person_create(
    pool: asyncpg.Pool,
    name: str,
    source: PersonSource | str = PersonSource.MANUAL,
    context: str | None = None,
) -> dict[str, Any]:
    """Create a person.

    A non-empty ``context`` makes sure a group of that name exists, in the same
    transaction as the insert.
    """
    clean_name = require_name(name)
    clean_source = normalize_source(source)
    clean_context = normalize_context(context)

    async with pool.acquire() as conn:
        async with conn.transaction():
            if clean_context is not None:
                await group_ensure_locked(conn, clean_context)
            row = await conn.fetchrow(
                f"""
                INSERT INTO person (name, source, context)
                VALUES ($1, $2, $3)
                RETURNING {PERSON_COLUMNS}
                """,
                clean_name,
                clean_source.value,
                clean_context,
            )
    logger.info("Created person %s", row["id"])
    return _parse_person(row)


async def person_get(pool: asyncpg.Pool, person_id: uuid.UUID) -> dict[str, Any] | None:
    """Return one person, or None when it does not exist."""
    row = await pool.fetchrow(f"SELECT {PERSON_COLUMNS} FROM person WHERE id = $1", person_id)
    return _parse_person(row) if row is not None else None


async def person_list(pool: asyncpg.Pool) -> list[dict[str, Any]]:
    """List everyone, alphabetically."""
    rows = await pool.fetch(f"SELECT {PERSON_COLUMNS} FROM person ORDER BY name ASC")
    return [_parse_person(row) for row in rows]


async def person_update(
    pool: asyncpg.Pool,
    person_id: uuid.UUID,
    **fields: Any,
) -> dict[str, Any] | None:
    """Apply a sparse update to a person.

    Only keys present in *fields* are written; an absent key leaves the column
    untouched, while ``context=None`` explicitly clears it. With no fields the
    current row is returned unchanged. Returns None when the person does not
    exist.
    """
    unknown = set(fields) - set(_UPDATABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown person field(s): {', '.join(sorted(unknown))}")

    to_update: dict[str, Any] = {}
    if "name" in fields:
        to_update["name"] = require_name(fields["name"])
    if "context" in fields:
        to_update["context"] = normalize_context(fields["context"])
    if "source" in fields:
        to_update["source"] = normalize_source(fields["source"]).value

    if not to_update:
        return await person_get(pool, person_id)

    set_clauses = []
    params: list[Any] = [person_id]
    for col, val in to_update.items():
        params.append(val)
        set_clauses.append(f"{col} = ${len(params)}")

    update_sql = (
        f"UPDATE person SET {', '.join(set_clauses)} WHERE id = $1 "  # noqa: S608
        f"RETURNING {PERSON_COLUMNS}"
    )

    async with pool.acquire() as conn:
        async with conn.transaction():
            row = await conn.fetchrow(update_sql, *params)
            if row is None:
                return None
            # The group is only created for a person that is there
            if to_update.get("context") is not None:
                await group_ensure_locked(conn, to_update["context"])
    return _parse_person(row)


async def person_delete(pool: asyncpg.Pool, person_id: uuid.UUID) -> None:
    """Delete a person unconditionally; memberships go with it (ON DELETE CASCADE)."""
    status = await pool.execute("DELETE FROM person WHERE id = $1", person_id)
    if status != "DELETE 0":
        logger.info("Deleted person %s", person_id)
