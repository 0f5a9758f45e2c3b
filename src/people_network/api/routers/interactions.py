"""Interaction-day endpoints.

Days are addressed by calendar date (``YYYY-MM-DD``) rather than by id: a
date has at most one interaction-day, and reading or undoing a date with
nothing recorded is not an error.
"""

from __future__ import annotations

import datetime
import logging
from uuid import UUID

import asyncpg
from fastapi import APIRouter, Depends, Response

from people_network.api.models import (
    Interaction,
    InteractionCreateRequest,
    InteractionSummary,
    Person,
)
from people_network.store import (
    interaction_delete_by_date,
    interaction_get_by_date,
    interaction_list,
    interaction_people,
    interaction_record,
    interaction_remove_person_on_date,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/interactions", tags=["interactions"])


def _get_pool() -> asyncpg.Pool:
    """Dependency stub -- overridden at app startup or in tests."""
    raise RuntimeError("Database pool not initialized")


@router.get("", response_model=list[InteractionSummary])
async def list_interactions(pool: asyncpg.Pool = Depends(_get_pool)) -> list[InteractionSummary]:
    """List interaction-days, newest first, with how many people each has."""
    return [InteractionSummary.model_validate(row) for row in await interaction_list(pool)]


@router.post("", response_model=Interaction, status_code=201)
async def record_interaction(
    body: InteractionCreateRequest,
    pool: asyncpg.Pool = Depends(_get_pool),
) -> Interaction:
    """Record that the given people were seen on ``date``.

    Repeating the call is harmless: the day and each membership exist once.
    """
    row = await interaction_record(pool, body.date, body.person_ids)
    return Interaction.model_validate(row)


@router.get("/{date}/people", response_model=list[Person])
async def list_people_on_date(
    date: datetime.date,
    pool: asyncpg.Pool = Depends(_get_pool),
) -> list[Person]:
    interaction = await interaction_get_by_date(pool, date)
    if interaction is None:
        return []
    rows = await interaction_people(pool, interaction["id"])
    return [Person.model_validate(row) for row in rows]


@router.delete("/{date}/people/{person_id}", status_code=204)
async def remove_person_from_date(
    date: datetime.date,
    person_id: UUID,
    pool: asyncpg.Pool = Depends(_get_pool),
) -> Response:
    """Undo one person on one day. Nothing to remove is still a success."""
    removed = await interaction_remove_person_on_date(pool, date, person_id)
    if not removed:
        logger.debug("No membership for person %s on %s; nothing removed", person_id, date)
    return Response(status_code=204)


@router.delete("/{date}", status_code=204)
async def delete_interaction(
    date: datetime.date,
    pool: asyncpg.Pool = Depends(_get_pool),
) -> Response:
    await interaction_delete_by_date(pool, date)
    return Response(status_code=204)
