"""People endpoints.

Provides CRUD over person records at ``/api/people``. A person whose
``context`` is set also guarantees that a group of that name exists.
"""

from __future__ import annotations

from uuid import UUID

import asyncpg
from fastapi import APIRouter, Depends, HTTPException, Response

from people_network.api.models import Person, PersonCreateRequest, PersonPatchRequest
from people_network.store import (
    person_create,
    person_delete,
    person_get,
    person_list,
    person_update,
)

router = APIRouter(prefix="/api/people", tags=["people"])


def _get_pool() -> asyncpg.Pool:
    """Dependency stub -- overridden at app startup or in tests."""
    raise RuntimeError("Database pool not initialized")


@router.get("", response_model=list[Person])
async def list_people(pool: asyncpg.Pool = Depends(_get_pool)) -> list[Person]:
    """List every person, alphabetically by name."""
    return [Person.model_validate(row) for row in await person_list(pool)]


@router.post("", response_model=Person, status_code=201)
async def create_person(
    body: PersonCreateRequest,
    pool: asyncpg.Pool = Depends(_get_pool),
) -> Person:
    row = await person_create(pool, body.name, source=body.source, context=body.context)
    return Person.model_validate(row)


@router.get("/{person_id}", response_model=Person)
async def get_person(person_id: UUID, pool: asyncpg.Pool = Depends(_get_pool)) -> Person:
    row = await person_get(pool, person_id)
    if row is None:
        raise HTTPException(status_code=404, detail=f"Person {person_id} not found")
    return Person.model_validate(row)


@router.api_route("/{person_id}", methods=["PUT", "PATCH"], response_model=Person)
async def update_person(
    person_id: UUID,
    body: PersonPatchRequest,
    pool: asyncpg.Pool = Depends(_get_pool),
) -> Person:
    """Sparse update: fields absent from the body keep their stored values."""
    row = await person_update(pool, person_id, **body.model_dump(exclude_unset=True))
    if row is None:
        raise HTTPException(status_code=404, detail=f"Person {person_id} not found")
    return Person.model_validate(row)


@router.delete("/{person_id}", status_code=204)
async def delete_person(person_id: UUID, pool: asyncpg.Pool = Depends(_get_pool)) -> Response:
    await person_delete(pool, person_id)
    return Response(status_code=204)
