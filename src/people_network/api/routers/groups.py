"""Group (context) endpoints at ``/api/groups``."""

from __future__ import annotations

from uuid import UUID

import asyncpg
from fastapi import APIRouter, Depends, HTTPException, Response

from people_network.api.models import Group, GroupCreateRequest, GroupPatchRequest
from people_network.store import group_create, group_delete, group_get, group_list, group_update

router = APIRouter(prefix="/api/groups", tags=["groups"])


def _get_pool() -> asyncpg.Pool:
    """Dependency stub -- overridden at app startup or in tests."""
    raise RuntimeError("Database pool not initialized")


def _not_found(group_id: UUID) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Group {group_id} not found")


@router.get("", response_model=list[Group])
async def list_groups(pool: asyncpg.Pool = Depends(_get_pool)) -> list[Group]:
    return [Group.model_validate(row) for row in await group_list(pool)]


@router.post("", response_model=Group, status_code=201)
async def create_group(
    body: GroupCreateRequest,
    pool: asyncpg.Pool = Depends(_get_pool),
) -> Group:
    return Group.model_validate(await group_create(pool, body.group_name, color=body.color))


@router.get("/{group_id}", response_model=Group)
async def get_group(group_id: UUID, pool: asyncpg.Pool = Depends(_get_pool)) -> Group:
    row = await group_get(pool, group_id)
    if row is None:
        raise _not_found(group_id)
    return Group.model_validate(row)


@router.api_route("/{group_id}", methods=["PUT", "PATCH"], response_model=Group)
async def update_group(
    group_id: UUID,
    body: GroupPatchRequest,
    pool: asyncpg.Pool = Depends(_get_pool),
) -> Group:
    """Rename or recolour a group. People whose context names it are not touched."""
    row = await group_update(pool, group_id, **body.model_dump(exclude_unset=True))
    if row is None:
        raise _not_found(group_id)
    return Group.model_validate(row)


@router.delete("/{group_id}", status_code=204)
async def delete_group(group_id: UUID, pool: asyncpg.Pool = Depends(_get_pool)) -> Response:
    if not await group_delete(pool, group_id):
        raise _not_found(group_id)
    return Response(status_code=204)
