"""Pydantic models for group endpoints."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel

from people_network.store import DEFAULT_GROUP_COLOR


class Group(BaseModel):
    group_id: UUID
    group_name: str
    color: str


class GroupCreateRequest(BaseModel):
    """Request body for POST /groups."""

    group_name: str
    color: str = DEFAULT_GROUP_COLOR


class GroupPatchRequest(BaseModel):
    """Request body for PUT/PATCH /groups/{id}; only present fields are updated."""

    group_name: str | None = None
    color: str | None = None
