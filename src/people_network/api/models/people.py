"""Pydantic models for person endpoints."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from people_network.store import PersonSource


class Person(BaseModel):
    """A person the user keeps track of."""

    id: UUID
    name: str
    context: str | None = None
    source: PersonSource
    created_at: datetime


class PersonCreateRequest(BaseModel):
    """Request body for POST /people."""

    name: str
    context: str | None = None
    source: PersonSource = PersonSource.MANUAL


class PersonPatchRequest(BaseModel):
    """Request body for PUT/PATCH /people/{id}.

    All fields are optional; only fields present in the body are updated.
    Sending ``"context": null`` clears the context.
    """

    name: str | None = None
    context: str | None = None
    source: PersonSource | None = None
