"""Pydantic models for interaction-day endpoints."""

from __future__ import annotations

import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class Interaction(BaseModel):
    """The interaction-day for one calendar date."""

    id: UUID
    date: datetime.date
    created_at: datetime.datetime


class InteractionSummary(Interaction):
    """Interaction-day with the number of people attached."""

    people_count: int = 0


class InteractionCreateRequest(BaseModel):
    """Request body for POST /interactions.

    ``personIds`` may repeat ids or name people that no longer exist; both
    are ignored when the memberships are written.
    """

    model_config = ConfigDict(populate_by_name=True)

    date: datetime.date
    person_ids: list[UUID] = Field(default_factory=list, alias="personIds")
