"""Pydantic models for the stats endpoint."""

from __future__ import annotations

import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DayCount(BaseModel):
    date: datetime.date
    count: int


class TopPerson(BaseModel):
    person_id: UUID
    name: str
    count: int


class StatsResponse(BaseModel):
    """Response for GET /stats: ``{"perDay": [...], "top": [...]}``."""

    model_config = ConfigDict(populate_by_name=True)

    per_day: list[DayCount] = Field(default_factory=list, alias="perDay")
    top: list[TopPerson] = Field(default_factory=list)
