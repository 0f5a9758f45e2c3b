"""Shared Pydantic response/request models for the people-network API.

Provides the error envelope used by every endpoint and re-exports the
per-resource models.
"""

from __future__ import annotations

from pydantic import BaseModel

from people_network.api.models.groups import Group, GroupCreateRequest, GroupPatchRequest
from people_network.api.models.interactions import (
    Interaction,
    InteractionCreateRequest,
    InteractionSummary,
)
from people_network.api.models.people import Person, PersonCreateRequest, PersonPatchRequest
from people_network.api.models.stats import DayCount, StatsResponse, TopPerson


class ErrorDetail(BaseModel):
    """Structured error payload."""

    code: str
    message: str
    details: dict | None = None


class ErrorResponse(BaseModel):
    """Standard error response envelope."""

    error: ErrorDetail


__all__ = [
    "DayCount",
    "ErrorDetail",
    "ErrorResponse",
    "Group",
    "GroupCreateRequest",
    "GroupPatchRequest",
    "Interaction",
    "InteractionCreateRequest",
    "InteractionSummary",
    "Person",
    "PersonCreateRequest",
    "PersonPatchRequest",
    "StatsResponse",
    "TopPerson",
]
