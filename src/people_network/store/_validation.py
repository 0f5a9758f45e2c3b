"""Input normalisation shared by the store modules.

Every helper raises ``ValueError`` so callers see a validation failure
before any statement reaches the database.
"""

from __future__ import annotations

import enum
from typing import Any


class PersonSource(enum.StrEnum):
    """Where a person record came from."""

    MANUAL = "manual"
    CONTACTS = "contacts"


DEFAULT_GROUP_COLOR = "#9e9e9e"


def require_name(value: Any, field: str = "name") -> str:
    """Return *value* trimmed, rejecting non-strings and blank strings."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field} must be a non-empty string")
    return value.strip()


def normalize_context(value: Any) -> str | None:
    """Blank contexts collapse to None."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("context must be a string or null")
    return value.strip() or None


def normalize_source(value: Any) -> PersonSource:
    try:
        return PersonSource(value)
    except ValueError:
        valid = ", ".join(s.value for s in PersonSource)
        raise ValueError(f"source must be one of: {valid} (got {value!r})") from None


def require_color(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("color must be a non-empty string")
    return value.strip()
