"""Mock pool helpers and row factories shared by the unit tests."""

from __future__ import annotations

import datetime
import uuid
from typing import Any
from unittest.mock import AsyncMock, MagicMock

_NOW = datetime.datetime(2024, 3, 1, 12, 0, tzinfo=datetime.UTC)


class AsyncCM:
    """Simple async context manager wrapper returning a fixed value."""

    def __init__(self, value: Any) -> None:
        self._value = value

    async def __aenter__(self) -> Any:
        return self._value

    async def __aexit__(self, *args: Any) -> bool:
        return False


class RecordingTransaction:
    """Async context manager standing in for ``conn.transaction()``.

    Records whether the block exited normally (commit) or with an
    exception (rollback). Never swallows the exception.
    """

    def __init__(self) -> None:
        self.entered = False
        self.committed = False
        self.rolled_back = False

    async def __aenter__(self) -> RecordingTransaction:
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.committed = True
        else:
            self.rolled_back = True
        return False


def make_pool_and_conn() -> tuple[MagicMock, AsyncMock, RecordingTransaction]:
    """Create a mock pool whose ``acquire()`` yields a mock connection."""
    tx = RecordingTransaction()
    conn = AsyncMock()
    conn.fetchrow = AsyncMock(return_value=None)
    conn.execute = AsyncMock(return_value="INSERT 0 0")
    conn.fetchval = AsyncMock(return_value=None)
    conn.transaction = MagicMock(return_value=tx)

    pool = MagicMock()
    pool.acquire = MagicMock(return_value=AsyncCM(conn))
    pool.fetch = AsyncMock(return_value=[])
    pool.fetchrow = AsyncMock(return_value=None)
    pool.fetchval = AsyncMock(return_value=None)
    pool.execute = AsyncMock(return_value="DELETE 0")
    return pool, conn, tx


def make_person_row(
    *,
    person_id: uuid.UUID | None = None,
    name: str = "Ada",
    context: str | None = None,
    source: str = "manual",
    created_at: datetime.datetime = _NOW,
) -> dict[str, Any]:
    """Build a dict mimicking an asyncpg Record for the person table."""
    return {
        "id": person_id or uuid.uuid4(),
        "name": name,
        "context": context,
        "source": source,
        "created_at": created_at,
    }


def make_group_row(
    *,
    group_id: uuid.UUID | None = None,
    group_name: str = "Work",
    color: str = "#9e9e9e",
) -> dict[str, Any]:
    return {"group_id": group_id or uuid.uuid4(), "group_name": group_name, "color": color}


def make_interaction_row(
    *,
    interaction_id: uuid.UUID | None = None,
    date: datetime.date = datetime.date(2024, 3, 1),
    created_at: datetime.datetime = _NOW,
    **extra: Any,
) -> dict[str, Any]:
    return {"id": interaction_id or uuid.uuid4(), "date": date, "created_at": created_at, **extra}
