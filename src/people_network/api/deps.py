"""Database dependencies for the people-network API.

Provides:
- the module-level ``Database`` handle created during app startup
- FastAPI dependency functions that hand its pool to route handlers
- ``wire_db_dependencies()``, which points every router's ``_get_pool``
  stub at the live pool
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import asyncpg
from fastapi import HTTPException

from people_network.db import Database

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Database singleton
# ---------------------------------------------------------------------------

_database: Database | None = None


async def init_database(database: Database) -> Database:
    """Open the pool for *database* and install it as the process handle.

    Called once during app startup (in the lifespan handler).
    """
    global _database  # noqa: PLW0603
    await database.connect()
    _database = database
    return database


async def shutdown_database() -> None:
    """Close the pool. Called during app shutdown."""
    global _database  # noqa: PLW0603
    if _database is not None:
        await _database.close()
        _database = None


def get_database() -> Database:
    """FastAPI dependency: provides the Database handle."""
    if _database is None:
        raise HTTPException(status_code=503, detail="Database is not available")
    return _database


def get_pool() -> asyncpg.Pool:
    """FastAPI dependency: provides the live asyncpg pool.

    Raises HTTPException 503 if the pool is not available.
    """
    database = get_database()
    if database.pool is None:
        raise HTTPException(status_code=503, detail="Database is not available")
    return database.pool


def wire_db_dependencies(app: FastAPI) -> None:
    """Override all router-level ``_get_pool`` stubs with ``get_pool``."""
    from people_network.api.routers import groups, health, interactions, people, stats

    for module in [groups, health, interactions, people, stats]:
        app.dependency_overrides[module._get_pool] = get_pool
        logger.debug("Wired DB dependency for router module: %s", module.__name__)
