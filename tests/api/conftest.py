"""Shared fixtures and helpers for people-network API tests.

The app is built with an explicit ``AppConfig`` so no config file is read,
and the lifespan never runs under ``httpx.ASGITransport``; every router's
``_get_pool`` stub is overridden with a mock pool instead.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI

from people_network.api.app import create_app
from people_network.api.routers import groups, health, interactions, people, stats
from people_network.config import AppConfig
from tests._helpers import make_pool_and_conn

_ROUTER_MODULES = (groups, health, interactions, people, stats)


def build_app(pool: MagicMock | None = None) -> tuple[FastAPI, MagicMock]:
    """Create the app with every DB dependency pointing at *pool*."""
    if pool is None:
        pool, _, _ = make_pool_and_conn()
    app = create_app(config=AppConfig())
    for module in _ROUTER_MODULES:
        app.dependency_overrides[module._get_pool] = lambda: pool
    return app, pool


@pytest.fixture
def app() -> FastAPI:
    """A bare app with mocked DB dependencies, for middleware tests."""
    app, _ = build_app()
    return app
