"""FastAPI application factory for the people-network API.

The app factory creates a FastAPI instance with:
- CORS middleware (configurable origins)
- Lifespan handler that opens and closes the asyncpg pool
- Routers for people, interactions, stats, groups and health under ``/api``
- Optional static file serving for the built frontend
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.staticfiles import StaticFiles

from people_network import __version__
from people_network.api.deps import init_database, shutdown_database, wire_db_dependencies
from people_network.api.middleware import register_error_handlers
from people_network.api.routers.groups import router as groups_router
from people_network.api.routers.health import router as health_router
from people_network.api.routers.interactions import router as interactions_router
from people_network.api.routers.people import router as people_router
from people_network.api.routers.stats import router as stats_router
from people_network.config import AppConfig, load_config
from people_network.core.logging import configure_logging
from people_network.db import Database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle for the database pool.

    A database that cannot be reached at startup does not stop the server;
    the DB-backed endpoints answer 503 until it is restarted.
    """
    config: AppConfig = app.state.config
    database = Database.from_params(config.database.to_params())
    wire_db_dependencies(app)
    try:
        await init_database(database)
        logger.info("Database pool initialized for %s", database.db_name)
    except Exception:
        logger.warning(
            "Failed to connect to database %s; DB endpoints will be unavailable",
            database.db_name,
            exc_info=True,
        )

    yield

    await shutdown_database()


def create_app(
    config: AppConfig | None = None,
    cors_origins: list[str] | None = None,
    static_dir: str | Path | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    config:
        Application configuration. Loaded with ``load_config()`` when omitted,
        which is how ``uvicorn --factory`` builds the app.
    cors_origins:
        Allowed CORS origins. Defaults to ``config.server.cors_origins``.
    static_dir:
        Path to the built frontend directory. When set (or configured as
        ``server.static_dir``), mounts a ``StaticFiles`` handler at ``/`` with
        ``html=True`` for SPA fallback.
    """
    if config is None:
        config = load_config()
        configure_logging(
            level=config.logging.level,
            fmt=config.logging.format,
            log_root=config.logging.log_root,
        )
    if cors_origins is None:
        cors_origins = config.server.cors_origins

    app = FastAPI(
        title="People Network API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.router.redirect_slashes = False

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(people_router)
    app.include_router(interactions_router)
    app.include_router(stats_router)
    app.include_router(groups_router)

    # --- Static file serving (production) ---
    # Mount AFTER all API routes so /api/* always takes precedence.
    resolved_static = static_dir or config.server.static_dir
    if resolved_static is not None:
        dist_path = Path(resolved_static)
        if dist_path.is_dir():
            app.mount(
                "/",
                StaticFiles(directory=str(dist_path), html=True),
                name="frontend",
            )
            logger.info("Mounted frontend static files from %s", dist_path)
        else:
            logger.warning("static_dir %s does not exist; skipping static mount", dist_path)

    return app
