"""Command line entry point: serve the API and manage its database."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path

import click
import uvicorn

from people_network import __version__
from people_network.config import CONFIG_PATH_ENV, AppConfig, ConfigError, load_config
from people_network.core.logging import configure_logging
from people_network.db import Database
from people_network.migrations import run_migrations

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Path to people_network.toml (default: ${CONFIG_PATH_ENV} or ./people_network.toml)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """People Network: track who you meet and when."""
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)
    if config_path is not None:
        # The uvicorn factory reloads config on its own; point it at the same file.
        os.environ[CONFIG_PATH_ENV] = str(config_path)
    configure_logging(
        level=config.logging.level,
        fmt=config.logging.format,
        log_root=config.logging.log_root,
    )
    ctx.obj = config


@cli.command()
@click.option("--host", default=None, help="Bind address (default: server.host)")
@click.option("--port", type=int, default=None, help="Port (default: server.port)")
@click.option("--reload", is_flag=True, help="Restart on code changes (development)")
@click.pass_obj
def serve(config: AppConfig, host: str | None, port: int | None, reload: bool) -> None:
    """Run the HTTP API."""
    host = host or config.server.host
    port = port or config.server.port
    click.echo(f"Serving people-network on http://{host}:{port}")
    uvicorn.run(
        "people_network.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_config=None,
    )


@cli.command()
@click.pass_obj
def migrate(config: AppConfig) -> None:
    """Create the database if needed and apply all migrations."""
    database = Database.from_params(config.database.to_params())
    try:
        asyncio.run(database.provision())
        asyncio.run(run_migrations(database.sqlalchemy_url))
    except Exception as exc:
        logger.debug("Migration failed", exc_info=True)
        click.echo(f"Migration failed: {exc}", err=True)
        sys.exit(1)
    click.echo(f"Database {database.db_name} is up to date")


@cli.command("check-db")
@click.pass_obj
def check_db(config: AppConfig) -> None:
    """Connect to the database and print the server version."""
    database = Database.from_params(config.database.to_params())
    try:
        version = asyncio.run(_check_db(database))
    except Exception as exc:
        click.echo(f"Database connection failed: {exc}", err=True)
        sys.exit(1)
    click.echo(f"Connected to {database.db_name}: {version}")


async def _check_db(database: Database) -> str:
    await database.connect()
    try:
        return await database.check_connection()
    finally:
        await database.close()


if __name__ == "__main__":
    cli()
