"""Application configuration loading and validation.

Reads ``people_network.toml`` (when present), resolves ``${VAR}`` references,
applies environment overrides and returns a validated AppConfig dataclass.
"""

from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from people_network.db import DEFAULT_DB_NAME, db_params_from_database_url

DEFAULT_CONFIG_PATH = Path("people_network.toml")
CONFIG_PATH_ENV = "PEOPLE_NETWORK_CONFIG"

# Matches ${VAR_NAME} with alphanumeric and underscore names
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
_VALID_LOG_FORMATS = ("text", "json")


class ConfigError(Exception):
    """Raised when configuration is missing, malformed, or invalid."""


@dataclass
class LoggingConfig:
    """Logging configuration from the [logging] section."""

    level: str = "INFO"
    format: str = "text"  # "text" or "json"
    log_root: str | None = None


@dataclass
class ServerConfig:
    """HTTP server configuration from the [server] section."""

    host: str = "127.0.0.1"
    port: int = 3001
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])
    static_dir: str | None = None


@dataclass
class DatabaseConfig:
    """PostgreSQL connection settings from the [database] section."""

    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: str = ""
    name: str = DEFAULT_DB_NAME
    ssl: str | None = None
    min_pool_size: int = 1
    max_pool_size: int = 10

    def to_params(self) -> dict[str, Any]:
        """Return keyword params accepted by ``Database.from_params``."""
        return {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "db_name": self.name,
            "ssl": self.ssl,
            "min_pool_size": self.min_pool_size,
            "max_pool_size": self.max_pool_size,
        }


@dataclass
class AppConfig:
    """Parsed and validated application configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def resolve_env_vars(value: Any) -> Any:
    """Recursively resolve ``${VAR_NAME}`` references in config values.

    Walks dicts, lists, and strings.  Non-string leaf values (int, bool,
    float, None) are returned unchanged.

    Raises
    ------
    ConfigError
        If a referenced environment variable is not set.
    """
    if isinstance(value, dict):
        return {k: resolve_env_vars(v) for k, v in value.items()}

    if isinstance(value, list):
        return [resolve_env_vars(item) for item in value]

    if isinstance(value, str):
        return _resolve_string(value)

    return value


def _resolve_string(s: str) -> str:
    """Replace all ``${VAR_NAME}`` occurrences in *s* with env var values.

    Collects all missing variable names and reports them in a single error.
    """
    missing: list[str] = []

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            missing.append(var_name)
            return match.group(0)
        return env_value

    result = _ENV_VAR_PATTERN.sub(_replace, s)

    if missing:
        vars_str = ", ".join(missing)
        raise ConfigError(
            f"Unresolved environment variable(s) in config value: {vars_str} (original: {s!r})"
        )

    return result


def _as_int(section: str, key: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{section}.{key} must be an integer, got {value!r}") from exc


def _parse_server(raw: dict[str, Any]) -> ServerConfig:
    defaults = ServerConfig()
    origins = raw.get("cors_origins", defaults.cors_origins)
    if isinstance(origins, str):
        origins = [o.strip() for o in origins.split(",") if o.strip()]
    if not isinstance(origins, list) or not all(isinstance(o, str) for o in origins):
        raise ConfigError("server.cors_origins must be a list of strings")
    static_dir = raw.get("static_dir")
    if static_dir is not None and not isinstance(static_dir, str):
        raise ConfigError("server.static_dir must be a string when set")
    return ServerConfig(
        host=str(raw.get("host", defaults.host)),
        port=_as_int("server", "port", raw.get("port", defaults.port)),
        cors_origins=[o.rstrip("/") for o in origins],
        static_dir=static_dir or None,
    )


def _parse_database(raw: dict[str, Any]) -> DatabaseConfig:
    defaults = DatabaseConfig()
    url = raw.get("url")
    base: dict[str, Any] = {}
    if url:
        base = db_params_from_database_url(str(url))

    def pick(key: str, url_key: str, default: Any) -> Any:
        if key in raw:
            return raw[key]
        return base.get(url_key, default)

    name = str(pick("name", "db_name", defaults.name)).strip()
    if not name:
        raise ConfigError("database.name must be a non-empty string")

    config = DatabaseConfig(
        host=str(pick("host", "host", defaults.host)),
        port=_as_int("database", "port", pick("port", "port", defaults.port)),
        user=str(pick("user", "user", defaults.user)),
        password=str(pick("password", "password", defaults.password)),
        name=name,
        ssl=pick("ssl", "ssl", defaults.ssl),
        min_pool_size=_as_int(
            "database", "min_pool_size", raw.get("min_pool_size", defaults.min_pool_size)
        ),
        max_pool_size=_as_int(
            "database", "max_pool_size", raw.get("max_pool_size", defaults.max_pool_size)
        ),
    )
    if config.min_pool_size < 1 or config.max_pool_size < config.min_pool_size:
        raise ConfigError(
            "database pool sizes must satisfy 1 <= min_pool_size <= max_pool_size, "
            f"got {config.min_pool_size}..{config.max_pool_size}"
        )
    return config


def _parse_logging(raw: dict[str, Any]) -> LoggingConfig:
    log_level = str(raw.get("level", "INFO")).upper()
    log_format = str(raw.get("format", "text")).lower()
    if log_format not in _VALID_LOG_FORMATS:
        raise ConfigError(f"Invalid logging.format: {log_format!r}. Expected 'text' or 'json'.")
    return LoggingConfig(level=log_level, format=log_format, log_root=raw.get("log_root"))


def _apply_env_overrides(config: AppConfig) -> None:
    """Let deployment environment variables win over the file."""
    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        params = db_params_from_database_url(database_url)
        config.database.host = str(params["host"])
        config.database.port = int(params["port"])
        config.database.user = str(params["user"])
        config.database.password = str(params["password"])
        config.database.name = str(params["db_name"])
        if params["ssl"] is not None:
            config.database.ssl = str(params["ssl"])

    env_map = {
        "DB_HOST": ("host", str),
        "DB_PORT": ("port", int),
        "DB_USER": ("user", str),
        "DB_PASSWORD": ("password", str),
        "DB_NAME": ("name", str),
    }
    for env_name, (attr, cast) in env_map.items():
        raw = os.environ.get(env_name)
        if raw is None:
            continue
        try:
            setattr(config.database, attr, cast(raw))
        except ValueError as exc:
            raise ConfigError(f"{env_name} must be {cast.__name__}, got {raw!r}") from exc

    port = os.environ.get("PORT")
    if port:
        config.server.port = _as_int("env", "PORT", port)


def resolve_config_path(path: Path | None = None) -> Path:
    """Return the config path: explicit argument, then env var, then default."""
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def load_config(path: Path | None = None) -> AppConfig:
    """Load and validate the application configuration.

    A missing file at the *default* location yields defaults; a missing file
    that was asked for explicitly is an error.

    Raises
    ------
    ConfigError
        If the file is missing (when explicit), cannot be read, is not
        valid UTF-8 TOML, or holds invalid values.
    """
    explicit = path is not None or bool(os.environ.get(CONFIG_PATH_ENV))
    toml_path = resolve_config_path(path)

    data: dict[str, Any] = {}
    if toml_path.exists():
        try:
            with toml_path.open("rb") as fh:
                data = tomllib.load(fh)
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise ConfigError(f"Invalid TOML in {toml_path}: {exc}") from exc
        except OSError as exc:
            raise ConfigError(f"Cannot read config file {toml_path}: {exc}") from exc
    elif explicit:
        raise ConfigError(f"Config file not found: {toml_path}")

    data = resolve_env_vars(data)

    for section in ("server", "database", "logging"):
        if not isinstance(data.get(section, {}), dict):
            raise ConfigError(f"[{section}] must be a table")

    config = AppConfig(
        server=_parse_server(data.get("server", {})),
        database=_parse_database(data.get("database", {})),
        logging=_parse_logging(data.get("logging", {})),
    )
    _apply_env_overrides(config)
    return config
