"""Structured logging for people-network.

Uses structlog's ProcessorFormatter to transparently upgrade all existing
``logging.getLogger(__name__)`` call sites. Zero changes needed at call sites.

Two output formats:
- ``text``: Colored, human-readable console output (dev default)
- ``json``: Machine-parseable JSON lines (production / log aggregation)

The id of the HTTP request being served is injected automatically via a
processor that reads from a ContextVar.

Log directory layout (when ``log_root`` is set)::

    logs/
      app.log           # application logs (JSON)
      uvicorn.log       # HTTP server / driver logs (JSON)
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path

import structlog

# ---------------------------------------------------------------------------
# Request context (asyncio-safe via ContextVar)
# ---------------------------------------------------------------------------

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(request_id: str | None) -> None:
    """Set the request id for the current async context."""
    _request_id.set(request_id)


def get_request_id() -> str | None:
    """Get the request id for the current async context."""
    return _request_id.get()


def add_request_context(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: dict,
) -> dict:
    """Inject ``request_id`` from the ContextVar into the event dict."""
    request_id = _request_id.get()
    if request_id is not None:
        event_dict["request_id"] = request_id
    return event_dict


# ---------------------------------------------------------------------------
# Noise suppression
# ---------------------------------------------------------------------------

_NOISE_LOGGERS = (
    "uvicorn.access",
    "uvicorn.error",
    "asyncpg",
    "httpx",
    "httpcore",
)

_APP_LOG_FILE = "app.log"
_TRANSPORT_LOG_FILE = "uvicorn.log"


def _build_processors(
    time_fmt: str,
) -> list[structlog.types.Processor]:
    """Build the pre-chain processor list with the given timestamp format."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt=time_fmt),
        add_request_context,
        structlog.stdlib.ExtraAdder(),
    ]


def _make_file_handler(path: Path, processors: list) -> logging.FileHandler:
    """Create a JSON file handler at *path*."""
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
        foreign_pre_chain=processors,
    )
    handler = logging.FileHandler(path)
    handler.setFormatter(formatter)
    handler.setLevel(logging.DEBUG)
    return handler


def configure_logging(
    level: str = "INFO",
    fmt: str = "text",
    log_root: Path | str | None = None,
) -> None:
    """Configure structured logging for the process.

    Parameters
    ----------
    level:
        Root log level (e.g. "DEBUG", "INFO", "WARNING").
    fmt:
        Output format: ``"text"`` for colored console, ``"json"`` for JSON lines.
    log_root:
        Directory for JSON log files. When set, application records go to
        ``{log_root}/app.log`` and server/driver records to
        ``{log_root}/uvicorn.log``.
    """
    if fmt == "json":
        console_processors = _build_processors(time_fmt="iso")
        renderer = structlog.processors.JSONRenderer()
    else:
        console_processors = _build_processors(time_fmt="%H:%M:%S")
        renderer = structlog.dev.ConsoleRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=console_processors,
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)

    root = logging.getLogger()
    # Reconfiguration must not duplicate output
    root.handlers.clear()
    root.addHandler(console_handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in _NOISE_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if log_root is not None:
        log_root = Path(log_root)
        log_root.mkdir(parents=True, exist_ok=True)
        file_processors = _build_processors(time_fmt="iso")

        root.addHandler(_make_file_handler(log_root / _APP_LOG_FILE, file_processors))

        transport_handler = _make_file_handler(log_root / _TRANSPORT_LOG_FILE, file_processors)
        for name in _NOISE_LOGGERS:
            logging.getLogger(name).addHandler(transport_handler)

    # Direct structlog.get_logger() usage goes through the same pipeline
    structlog.configure(
        processors=[
            *console_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
