"""API error handling middleware.

Registers FastAPI exception handlers that convert domain exceptions into
standardised ``{"error": {"code": "...", "message": "..."}}`` JSON responses.

Status code mapping:
- ``RequestValidationError`` (bad body / path / query) → 400 Bad Request
- ``ValueError`` (store-level validation) → 400 Bad Request
- ``HTTPException`` (not found, database unavailable, ...) → its own status
- Any other ``Exception`` → 500 Internal Server Error
"""

from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from people_network.api.models import ErrorDetail, ErrorResponse
from people_network.core.logging import set_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

_HTTP_ERROR_CODES = {
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    503: "SERVICE_UNAVAILABLE",
}


async def _handle_request_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Return 400 (not FastAPI's default 422) for malformed requests."""
    logger.info("Request validation failed on %s %s", request.method, request.url.path)
    body = ErrorResponse(
        error=ErrorDetail(
            code="VALIDATION_ERROR",
            message="Request validation failed",
            details={"errors": jsonable_encoder(exc.errors())},
        )
    )
    return JSONResponse(status_code=400, content=body.model_dump())


async def _handle_value_error(
    request: Request,
    exc: ValueError,
) -> JSONResponse:
    """Return 400 for validation / value errors."""
    logger.info("Validation error: %s", exc)
    body = ErrorResponse(
        error=ErrorDetail(
            code="VALIDATION_ERROR",
            message=str(exc),
        )
    )
    return JSONResponse(status_code=400, content=body.model_dump())


async def _handle_http_exception(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Wrap ``HTTPException`` (404, 503, ...) in the standard error envelope."""
    body = ErrorResponse(
        error=ErrorDetail(
            code=_HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
            message=str(exc.detail),
        )
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(),
        headers=getattr(exc, "headers", None),
    )


class CatchAllErrorMiddleware(BaseHTTPMiddleware):
    """ASGI middleware that catches any unhandled exception and returns a 500.

    This sits above the Starlette exception handler layer, so storage
    failures reach the client as the standard error envelope with an opaque
    message while the traceback goes to the log.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.error(
                "Unhandled exception on %s %s",
                request.method,
                request.url.path,
                exc_info=True,
            )
            body = ErrorResponse(
                error=ErrorDetail(
                    code="INTERNAL_ERROR",
                    message="Internal server error",
                )
            )
            return JSONResponse(status_code=500, content=body.model_dump())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id into the logging context and echo it back."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            set_request_id(None)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def register_error_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI application.

    Call this from ``create_app()`` after constructing the ``FastAPI`` instance.

    The catch-all is added before the request-context middleware so that
    the request id is still bound when an unhandled error is logged.
    """
    app.add_exception_handler(RequestValidationError, _handle_request_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(ValueError, _handle_value_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)  # type: ignore[arg-type]
    app.add_middleware(CatchAllErrorMiddleware)
    app.add_middleware(RequestContextMiddleware)
