"""
Global exception handlers for the FastAPI application.

This module translates the application exception hierarchy into HTTP
responses. Every failure uses the same envelope::

    {"success": false, "error": "<safe message>"}

Unexpected exceptions become a generic 500; their details are logged, never
returned.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException
from structlog import get_logger

from src.core.exceptions import (
    AuthCoreError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    UpstreamFailureError,
    ValidationError,
)

__all__ = [
    "error_response",
    "unauthenticated_error_handler",
    "forbidden_error_handler",
    "not_found_error_handler",
    "conflict_error_handler",
    "upstream_failure_error_handler",
    "validation_error_handler",
    "request_validation_error_handler",
    "http_exception_handler",
    "authcore_error_handler",
    "unhandled_exception_handler",
    "register_exception_handlers",
]

logger = get_logger(__name__)


def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    """Builds the standard failure envelope."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


async def unauthenticated_error_handler(request: Request, exc: UnauthenticatedError) -> JSONResponse:
    """Handles `UnauthenticatedError`, returning a `401 Unauthorized`.

    Args:
        request: The incoming `Request` object.
        exc: The `UnauthenticatedError` instance.

    Returns:
        A `JSONResponse` with a 401 status code and a `WWW-Authenticate` challenge.
    """
    logger.warning(
        "Authentication failure",
        error=exc.code,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return error_response(
        status.HTTP_401_UNAUTHORIZED,
        exc.message,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def forbidden_error_handler(request: Request, exc: ForbiddenError) -> JSONResponse:
    """Handles `ForbiddenError` (including `CannotUnlinkLastMethodError`), returning a `403`."""
    logger.warning(
        "Permission denied",
        error=exc.code,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return error_response(status.HTTP_403_FORBIDDEN, exc.message)


async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handles `NotFoundError`, returning a `404 Not Found`."""
    return error_response(status.HTTP_404_NOT_FOUND, exc.message)


async def conflict_error_handler(request: Request, exc: ConflictError) -> JSONResponse:
    """Handles `ConflictError` (already linked, duplicate user), returning a `409 Conflict`."""
    logger.info("Conflict", error=exc.code, path=request.url.path)
    return error_response(status.HTTP_409_CONFLICT, exc.message)


async def upstream_failure_error_handler(request: Request, exc: UpstreamFailureError) -> JSONResponse:
    """Handles `UpstreamFailureError`, returning a `502 Bad Gateway`.

    Only the safe, provider-tagged summary reaches the client.
    """
    logger.error("Upstream failure", error=exc.code, path=request.url.path)
    return error_response(status.HTTP_502_BAD_GATEWAY, exc.message)


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handles domain `ValidationError`, returning a `400 Bad Request`."""
    return error_response(status.HTTP_400_BAD_REQUEST, exc.message)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handles FastAPI body/query validation failures, returning a `400 Bad Request`.

    The message names the first offending field without echoing its value.
    """
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"Invalid request: {location}: {first.get('msg')}" if location else f"Invalid request: {first.get('msg')}"
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wraps framework HTTP errors (404 route, 405 method) in the standard envelope."""
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def authcore_error_handler(request: Request, exc: AuthCoreError) -> JSONResponse:
    """Handles the base `AuthCoreError`, returning a `500 Internal Server Error`.

    This serves as a fallback for any custom application errors that do not
    have a more specific handler.
    """
    logger.error(
        "An unhandled application error occurred",
        error_code=exc.code,
        error_message=exc.message,
        path=request.url.path,
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: a generic `500` that leaks nothing about ``exc``."""
    logger.exception("Unhandled exception", error_type=type(exc).__name__, path=request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Registers all custom exception handlers with the FastAPI application.

    Starlette resolves handlers along the exception's MRO, so subclasses such
    as `InvalidSessionError` are served by their base class handler.

    Args:
        app: The `FastAPI` application instance.
    """
    app.add_exception_handler(UnauthenticatedError, unauthenticated_error_handler)
    app.add_exception_handler(ForbiddenError, forbidden_error_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(ConflictError, conflict_error_handler)
    app.add_exception_handler(UpstreamFailureError, upstream_failure_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(AuthCoreError, authcore_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
