"""Middleware configuration for the FastAPI application.

This module handles the configuration and registration of all middleware
components: CORS, the signed browser-session cookie and per-request logging
context.
"""

import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from src.core.config.settings import settings


def configure_middleware(app: FastAPI) -> None:
    """Configure all middleware for the FastAPI application.

    Args:
        app (FastAPI): The FastAPI application instance
    """
    # Browser sessions: itsdangerous-signed cookie keyed by SECRET_KEY
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SECRET_KEY,
        session_cookie=settings.BROWSER_SESSION_COOKIE,
        max_age=settings.BROWSER_SESSION_MAX_AGE_SECONDS,
        same_site="lax",
        https_only=settings.SECURE_COOKIES,
    )

    # CORS middleware configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request context middleware
    app.middleware("http")(request_context_middleware)


async def request_context_middleware(request: Request, call_next):
    """Binds request id, client ip and path to every log event of the request.

    The id is taken from ``X-Request-ID`` when the client sends one and is
    echoed back on the response.
    """
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        client_ip=request.client.host if request.client else None,
        path=request.url.path,
    )
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response
