"""Application factory for creating and configuring the FastAPI application.

This module provides a factory function to create a properly configured FastAPI application
with all necessary middleware, exception handlers, and routers registered.
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from src.adapters.api.v1 import api_router
from src.core.config.settings import settings
from src.core.handlers import register_exception_handlers
from src.core.lifecycle import create_lifespan_manager
from src.core.middleware import configure_middleware
from src.domain.services.auth.oauth import build_token_cipher
from src.infrastructure.database.async_db import Database
from src.infrastructure.services.authentication.oauth import OAuthProviderClient
from src.permissions.rbac import AccessControlEvaluator


def create_application(
    database: Optional[Database] = None,
    oauth_client: Optional[OAuthProviderClient] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        database: An already constructed store handle. When omitted, the
            lifespan opens one from settings and disposes it on shutdown.
        oauth_client: Provider client override, mainly for tests.

    Returns:
        FastAPI: The configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Authentication and authorization core: sessions, OAuth linking and RBAC.",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=create_lifespan_manager(),
        default_response_class=JSONResponse,
    )

    # Process-wide collaborators, built once
    app.state.access_control = AccessControlEvaluator()
    app.state.oauth_client = oauth_client or OAuthProviderClient()
    app.state.token_cipher = build_token_cipher()
    if database is not None:
        app.state.database = database

    # Configure middleware
    configure_middleware(app)

    # Register exception handlers
    register_exception_handlers(app)

    # Include routers
    app.include_router(api_router, prefix=settings.API_PREFIX)

    return app
