"""Authentication router package - bundles registration, login, session and OAuth endpoints."""

from fastapi import APIRouter

from .routes import login as login_route
from .routes import logout as logout_route
from .routes import me as me_route
from .routes import mobile as mobile_route
from .routes import oauth as oauth_route
from .routes import register as register_route

router = APIRouter(prefix="/auth", tags=["auth"])

# Delegate to sub-routers ----------------------------------------------------

router.include_router(register_route.router, prefix="/register")
router.include_router(login_route.router, prefix="/login")
router.include_router(logout_route.router)
router.include_router(me_route.router, prefix="/me")
router.include_router(mobile_route.router, prefix="/mobile")
router.include_router(oauth_route.router, prefix="/oauth")

__all__ = ["router"]
