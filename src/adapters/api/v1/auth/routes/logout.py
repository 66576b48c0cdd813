"""Logout endpoints.

``/logout`` ends whatever credential the caller used: the bearer session is
deleted, the browser session is cleared. ``/logout-all`` additionally deletes
every bearer session the user owns.
"""

import structlog
from fastapi import APIRouter, Request, status

from src.adapters.api.v1.auth.dependencies import SessionManager
from src.adapters.api.v1.auth.schemas import Envelope, MessageResponse, RevokedResponse
from src.core.dependencies.auth import AuthSource, CurrentUser
from src.infrastructure.services.authentication.browser_session import clear_browser_session

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "/logout",
    response_model=Envelope[MessageResponse],
    status_code=status.HTTP_200_OK,
    summary="End the current session",
)
async def logout(request: Request, current_user: CurrentUser, sessions: SessionManager):
    if current_user.source is AuthSource.BEARER and current_user.session_token:
        await sessions.delete(current_user.session_token)
    clear_browser_session(request)
    await logger.ainfo("User logged out", user_id=current_user.id, source=current_user.source.value)
    return Envelope(data=MessageResponse(message="Logged out"))


@router.post(
    "/logout-all",
    response_model=Envelope[RevokedResponse],
    status_code=status.HTTP_200_OK,
    summary="Log out everywhere",
)
async def logout_all(request: Request, current_user: CurrentUser, sessions: SessionManager):
    revoked = await sessions.delete_all_for_user(current_user.id)
    clear_browser_session(request)
    return Envelope(data=RevokedResponse(message="Logged out from all devices", revoked=revoked))
