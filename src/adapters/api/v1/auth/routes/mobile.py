"""Bearer-session endpoints for non-browser clients.

Mobile clients authenticate with ``Authorization: Bearer <sessionToken>``.
Login and refresh return the session issuance payload; the plaintext token is
only ever shown in those two responses.
"""

from typing import List, Optional

import structlog
from fastapi import APIRouter, Request, status

from src.adapters.api.v1.auth.dependencies import SessionManager, UserAuthService
from src.adapters.api.v1.auth.schemas import (
    Envelope,
    MessageResponse,
    MobileLoginRequest,
    MobileRefreshRequest,
    SessionIssuedOut,
    SessionOut,
    UserOut,
)
from src.core.dependencies.auth import CurrentUser, DBSession, extract_bearer_token
from src.core.exceptions import InvalidSessionError, UnauthenticatedError
from src.domain.entities.session import DeviceType
from src.domain.entities.user import User
from src.domain.services.auth.session import IssuedSession
from src.domain.value_objects.device_info import extract_device_info
from src.infrastructure.repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)
router = APIRouter()


def _issued_response(issued: IssuedSession, user: User) -> Envelope[SessionIssuedOut]:
    return Envelope(
        data=SessionIssuedOut(
            session_token=issued.token,
            expires_at=issued.expires_at,
            user=UserOut.model_validate(user),
        )
    )


def _require_bearer(request: Request) -> str:
    token = extract_bearer_token(request.headers.get("authorization"))
    if token is None:
        raise UnauthenticatedError("Bearer session token required")
    return token


@router.post(
    "/login",
    response_model=Envelope[SessionIssuedOut],
    status_code=status.HTTP_200_OK,
    summary="Authenticate and issue a bearer session",
)
async def mobile_login(
    request: Request,
    payload: MobileLoginRequest,
    auth_service: UserAuthService,
    sessions: SessionManager,
):
    user = await auth_service.authenticate_by_credentials(payload.email, payload.password)
    device = extract_device_info(
        request,
        default_type=DeviceType.ANDROID,
        device_type=payload.device_type.value if payload.device_type else None,
        device_name=payload.device_name,
    )
    issued = await sessions.create(user.id, device)
    return _issued_response(issued, user)


@router.post(
    "/refresh",
    response_model=Envelope[SessionIssuedOut],
    status_code=status.HTTP_200_OK,
    summary="Exchange the current bearer session for a new one",
)
async def mobile_refresh(
    request: Request,
    sessions: SessionManager,
    db_session: DBSession,
    payload: Optional[MobileRefreshRequest] = None,
):
    """Atomically replace the caller's session; the old token stops working."""
    old_token = _require_bearer(request)
    device = extract_device_info(
        request,
        default_type=DeviceType.UNKNOWN,
        device_type=payload.device_type.value if payload and payload.device_type else None,
        device_name=payload.device_name if payload else None,
    )
    issued = await sessions.refresh(old_token, device)

    user = await UserRepository(db_session).get_by_id(issued.session.user_id)
    await db_session.commit()
    if user is None:
        raise InvalidSessionError()
    return _issued_response(issued, user)


@router.post(
    "/logout",
    response_model=Envelope[MessageResponse],
    status_code=status.HTTP_200_OK,
    summary="Revoke the current bearer session",
)
async def mobile_logout(request: Request, sessions: SessionManager):
    await sessions.delete(_require_bearer(request))
    return Envelope(data=MessageResponse(message="Logged out"))


@router.get(
    "/sessions",
    response_model=Envelope[List[SessionOut]],
    summary="List the caller's active sessions",
)
async def list_sessions(current_user: CurrentUser, sessions: SessionManager):
    views = await sessions.list_for_user(current_user.id, current_token=current_user.session_token)
    return Envelope(
        data=[
            SessionOut(
                id=view.id,
                masked_token=view.masked_token,
                device_type=view.device_type,
                device_name=view.device_name,
                user_agent=view.user_agent,
                ip_address=view.ip_address,
                created_at=view.created_at,
                expires=view.expires_at,
                is_current=view.is_current,
            )
            for view in views
        ]
    )


@router.delete(
    "/sessions/{session_id}",
    response_model=Envelope[MessageResponse],
    summary="Revoke one of the caller's sessions",
)
async def revoke_session(session_id: int, current_user: CurrentUser, sessions: SessionManager):
    await sessions.delete_for_user(session_id, current_user.id)
    return Envelope(data=MessageResponse(message="Session revoked"))
