"""OAuth endpoints.

Flow for browsers:

1. ``GET /oauth/{provider}/authorize`` returns the provider URL and remembers
   the random ``state`` in the browser session.
2. The provider redirects back to the frontend, which posts ``code`` and
   ``state`` to ``POST /oauth/{provider}/exchange``.

Mobile clients run the provider consent themselves and post the code with
``client="mobile"``; they receive a bearer session instead of a cookie.
"""

import hmac
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, Query, Request, status

from src.adapters.api.v1.auth.dependencies import IdentityLinker, ProviderClient, SessionManager
from src.adapters.api.v1.auth.schemas import (
    AuthorizationUrlOut,
    Envelope,
    LinkedAccountOut,
    MessageResponse,
    OAuthExchangeRequest,
    OAuthLinkRequest,
    OAuthLoginOut,
    UserOut,
)
from src.core.dependencies.auth import AuthenticatedUser, AuthSource, CurrentUser
from src.core.exceptions import ValidationError
from src.domain.entities.session import DeviceType
from src.domain.value_objects.device_info import extract_device_info
from src.domain.value_objects.oauth_provider import Provider
from src.infrastructure.services.authentication.browser_session import (
    establish_browser_session,
    pop_oauth_state,
    store_oauth_state,
)
from src.permissions.dependencies import require_permission
from src.permissions.rbac import Permission

logger = structlog.get_logger(__name__)
router = APIRouter()


def _check_state(request: Request, provider: Provider, supplied: Optional[str]) -> None:
    """Compare the echoed ``state`` with the one stored at authorize time (single use)."""
    expected = pop_oauth_state(request, provider.value)
    if not supplied or not expected or not hmac.compare_digest(supplied, expected):
        raise ValidationError("Invalid OAuth state")


@router.get(
    "/accounts",
    response_model=Envelope[List[LinkedAccountOut]],
    summary="List providers linked to the caller",
)
async def list_linked_accounts(current_user: CurrentUser, linker: IdentityLinker):
    accounts = await linker.get_linked_accounts(current_user.id)
    return Envelope(data=[LinkedAccountOut(provider=a.provider, linked_at=a.linked_at) for a in accounts])


@router.get(
    "/{provider}/authorize",
    response_model=Envelope[AuthorizationUrlOut],
    summary="Start a provider sign-in",
)
async def authorize(
    request: Request,
    provider: Provider,
    client: ProviderClient,
    redirect_uri: str = Query(..., min_length=1, max_length=2048),
):
    url, state = client.create_authorization_url(provider, redirect_uri)
    store_oauth_state(request, provider.value, state)
    return Envelope(data=AuthorizationUrlOut(authorization_url=url, state=state))


@router.post(
    "/{provider}/exchange",
    response_model=Envelope[OAuthLoginOut],
    status_code=status.HTTP_200_OK,
    summary="Sign in with a provider authorization code",
)
async def exchange(
    request: Request,
    provider: Provider,
    payload: OAuthExchangeRequest,
    client: ProviderClient,
    linker: IdentityLinker,
    sessions: SessionManager,
):
    """Exchange the code, resolve or create the user, then start a session.

    Raises:
        ValidationError: If a web client's ``state`` does not match.
        OAuthExchangeFailedError: If the provider exchange fails.
        ConflictError: If the email belongs to another user and is unverified.
    """
    if payload.client == "web":
        _check_state(request, provider, payload.state)

    profile = await client.exchange_authorization_code(provider, payload.code, payload.redirect_uri)
    user = await linker.find_or_create_user_from_profile(provider, profile)

    if payload.client == "web":
        establish_browser_session(request, user.id)
        return Envelope(data=OAuthLoginOut(user=UserOut.model_validate(user)))

    device = extract_device_info(
        request,
        default_type=DeviceType.ANDROID,
        device_type=payload.device_type.value if payload.device_type else None,
        device_name=payload.device_name,
    )
    issued = await sessions.create(user.id, device)
    return Envelope(
        data=OAuthLoginOut(
            user=UserOut.model_validate(user),
            session_token=issued.token,
            expires_at=issued.expires_at,
        )
    )


@router.post(
    "/{provider}/link",
    response_model=Envelope[LinkedAccountOut],
    status_code=status.HTTP_201_CREATED,
    summary="Link a provider identity to the caller",
)
async def link(
    request: Request,
    provider: Provider,
    payload: OAuthLinkRequest,
    client: ProviderClient,
    linker: IdentityLinker,
    current_user: AuthenticatedUser = Depends(require_permission(Permission.ACCOUNTS_LINK)),
):
    """Link a provider to the signed-in user.

    Browser callers must echo the ``state`` issued by the authorize endpoint.

    Raises:
        AlreadyLinkedToAnotherUserError: If the identity belongs to another user.
    """
    if current_user.source is AuthSource.BROWSER:
        _check_state(request, provider, payload.state)

    profile = await client.exchange_authorization_code(provider, payload.code, payload.redirect_uri)
    account = await linker.link_account(current_user.id, provider, profile)
    return Envelope(data=LinkedAccountOut(provider=account.provider, linked_at=account.created_at))


@router.delete(
    "/{provider}",
    response_model=Envelope[MessageResponse],
    summary="Unlink a provider from the caller",
)
async def unlink(provider: Provider, current_user: CurrentUser, linker: IdentityLinker):
    """Remove the link unless it is the caller's last way to sign in.

    Raises:
        CannotUnlinkLastMethodError: If no password and no other provider would remain.
        NotFoundError: If the provider is not linked.
    """
    await linker.unlink_account(current_user.id, provider)
    return Envelope(data=MessageResponse(message=f"{provider.value} account unlinked"))
