"""Browser login endpoint.

Authenticates with email and password and stores the user id in the signed
browser session. Non-browser clients use ``/auth/mobile/login`` instead.
"""

import structlog
from fastapi import APIRouter, Request, status

from src.adapters.api.v1.auth.dependencies import UserAuthService
from src.adapters.api.v1.auth.schemas import Envelope, LoginRequest, UserOut
from src.infrastructure.services.authentication.browser_session import establish_browser_session

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=Envelope[UserOut],
    status_code=status.HTTP_200_OK,
    summary="Authenticate a browser user",
)
async def login_user(request: Request, payload: LoginRequest, auth_service: UserAuthService):
    """Authenticate and start a browser session.

    Raises:
        InvalidCredentialsError: For an unknown email, wrong password or inactive account.
    """
    user = await auth_service.authenticate_by_credentials(payload.email, payload.password)
    establish_browser_session(request, user.id)
    await logger.ainfo("Browser login succeeded", user_id=user.id)
    return Envelope(data=UserOut.model_validate(user))
