"""Registration endpoint.

Creates a password user and starts a browser session for them.
"""

import structlog
from fastapi import APIRouter, Request, status

from src.adapters.api.v1.auth.dependencies import UserAuthService
from src.adapters.api.v1.auth.schemas import Envelope, RegisterRequest, UserOut
from src.infrastructure.services.authentication.browser_session import establish_browser_session

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=Envelope[UserOut],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Creates a user with email and password and signs them in with a browser session.",
)
async def register_user(request: Request, payload: RegisterRequest, auth_service: UserAuthService):
    user = await auth_service.register_user(payload.email, payload.password, payload.name)
    establish_browser_session(request, user.id)
    return Envelope(data=UserOut.model_validate(user))
