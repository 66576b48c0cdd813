"""Current-user endpoint."""

from fastapi import APIRouter

from src.adapters.api.v1.auth.schemas import Envelope, UserOut
from src.core.dependencies.auth import CurrentUser

router = APIRouter()


@router.get("", response_model=Envelope[UserOut], summary="Return the authenticated user")
async def read_me(current_user: CurrentUser):
    return Envelope(data=UserOut.model_validate(current_user))
