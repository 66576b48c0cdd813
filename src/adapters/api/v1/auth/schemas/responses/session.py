"""Response models for bearer sessions."""

from typing import Optional

from pydantic import Field

from src.domain.entities.session import DeviceType

from ..misc import CamelModel, UTCDateTime
from .user import UserOut


class SessionIssuedOut(CamelModel):
    """Returned once when a session is created; the only time the token is shown."""

    session_token: str
    expires_at: UTCDateTime
    user: UserOut


class SessionOut(CamelModel):
    """One entry of the caller's session list. Never carries token bytes."""

    id: int
    masked_token: str = Field(..., examples=["sess_****a1B2"])
    device_type: DeviceType
    device_name: Optional[str] = None
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: UTCDateTime
    expires: UTCDateTime
    is_current: bool
