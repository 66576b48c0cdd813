"""Request payload models for authentication endpoints."""

from typing import Literal, Optional

from pydantic import EmailStr, Field, field_validator

from src.domain.entities.session import DeviceType
from src.utils.security import MAX_PASSWORD_BYTES

from .misc import CamelModel


class RegisterRequest(CamelModel):
    """Payload expected by ``POST /auth/register``."""

    email: EmailStr = Field(..., examples=["john@example.com"])
    password: str = Field(..., min_length=8, examples=["Str0ngP@ssw0rd"])
    name: str = Field(..., min_length=1, max_length=255, examples=["John Doe"])

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError("password must be at most 72 bytes")
        return value


class LoginRequest(CamelModel):
    """Payload expected by ``POST /auth/login``."""

    email: EmailStr = Field(..., examples=["john@example.com"])
    password: str = Field(..., min_length=1, examples=["Str0ngP@ssw0rd"])


class DeviceFields(CamelModel):
    """Optional client-declared device metadata."""

    device_type: Optional[DeviceType] = Field(default=None, examples=["ios"])
    device_name: Optional[str] = Field(default=None, max_length=255, examples=["John's iPhone"])


class MobileLoginRequest(LoginRequest, DeviceFields):
    """Payload expected by ``POST /auth/mobile/login``."""


class MobileRefreshRequest(DeviceFields):
    """Optional payload for ``POST /auth/mobile/refresh``; the token travels in the header."""


class OAuthExchangeRequest(DeviceFields):
    """Payload expected by ``POST /auth/oauth/{provider}/exchange``.

    Web clients must echo the ``state`` returned by the authorize endpoint.
    """

    code: str = Field(..., min_length=1, max_length=2048)
    redirect_uri: str = Field(..., min_length=1, max_length=2048)
    state: Optional[str] = Field(default=None, max_length=256)
    client: Literal["web", "mobile"] = "web"


class OAuthLinkRequest(CamelModel):
    """Payload expected by ``POST /auth/oauth/{provider}/link``."""

    code: str = Field(..., min_length=1, max_length=2048)
    redirect_uri: str = Field(..., min_length=1, max_length=2048)
    state: Optional[str] = Field(default=None, max_length=256)
