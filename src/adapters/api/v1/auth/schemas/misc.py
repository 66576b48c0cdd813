"""Shared schema building blocks: camelCase base model and response envelopes."""

from datetime import datetime
from typing import Annotated, Generic, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.utils.clock import as_utc

T = TypeVar("T")

UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Accepts and emits camelCase field names; snake_case is accepted on input too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Envelope(BaseModel, Generic[T]):
    """Standard success envelope: ``{"success": true, "data": ...}``."""

    success: bool = True
    data: T


class MessageResponse(CamelModel):
    """Generic acknowledgement payload."""

    message: str = Field(..., examples=["Logged out"])


class RevokedResponse(CamelModel):
    message: str
    revoked: int = Field(..., ge=0, description="Number of sessions removed.")
