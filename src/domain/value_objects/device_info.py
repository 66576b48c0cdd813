"""Device Info Value Object.

Captures the client classification, name, user agent and source IP for a
request so they can be stored alongside an issued session. Extraction is
best-effort and never raises: missing or garbled headers simply produce
``None`` fields or an ``unknown`` device type.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Request

from src.domain.entities.session import DeviceType

logger = structlog.get_logger(__name__)

_MAX_HEADER_LENGTH = 512


@dataclass(frozen=True)
class DeviceInfo:
    """Client metadata captured at session issuance."""

    device_type: DeviceType = DeviceType.UNKNOWN
    device_name: Optional[str] = None
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


def parse_device_type(value: Optional[str], default: DeviceType = DeviceType.UNKNOWN) -> DeviceType:
    """Maps a client-supplied label onto ``DeviceType``; unknown labels fall back to ``default``."""
    if not value:
        return default
    try:
        return DeviceType(value.strip().lower())
    except ValueError:
        return DeviceType.UNKNOWN


def _clip(value: Optional[str], limit: int = _MAX_HEADER_LENGTH) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value[:limit] or None


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # First hop is the originating client
        return _clip(forwarded.split(",")[0], 64)
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return _clip(real_ip, 64)
    return request.client.host if request.client else None


def extract_device_info(
    request: Request,
    default_type: DeviceType = DeviceType.WEB,
    device_type: Optional[str] = None,
    device_name: Optional[str] = None,
) -> DeviceInfo:
    """Reads device metadata from request headers.

    Explicit ``device_type``/``device_name`` arguments (usually from a request
    body) take precedence over the ``X-Device-Type``/``X-Device-Name`` headers.

    Args:
        request: The incoming request.
        default_type: Classification used when the client sends none.
        device_type: Client-declared device type.
        device_name: Client-declared device name.

    Returns:
        DeviceInfo: Always returns, never raises.
    """
    try:
        return DeviceInfo(
            device_type=parse_device_type(device_type or request.headers.get("x-device-type"), default_type),
            device_name=_clip(device_name or request.headers.get("x-device-name"), 255),
            user_agent=_clip(request.headers.get("user-agent")),
            ip_address=_client_ip(request),
        )
    except Exception as e:  # noqa: BLE001 - extraction must never fail a request
        logger.warning("device_info_extraction_failed", error=str(e))
        return DeviceInfo(device_type=default_type)
