"""Domain Value Objects for the authentication domain.

Value objects are immutable objects that describe domain concepts by their attributes
rather than their identity.
"""

from .device_info import DeviceInfo, extract_device_info, parse_device_type
from .oauth_provider import Provider, ProviderProfile

__all__ = [
    "DeviceInfo",
    "extract_device_info",
    "parse_device_type",
    "Provider",
    "ProviderProfile",
]
