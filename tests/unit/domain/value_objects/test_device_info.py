from starlette.requests import Request

from src.domain.entities.session import DeviceType
from src.domain.value_objects.device_info import DeviceInfo, extract_device_info, parse_device_type


def make_request(headers=None, client=("203.0.113.9", 5000)):
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw, "client": client})


def test_parse_device_type():
    assert parse_device_type("iOS") is DeviceType.IOS
    assert parse_device_type(None, DeviceType.WEB) is DeviceType.WEB
    assert parse_device_type("toaster") is DeviceType.UNKNOWN


def test_extract_uses_headers_and_client_host():
    request = make_request({"User-Agent": "Mozilla/5.0", "X-Device-Type": "android", "X-Device-Name": "Pixel"})
    info = extract_device_info(request)
    assert info == DeviceInfo(
        device_type=DeviceType.ANDROID,
        device_name="Pixel",
        user_agent="Mozilla/5.0",
        ip_address="203.0.113.9",
    )


def test_explicit_values_override_headers():
    request = make_request({"X-Device-Type": "android"})
    info = extract_device_info(request, device_type="ios", device_name="Phone")
    assert info.device_type is DeviceType.IOS
    assert info.device_name == "Phone"


def test_forwarded_for_first_hop_wins():
    request = make_request({"X-Forwarded-For": "198.51.100.1, 10.0.0.1", "X-Real-IP": "10.0.0.2"})
    assert extract_device_info(request).ip_address == "198.51.100.1"


def test_defaults_when_nothing_is_sent():
    info = extract_device_info(make_request(client=None), default_type=DeviceType.WEB)
    assert info.device_type is DeviceType.WEB
    assert info.user_agent is None
    assert info.ip_address is None


def test_user_agent_is_clipped():
    info = extract_device_info(make_request({"User-Agent": "x" * 2000}))
    assert len(info.user_agent) == 512
