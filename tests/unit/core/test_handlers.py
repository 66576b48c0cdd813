import json

import pytest
from fastapi.exceptions import RequestValidationError
from starlette.requests import Request

from src.core.exceptions import (
    AlreadyLinkedToAnotherUserError,
    AuthCoreError,
    CannotUnlinkLastMethodError,
    InvalidSessionError,
    NotFoundError,
    OAuthExchangeFailedError,
    ValidationError,
)
from src.core.handlers import (
    authcore_error_handler,
    conflict_error_handler,
    forbidden_error_handler,
    not_found_error_handler,
    request_validation_error_handler,
    unauthenticated_error_handler,
    unhandled_exception_handler,
    upstream_failure_error_handler,
    validation_error_handler,
)


@pytest.fixture
def request_():
    return Request({"type": "http", "method": "GET", "path": "/api/v1/x", "headers": [], "client": ("127.0.0.1", 1)})


def body(response):
    return json.loads(response.body)


@pytest.mark.asyncio
async def test_unauthenticated_maps_to_401_with_challenge(request_):
    response = await unauthenticated_error_handler(request_, InvalidSessionError())
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert body(response) == {"success": False, "error": "Invalid or expired session"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "handler, exc, status",
    [
        (forbidden_error_handler, CannotUnlinkLastMethodError(), 403),
        (not_found_error_handler, NotFoundError("Session not found"), 404),
        (conflict_error_handler, AlreadyLinkedToAnotherUserError(), 409),
        (upstream_failure_error_handler, OAuthExchangeFailedError("google"), 502),
        (validation_error_handler, ValidationError("Invalid OAuth state"), 400),
    ],
)
async def test_domain_errors_map_to_status(request_, handler, exc, status):
    response = await handler(request_, exc)
    assert response.status_code == status
    assert body(response) == {"success": False, "error": exc.message}


@pytest.mark.asyncio
async def test_request_validation_names_field_but_not_value(request_):
    exc = RequestValidationError(
        [{"loc": ("body", "password"), "msg": "String should have at least 8 characters", "input": "hunter2"}]
    )
    response = await request_validation_error_handler(request_, exc)
    assert response.status_code == 400
    assert "password" in body(response)["error"]
    assert "hunter2" not in body(response)["error"]


@pytest.mark.asyncio
async def test_unclassified_errors_are_opaque_500s(request_):
    response = await unhandled_exception_handler(request_, RuntimeError("db password is hunter2"))
    assert response.status_code == 500
    assert body(response) == {"success": False, "error": "Internal server error"}

    response = await authcore_error_handler(request_, AuthCoreError("internal detail"))
    assert response.status_code == 500
    assert body(response) == {"success": False, "error": "Internal server error"}
