"""
Unit tests for exception-to-response translation.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from useraccounts.api.errors import register_exception_handlers, status_for
from useraccounts.domain.exceptions import (
    AccessForbidden,
    AccountError,
    EmailAlreadyRegistered,
    InvalidActivationLink,
    InvalidAddress,
    InvalidPassword,
    NotAuthenticated,
    ResourceNotFound,
    UserNotFound,
)


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (EmailAlreadyRegistered("a@b.c"), 400),
        (UserNotFound(), 400),
        (InvalidPassword(), 400),
        (InvalidActivationLink(), 400),
        (InvalidAddress("Unknown country"), 400),
        (NotAuthenticated(), 401),
        (AccessForbidden(), 403),
        (ResourceNotFound("Address not found"), 404),
    ],
)
def test_status_mapping(exc: AccountError, expected: int) -> None:
    assert status_for(exc) == expected


@pytest.fixture
def failing_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/invalid-address")
    async def invalid_address() -> None:
        raise InvalidAddress("Invalid postal code", ["postalCode: expected format 99999 for Finland"])

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("database exploded")

    return app


def test_domain_error_body(failing_app: FastAPI) -> None:
    response = TestClient(failing_app).get("/invalid-address")

    assert response.status_code == 400
    assert response.json() == {
        "message": "Invalid postal code",
        "errors": ["postalCode: expected format 99999 for Finland"],
    }


def test_unknown_route_uses_error_body(failing_app: FastAPI) -> None:
    response = TestClient(failing_app).get("/nowhere")

    assert response.status_code == 404
    assert response.json() == {"message": "Not Found", "errors": []}


def test_unexpected_error_is_generic(failing_app: FastAPI) -> None:
    client = TestClient(failing_app, raise_server_exceptions=False)

    response = client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {"message": "Unexpected error", "errors": []}
    assert "exploded" not in response.text
