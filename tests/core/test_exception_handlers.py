"""Tests for app/core/exception_handlers.py - unified error envelope."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from app.core.exception_handlers import register_exception_handlers
from app.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    ConflictError,
    NotFoundError,
)


class Item(BaseModel):
    name: str


@pytest.fixture(name="error_client")
def error_client_fixture():
    test_app = FastAPI()
    register_exception_handlers(test_app)

    @test_app.get("/raise/{kind}")
    async def raise_error(kind: str):
        errors = {
            "bad": BadRequestError("Nope"),
            "auth": AuthenticationError(),
            "forbidden": AuthorizationError(),
            "missing": NotFoundError("Thing not found"),
            "conflict": ConflictError(),
            "internal": AppException(),
        }
        raise errors[kind]

    @test_app.get("/crash")
    async def crash():
        raise RuntimeError("boom")

    @test_app.post("/items")
    async def create_item(item: Item):
        return item

    return TestClient(test_app, raise_server_exceptions=False)


@pytest.mark.parametrize(
    ("kind", "status_code", "error_type"),
    [
        ("bad", 400, "bad_request"),
        ("auth", 401, "authentication_error"),
        ("forbidden", 403, "authorization_error"),
        ("missing", 404, "not_found"),
        ("conflict", 409, "conflict"),
        ("internal", 500, "internal_error"),
    ],
)
def test_app_exceptions_map_to_family_status(error_client, kind, status_code, error_type):
    response = error_client.get(f"/raise/{kind}")

    assert response.status_code == status_code
    assert response.json()["type"] == error_type


def test_message_is_passed_through(error_client):
    response = error_client.get("/raise/missing")

    assert response.json() == {"type": "not_found", "message": "Thing not found"}


def test_unhandled_exception_hides_details(error_client):
    response = error_client.get("/crash")

    assert response.status_code == 500
    assert response.json() == {
        "type": "internal_error",
        "message": "An unexpected error occurred",
    }


def test_validation_error_envelope(error_client):
    response = error_client.post("/items", json={})

    assert response.status_code == 422
    body = response.json()
    assert body["type"] == "validation_error"
    assert body["message"].startswith("name: ")


def test_unknown_route(error_client):
    response = error_client.get("/nowhere")

    assert response.status_code == 404
    assert response.json()["type"] == "http_error"
