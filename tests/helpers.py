"""Shared test helpers."""

from types import SimpleNamespace
from unittest.mock import MagicMock

from fastapi.security import HTTPAuthorizationCredentials

PASSWORD = "Passw0rdOK"


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def make_request():
    """A stand-in request with a real ``state`` namespace."""
    request = MagicMock()
    request.state = SimpleNamespace()
    return request
