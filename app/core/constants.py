"""
App-wide constants for route configuration.

This module provides a single source of truth for route prefixes, tags,
and common response definitions for API routes.
"""

from dataclasses import dataclass
from typing import Any

from app.core.exception_handlers import ErrorResponse


@dataclass(frozen=True)
class RouteConfig:
    """Configuration for a route group."""

    prefix: str
    tag: str


class Routes:
    """Route configurations for all API endpoints."""

    AUTH = RouteConfig(prefix="/auth", tag="auth")
    USER = RouteConfig(prefix="/users", tag="users")
    ADMIN = RouteConfig(prefix="/admin", tag="admin")
    HEALTH = RouteConfig(prefix="/health", tag="health")


def _error(description: str) -> dict[str, Any]:
    return {"model": ErrorResponse, "description": description}


# Common response definitions for reuse across routers
# Use these when configuring APIRouter or individual endpoints
class CommonResponses:
    """Standard HTTP error response definitions for OpenAPI documentation."""

    BAD_REQUEST: dict[int, dict[str, Any]] = {
        400: _error("Invalid request data or rejected upload")
    }
    UNAUTHORIZED: dict[int, dict[str, Any]] = {
        401: _error("Missing, invalid or expired credentials")
    }
    FORBIDDEN: dict[int, dict[str, Any]] = {
        403: _error("Account is not active or lacks permissions")
    }
    NOT_FOUND: dict[int, dict[str, Any]] = {404: _error("Resource not found")}
    CONFLICT: dict[int, dict[str, Any]] = {409: _error("Resource already exists")}
