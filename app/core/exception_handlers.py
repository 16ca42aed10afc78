"""Global exception handlers for consistent error responses.

Every failure leaves the service as ``{"type": ..., "message": ...}`` with
the status code of its exception family.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppException

logger = logging.getLogger("app.exception")


class ErrorResponse(BaseModel):
    """The error envelope, as documented in OpenAPI.

    ``type`` is the stable error kind (e.g. ``token_not_found``),
    ``message`` the human-readable explanation.
    """

    type: str
    message: str


def _envelope(error_type: str, message: str) -> dict[str, str]:
    return ErrorResponse(type=error_type, message=message).model_dump()


def _request_extra(request: Request) -> dict[str, object]:
    extra: dict[str, object] = {
        "method": request.method,
        "path": request.url.path,
    }
    account_id = getattr(request.state, "account_id", None)
    if account_id is not None:
        extra["account_id"] = str(account_id)
    return extra


def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle all AppException subclasses."""
    extra = {
        **_request_extra(request),
        "status_code": exc.status_code,
        "error_type": exc.error_type,
    }
    if exc.status_code >= 500:
        logger.error("AppException: %s - %s", exc.error_type, exc.message, extra=extra)
    else:
        logger.info("AppException: %s - %s", exc.error_type, exc.message, extra=extra)
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(exc.error_type, exc.message),
    )


def http_exception_handler(
    _request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle framework-level HTTPException (unknown route, wrong method)."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope("http_error", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def _format_validation_error(error: dict) -> str:
    field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
    return f"{field}: {error['msg']}" if field else error["msg"]


def validation_exception_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with unified format."""
    message = "; ".join(_format_validation_error(error) for error in exc.errors())
    return JSONResponse(
        status_code=422,
        content=_envelope("validation_error", message),
    )


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected errors."""
    logger.error(
        "Unhandled exception: %s %s - %s",
        request.method,
        request.url.path,
        exc,
        extra={**_request_extra(request), "status_code": 500},
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content=_envelope("internal_error", "An unexpected error occurred"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
