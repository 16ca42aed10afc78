"""App-wide exception hierarchy.

Every failure the service reports belongs to exactly one family below. Each
family fixes the HTTP status code; domain modules subclass a family and give
it a stable ``error_type`` so clients can branch on it.
"""


class AppException(Exception):
    """Base exception for all application errors.

    All custom exceptions inherit from this class and define their own
    status_code and error_type for consistent API responses.
    """

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(message)


# Bad request (400)
class BadRequestError(AppException):
    """Malformed, oversized or misclassified input. Client-fixable."""

    status_code = 400
    error_type = "bad_request"

    def __init__(self, message: str = "Bad request"):
        super().__init__(message)


# Authentication errors (401)
class AuthenticationError(AppException):
    """Missing, invalid or expired credential."""

    status_code = 401
    error_type = "authentication_error"

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


# Authorization errors (403)
class AuthorizationError(AppException):
    """Valid credential, but insufficient privilege or inactive account."""

    status_code = 403
    error_type = "authorization_error"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


# Not found errors (404)
class NotFoundError(AppException):
    """Base class for resource not found errors."""

    status_code = 404
    error_type = "not_found"

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


# Conflict errors (409)
class ConflictError(AppException):
    """Base class for uniqueness violations."""

    status_code = 409
    error_type = "conflict"

    def __init__(self, message: str = "Resource conflict"):
        super().__init__(message)


# Internal errors (500)
class InternalError(AppException):
    """Raised for misconfiguration or unexpected failures."""

    status_code = 500
    error_type = "internal_error"

    def __init__(self, message: str = "An internal error occurred"):
        super().__init__(message)
