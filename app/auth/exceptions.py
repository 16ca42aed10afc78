"""Auth domain exceptions.

Credential, token and session failures. Messages are stable: clients and
tests match on them.
"""

from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
)


# Authentication errors (401)
class InvalidCredentialsError(AuthenticationError):
    """Raised when email/password combination is invalid."""

    error_type = "invalid_credentials"

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class AccessTokenRequiredError(AuthenticationError):
    """Raised when a protected route is called without a bearer token."""

    error_type = "access_token_required"

    def __init__(self, message: str = "Access token is required"):
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    """Raised when a token fails verification or names no account."""

    error_type = "invalid_token"

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class TokenInvalidError(InvalidTokenError):
    """Raised by the token issuer on signature or claim mismatch."""

    error_type = "token_invalid"

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class TokenExpiredError(InvalidTokenError):
    """Raised by the token issuer when a token's expiry has passed."""

    error_type = "token_expired"

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message)


# Authorization errors (403)
class AccountNotActiveError(AuthorizationError):
    """Raised when the authenticated account is inactive or blocked."""

    error_type = "account_not_active"

    def __init__(self, message: str = "Your account is not active"):
        super().__init__(message)


class PermissionDeniedError(AuthorizationError):
    """Raised when the account's role is not allowed on a route."""

    error_type = "permission_denied"

    def __init__(
        self, message: str = "You don't have permission to perform this action"
    ):
        super().__init__(message)


# Not found errors (404)
class TokenNotFoundError(NotFoundError):
    """Raised when a refresh token is no longer outstanding (revoked)."""

    error_type = "token_not_found"

    def __init__(self, message: str = "Token not found"):
        super().__init__(message)
