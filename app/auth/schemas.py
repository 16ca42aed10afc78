"""Auth domain schemas.

Request and response schemas for authentication operations.
"""

import re

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.user.schemas import AccountPublicRead, TrimmedStr


def check_password_strength(value: str) -> str:
    """Require at least one lowercase letter, one uppercase letter and one digit."""
    if not (
        re.search(r"[a-z]", value)
        and re.search(r"[A-Z]", value)
        and re.search(r"\d", value)
    ):
        raise ValueError(
            "Password must contain at least one lowercase letter, "
            "one uppercase letter, and one digit"
        )
    return value


class RegisterRequest(BaseModel):
    """Request schema for account registration."""

    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    first_name: TrimmedStr = Field(min_length=2, max_length=50)
    last_name: TrimmedStr = Field(min_length=2, max_length=50)
    phone: TrimmedStr | None = Field(
        default=None, min_length=10, max_length=30, pattern=r"^\+?[\d\s\-()]+$"
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return check_password_strength(value)


class LoginRequest(BaseModel):
    """Request schema for email/password login."""

    email: EmailStr
    password: str = Field(min_length=1)


class RefreshRequest(BaseModel):
    """Request schema for exchanging a refresh token for an access token."""

    refresh_token: str = Field(min_length=1)


class LogoutRequest(BaseModel):
    """Request schema for logout.

    Without ``refresh_token`` the session behind the presented access token
    is ended.
    """

    refresh_token: str | None = None


class ChangePasswordRequest(BaseModel):
    """Request schema for changing the current account's password."""

    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8, max_length=128)

    @field_validator("new_password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return check_password_strength(value)


class TokenResponse(BaseModel):
    """Response schema for login and token refresh."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(TokenResponse):
    """Response schema for login: tokens plus the signed-in account."""

    account: AccountPublicRead


class AuthMessage(BaseModel):
    """Generic auth message response."""

    message: str
