"""Account domain schemas.

Request and response schemas for account operations.

Security notes:
- password_hash and refresh tokens never appear in any response schema
- AccountUpdateMe is restricted to profile fields to prevent privilege escalation
"""

import uuid
from datetime import UTC, datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_serializer

from app.user.models import AccountRole, AccountStatus

# Inputs are whitespace-trimmed before validation.
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]


def _serialize_utc(value: datetime) -> str:
    """Format datetime as ISO 8601 string in UTC (e.g. 2026-01-19T12:34:56Z)."""
    if value.tzinfo is not None:
        utc_value = value.astimezone(UTC)
    else:
        # Naive datetime - assume it's already UTC (from TimestampMixin)
        utc_value = value.replace(tzinfo=UTC)
    return utc_value.replace(microsecond=0).isoformat().replace("+00:00", "Z")


class ProfileImageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    url: str
    size: int
    mime_type: str


class DocumentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    url: str
    size: int
    mime_type: str
    uploaded_at: datetime

    @field_serializer("uploaded_at")
    def serialize_datetime(self, value: datetime) -> str:
        return _serialize_utc(value)


class AccountPublicRead(BaseModel):
    """Response schema for the account's own data."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    phone: str | None
    role: AccountRole
    status: AccountStatus
    profile_image: ProfileImageRead | None
    documents: list[DocumentRead]
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def serialize_datetime(self, value: datetime) -> str:
        return _serialize_utc(value)


class AccountUpdateMe(BaseModel):
    """Schema for accounts updating their own profile.

    Cannot touch email, password, role or status.
    """

    first_name: TrimmedStr | None = Field(default=None, min_length=2, max_length=50)
    last_name: TrimmedStr | None = Field(default=None, min_length=2, max_length=50)
    phone: TrimmedStr | None = Field(
        default=None, min_length=10, max_length=30, pattern=r"^\+?[\d\s\-()]+$"
    )


class StatusUpdate(BaseModel):
    """Schema for an admin setting an account's status."""

    status: AccountStatus


class DocumentDeleteRequest(BaseModel):
    """Schema for detaching documents. All ids must belong to the account."""

    ids: list[uuid.UUID] = Field(min_length=1)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class AccountList(BaseModel):
    """Paginated account listing for admins."""

    users: list[AccountPublicRead]
    pagination: Pagination
