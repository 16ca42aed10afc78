"""Account domain models.

SQLModel table definitions for accounts, their documents and their
outstanding refresh-token records.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import EmailStr
from sqlmodel import Field, Relationship, SQLModel

from app.core.mixins import TimestampMixin, utc_now


class AccountStatus(str, Enum):
    """Account status. Set freely by admins."""

    active = "active"
    inactive = "inactive"
    blocked = "blocked"


class AccountRole(str, Enum):
    """Opaque role labels consumed by the authorize gate."""

    user = "user"
    manager = "manager"
    admin = "admin"


@dataclass(frozen=True)
class ProfileImage:
    """Reference to the account's profile image file."""

    name: str
    url: str
    size: int
    mime_type: str


class Account(TimestampMixin, SQLModel, table=True):
    """Account database model.

    The profile image is stored inline (at most one per account); documents
    and refresh tokens are owned child rows that are removed with the account.
    """

    __tablename__: str = "accounts"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    email: EmailStr = Field(index=True, unique=True, max_length=255)
    password_hash: str = Field(max_length=255)
    first_name: str = Field(default="", max_length=50)
    last_name: str = Field(default="", max_length=50)
    phone: str | None = Field(default=None, max_length=30)
    role: AccountRole = Field(default=AccountRole.user, max_length=20)
    status: AccountStatus = Field(default=AccountStatus.active, max_length=20)

    profile_image_name: str | None = Field(default=None, max_length=255)
    profile_image_url: str | None = Field(default=None, max_length=512)
    profile_image_size: int | None = Field(default=None)
    profile_image_mime_type: str | None = Field(default=None, max_length=255)

    documents: list["AccountDocument"] = Relationship(
        back_populates="account",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "AccountDocument.position",
        },
    )
    refresh_tokens: list["RefreshTokenRecord"] = Relationship(
        back_populates="account",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.active

    @property
    def profile_image(self) -> ProfileImage | None:
        if self.profile_image_url is None:
            return None
        return ProfileImage(
            name=self.profile_image_name or "",
            url=self.profile_image_url,
            size=self.profile_image_size or 0,
            mime_type=self.profile_image_mime_type or "",
        )

    def set_profile_image(self, image: ProfileImage | None) -> None:
        self.profile_image_name = image.name if image else None
        self.profile_image_url = image.url if image else None
        self.profile_image_size = image.size if image else None
        self.profile_image_mime_type = image.mime_type if image else None


class AccountDocument(SQLModel, table=True):
    """A document file attached to an account."""

    __tablename__: str = "account_documents"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    account_id: uuid.UUID = Field(
        foreign_key="accounts.id", index=True, ondelete="CASCADE"
    )
    position: int = Field(default=0)
    name: str = Field(max_length=255)
    url: str = Field(max_length=512)
    size: int
    mime_type: str = Field(max_length=255)
    uploaded_at: datetime = Field(default_factory=utc_now)

    account: Account | None = Relationship(back_populates="documents")


class RefreshTokenRecord(SQLModel, table=True):
    """One outstanding refresh token (one per signed-in device).

    Presence of the row is what keeps every access token derived from the
    token alive; deleting it revokes them immediately.
    """

    __tablename__: str = "refresh_tokens"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    account_id: uuid.UUID = Field(
        foreign_key="accounts.id", index=True, ondelete="CASCADE"
    )
    token: str = Field(index=True, unique=True)
    issued_at: datetime = Field(default_factory=utc_now)

    account: Account | None = Relationship(back_populates="refresh_tokens")
