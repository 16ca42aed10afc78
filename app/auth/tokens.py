"""Token issuer: signed access and refresh tokens (PyJWT).

A refresh token is a JWT signed with the refresh secret. An access token is
a JWT signed with the access secret that carries the refresh token string
inside it, so verifying one access token recovers both the account and the
session (refresh token) it belongs to.

Nothing here touches storage; persisting the refresh token is the caller's
job.
"""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Annotated, Any

import jwt
from fastapi import Depends

from app.auth.exceptions import TokenExpiredError, TokenInvalidError
from app.core.settings import Settings, get_settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True)
class AccessClaims:
    """Decoded access token."""

    account_id: uuid.UUID
    refresh_token: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class RefreshClaims:
    """Decoded refresh token."""

    account_id: uuid.UUID
    token_id: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TokenIssuer:
    """Mints and verifies the two token kinds.

    Each kind has its own secret and lifetime. Verification raises
    TokenExpiredError when the expiry has passed and TokenInvalidError for
    any other problem (bad signature, wrong kind, missing claims).
    """

    access_secret: str
    refresh_secret: str
    access_expires_in: timedelta
    refresh_expires_in: timedelta
    algorithm: str = "HS256"

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            access_secret=settings.access_token_secret,
            refresh_secret=settings.refresh_token_secret,
            access_expires_in=settings.access_token_expires_in,
            refresh_expires_in=settings.refresh_token_expires_in,
            algorithm=settings.jwt_algorithm,
        )

    def issue_refresh(self, account_id: uuid.UUID) -> str:
        """Mint a refresh token. ``jti`` keeps tokens from one second apart."""
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(account_id),
            "type": REFRESH_TOKEN_TYPE,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + self.refresh_expires_in,
        }
        return jwt.encode(payload, self.refresh_secret, algorithm=self.algorithm)

    def issue_access(self, account_id: uuid.UUID, refresh_token: str) -> str:
        """Mint an access token bound to ``refresh_token``."""
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(account_id),
            "type": ACCESS_TOKEN_TYPE,
            "rt": refresh_token,
            "iat": now,
            "exp": now + self.access_expires_in,
        }
        return jwt.encode(payload, self.access_secret, algorithm=self.algorithm)

    def verify_refresh(self, token: str) -> RefreshClaims:
        payload = self._decode(token, self.refresh_secret, REFRESH_TOKEN_TYPE)
        token_id = payload.get("jti")
        if not isinstance(token_id, str):
            raise TokenInvalidError()
        return RefreshClaims(
            account_id=_account_id(payload),
            token_id=token_id,
            issued_at=_timestamp(payload, "iat"),
            expires_at=_timestamp(payload, "exp"),
        )

    def verify_access(self, token: str) -> AccessClaims:
        """Verify the access token and the refresh token embedded in it.

        Both signatures and both expiries are checked; either failing fails
        the whole verification.
        """
        payload = self._decode(token, self.access_secret, ACCESS_TOKEN_TYPE)
        refresh_token = payload.get("rt")
        if not isinstance(refresh_token, str):
            raise TokenInvalidError()

        account_id = _account_id(payload)
        refresh = self.verify_refresh(refresh_token)
        if refresh.account_id != account_id:
            raise TokenInvalidError()

        return AccessClaims(
            account_id=account_id,
            refresh_token=refresh_token,
            issued_at=_timestamp(payload, "iat"),
            expires_at=_timestamp(payload, "exp"),
        )

    def _decode(self, token: str, secret: str, token_type: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except jwt.PyJWTError as e:
            raise TokenInvalidError() from e

        if payload.get("type") != token_type:
            raise TokenInvalidError()
        return payload


def _account_id(payload: dict[str, Any]) -> uuid.UUID:
    try:
        return uuid.UUID(str(payload["sub"]))
    except (KeyError, ValueError) as e:
        raise TokenInvalidError() from e


def _timestamp(payload: dict[str, Any], claim: str) -> datetime:
    return datetime.fromtimestamp(int(payload[claim]), tz=UTC)


def get_token_issuer(
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenIssuer:
    """Dependency: token issuer configured from settings."""
    return TokenIssuer.from_settings(settings)
