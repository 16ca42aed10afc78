"""Credential and session lifecycle.

Plain functions over a SQLModel ``Session``: registration, login, access
token refresh, logout and password change. Routers stay thin and call these.
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.auth.credentials import (
    add_refresh_token,
    get_account_by_email,
    has_refresh_token,
    normalize_email,
    revoke_all_refresh_tokens,
    revoke_refresh_token,
)
from app.auth.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    TokenNotFoundError,
)
from app.auth.tokens import TokenIssuer
from app.core.security import hash_password, verify_password
from app.user.exceptions import EmailExistsError
from app.user.models import Account, AccountStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class LoginResult:
    account: Account
    tokens: TokenPair


def register(
    session: Session,
    *,
    email: str,
    password: str,
    first_name: str = "",
    last_name: str = "",
    phone: str | None = None,
) -> Account:
    """Create an active account with a hashed password.

    Raises:
        EmailExistsError: the (normalized) email is taken
    """
    email = normalize_email(email)
    if get_account_by_email(session, email) is not None:
        raise EmailExistsError()

    account = Account(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        status=AccountStatus.active,
    )
    session.add(account)
    try:
        session.commit()
    except IntegrityError as e:
        # A concurrent registration took the email after the lookup above.
        session.rollback()
        raise EmailExistsError() from e
    session.refresh(account)
    logger.info("Account registered", extra={"account_id": str(account.id)})
    return account


def login(
    session: Session, issuer: TokenIssuer, *, email: str, password: str
) -> LoginResult:
    """Check credentials and open a new session for the account.

    Each login adds its own refresh-token row, so sessions on several devices
    coexist. Status is not checked here; an inactive account can sign in but
    the session verifier rejects every protected request it makes.

    Raises:
        InvalidCredentialsError: unknown email or wrong password
    """
    account = get_account_by_email(session, email)
    if account is None or not verify_password(password, account.password_hash):
        raise InvalidCredentialsError()

    refresh_token = issuer.issue_refresh(account.id)
    add_refresh_token(session, account.id, refresh_token)
    session.commit()
    session.refresh(account)

    access_token = issuer.issue_access(account.id, refresh_token)
    logger.info("Account logged in", extra={"account_id": str(account.id)})
    return LoginResult(
        account=account,
        tokens=TokenPair(access_token=access_token, refresh_token=refresh_token),
    )


def refresh_access_token(
    session: Session,
    issuer: TokenIssuer,
    refresh_token: str,
    *,
    rotate: bool = False,
) -> TokenPair:
    """Issue a new access token for an outstanding refresh token.

    Without ``rotate`` the new access token is bound to the same refresh
    token. With ``rotate`` the presented token is replaced by a fresh one in
    the same commit, and the old one stops working.

    Raises:
        InvalidTokenError: the refresh token is invalid/expired or its account is gone
        TokenNotFoundError: the refresh token was revoked
    """
    claims = issuer.verify_refresh(refresh_token)

    account = session.get(Account, claims.account_id)
    if account is None:
        raise InvalidTokenError("Invalid token user not found")
    if not has_refresh_token(session, account.id, refresh_token):
        raise TokenNotFoundError()

    if rotate:
        revoke_refresh_token(session, account.id, refresh_token)
        refresh_token = issuer.issue_refresh(account.id)
        add_refresh_token(session, account.id, refresh_token)
        session.commit()

    return TokenPair(
        access_token=issuer.issue_access(account.id, refresh_token),
        refresh_token=refresh_token,
    )


def logout(session: Session, account_id: uuid.UUID, refresh_token: str) -> None:
    """End one session. Logging out an already-ended session is a no-op."""
    removed = revoke_refresh_token(session, account_id, refresh_token)
    session.commit()
    if removed:
        logger.info("Account logged out", extra={"account_id": str(account_id)})


def change_password(
    session: Session,
    account: Account,
    *,
    current_password: str,
    new_password: str,
) -> int:
    """Replace the password hash and end every session of the account.

    Returns the number of sessions ended.

    Raises:
        InvalidCredentialsError: ``current_password`` does not match
    """
    if not verify_password(current_password, account.password_hash):
        raise InvalidCredentialsError("Current password is incorrect")

    account.password_hash = hash_password(new_password)
    session.add(account)
    revoked = revoke_all_refresh_tokens(session, account.id)
    session.commit()
    session.refresh(account)
    logger.info(
        "Password changed, %d session(s) revoked",
        revoked,
        extra={"account_id": str(account.id)},
    )
    return revoked
