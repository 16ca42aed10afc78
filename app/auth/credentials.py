"""Credential store operations.

Outstanding refresh tokens are rows keyed by account id. Adding one is an
insert, revoking one or all of them is a delete, so concurrent logins and
logouts on the same account never overwrite each other's changes.
"""

import uuid

from sqlalchemy import delete
from sqlmodel import Session, select

from app.user.models import Account, RefreshTokenRecord


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_account_by_email(session: Session, email: str) -> Account | None:
    return session.exec(
        select(Account).where(Account.email == normalize_email(email))
    ).first()


def add_refresh_token(
    session: Session, account_id: uuid.UUID, token: str
) -> RefreshTokenRecord:
    """Stage a new outstanding refresh token (caller commits)."""
    record = RefreshTokenRecord(account_id=account_id, token=token)
    session.add(record)
    return record


def has_refresh_token(session: Session, account_id: uuid.UUID, token: str) -> bool:
    record = session.exec(
        select(RefreshTokenRecord.id).where(
            RefreshTokenRecord.account_id == account_id,
            RefreshTokenRecord.token == token,
        )
    ).first()
    return record is not None


def revoke_refresh_token(session: Session, account_id: uuid.UUID, token: str) -> int:
    """Remove one token from the account's set. Absent tokens are a no-op."""
    result = session.exec(
        delete(RefreshTokenRecord).where(
            RefreshTokenRecord.account_id == account_id,
            RefreshTokenRecord.token == token,
        )
    )
    return result.rowcount


def revoke_all_refresh_tokens(session: Session, account_id: uuid.UUID) -> int:
    """Remove every outstanding token for the account."""
    result = session.exec(
        delete(RefreshTokenRecord).where(RefreshTokenRecord.account_id == account_id)
    )
    return result.rowcount
