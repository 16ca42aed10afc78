"""Account lifecycle operations.

Profile data, admin status control, profile image and document attachment,
and account deletion. Files and records are kept consistent in one
direction: the record is committed first, then replaced or removed files are
deleted best-effort. A failed deletion leaves an orphaned file on disk but
never a record pointing at a missing file.
"""

import logging
import math
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from app.uploads.pipeline import UploadedFile
from app.uploads.storage import UploadStorage
from app.user.exceptions import (
    AccountNotFoundError,
    DocumentNotFoundError,
    ProfileImageNotFoundError,
)
from app.user.models import (
    Account,
    AccountDocument,
    AccountRole,
    AccountStatus,
    ProfileImage,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountPage:
    accounts: list[Account]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def get_account(session: Session, account_id: uuid.UUID) -> Account:
    account = session.get(Account, account_id)
    if account is None:
        raise AccountNotFoundError()
    return account


def update_profile(
    session: Session, account: Account, changes: dict[str, Any]
) -> Account:
    for key, value in changes.items():
        setattr(account, key, value)
    session.add(account)
    session.commit()
    session.refresh(account)
    return account


def list_accounts(
    session: Session,
    *,
    page: int = 1,
    limit: int = 10,
    status: AccountStatus | None = None,
    role: AccountRole | None = None,
    search: str | None = None,
) -> AccountPage:
    """Page through accounts, newest first.

    ``search`` matches first name, last name or email, case-insensitively.
    """
    conditions = []
    if status is not None:
        conditions.append(col(Account.status) == status)
    if role is not None:
        conditions.append(col(Account.role) == role)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        conditions.append(
            or_(
                col(Account.first_name).ilike(pattern),
                col(Account.last_name).ilike(pattern),
                col(Account.email).ilike(pattern),
            )
        )

    total = session.exec(
        select(func.count()).select_from(Account).where(*conditions)
    ).one()
    accounts = session.exec(
        select(Account)
        .where(*conditions)
        .order_by(col(Account.created_at).desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    return AccountPage(accounts=list(accounts), page=page, limit=limit, total=total)


def change_status(
    session: Session, account_id: uuid.UUID, status: AccountStatus
) -> Account:
    """Set an account's status. Any status may follow any other."""
    account = get_account(session, account_id)
    account.status = status
    session.add(account)
    session.commit()
    session.refresh(account)
    logger.info(
        "Account status set to %s", status.value, extra={"account_id": str(account.id)}
    )
    return account


def set_profile_image(
    session: Session,
    storage: UploadStorage,
    account: Account,
    uploaded: UploadedFile,
) -> Account:
    """Attach a new profile image, then delete the one it replaces.

    If the record cannot be saved the new file is deleted and the old image
    stays attached.
    """
    previous = account.profile_image
    account.set_profile_image(
        ProfileImage(
            name=uploaded.original_name,
            url=uploaded.url,
            size=uploaded.size,
            mime_type=uploaded.mime_type,
        )
    )
    session.add(account)
    _commit_or_discard(session, storage, [uploaded])
    session.refresh(account)

    if previous is not None:
        storage.delete_url(previous.url)
    return account


def remove_profile_image(
    session: Session, storage: UploadStorage, account: Account
) -> Account:
    """Detach and delete the profile image.

    Raises:
        ProfileImageNotFoundError: no image is attached
    """
    previous = account.profile_image
    if previous is None:
        raise ProfileImageNotFoundError()

    account.set_profile_image(None)
    session.add(account)
    session.commit()
    session.refresh(account)
    storage.delete_url(previous.url)
    return account


def attach_documents(
    session: Session,
    storage: UploadStorage,
    account: Account,
    uploaded: Sequence[UploadedFile],
) -> Account:
    """Append documents after the existing ones; nothing is replaced."""
    start = len(account.documents)
    for offset, file in enumerate(uploaded):
        account.documents.append(
            AccountDocument(
                account_id=account.id,
                position=start + offset,
                name=file.original_name,
                url=file.url,
                size=file.size,
                mime_type=file.mime_type,
            )
        )
    session.add(account)
    _commit_or_discard(session, storage, uploaded)
    session.refresh(account)
    return account


def detach_documents(
    session: Session,
    storage: UploadStorage,
    account: Account,
    document_ids: Iterable[uuid.UUID],
) -> Account:
    """Remove documents by id and delete their files.

    All ids are checked before anything changes: one unknown id fails the
    whole call and no record or file is touched.

    Raises:
        DocumentNotFoundError: an id is not one of the account's documents
    """
    owned = {doc.id: doc for doc in account.documents}
    wanted = list(dict.fromkeys(document_ids))
    if any(doc_id not in owned for doc_id in wanted):
        raise DocumentNotFoundError()

    removed = [owned[doc_id] for doc_id in wanted]
    urls = [doc.url for doc in removed]
    for doc in removed:
        account.documents.remove(doc)
    session.add(account)
    session.commit()
    session.refresh(account)

    for url in urls:
        storage.delete_url(url)
    return account


def delete_account(session: Session, storage: UploadStorage, account: Account) -> None:
    """Delete the account with its documents and sessions, then its files.

    File deletion is best-effort and each file is attempted independently.
    """
    urls = [doc.url for doc in account.documents]
    if account.profile_image_url:
        urls.insert(0, account.profile_image_url)
    account_id = str(account.id)

    session.delete(account)
    session.commit()

    failed = sum(1 for url in urls if not storage.delete_url(url))
    logger.info(
        "Account deleted with %d file(s), %d not removed",
        len(urls),
        failed,
        extra={"account_id": account_id},
    )


def _commit_or_discard(
    session: Session, storage: UploadStorage, uploaded: Iterable[UploadedFile]
) -> None:
    try:
        session.commit()
    except BaseException:
        session.rollback()
        for file in uploaded:
            storage.delete(file.path)
        raise
