"""Tests for app/admin/views.py - SQLAdmin account view."""

from unittest.mock import MagicMock

import pytest
from sqlmodel import Session, select

from app.admin.views import AccountAdmin
from app.uploads.pipeline import UploadedFile
from app.uploads.storage import UploadStorage
from app.user import service
from app.user.models import Account, AccountDocument


def stored(storage: UploadStorage, subdir: str, name: str, mime_type: str):
    path = (storage.root / subdir / name).resolve()
    path.write_bytes(b"data")
    return UploadedFile(
        field_name=subdir,
        path=path,
        url=storage.url_for(path),
        original_name=name,
        size=4,
        mime_type=mime_type,
    )


@pytest.fixture
def view(engine, storage: UploadStorage, monkeypatch) -> AccountAdmin:
    account_view = AccountAdmin()
    monkeypatch.setattr(account_view, "open_session", lambda: Session(engine))
    monkeypatch.setattr(account_view, "upload_storage", lambda: storage)
    return account_view


def test_form_hides_email_and_file_references(view: AccountAdmin):
    columns = set(view.get_form_columns())

    assert "email" not in columns
    assert not {c for c in columns if c.startswith("profile_image")}
    assert {"password_hash", "refresh_tokens", "documents"}.isdisjoint(columns)
    assert {"first_name", "last_name", "role", "status"} <= columns


@pytest.mark.asyncio
async def test_delete_removes_account_files(
    view: AccountAdmin, session: Session, storage: UploadStorage, test_account
):
    image = stored(storage, "profiles", "pic.png", "image/png")
    document = stored(storage, "documents", "cv.pdf", "application/pdf")
    service.set_profile_image(session, storage, test_account, image)
    service.attach_documents(session, storage, test_account, [document])
    account_id = test_account.id

    await view.delete_model(MagicMock(), str(account_id))

    session.expire_all()
    assert session.exec(select(Account).where(Account.id == account_id)).first() is None
    assert session.exec(select(AccountDocument)).all() == []
    assert not image.path.exists()
    assert not document.path.exists()


@pytest.mark.asyncio
async def test_delete_unknown_account_is_a_no_op(view: AccountAdmin, test_account):
    await view.delete_model(MagicMock(), "0b9f6f0e-8f8e-4a53-9a8e-7d1f2a3b4c5d")
