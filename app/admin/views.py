import uuid
from typing import Any

import anyio.to_thread
from sqladmin import ModelView
from sqlmodel import Session
from starlette.requests import Request

from app.core.settings import get_settings
from app.db.engine import engine
from app.uploads.storage import UploadStorage
from app.user import service
from app.user.models import Account


class AccountAdmin(ModelView, model=Account):
    name = "Account"
    name_plural = "Accounts"
    icon = "fa-solid fa-user"

    column_list = [
        Account.email,
        Account.first_name,
        Account.last_name,
        Account.role,
        Account.status,
        Account.id,
        Account.created_at,
        Account.updated_at,
    ]

    column_searchable_list = [
        Account.email,
        Account.first_name,
        Account.last_name,
    ]

    column_sortable_list = [
        Account.email,
        Account.role,
        Account.status,
        Account.created_at,
        Account.updated_at,
    ]

    # Hashes and sessions are managed by the auth endpoints only.
    column_details_exclude_list = [Account.password_hash, Account.refresh_tokens]
    # Email and files change only through the API, which normalizes the email
    # and keeps the profile image reference pointing at a stored file.
    form_excluded_columns = [
        Account.email,
        Account.password_hash,
        Account.refresh_tokens,
        Account.documents,
        Account.profile_image_name,
        Account.profile_image_url,
        Account.profile_image_size,
        Account.profile_image_mime_type,
        Account.created_at,
        Account.updated_at,
    ]
    can_create = False

    def open_session(self) -> Session:
        return Session(engine)

    def upload_storage(self) -> UploadStorage:
        settings = get_settings()
        return UploadStorage(settings.upload_dir, settings.upload_url_prefix)

    async def delete_model(self, request: Request, pk: Any) -> None:
        """Delete through the account lifecycle so the account's files go too."""
        await anyio.to_thread.run_sync(self._delete_account, pk)

    def _delete_account(self, pk: Any) -> None:
        with self.open_session() as session:
            account = session.get(Account, uuid.UUID(str(pk)))
            if account is None:
                return
            service.delete_account(session, self.upload_storage(), account)
