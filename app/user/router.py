"""User domain router.

Self-service routes for the authenticated account: profile, profile image,
documents and account deletion.

Routes that delete files are plain ``def``: deletion can retry with a
blocking sleep, so FastAPI runs them in its threadpool.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.auth.dependencies import CurrentAccountDep, require_auth
from app.core.constants import CommonResponses, Routes
from app.core.deps import SessionDep, StorageDep
from app.core.exceptions import BadRequestError
from app.uploads.pipeline import UploadBatch, upload_fields
from app.uploads.policies import FileType, UploadField
from app.user import service
from app.user.schemas import AccountPublicRead, AccountUpdateMe, DocumentDeleteRequest

PROFILE_IMAGE_FIELD = UploadField("profileImage", max_count=1, file_type=FileType.IMAGE)
DOCUMENTS_FIELD = UploadField("documents", max_count=5, file_type=FileType.DOCUMENT)

ProfileImageUpload = Annotated[UploadBatch, Depends(upload_fields(PROFILE_IMAGE_FIELD))]
DocumentsUpload = Annotated[UploadBatch, Depends(upload_fields(DOCUMENTS_FIELD))]

router = APIRouter(
    prefix=Routes.USER.prefix,
    tags=[Routes.USER.tag],
    dependencies=[Depends(require_auth)],
    responses={
        **CommonResponses.UNAUTHORIZED,
        **CommonResponses.FORBIDDEN,
    },
)


@router.get("/profile", response_model=AccountPublicRead)
async def get_profile(account: CurrentAccountDep):
    return AccountPublicRead.model_validate(account)


@router.patch("/me", response_model=AccountPublicRead)
async def update_me(
    account: CurrentAccountDep, payload: AccountUpdateMe, session: SessionDep
):
    """Update the current account's profile.

    Only first_name, last_name and phone can change here; email, password,
    role and status cannot.
    """
    account = service.update_profile(
        session, account, payload.model_dump(exclude_unset=True)
    )
    return AccountPublicRead.model_validate(account)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_me(account: CurrentAccountDep, session: SessionDep, storage: StorageDep):
    """Delete the current account and its files."""
    service.delete_account(session, storage, account)


@router.post(
    "/profile-image",
    response_model=AccountPublicRead,
    responses={**CommonResponses.BAD_REQUEST},
)
def upload_profile_image(
    account: CurrentAccountDep,
    batch: ProfileImageUpload,
    session: SessionDep,
    storage: StorageDep,
):
    """Upload (or replace) the profile image. Multipart field: ``profileImage``."""
    uploaded = batch.first(PROFILE_IMAGE_FIELD.name)
    if uploaded is None:
        raise BadRequestError("No file uploaded")
    account = service.set_profile_image(session, storage, account, uploaded)
    return AccountPublicRead.model_validate(account)


@router.delete(
    "/profile-image",
    response_model=AccountPublicRead,
    responses={**CommonResponses.NOT_FOUND},
)
def delete_profile_image(
    account: CurrentAccountDep, session: SessionDep, storage: StorageDep
):
    account = service.remove_profile_image(session, storage, account)
    return AccountPublicRead.model_validate(account)


@router.post(
    "/documents",
    response_model=AccountPublicRead,
    responses={**CommonResponses.BAD_REQUEST},
)
def upload_documents(
    account: CurrentAccountDep,
    batch: DocumentsUpload,
    session: SessionDep,
    storage: StorageDep,
):
    """Append up to five documents. Multipart field: ``documents``."""
    uploaded = batch.get(DOCUMENTS_FIELD.name)
    if not uploaded:
        raise BadRequestError("No file uploaded")
    account = service.attach_documents(session, storage, account, uploaded)
    return AccountPublicRead.model_validate(account)


@router.delete(
    "/documents",
    response_model=AccountPublicRead,
    responses={**CommonResponses.NOT_FOUND},
)
def delete_documents(
    payload: DocumentDeleteRequest,
    account: CurrentAccountDep,
    session: SessionDep,
    storage: StorageDep,
):
    """Remove documents by id. One unknown id fails the whole request."""
    account = service.detach_documents(session, storage, account, payload.ids)
    return AccountPublicRead.model_validate(account)
