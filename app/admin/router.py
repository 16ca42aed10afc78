"""Admin domain router.

Account control for the ``admin`` role: listing, lookup, deletion and
status changes.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import require_admin
from app.core.constants import CommonResponses, Routes
from app.core.deps import SessionDep, StorageDep
from app.user import service
from app.user.models import AccountRole, AccountStatus
from app.user.schemas import AccountList, AccountPublicRead, Pagination, StatusUpdate

router = APIRouter(
    prefix=Routes.ADMIN.prefix,
    tags=[Routes.ADMIN.tag],
    dependencies=[Depends(require_admin)],
    responses={
        **CommonResponses.UNAUTHORIZED,
        **CommonResponses.FORBIDDEN,
    },
)


@router.get("/users", response_model=AccountList)
async def list_users(
    session: SessionDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    status: AccountStatus | None = None,
    role: AccountRole | None = None,
    search: Annotated[str | None, Query(max_length=100)] = None,
):
    """List accounts, newest first, with optional filters."""
    result = service.list_accounts(
        session, page=page, limit=limit, status=status, role=role, search=search
    )
    return AccountList(
        users=[AccountPublicRead.model_validate(a) for a in result.accounts],
        pagination=Pagination(
            page=result.page,
            limit=result.limit,
            total=result.total,
            total_pages=result.total_pages,
        ),
    )


@router.get(
    "/users/{account_id}",
    response_model=AccountPublicRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def get_user(account_id: uuid.UUID, session: SessionDep):
    account = service.get_account(session, account_id)
    return AccountPublicRead.model_validate(account)


@router.delete(
    "/users/{account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**CommonResponses.NOT_FOUND},
)
def delete_user(account_id: uuid.UUID, session: SessionDep, storage: StorageDep):
    """Delete an account with its files, like self-deletion."""
    account = service.get_account(session, account_id)
    service.delete_account(session, storage, account)


@router.patch(
    "/users/{account_id}/status",
    response_model=AccountPublicRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def update_user_status(
    account_id: uuid.UUID, payload: StatusUpdate, session: SessionDep
):
    """Set an account's status (active, inactive or blocked)."""
    account = service.change_status(session, account_id, payload.status)
    return AccountPublicRead.model_validate(account)
