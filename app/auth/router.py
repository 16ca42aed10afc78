"""Auth domain router.

Registration, login, token refresh, logout and password change. Handlers are
thin; the work happens in app.auth.service.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.auth import service
from app.auth.dependencies import AuthContextDep, CurrentAccountDep
from app.auth.schemas import (
    AuthMessage,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
)
from app.auth.tokens import TokenIssuer, get_token_issuer
from app.core.constants import CommonResponses, Routes
from app.core.deps import SessionDep, SettingsDep
from app.user.schemas import AccountPublicRead

TokenIssuerDep = Annotated[TokenIssuer, Depends(get_token_issuer)]

router = APIRouter(
    prefix=Routes.AUTH.prefix,
    tags=[Routes.AUTH.tag],
    responses={**CommonResponses.BAD_REQUEST},
)


@router.post(
    "/register",
    response_model=AccountPublicRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.CONFLICT},
)
async def register(payload: RegisterRequest, session: SessionDep):
    """Register a new account.

    Email format is validated by Pydantic's EmailStr before this code runs.
    """
    account = service.register(
        session,
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=payload.phone,
    )
    return AccountPublicRead.model_validate(account)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={**CommonResponses.UNAUTHORIZED},
)
async def login(payload: LoginRequest, session: SessionDep, issuer: TokenIssuerDep):
    """Login with email/password.

    Every login opens a separate session (refresh token), so one account can
    be signed in on several devices at once.
    """
    result = service.login(
        session, issuer, email=payload.email, password=payload.password
    )
    return LoginResponse(
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
        account=AccountPublicRead.model_validate(result.account),
    )


@router.post(
    "/access-token",
    response_model=TokenResponse,
    responses={**CommonResponses.UNAUTHORIZED, **CommonResponses.NOT_FOUND},
)
async def refresh_access_token(
    payload: RefreshRequest,
    session: SessionDep,
    issuer: TokenIssuerDep,
    settings: SettingsDep,
):
    """Exchange an outstanding refresh token for a new access token."""
    tokens = service.refresh_access_token(
        session,
        issuer,
        payload.refresh_token,
        rotate=settings.refresh_token_rotation,
    )
    return TokenResponse(
        access_token=tokens.access_token, refresh_token=tokens.refresh_token
    )


@router.post(
    "/logout",
    response_model=AuthMessage,
    responses={**CommonResponses.UNAUTHORIZED},
)
async def logout(
    context: AuthContextDep,
    session: SessionDep,
    payload: LogoutRequest | None = None,
):
    """End a session of the current account.

    Defaults to the session the request is authenticated with. A token that
    is already gone is not an error.
    """
    refresh_token = context.refresh_token
    if payload is not None and payload.refresh_token:
        refresh_token = payload.refresh_token
    service.logout(session, context.account.id, refresh_token)
    return AuthMessage(message="Logout successful")


@router.post(
    "/change-password",
    response_model=AuthMessage,
    responses={**CommonResponses.UNAUTHORIZED},
)
async def change_password(
    payload: ChangePasswordRequest,
    account: CurrentAccountDep,
    session: SessionDep,
):
    """Change the password and sign the account out everywhere."""
    service.change_password(
        session,
        account,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return AuthMessage(message="Password changed successfully")


@router.get(
    "/me",
    response_model=AccountPublicRead,
    responses={**CommonResponses.UNAUTHORIZED, **CommonResponses.FORBIDDEN},
)
async def get_me(account: CurrentAccountDep):
    """Get the current authenticated account."""
    return AccountPublicRead.model_validate(account)
