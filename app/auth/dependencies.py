"""Auth domain dependencies.

The session verifier (``get_auth_context``) and the role gate
(``require_roles``) as composable FastAPI dependencies, plus the type
aliases routes use to receive the authenticated account.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from app.auth.credentials import has_refresh_token
from app.auth.exceptions import (
    AccessTokenRequiredError,
    AccountNotActiveError,
    InvalidTokenError,
    PermissionDeniedError,
    TokenNotFoundError,
)
from app.auth.tokens import TokenIssuer, get_token_issuer
from app.db.engine import get_session
from app.user.models import Account, AccountRole

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Result of a successful verification."""

    account: Account
    refresh_token: str


def get_auth_context(
    request: Request,
    session: Annotated[Session, Depends(get_session)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(security)
    ] = None,
) -> AuthContext:
    """Verify the bearer access token and the session behind it.

    Checks run in a fixed order and the first failure wins:
    1. a bearer token is present
    2. both signatures and expiries hold (access + embedded refresh token)
    3. the account exists
    4. the account is active
    5. the refresh token is still outstanding for the account

    Step 5 is what makes logout and password change take effect at once,
    even for access tokens whose own expiry has not passed.

    Raises:
        AccessTokenRequiredError: no bearer token (401)
        InvalidTokenError: bad/expired token or unknown account (401)
        AccountNotActiveError: account is inactive or blocked (403)
        TokenNotFoundError: session was revoked (404)
    """
    if credentials is None or not credentials.credentials:
        raise AccessTokenRequiredError()

    try:
        claims = issuer.verify_access(credentials.credentials)
    except InvalidTokenError as e:
        raise InvalidTokenError() from e

    account = session.get(Account, claims.account_id)
    if account is None:
        raise InvalidTokenError("Invalid token user not found")

    if not account.is_active:
        raise AccountNotActiveError()

    if not has_refresh_token(session, account.id, claims.refresh_token):
        raise TokenNotFoundError()

    request.state.account_id = account.id
    request.state.refresh_token = claims.refresh_token
    return AuthContext(account=account, refresh_token=claims.refresh_token)


AuthContextDep = Annotated[AuthContext, Depends(get_auth_context)]


def get_current_account(context: AuthContextDep) -> Account:
    return context.account


CurrentAccountDep = Annotated[Account, Depends(get_current_account)]


def require_auth(_context: AuthContextDep) -> None:
    """Require a verified session without injecting it into the path operation.

    Use as a router-level dependency when all routes require auth:
        router = APIRouter(dependencies=[Depends(require_auth)])
    """


def authorize(account: Account, roles: frozenset[AccountRole]) -> None:
    """Raise PermissionDeniedError unless the account's role is allowed."""
    if account.role not in roles:
        raise PermissionDeniedError()


def require_roles(*roles: AccountRole) -> Callable[[Account], Account]:
    """Build a dependency admitting only accounts with one of ``roles``.

    Usage:
        router = APIRouter(dependencies=[Depends(require_roles(AccountRole.admin))])
    """
    allowed = frozenset(roles)

    def dependency(account: CurrentAccountDep) -> Account:
        authorize(account, allowed)
        return account

    return dependency


require_admin = require_roles(AccountRole.admin)
AdminAccountDep = Annotated[Account, Depends(require_admin)]
