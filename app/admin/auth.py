import uuid
from collections.abc import Callable

from sqladmin.authentication import AuthenticationBackend
from sqlmodel import Session
from starlette.requests import Request

from app.auth.credentials import get_account_by_email
from app.core.security import verify_password
from app.core.settings import get_settings
from app.db.engine import engine
from app.user.models import Account, AccountRole

SESSION_KEY = "admin_account_id"


def _is_admin(account: Account | None) -> bool:
    return (
        account is not None and account.is_active and account.role == AccountRole.admin
    )


class AdminAuth(AuthenticationBackend):
    """SQLAdmin auth backed by active ``admin`` accounts."""

    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        # SQLAdmin uses this secret internally (e.g. login form protection).
        # It must be stable and should match the session middleware secret.
        settings = get_settings()
        super().__init__(secret_key=settings.session_secret_key)
        self.session_factory = session_factory or (lambda: Session(engine))

    async def login(self, request: Request) -> bool:
        form = await request.form()
        email = str(form.get("username", form.get("email", "")))
        password = str(form.get("password", ""))

        with self.session_factory() as session:
            account = get_account_by_email(session, email)
            ok = _is_admin(account) and verify_password(
                password, account.password_hash
            )
            if ok:
                request.session[SESSION_KEY] = str(account.id)
        return ok

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        """Admit the session only while its account is still an active admin."""
        raw_id = request.session.get(SESSION_KEY)
        if not raw_id:
            return False
        try:
            account_id = uuid.UUID(str(raw_id))
        except ValueError:
            return False
        with self.session_factory() as session:
            return _is_admin(session.get(Account, account_id))
