import inspect
import os
from collections.abc import Callable
from datetime import timedelta

# Settings are read at import time by app.db.engine; give tests a complete env.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret-0123456789abcdef")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret-0123456789abcdef")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_REQUESTS", "false")

import anyio  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402, F401
from app.auth import service as auth_service  # noqa: E402
from app.auth.tokens import TokenIssuer, get_token_issuer  # noqa: E402
from app.core.security import hash_password  # noqa: E402
from app.db.engine import get_session  # noqa: E402
from app.main import app  # noqa: E402
from app.uploads.storage import UploadStorage, get_upload_storage  # noqa: E402
from app.user.models import Account, AccountRole, AccountStatus  # noqa: E402
from tests.helpers import PASSWORD  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    # Tests use @pytest.mark.asyncio, but we intentionally rely on anyio.
    config.addinivalue_line(
        "markers",
        "asyncio: run async tests using anyio (project-local hook)",
    )


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Run @pytest.mark.asyncio tests with anyio.

    This avoids adding an external pytest-asyncio dependency.
    """
    if pyfuncitem.get_closest_marker("asyncio") is None:
        return None

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    funcargs = {
        name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
    }

    async def _run_async_test() -> None:
        await test_func(**funcargs)

    anyio.run(_run_async_test)
    return True


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="issuer")
def issuer_fixture() -> TokenIssuer:
    return TokenIssuer(
        access_secret="access-secret-for-tests-0123456789",
        refresh_secret="refresh-secret-for-tests-0123456789",
        access_expires_in=timedelta(minutes=15),
        refresh_expires_in=timedelta(days=7),
    )


@pytest.fixture(name="storage")
def storage_fixture(tmp_path) -> UploadStorage:
    storage = UploadStorage(tmp_path / "uploads", "/uploads")
    storage.ensure_directories()
    return storage


@pytest.fixture(name="make_account")
def make_account_fixture(session: Session) -> Callable[..., Account]:
    def _make(
        email: str = "alice@example.com",
        *,
        password: str = PASSWORD,
        role: AccountRole = AccountRole.user,
        status: AccountStatus = AccountStatus.active,
        first_name: str = "Alice",
        last_name: str = "Smith",
    ) -> Account:
        account = Account(
            email=email,
            password_hash=hash_password(password, rounds=4),
            role=role,
            status=status,
            first_name=first_name,
            last_name=last_name,
        )
        session.add(account)
        session.commit()
        session.refresh(account)
        return account

    return _make


@pytest.fixture(name="test_account")
def test_account_fixture(make_account) -> Account:
    return make_account()


@pytest.fixture(name="admin_account")
def admin_account_fixture(make_account) -> Account:
    return make_account(
        "admin@example.com", role=AccountRole.admin, first_name="Ada", last_name="Admin"
    )


@pytest.fixture(name="inactive_account")
def inactive_account_fixture(make_account) -> Account:
    return make_account(
        "inactive@example.com",
        status=AccountStatus.inactive,
        first_name="Ivan",
        last_name="Inactive",
    )


@pytest.fixture(name="login")
def login_fixture(session: Session, issuer: TokenIssuer) -> Callable[..., dict[str, str]]:
    """Sign an account in and return its Authorization header."""

    def _login(account: Account, password: str = PASSWORD) -> dict[str, str]:
        result = auth_service.login(
            session, issuer, email=account.email, password=password
        )
        return {"Authorization": f"Bearer {result.tokens.access_token}"}

    return _login


@pytest.fixture(name="client")
def client_fixture(session: Session, issuer: TokenIssuer, storage: UploadStorage):
    """Create a test client with overridden dependencies."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_token_issuer] = lambda: issuer
    app.dependency_overrides[get_upload_storage] = lambda: storage

    client = TestClient(app, raise_server_exceptions=False)
    yield client

    app.dependency_overrides.clear()
