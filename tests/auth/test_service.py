"""Tests for app/auth/service.py - credential and session lifecycle."""

import pytest
from sqlmodel import Session, select

from app.auth import service
from app.auth.credentials import has_refresh_token
from app.auth.dependencies import get_auth_context
from app.auth.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    TokenNotFoundError,
)
from app.core.security import verify_password
from app.user.exceptions import EmailExistsError
from app.user.models import Account, AccountStatus, RefreshTokenRecord
from tests.helpers import PASSWORD, bearer, make_request


def tokens_of(session, account_id) -> set[str]:
    rows = session.exec(
        select(RefreshTokenRecord).where(RefreshTokenRecord.account_id == account_id)
    ).all()
    return {row.token for row in rows}


class TestRegister:
    def test_creates_active_account_with_hashed_password(self, session):
        account = service.register(
            session,
            email="  Alice@Example.COM ",
            password=PASSWORD,
            first_name="Alice",
            last_name="Smith",
        )

        assert account.email == "alice@example.com"
        assert account.status == AccountStatus.active
        assert account.password_hash != PASSWORD
        assert verify_password(PASSWORD, account.password_hash)

    def test_duplicate_email_is_conflict(self, session, test_account):
        with pytest.raises(EmailExistsError) as exc_info:
            service.register(session, email="ALICE@example.com", password=PASSWORD)

        assert exc_info.value.status_code == 409

    def test_email_taken_between_lookup_and_insert_is_conflict(
        self, session, engine, monkeypatch
    ):
        def lose_the_race(_session, email):
            with Session(engine) as other:
                other.add(Account(email=email, password_hash="x"))
                other.commit()
            return None

        monkeypatch.setattr(service, "get_account_by_email", lose_the_race)

        with pytest.raises(EmailExistsError):
            service.register(session, email="race@example.com", password=PASSWORD)

        accounts = session.exec(select(Account)).all()
        assert [a.email for a in accounts] == ["race@example.com"]
        assert accounts[0].password_hash == "x"


class TestLogin:
    def test_login_adds_a_session(self, session, issuer, test_account):
        result = service.login(
            session, issuer, email="alice@example.com", password=PASSWORD
        )

        assert result.account.id == test_account.id
        assert tokens_of(session, test_account.id) == {result.tokens.refresh_token}
        claims = issuer.verify_access(result.tokens.access_token)
        assert claims.refresh_token == result.tokens.refresh_token

    def test_email_lookup_is_case_insensitive(self, session, issuer, test_account):
        result = service.login(
            session, issuer, email="ALICE@EXAMPLE.COM", password=PASSWORD
        )

        assert result.account.id == test_account.id

    def test_wrong_password(self, session, issuer, test_account):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            service.login(session, issuer, email=test_account.email, password="nope")

        assert exc_info.value.message == "Invalid email or password"
        assert tokens_of(session, test_account.id) == set()

    def test_unknown_email(self, session, issuer):
        with pytest.raises(InvalidCredentialsError):
            service.login(session, issuer, email="nobody@example.com", password=PASSWORD)

    def test_two_logins_keep_both_sessions_alive(self, session, issuer, test_account):
        first = service.login(session, issuer, email=test_account.email, password=PASSWORD)
        second = service.login(
            session, issuer, email=test_account.email, password=PASSWORD
        )

        assert first.tokens.refresh_token != second.tokens.refresh_token
        assert tokens_of(session, test_account.id) == {
            first.tokens.refresh_token,
            second.tokens.refresh_token,
        }
        for tokens in (first.tokens, second.tokens):
            context = get_auth_context(
                make_request(), session, issuer, bearer(tokens.access_token)
            )
            assert context.account.id == test_account.id


class TestRefresh:
    def test_reissues_access_token_for_same_session(self, session, issuer, test_account):
        login = service.login(session, issuer, email=test_account.email, password=PASSWORD)

        pair = service.refresh_access_token(session, issuer, login.tokens.refresh_token)

        assert pair.refresh_token == login.tokens.refresh_token
        claims = issuer.verify_access(pair.access_token)
        assert claims.refresh_token == login.tokens.refresh_token
        assert tokens_of(session, test_account.id) == {login.tokens.refresh_token}

    def test_rotation_replaces_the_session(self, session, issuer, test_account):
        login = service.login(session, issuer, email=test_account.email, password=PASSWORD)

        pair = service.refresh_access_token(
            session, issuer, login.tokens.refresh_token, rotate=True
        )

        assert pair.refresh_token != login.tokens.refresh_token
        assert tokens_of(session, test_account.id) == {pair.refresh_token}
        with pytest.raises(TokenNotFoundError):
            service.refresh_access_token(session, issuer, login.tokens.refresh_token)

    def test_revoked_refresh_token(self, session, issuer, test_account):
        login = service.login(session, issuer, email=test_account.email, password=PASSWORD)
        service.logout(session, test_account.id, login.tokens.refresh_token)

        with pytest.raises(TokenNotFoundError):
            service.refresh_access_token(session, issuer, login.tokens.refresh_token)

    def test_invalid_refresh_token(self, session, issuer):
        with pytest.raises(InvalidTokenError):
            service.refresh_access_token(session, issuer, "garbage")

    def test_access_token_is_not_a_refresh_token(self, session, issuer, test_account):
        login = service.login(session, issuer, email=test_account.email, password=PASSWORD)

        with pytest.raises(InvalidTokenError):
            service.refresh_access_token(session, issuer, login.tokens.access_token)


class TestLogout:
    def test_removes_only_the_presented_session(self, session, issuer, test_account):
        first = service.login(session, issuer, email=test_account.email, password=PASSWORD)
        second = service.login(
            session, issuer, email=test_account.email, password=PASSWORD
        )

        service.logout(session, test_account.id, first.tokens.refresh_token)

        assert tokens_of(session, test_account.id) == {second.tokens.refresh_token}

    def test_is_idempotent(self, session, issuer, test_account):
        login = service.login(session, issuer, email=test_account.email, password=PASSWORD)

        service.logout(session, test_account.id, login.tokens.refresh_token)
        service.logout(session, test_account.id, login.tokens.refresh_token)
        service.logout(session, test_account.id, "never-issued")

        assert not has_refresh_token(
            session, test_account.id, login.tokens.refresh_token
        )

    def test_cannot_end_another_accounts_session(
        self, session, issuer, test_account, admin_account
    ):
        other = service.login(
            session, issuer, email=admin_account.email, password=PASSWORD
        )

        service.logout(session, test_account.id, other.tokens.refresh_token)

        assert has_refresh_token(session, admin_account.id, other.tokens.refresh_token)

    def test_scenario_logout_revokes_access_token(self, session, issuer):
        service.register(session, email="alice@example.com", password=PASSWORD)
        login = service.login(
            session, issuer, email="alice@example.com", password=PASSWORD
        )
        access = login.tokens.access_token

        service.logout(session, login.account.id, login.tokens.refresh_token)

        with pytest.raises(TokenNotFoundError) as exc_info:
            get_auth_context(make_request(), session, issuer, bearer(access))
        assert exc_info.value.message == "Token not found"


class TestChangePassword:
    def test_replaces_hash_and_ends_every_session(self, session, issuer, test_account):
        logins = [
            service.login(session, issuer, email=test_account.email, password=PASSWORD)
            for _ in range(3)
        ]

        revoked = service.change_password(
            session,
            test_account,
            current_password=PASSWORD,
            new_password="N3wPassword",
        )

        assert revoked == 3
        assert tokens_of(session, test_account.id) == set()
        assert verify_password("N3wPassword", test_account.password_hash)
        for login in logins:
            with pytest.raises(TokenNotFoundError):
                get_auth_context(
                    make_request(), session, issuer, bearer(login.tokens.access_token)
                )

    def test_new_password_works_old_does_not(self, session, issuer, test_account):
        service.change_password(
            session,
            test_account,
            current_password=PASSWORD,
            new_password="N3wPassword",
        )

        service.login(session, issuer, email=test_account.email, password="N3wPassword")
        with pytest.raises(InvalidCredentialsError):
            service.login(session, issuer, email=test_account.email, password=PASSWORD)

    def test_wrong_current_password_changes_nothing(
        self, session, issuer, test_account
    ):
        login = service.login(session, issuer, email=test_account.email, password=PASSWORD)

        with pytest.raises(InvalidCredentialsError) as exc_info:
            service.change_password(
                session,
                test_account,
                current_password="wrong",
                new_password="N3wPassword",
            )

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Current password is incorrect"
        assert tokens_of(session, test_account.id) == {login.tokens.refresh_token}
        assert verify_password(PASSWORD, test_account.password_hash)
