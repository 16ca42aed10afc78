"""
Create an admin account, or promote an existing one. Run from project root:
  python -m scripts.create_admin EMAIL PASSWORD
Example:
  python -m scripts.create_admin admin@example.com 'Str0ngPassword'
"""
import argparse
import sys

from sqlmodel import Session

from app.auth.credentials import get_account_by_email, normalize_email
from app.auth.schemas import check_password_strength
from app.core.security import hash_password
from app.db.engine import create_db_and_tables, engine
from app.user.models import Account, AccountRole, AccountStatus


def create_admin(session: Session, email: str, password: str) -> tuple[Account, str]:
    """Create an active admin, or promote and reactivate an existing account.

    The password of an existing account is left unchanged.
    Returns the account and one of "created", "promoted", "already_admin".
    """
    existing = get_account_by_email(session, email)
    if existing is not None:
        if existing.role == AccountRole.admin and existing.is_active:
            return existing, "already_admin"
        existing.role = AccountRole.admin
        existing.status = AccountStatus.active
        session.add(existing)
        session.commit()
        session.refresh(existing)
        return existing, "promoted"

    account = Account(
        email=normalize_email(email),
        password_hash=hash_password(password),
        role=AccountRole.admin,
        status=AccountStatus.active,
    )
    session.add(account)
    session.commit()
    session.refresh(account)
    return account, "created"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create or promote an admin account.")
    parser.add_argument("email", help="Account email")
    parser.add_argument("password", help="Password (8-128 chars, mixed case and a digit)")
    args = parser.parse_args(argv)

    email = normalize_email(args.email)
    if not email or "@" not in email:
        print("Invalid email.", file=sys.stderr)
        return 1
    if len(args.password) < 8 or len(args.password) > 128:
        print("Password must be 8-128 characters.", file=sys.stderr)
        return 1
    try:
        check_password_strength(args.password)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1

    create_db_and_tables()
    with Session(engine) as session:
        account, outcome = create_admin(session, email, args.password)
    print(f"Admin '{email}' {outcome.replace('_', ' ')} (id: {account.id}).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
