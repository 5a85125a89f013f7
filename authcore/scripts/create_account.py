"""
Create an account (e.g. the first admin). Run from project root:
  python -m authcore.scripts.create_account EMAIL PASSWORD [role]
Example:
  python -m authcore.scripts.create_account admin@example.com your-secure-password ADMIN

This is the only path that can create an ADMIN; registration always yields USER.
"""
import argparse
import sys

from authcore.core.config import get_settings
from authcore.core.database import build_engine, build_session_factory
from authcore.core.security import BCRYPT_MAX_BYTES, PasswordHasher
from authcore.repositories.accounts import SqlAlchemyCredentialStore
from authcore.repositories.base import CredentialStore, DuplicateAccountError
from authcore.schemas.account import Role
from authcore.services.session import normalize_email


def create_account(
    store: CredentialStore, hasher: PasswordHasher, email: str, password: str, role: Role
) -> int:
    """Create the account; return a process exit code."""
    email = normalize_email(email)
    if not email or len(email) > 254:
        print("Invalid email length.", file=sys.stderr)
        return 1
    if len(password) < 8 or len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        print(f"Password must be 8 characters to {BCRYPT_MAX_BYTES} bytes.", file=sys.stderr)
        return 1
    if store.find_by_email(email) is not None:
        print(f"Account '{email}' already exists.", file=sys.stderr)
        return 1
    try:
        account = store.create(email, hasher.hash(password), role)
    except DuplicateAccountError:
        print(f"Account '{email}' already exists.", file=sys.stderr)
        return 1
    print(f"Created account '{account.email}' (id={account.id}) with role '{account.role.value}'.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an account (bypasses public registration).")
    parser.add_argument("email", help="Login email")
    parser.add_argument("password", help="Password (8 chars to 72 bytes)")
    parser.add_argument(
        "role", nargs="?", default=Role.USER.value, choices=[r.value for r in Role]
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    factory = build_session_factory(build_engine(settings.DATABASE_URL))
    db = factory()
    try:
        return create_account(
            SqlAlchemyCredentialStore(db),
            PasswordHasher.from_settings(settings),
            args.email,
            args.password,
            Role(args.role),
        )
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
