"""SQLAlchemy-backed credential store for the ``accounts`` table."""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from authcore.models.account import Account
from authcore.repositories.base import DuplicateAccountError, StoreError
from authcore.schemas.account import AccountRecord, Role

logger = logging.getLogger(__name__)


class SqlAlchemyCredentialStore:
    """
    Credential store over one SQLAlchemy session.

    Each write commits on its own, so a finished call is durable and a failed
    call leaves the session rolled back and reusable.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_email(self, email: str) -> AccountRecord | None:
        try:
            account = self.session.execute(
                select(Account).where(Account.email == email)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreError("Account lookup by email failed", cause=e) from e
        return AccountRecord.model_validate(account) if account is not None else None

    def find_by_id(self, account_id: int) -> AccountRecord | None:
        try:
            account = self.session.get(Account, account_id)
        except SQLAlchemyError as e:
            raise StoreError("Account lookup by id failed", cause=e) from e
        return AccountRecord.model_validate(account) if account is not None else None

    def create(self, email: str, password_hash: str, role: Role = Role.USER) -> AccountRecord:
        account = Account(email=email, password_hash=password_hash, role=Role(role).value)
        try:
            self.session.add(account)
            self.session.commit()
            self.session.refresh(account)
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateAccountError("Email already registered", cause=e) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError("Account create failed", cause=e) from e
        return AccountRecord.model_validate(account)

    def update_refresh_hash(self, account_id: int, refresh_hash: str | None) -> None:
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(refresh_token_hash=refresh_hash)
            .execution_options(synchronize_session=False)
        )
        self._execute_write(stmt, "Refresh hash update failed")

    def compare_and_set_refresh_hash(
        self, account_id: int, expected: str, new: str | None
    ) -> bool:
        # Single conditional UPDATE: of two concurrent rotations only one matches a row.
        stmt = (
            update(Account)
            .where(Account.id == account_id, Account.refresh_token_hash == expected)
            .values(refresh_token_hash=new)
            .execution_options(synchronize_session=False)
        )
        return self._execute_write(stmt, "Refresh hash rotation failed") == 1

    def _execute_write(self, stmt, message: str) -> int:
        try:
            result = self.session.execute(stmt)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(message, cause=e) from e
        # Drop stale identity-map copies so later reads see the new value.
        self.session.expire_all()
        return result.rowcount
