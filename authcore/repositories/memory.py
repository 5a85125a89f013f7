"""In-process credential store for local runs and tests."""

import threading
from datetime import UTC, datetime

from authcore.repositories.base import DuplicateAccountError
from authcore.schemas.account import AccountRecord, Role


class InMemoryCredentialStore:
    """Dict-backed credential store; a lock makes each operation atomic."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._accounts: dict[int, AccountRecord] = {}
        self._next_id = 1

    def find_by_email(self, email: str) -> AccountRecord | None:
        with self._lock:
            for account in self._accounts.values():
                if account.email == email:
                    return account
        return None

    def find_by_id(self, account_id: int) -> AccountRecord | None:
        with self._lock:
            return self._accounts.get(account_id)

    def create(self, email: str, password_hash: str, role: Role = Role.USER) -> AccountRecord:
        with self._lock:
            if any(a.email == email for a in self._accounts.values()):
                raise DuplicateAccountError("Email already registered")
            now = datetime.now(UTC)
            account = AccountRecord(
                id=self._next_id,
                email=email,
                password_hash=password_hash,
                role=Role(role),
                refresh_token_hash=None,
                created_at=now,
                updated_at=now,
            )
            self._accounts[account.id] = account
            self._next_id += 1
            return account

    def update_refresh_hash(self, account_id: int, refresh_hash: str | None) -> None:
        with self._lock:
            self._set_refresh_hash(account_id, refresh_hash)

    def compare_and_set_refresh_hash(
        self, account_id: int, expected: str, new: str | None
    ) -> bool:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None or account.refresh_token_hash != expected:
                return False
            self._set_refresh_hash(account_id, new)
            return True

    def _set_refresh_hash(self, account_id: int, refresh_hash: str | None) -> None:
        account = self._accounts.get(account_id)
        if account is None:
            return
        self._accounts[account_id] = account.model_copy(
            update={"refresh_token_hash": refresh_hash, "updated_at": datetime.now(UTC)}
        )
