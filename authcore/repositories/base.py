"""Credential store contract consumed by the session service.

Any persistence backend can serve the auth core as long as it implements
:class:`CredentialStore`. Backends report their own failures as
:class:`StoreError`; the session service turns those into opaque internal errors.
"""

from typing import Protocol

from authcore.schemas.account import AccountRecord, Role


class StoreError(Exception):
    """Raised when the backing store cannot complete an operation."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class DuplicateAccountError(StoreError):
    """Raised by ``create`` when the email is already taken (unique constraint)."""


class CredentialStore(Protocol):
    def find_by_email(self, email: str) -> AccountRecord | None: ...

    def find_by_id(self, account_id: int) -> AccountRecord | None: ...

    def create(self, email: str, password_hash: str, role: Role = Role.USER) -> AccountRecord: ...

    def update_refresh_hash(self, account_id: int, refresh_hash: str | None) -> None:
        """Overwrite the stored refresh hash (None clears it). No error if the account is missing."""
        ...

    def compare_and_set_refresh_hash(
        self, account_id: int, expected: str, new: str | None
    ) -> bool:
        """Atomically replace expected with new; return False if the stored value changed."""
        ...
