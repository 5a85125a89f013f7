"""Session service: register, login, refresh-token rotation and logout."""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import NoReturn

from authcore.core.errors import (
    AuthenticationError,
    ConflictError,
    InternalError,
    TokenVerificationError,
    ValidationError,
)
from authcore.core.logging import log_event, new_correlation_id
from authcore.core.security import PasswordHasher
from authcore.core.tokens import TokenIssuer, TokenKind
from authcore.repositories.base import CredentialStore, DuplicateAccountError, StoreError
from authcore.schemas.account import AccountPublic, AccountRecord, Role
from authcore.schemas.auth import TokenPair

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_REFRESH_TOKEN = "Invalid refresh token"


def normalize_email(email: str) -> str:
    """Login keys are case-insensitive: stored and looked up trimmed and lower-cased."""
    return (email or "").strip().lower()


def hash_refresh_token(token: str) -> str:
    """SHA-256 hex digest of a refresh token (tokens are random enough that no salt is needed)."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SessionService:
    """
    Orchestrates the session lifecycle over a credential store.

    States: Anonymous -> Authenticated -> (Refreshed)* -> LoggedOut. The only
    persisted session state is the account's refresh-token hash: login overwrites
    it, refresh rotates it, logout clears it.
    """

    def __init__(
        self,
        *,
        store: CredentialStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.issuer = issuer

    def register(self, email: str, password: str) -> AccountPublic:
        """
        Create an account with role USER and no active session.

        Raises ValidationError for an empty email or password, ConflictError if the
        email is taken.
        """
        cid = new_correlation_id()
        email = normalize_email(email)
        if not email:
            log_event(logger, logging.INFO, "register rejected: empty email", correlation_id=cid)
            raise ValidationError("Email must not be empty")
        if not password:
            log_event(logger, logging.INFO, "register rejected: empty password", correlation_id=cid)
            raise ValidationError("Password must not be empty")

        if self._store_call(cid, "find_by_email", self.store.find_by_email, email) is not None:
            log_event(logger, logging.INFO, "register rejected: email exists", correlation_id=cid)
            raise ConflictError()

        password_hash = self.hasher.hash(password)
        try:
            account = self._store_call(
                cid, "create", self.store.create, email, password_hash, Role.USER
            )
        except ConflictError:
            log_event(logger, logging.INFO, "register rejected: email exists", correlation_id=cid)
            raise
        log_event(
            logger, logging.INFO, "account registered", correlation_id=cid, account_id=account.id
        )
        return _public(account)

    def login(self, email: str, password: str) -> TokenPair:
        """
        Verify credentials and start a new session, invalidating any previous one.

        Unknown email and wrong password raise the same AuthenticationError.
        """
        cid = new_correlation_id()
        account = self._store_call(
            cid, "find_by_email", self.store.find_by_email, normalize_email(email)
        )
        if account is None:
            self.hasher.verify(password, self.hasher.dummy_hash)
            log_event(logger, logging.WARNING, "login failed: invalid credentials", correlation_id=cid)
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not self.hasher.verify(password, account.password_hash):
            log_event(
                logger,
                logging.WARNING,
                "login failed: invalid credentials",
                correlation_id=cid,
                account_id=account.id,
            )
            raise AuthenticationError(INVALID_CREDENTIALS)

        tokens = self._issue_pair(cid, account)
        self._store_call(
            cid,
            "update_refresh_hash",
            self.store.update_refresh_hash,
            account.id,
            hash_refresh_token(tokens.refresh_token),
        )
        log_event(logger, logging.INFO, "login succeeded", correlation_id=cid, account_id=account.id)
        return tokens

    def refresh(self, account_id: int, refresh_token: str) -> TokenPair:
        """
        Exchange a refresh token for a new pair; the presented token stops working.

        Raises AuthenticationError when the account has no session, the token does
        not verify, belongs to another account, is not the current one, or lost a
        race against a concurrent refresh/logout.
        """
        cid = new_correlation_id()
        account = self._store_call(cid, "find_by_id", self.store.find_by_id, account_id)
        if account is None or not account.refresh_token_hash:
            self._refresh_denied(cid, account_id, "no active session")

        try:
            claims = self.issuer.verify(refresh_token, TokenKind.REFRESH)
        except TokenVerificationError as e:
            self._refresh_denied(cid, account_id, f"token {e.reason}")
        if claims.account_id != account.id:
            self._refresh_denied(cid, account_id, "token subject mismatch")

        presented_hash = hash_refresh_token(refresh_token)
        if not hmac.compare_digest(presented_hash, account.refresh_token_hash):
            self._refresh_denied(cid, account_id, "token not current")

        tokens = self._issue_pair(cid, account)
        rotated = self._store_call(
            cid,
            "compare_and_set_refresh_hash",
            self.store.compare_and_set_refresh_hash,
            account.id,
            presented_hash,
            hash_refresh_token(tokens.refresh_token),
        )
        if not rotated:
            self._refresh_denied(cid, account_id, "concurrent rotation or logout")
        log_event(logger, logging.INFO, "refresh succeeded", correlation_id=cid, account_id=account.id)
        return tokens

    def logout(self, account_id: int) -> None:
        """Clear the stored refresh hash. Idempotent."""
        cid = new_correlation_id()
        self._store_call(
            cid, "update_refresh_hash", self.store.update_refresh_hash, account_id, None
        )
        log_event(logger, logging.INFO, "logged out", correlation_id=cid, account_id=account_id)

    def validate_account(self, account_id: int) -> AccountPublic | None:
        """Plain lookup used by authorization to re-confirm the account still exists."""
        cid = new_correlation_id()
        account = self._store_call(cid, "find_by_id", self.store.find_by_id, account_id)
        return _public(account) if account is not None else None

    def _refresh_denied(self, cid: str, account_id: int, why: str) -> NoReturn:
        log_event(
            logger,
            logging.WARNING,
            "refresh failed",
            correlation_id=cid,
            account_id=account_id,
            detail={"reason": why},
        )
        raise AuthenticationError(INVALID_REFRESH_TOKEN)

    def _issue_pair(self, cid: str, account: AccountRecord) -> TokenPair:
        try:
            return self.issuer.issue_pair(account.id, account.email, account.role)
        except InternalError as e:
            log_event(
                logger,
                logging.ERROR,
                "token signing failure",
                correlation_id=cid,
                account_id=account.id,
                detail={"operation": "issue_pair", "error": repr(e.cause)},
                exc_info=True,
            )
            raise

    def _store_call(self, cid: str, op: str, fn, *args):
        try:
            return fn(*args)
        except DuplicateAccountError as e:
            raise ConflictError(cause=e) from e
        except StoreError as e:
            log_event(
                logger,
                logging.ERROR,
                "credential store failure",
                correlation_id=cid,
                detail={"operation": op, "error": e.message},
                exc_info=True,
            )
            raise InternalError(cause=e) from e


def _public(account: AccountRecord) -> AccountPublic:
    return AccountPublic(
        id=account.id,
        email=account.email,
        role=account.role,
        created_at=account.created_at,
        updated_at=account.updated_at,
    )
