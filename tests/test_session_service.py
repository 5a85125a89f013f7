"""Unit tests for authcore.services.session: register, login, rotation, logout and failure policy."""

import logging
import unittest
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from unittest.mock import MagicMock, patch

import jwt

from authcore.core.errors import (
    AuthenticationError,
    ConflictError,
    InternalError,
    ValidationError,
)
from authcore.core.security import PasswordHasher
from authcore.core.tokens import TokenIssuer, TokenKind
from authcore.repositories.base import DuplicateAccountError, StoreError
from authcore.repositories.memory import InMemoryCredentialStore
from authcore.schemas.account import Role
from authcore.services.session import SessionService, hash_refresh_token

ACCESS_SECRET = "access-secret-for-tests-0123456789abcdef"
REFRESH_SECRET = "refresh-secret-for-tests-0123456789abcdef"


def _issuer() -> TokenIssuer:
    return TokenIssuer(
        access_secret=ACCESS_SECRET,
        refresh_secret=REFRESH_SECRET,
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=7),
    )


def _service(store: object | None = None) -> SessionService:
    return SessionService(
        store=store if store is not None else InMemoryCredentialStore(),
        hasher=PasswordHasher(rounds=4),
        issuer=_issuer(),
    )


class TestRegister(unittest.TestCase):
    def test_creates_user_without_session(self) -> None:
        service = _service()
        account = service.register("a@x.com", "pw123")
        self.assertEqual(account.email, "a@x.com")
        self.assertEqual(account.role, Role.USER)
        self.assertFalse(hasattr(account, "password_hash"))
        stored = service.store.find_by_id(account.id)
        self.assertIsNone(stored.refresh_token_hash)
        self.assertTrue(stored.password_hash)
        self.assertNotEqual(stored.password_hash, "pw123")

    def test_email_is_normalized(self) -> None:
        service = _service()
        account = service.register("  A@X.com ", "pw123")
        self.assertEqual(account.email, "a@x.com")
        service.login("a@x.COM", "pw123")

    def test_duplicate_email_conflicts_and_keeps_hash(self) -> None:
        service = _service()
        account = service.register("a@x.com", "pw123")
        before = service.store.find_by_id(account.id).password_hash
        with self.assertRaises(ConflictError):
            service.register("A@x.com", "other-password")
        self.assertEqual(service.store.find_by_id(account.id).password_hash, before)

    def test_store_level_duplicate_maps_to_conflict(self) -> None:
        store = MagicMock()
        store.find_by_email.return_value = None
        store.create.side_effect = DuplicateAccountError("dup")
        with self.assertRaises(ConflictError):
            _service(store).register("a@x.com", "pw123")

    def test_empty_password_is_validation_error(self) -> None:
        with self.assertRaises(ValidationError):
            _service().register("a@x.com", "")

    def test_empty_email_is_validation_error(self) -> None:
        with self.assertRaises(ValidationError):
            _service().register("   ", "pw123")


class TestLogin(unittest.TestCase):
    def setUp(self) -> None:
        self.service = _service()
        self.account = self.service.register("a@x.com", "pw123")

    def test_login_returns_pair_with_user_role(self) -> None:
        tokens = self.service.login("a@x.com", "pw123")
        claims = self.service.issuer.verify(tokens.access_token, TokenKind.ACCESS)
        self.assertEqual(claims.role, Role.USER)
        self.assertEqual(claims.account_id, self.account.id)
        stored = self.service.store.find_by_id(self.account.id)
        self.assertEqual(stored.refresh_token_hash, hash_refresh_token(tokens.refresh_token))

    def test_unknown_email_and_wrong_password_look_identical(self) -> None:
        with self.assertRaises(AuthenticationError) as unknown:
            self.service.login("nobody@x.com", "pw123")
        with self.assertRaises(AuthenticationError) as wrong:
            self.service.login("a@x.com", "wrong")
        self.assertIs(type(unknown.exception), type(wrong.exception))
        self.assertEqual(unknown.exception.message, wrong.exception.message)

    def test_unknown_email_still_runs_a_password_check(self) -> None:
        hasher = self.service.hasher
        with patch.object(hasher, "verify", wraps=hasher.verify) as verify:
            with self.assertRaises(AuthenticationError):
                self.service.login("nobody@x.com", "pw123")
            with self.assertRaises(AuthenticationError):
                self.service.login("a@x.com", "wrong")
        self.assertEqual(verify.call_count, 2)
        self.assertEqual(verify.call_args_list[0].args, ("pw123", hasher.dummy_hash))

    def test_empty_password_fails_authentication(self) -> None:
        with self.assertRaises(AuthenticationError):
            self.service.login("a@x.com", "")

    def test_new_login_invalidates_previous_refresh_token(self) -> None:
        first = self.service.login("a@x.com", "pw123")
        self.service.login("a@x.com", "pw123")
        with self.assertRaises(AuthenticationError):
            self.service.refresh(self.account.id, first.refresh_token)

    def test_failure_log_has_no_secret_material(self) -> None:
        with self.assertLogs("authcore.services.session", level="WARNING") as logs:
            with self.assertRaises(AuthenticationError):
                self.service.login("a@x.com", "wrong-pw-value")
        for record in logs.records:
            text = record.getMessage() + repr(getattr(record, "detail", None))
            self.assertNotIn("wrong-pw-value", text)
            self.assertEqual(record.account_id, self.account.id)
            self.assertTrue(record.correlation_id)


class TestRefresh(unittest.TestCase):
    def setUp(self) -> None:
        self.service = _service()
        self.account = self.service.register("a@x.com", "pw123")
        self.tokens = self.service.login("a@x.com", "pw123")

    def test_rotation_scenario(self) -> None:
        rotated = self.service.refresh(self.account.id, self.tokens.refresh_token)
        self.assertNotEqual(rotated.refresh_token, self.tokens.refresh_token)
        self.assertNotEqual(rotated.access_token, self.tokens.access_token)
        with self.assertRaises(AuthenticationError):
            self.service.refresh(self.account.id, self.tokens.refresh_token)
        # The new token is still good, once.
        self.service.refresh(self.account.id, rotated.refresh_token)

    def test_refresh_after_logout_fails(self) -> None:
        self.service.logout(self.account.id)
        with self.assertRaises(AuthenticationError):
            self.service.refresh(self.account.id, self.tokens.refresh_token)

    def test_never_logged_in_account_fails(self) -> None:
        other = self.service.register("b@x.com", "pw123")
        with self.assertRaises(AuthenticationError):
            self.service.refresh(other.id, self.tokens.refresh_token)

    def test_unknown_account_fails(self) -> None:
        with self.assertRaises(AuthenticationError):
            self.service.refresh(999, self.tokens.refresh_token)

    def test_access_token_cannot_be_used_to_refresh(self) -> None:
        with self.assertRaises(AuthenticationError):
            self.service.refresh(self.account.id, self.tokens.access_token)

    def test_token_of_another_account_fails(self) -> None:
        self.service.register("b@x.com", "pw123")
        other_tokens = self.service.login("b@x.com", "pw123")
        with self.assertRaises(AuthenticationError):
            self.service.refresh(self.account.id, other_tokens.refresh_token)

    def test_all_refresh_failures_share_one_message(self) -> None:
        messages = set()
        for account_id, token in (
            (999, self.tokens.refresh_token),
            (self.account.id, "garbage"),
            (self.account.id, self.tokens.access_token),
        ):
            with self.assertRaises(AuthenticationError) as ctx:
                self.service.refresh(account_id, token)
            messages.add(ctx.exception.message)
        self.assertEqual(len(messages), 1)

    def test_refresh_failure_log_has_no_token(self) -> None:
        with self.assertLogs("authcore.services.session", level="WARNING") as logs:
            with self.assertRaises(AuthenticationError):
                self.service.refresh(self.account.id, self.tokens.access_token)
        for record in logs.records:
            text = record.getMessage() + repr(getattr(record, "detail", None))
            self.assertNotIn(self.tokens.access_token, text)

    def test_lost_race_fails(self) -> None:
        store = self.service.store
        original_cas = store.compare_and_set_refresh_hash

        def competing_cas(account_id, expected, new):
            store.update_refresh_hash(account_id, "hash-from-concurrent-refresh")
            return original_cas(account_id, expected, new)

        store.compare_and_set_refresh_hash = competing_cas
        with self.assertRaises(AuthenticationError):
            self.service.refresh(self.account.id, self.tokens.refresh_token)

    def test_concurrent_refreshes_with_same_token_have_one_winner(self) -> None:
        def attempt(_: int) -> bool:
            try:
                self.service.refresh(self.account.id, self.tokens.refresh_token)
            except AuthenticationError:
                return False
            return True

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(8)))
        self.assertEqual(results.count(True), 1)


class TestLogoutAndValidate(unittest.TestCase):
    def test_logout_is_idempotent(self) -> None:
        service = _service()
        account = service.register("a@x.com", "pw123")
        service.login("a@x.com", "pw123")
        service.logout(account.id)
        service.logout(account.id)
        service.logout(12345)
        self.assertIsNone(service.store.find_by_id(account.id).refresh_token_hash)

    def test_validate_account(self) -> None:
        service = _service()
        account = service.register("a@x.com", "pw123")
        self.assertEqual(service.validate_account(account.id).email, "a@x.com")
        self.assertIsNone(service.validate_account(999))


class TestStoreFailures(unittest.TestCase):
    def test_store_error_becomes_opaque_internal_error(self) -> None:
        store = MagicMock()
        store.find_by_email.side_effect = StoreError("connection refused to db-host:5432")
        service = _service(store)
        with self.assertLogs("authcore.services.session", level="ERROR") as logs:
            with self.assertRaises(InternalError) as ctx:
                service.login("a@x.com", "pw123")
        self.assertNotIn("db-host", ctx.exception.message)
        record = logs.records[0]
        self.assertTrue(record.correlation_id)
        self.assertEqual(record.detail["operation"], "find_by_email")
        self.assertIn("db-host", record.detail["error"])

    def test_each_operation_gets_its_own_correlation_id(self) -> None:
        store = MagicMock()
        store.find_by_id.side_effect = StoreError("down")
        store.update_refresh_hash.side_effect = StoreError("down")
        service = _service(store)
        with self.assertLogs("authcore.services.session", level=logging.ERROR) as logs:
            with self.assertRaises(InternalError):
                service.validate_account(1)
            with self.assertRaises(InternalError):
                service.logout(1)
        ids = {r.correlation_id for r in logs.records}
        self.assertEqual(len(ids), 2)


class TestSigningFailures(unittest.TestCase):
    def setUp(self) -> None:
        self.service = _service()
        self.account = self.service.register("a@x.com", "pw123")

    def test_login_signing_failure_is_logged_and_opaque(self) -> None:
        with patch("authcore.core.tokens.jwt.encode", side_effect=jwt.PyJWTError("bad key")):
            with self.assertLogs("authcore.services.session", level="ERROR") as logs:
                with self.assertRaises(InternalError) as ctx:
                    self.service.login("a@x.com", "pw123")
        self.assertNotIn("bad key", ctx.exception.message)
        record = logs.records[0]
        self.assertTrue(record.correlation_id)
        self.assertEqual(record.account_id, self.account.id)
        self.assertEqual(record.detail["operation"], "issue_pair")
        self.assertIsNotNone(record.exc_info)
        self.assertIsNone(self.service.store.find_by_id(self.account.id).refresh_token_hash)

    def test_refresh_signing_failure_keeps_current_token(self) -> None:
        tokens = self.service.login("a@x.com", "pw123")
        with patch("authcore.core.tokens.jwt.encode", side_effect=jwt.PyJWTError("bad key")):
            with self.assertLogs("authcore.services.session", level="ERROR"):
                with self.assertRaises(InternalError):
                    self.service.refresh(self.account.id, tokens.refresh_token)
        self.service.refresh(self.account.id, tokens.refresh_token)


if __name__ == "__main__":
    unittest.main()
