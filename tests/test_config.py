"""Unit tests for authcore.core.config: required, distinct secrets and bounded numeric settings."""

import unittest

from pydantic import ValidationError

from authcore.core.config import Settings
from authcore.core.security import PasswordHasher
from authcore.core.tokens import TokenIssuer, TokenKind
from authcore.schemas.account import Role


def _settings(**overrides: object) -> Settings:
    values: dict = {
        "ACCESS_TOKEN_SECRET": "access-secret-for-tests-0123456789abcdef",
        "REFRESH_TOKEN_SECRET": "refresh-secret-for-tests-0123456789abcdef",
        "DATABASE_URL": "sqlite://",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        s = _settings()
        self.assertEqual(s.ACCESS_TOKEN_EXPIRE_MINUTES, 15)
        self.assertEqual(s.REFRESH_TOKEN_EXPIRE_DAYS, 7)
        self.assertEqual(s.BCRYPT_ROUNDS, 12)
        self.assertEqual(s.JWT_ALGORITHM, "HS256")

    def test_blank_secret_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(ACCESS_TOKEN_SECRET="   ")

    def test_identical_secrets_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(REFRESH_TOKEN_SECRET="access-secret-for-tests-0123456789abcdef")

    def test_asymmetric_algorithm_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_ALGORITHM="RS256")

    def test_algorithm_normalized(self) -> None:
        self.assertEqual(_settings(JWT_ALGORITHM=" hs512 ").JWT_ALGORITHM, "HS512")

    def test_bounds(self) -> None:
        for field, bad in (
            ("ACCESS_TOKEN_EXPIRE_MINUTES", 0),
            ("REFRESH_TOKEN_EXPIRE_DAYS", 366),
            ("BCRYPT_ROUNDS", 3),
            ("AUTH_THREADPOOL_SIZE", 0),
        ):
            with self.subTest(field=field):
                with self.assertRaises(ValidationError):
                    _settings(**{field: bad})

    def test_unsupported_database_url_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(DATABASE_URL="mysql://localhost/db")

    def test_settings_are_immutable(self) -> None:
        s = _settings()
        with self.assertRaises(ValidationError):
            s.BCRYPT_ROUNDS = 4

    def test_components_built_from_settings(self) -> None:
        s = _settings(BCRYPT_ROUNDS=4, ACCESS_TOKEN_EXPIRE_MINUTES=5)
        self.assertEqual(PasswordHasher.from_settings(s).rounds, 4)
        issuer = TokenIssuer.from_settings(s)
        claims = issuer.verify(issuer.issue(1, "a@x.com", Role.USER, TokenKind.ACCESS), TokenKind.ACCESS)
        self.assertEqual((claims.expires_at - claims.issued_at).total_seconds(), 300)


if __name__ == "__main__":
    unittest.main()
