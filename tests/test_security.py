"""Unit tests for authcore.core.security: bcrypt hashing with a fixed cost factor."""

import unittest

from authcore.core.errors import ValidationError
from authcore.core.security import PasswordHasher


class TestPasswordHasher(unittest.TestCase):
    def setUp(self) -> None:
        self.hasher = PasswordHasher(rounds=4)

    def test_hash_then_verify(self) -> None:
        hashed = self.hasher.hash("pw123")
        self.assertNotEqual(hashed, "pw123")
        self.assertTrue(self.hasher.verify("pw123", hashed))
        self.assertFalse(self.hasher.verify("pw124", hashed))

    def test_same_password_gets_different_salts(self) -> None:
        self.assertNotEqual(self.hasher.hash("pw123"), self.hasher.hash("pw123"))

    def test_cost_factor_comes_from_construction(self) -> None:
        hashed = self.hasher.hash("pw123")
        self.assertTrue(hashed.startswith("$2b$04$"))
        self.assertEqual(self.hasher.rounds, 4)

    def test_empty_plaintext_rejected_on_hash(self) -> None:
        with self.assertRaises(ValidationError):
            self.hasher.hash("")

    def test_empty_plaintext_never_verifies(self) -> None:
        hashed = self.hasher.hash("pw123")
        self.assertFalse(self.hasher.verify("", hashed))

    def test_empty_or_malformed_hash_does_not_raise(self) -> None:
        self.assertFalse(self.hasher.verify("pw123", ""))
        self.assertFalse(self.hasher.verify("pw123", None))
        self.assertFalse(self.hasher.verify("pw123", "not-a-bcrypt-hash"))

    def test_dummy_hash_uses_configured_cost(self) -> None:
        self.assertTrue(self.hasher.dummy_hash.startswith("$2b$04$"))
        self.assertFalse(self.hasher.verify("pw123", self.hasher.dummy_hash))

    def test_rounds_out_of_range_rejected(self) -> None:
        with self.assertRaises(ValueError):
            PasswordHasher(rounds=3)
        with self.assertRaises(ValueError):
            PasswordHasher(rounds=32)


if __name__ == "__main__":
    unittest.main()
