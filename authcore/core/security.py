"""Password hashing and verification (bcrypt)."""

from typing import TYPE_CHECKING

import bcrypt

from authcore.core.errors import ValidationError

if TYPE_CHECKING:
    from authcore.core.config import Settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
DEFAULT_BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """Salted, deliberately slow one-way hashing of plaintext secrets.

    The cost factor is fixed when the hasher is built; ``hash`` takes no cost
    argument, so a caller cannot ask for a cheaper hash.
    """

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        if rounds < 4 or rounds > 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self._rounds = rounds
        # Verified against when no account matches, so unknown emails cost a full check too.
        self._dummy_hash = bcrypt.hashpw(
            b"authcore-dummy-password", bcrypt.gensalt(rounds=rounds)
        ).decode("utf-8")

    @classmethod
    def from_settings(cls, settings: "Settings") -> "PasswordHasher":
        return cls(rounds=settings.BCRYPT_ROUNDS)

    @property
    def rounds(self) -> int:
        return self._rounds

    @property
    def dummy_hash(self) -> str:
        return self._dummy_hash

    def hash(self, plaintext: str) -> str:
        """Hash a plain-text password for storage. Do not store plain passwords.

        Only the first 72 UTF-8 bytes count; request schemas reject anything longer.
        """
        if not plaintext:
            raise ValidationError("Password must not be empty")
        pw_bytes = plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self._rounds)).decode("utf-8")

    def verify(self, plaintext: str, hashed: str | None) -> bool:
        """Verify a plain password against a stored hash. Never true for empty input."""
        if not plaintext or not hashed:
            return False
        pw_bytes = plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False
