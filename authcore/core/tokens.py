"""JWT creation and verification for access and refresh tokens (PyJWT)."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any

import jwt

from authcore.core.errors import (
    InternalError,
    TokenExpiredError,
    TokenKindError,
    TokenMalformedError,
)
from authcore.schemas.account import Role
from authcore.schemas.auth import TokenPair

if TYPE_CHECKING:
    from authcore.core.config import Settings

REQUIRED_CLAIMS = ["sub", "type", "jti", "iat", "exp"]


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Decoded, verified token payload."""

    account_id: int
    email: str
    kind: TokenKind
    jti: str
    issued_at: datetime
    expires_at: datetime
    role: Role | None = None


class TokenIssuer:
    """
    Mints and verifies signed, time-bounded tokens.

    Each kind has its own signing secret, so a refresh token never verifies as an
    access token and vice versa. Holds no mutable state beyond its read-only keys.
    """

    def __init__(
        self,
        *,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not access_secret or not refresh_secret:
            raise ValueError("Both signing secrets are required")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh secrets must differ")
        self._secrets = {TokenKind.ACCESS: access_secret, TokenKind.REFRESH: refresh_secret}
        self._ttls = {TokenKind.ACCESS: access_ttl, TokenKind.REFRESH: refresh_ttl}
        self._algorithm = algorithm
        self._clock = clock or (lambda: datetime.now(UTC))

    @classmethod
    def from_settings(
        cls, settings: "Settings", clock: Callable[[], datetime] | None = None
    ) -> "TokenIssuer":
        return cls(
            access_secret=settings.ACCESS_TOKEN_SECRET.get_secret_value(),
            refresh_secret=settings.REFRESH_TOKEN_SECRET.get_secret_value(),
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            algorithm=settings.JWT_ALGORITHM,
            clock=clock,
        )

    def issue(self, account_id: int, email: str, role: Role | str, kind: TokenKind) -> str:
        """Create a JWT for kind with sub, email, type, jti, iat, exp (and role for access)."""
        now = self._clock()
        payload: dict[str, Any] = {
            "sub": str(account_id),
            "email": email,
            "type": kind.value,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + self._ttls[kind],
        }
        if kind is TokenKind.ACCESS:
            payload["role"] = Role(role).value
        try:
            return jwt.encode(payload, self._secrets[kind], algorithm=self._algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            raise InternalError(cause=e) from e

    def issue_pair(self, account_id: int, email: str, role: Role | str) -> TokenPair:
        return TokenPair(
            access_token=self.issue(account_id, email, role, TokenKind.ACCESS),
            refresh_token=self.issue(account_id, email, role, TokenKind.REFRESH),
        )

    def verify(self, token: str, expected_kind: TokenKind) -> TokenClaims:
        """
        Decode and validate a token of expected_kind.

        Raises TokenMalformedError, TokenExpiredError or TokenKindError so callers
        can tell "log in again" from "refresh" from "wrong credential".
        """
        if not token:
            raise TokenMalformedError()
        try:
            payload = jwt.decode(
                token,
                self._secrets[expected_kind],
                algorithms=[self._algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            # PyJWT checks the signature before exp, so the token is genuine.
            raise TokenExpiredError(cause=e) from e
        except jwt.InvalidSignatureError as e:
            if self._signed_as_other_kind(token, expected_kind):
                raise TokenKindError(cause=e) from e
            raise TokenMalformedError(cause=e) from e
        except jwt.PyJWTError as e:
            raise TokenMalformedError(cause=e) from e

        if payload.get("type") != expected_kind.value:
            raise TokenKindError()
        return self._claims_from_payload(payload, expected_kind)

    def _signed_as_other_kind(self, token: str, expected_kind: TokenKind) -> bool:
        other = TokenKind.REFRESH if expected_kind is TokenKind.ACCESS else TokenKind.ACCESS
        try:
            jwt.decode(
                token,
                self._secrets[other],
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except jwt.PyJWTError:
            return False
        return True

    def _claims_from_payload(self, payload: dict[str, Any], kind: TokenKind) -> TokenClaims:
        try:
            account_id = int(payload["sub"])
            email = str(payload.get("email") or "")
            role = Role(payload["role"]) if kind is TokenKind.ACCESS else None
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=UTC)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=UTC)
        except (KeyError, TypeError, ValueError) as e:
            raise TokenMalformedError(cause=e) from e
        return TokenClaims(
            account_id=account_id,
            email=email,
            kind=kind,
            jti=str(payload["jti"]),
            issued_at=issued_at,
            expires_at=expires_at,
            role=role,
        )
