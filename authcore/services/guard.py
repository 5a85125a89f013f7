"""Authorization guard: verify the access token, then enforce the operation's role policy."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from authcore.core.errors import AuthenticationError, AuthorizationError, TokenVerificationError
from authcore.core.logging import log_event, new_correlation_id
from authcore.core.tokens import TokenIssuer, TokenKind
from authcore.schemas.account import Role
from authcore.schemas.auth import AuthContext

logger = logging.getLogger(__name__)

UNAUTHENTICATED = "Not authenticated"
FORBIDDEN = "Forbidden"


@dataclass(frozen=True, slots=True)
class AccessPolicy:
    """
    Per-operation access declaration.

    public: skip authentication entirely (register/login/refresh only).
    roles: allowed roles; empty means any authenticated account.
    """

    public: bool = False
    roles: frozenset[Role] = frozenset()

    @classmethod
    def public_access(cls) -> "AccessPolicy":
        return cls(public=True)

    @classmethod
    def authenticated(cls) -> "AccessPolicy":
        return cls()

    @classmethod
    def require(cls, *roles: Role) -> "AccessPolicy":
        if not roles:
            raise ValueError("require() needs at least one role; use authenticated() for any role")
        return cls(roles=frozenset(Role(r) for r in roles))


# Operations missing from a policy table get this: authenticated, any role. Never public.
DEFAULT_POLICY = AccessPolicy.authenticated()


class AuthorizationGuard:
    """
    Two-stage request check: authentication, then role authorization.

    Authorization is only evaluated after authentication has fully succeeded, so
    an AuthorizationError always means the caller held a valid access token.
    """

    def __init__(
        self,
        issuer: TokenIssuer,
        policies: Mapping[str, AccessPolicy] | None = None,
        *,
        account_lookup: Callable[[int], Any] | None = None,
    ) -> None:
        self.issuer = issuer
        self.policies = dict(policies or {})
        self.account_lookup = account_lookup

    def policy_for(self, operation: str) -> AccessPolicy:
        return self.policies.get(operation, DEFAULT_POLICY)

    def authenticate(self, token: str | None) -> AuthContext:
        """Verify an access token and return the identity it carries."""
        return self._authenticate(new_correlation_id(), token)

    def authorize(self, token: str | None, required_roles: Iterable[Role] = ()) -> AuthContext:
        """Authenticate, then require the role to be in required_roles (empty = any role)."""
        cid = new_correlation_id()
        context = self._authenticate(cid, token)
        required = frozenset(Role(r) for r in required_roles)
        if required and context.role not in required:
            log_event(
                logger,
                logging.WARNING,
                "request rejected: insufficient role",
                correlation_id=cid,
                account_id=context.account_id,
                detail={"role": context.role.value, "required": sorted(r.value for r in required)},
            )
            raise AuthorizationError(FORBIDDEN)
        return context

    def _authenticate(self, cid: str, token: str | None) -> AuthContext:
        if not token:
            log_event(logger, logging.INFO, "request rejected: no bearer token", correlation_id=cid)
            raise AuthenticationError(UNAUTHENTICATED)
        try:
            claims = self.issuer.verify(token, TokenKind.ACCESS)
        except TokenVerificationError as e:
            log_event(
                logger,
                logging.WARNING,
                "request rejected: access token invalid",
                correlation_id=cid,
                detail={"reason": e.reason},
            )
            raise AuthenticationError(UNAUTHENTICATED) from e

        # The lookup runs its own operation and replaces the current correlation id.
        if self.account_lookup is not None and self.account_lookup(claims.account_id) is None:
            log_event(
                logger,
                logging.WARNING,
                "request rejected: account no longer exists",
                correlation_id=cid,
                account_id=claims.account_id,
            )
            raise AuthenticationError(UNAUTHENTICATED)

        return AuthContext(account_id=claims.account_id, email=claims.email, role=claims.role)

    def check(self, operation: str, token: str | None) -> AuthContext | None:
        """Apply the operation's policy. Public operations return None without reading the token."""
        policy = self.policy_for(operation)
        if policy.public:
            return None
        return self.authorize(token, policy.roles)
