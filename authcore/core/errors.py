"""Error taxonomy shared by the session service, token issuer and authorization guard.

The core raises these; the HTTP layer maps them to status codes in
``authcore.api.errors``. Messages are safe to show to callers: they never carry
secrets, and authentication failures use one fixed message per operation.
"""


class AuthCoreError(Exception):
    """Base class for all errors raised by the auth core."""

    default_message = "Authentication core error"

    def __init__(self, message: str | None = None, cause: Exception | None = None) -> None:
        self.message = message or self.default_message
        self.cause = cause
        super().__init__(self.message)


class ValidationError(AuthCoreError):
    """Malformed caller input (e.g. empty password). Caller's fault."""

    default_message = "Invalid input"


class ConflictError(AuthCoreError):
    """The resource already exists (duplicate email)."""

    default_message = "Email already registered"


class AuthenticationError(AuthCoreError):
    """Bad credentials, or a missing, bad or expired token."""

    default_message = "Not authenticated"


class TokenVerificationError(AuthenticationError):
    """A presented token failed verification. ``reason`` says why."""

    reason = "invalid"
    default_message = "Invalid token"


class TokenMalformedError(TokenVerificationError):
    """Token cannot be decoded, has a bad signature, or lacks required claims."""

    reason = "malformed"
    default_message = "Malformed token"


class TokenExpiredError(TokenVerificationError):
    """Signature is valid but ``exp`` has passed."""

    reason = "expired"
    default_message = "Token expired"


class TokenKindError(TokenVerificationError):
    """Token is genuine but of the other kind (refresh presented as access or vice versa)."""

    reason = "wrong_kind"
    default_message = "Wrong token kind"


class AuthorizationError(AuthCoreError):
    """Authenticated, but the role is not allowed to perform the operation."""

    default_message = "Forbidden"


class InternalError(AuthCoreError):
    """Store or signing failure. Details are logged server-side only."""

    default_message = "Internal server error"
