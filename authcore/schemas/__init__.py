"""Pydantic schemas for accounts, tokens and auth requests."""

from authcore.schemas.account import AccountPublic, AccountRecord, Role
from authcore.schemas.auth import (
    AuthContext,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
)

__all__ = [
    "AccountPublic",
    "AccountRecord",
    "AuthContext",
    "LoginRequest",
    "MessageResponse",
    "RefreshRequest",
    "RegisterRequest",
    "Role",
    "TokenPair",
]
