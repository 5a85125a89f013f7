"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from authcore.core.security import BCRYPT_MAX_BYTES
from authcore.schemas.account import Role


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return value


class RegisterRequest(BaseModel):
    """Credentials for a new account."""

    email: str = Field(..., max_length=254, description="Login email")
    password: str = Field(..., max_length=BCRYPT_MAX_BYTES, description="Password")

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        return _check_password_bytes(v)


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., max_length=254, description="Login email")
    password: str = Field(..., max_length=BCRYPT_MAX_BYTES, description="Password")

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        return _check_password_bytes(v)


class RefreshRequest(BaseModel):
    """Refresh token exchange for a new token pair."""

    account_id: int = Field(..., description="Account the refresh token was issued to")
    refresh_token: str = Field(..., description="Refresh token from login or the last refresh")


class TokenPair(BaseModel):
    """Access and refresh tokens returned after login or refresh."""

    access_token: str = Field(..., description="Short-lived JWT access token")
    refresh_token: str = Field(..., description="Long-lived JWT refresh token (single use)")
    token_type: str = Field(default="bearer", description="Token type")


class AuthContext(BaseModel):
    """Authenticated identity attached to a request by the authorization guard."""

    model_config = ConfigDict(frozen=True)

    account_id: int
    email: str
    role: Role


class MessageResponse(BaseModel):
    message: str
