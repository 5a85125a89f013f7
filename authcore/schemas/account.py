"""Account records exchanged between the credential store and the session service."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    """Closed set of account roles."""

    USER = "USER"
    ADMIN = "ADMIN"


class AccountRecord(BaseModel):
    """Full stored account, including hashes. Never returned to callers."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    email: str
    password_hash: str
    role: Role = Role.USER
    refresh_token_hash: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AccountPublic(BaseModel):
    """Account as shown to callers (no password or refresh-token hash)."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    email: str
    role: Role
    created_at: datetime | None = None
    updated_at: datetime | None = None
