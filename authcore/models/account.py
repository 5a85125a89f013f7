"""ORM model for accounts (credentials, role and current refresh session)."""

from sqlalchemy import Column, DateTime, Integer, String, func

from authcore.models.base import Base
from authcore.schemas.account import Role


class Account(Base):
    """
    Login identity for JWT authentication and role-based access control.

    role: 'USER' or 'ADMIN'
    refresh_token_hash: SHA-256 of the live refresh token; NULL when logged out.
    """

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(254), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=Role.USER.value)
    refresh_token_hash = Column(String(128), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
