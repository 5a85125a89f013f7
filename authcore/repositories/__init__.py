"""Credential store contract and its SQLAlchemy and in-memory implementations."""

from authcore.repositories.accounts import SqlAlchemyCredentialStore
from authcore.repositories.base import CredentialStore, DuplicateAccountError, StoreError
from authcore.repositories.memory import InMemoryCredentialStore

__all__ = [
    "CredentialStore",
    "DuplicateAccountError",
    "InMemoryCredentialStore",
    "SqlAlchemyCredentialStore",
    "StoreError",
]
