"""Session lifecycle and request authorization."""

from authcore.services.guard import AccessPolicy, AuthorizationGuard
from authcore.services.session import SessionService

__all__ = ["AccessPolicy", "AuthorizationGuard", "SessionService"]
