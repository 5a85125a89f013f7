"""FastAPI dependencies: DB session, session service and the per-operation auth guard."""

from collections.abc import Callable, Generator
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from authcore.core.database import session_scope
from authcore.repositories.accounts import SqlAlchemyCredentialStore
from authcore.schemas.auth import AuthContext
from authcore.services.guard import AuthorizationGuard
from authcore.services.session import SessionService

security = HTTPBearer(auto_error=False)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency that yields a DB session from the app's session factory."""
    yield from session_scope(request.app.state.session_factory)


def get_session_service(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> SessionService:
    """Build the session service for this request over the shared hasher and issuer."""
    return SessionService(
        store=SqlAlchemyCredentialStore(db),
        hasher=request.app.state.hasher,
        issuer=request.app.state.issuer,
    )


def require(operation: str) -> Callable[..., AuthContext | None]:
    """
    Dependency factory: enforce the policy declared for operation.

    Returns the AuthContext for protected operations and None for public ones.
    Auth errors propagate to the handlers in ``authcore.api.errors``.
    """

    def dependency(
        request: Request,
        credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
        service: Annotated[SessionService, Depends(get_session_service)],
    ) -> AuthContext | None:
        guard = AuthorizationGuard(
            request.app.state.issuer,
            request.app.state.policies,
            account_lookup=service.validate_account,
        )
        token = credentials.credentials if credentials is not None else None
        return guard.check(operation, token)

    return dependency
