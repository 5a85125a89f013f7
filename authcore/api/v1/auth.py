"""Auth endpoints: register, login, refresh, logout and the current account."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from authcore.api.deps import get_session_service, require
from authcore.api.policies import AUTH_LOGIN, AUTH_LOGOUT, AUTH_ME, AUTH_REFRESH, AUTH_REGISTER
from authcore.core.errors import AuthenticationError
from authcore.schemas.account import AccountPublic
from authcore.schemas.auth import (
    AuthContext,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
)
from authcore.services.session import SessionService

router = APIRouter()


@router.post(
    "/register",
    response_model=AccountPublic,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require(AUTH_REGISTER))],
)
def register(
    body: RegisterRequest,
    service: Annotated[SessionService, Depends(get_session_service)],
) -> AccountPublic:
    """Create an account with role USER. 409 if the email is already registered."""
    return service.register(body.email, body.password)


@router.post("/login", response_model=TokenPair, dependencies=[Depends(require(AUTH_LOGIN))])
def login(
    body: LoginRequest,
    service: Annotated[SessionService, Depends(get_session_service)],
) -> TokenPair:
    """
    Authenticate with email and password; returns an access and a refresh token.
    Include the access token in the Authorization header as: Bearer <access_token>
    """
    return service.login(body.email, body.password)


@router.post("/refresh", response_model=TokenPair, dependencies=[Depends(require(AUTH_REFRESH))])
def refresh(
    body: RefreshRequest,
    service: Annotated[SessionService, Depends(get_session_service)],
) -> TokenPair:
    """Exchange the current refresh token for a new pair. The presented token stops working."""
    return service.refresh(body.account_id, body.refresh_token)


@router.post("/logout", response_model=MessageResponse)
def logout(
    current: Annotated[AuthContext, Depends(require(AUTH_LOGOUT))],
    service: Annotated[SessionService, Depends(get_session_service)],
) -> MessageResponse:
    """End the caller's session: every refresh token issued so far stops working."""
    service.logout(current.account_id)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=AccountPublic)
def me(
    current: Annotated[AuthContext, Depends(require(AUTH_ME))],
    service: Annotated[SessionService, Depends(get_session_service)],
) -> AccountPublic:
    """Return the authenticated account."""
    account = service.validate_account(current.account_id)
    if account is None:
        raise AuthenticationError()
    return account
