"""Map auth core errors to HTTP responses."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from authcore.core.errors import (
    AuthCoreError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InternalError,
    ValidationError,
)

STATUS_BY_ERROR: list[tuple[type[AuthCoreError], int]] = [
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ConflictError, status.HTTP_409_CONFLICT),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (InternalError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_for(exc: AuthCoreError) -> int:
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def auth_core_error_handler(request: Request, exc: AuthCoreError) -> JSONResponse:
    code = status_for(exc)
    headers = None
    if code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    if code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        # Details were logged with the correlation id; the caller gets nothing internal.
        detail = InternalError.default_message
    else:
        detail = exc.message
    return JSONResponse(status_code=code, content={"detail": detail}, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthCoreError, auth_core_error_handler)
