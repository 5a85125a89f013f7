"""Health check endpoint with database connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from authcore import __version__
from authcore.api.deps import get_db, require
from authcore.api.policies import HEALTH_READ
from authcore.core.database import check_db_connected
from authcore.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse, dependencies=[Depends(require(HEALTH_READ))])
def get_health(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"

    return HealthResponse(
        status="ok",
        version=__version__,
        environment=request.app.state.settings.APP_ENV,
        database=db_status,
    )
