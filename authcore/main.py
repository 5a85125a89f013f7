"""FastAPI application factory. No business logic; only wiring and middleware.

Run with: uvicorn authcore.main:create_app --factory
"""

from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

from anyio import to_thread
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session, sessionmaker

from authcore import __version__
from authcore.api.errors import register_error_handlers
from authcore.api.policies import DEFAULT_POLICIES
from authcore.api.v1 import router as v1_router
from authcore.core.config import Settings, get_settings
from authcore.core.database import build_engine, build_session_factory
from authcore.core.logging import configure_logging
from authcore.core.security import PasswordHasher
from authcore.core.tokens import TokenIssuer
from authcore.services.guard import AccessPolicy


def create_app(
    settings: Settings | None = None,
    *,
    session_factory: sessionmaker[Session] | None = None,
    policies: Mapping[str, AccessPolicy] | None = None,
) -> FastAPI:
    """
    Build the API. Settings, hasher and token issuer are created once here and
    shared read-only by every request.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Sync endpoints (bcrypt, DB) run on this pool, off the event loop.
        to_thread.current_default_thread_limiter().total_tokens = settings.AUTH_THREADPOOL_SIZE
        yield

    app = FastAPI(
        title="Book Collection Auth API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.session_factory = session_factory or build_session_factory(
        build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    )
    app.state.hasher = PasswordHasher.from_settings(settings)
    app.state.issuer = TokenIssuer.from_settings(settings)
    app.state.policies = {**DEFAULT_POLICIES, **(policies or {})}

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Book Collection Auth API"}

    return app
