"""
FastAPI application for orchlink.

`create_app()` wires the pieces once per process:

    settings -> TokenService (fails fast without a secret)
             -> repository (opened in lifespan, closed on shutdown)
             -> OrchestraService
             -> AuthorizationGate + routers
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orchlink.api.errors import install_error_handlers
from orchlink.api.routes import attendance, concerts, contact, practices, scores
from orchlink.auth.jwt import TokenService
from orchlink.auth.policies import AuthorizationGate
from orchlink.auth.routes import router as auth_router
from orchlink.config import Settings, get_settings
from orchlink.integrations.sentry import init_sentry
from orchlink.services.orchestra import OrchestraService
from orchlink.storage.base import OrchestraRepository
from orchlink.storage.sql import SqlRepository

logger = logging.getLogger(__name__)


def create_repository(settings: Settings) -> OrchestraRepository:
    """The production repository for these settings."""
    return SqlRepository(
        settings.database_url,
        timeout_seconds=settings.database_timeout_seconds,
        echo=settings.debug,
    )


def create_app(
    settings: Settings | None = None,
    repository: OrchestraRepository | None = None,
) -> FastAPI:
    """
    Build the application.

    Raises ConfigurationError when the JWT secret is missing, so a
    misconfigured process never starts serving.
    """
    settings = settings or get_settings()
    tokens = TokenService.from_settings(settings)
    repository = repository or create_repository(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_sentry(settings)
        await repository.open()
        logger.info(f"orchlink API starting in {settings.environment} mode")
        try:
            yield
        finally:
            await repository.close()
            logger.info("orchlink API shut down")

    app = FastAPI(
        title="orchlink API",
        description="Concerts, attendance forms, scores, rehearsals and contact details for an orchestra",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.tokens = tokens
    app.state.repository = repository
    app.state.service = OrchestraService(repository)

    # Added first so CORS wraps it and answers preflights before the gate runs.
    app.add_middleware(AuthorizationGate, tokens=tokens, settings=settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(concerts.router)
    app.include_router(attendance.router)
    app.include_router(scores.router)
    app.include_router(practices.router)
    app.include_router(contact.router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "orchlink-api"}

    return app
