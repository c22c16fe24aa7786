from __future__ import annotations

import secrets
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response
from structlog.contextvars import bind_contextvars, clear_contextvars

from esignportal.api.errors import register_exception_handlers
from esignportal.api.routes import register_routes
from esignportal.core.config import Settings, get_settings
from esignportal.core.logging import setup_logging
from esignportal.domain.services.session import SessionLocks
from esignportal.infrastructure.db.session import (
    create_engine,
    create_session_factory,
    create_tables,
)
from esignportal.infrastructure.transport import MockTransport

logger = structlog.get_logger()

# One year; the client id outlives any single login.
CLIENT_COOKIE_MAX_AGE = 365 * 24 * 3600


def create_app(
    settings: Settings | None = None,
    *,
    remote_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Application factory for the portal API."""
    setup_logging()
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        engine = create_engine(settings)
        await create_tables(engine)
        app.state.engine = engine
        app.state.session_factory = create_session_factory(engine)
        logger.info(
            "service_startup",
            service=settings.app_name,
            environment=settings.environment,
            version=settings.version,
            mock_only=settings.use_mock_data_only,
        )
        try:
            yield
        finally:
            await engine.dispose()
            logger.info("service_shutdown", service=settings.app_name)

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
    app.state.settings = settings
    app.state.mock_transport = MockTransport()
    app.state.session_locks = SessionLocks()
    app.state.remote_transport = remote_transport

    cors_origins = [
        "http://localhost:3000",  # Next.js dev
        "http://localhost:5173",  # Vite dev
        "http://127.0.0.1:3000",
    ]
    if settings.environment in ["local", "development"]:
        cors_origins.append("*")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins if "*" not in cors_origins else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    register_routes(app)

    @app.middleware("http")
    async def client_context_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("x-request-id", str(uuid4()))
        client_id = request.cookies.get(settings.session_cookie_name)
        issued = client_id is None
        if issued:
            client_id = secrets.token_urlsafe(24)
        request.state.client_id = client_id
        bind_contextvars(
            request_id=request_id,
            path=str(request.url.path),
            method=request.method,
            client_id=client_id,
        )
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            if issued:
                response.set_cookie(
                    settings.session_cookie_name,
                    client_id,
                    max_age=CLIENT_COOKIE_MAX_AGE,
                    httponly=True,
                    samesite="lax",
                )
            return response
        finally:
            clear_contextvars()

    return app


app = create_app()
