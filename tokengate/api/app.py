"""
TokenGate - FastAPI Application Factory
Main entry point for the TokenGate API.

This creates and configures the FastAPI application with:
- Content and network routes
- Middleware (correlation ID, logging, security headers)
- Error handlers
- Health and readiness endpoints
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from neo4j.exceptions import ServiceUnavailable, SessionExpired, TransientError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tokengate import __version__
from tokengate.chains.registry import NetworkRegistry
from tokengate.config import Settings, get_settings
from tokengate.database.client import Neo4jClient
from tokengate.database.schema import SchemaManager
from tokengate.errors import (
    ContentNotFoundError,
    DuplicateContentError,
    InputValidationError,
)
from tokengate.gating.probe import StandardProbeEngine
from tokengate.gating.service import ContentGateService
from tokengate.monitoring import configure_logging
from tokengate.repositories import (
    ContentRepository,
    InMemoryContentRepository,
    Neo4jContentRepository,
)

# Configure logging early - before any other logging occurs
_settings = get_settings()
configure_logging(
    level=_settings.log_level,
    json_output=_settings.app_env == "production",
)

logger = structlog.get_logger(__name__)


class TokenGateApp:
    """
    TokenGate application container.

    Holds references to the core components for dependency injection.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

        # Core components (initialized in lifespan)
        self.db_client: Neo4jClient | None = None
        self.repository: ContentRepository | None = None
        self.networks: NetworkRegistry | None = None
        self.gate_service: ContentGateService | None = None

        # State
        self.started_at: datetime | None = None
        self.is_ready: bool = False

    async def initialize(self) -> None:
        """Initialize all components."""
        logger.info(
            "tokengate_initializing",
            storage_backend=self.settings.storage_backend,
            networks=[n.value for n in self.settings.enabled_networks],
        )

        if self.settings.storage_backend == "neo4j":
            self.db_client = Neo4jClient(settings=self.settings)
            await self.db_client.connect()
            await SchemaManager(self.db_client).setup_all()
            self.repository = Neo4jContentRepository(self.db_client)
        else:
            self.repository = InMemoryContentRepository()

        self.networks = NetworkRegistry.from_settings(self.settings)
        self.gate_service = ContentGateService(
            repository=self.repository,
            networks=self.networks,
            probe_engine=StandardProbeEngine.from_settings(self.settings),
        )

        self.started_at = datetime.now(UTC)
        self.is_ready = True
        logger.info("tokengate_initialized")

    async def shutdown(self) -> None:
        """Close chain clients and the database connection."""
        logger.info("tokengate_shutting_down")
        self.is_ready = False

        if self.networks is not None:
            try:
                await self.networks.close()
            except (RuntimeError, OSError) as e:
                logger.warning("chain_clients_shutdown_failed", error=str(e))

        if self.db_client is not None:
            await self.db_client.close()

        self.gate_service = None
        logger.info("tokengate_shutdown_complete")

    def get_status(self) -> dict[str, Any]:
        """Get current application status."""
        return {
            "status": "ready" if self.is_ready else "starting",
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "uptime_seconds": (
                (datetime.now(UTC) - self.started_at).total_seconds() if self.started_at else 0
            ),
            "storage_backend": self.settings.storage_backend,
            "database": "connected"
            if self.db_client and self.db_client.is_connected
            else "disconnected",
        }


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Initializes and shuts down all components.
    """
    gate: TokenGateApp = app.state.gate
    try:
        await gate.initialize()
        yield
    finally:
        shutdown_timeout = 30.0
        try:
            await asyncio.wait_for(gate.shutdown(), timeout=shutdown_timeout)
        except TimeoutError:
            logger.error("tokengate_shutdown_timeout", timeout_seconds=shutdown_timeout)


def create_app(
    gate: TokenGateApp | None = None,
    title: str = "TokenGate",
    description: str = "Token-gated content service",
    version: str = __version__,
    docs_url: str | None = "/docs",
    redoc_url: str | None = "/redoc",
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        gate: Application container (a new one from settings if omitted)
        title: API title for documentation
        description: API description
        version: API version string
        docs_url: Swagger UI URL (None to disable)
        redoc_url: ReDoc URL (None to disable)

    Returns:
        Configured FastAPI application
    """
    gate = gate or TokenGateApp()
    settings = gate.settings

    if settings.app_env == "production":
        docs_url = None
        redoc_url = None

    app = FastAPI(
        title=title,
        description=description,
        version=version,
        docs_url=docs_url,
        redoc_url=redoc_url,
        debug=settings.debug,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "content", "description": "Token-gated content"},
            {"name": "networks", "description": "Supported networks"},
        ],
    )

    app.state.gate = gate

    cors_origins = settings.cors_origins_list
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=False,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type", "X-Correlation-ID"],
        )

    from tokengate.api.middleware import (
        CorrelationIdMiddleware,
        RequestLoggingMiddleware,
        RequestSizeLimitMiddleware,
        SecurityHeadersMiddleware,
    )

    # Order matters: the last middleware added runs first
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=(settings.app_env != "development"))
    app.add_middleware(RequestSizeLimitMiddleware, max_content_length=1024 * 1024)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    # Exception handlers
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.detail,
                "status_code": exc.status_code,
                "path": str(request.url.path),
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Submitted values are left out of the response
        sanitized_errors = [
            {
                "loc": error.get("loc", []),
                "type": error.get("type", "unknown"),
                "msg": error.get("msg", "Validation failed"),
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=422,
            content={
                "error": "Validation error",
                "details": sanitized_errors,
                "path": str(request.url.path),
            },
        )

    @app.exception_handler(InputValidationError)
    async def input_validation_handler(
        request: Request, exc: InputValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "error": "Validation error",
                "field": exc.field,
                "detail": str(exc),
                "path": str(request.url.path),
            },
        )

    @app.exception_handler(DuplicateContentError)
    async def duplicate_content_handler(
        request: Request, exc: DuplicateContentError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={
                "error": "Content already exists for this token",
                "token_address": exc.token_address,
                "path": str(request.url.path),
            },
        )

    @app.exception_handler(ContentNotFoundError)
    async def content_not_found_handler(
        request: Request, exc: ContentNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={
                "error": "Content not found",
                "token_address": exc.token_address,
                "path": str(request.url.path),
            },
        )

    @app.exception_handler(ServiceUnavailable)
    async def database_unavailable_handler(
        request: Request, exc: ServiceUnavailable
    ) -> JSONResponse:
        logger.error("database_unavailable", path=str(request.url.path), error=str(exc))
        return JSONResponse(
            status_code=503,
            content={
                "error": "Database temporarily unavailable",
                "path": str(request.url.path),
                "retry_after": 5,
            },
            headers={"Retry-After": "5"},
        )

    @app.exception_handler(SessionExpired)
    async def database_session_expired_handler(
        request: Request, exc: SessionExpired
    ) -> JSONResponse:
        logger.warning("database_session_expired", path=str(request.url.path), error=str(exc))
        return JSONResponse(
            status_code=503,
            content={
                "error": "Database session expired, please retry",
                "path": str(request.url.path),
                "retry_after": 1,
            },
            headers={"Retry-After": "1"},
        )

    @app.exception_handler(TransientError)
    async def database_transient_error_handler(
        request: Request, exc: TransientError
    ) -> JSONResponse:
        logger.warning("database_transient_error", path=str(request.url.path), error=str(exc))
        return JSONResponse(
            status_code=503,
            content={
                "error": "Database temporarily unavailable, please retry",
                "path": str(request.url.path),
                "retry_after": 2,
            },
            headers={"Retry-After": "2"},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_exception", path=str(request.url.path), error=str(exc))
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "path": str(request.url.path),
            },
        )

    # Include routers
    from tokengate.api.routes import content, networks

    app.include_router(content.router, prefix="/api/v1", tags=["content"])
    app.include_router(networks.router, prefix="/api/v1", tags=["networks"])

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, Any]:
        return {
            "name": title,
            "version": version,
            "status": gate.get_status(),
        }

    # Health check (lightweight)
    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "healthy" if gate.is_ready else "starting"}

    # Readiness check, including database connectivity when Neo4j backed
    @app.get("/ready", include_in_schema=False)
    async def ready() -> Response:
        if not gate.is_ready:
            return JSONResponse(status_code=503, content={"status": "not_ready"})

        if gate.db_client is not None:
            health = await gate.db_client.health_check()
            if health.get("status") != "healthy":
                return JSONResponse(
                    status_code=503,
                    content={"status": "degraded", "reason": "database_unreachable"},
                    headers={"Retry-After": "5"},
                )
        return JSONResponse(content={"status": "ready"})

    logger.info("fastapi_app_created", title=title, version=version, docs_url=docs_url)

    return app


def run_server(
    host: str | None = None,
    port: int | None = None,
    reload: bool = False,
) -> None:
    """
    Run the TokenGate server.

    For development use:
        python -m tokengate.api.app

    For production use:
        uvicorn tokengate.api.app:create_app --factory --host 0.0.0.0 --port 8000
    """
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "tokengate.api.app:create_app",
        factory=True,
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run_server(reload=True)
