"""
FastAPI application factory for the SCM adapter.

Uses lifespan handler for startup/shutdown with async resource management.
The adapter (and its single ResilientInvoker) lives on ``app.state.scm``.
"""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from scm_github.config import settings
from scm_github.errors import InvalidIdentityFormat
from scm_github.github_client import GitHubClient
from scm_github.logging_config import configure_logging, get_logger
from scm_github.scm import GithubScm

from .health import router as health_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan handler for startup and shutdown."""
    configure_logging(
        json_logs=settings.json_logs, log_level=settings.log_level, app_name=settings.app_name
    )
    logger.info("Starting SCM adapter", version="0.1.0")

    http_client: httpx.AsyncClient | None = None
    if getattr(app.state, "scm", None) is None:
        options = settings.scm_options()
        http_client = httpx.AsyncClient()
        provider = GitHubClient(
            http_client,
            api_url=options.github.api_url,
            user_agent=options.github.user_agent,
        )
        app.state.scm = GithubScm(options, provider=provider)
        logger.info("GitHub provider initialized", api_url=options.github.api_url)

    yield

    logger.info("Shutting down SCM adapter")
    if http_client is not None:
        await http_client.aclose()


def create_application(scm: GithubScm | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="SCM GitHub adapter",
        description="Repository identity, webhook normalization and status reporting for GitHub",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    app.state.scm = scm

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):  # type: ignore[no-untyped-def]
        """Ensure every request has a request ID for logging correlation."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        structlog.contextvars.unbind_contextvars("request_id")

        return response

    @app.exception_handler(InvalidIdentityFormat)
    async def invalid_identity_handler(
        request: Request, exc: InvalidIdentityFormat
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler for unhandled errors."""
        logger.error("Unhandled exception", exc_info=exc, path=str(request.url.path))
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # Health endpoints (no prefix)
    app.include_router(health_router)

    from scm_github.api.routers.scm import router as scm_router

    app.include_router(scm_router, prefix=settings.api_prefix)

    from scm_github.api.routers.webhooks import router as webhooks_router

    app.include_router(webhooks_router, prefix=settings.api_prefix)

    return app


# Application instance
app = create_application()
