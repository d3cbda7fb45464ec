"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import redis.asyncio as aioredis
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from wholesale_bridge.api.router import api_router
from wholesale_bridge.core.config import settings
from wholesale_bridge.core.errors import BridgeError
from wholesale_bridge.core.logging_config import (
    generate_request_id,
    request_id_var,
    setup_logging,
)
from wholesale_bridge.core.rate_limit import limiter
from wholesale_bridge.schemas.common import ErrorResponse
from wholesale_bridge.stores.app_config import AppConfigStore
from wholesale_bridge.stores.credentials import (
    CredentialStore,
    InMemoryCredentialStore,
    RedisCredentialStore,
)
from wholesale_bridge.stores.states import (
    AuthorizationStateStore,
    InMemoryStateStore,
    RedisStateStore,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    setup_logging(debug=settings.debug)
    logger.info("Starting %s v%s", settings.project_name, settings.version)
    logger.info("Environment: %s, storage: %s", settings.environment, settings.storage_backend)
    yield
    logger.info("Shutting down...")
    redis_client: aioredis.Redis | None = getattr(app.state, "redis", None)
    if redis_client is not None:
        await redis_client.aclose()


def _default_stores(app: FastAPI) -> tuple[CredentialStore, AuthorizationStateStore]:
    if settings.storage_backend == "redis":
        redis_client = aioredis.from_url(str(settings.redis_url), decode_responses=True)
        app.state.redis = redis_client
        return (
            RedisCredentialStore(redis_client, settings.encryption_key),
            RedisStateStore(redis_client),
        )
    return InMemoryCredentialStore(), InMemoryStateStore()


def create_app(
    *,
    credential_store: CredentialStore | None = None,
    state_store: AuthorizationStateStore | None = None,
    app_config_store: AppConfigStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Stores not passed in are built from settings (in-memory or Redis).
    """
    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    if credential_store is None or state_store is None:
        default_credentials, default_states = _default_stores(app)
        if credential_store is None:
            credential_store = default_credentials
        if state_store is None:
            state_store = default_states
    app.state.credential_store = credential_store
    app.state.state_store = state_store
    app.state.app_config_store = app_config_store or AppConfigStore()

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_middleware(SlowAPIMiddleware)

    # The app is embedded in the Shopify admin and served by its own frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=r"https://[a-z0-9][a-z0-9-]*\.myshopify\.com",
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Azan-App-Id", "X-Azan-Secret-Key"],
    )

    # Request ID middleware
    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next: Any) -> Response:
        rid = request.headers.get("X-Request-ID") or generate_request_id()
        request_id_var.set(rid)
        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.exception_handler(BridgeError)
    async def bridge_error_handler(_request: Request, exc: BridgeError) -> JSONResponse:
        """Render typed failures as ``{"error", "code"}`` with their own status."""
        if exc.status_code >= 500:
            logger.error("%s: %s", exc.code, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=exc.message, code=exc.code).model_dump(),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
        """Handle unhandled exceptions with proper JSON response."""
        logger.exception("Unhandled exception: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": settings.project_name,
            "version": settings.version,
            "docs": f"{settings.api_prefix}/docs",
            "health": f"{settings.api_prefix}/health",
        }

    return app


app = create_app()
