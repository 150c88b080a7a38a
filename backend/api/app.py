"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.config import get_settings as get_core_settings
from shared.exceptions import (
    TrustCircleError,
    NotFoundError,
    AlreadyExistsError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    TransientStoreError,
)
from shared.store import TransactionConflictError

from .config import get_settings
from .models import ErrorResponse
from .routes import health, users
from modules.connections.routes import router as connections_router
from modules.connections.routes import requests_router as connection_requests_router
from modules.vaults.routes import router as vaults_router
from modules.events.routes import router as events_router
from modules.needs.routes import router as needs_router

logger = logging.getLogger(__name__)

# Most specific first; the first matching base wins.
ERROR_STATUS_CODES: list[tuple[type[TrustCircleError], int]] = [
    (TransactionConflictError, 409),
    (NotFoundError, 404),
    (AlreadyExistsError, 409),
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (TransientStoreError, 503),
    (ExternalServiceError, 503),
]


def status_code_for(error: TrustCircleError) -> int:
    """HTTP status for a domain error; 500 for unmapped subclasses."""
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


async def trustcircle_error_handler(request: Request, exc: TrustCircleError) -> JSONResponse:
    """Render domain errors as ErrorResponse bodies."""
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    else:
        logger.debug(f"{request.method} {request.url.path} rejected: {exc.code}")
    body = ErrorResponse(**exc.to_dict())
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic.
    """
    # Startup
    settings = get_settings()
    core = get_core_settings()
    logger.info(
        f"Starting TrustCircle API on {settings.host}:{settings.port} "
        f"({core.document_store} document store)"
    )
    yield
    # Shutdown
    logger.info("Shutting down TrustCircle API")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()
    core = get_core_settings()

    app = FastAPI(
        title=core.app_name,
        description="Trust-tiered connections and vault sharing API",
        version=core.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_exception_handler(TrustCircleError, trustcircle_error_handler)

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(connections_router, prefix="/api/connections", tags=["connections"])
    app.include_router(
        connection_requests_router,
        prefix="/api/connection-requests",
        tags=["connection-requests"],
    )
    app.include_router(vaults_router, prefix="/api/vaults", tags=["vaults"])
    app.include_router(events_router, prefix="/api/events", tags=["events"])
    app.include_router(needs_router, prefix="/api/needs", tags=["needs"])

    return app


# Application instance for uvicorn
app = create_app()
