"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shared.config import get_settings
from shared.exceptions import TrustCircleError
from shared.store import BaseDocumentStore, Query
from modules.users.repository import USERS_COLLECTION

from ..dependencies import get_container

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    document_store: str
    store: str


def get_document_store() -> BaseDocumentStore:
    """FastAPI dependency for the shared document store."""
    return get_container().store


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=get_settings().app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(store: BaseDocumentStore = Depends(get_document_store)):
    """
    Readiness check endpoint.

    Issues a one-document query against the store; 503 if it fails.
    """
    backend = get_settings().document_store
    try:
        await store.query(Query(collection=USERS_COLLECTION, limit=1))
    except TrustCircleError as e:
        logger.warning(f"Readiness check failed: {e.message}")
        return JSONResponse(
            status_code=503,
            content=ReadinessResponse(
                status="unavailable", document_store=backend, store="unreachable"
            ).model_dump(),
        )
    return ReadinessResponse(status="ready", document_store=backend, store="connected")
