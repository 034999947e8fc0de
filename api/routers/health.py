"""
Health check router.

This router provides health check endpoints for monitoring and load balancers.
"""

import logging

from fastapi import APIRouter, Depends

from backend.settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Health"],
)


@router.get("/health")
def health():
    """
    Simple liveness endpoint.

    Returns:
        dict: Status indicator for health checks
    """
    return {"status": "ok"}


@router.get("/health/config")
def health_config(settings: Settings = Depends(get_settings)):
    """
    Report which optional integrations are configured.

    Never returns keys, only whether each integration is available.
    """
    return {
        "environment": settings.environment,
        "catalog_backend": settings.catalog_backend,
        "reasoning_configured": bool(settings.anthropic_api_key),
        "semantic_search": settings.embeddings_configured,
        "consistency_repair": settings.consistency_repair_enabled,
        "exercise_creation": settings.allow_exercise_creation,
    }
