"""
Application factory for FastAPI.

The factory pattern allows for:
- Easy testing with custom settings
- Multiple app instances with different configurations
- Clear separation of app creation from route definitions

Usage:
    from backend.main import create_app
    from backend.settings import Settings

    # Default app (uses get_settings())
    app = create_app()

    # Test app with custom settings
    test_settings = Settings(environment="test", _env_file=None)
    test_app = create_app(settings=test_settings)
"""

import logging
import os
from typing import Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Args:
        settings: Optional Settings instance. If not provided, uses get_settings()
                  which loads from environment variables.

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    _init_sentry(settings)

    app = FastAPI(
        title="Workout Parser API",
        description="Parses free-form workout text and resolves exercises against the catalog",
        version="1.0.0",
    )

    _configure_cors(app)
    _include_routers(app)
    _log_feature_flags(settings)

    return app


def _init_sentry(settings: Settings) -> None:
    """Initialize Sentry SDK if DSN is configured."""
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
            profiles_sample_rate=0.1,
        )
        logger.info("Sentry initialized for workout parser")


def _configure_cors(app: FastAPI) -> None:
    """Configure CORS middleware for the application."""
    trusted_origins = [
        "http://localhost:3000",
        "http://localhost:3001",
    ]
    production_origins = os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",")
    trusted_origins.extend([origin.strip() for origin in production_origins if origin.strip()])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=trusted_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _include_routers(app: FastAPI) -> None:
    """Include all API routers in the application."""
    from api.routers import health_router, parse_router

    # Health router (no prefix - /health at root)
    app.include_router(health_router)
    app.include_router(parse_router)


def _log_feature_flags(settings: Settings) -> None:
    """Log the status of optional integrations at startup."""
    logger.info(f"Exercise catalog backend: {settings.catalog_backend}")

    if settings.embeddings_configured:
        logger.info(f"Semantic matching enabled ({settings.embedding_model})")
    else:
        logger.info("Semantic matching disabled (no OpenAI key or SEMANTIC_SEARCH_ENABLED=false)")

    if not settings.consistency_repair_enabled:
        logger.warning("Consistency repair pass is disabled")

    if not settings.allow_exercise_creation:
        logger.info("Exercise creation disabled; unmatched names fail resolution")


# Default app instance for uvicorn
# This allows: uvicorn backend.main:app --reload
app = create_app()
