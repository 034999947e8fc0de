"""
API package for the workout parser.

This package contains:
- deps.py: FastAPI dependency providers for DI
- routers/: API route handlers
"""

# Re-export dependency providers for convenient access
from api.deps import (
    get_settings,
    get_supabase_client,
    get_supabase_client_required,
    get_exercise_catalog,
    get_unresolved_mention_repo,
    get_audit_notifier,
    get_reasoning_service,
    get_embedding_service,
    get_parse_workout_use_case,
    get_optional_user_id,
)

__all__ = [
    # Settings
    "get_settings",
    # Database
    "get_supabase_client",
    "get_supabase_client_required",
    # Catalog and audit
    "get_exercise_catalog",
    "get_unresolved_mention_repo",
    "get_audit_notifier",
    # AI services
    "get_reasoning_service",
    "get_embedding_service",
    # Use cases
    "get_parse_workout_use_case",
    # Caller identity
    "get_optional_user_id",
]
