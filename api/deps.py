"""
FastAPI dependency providers for the workout parser.

This module wires the parse pipeline from settings. Providers return
interface types (Protocols) rather than concrete implementations so tests can
override them with fakes.

Architecture:
- Settings, the Supabase client and AI clients are cached per-process
- The audit notifier is process-wide so background writes outlive the request
- The use case is assembled per-request from the cached collaborators

Usage in routers:
    from api.deps import get_parse_workout_use_case

    @router.post("/workouts/parse")
    async def parse(use_case: ParseWorkoutUseCase = Depends(get_parse_workout_use_case)):
        ...

Testing:
    app.dependency_overrides[get_parse_workout_use_case] = lambda: use_case
"""

import logging
import pathlib
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException
from supabase import AsyncClient, acreate_client

# Protocol types (interfaces)
from application.ports import (
    EmbeddingService,
    ExerciseCatalog,
    ReasoningService,
    UnresolvedMentionRepository,
)
from application.use_cases import ParseWorkoutUseCase

# Concrete implementations
from backend.ai import ReasoningClient
from backend.core.lexical_matcher import LexicalMatcher
from backend.core.semantic_matcher import SemanticMatcher
from backend.services.audit_notifier import AuditNotifier
from backend.services.consistency_repairer import ConsistencyRepairer
from backend.services.embedding_service import EmbeddingService as OpenAIEmbeddingService
from backend.services.exercise_creator import ExerciseCreator
from backend.services.exercise_resolver import ExerciseResolver
from backend.services.reasoning_resolver import ReasoningAssistedResolver
from backend.services.structure_extractor import StructureExtractor
from backend.services.workout_finalizer import WorkoutFinalizer
from backend.services.workout_validator import WorkoutValidator
from backend.settings import Settings, get_settings as _get_settings
from infrastructure import (
    InMemoryExerciseCatalog,
    InMemoryUnresolvedMentionRepository,
    SupabaseExerciseCatalog,
    SupabaseUnresolvedMentionRepository,
)

logger = logging.getLogger(__name__)

ROOT = pathlib.Path(__file__).resolve().parents[1]
DEFAULT_CATALOG_SEED = ROOT / "shared" / "catalog" / "exercises.yaml"

_supabase_client: Optional[AsyncClient] = None
_audit_notifier: Optional[AuditNotifier] = None


# =============================================================================
# Settings Provider
# =============================================================================


def get_settings() -> Settings:
    """
    Get application settings.

    Returns cached Settings instance from backend.settings.

    Returns:
        Settings: Application settings instance
    """
    return _get_settings()


# =============================================================================
# Supabase Client Provider
# =============================================================================


async def get_supabase_client() -> Optional[AsyncClient]:
    """
    Get the async Supabase client (created once per process).

    Returns:
        AsyncClient: Supabase client instance, or None if not configured
    """
    global _supabase_client

    settings = _get_settings()
    if not settings.supabase_url or not settings.supabase_key:
        return None

    if _supabase_client is None:
        _supabase_client = await acreate_client(settings.supabase_url, settings.supabase_key)
    return _supabase_client


async def get_supabase_client_required(
    client: Optional[AsyncClient] = Depends(get_supabase_client),
) -> AsyncClient:
    """
    Get Supabase client, raising if not configured.

    Raises:
        HTTPException: 503 if Supabase is not configured
    """
    if client is None:
        raise HTTPException(
            status_code=503,
            detail="Database not available. Supabase credentials not configured.",
        )
    return client


# =============================================================================
# Catalog and Audit Providers
# =============================================================================


@lru_cache
def _memory_catalog(seed_path: str) -> InMemoryExerciseCatalog:
    return InMemoryExerciseCatalog.from_yaml(seed_path)


@lru_cache
def _memory_audit_repo() -> InMemoryUnresolvedMentionRepository:
    return InMemoryUnresolvedMentionRepository()


async def get_exercise_catalog(
    settings: Settings = Depends(get_settings),
    client: Optional[AsyncClient] = Depends(get_supabase_client),
) -> ExerciseCatalog:
    """
    Get the ExerciseCatalog implementation selected by CATALOG_BACKEND.

    Raises:
        HTTPException: 503 if the Supabase backend is selected but not configured
    """
    if settings.catalog_backend == "memory":
        return _memory_catalog(settings.catalog_seed_path or str(DEFAULT_CATALOG_SEED))
    return SupabaseExerciseCatalog(await get_supabase_client_required(client))


def get_unresolved_mention_repo(
    settings: Settings = Depends(get_settings),
    client: Optional[AsyncClient] = Depends(get_supabase_client),
) -> Optional[UnresolvedMentionRepository]:
    """
    Get the audit repository, or None when there is nowhere to write.
    """
    if settings.catalog_backend == "memory":
        return _memory_audit_repo()
    if client is None:
        return None
    return SupabaseUnresolvedMentionRepository(client)


def get_audit_notifier(
    repository: Optional[UnresolvedMentionRepository] = Depends(get_unresolved_mention_repo),
) -> AuditNotifier:
    """Process-wide notifier; keeps background audit writes referenced."""
    global _audit_notifier

    if _audit_notifier is None:
        _audit_notifier = AuditNotifier(repository)
    return _audit_notifier


# =============================================================================
# AI Service Providers
# =============================================================================


@lru_cache
def _reasoning_client() -> ReasoningClient:
    return ReasoningClient(settings=_get_settings())


@lru_cache
def _embedding_service(model: str) -> OpenAIEmbeddingService:
    return OpenAIEmbeddingService(model=model)


def get_reasoning_service() -> ReasoningService:
    """
    Get the ReasoningService implementation (Anthropic, cached).

    Raises:
        HTTPException: 503 if no Anthropic key is configured
    """
    if not _get_settings().anthropic_api_key:
        raise HTTPException(
            status_code=503,
            detail="Reasoning service not available. Anthropic API key not configured.",
        )
    return _reasoning_client()


def get_embedding_service(
    settings: Settings = Depends(get_settings),
) -> Optional[EmbeddingService]:
    """
    Get the EmbeddingService, or None when semantic matching is off.
    """
    if not settings.embeddings_configured:
        return None
    return _embedding_service(settings.embedding_model)


# =============================================================================
# Use Case Providers
# =============================================================================


def build_parse_workout_use_case(
    settings: Settings,
    catalog: ExerciseCatalog,
    reasoning_service: ReasoningService,
    embedding_service: Optional[EmbeddingService] = None,
    audit_notifier: Optional[AuditNotifier] = None,
) -> ParseWorkoutUseCase:
    """
    Assemble the parse pipeline from its collaborators.

    Semantic matching is wired only when an embedding service is given; the
    repair pass only when enabled in settings.
    """
    lexical = LexicalMatcher(catalog, limit=settings.lexical_search_limit)

    semantic = None
    if embedding_service is not None:
        semantic = SemanticMatcher(
            catalog,
            embedding_service,
            threshold=settings.semantic_similarity_threshold,
            limit=settings.semantic_search_limit,
        )

    reasoning_resolver = ReasoningAssistedResolver(
        catalog,
        reasoning_service,
        lexical,
        ExerciseCreator(catalog, embedding_service),
        max_searches=settings.max_tool_searches,
        max_turns=settings.max_tool_turns,
        allow_create=settings.allow_exercise_creation,
    )

    repairer = None
    if settings.consistency_repair_enabled:
        repairer = ConsistencyRepairer(reasoning_service)

    return ParseWorkoutUseCase(
        validator=WorkoutValidator(
            reasoning_service,
            acceptance_threshold=settings.workout_acceptance_threshold,
        ),
        extractor=StructureExtractor(reasoning_service),
        resolver=ExerciseResolver(
            lexical,
            reasoning_resolver,
            semantic_matcher=semantic,
            audit_notifier=audit_notifier,
        ),
        finalizer=WorkoutFinalizer(catalog),
        repairer=repairer,
        timeout_seconds=settings.pipeline_timeout_seconds,
        max_input_length=settings.max_input_length,
        default_weight_unit=settings.default_weight_unit,
    )


def get_parse_workout_use_case(
    settings: Settings = Depends(get_settings),
    catalog: ExerciseCatalog = Depends(get_exercise_catalog),
    reasoning_service: ReasoningService = Depends(get_reasoning_service),
    embedding_service: Optional[EmbeddingService] = Depends(get_embedding_service),
    audit_notifier: AuditNotifier = Depends(get_audit_notifier),
) -> ParseWorkoutUseCase:
    """
    Get ParseWorkoutUseCase with all dependencies injected.

    Returns:
        ParseWorkoutUseCase: Use case for parsing workout text
    """
    return build_parse_workout_use_case(
        settings,
        catalog,
        reasoning_service,
        embedding_service=embedding_service,
        audit_notifier=audit_notifier,
    )


# =============================================================================
# Caller Identity
# =============================================================================


def get_optional_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> Optional[str]:
    """
    Get the caller's user ID from the X-User-Id header, if present.

    Only used to attribute audit records; anonymous callers skip auditing.
    """
    if x_user_id is None:
        return None
    return x_user_id.strip() or None


# =============================================================================
# Exports
# =============================================================================

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
    "build_parse_workout_use_case",
    "get_parse_workout_use_case",
    # Caller identity
    "get_optional_user_id",
]
