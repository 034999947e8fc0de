"""
Centralized settings configuration using Pydantic BaseSettings.

All environment variables are defined here with types, defaults, and validation.
Use get_settings() for dependency injection compatibility in FastAPI.

Usage:
    from backend.settings import get_settings, Settings

    # In FastAPI endpoints (dependency injection)
    @app.get("/")
    def read_root(settings: Settings = Depends(get_settings)):
        return {"environment": settings.environment}

    # Direct access (module-level)
    settings = get_settings()
    print(settings.lexical_search_limit)
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core Environment
    # -------------------------------------------------------------------------
    environment: str = Field(
        default="development",
        description="Runtime environment: development, staging, production, test",
    )

    # -------------------------------------------------------------------------
    # Supabase Database (exercise catalog + audit)
    # -------------------------------------------------------------------------
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL",
    )
    supabase_service_role_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key (full access)",
    )
    supabase_anon_key: Optional[str] = Field(
        default=None,
        description="Supabase anonymous key (limited access)",
    )

    @property
    def supabase_key(self) -> Optional[str]:
        """Get the best available Supabase key (service role preferred)."""
        return self.supabase_service_role_key or self.supabase_anon_key

    catalog_backend: Literal["supabase", "memory"] = Field(
        default="supabase",
        description="Exercise catalog implementation to use",
    )
    catalog_seed_path: Optional[str] = Field(
        default=None,
        description="YAML file seeding the in-memory catalog",
    )

    # -------------------------------------------------------------------------
    # External Services - Anthropic (reasoning service)
    # -------------------------------------------------------------------------
    anthropic_api_key: Optional[str] = Field(
        default=None,
        description="Anthropic API key for the reasoning service",
    )
    reasoning_fast_model: str = Field(
        default="claude-3-5-haiku-20241022",
        description="Model used for the fast tier (validation, resolution)",
    )
    reasoning_smart_model: str = Field(
        default="claude-sonnet-4-5-20250929",
        description="Model used for the smart tier (extraction, repair)",
    )
    reasoning_timeout_seconds: float = Field(
        default=60.0,
        description="Per-request timeout for reasoning-service calls",
    )

    # -------------------------------------------------------------------------
    # External Services - OpenAI (embeddings)
    # -------------------------------------------------------------------------
    openai_api_key: Optional[str] = Field(
        default=None,
        description="OpenAI API key for embedding generation",
    )
    embedding_model: str = Field(
        default="text-embedding-3-small",
        description="OpenAI embedding model name",
    )
    semantic_search_enabled: bool = Field(
        default=True,
        description="Use embeddings for resolution when an OpenAI key is configured",
    )

    @property
    def embeddings_configured(self) -> bool:
        """Whether semantic matching can run."""
        return self.semantic_search_enabled and bool(self.openai_api_key)

    # -------------------------------------------------------------------------
    # Observability - Helicone / Sentry
    # -------------------------------------------------------------------------
    helicone_enabled: bool = Field(
        default=False,
        description="Proxy AI calls through Helicone",
    )
    helicone_api_key: Optional[str] = Field(
        default=None,
        description="Helicone API key",
    )
    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN for error tracking",
    )

    # -------------------------------------------------------------------------
    # Workout Parser - Validation
    # -------------------------------------------------------------------------
    workout_acceptance_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Minimum validator confidence to accept text as a workout",
    )
    max_input_length: int = Field(
        default=10000,
        gt=0,
        description="Maximum workout text length in characters",
    )
    default_weight_unit: Literal["lbs", "kg"] = Field(
        default="lbs",
        description="Weight unit used when the caller does not supply one",
    )

    # -------------------------------------------------------------------------
    # Workout Parser - Resolution
    # -------------------------------------------------------------------------
    semantic_similarity_threshold: float = Field(
        default=0.75,
        ge=0.0,
        le=1.0,
        description="Minimum cosine similarity for a semantic match",
    )
    semantic_search_limit: int = Field(
        default=5,
        gt=0,
        description="Nearest neighbours fetched per semantic search",
    )
    lexical_search_limit: int = Field(
        default=50,
        gt=0,
        description="Candidates fetched per lexical search before re-ranking",
    )
    max_tool_searches: int = Field(
        default=3,
        ge=0,
        description="Catalog searches the reasoning service may run per exercise",
    )
    max_tool_turns: int = Field(
        default=6,
        gt=0,
        description="Model turns per tool negotiation before giving up",
    )
    allow_exercise_creation: bool = Field(
        default=True,
        description="Offer the create_exercise tool to the reasoning service",
    )

    # -------------------------------------------------------------------------
    # Workout Parser - Pipeline
    # -------------------------------------------------------------------------
    consistency_repair_enabled: bool = Field(
        default=True,
        description="Run the consistency repair pass after resolution",
    )
    pipeline_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Overall deadline for one parse run",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is a valid value."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {valid_environments}"
            )
        return v.lower()

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    For testing, you can clear the cache with get_settings.cache_clear().

    Returns:
        Settings: Application settings instance
    """
    return Settings()
