"""
Infrastructure layer for the workout parser.

Concrete implementations of the application ports:
- db/: Supabase-backed catalog and audit repository, plus in-memory variants
  for local development
"""

from infrastructure.db import (
    InMemoryExerciseCatalog,
    InMemoryUnresolvedMentionRepository,
    SupabaseExerciseCatalog,
    SupabaseUnresolvedMentionRepository,
)

__all__ = [
    "InMemoryExerciseCatalog",
    "InMemoryUnresolvedMentionRepository",
    "SupabaseExerciseCatalog",
    "SupabaseUnresolvedMentionRepository",
]
