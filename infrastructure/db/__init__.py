"""
Infrastructure database layer.

Supabase-backed implementations of the catalog and audit ports. Clients are
injected, never created here.

Usage:
    from supabase import acreate_client
    from infrastructure.db import SupabaseExerciseCatalog

    client = await acreate_client(SUPABASE_URL, SUPABASE_KEY)
    catalog = SupabaseExerciseCatalog(client)
"""

from infrastructure.db.exercise_catalog import SupabaseExerciseCatalog
from infrastructure.db.in_memory_catalog import (
    InMemoryExerciseCatalog,
    InMemoryUnresolvedMentionRepository,
)
from infrastructure.db.unresolved_mention_repository import SupabaseUnresolvedMentionRepository

__all__ = [
    # Exercise catalog
    "SupabaseExerciseCatalog",
    "InMemoryExerciseCatalog",

    # Unresolved mention audit
    "SupabaseUnresolvedMentionRepository",
    "InMemoryUnresolvedMentionRepository",
]
