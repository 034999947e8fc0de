"""
Domain layer for the workout parser.

This package contains pure domain models that are independent of
infrastructure concerns (database, API, external services).
"""

from domain.models import (
    CatalogEntry,
    FinalizedWorkout,
    ProvisionalWorkout,
    ResolvedWorkout,
    UnresolvedMention,
    ValidationVerdict,
)

__all__ = [
    "CatalogEntry",
    "FinalizedWorkout",
    "ProvisionalWorkout",
    "ResolvedWorkout",
    "UnresolvedMention",
    "ValidationVerdict",
]
