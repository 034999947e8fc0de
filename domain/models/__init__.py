"""
Domain models for the workout parser.

This package contains pure domain models that are independent of
infrastructure concerns (database, API, external services):
- ValidationVerdict: whether raw text is plausibly a workout
- ProvisionalWorkout / ResolvedWorkout / FinalizedWorkout: the workout tree at
  each stage of the pipeline
- CatalogEntry: a canonical exercise in the reference catalog
- UnresolvedMention: audit record for reasoning-assisted selections

Usage:
    >>> from domain.models import ProvisionalWorkout

    >>> workout = ProvisionalWorkout.model_validate({
    ...     "name": "Push Day",
    ...     "date": "2026-01-05",
    ...     "lastModifiedTime": "2026-01-05T10:00:00+00:00",
    ...     "blocks": [{
    ...         "label": "Main",
    ...         "exercises": [{
    ...             "exerciseName": "Bench Press",
    ...             "orderInBlock": 0,
    ...             "prescription": "3 x 8",
    ...             "sets": [{"setNumber": 1}, {"setNumber": 2}, {"setNumber": 3}],
    ...         }],
    ...     }],
    ... })
"""

from domain.models.audit import UnresolvedMention
from domain.models.base import CamelModel
from domain.models.catalog import CatalogEntry
from domain.models.validation import ValidationVerdict
from domain.models.workout import (
    FinalizedBlock,
    FinalizedExercise,
    FinalizedSet,
    FinalizedWorkout,
    ProvisionalBlock,
    ProvisionalExercise,
    ProvisionalWorkout,
    ResolvedBlock,
    ResolvedExercise,
    ResolvedWorkout,
    WeightUnit,
    WorkoutSet,
)

__all__ = [
    "CamelModel",
    "CatalogEntry",
    "FinalizedBlock",
    "FinalizedExercise",
    "FinalizedSet",
    "FinalizedWorkout",
    "ProvisionalBlock",
    "ProvisionalExercise",
    "ProvisionalWorkout",
    "ResolvedBlock",
    "ResolvedExercise",
    "ResolvedWorkout",
    "UnresolvedMention",
    "ValidationVerdict",
    "WeightUnit",
    "WorkoutSet",
]
