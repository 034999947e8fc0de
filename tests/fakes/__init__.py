"""
Fake implementations of the application ports for testing.

This package provides in-memory fakes for fast, isolated testing. No
database, model provider or network access required.

Features:
- All fakes implement the same Protocol interfaces as real implementations
- Every fake keeps a call log for assertions
- Factory functions for common test scenarios

Usage:
    from tests.fakes import FakeExerciseCatalog, create_exercise_catalog

    catalog = create_exercise_catalog()
    catalog.add("Landmine Press", tags=["shoulders"])
"""
from typing import Iterable, Optional

from tests.fakes.embedding_service import FakeEmbeddingService, token_vector
from tests.fakes.exercise_catalog import FakeExerciseCatalog
from tests.fakes.reasoning_service import FakeReasoningService
from tests.fakes.unresolved_mention_repository import FakeUnresolvedMentionRepository
from tests.fakes.workouts import (
    TEST_DATE,
    TEST_TIMESTAMP,
    extraction_reply,
    provisional_workout,
    resolved_payload,
    resolved_workout,
)


DEFAULT_EXERCISES = (
    ("Barbell Bench Press", ("chest", "barbell")),
    ("Dumbbell Bench Press", ("chest", "dumbbell")),
    ("Barbell Back Squat", ("legs", "barbell")),
    ("Romanian Deadlift", ("hamstrings", "barbell")),
    ("Pull Up", ("back", "bodyweight")),
    ("Overhead Press", ("shoulders", "barbell")),
)


# =============================================================================
# Factory Functions
# =============================================================================


def create_exercise_catalog(
    names: Optional[Iterable[str]] = None,
    *,
    with_embeddings: bool = False,
) -> FakeExerciseCatalog:
    """
    Create a FakeExerciseCatalog with a small standard catalog.

    Args:
        names: Exercise names to add instead of the defaults
        with_embeddings: Store token_vector() embeddings on each entry

    Returns:
        FakeExerciseCatalog with deterministic "ex-<slug>" ids
    """
    catalog = FakeExerciseCatalog()
    exercises = [(name, ()) for name in names] if names is not None else DEFAULT_EXERCISES
    for name, tags in exercises:
        catalog.add(name, tags=tags, embedding=token_vector(name) if with_embeddings else None)
    return catalog


__all__ = [
    # Fakes
    "FakeEmbeddingService",
    "FakeExerciseCatalog",
    "FakeReasoningService",
    "FakeUnresolvedMentionRepository",
    # Factories
    "create_exercise_catalog",
    "token_vector",
    "DEFAULT_EXERCISES",
    # Workout builders
    "TEST_DATE",
    "TEST_TIMESTAMP",
    "extraction_reply",
    "provisional_workout",
    "resolved_payload",
    "resolved_workout",
]
