"""
Workout Finalizer Service

Last pipeline stage: confirms every resolved exercise identifier exists in the
catalog, attaches its slug, and assigns storage-level UUIDs to the workout,
blocks, exercises and sets. A missing identifier fails loudly.
"""

import asyncio
import logging
import uuid
from typing import Callable, Dict, List, Optional

from application.exceptions import MissingExerciseError
from application.ports import ExerciseCatalog
from domain.models import (
    CatalogEntry,
    FinalizedBlock,
    FinalizedExercise,
    FinalizedSet,
    FinalizedWorkout,
    ResolvedWorkout,
)

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class WorkoutFinalizer:
    """Turns a ResolvedWorkout into a database-ready FinalizedWorkout."""

    def __init__(self, catalog: ExerciseCatalog, id_factory: Callable[[], str] = _new_id):
        self._catalog = catalog
        self._new_id = id_factory

    async def _lookup(self, workout: ResolvedWorkout) -> Dict[str, CatalogEntry]:
        names_by_id: Dict[str, Optional[str]] = {}
        for block in workout.blocks:
            for exercise in block.exercises:
                names_by_id.setdefault(exercise.exercise_id, exercise.original_name)

        exercise_ids: List[str] = list(names_by_id)
        entries = await asyncio.gather(*(self._catalog.find_by_id(eid) for eid in exercise_ids))

        found: Dict[str, CatalogEntry] = {}
        for exercise_id, entry in zip(exercise_ids, entries):
            if entry is None:
                raise MissingExerciseError(exercise_id, names_by_id[exercise_id])
            found[exercise_id] = entry
        return found

    async def finalize(self, workout: ResolvedWorkout, workout_id: Optional[str] = None) -> FinalizedWorkout:
        """
        Assign identifiers and slugs.

        Args:
            workout: Resolved (and repaired) workout
            workout_id: Identifier reserved for this workout earlier in the run

        Returns:
            FinalizedWorkout

        Raises:
            MissingExerciseError: If any exercise id is not in the catalog
        """
        entries = await self._lookup(workout)

        blocks = [
            FinalizedBlock(
                id=self._new_id(),
                label=block.label,
                notes=block.notes,
                exercises=[
                    FinalizedExercise(
                        id=self._new_id(),
                        exercise_id=exercise.exercise_id,
                        exercise_slug=entries[exercise.exercise_id].slug,
                        original_name=exercise.original_name,
                        order_in_block=exercise.order_in_block,
                        prescription=exercise.prescription,
                        notes=exercise.notes,
                        sets=[
                            FinalizedSet(id=self._new_id(), **workout_set.model_dump())
                            for workout_set in exercise.sets
                        ],
                    )
                    for exercise in block.exercises
                ],
            )
            for block in workout.blocks
        ]

        finalized = FinalizedWorkout(
            id=workout_id or self._new_id(),
            name=workout.name,
            notes=workout.notes,
            date=workout.date,
            last_modified_time=workout.last_modified_time,
            blocks=blocks,
        )
        logger.info(f"Finalized workout {finalized.id} with {len(entries)} distinct exercise(s)")
        return finalized
