"""
Workout structures produced by the parsing pipeline.

Three shapes share the same block/exercise/set layout:

- ProvisionalWorkout: output of the structure extractor; exercises carry the
  free-text name exactly as written.
- ResolvedWorkout: every exercise is bound to a catalog identifier.
- FinalizedWorkout: every node carries a storage-level UUID and exercises
  carry the catalog slug.

Quantities the user fills in later (reps, weight, duration) are deliberately
absent; only the prescription description and the set count come from text.
"""

from typing import List, Literal, Optional

from pydantic import Field

from domain.models.base import CamelModel

WeightUnit = Literal["lbs", "kg"]


class WorkoutSet(CamelModel):
    """A single set placeholder within an exercise."""

    set_number: int = Field(..., ge=1, description="1-based set position")
    weight_unit: WeightUnit = Field(default="lbs", description="Unit for the weight the user logs")
    rpe: Optional[float] = Field(default=None, ge=1, le=10, description="Target RPE")
    notes: Optional[str] = Field(default=None, description="Set-specific notes")


# =============================================================================
# Provisional (free-text names)
# =============================================================================


class ProvisionalExercise(CamelModel):
    """
    Exercise mention as extracted from text, before resolution.

    Examples:
        >>> mention = ProvisionalExercise(
        ...     exercise_name="Bench Press",
        ...     order_in_block=0,
        ...     prescription="3 x 8",
        ...     sets=[WorkoutSet(set_number=n) for n in (1, 2, 3)],
        ... )
    """

    exercise_name: str = Field(..., min_length=1, description="Free-text exercise name")
    order_in_block: int = Field(default=0, ge=0, description="Position within the block")
    prescription: Optional[str] = Field(
        default=None,
        description="Formatted prescription, e.g. '3 x 8-10 (Rest 2 min)'",
    )
    notes: Optional[str] = None
    sets: List[WorkoutSet] = Field(..., min_length=1)


class ProvisionalBlock(CamelModel):
    """Group of exercise mentions performed together."""

    label: Optional[str] = Field(default=None, description="Block label, e.g. 'Superset A'")
    notes: Optional[str] = None
    exercises: List[ProvisionalExercise] = Field(..., min_length=1)


class ProvisionalWorkout(CamelModel):
    """Workout tree with free-text exercise names."""

    name: str = Field(..., min_length=1)
    notes: Optional[str] = None
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD")
    last_modified_time: str = Field(..., description="ISO-8601 timestamp")
    blocks: List[ProvisionalBlock] = Field(..., min_length=1)

    def exercise_names(self) -> List[str]:
        """Every free-text name in mention order, duplicates included."""
        return [exercise.exercise_name for block in self.blocks for exercise in block.exercises]


# =============================================================================
# Resolved (catalog identifiers)
# =============================================================================


class ResolvedExercise(CamelModel):
    """Exercise instance bound to a catalog identifier."""

    exercise_id: str = Field(..., min_length=1, description="Catalog identifier")
    original_name: Optional[str] = Field(
        default=None, description="Free-text name the identifier was resolved from"
    )
    order_in_block: int = Field(default=0, ge=0)
    prescription: Optional[str] = None
    notes: Optional[str] = None
    sets: List[WorkoutSet] = Field(..., min_length=1)


class ResolvedBlock(CamelModel):
    label: Optional[str] = None
    notes: Optional[str] = None
    exercises: List[ResolvedExercise] = Field(..., min_length=1)


class ResolvedWorkout(CamelModel):
    """Workout tree where every exercise references the catalog."""

    name: str = Field(..., min_length=1)
    notes: Optional[str] = None
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    last_modified_time: str
    blocks: List[ResolvedBlock] = Field(..., min_length=1)

    def exercise_ids(self) -> List[str]:
        """Every exercise identifier in mention order, duplicates included."""
        return [exercise.exercise_id for block in self.blocks for exercise in block.exercises]


# =============================================================================
# Finalized (storage identifiers)
# =============================================================================


class FinalizedSet(WorkoutSet):
    id: str


class FinalizedExercise(CamelModel):
    id: str
    exercise_id: str
    exercise_slug: str
    original_name: Optional[str] = None
    order_in_block: int = 0
    prescription: Optional[str] = None
    notes: Optional[str] = None
    sets: List[FinalizedSet]


class FinalizedBlock(CamelModel):
    id: str
    label: Optional[str] = None
    notes: Optional[str] = None
    exercises: List[FinalizedExercise]


class FinalizedWorkout(CamelModel):
    """
    Database-ready workout returned by the pipeline.

    Serialize with ``model_dump(by_alias=True)`` for camelCase output.
    """

    id: str
    name: str
    notes: Optional[str] = None
    date: str
    last_modified_time: str
    blocks: List[FinalizedBlock]
