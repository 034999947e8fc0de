"""
Validation verdict value object.

Produced once per pipeline run by the WorkoutValidator from the reasoning
service's JSON reply.
"""

from typing import Optional

from pydantic import ConfigDict, Field

from domain.models.base import CamelModel


class ValidationVerdict(CamelModel):
    """
    Decision on whether a piece of text is plausibly a workout.

    Examples:
        >>> verdict = ValidationVerdict.model_validate(
        ...     {"isWorkout": True, "confidence": 0.92, "reason": "Sets and reps"}
        ... )
        >>> verdict.is_workout
        True
    """

    model_config = ConfigDict(frozen=True)

    is_workout: bool = Field(..., description="Whether the text describes a workout")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence in the decision")
    reason: Optional[str] = Field(default=None, description="Short explanation")

    def is_accepted(self, threshold: float) -> bool:
        """True when the verdict allows the pipeline to continue."""
        return self.is_workout and self.confidence >= threshold
