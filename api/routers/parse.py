"""
Workout parse router.

Turns free-form workout text into a finalized workout whose exercises all
reference catalog entries.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field

from api.deps import get_optional_user_id, get_parse_workout_use_case
from application.exceptions import (
    PipelineTimeoutError,
    ResolutionError,
    UpstreamServiceError,
    ValidationRejection,
    WorkoutParserError,
)
from application.use_cases import ParseWorkoutUseCase
from domain.models import CamelModel, FinalizedWorkout

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/workouts",
    tags=["Workouts"],
)


# =============================================================================
# Request/Response Models
# =============================================================================


class ParseWorkoutRequest(CamelModel):
    """Request model for parsing workout text."""
    text: str = Field(..., description="Free-form workout text")
    date: Optional[str] = Field(None, description="Workout date (YYYY-MM-DD); defaults to today")
    weight_unit: Optional[str] = Field(None, description="Unit for set weights: lbs or kg")


class ParseWorkoutResponse(CamelModel):
    """Response model for a parsed workout."""
    workout: FinalizedWorkout
    stages: List[str] = Field(..., description="Pipeline stages the run passed through")
    repaired: bool = Field(False, description="Whether the consistency pass changed the workout")


# Most specific first: MissingExerciseError is a ResolutionError
_STATUS_CODES = (
    (ValidationRejection, 400),
    (ResolutionError, 422),
    (UpstreamServiceError, 502),
    (PipelineTimeoutError, 504),
)


def _status_for(error: WorkoutParserError) -> int:
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/parse", response_model=ParseWorkoutResponse)
async def parse_workout(
    request: ParseWorkoutRequest,
    user_id: Optional[str] = Depends(get_optional_user_id),
    use_case: ParseWorkoutUseCase = Depends(get_parse_workout_use_case),
):
    """
    Parse free-form workout text.

    Returns the finalized workout. Errors map to:
    - 400: text rejected (empty, too long, not a workout, bad date or unit)
    - 422: an exercise could not be resolved
    - 502: the reasoning, embedding or catalog service failed
    - 504: the pipeline deadline elapsed
    """
    try:
        result = await use_case.execute(
            request.text,
            date=request.date,
            weight_unit=request.weight_unit,
            user_id=user_id,
        )
    except WorkoutParserError as e:
        status_code = _status_for(e)
        if status_code >= 500:
            logger.error(f"Workout parse failed at {e.stage}: {e}")
        raise HTTPException(status_code=status_code, detail=e.public_message) from e

    return ParseWorkoutResponse(
        workout=result.workout,
        stages=[stage.value for stage in result.stages],
        repaired=result.repaired,
    )
