"""
Workout Validator Service

Gates the parsing pipeline: one low-temperature reasoning call decides whether
the text is plausibly a workout. The verdict is terminal when the text is not
a workout, or when it is but the confidence is below the acceptance bound.
A malformed verdict is an upstream failure; nothing is retried.
"""

import logging

from pydantic import ValidationError

from application.exceptions import UpstreamServiceError, ValidationRejection
from application.ports import ModelTier, ReasoningService
from domain.models import ValidationVerdict

logger = logging.getLogger(__name__)


VALIDATION_SYSTEM_PROMPT = """You decide whether a piece of text describes a workout.

A workout lists exercises or training activities, usually with sets, reps,
durations, distances, loads or rest periods. Training logs, programs, warm-ups
and mobility routines count. Recipes, stories, shopping lists, code and general
questions do not.

Reply with only a JSON object:
{"isWorkout": true|false, "confidence": <number between 0 and 1>, "reason": "<one sentence>"}"""

NOT_A_WORKOUT_MESSAGE = "The provided text does not appear to be workout content."
AMBIGUOUS_MESSAGE = (
    "Unable to confidently determine if this is workout content. "
    "Please provide clearer workout information."
)


class WorkoutValidator:
    """
    Decides whether raw text is a workout.

    Usage:
        >>> validator = WorkoutValidator(reasoning_service)
        >>> verdict = await validator.validate("Bench Press: 3x8 @ 185 lbs")
        >>> validator.ensure_workout(verdict)  # raises ValidationRejection if rejected
    """

    ACCEPTANCE_THRESHOLD = 0.7

    def __init__(self, reasoning_service: ReasoningService, acceptance_threshold: float = ACCEPTANCE_THRESHOLD):
        self._reasoning = reasoning_service
        self.acceptance_threshold = acceptance_threshold

    async def validate(self, text: str) -> ValidationVerdict:
        """
        Ask the reasoning service for a verdict on the text.

        Raises:
            UpstreamServiceError: If the reply does not match the verdict shape
        """
        reply = await self._reasoning.call(
            VALIDATION_SYSTEM_PROMPT,
            f"<text>\n{text}\n</text>",
            model_tier=ModelTier.FAST,
            temperature=0.0,
            max_tokens=256,
            json_mode=True,
        )
        try:
            verdict = ValidationVerdict.model_validate(reply)
        except ValidationError as e:
            raise UpstreamServiceError(
                "reasoning", f"validation verdict did not match expected shape ({e.error_count()} errors)"
            ) from e

        logger.info(
            f"Validation verdict: is_workout={verdict.is_workout} confidence={verdict.confidence:.2f}"
        )
        return verdict

    def ensure_workout(self, verdict: ValidationVerdict) -> None:
        """
        Raise when the verdict does not allow the pipeline to continue.

        Raises:
            ValidationRejection: Not a workout, or a workout below the
                confidence bound (``ambiguous=True``)
        """
        if not verdict.is_workout:
            logger.warning(f"Rejected input as non-workout: {verdict.reason}")
            raise ValidationRejection(NOT_A_WORKOUT_MESSAGE, reason=verdict.reason)

        if verdict.confidence < self.acceptance_threshold:
            logger.warning(
                f"Rejected input as ambiguous (confidence={verdict.confidence:.2f} "
                f"< {self.acceptance_threshold})"
            )
            raise ValidationRejection(AMBIGUOUS_MESSAGE, reason=verdict.reason, ambiguous=True)

    async def check(self, text: str) -> ValidationVerdict:
        """Validate and raise on rejection in one step."""
        verdict = await self.validate(text)
        self.ensure_workout(verdict)
        return verdict
