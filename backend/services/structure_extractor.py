"""
Structure Extractor Service

Turns raw workout text into a ProvisionalWorkout with a single reasoning call.
Exercise names stay free text; prescriptions are short descriptive strings and
the numeric targets (reps, weight, duration) are left for the user to enter.
"""

import logging
from typing import Any, Dict

from pydantic import ValidationError

from application.exceptions import UpstreamServiceError
from application.ports import ModelTier, ReasoningService
from domain.models import ProvisionalWorkout, WeightUnit

logger = logging.getLogger(__name__)


EXTRACTION_SYSTEM_PROMPT = "You are a workout text parser. You reply with JSON only."

EXTRACTION_INSTRUCTIONS = """Convert the workout text into this JSON structure:
{
  "name": "workout name from the text",
  "notes": "workout-level notes",
  "blocks": [
    {
      "label": "section name like 'Warm Up' or 'Superset A'",
      "notes": "block-level notes",
      "exercises": [
        {
          "exerciseName": "commonly known name, equipment first (e.g. 'Dumbbell Bench Press')",
          "orderInBlock": 0,
          "prescription": "short formatted prescription",
          "notes": "exercise-level notes",
          "sets": [{"setNumber": 1, "weightUnit": "%(weight_unit)s", "rpe": null, "notes": ""}]
        }
      ]
    }
  ]
}

Rules:
- "2x15" creates 2 set objects numbered 1 and 2.
- Do not put reps, weight or duration in set objects; the user fills these in later.
- When options are offered ("Bike or row"), keep only the FIRST option.
- Unilateral notation ("8/leg", "30 sec/side", "each side") creates one set per repetition of the prescription.
- Exercises in a superset or circuit share the block's set count unless an exercise states otherwise (e.g. the last one has fewer sets).
- Rest time goes in the prescription of the LAST exercise of a multi-exercise block only, unless rest is stated per exercise.
- Use "%(weight_unit)s" as weightUnit on every set.

Prescription format: "Sets x Reps/Range/Duration x Weight (Rest time)", for example
"3 x 8", "3 x 8-10 (Rest 2 min)", "3 x 8 ea.", "3 x 20-30 secs. ea.", "3 x AMAP",
"4 sets", "3 x 5 x 150 lbs", "1 x 5 min", "5 3 1"."""


class StructureExtractor:
    """
    Extracts the block/exercise/set tree from raw workout text.

    Usage:
        >>> extractor = StructureExtractor(reasoning_service)
        >>> workout = await extractor.extract(text, date="2026-01-05",
        ...                                   last_modified_time="2026-01-05T10:00:00+00:00")
    """

    def __init__(self, reasoning_service: ReasoningService, max_tokens: int = 8192):
        self._reasoning = reasoning_service
        self._max_tokens = max_tokens

    async def extract(
        self,
        text: str,
        date: str,
        last_modified_time: str,
        weight_unit: WeightUnit = "lbs",
    ) -> ProvisionalWorkout:
        """
        Extract a provisional workout.

        Args:
            text: Sanitized workout text
            date: Workout date (YYYY-MM-DD), supplied by the caller
            last_modified_time: ISO-8601 timestamp, supplied by the caller
            weight_unit: Unit written onto every set

        Returns:
            ProvisionalWorkout with free-text exercise names

        Raises:
            UpstreamServiceError: If the reply does not match the workout shape
        """
        instructions = EXTRACTION_INSTRUCTIONS % {"weight_unit": weight_unit}
        reply = await self._reasoning.call(
            EXTRACTION_SYSTEM_PROMPT,
            f"<text>\n{text}\n</text>\n\n<instructions>\n{instructions}\n</instructions>",
            model_tier=ModelTier.SMART,
            temperature=0.0,
            max_tokens=self._max_tokens,
            json_mode=True,
        )

        if not isinstance(reply, dict):
            raise UpstreamServiceError("reasoning", "extracted workout was not a JSON object")

        payload = self._with_defaults(reply, date, last_modified_time, weight_unit)
        try:
            workout = ProvisionalWorkout.model_validate(payload)
        except ValidationError as e:
            raise UpstreamServiceError(
                "reasoning", f"extracted workout did not match expected shape ({e.error_count()} errors)"
            ) from e

        logger.info(
            f"Extracted workout '{workout.name}' with {len(workout.blocks)} block(s) "
            f"and {len(workout.exercise_names())} exercise mention(s)"
        )
        return workout

    @staticmethod
    def _with_defaults(
        reply: Dict[str, Any],
        date: str,
        last_modified_time: str,
        weight_unit: WeightUnit,
    ) -> Dict[str, Any]:
        """Attach caller-supplied fields and fill missing set units."""
        payload = dict(reply)
        payload["date"] = date
        payload["lastModifiedTime"] = last_modified_time
        for block in payload.get("blocks") or []:
            if not isinstance(block, dict):
                continue
            for exercise in block.get("exercises") or []:
                if not isinstance(exercise, dict):
                    continue
                for workout_set in exercise.get("sets") or []:
                    if isinstance(workout_set, dict) and not workout_set.get("weightUnit"):
                        workout_set["weightUnit"] = weight_unit
        return payload
