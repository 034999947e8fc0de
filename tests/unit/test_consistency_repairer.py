"""
Unit tests for ConsistencyRepairer.
"""

import pytest

from application.exceptions import UpstreamServiceError
from application.ports import ModelTier
from backend.services.consistency_repairer import REPAIR_SYSTEM_PROMPT, ConsistencyRepairer
from tests.fakes import FakeReasoningService, resolved_payload, resolved_workout


@pytest.fixture
def reasoning():
    return FakeReasoningService()


@pytest.mark.unit
class TestRepair:

    @pytest.mark.asyncio
    async def test_no_issues_returns_input_unchanged(self, reasoning):
        reasoning.on_call(REPAIR_SYSTEM_PROMPT, {"issues": [], "workout": None})
        workout = resolved_workout(["ex-squat"])

        result = await ConsistencyRepairer(reasoning).repair("Squat 3x8", workout)

        assert result is workout
        assert reasoning.calls[0]["model_tier"] == ModelTier.SMART

    @pytest.mark.asyncio
    async def test_issues_without_workout_is_noop(self, reasoning):
        reasoning.on_call(REPAIR_SYSTEM_PROMPT, {"issues": ["minor"], "workout": None})
        workout = resolved_workout(["ex-squat"])

        assert await ConsistencyRepairer(reasoning).repair("Squat 3x8", workout) is workout

    @pytest.mark.asyncio
    async def test_applies_correction(self, reasoning):
        workout = resolved_workout(["ex-squat"], set_count=10, prescription="3 x 10")
        corrected = resolved_payload(["ex-squat"], set_count=3, prescription="3 x 10")
        reasoning.on_call(
            REPAIR_SYSTEM_PROMPT,
            {"issues": ["3x10 means 3 sets, not 10"], "workout": corrected},
        )

        result = await ConsistencyRepairer(reasoning).repair("Squat 3x10", workout)

        assert result is not workout
        assert len(result.blocks[0].exercises[0].sets) == 3
        assert result.exercise_ids() == ["ex-squat"]

    @pytest.mark.asyncio
    async def test_keeps_original_date(self, reasoning):
        workout = resolved_workout(["ex-squat"], set_count=10)
        corrected = resolved_payload(["ex-squat"], set_count=3)
        corrected["date"] = "2000-01-01"
        reasoning.on_call(REPAIR_SYSTEM_PROMPT, {"issues": ["sets"], "workout": corrected})

        result = await ConsistencyRepairer(reasoning).repair("Squat 3x10", workout)

        assert result.date == workout.date
        assert result.last_modified_time == workout.last_modified_time

    @pytest.mark.asyncio
    async def test_sends_parsed_workout_with_ids(self, reasoning):
        reasoning.on_call(REPAIR_SYSTEM_PROMPT, {"issues": []})
        workout = resolved_workout(["ex-squat"])

        await ConsistencyRepairer(reasoning).repair("Squat 3x8", workout)

        message = reasoning.calls[0]["user_message"]
        assert "<original_text>\nSquat 3x8\n</original_text>" in message
        assert '"exerciseId": "ex-squat"' in message

    @pytest.mark.asyncio
    async def test_rejects_new_exercise_ids(self, reasoning):
        workout = resolved_workout(["ex-squat"])
        reasoning.on_call(
            REPAIR_SYSTEM_PROMPT,
            {"issues": ["wrong exercise"], "workout": resolved_payload(["ex-front-squat"])},
        )

        with pytest.raises(UpstreamServiceError, match="unknown exercise ids"):
            await ConsistencyRepairer(reasoning).repair("Squat 3x8", workout)

    @pytest.mark.asyncio
    async def test_malformed_reply(self, reasoning):
        reasoning.on_call(REPAIR_SYSTEM_PROMPT, {"issues": "not a list"})

        with pytest.raises(UpstreamServiceError):
            await ConsistencyRepairer(reasoning).repair("Squat", resolved_workout(["ex-squat"]))

    @pytest.mark.asyncio
    async def test_malformed_corrected_workout(self, reasoning):
        reasoning.on_call(REPAIR_SYSTEM_PROMPT, {"issues": ["x"], "workout": {"name": "No blocks"}})

        with pytest.raises(UpstreamServiceError, match="expected shape"):
            await ConsistencyRepairer(reasoning).repair("Squat", resolved_workout(["ex-squat"]))
