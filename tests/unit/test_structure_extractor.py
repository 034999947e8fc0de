"""
Unit tests for StructureExtractor.
"""

import pytest

from application.exceptions import UpstreamServiceError
from application.ports import ModelTier
from backend.services.structure_extractor import EXTRACTION_SYSTEM_PROMPT, StructureExtractor
from tests.fakes import TEST_DATE, TEST_TIMESTAMP, FakeReasoningService, extraction_reply


@pytest.fixture
def reasoning():
    return FakeReasoningService()


@pytest.mark.unit
class TestExtract:

    @pytest.mark.asyncio
    async def test_extracts_provisional_workout(self, reasoning):
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, extraction_reply(["Bench Press"], set_count=3))
        extractor = StructureExtractor(reasoning)

        workout = await extractor.extract(
            "Bench Press: 3x8 @ 185 lbs", date=TEST_DATE, last_modified_time=TEST_TIMESTAMP
        )

        assert len(workout.blocks) == 1
        exercise = workout.blocks[0].exercises[0]
        assert exercise.exercise_name == "Bench Press"
        assert exercise.prescription == "3 x 8"
        assert [s.set_number for s in exercise.sets] == [1, 2, 3]
        assert workout.date == TEST_DATE
        assert workout.last_modified_time == TEST_TIMESTAMP

    @pytest.mark.asyncio
    async def test_uses_smart_tier_and_json_mode(self, reasoning):
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, extraction_reply(["Squat"]))

        await StructureExtractor(reasoning).extract("Squat 3x8", TEST_DATE, TEST_TIMESTAMP)

        call = reasoning.calls[0]
        assert call["model_tier"] == ModelTier.SMART
        assert call["json_mode"] is True
        assert "<text>\nSquat 3x8\n</text>" in call["user_message"]

    @pytest.mark.asyncio
    async def test_caller_date_overrides_reply(self, reasoning):
        reply = extraction_reply(["Squat"])
        reply["date"] = "1999-01-01"
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, reply)

        workout = await StructureExtractor(reasoning).extract("Squat 3x8", TEST_DATE, TEST_TIMESTAMP)

        assert workout.date == TEST_DATE

    @pytest.mark.asyncio
    async def test_fills_missing_weight_unit(self, reasoning):
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, extraction_reply(["Squat"], weight_unit=None))

        workout = await StructureExtractor(reasoning).extract(
            "Squat 3x8 @ 100kg", TEST_DATE, TEST_TIMESTAMP, weight_unit="kg"
        )

        assert {s.weight_unit for s in workout.blocks[0].exercises[0].sets} == {"kg"}
        assert '"weightUnit": "kg"' in reasoning.calls[0]["user_message"]

    @pytest.mark.asyncio
    async def test_non_object_reply(self, reasoning):
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, ["not", "an", "object"])

        with pytest.raises(UpstreamServiceError, match="not a JSON object"):
            await StructureExtractor(reasoning).extract("Squat 3x8", TEST_DATE, TEST_TIMESTAMP)

    @pytest.mark.asyncio
    async def test_reply_without_blocks(self, reasoning):
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, {"name": "Empty", "blocks": []})

        with pytest.raises(UpstreamServiceError, match="expected shape"):
            await StructureExtractor(reasoning).extract("Squat 3x8", TEST_DATE, TEST_TIMESTAMP)

    @pytest.mark.asyncio
    async def test_exercise_without_sets(self, reasoning):
        reply = extraction_reply(["Squat"])
        reply["blocks"][0]["exercises"][0]["sets"] = []
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, reply)

        with pytest.raises(UpstreamServiceError):
            await StructureExtractor(reasoning).extract("Squat", TEST_DATE, TEST_TIMESTAMP)
