"""
Unit tests for ParseWorkoutUseCase.

Runs the whole pipeline against in-memory fakes: validator, extractor,
resolver, repairer and finalizer are the real services.
"""

import asyncio
import json
import uuid
from datetime import datetime, timezone

import pytest

from application.exceptions import (
    PipelineTimeoutError,
    ResolutionError,
    UpstreamServiceError,
    ValidationRejection,
)
from application.use_cases import ParseWorkoutUseCase
from application.use_cases.parse_workout import PipelineStage
from backend.core.lexical_matcher import LexicalMatcher
from backend.services.audit_notifier import AuditNotifier
from backend.services.consistency_repairer import REPAIR_SYSTEM_PROMPT, ConsistencyRepairer
from backend.services.exercise_creator import ExerciseCreator
from backend.services.exercise_resolver import ExerciseResolver
from backend.services.reasoning_resolver import ReasoningAssistedResolver
from backend.services.structure_extractor import EXTRACTION_SYSTEM_PROMPT, StructureExtractor
from backend.services.workout_finalizer import WorkoutFinalizer
from backend.services.workout_validator import VALIDATION_SYSTEM_PROMPT, WorkoutValidator
from tests.fakes import (
    TEST_DATE,
    TEST_TIMESTAMP,
    FakeReasoningService,
    FakeUnresolvedMentionRepository,
    create_exercise_catalog,
    extraction_reply,
    resolved_payload,
)

ACCEPTED = {"isWorkout": True, "confidence": 0.95, "reason": "Sets and reps listed"}
NO_ISSUES = {"issues": [], "workout": None}

FULL_RUN = [
    PipelineStage.VALIDATING,
    PipelineStage.EXTRACTING,
    PipelineStage.RESOLVING,
    PipelineStage.REPAIRING,
    PipelineStage.FINALIZING,
    PipelineStage.DONE,
]


def fixed_clock():
    return datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)


def build_use_case(catalog, reasoning, audit_notifier=None, repair=True, timeout_seconds=120.0):
    lexical = LexicalMatcher(catalog)
    reasoning_resolver = ReasoningAssistedResolver(catalog, reasoning, lexical, ExerciseCreator(catalog))
    return ParseWorkoutUseCase(
        validator=WorkoutValidator(reasoning),
        extractor=StructureExtractor(reasoning),
        resolver=ExerciseResolver(lexical, reasoning_resolver, audit_notifier=audit_notifier),
        finalizer=WorkoutFinalizer(catalog),
        repairer=ConsistencyRepairer(reasoning) if repair else None,
        timeout_seconds=timeout_seconds,
        clock=fixed_clock,
    )


@pytest.fixture
def catalog():
    return create_exercise_catalog()


@pytest.fixture
def reasoning():
    service = FakeReasoningService()
    service.on_call(VALIDATION_SYSTEM_PROMPT, ACCEPTED)
    service.on_call(REPAIR_SYSTEM_PROMPT, NO_ISSUES)
    return service


# =============================================================================
# Successful runs
# =============================================================================


@pytest.mark.unit
class TestExecute:

    @pytest.mark.asyncio
    async def test_single_exercise_end_to_end(self, catalog, reasoning):
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, extraction_reply(["Bench Press"]))
        use_case = build_use_case(catalog, reasoning)

        result = await use_case.execute("Bench Press: 3x8 @ 185 lbs", date=TEST_DATE)

        assert len(result.workout.blocks) == 1
        exercise = result.workout.blocks[0].exercises[0]
        assert exercise.original_name == "Bench Press"
        assert exercise.prescription == "3 x 8"
        assert exercise.exercise_id == "ex-barbell-bench-press"
        assert exercise.exercise_slug == "barbell-bench-press"
        assert len(exercise.sets) == 3
        # Resolved lexically: one catalog search, no tool negotiation
        assert [call["query"] for call in catalog.lexical_calls] == ["bench press"]
        assert reasoning.tool_sessions == []
        assert result.workout.date == TEST_DATE
        assert result.workout.last_modified_time == TEST_TIMESTAMP
        assert result.stages == FULL_RUN
        assert result.repaired is False
        assert result.verdict.is_workout is True
        assert result.verdict.confidence >= 0.7
        uuid.UUID(result.workout_id)

    @pytest.mark.asyncio
    async def test_spellings_of_same_exercise_share_id(self, catalog, reasoning):
        reasoning.on_call(
            EXTRACTION_SYSTEM_PROMPT,
            extraction_reply(["DB Bench Press", "Dumbbell Bench Press"]),
        )

        result = await build_use_case(catalog, reasoning).execute(
            "DB Bench Press 3x8\nDumbbell Bench Press 3x8", date=TEST_DATE
        )

        exercises = result.workout.blocks[0].exercises
        assert [e.exercise_id for e in exercises] == ["ex-dumbbell-bench-press"] * 2
        assert [e.original_name for e in exercises] == ["DB Bench Press", "Dumbbell Bench Press"]

    @pytest.mark.asyncio
    async def test_novel_exercise_is_created_for_review(self, catalog, reasoning):
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, extraction_reply(["Completely Novel Movement XYZ"]))
        reasoning.script_tools(
            "Completely Novel Movement XYZ",
            [
                [("search_exercises", {"query": "novel movement"})],
                [("search_exercises", {"query": "movement xyz"})],
                [("search_exercises", {"query": "completely novel"})],
                [("search_exercises", {"query": "novel"})],
                [("create_exercise", {"name": "Completely Novel Movement XYZ", "reasoning": "new"})],
            ],
        )
        audit_repo = FakeUnresolvedMentionRepository()
        notifier = AuditNotifier(audit_repo)

        result = await build_use_case(catalog, reasoning, audit_notifier=notifier).execute(
            "Completely Novel Movement XYZ 3x8", date=TEST_DATE, user_id="user-1"
        )
        await notifier.drain()

        results = reasoning.last_tool_results()
        assert [r["is_error"] for r in results] == [False, False, False, True]
        assert "Search limit reached (3)" in json.loads(results[3]["content"])["error"]

        exercise = result.workout.blocks[0].exercises[0]
        assert exercise.exercise_slug == "completely-novel-movement-xyz"
        created = [entry for entry in catalog.get_all() if entry.slug == exercise.exercise_slug]
        assert created[0].needs_review is True
        assert audit_repo.attempts == 0

    @pytest.mark.asyncio
    async def test_defaults_date_from_clock(self, catalog, reasoning):
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, extraction_reply(["Pull Up"]))

        result = await build_use_case(catalog, reasoning).execute("Pull Up 3x8")

        assert result.workout.date == "2026-01-05"

    @pytest.mark.asyncio
    async def test_weight_unit_passed_to_extractor(self, catalog, reasoning):
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, extraction_reply(["Pull Up"], weight_unit=None))

        result = await build_use_case(catalog, reasoning).execute("Pull Up 3x8", weight_unit="KG")

        assert result.workout.blocks[0].exercises[0].sets[0].weight_unit == "kg"

    @pytest.mark.asyncio
    async def test_repair_applied(self, catalog):
        reasoning = FakeReasoningService()
        reasoning.on_call(VALIDATION_SYSTEM_PROMPT, ACCEPTED)
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, extraction_reply(["Pull Up"], set_count=10))
        reasoning.on_call(
            REPAIR_SYSTEM_PROMPT,
            {"issues": ["3x10 means 3 sets"], "workout": resolved_payload(["ex-pull-up"], set_count=3)},
        )

        result = await build_use_case(catalog, reasoning).execute("Pull Up 3x10", date=TEST_DATE)

        assert result.repaired is True
        assert len(result.workout.blocks[0].exercises[0].sets) == 3

    @pytest.mark.asyncio
    async def test_repair_disabled_still_passes_stage(self, catalog, reasoning):
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, extraction_reply(["Pull Up"]))

        result = await build_use_case(catalog, reasoning, repair=False).execute("Pull Up 3x8")

        assert result.stages == FULL_RUN
        assert reasoning.calls_for(REPAIR_SYSTEM_PROMPT) == []

    @pytest.mark.asyncio
    async def test_audit_carries_workout_id(self, catalog, reasoning):
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, extraction_reply(["Landmine Rotational Press"]))
        reasoning.script_tools(
            "Landmine Rotational Press",
            [[("select_exercise", {"exercise_id": "ex-overhead-press", "reasoning": "closest"})]],
        )
        audit_repo = FakeUnresolvedMentionRepository()
        notifier = AuditNotifier(audit_repo)

        result = await build_use_case(catalog, reasoning, audit_notifier=notifier).execute(
            "Landmine Rotational Press 3x8", user_id="user-1"
        )
        await notifier.drain()

        assert audit_repo.records[0]["workout_id"] == result.workout.id
        assert audit_repo.records[0]["user_id"] == "user-1"


# =============================================================================
# Failures
# =============================================================================


@pytest.mark.unit
class TestFailures:

    @pytest.mark.asyncio
    async def test_non_workout_rejected_before_extraction(self, catalog):
        reasoning = FakeReasoningService()
        reasoning.on_call(
            VALIDATION_SYSTEM_PROMPT,
            {"isWorkout": False, "confidence": 0.98, "reason": "This is a recipe"},
        )

        with pytest.raises(ValidationRejection) as exc_info:
            await build_use_case(catalog, reasoning).execute("2 cups flour, 1 egg")

        assert exc_info.value.stage == "validating"
        assert exc_info.value.reason == "This is a recipe"
        assert reasoning.calls_for(EXTRACTION_SYSTEM_PROMPT) == []

    @pytest.mark.asyncio
    async def test_low_confidence_is_ambiguous(self, catalog):
        reasoning = FakeReasoningService()
        reasoning.on_call(VALIDATION_SYSTEM_PROMPT, {"isWorkout": True, "confidence": 0.4})

        with pytest.raises(ValidationRejection) as exc_info:
            await build_use_case(catalog, reasoning).execute("walked around a bit")

        assert exc_info.value.ambiguous is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"date": "01/05/2026"},
            {"date": "2026-02-30"},
            {"weight_unit": "stone"},
        ],
    )
    async def test_invalid_arguments_rejected_without_calls(self, catalog, kwargs):
        reasoning = FakeReasoningService()

        with pytest.raises(ValidationRejection):
            await build_use_case(catalog, reasoning).execute("Pull Up 3x8", **kwargs)

        assert reasoning.call_count == 0

    @pytest.mark.asyncio
    async def test_empty_text_rejected(self, catalog):
        reasoning = FakeReasoningService()

        with pytest.raises(ValidationRejection, match="cannot be empty"):
            await build_use_case(catalog, reasoning).execute("   ")

    @pytest.mark.asyncio
    async def test_extraction_failure_is_stamped(self, catalog, reasoning):
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, UpstreamServiceError("reasoning", "overloaded"))

        with pytest.raises(UpstreamServiceError) as exc_info:
            await build_use_case(catalog, reasoning).execute("Pull Up 3x8")

        assert exc_info.value.stage == "extracting"
        assert exc_info.value.public_message == "Upstream reasoning service failed during extracting"

    @pytest.mark.asyncio
    async def test_resolution_failure_is_stamped(self, catalog, reasoning):
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, extraction_reply(["Mystery Move"]))
        reasoning.script_tools("Mystery Move", ["I don't know this one."])

        with pytest.raises(ResolutionError) as exc_info:
            await build_use_case(catalog, reasoning).execute("Mystery Move 3x8")

        assert exc_info.value.stage == "resolving"
        assert reasoning.calls_for(REPAIR_SYSTEM_PROMPT) == []

    @pytest.mark.asyncio
    async def test_deadline_abandons_run(self, catalog, reasoning):
        class SlowExtraction(FakeReasoningService):
            async def call(self, system_prompt, *args, **kwargs):
                if system_prompt == EXTRACTION_SYSTEM_PROMPT:
                    await asyncio.sleep(1)
                return await super().call(system_prompt, *args, **kwargs)

        slow = SlowExtraction()
        slow.on_call(VALIDATION_SYSTEM_PROMPT, ACCEPTED)
        slow.on_call(EXTRACTION_SYSTEM_PROMPT, extraction_reply(["Pull Up"]))

        with pytest.raises(PipelineTimeoutError) as exc_info:
            await build_use_case(catalog, slow, timeout_seconds=0.05).execute("Pull Up 3x8")

        assert exc_info.value.stage == "extracting"
        assert slow.calls_for(EXTRACTION_SYSTEM_PROMPT) == []

    @pytest.mark.asyncio
    async def test_failed_run_writes_no_audit(self, catalog):
        """A selection made during resolution is dropped when a later stage fails."""
        reasoning = FakeReasoningService()
        reasoning.on_call(VALIDATION_SYSTEM_PROMPT, ACCEPTED)
        reasoning.on_call(EXTRACTION_SYSTEM_PROMPT, extraction_reply(["Landmine Rotational Press"]))
        reasoning.on_call(REPAIR_SYSTEM_PROMPT, UpstreamServiceError("reasoning", "overloaded"))
        reasoning.script_tools(
            "Landmine Rotational Press",
            [[("select_exercise", {"exercise_id": "ex-overhead-press", "reasoning": "closest"})]],
        )
        audit_repo = FakeUnresolvedMentionRepository()
        notifier = AuditNotifier(audit_repo)

        with pytest.raises(UpstreamServiceError) as exc_info:
            await build_use_case(catalog, reasoning, audit_notifier=notifier).execute(
                "Landmine Rotational Press 3x8", user_id="user-1"
            )
        await notifier.drain()

        assert exc_info.value.stage == "repairing"
        assert audit_repo.attempts == 0
