"""
ParseWorkout Use Case.

Orchestrates the complete pipeline that turns free-form workout text into a
database-ready workout:

    VALIDATING -> EXTRACTING -> RESOLVING -> REPAIRING -> FINALIZING -> DONE

FAILED is reachable from every stage. Stages run strictly in sequence and none
is retried here; the only retry surface is the resolver's own search cap. The
whole run is bounded by a single deadline; when it elapses in-flight calls are
abandoned and nothing is returned.
"""

import asyncio
import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

from application.exceptions import (
    PipelineTimeoutError,
    ValidationRejection,
    WorkoutParserError,
)
from backend.core.sanitization import MAX_WORKOUT_TEXT_LENGTH, sanitize_workout_text
from backend.services.consistency_repairer import ConsistencyRepairer
from backend.services.exercise_resolver import ExerciseResolver
from backend.services.structure_extractor import StructureExtractor
from backend.services.workout_finalizer import WorkoutFinalizer
from backend.services.workout_validator import WorkoutValidator
from domain.models import FinalizedWorkout, ValidationVerdict

logger = logging.getLogger(__name__)

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_WEIGHT_UNITS = ("lbs", "kg")


class PipelineStage(str, Enum):
    """Stages of one parse run."""

    VALIDATING = "validating"
    EXTRACTING = "extracting"
    RESOLVING = "resolving"
    REPAIRING = "repairing"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


_TERMINAL_STAGES = (PipelineStage.DONE, PipelineStage.FAILED)


@dataclass
class PipelineRun:
    """State of one pipeline invocation. Never shared between runs."""

    workout_id: str
    stage: PipelineStage = PipelineStage.VALIDATING
    history: List[PipelineStage] = field(default_factory=lambda: [PipelineStage.VALIDATING])

    def advance(self, stage: PipelineStage) -> None:
        if self.stage in _TERMINAL_STAGES:
            raise RuntimeError(f"Pipeline run already {self.stage.value}")
        logger.info(f"Workout {self.workout_id}: {self.stage.value} -> {stage.value}")
        self.stage = stage
        self.history.append(stage)

    def fail(self) -> PipelineStage:
        """Move to FAILED and return the stage that was running."""
        failed_at = self.stage
        if failed_at not in _TERMINAL_STAGES:
            self.stage = PipelineStage.FAILED
            self.history.append(PipelineStage.FAILED)
        return failed_at


@dataclass
class ParseWorkoutResult:
    """Result of the ParseWorkout use case execution."""

    workout: FinalizedWorkout
    verdict: ValidationVerdict
    stages: List[PipelineStage]
    repaired: bool = False

    @property
    def workout_id(self) -> str:
        return self.workout.id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ParseWorkoutUseCase:
    """
    Use case for parsing free-form workout text.

    Dependencies are injected via constructor for testability.

    Usage:
        >>> use_case = ParseWorkoutUseCase(
        ...     validator=validator,
        ...     extractor=extractor,
        ...     resolver=resolver,
        ...     finalizer=finalizer,
        ...     repairer=repairer,
        ... )
        >>> result = await use_case.execute("Bench Press: 3x8 @ 185 lbs", user_id="user-123")
        >>> result.workout.blocks[0].exercises[0].exercise_slug
        'barbell-bench-press'
    """

    def __init__(
        self,
        validator: WorkoutValidator,
        extractor: StructureExtractor,
        resolver: ExerciseResolver,
        finalizer: WorkoutFinalizer,
        repairer: Optional[ConsistencyRepairer] = None,
        timeout_seconds: float = 120.0,
        max_input_length: int = MAX_WORKOUT_TEXT_LENGTH,
        default_weight_unit: str = "lbs",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Initialize the use case with required dependencies.

        Args:
            validator: Decides whether the text is a workout
            extractor: Builds the provisional block/exercise/set tree
            resolver: Binds exercise names to catalog identifiers
            finalizer: Verifies identifiers and assigns storage UUIDs
            repairer: Optional consistency pass; skipped when None
            timeout_seconds: Deadline for the whole run
            max_input_length: Maximum raw text length
            default_weight_unit: Unit used when the caller gives none
            clock: Source of the default date and timestamp
        """
        self._validator = validator
        self._extractor = extractor
        self._resolver = resolver
        self._finalizer = finalizer
        self._repairer = repairer
        self._timeout_seconds = timeout_seconds
        self._max_input_length = max_input_length
        self._default_weight_unit = default_weight_unit
        self._clock = clock

    async def execute(
        self,
        raw_text: str,
        date: Optional[str] = None,
        weight_unit: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> ParseWorkoutResult:
        """
        Run the full pipeline.

        Args:
            raw_text: Free-form workout text
            date: Workout date (YYYY-MM-DD); defaults to today (UTC)
            weight_unit: "lbs" or "kg"; defaults to the configured unit
            user_id: Requesting user; enables audit records

        Returns:
            ParseWorkoutResult with the finalized workout

        Raises:
            ValidationRejection: Input rejected (client-correctable)
            ResolutionError: An exercise could not be resolved
            UpstreamServiceError: An external service failed
            PipelineTimeoutError: The deadline elapsed
        """
        run = PipelineRun(workout_id=str(uuid.uuid4()))
        try:
            return await asyncio.wait_for(
                self._run(run, raw_text, date, weight_unit, user_id),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            failed_at = run.fail()
            logger.error(f"Workout {run.workout_id} timed out during {failed_at.value}")
            raise PipelineTimeoutError(self._timeout_seconds, stage=failed_at.value) from e

    async def _run(
        self,
        run: PipelineRun,
        raw_text: str,
        date: Optional[str],
        weight_unit: Optional[str],
        user_id: Optional[str],
    ) -> ParseWorkoutResult:
        try:
            # Stage 1: gate the input
            unit = self._resolve_weight_unit(weight_unit)
            workout_date = self._resolve_date(date)
            text = sanitize_workout_text(raw_text, max_length=self._max_input_length)
            verdict = await self._validator.check(text)

            # Stage 2: extract structure
            run.advance(PipelineStage.EXTRACTING)
            provisional = await self._extractor.extract(
                text,
                date=workout_date,
                last_modified_time=self._clock().isoformat(),
                weight_unit=unit,
            )

            # Stage 3: resolve exercise names
            run.advance(PipelineStage.RESOLVING)
            resolution = await self._resolver.resolve_workout_deferred(
                provisional, user_id=user_id, workout_id=run.workout_id
            )
            resolved = resolution.workout

            # Stage 4: repair set-count/quantity inconsistencies
            run.advance(PipelineStage.REPAIRING)
            repaired = resolved
            if self._repairer is not None:
                repaired = await self._repairer.repair(text, resolved)

            # Stage 5: finalize identifiers
            run.advance(PipelineStage.FINALIZING)
            finalized = await self._finalizer.finalize(repaired, workout_id=run.workout_id)

            run.advance(PipelineStage.DONE)
            # Audit only what a completed run returns
            self._resolver.record_audit(resolution.audit_records)
        except WorkoutParserError as e:
            failed_at = run.fail()
            if e.stage is None:
                e.stage = failed_at.value
            logger.warning(f"Workout {run.workout_id} failed during {failed_at.value}: {e}")
            raise

        return ParseWorkoutResult(
            workout=finalized,
            verdict=verdict,
            stages=list(run.history),
            repaired=repaired is not resolved,
        )

    def _resolve_weight_unit(self, weight_unit: Optional[str]) -> str:
        unit = (weight_unit or self._default_weight_unit).lower()
        if unit not in _WEIGHT_UNITS:
            raise ValidationRejection(f"Unsupported weight unit '{weight_unit}'. Use 'lbs' or 'kg'.")
        return unit

    def _resolve_date(self, date: Optional[str]) -> str:
        if date is None:
            return self._clock().date().isoformat()
        if not _DATE_PATTERN.match(date):
            raise ValidationRejection(f"Invalid date '{date}'. Use YYYY-MM-DD.")
        try:
            datetime.strptime(date, "%Y-%m-%d")
        except ValueError as e:
            raise ValidationRejection(f"Invalid date '{date}'. Use YYYY-MM-DD.") from e
        return date
