"""
Application-layer exceptions.

These exceptions are raised by the parsing pipeline and its collaborators and
mapped to HTTP responses by the API layer. Each carries a ``public_message``
that is safe to show a caller: it names the failing exercise or stage but never
includes raw upstream response bodies.
"""

from typing import Optional


class WorkoutParserError(Exception):
    """Base class for all parsing pipeline failures.

    ``stage`` is stamped by the orchestrator with the pipeline stage that was
    running when the error was raised.
    """

    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.stage = stage

    @property
    def public_message(self) -> str:
        if self.stage:
            return f"Workout parsing failed during {self.stage}"
        return "Workout parsing failed"


class ValidationRejection(WorkoutParserError):
    """Input is not a workout, or too ambiguous to parse.

    Client-correctable; surfaced as a 400-class response with the reason
    given by the validator.
    """

    status_code = 400

    def __init__(
        self,
        message: str,
        reason: Optional[str] = None,
        ambiguous: bool = False,
        stage: Optional[str] = None,
    ) -> None:
        super().__init__(message, stage=stage)
        self.reason = reason
        self.ambiguous = ambiguous

    @property
    def public_message(self) -> str:
        message = str(self)
        if self.reason:
            return f"{message} Reason: {self.reason}"
        return message


class ResolutionError(WorkoutParserError):
    """An exercise mention could not be bound to a catalog identifier."""

    def __init__(self, exercise_name: str, detail: Optional[str] = None, stage: Optional[str] = None) -> None:
        message = f"Could not resolve exercise '{exercise_name}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, stage=stage)
        self.exercise_name = exercise_name
        self.detail = detail

    @property
    def public_message(self) -> str:
        return f"Could not resolve exercise '{self.exercise_name}'"


class MissingExerciseError(ResolutionError):
    """A resolved identifier does not exist in the catalog at finalization."""

    def __init__(self, exercise_id: str, exercise_name: Optional[str] = None, stage: Optional[str] = None) -> None:
        super().__init__(
            exercise_name or exercise_id,
            detail=f"exercise id {exercise_id} not found in catalog",
            stage=stage,
        )
        self.exercise_id = exercise_id


class UpstreamServiceError(WorkoutParserError):
    """Reasoning service, embedding provider or catalog failed or replied with
    output that does not match the expected shape. Fatal for the run."""

    def __init__(self, service: str, message: str, stage: Optional[str] = None) -> None:
        super().__init__(f"{service} service error: {message}", stage=stage)
        self.service = service

    @property
    def public_message(self) -> str:
        where = f" during {self.stage}" if self.stage else ""
        return f"Upstream {self.service} service failed{where}"


class PipelineTimeoutError(WorkoutParserError):
    """The overall pipeline deadline elapsed before completion."""

    def __init__(self, timeout_seconds: float, stage: Optional[str] = None) -> None:
        super().__init__(f"Workout parsing exceeded {timeout_seconds}s deadline", stage=stage)
        self.timeout_seconds = timeout_seconds

    @property
    def public_message(self) -> str:
        where = f" during {self.stage}" if self.stage else ""
        return f"Workout parsing timed out{where}"


class AuditWriteError(WorkoutParserError):
    """Recording an unresolved mention failed.

    Never propagated out of the resolver; logged and swallowed.
    """

    pass
