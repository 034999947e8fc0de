"""
Application Use Cases for the workout parser.

Use cases orchestrate domain logic and coordinate between ports/adapters:
- Dependencies are injected via constructors for testability
- Use cases return domain models, not API responses

Usage:
    from application.use_cases import ParseWorkoutUseCase

    use_case = ParseWorkoutUseCase(
        validator=validator,
        extractor=extractor,
        resolver=resolver,
        finalizer=finalizer,
        repairer=repairer,
    )
    result = await use_case.execute(text, user_id="user-123")
"""

from application.use_cases.parse_workout import (
    ParseWorkoutResult,
    ParseWorkoutUseCase,
    PipelineRun,
    PipelineStage,
)

__all__ = [
    "ParseWorkoutResult",
    "ParseWorkoutUseCase",
    "PipelineRun",
    "PipelineStage",
]
