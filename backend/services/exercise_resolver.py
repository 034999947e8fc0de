"""
Exercise Resolver Service

Maps every free-text exercise mention in a workout to a catalog identifier.

Per distinct normalized name, in priority order:
1. Semantic - embedding nearest neighbour above the similarity threshold
   (only when an embedding service is configured)
2. Lexical - trigram search re-ranked by token overlap; any candidate wins
3. Reasoning-assisted - bounded tool negotiation that selects or creates

Distinct names resolve concurrently. Names sharing a normalized key are
resolved once, using the first spelling seen, and share the result.
"""

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from application.exceptions import ResolutionError
from backend.core.lexical_matcher import LexicalMatcher
from backend.core.normalize import normalize_key
from backend.core.semantic_matcher import SemanticMatcher
from backend.services.audit_notifier import AuditNotifier
from backend.services.reasoning_resolver import ReasoningAssistedResolver
from domain.models import (
    CatalogEntry,
    ProvisionalWorkout,
    ResolvedBlock,
    ResolvedExercise,
    ResolvedWorkout,
    UnresolvedMention,
)

logger = logging.getLogger(__name__)


class ResolutionMethod(str, Enum):
    """How a name was resolved."""

    SEMANTIC = "semantic"
    LEXICAL = "lexical"
    REASONING_SELECTED = "reasoning_selected"
    REASONING_CREATED = "reasoning_created"


@dataclass
class Resolution:
    """Result of resolving one free-text name."""

    name: str
    entry: CatalogEntry
    method: ResolutionMethod
    score: Optional[float] = None
    # Pending audit record for a reasoning-assisted selection
    audit_record: Optional[UnresolvedMention] = None

    @property
    def exercise_id(self) -> str:
        return self.entry.id


@dataclass
class WorkoutResolution:
    """A resolved workout plus the audit records it has not yet dispatched."""

    workout: ResolvedWorkout
    audit_records: List[UnresolvedMention] = field(default_factory=list)


class ExerciseResolver:
    """
    Resolves exercise mentions to catalog identifiers.

    Dependencies are injected via constructor for testability.

    Usage:
        >>> resolver = ExerciseResolver(lexical, reasoning_resolver, semantic_matcher=semantic)
        >>> resolved = await resolver.resolve_workout(provisional, user_id="user-1", workout_id=wid)
    """

    def __init__(
        self,
        lexical_matcher: LexicalMatcher,
        reasoning_resolver: ReasoningAssistedResolver,
        semantic_matcher: Optional[SemanticMatcher] = None,
        audit_notifier: Optional[AuditNotifier] = None,
    ):
        """
        Initialize the resolver.

        Args:
            lexical_matcher: Trigram search + token ranking
            reasoning_resolver: Tool negotiation fallback
            semantic_matcher: Embedding search; omitted when no embedding
                service is configured
            audit_notifier: Receives reasoning-assisted selections once
                resolution has succeeded
        """
        self._lexical = lexical_matcher
        self._reasoning = reasoning_resolver
        self._semantic = semantic_matcher
        self._audit = audit_notifier or AuditNotifier()

    async def resolve_name(
        self,
        name: str,
        user_id: Optional[str] = None,
        workout_id: Optional[str] = None,
    ) -> Resolution:
        """
        Resolve a single free-text name.

        A reasoning-assisted selection carries its audit record on the
        Resolution; nothing is written until the caller records it.

        Args:
            name: Exercise name as written
            user_id: Requesting user; without one no audit record is prepared
            workout_id: Workout being parsed, for the audit record

        Returns:
            Resolution with the catalog entry and the method that found it

        Raises:
            ResolutionError: If the reasoning-assisted path cannot resolve it
            UpstreamServiceError: If an external service fails
        """
        if self._semantic is not None:
            semantic = await self._semantic.match(name)
            if semantic is not None:
                return Resolution(name, semantic.entry, ResolutionMethod.SEMANTIC, semantic.similarity)

        lexical = await self._lexical.match(name)
        if lexical is not None:
            return Resolution(name, lexical.entry, ResolutionMethod.LEXICAL, lexical.score)

        outcome = await self._reasoning.resolve(name)
        if outcome.created:
            return Resolution(name, outcome.entry, ResolutionMethod.REASONING_CREATED)

        audit_record = None
        if user_id:
            audit_record = UnresolvedMention(
                original_name=name,
                resolved_exercise_id=outcome.entry.id,
                user_id=user_id,
                workout_id=workout_id,
            )
        return Resolution(name, outcome.entry, ResolutionMethod.REASONING_SELECTED, audit_record=audit_record)

    async def _resolve_all(
        self,
        names: Sequence[str],
        user_id: Optional[str],
        workout_id: Optional[str],
    ) -> Tuple[Dict[str, str], List[UnresolvedMention]]:
        representatives: Dict[str, str] = {}
        for name in names:
            key = normalize_key(name)
            if not key:
                raise ResolutionError(name, "exercise name has no letters or digits")
            representatives.setdefault(key, name)

        if not representatives:
            return {}, []

        keys: List[str] = list(representatives)
        tasks = [
            asyncio.ensure_future(self.resolve_name(representatives[key], user_id, workout_id))
            for key in keys
        ]
        try:
            resolutions = await asyncio.gather(*tasks)
        except Exception:
            for task in tasks:
                task.cancel()
            raise

        by_key = dict(zip(keys, resolutions))
        methods = Counter(resolution.method.value for resolution in resolutions)
        logger.info(
            f"Resolved {len(names)} mention(s) via {len(keys)} distinct name(s): {dict(methods)}"
        )
        id_map = {name: by_key[normalize_key(name)].exercise_id for name in names}
        audit_records = [r.audit_record for r in resolutions if r.audit_record is not None]
        return id_map, audit_records

    def record_audit(self, audit_records: Iterable[UnresolvedMention]) -> None:
        """Hand audit records to the notifier; the writes run in the background."""
        for record in audit_records:
            self._audit.notify(record)

    async def resolve_names(
        self,
        names: Sequence[str],
        user_id: Optional[str] = None,
        workout_id: Optional[str] = None,
    ) -> Dict[str, str]:
        """
        Resolve many names, deduplicated by normalized key, concurrently.

        Audit records are dispatched only once every name has resolved.

        Args:
            names: Free-text names in mention order (duplicates allowed)
            user_id: Requesting user
            workout_id: Workout being parsed

        Returns:
            Mapping from every input name to its catalog identifier

        Raises:
            ResolutionError: If any distinct name fails; remaining resolutions
                are cancelled and nothing is audited
        """
        id_map, audit_records = await self._resolve_all(names, user_id, workout_id)
        self.record_audit(audit_records)
        return id_map

    async def resolve_workout(
        self,
        workout: ProvisionalWorkout,
        user_id: Optional[str] = None,
        workout_id: Optional[str] = None,
    ) -> ResolvedWorkout:
        """
        Replace every exercise name in the workout with a catalog identifier.

        Output order follows the original mention order.
        """
        resolution = await self.resolve_workout_deferred(workout, user_id, workout_id)
        self.record_audit(resolution.audit_records)
        return resolution.workout

    async def resolve_workout_deferred(
        self,
        workout: ProvisionalWorkout,
        user_id: Optional[str] = None,
        workout_id: Optional[str] = None,
    ) -> WorkoutResolution:
        """
        Like resolve_workout, but returns the audit records instead of
        dispatching them. The pipeline records them once the run is done.
        """
        id_map, audit_records = await self._resolve_all(workout.exercise_names(), user_id, workout_id)

        blocks = [
            ResolvedBlock(
                label=block.label,
                notes=block.notes,
                exercises=[
                    ResolvedExercise(
                        exercise_id=id_map[exercise.exercise_name],
                        original_name=exercise.exercise_name,
                        order_in_block=exercise.order_in_block,
                        prescription=exercise.prescription,
                        notes=exercise.notes,
                        sets=exercise.sets,
                    )
                    for exercise in block.exercises
                ],
            )
            for block in workout.blocks
        ]
        resolved = ResolvedWorkout(
            name=workout.name,
            notes=workout.notes,
            date=workout.date,
            last_modified_time=workout.last_modified_time,
            blocks=blocks,
        )
        return WorkoutResolution(workout=resolved, audit_records=audit_records)
