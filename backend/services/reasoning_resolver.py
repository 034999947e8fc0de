"""
Reasoning-Assisted Exercise Resolver

Last resort when neither semantic nor lexical matching found a catalog entry.
The reasoning service negotiates through tools:

- search_exercises: bounded; the search after the limit returns an error result
- select_exercise: terminal, must name an id that exists in the catalog
- create_exercise: terminal, creates a needs_review entry (optional)

Ending without a terminal call is a ResolutionError for that exercise.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from application.exceptions import ResolutionError
from application.ports import (
    ExerciseCatalog,
    ModelTier,
    NegotiationError,
    ReasoningService,
    ToolCallError,
    ToolResult,
)
from backend.core.lexical_matcher import LexicalMatcher
from backend.services.exercise_creator import ExerciseCreator
from backend.services.tool_schemas import (
    CREATE_EXERCISE,
    SEARCH_EXERCISES,
    SELECT_EXERCISE,
    get_resolution_tools,
)
from domain.models import CatalogEntry

logger = logging.getLogger(__name__)


RESOLVER_SYSTEM_PROMPT = """You match a user's exercise name to an exercise in our catalog.

Process:
1. Search the catalog with a few query strategies: the name without parenthetical
   modifiers, equipment spelled out ("DB" -> "dumbbell"), or common synonyms.
2. Decide.

Select an existing exercise ONLY for a true match. Abbreviations, word order and
modifiers such as "(alternating)", "(each side)" or "paused" are fine. A different
piece of equipment or a fundamentally different movement is NOT a match.

If there is no true match, create a new exercise. A slightly duplicate new entry is
reviewed cheaply by a human; a wrong match silently corrupts the user's training
history. When unsure, create.

Searches are limited. When the limit is reached you must select or create."""

RESOLVER_SYSTEM_PROMPT_NO_CREATE = """You match a user's exercise name to an exercise in our catalog.

Search the catalog with a few query strategies (the name without parenthetical
modifiers, equipment spelled out, common synonyms), then select the closest
exercise. Prefer the same equipment and movement pattern. Searches are limited;
when the limit is reached you must select."""


@dataclass
class ReasoningOutcome:
    """Terminal outcome of one negotiation."""

    entry: CatalogEntry
    action: str  # SELECT_EXERCISE or CREATE_EXERCISE
    searches: int = 0
    reasoning: Optional[str] = None

    @property
    def created(self) -> bool:
        return self.action == CREATE_EXERCISE


@dataclass
class _NegotiationSession:
    """Per-exercise tool handler state; one session per resolve() call."""

    resolver: "ReasoningAssistedResolver"
    exercise_name: str
    searches: int = 0
    rejected_searches: int = 0
    queries: List[str] = field(default_factory=list)

    async def handle(self, tool_name: str, arguments: Dict[str, Any]) -> ToolResult:
        if tool_name == SEARCH_EXERCISES:
            return await self._search(arguments)
        if tool_name == SELECT_EXERCISE:
            return await self._select(arguments)
        if tool_name == CREATE_EXERCISE and self.resolver.allow_create:
            return await self._create(arguments)
        raise ToolCallError(f"Unknown tool: {tool_name}")

    async def _search(self, arguments: Dict[str, Any]) -> ToolResult:
        max_searches = self.resolver.max_searches
        if self.searches >= max_searches:
            self.rejected_searches += 1
            terminal_tools = "select_exercise or create_exercise" if self.resolver.allow_create else "select_exercise"
            logger.info(f"Search limit reached for '{self.exercise_name}' ({max_searches})")
            return ToolResult.error(
                f"Search limit reached ({max_searches}). You must now call {terminal_tools}."
            )

        query = str(arguments.get("query") or "").strip()
        if not query:
            raise ToolCallError("search_exercises requires a non-empty 'query'")

        limit = _coerce_limit(arguments.get("limit"), self.resolver.search_result_limit)
        self.searches += 1
        self.queries.append(query)

        ranked = await self.resolver.lexical_matcher.candidates(query)
        results = [
            {
                "id": candidate.entry.id,
                "name": candidate.entry.name,
                "tags": sorted(candidate.entry.tags),
                "score": round(candidate.score, 2),
            }
            for candidate in ranked[:limit]
        ]
        logger.debug(f"Tool search '{query}' for '{self.exercise_name}' returned {len(results)} result(s)")
        return ToolResult.ok(
            {
                "results": results,
                "count": len(results),
                "searches_remaining": max_searches - self.searches,
            }
        )

    async def _select(self, arguments: Dict[str, Any]) -> ToolResult:
        exercise_id = str(arguments.get("exercise_id") or "").strip()
        if not exercise_id:
            raise ToolCallError("select_exercise requires 'exercise_id'")

        entry = await self.resolver.catalog.find_by_id(exercise_id)
        if entry is None:
            raise ToolCallError(
                f"Exercise id '{exercise_id}' does not exist. Select an id from search results"
                + (" or create a new exercise." if self.resolver.allow_create else ".")
            )

        outcome = ReasoningOutcome(
            entry=entry,
            action=SELECT_EXERCISE,
            searches=self.searches,
            reasoning=arguments.get("reasoning"),
        )
        return ToolResult.stop(outcome, {"success": True, "selected_exercise_id": entry.id})

    async def _create(self, arguments: Dict[str, Any]) -> ToolResult:
        name = str(arguments.get("name") or "").strip() or self.exercise_name
        tags = arguments.get("tags") or []
        if not isinstance(tags, list):
            tags = [tags]

        try:
            created = await self.resolver.creator.create(name, [str(tag) for tag in tags])
        except ValueError as e:
            raise ToolCallError(str(e)) from e

        outcome = ReasoningOutcome(
            entry=created.entry,
            action=CREATE_EXERCISE,
            searches=self.searches,
            reasoning=arguments.get("reasoning"),
        )
        return ToolResult.stop(outcome, {"success": True, "created_exercise_id": created.entry.id})


def _coerce_limit(value: Any, default: int) -> int:
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return default
    return max(1, min(limit, default))


class ReasoningAssistedResolver:
    """
    Resolves one exercise name through a bounded tool negotiation.

    Usage:
        >>> resolver = ReasoningAssistedResolver(catalog, reasoning, lexical, creator, max_searches=3)
        >>> outcome = await resolver.resolve("Landmine Rotational Press")
        >>> outcome.created, outcome.entry.needs_review
        (True, True)
    """

    def __init__(
        self,
        catalog: ExerciseCatalog,
        reasoning_service: ReasoningService,
        lexical_matcher: LexicalMatcher,
        creator: ExerciseCreator,
        max_searches: int = 3,
        max_turns: int = 6,
        allow_create: bool = True,
        search_result_limit: int = 10,
    ):
        """
        Initialize the resolver.

        Args:
            catalog: Catalog used to verify selected ids
            reasoning_service: Service that drives the negotiation
            lexical_matcher: Backs the search_exercises tool
            creator: Backs the create_exercise tool
            max_searches: Searches allowed per exercise name
            max_turns: Model turns allowed per exercise name
            allow_create: Offer create_exercise as a terminal action
            search_result_limit: Maximum results returned per search
        """
        self.catalog = catalog
        self.reasoning = reasoning_service
        self.lexical_matcher = lexical_matcher
        self.creator = creator
        self.max_searches = max_searches
        self.max_turns = max_turns
        self.allow_create = allow_create
        self.search_result_limit = search_result_limit

    async def resolve(self, exercise_name: str) -> ReasoningOutcome:
        """
        Negotiate a catalog entry for an exercise name.

        Raises:
            ResolutionError: If the negotiation ends without select/create
            UpstreamServiceError: If the reasoning service fails
        """
        session = _NegotiationSession(resolver=self, exercise_name=exercise_name)
        system_prompt = RESOLVER_SYSTEM_PROMPT if self.allow_create else RESOLVER_SYSTEM_PROMPT_NO_CREATE
        user_message = (
            f'No confident catalog match was found for "{exercise_name}". '
            f"You may search up to {self.max_searches} time(s)."
        )

        try:
            result = await self.reasoning.call_with_tools(
                system_prompt,
                user_message,
                get_resolution_tools(allow_create=self.allow_create),
                session.handle,
                model_tier=ModelTier.FAST,
                temperature=0.0,
                max_tokens=1024,
                max_turns=self.max_turns,
            )
        except NegotiationError as e:
            logger.warning(f"Negotiation for '{exercise_name}' failed after {session.searches} search(es): {e}")
            raise ResolutionError(exercise_name, str(e)) from e

        outcome = result.value
        if not isinstance(outcome, ReasoningOutcome):
            raise ResolutionError(exercise_name, "negotiation ended without a catalog entry")

        logger.info(
            f"Reasoning resolved '{exercise_name}' -> '{outcome.entry.name}' "
            f"via {outcome.action} after {outcome.searches} search(es)"
        )
        return outcome
