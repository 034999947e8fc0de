"""
Lexical exercise matching.

Runs the catalog's trigram/substring search on the abbreviation-expanded name
and re-ranks the candidates with the TokenRanker. Any candidate at all is a
match; the top-ranked one wins.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from application.ports import ExerciseCatalog
from backend.core.normalize import expand_abbreviations
from backend.core.token_ranker import RankedCandidate, TokenRanker
from domain.models import CatalogEntry

logger = logging.getLogger(__name__)


@dataclass
class LexicalMatch:
    entry: CatalogEntry
    score: float
    candidates: int


class LexicalMatcher:
    """Trigram search plus token re-ranking over the catalog."""

    def __init__(
        self,
        catalog: ExerciseCatalog,
        ranker: Optional[TokenRanker] = None,
        limit: int = 50,
    ):
        self._catalog = catalog
        self._ranker = ranker or TokenRanker()
        self._limit = limit

    async def candidates(self, name: str) -> List[RankedCandidate]:
        """Search the catalog and return ranked candidates, best first."""
        query = expand_abbreviations(name)
        if not query:
            return []
        results = await self._catalog.search_lexical(query, limit=self._limit)
        return self._ranker.rank(name, results)

    async def match(self, name: str) -> Optional[LexicalMatch]:
        """
        Find the best lexical match for an exercise name.

        Args:
            name: Free-text exercise name

        Returns:
            LexicalMatch for the top-ranked candidate, or None when the search
            returned nothing
        """
        ranked = await self.candidates(name)
        if not ranked:
            logger.debug(f"No lexical candidates for '{name}'")
            return None

        best = ranked[0]
        logger.debug(
            f"Lexical match '{name}' -> '{best.entry.name}' "
            f"(score={best.score:.2f}, candidates={len(ranked)})"
        )
        return LexicalMatch(entry=best.entry, score=best.score, candidates=len(ranked))
