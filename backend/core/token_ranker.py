"""
Token-overlap re-ranking of lexical candidates.

score = (query tokens present in the candidate name)
        - EXTRA_TOKEN_PENALTY * (candidate tokens beyond the query's length)

floored at 0. Both sides are tokenized with abbreviation expansion, so
"DB Bench Press" scores 3 against "Dumbbell Bench Press".
"""

from dataclasses import dataclass
from typing import List, Sequence

from backend.core.normalize import tokenize
from domain.models import CatalogEntry


@dataclass
class RankedCandidate:
    """A catalog entry with its token-overlap score."""

    entry: CatalogEntry
    score: float
    position: int  # index in the original search results


class TokenRanker:
    """Re-scores lexical search candidates against a query."""

    EXTRA_TOKEN_PENALTY = 0.1

    def score(self, query: str, candidate_name: str) -> float:
        query_tokens = tokenize(query)
        candidate_tokens = tokenize(candidate_name)
        candidate_set = set(candidate_tokens)

        matched = sum(1 for token in query_tokens if token in candidate_set)
        extra = max(0, len(candidate_tokens) - len(query_tokens))
        return max(0.0, matched - self.EXTRA_TOKEN_PENALTY * extra)

    def rank(self, query: str, candidates: Sequence[CatalogEntry]) -> List[RankedCandidate]:
        """
        Rank candidates best first.

        The sort is stable, so candidates with equal scores keep their
        original search-result order.
        """
        ranked = [
            RankedCandidate(entry=entry, score=self.score(query, entry.name), position=index)
            for index, entry in enumerate(candidates)
        ]
        ranked.sort(key=lambda candidate: candidate.score, reverse=True)
        return ranked
