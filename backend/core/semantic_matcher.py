"""
Semantic exercise matching over name embeddings.

Embeds the free-text name and asks the catalog for nearest neighbours. The
top hit is accepted only when its cosine similarity reaches the threshold.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from application.ports import EmbeddingService, ExerciseCatalog
from domain.models import CatalogEntry

logger = logging.getLogger(__name__)


@dataclass
class SemanticMatch:
    entry: CatalogEntry
    similarity: float


class SemanticMatcher:
    """Nearest-neighbour search with a similarity threshold."""

    def __init__(
        self,
        catalog: ExerciseCatalog,
        embedding_service: EmbeddingService,
        threshold: float = 0.75,
        limit: int = 5,
    ):
        self._catalog = catalog
        self._embedding_service = embedding_service
        self.threshold = threshold
        self._limit = limit

    async def match(self, name: str) -> Optional[SemanticMatch]:
        """
        Find a semantically equivalent catalog entry.

        Args:
            name: Free-text exercise name

        Returns:
            SemanticMatch if the best hit has similarity >= threshold, else None

        Raises:
            UpstreamServiceError: If the embedding provider fails
        """
        vector = await self._embedding_service.embed(name)
        hits = await self._catalog.search_semantic(vector, limit=self._limit, threshold=self.threshold)
        if not hits:
            return None

        entry, similarity = max(hits, key=lambda hit: hit[1])
        if similarity < self.threshold:
            return None

        logger.debug(f"Semantic match '{name}' -> '{entry.name}' (similarity={similarity:.3f})")
        return SemanticMatch(entry=entry, similarity=similarity)
