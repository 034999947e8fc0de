"""
Exercise Catalog Interface (Port).

Read/write access to the canonical exercise catalog used by the resolver.
Implementations may use Supabase (pg_trgm + pgvector) or an in-memory store.
"""

from typing import Iterable, List, Optional, Protocol, Tuple

from domain.models import CatalogEntry


class ExerciseCatalog(Protocol):
    """
    Abstract interface for the exercise catalog.

    Lexical and semantic search are read paths used on every resolution;
    create is only reached when the reasoning service asks for a new entry.
    """

    async def search_lexical(self, query: str, limit: int = 50) -> List[CatalogEntry]:
        """
        Trigram/substring similarity search over exercise names.

        Args:
            query: Exercise name (abbreviations already expanded)
            limit: Maximum candidates to return

        Returns:
            Candidates ordered by the store's own similarity, best first
        """
        ...

    async def search_semantic(
        self,
        vector: List[float],
        limit: int = 5,
        threshold: float = 0.75,
    ) -> List[Tuple[CatalogEntry, float]]:
        """
        Nearest-neighbour search over name embeddings.

        Args:
            vector: Query embedding
            limit: Maximum hits to return
            threshold: Minimum cosine similarity

        Returns:
            (entry, similarity) pairs, highest similarity first
        """
        ...

    async def find_by_slug(self, slug: str) -> Optional[CatalogEntry]:
        """Get an entry by slug, or None."""
        ...

    async def find_by_id(self, exercise_id: str) -> Optional[CatalogEntry]:
        """Get an entry by identifier, or None."""
        ...

    async def create(
        self,
        name: str,
        slug: str,
        tags: Iterable[str] = (),
        needs_review: bool = True,
        embedding: Optional[List[float]] = None,
    ) -> CatalogEntry:
        """
        Insert a new catalog entry.

        Args:
            name: Display name
            slug: Unique slug derived from the name
            tags: Free-text tags
            needs_review: Whether the entry awaits human curation
            embedding: Optional name embedding

        Returns:
            The created entry with its assigned identifier
        """
        ...
