"""
Supabase implementation of ExerciseCatalog.

Lexical search uses the search_exercises_trigram RPC (pg_trgm) with an ILIKE
substring fallback; semantic search uses the match_exercises RPC (pgvector).
All calls go through the async Supabase client.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from supabase import AsyncClient

from application.exceptions import UpstreamServiceError
from domain.models import CatalogEntry

logger = logging.getLogger(__name__)

EXERCISE_COLUMNS = "id, slug, name, tags, needs_review"


def _row_to_entry(row: Dict[str, Any]) -> CatalogEntry:
    embedding = row.get("name_embedding")
    if isinstance(embedding, str):
        # pgvector columns come back as "[0.1,0.2,...]"
        embedding = json.loads(embedding)
    return CatalogEntry(
        id=str(row["id"]),
        slug=row["slug"],
        name=row["name"],
        tags=set(row.get("tags") or []),
        embedding=embedding,
        needs_review=bool(row.get("needs_review", False)),
    )


class SupabaseExerciseCatalog:
    """Supabase-backed implementation of ExerciseCatalog."""

    def __init__(self, client: AsyncClient, table: str = "exercises"):
        """
        Initialize with Supabase client.

        Args:
            client: Async Supabase client instance (injected, not global)
            table: Catalog table name
        """
        self._client = client
        self._table = table

    async def search_lexical(self, query: str, limit: int = 50) -> List[CatalogEntry]:
        """Trigram similarity search, falling back to ILIKE substring match."""
        try:
            result = await self._client.rpc(
                "search_exercises_trigram",
                {"search_query": query, "match_count": limit},
            ).execute()
            rows = result.data or []

            if not rows:
                pattern = f"%{self._escape_ilike(query)}%"
                result = await (
                    self._client.table(self._table)
                    .select(EXERCISE_COLUMNS)
                    .ilike("name", pattern)
                    .limit(limit)
                    .execute()
                )
                rows = result.data or []
        except Exception as e:
            logger.error(f"Lexical catalog search failed for '{query}': {e}")
            raise UpstreamServiceError("catalog", "lexical search failed") from e

        return [_row_to_entry(row) for row in rows]

    async def search_semantic(
        self,
        vector: List[float],
        limit: int = 5,
        threshold: float = 0.75,
    ) -> List[Tuple[CatalogEntry, float]]:
        """Search by embedding similarity using the match_exercises RPC."""
        try:
            result = await self._client.rpc(
                "match_exercises",
                {
                    "query_embedding": vector,
                    "match_threshold": threshold,
                    "match_count": limit,
                },
            ).execute()
        except Exception as e:
            logger.error(f"Semantic catalog search failed: {e}")
            raise UpstreamServiceError("catalog", "semantic search failed") from e

        return [(_row_to_entry(row), float(row.get("similarity", 0.0))) for row in result.data or []]

    async def find_by_slug(self, slug: str) -> Optional[CatalogEntry]:
        return await self._find_one("slug", slug)

    async def find_by_id(self, exercise_id: str) -> Optional[CatalogEntry]:
        return await self._find_one("id", exercise_id)

    async def create(
        self,
        name: str,
        slug: str,
        tags: Iterable[str] = (),
        needs_review: bool = True,
        embedding: Optional[List[float]] = None,
    ) -> CatalogEntry:
        record: Dict[str, Any] = {
            "name": name,
            "slug": slug,
            "tags": sorted(set(tags)),
            "needs_review": needs_review,
        }
        if embedding is not None:
            record["name_embedding"] = embedding

        try:
            result = await self._client.table(self._table).insert(record).execute()
        except Exception as e:
            logger.error(f"Failed to create exercise '{slug}': {e}")
            raise UpstreamServiceError("catalog", "exercise creation failed") from e

        if not result.data:
            raise UpstreamServiceError("catalog", f"insert of '{slug}' returned no row")
        return _row_to_entry(result.data[0])

    async def _find_one(self, column: str, value: str) -> Optional[CatalogEntry]:
        try:
            result = await (
                self._client.table(self._table)
                .select(EXERCISE_COLUMNS)
                .eq(column, value)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Catalog lookup by {column} failed: {e}")
            raise UpstreamServiceError("catalog", f"lookup by {column} failed") from e

        if not result.data:
            return None
        return _row_to_entry(result.data[0])

    @staticmethod
    def _escape_ilike(value: str) -> str:
        """Escape ILIKE wildcards in user input."""
        return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
