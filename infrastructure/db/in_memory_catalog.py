"""
In-memory implementation of ExerciseCatalog.

Used for local development and the CLI when no Supabase project is
configured. Lexical search uses rapidfuzz token-set similarity; semantic
search is a linear cosine scan over stored embeddings.
"""

import logging
import pathlib
import uuid
from typing import Dict, Iterable, List, Optional, Tuple, Union

import yaml
from rapidfuzz import fuzz, process, utils

from backend.core.normalize import normalize_slug
from backend.services.embedding_service import cosine_similarity
from domain.models import CatalogEntry

logger = logging.getLogger(__name__)


class InMemoryExerciseCatalog:
    """
    Dictionary-backed exercise catalog.

    Usage:
        >>> catalog = InMemoryExerciseCatalog.from_yaml("shared/catalog/exercises.yaml")
        >>> await catalog.search_lexical("bench press", limit=5)
    """

    # Minimum rapidfuzz token_set_ratio (0-100) for a lexical candidate
    LEXICAL_SCORE_CUTOFF = 70

    def __init__(self, entries: Optional[Iterable[CatalogEntry]] = None, lexical_score_cutoff: Optional[float] = None):
        self._by_id: Dict[str, CatalogEntry] = {}
        self._by_slug: Dict[str, CatalogEntry] = {}
        self._lexical_score_cutoff = (
            self.LEXICAL_SCORE_CUTOFF if lexical_score_cutoff is None else lexical_score_cutoff
        )
        for entry in entries or []:
            self._add(entry)

    @classmethod
    def from_yaml(cls, path: Union[str, pathlib.Path]) -> "InMemoryExerciseCatalog":
        """
        Load a catalog from YAML.

        Expected layout:
            exercises:
              - name: Barbell Bench Press
                tags: [chest, barbell]
                slug: barbell-bench-press   # optional
                id: ...                     # optional
        """
        data = yaml.safe_load(pathlib.Path(path).read_text()) or {}
        entries = []
        for item in data.get("exercises") or []:
            slug = item.get("slug") or normalize_slug(item["name"])
            entries.append(
                CatalogEntry(
                    id=str(item.get("id") or slug),
                    slug=slug,
                    name=item["name"],
                    tags=set(item.get("tags") or []),
                    needs_review=bool(item.get("needs_review", False)),
                )
            )
        logger.info(f"Loaded {len(entries)} exercises from {path}")
        return cls(entries)

    def _add(self, entry: CatalogEntry) -> None:
        if entry.slug in self._by_slug:
            raise ValueError(f"Duplicate exercise slug: {entry.slug}")
        self._by_id[entry.id] = entry
        self._by_slug[entry.slug] = entry

    def __len__(self) -> int:
        return len(self._by_id)

    async def search_lexical(self, query: str, limit: int = 50) -> List[CatalogEntry]:
        entries = list(self._by_id.values())
        if not entries or not query.strip():
            return []

        matches = process.extract(
            query,
            [entry.name for entry in entries],
            scorer=fuzz.token_set_ratio,
            processor=utils.default_process,
            score_cutoff=self._lexical_score_cutoff,
            limit=limit,
        )
        return [entries[index] for _, _, index in matches]

    async def search_semantic(
        self,
        vector: List[float],
        limit: int = 5,
        threshold: float = 0.75,
    ) -> List[Tuple[CatalogEntry, float]]:
        hits = []
        for entry in self._by_id.values():
            if not entry.embedding or len(entry.embedding) != len(vector):
                continue
            similarity = cosine_similarity(vector, entry.embedding)
            if similarity >= threshold:
                hits.append((entry, similarity))
        hits.sort(key=lambda hit: hit[1], reverse=True)
        return hits[:limit]

    async def find_by_slug(self, slug: str) -> Optional[CatalogEntry]:
        return self._by_slug.get(slug)

    async def find_by_id(self, exercise_id: str) -> Optional[CatalogEntry]:
        return self._by_id.get(exercise_id)

    async def create(
        self,
        name: str,
        slug: str,
        tags: Iterable[str] = (),
        needs_review: bool = True,
        embedding: Optional[List[float]] = None,
    ) -> CatalogEntry:
        entry = CatalogEntry(
            id=str(uuid.uuid4()),
            slug=slug,
            name=name,
            tags=set(tags),
            embedding=embedding,
            needs_review=needs_review,
        )
        self._add(entry)
        return entry


class InMemoryUnresolvedMentionRepository:
    """List-backed audit sink for local development."""

    def __init__(self):
        self.records: List[Dict[str, Optional[str]]] = []

    async def record_unresolved(
        self,
        original_name: str,
        resolved_id: str,
        user_id: str,
        workout_id: Optional[str] = None,
    ) -> None:
        self.records.append(
            {
                "original_name": original_name,
                "resolved_exercise_id": resolved_id,
                "user_id": user_id,
                "workout_id": workout_id,
            }
        )
