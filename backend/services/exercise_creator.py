"""
Exercise Creator Service

Inserts new catalog entries on behalf of the resolver. Every entry created
here is flagged needs_review=True. Creation is get-or-create by slug, so two
spellings that slugify identically share one entry; semantically identical
names with different slugs may still produce reviewable duplicates.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from application.ports import EmbeddingService, ExerciseCatalog
from backend.core.normalize import normalize_slug
from domain.models import CatalogEntry

logger = logging.getLogger(__name__)


@dataclass
class CreatedExercise:
    """Result of a create request."""

    entry: CatalogEntry
    created: bool  # False when an entry with the same slug already existed


class ExerciseCreator:
    """Creates review-flagged catalog entries, with embeddings when available."""

    def __init__(self, catalog: ExerciseCatalog, embedding_service: Optional[EmbeddingService] = None):
        self._catalog = catalog
        self._embedding_service = embedding_service

    async def create(self, name: str, tags: Iterable[str] = ()) -> CreatedExercise:
        """
        Get or create a catalog entry for an exercise name.

        Args:
            name: Canonical display name proposed for the exercise
            tags: Free-text tags

        Returns:
            CreatedExercise with the entry and whether it was newly inserted

        Raises:
            ValueError: If no slug can be derived from the name
        """
        display_name = " ".join(name.split())
        slug = normalize_slug(display_name)
        if not slug:
            raise ValueError(f"Cannot derive a slug from exercise name '{name}'")

        existing = await self._catalog.find_by_slug(slug)
        if existing is not None:
            logger.info(f"Exercise '{display_name}' already exists as '{existing.slug}'")
            return CreatedExercise(entry=existing, created=False)

        embedding = None
        if self._embedding_service is not None:
            embedding = await self._embedding_service.embed(display_name)

        clean_tags = sorted({tag.strip().lower() for tag in tags if tag and tag.strip()})
        entry = await self._catalog.create(
            name=display_name,
            slug=slug,
            tags=clean_tags,
            needs_review=True,
            embedding=embedding,
        )
        logger.info(f"Created catalog exercise '{entry.name}' ({entry.id}) pending review")
        return CreatedExercise(entry=entry, created=True)
