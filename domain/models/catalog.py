"""
Catalog entry value object.

A canonical exercise in the reference catalog. Entries created automatically
by the resolver carry needs_review=True until a human curates them.
"""

from typing import List, Optional, Set

from pydantic import BaseModel, Field


class CatalogEntry(BaseModel):
    """
    Canonical exercise stored in the catalog.

    Examples:
        >>> entry = CatalogEntry(
        ...     id="7c1e...",
        ...     slug="barbell-bench-press",
        ...     name="Barbell Bench Press",
        ...     tags={"chest", "barbell"},
        ... )
        >>> entry.needs_review
        False
    """

    id: str = Field(..., min_length=1, description="Stable catalog identifier")
    slug: str = Field(..., min_length=1, description="URL-safe unique name")
    name: str = Field(..., min_length=1, description="Display name")
    tags: Set[str] = Field(default_factory=set, description="Free-text tags")
    embedding: Optional[List[float]] = Field(
        default=None,
        repr=False,
        description="Vector embedding of the name, when available",
    )
    needs_review: bool = Field(
        default=False,
        description="True for entries created by the resolver rather than curated",
    )
