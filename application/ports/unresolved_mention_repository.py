"""
Unresolved Mention Repository Interface (Port).

Audit sink for exercise names that needed the reasoning service to pick a
catalog entry. Writes are best-effort.
"""

from typing import Optional, Protocol


class UnresolvedMentionRepository(Protocol):
    """Abstract interface for recording reasoning-assisted selections."""

    async def record_unresolved(
        self,
        original_name: str,
        resolved_id: str,
        user_id: str,
        workout_id: Optional[str] = None,
    ) -> None:
        """
        Record one reasoning-assisted selection for human review.

        Args:
            original_name: Free-text name as written
            resolved_id: Catalog id the reasoning service selected
            user_id: Requesting user
            workout_id: Workout being parsed, if known

        Raises:
            AuditWriteError: If the write fails
        """
        ...
