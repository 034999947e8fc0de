"""
Supabase implementation of UnresolvedMentionRepository.

Stores reasoning-assisted selections in the unresolved_exercises table for
human review.
"""

import logging
from typing import Optional

from supabase import AsyncClient

from application.exceptions import AuditWriteError

logger = logging.getLogger(__name__)


class SupabaseUnresolvedMentionRepository:
    """Supabase-backed audit sink for unresolved exercise mentions."""

    def __init__(self, client: AsyncClient, table: str = "unresolved_exercises"):
        self._client = client
        self._table = table

    async def record_unresolved(
        self,
        original_name: str,
        resolved_id: str,
        user_id: str,
        workout_id: Optional[str] = None,
    ) -> None:
        """
        Insert one audit record.

        Raises:
            AuditWriteError: If the insert fails
        """
        record = {
            "original_name": original_name,
            "resolved_exercise_id": resolved_id,
            "user_id": user_id,
            "workout_id": workout_id,
        }
        try:
            await self._client.table(self._table).insert(record).execute()
        except Exception as e:
            raise AuditWriteError(f"insert into {self._table} failed: {e}") from e
