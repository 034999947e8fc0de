"""
Fire-and-forget audit notifications for reasoning-assisted selections.

Writes run as background tasks; the resolver never awaits them and their
failures are logged and swallowed.
"""

import asyncio
import logging
from typing import Optional, Set

from application.exceptions import AuditWriteError
from application.ports import UnresolvedMentionRepository
from domain.models import UnresolvedMention

logger = logging.getLogger(__name__)


class AuditNotifier:
    """Dispatches UnresolvedMention records without blocking resolution."""

    def __init__(self, repository: Optional[UnresolvedMentionRepository] = None):
        self._repository = repository
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def notify(self, mention: UnresolvedMention) -> None:
        """Schedule a write for the mention and return immediately."""
        if self._repository is None:
            return
        task = asyncio.create_task(self._record(mention))
        # Keep a strong reference until the task finishes
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _record(self, mention: UnresolvedMention) -> None:
        try:
            await self._repository.record_unresolved(
                original_name=mention.original_name,
                resolved_id=mention.resolved_exercise_id,
                user_id=mention.user_id,
                workout_id=mention.workout_id,
            )
        except Exception as e:
            error = e if isinstance(e, AuditWriteError) else AuditWriteError(str(e))
            logger.warning(f"Failed to record unresolved mention '{mention.original_name}': {error}")
        else:
            logger.debug(f"Recorded unresolved mention '{mention.original_name}'")

    async def drain(self) -> None:
        """Wait for in-flight writes; used at shutdown and in tests."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
