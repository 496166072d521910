"""Liveness demotion for stale activity sessions."""
import logging
from datetime import datetime, UTC, timedelta
from typing import Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from editor_activity.models import ActivitySession

logger = logging.getLogger(__name__)


class LivenessService:
    """Marks sessions offline once their heartbeat goes stale."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _stale_filter(threshold_seconds: int, now: Optional[datetime]):
        cutoff = (now or datetime.now(UTC)) - timedelta(seconds=threshold_seconds)
        return (
            ActivitySession.last_heartbeat < cutoff,
            or_(ActivitySession.is_online.is_(True), ActivitySession.is_editor_focused.is_(True)),
        )

    async def count_stale_sessions(
        self, threshold_seconds: int, now: Optional[datetime] = None
    ) -> int:
        """Count sessions the next sweep would demote."""
        result = await self.db.execute(
            select(func.count())
            .select_from(ActivitySession)
            .where(*self._stale_filter(threshold_seconds, now))
        )
        return result.scalar_one()

    async def demote_stale_sessions(
        self, threshold_seconds: int, now: Optional[datetime] = None
    ) -> int:
        """
        Set ``is_online`` and ``is_editor_focused`` to false on stale sessions.

        A session is stale when its ``last_heartbeat`` is older than
        ``threshold_seconds``. Only the two flags change; ``last_heartbeat``
        is left alone so a demoted session stays stale until the client
        sends a real heartbeat. Sessions that are already fully offline are
        not matched, so repeat sweeps report zero.

        Args:
            threshold_seconds: Heartbeat age after which a session is stale
            now: Reference time, defaults to the current UTC time

        Returns:
            Number of sessions demoted
        """
        result = await self.db.execute(
            update(ActivitySession)
            .where(*self._stale_filter(threshold_seconds, now))
            .values(is_online=False, is_editor_focused=False)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        demoted = result.rowcount or 0
        logger.debug(f"Demoted {demoted} session(s) with heartbeats older than {threshold_seconds}s")
        return demoted
