"""Background liveness sweep that marks stale sessions offline."""
import asyncio
import logging
from datetime import datetime
from typing import Optional

from editor_activity.database import AsyncSessionLocal
from editor_activity.services.liveness_service import LivenessService
from editor_activity.config import get_settings

logger = logging.getLogger(__name__)

# Track if a sweep tick is running to prevent overlapping executions
_sweep_running = False


async def run_liveness_sweep(session_factory=None, now: Optional[datetime] = None) -> int:
    """Run one sweep tick.

    Never raises: a failed tick is logged and reported as zero demotions so
    the surrounding loop keeps going.

    Args:
        session_factory: Async session factory, defaults to the app's
        now: Reference time passed through to the demotion query

    Returns:
        Number of sessions demoted in this tick
    """
    global _sweep_running

    if _sweep_running:
        logger.debug("Liveness sweep already running, skipping")
        return 0

    settings = get_settings()
    factory = session_factory or AsyncSessionLocal

    _sweep_running = True
    try:
        async with factory() as db:
            demoted = await LivenessService(db).demote_stale_sessions(
                settings.liveness_stale_threshold_seconds, now=now
            )

        if demoted > 0:
            logger.info(f"[Auto-Reset] {demoted} activity session(s) set to offline")
        return demoted

    except Exception as e:
        logger.error(f"Liveness sweep error: {e}", exc_info=True)
        return 0
    finally:
        _sweep_running = False


async def liveness_sweep_cycle() -> None:
    """Run the liveness sweep on a fixed interval until cancelled."""
    settings = get_settings()
    interval = settings.liveness_sweep_interval_seconds

    logger.info(
        f"Liveness sweep starting (interval: {interval}s, "
        f"threshold: {settings.liveness_stale_threshold_seconds}s)"
    )

    while True:
        try:
            await run_liveness_sweep()
            await asyncio.sleep(interval)
        except asyncio.CancelledError:
            logger.info("Liveness sweep cancelled")
            raise
