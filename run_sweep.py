#!/usr/bin/env python3
"""
Run the liveness sweep once, outside the API process.

Useful when the background sweep is disabled (``LIVENESS_SWEEP_ENABLED=false``)
or to check how many sessions are stale before a deploy.

Usage:
    python run_sweep.py                  # Demote stale sessions using the configured threshold
    python run_sweep.py --dry-run        # Only report how many sessions are stale
    python run_sweep.py --threshold 120  # Override the staleness threshold (seconds)
"""
import argparse
import asyncio
import sys

from editor_activity.config import get_settings
from editor_activity.database import AsyncSessionLocal
from editor_activity.services import LivenessService


async def run_sweep(threshold_seconds: int, dry_run: bool = False) -> int:
    """
    Count or demote stale sessions.

    Args:
        threshold_seconds: Heartbeat age after which a session is stale
        dry_run: Report the stale count without changing anything

    Returns:
        Number of stale (dry run) or demoted sessions
    """
    async with AsyncSessionLocal() as session:
        service = LivenessService(session)

        print("=" * 60)
        print("LIVENESS SWEEP")
        print("=" * 60)
        print(f"Threshold: {threshold_seconds}s")

        if dry_run:
            stale = await service.count_stale_sessions(threshold_seconds)
            print(f"\nDRY RUN: {stale} session(s) would be set to offline")
            return stale

        demoted = await service.demote_stale_sessions(threshold_seconds)
        print(f"\n{demoted} session(s) set to offline")
        return demoted


def main() -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Run the activity session liveness sweep once")
    parser.add_argument("--dry-run", action="store_true", help="Only report how many sessions are stale")
    parser.add_argument(
        "--threshold",
        type=int,
        default=settings.liveness_stale_threshold_seconds,
        help=f"Staleness threshold in seconds (default: {settings.liveness_stale_threshold_seconds})",
    )
    args = parser.parse_args()

    if args.threshold < 1:
        parser.error("--threshold must be at least 1 second")

    try:
        asyncio.run(run_sweep(args.threshold, dry_run=args.dry_run))
    except KeyboardInterrupt:
        print("\nSweep cancelled by user")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
