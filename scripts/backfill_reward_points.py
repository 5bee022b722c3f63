#!/usr/bin/env python3
"""
Backfill reward points (RP) for existing referrers.

Awards referral RP for every referral and level-up RP for every level
milestone the user has already reached, minus what they already hold.

Usage:
    python scripts/backfill_reward_points.py --dry-run  # Preview changes
    python scripts/backfill_reward_points.py            # Apply changes
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from app.database import create_engine, create_session_maker
from app.services.referral_service import ReferralService
from app.utils.logging import setup_logging


async def backfill(dry_run: bool) -> None:
    engine = create_engine()
    session_maker = create_session_maker(engine)

    logger.info(f"Mode: {'DRY RUN (no changes)' if dry_run else 'LIVE (will write)'}")

    try:
        async with session_maker() as session:
            report = await ReferralService(session).backfill_reward_points(
                dry_run=dry_run
            )
    finally:
        await engine.dispose()

    for entry in report.details:
        logger.info(
            f"[{entry.email}] referrals={entry.referrals} level={entry.level} "
            f"existing={entry.existing} expected={entry.expected} "
            f"awarded={entry.awarded} -> {entry.status}"
        )

    logger.info("=== Summary ===")
    logger.info(f"Users with referrals: {report.processed}")
    logger.info(f"Users awarded RP: {report.awarded}")
    logger.info(f"Users skipped: {report.skipped}")
    logger.success(f"Total RP awarded: {report.total_awarded}")


def main():
    parser = argparse.ArgumentParser(
        description="Backfill reward points from referral counts"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview changes without applying them"
    )
    args = parser.parse_args()

    setup_logging()
    asyncio.run(backfill(args.dry_run))


if __name__ == "__main__":
    main()
