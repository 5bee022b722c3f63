#!/usr/bin/env python3
"""
Preview the referral reward curve for levels 1-100.

Uses the stored config by default, or a JSON file with the same shape as
the admin settings document (camelCase keys) to preview unsaved changes.

Usage:
    python scripts/simulate_rewards.py                      # Stored config
    python scripts/simulate_rewards.py --config new.json    # Edited config
    python scripts/simulate_rewards.py --defaults --max-level 30
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger
from pydantic import ValidationError

from app.database import create_engine, create_session_maker
from app.services.referral import ReferralConfigService
from app.utils.logging import setup_logging
from calculator import (
    MAX_LEVEL,
    ReferralConfig,
    RewardCurveSimulator,
    default_config,
    format_simulation_table,
)


async def load_stored_config() -> ReferralConfig:
    """Read the config snapshot from the database."""
    engine = create_engine()
    session_maker = create_session_maker(engine)
    try:
        async with session_maker() as session:
            return await ReferralConfigService(session).get_config()
    finally:
        await engine.dispose()


def load_config_file(path: Path) -> ReferralConfig:
    with path.open(encoding="utf-8") as fh:
        return ReferralConfig.model_validate(json.load(fh))


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Preview referral levels, ranks and effective rates"
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--config",
        type=Path,
        help="JSON config document to preview instead of the stored one"
    )
    source.add_argument(
        "--defaults",
        action="store_true",
        help="Preview the built-in default config"
    )
    parser.add_argument(
        "--max-level",
        type=int,
        default=MAX_LEVEL,
        help="Last level to show (default: 100)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print rows as JSON instead of a table"
    )
    args = parser.parse_args()

    setup_logging(log_file="")

    try:
        if args.defaults:
            config = default_config()
        elif args.config:
            config = load_config_file(args.config)
        else:
            config = asyncio.run(load_stored_config())
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Cannot load referral config: {e}")
        return 1

    simulator = RewardCurveSimulator(config)

    if args.json:
        print(json.dumps(simulator.as_dicts(args.max_level), indent=2))
    else:
        print(format_simulation_table(simulator.run(args.max_level)))

    return 0


if __name__ == "__main__":
    sys.exit(main())
