"""
Default constants for the referral progression calculator.

Contains the configuration used when no document has been saved from the
admin settings screen yet.
"""

from decimal import Decimal

from calculator.core.models import (
    MAX_LEVEL,
    LevelThreshold,
    RankTier,
    ReferralConfig,
)

DEFAULT_TIER1_RATE = Decimal("0.10")  # 10% direct
DEFAULT_TIER2_RATE = Decimal("0.02")  # 2% indirect
DEFAULT_BASE_XP_MULTIPLIER = Decimal("1.0")
DEFAULT_XP_MULTIPLIER_PER_LEVEL = Decimal("0.05")

DEFAULT_ENABLED_EVENTS: tuple[str, ...] = ("subscription", "token_sale", "staking")

DEFAULT_LEVEL_THRESHOLDS: tuple[LevelThreshold, ...] = (
    LevelThreshold(min_level=1, max_level=20, invites_per_level=1),
    LevelThreshold(min_level=21, max_level=50, invites_per_level=2),
    LevelThreshold(min_level=51, max_level=80, invites_per_level=3),
    LevelThreshold(min_level=81, max_level=MAX_LEVEL, invites_per_level=5),
)

DEFAULT_RANKS: tuple[RankTier, ...] = (
    RankTier(name="Novice", min_level=1, color="text-gray-400"),
    RankTier(name="Scout", min_level=10, color="text-blue-400"),
    RankTier(name="Ranger", min_level=20, color="text-emerald-400"),
    RankTier(name="Guardian", min_level=30, color="text-cyan-400"),
    RankTier(name="Elite", min_level=40, color="text-indigo-400"),
    RankTier(name="Captain", min_level=50, color="text-violet-400"),
    RankTier(name="Commander", min_level=60, color="text-orange-400"),
    RankTier(name="Warlord", min_level=70, color="text-red-400"),
    RankTier(name="Titan", min_level=80, color="text-rose-400"),
    RankTier(name="Visionary", min_level=90, color="text-yellow-400"),
)


def default_config() -> ReferralConfig:
    """
    Build the default referral configuration.

    Returns:
        ReferralConfig with default rates, events, thresholds and ranks
    """
    return ReferralConfig(
        tier1_rate=DEFAULT_TIER1_RATE,
        tier2_rate=DEFAULT_TIER2_RATE,
        enabled_events=DEFAULT_ENABLED_EVENTS,
        base_xp_multiplier=DEFAULT_BASE_XP_MULTIPLIER,
        xp_multiplier_per_level=DEFAULT_XP_MULTIPLIER_PER_LEVEL,
        level_thresholds=DEFAULT_LEVEL_THRESHOLDS,
        ranks=DEFAULT_RANKS,
    )
