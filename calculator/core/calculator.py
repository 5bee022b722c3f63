"""
Pure progression logic for the referral program.

This module contains standalone level, rank and multiplier calculations
without any dependencies on database, ORM, or app-specific code. The
reward engine and the simulator both go through ``LevelCalculator`` so
that production payouts and admin previews can never drift apart.
"""

from bisect import bisect_right
from decimal import Decimal

from calculator.core.models import MAX_LEVEL, LevelInfo, RankTier, ReferralConfig


class LevelCalculator:
    """
    Level, rank and reward multiplier calculator.

    Cumulative invite requirements for every level are computed once on
    construction, so lookups are cheap enough to run per payout.

    Example:
        >>> calc = LevelCalculator(default_config())
        >>> calc.level_for_referrals(0)
        1
        >>> calc.multiplier(1)
        Decimal('1.00')
    """

    def __init__(self, config: ReferralConfig) -> None:
        self.config = config
        # _cumulative[i] is the requirement to reach level i + 1
        self._cumulative: list[int] = []
        total = 0
        for level in range(1, MAX_LEVEL + 1):
            self._cumulative.append(total)
            total += self.invites_for_level(level)

    def invites_for_level(self, level: int) -> int:
        """
        Invites needed to advance from ``level`` to ``level + 1``.

        Args:
            level: Level number (1-100)

        Returns:
            ``invitesPerLevel`` of the range containing the level,
            0 if no configured range covers it
        """
        for threshold in self.config.level_thresholds:
            if threshold.contains(level):
                return threshold.invites_per_level
        return 0

    def cumulative_invites(self, level: int) -> int:
        """
        Total referrals required to have reached ``level``.

        Formula: sum of invites_for_level(1..level-1)

        Args:
            level: Level number, clamped to 1-100

        Returns:
            Cumulative invite requirement (0 for level 1)
        """
        level = min(max(level, 1), MAX_LEVEL)
        return self._cumulative[level - 1]

    def level_for_referrals(self, referral_count: int) -> int:
        """
        Highest level whose cumulative requirement is met.

        Args:
            referral_count: Successful referrals (negative treated as 0)

        Returns:
            Level between 1 and 100
        """
        count = max(referral_count, 0)
        # Cumulative requirements are non-decreasing, so bisect finds the
        # last level with requirement <= count.
        return max(bisect_right(self._cumulative, count), 1)

    def multiplier(self, level: int) -> Decimal:
        """
        Reward multiplier at a level.

        Formula: baseXpMultiplier + (level - 1) * xpMultiplierPerLevel
        """
        return (
            self.config.base_xp_multiplier
            + (level - 1) * self.config.xp_multiplier_per_level
        )

    def effective_rate(self, base_rate: Decimal, level: int) -> Decimal:
        """Tier rate scaled by the multiplier of the beneficiary's level."""
        return base_rate * self.multiplier(level)

    def tier_rate(self, tier: int, level: int) -> Decimal:
        """
        Effective payout rate for a referral tier.

        Args:
            tier: 1 (direct) or 2 (grand referrer)
            level: Beneficiary level

        Raises:
            ValueError: If tier is not 1 or 2
        """
        if tier == 1:
            return self.effective_rate(self.config.tier1_rate, level)
        if tier == 2:
            return self.effective_rate(self.config.tier2_rate, level)
        raise ValueError(f"Unsupported referral tier: {tier}")

    def rank_for_level(self, level: int) -> RankTier | None:
        """
        Most senior rank the level qualifies for.

        Returns:
            Rank with the highest ``min_level <= level``, or None when the
            rank table has no qualifying entry
        """
        qualifying = [r for r in self.config.ranks if r.min_level <= level]
        if not qualifying:
            return None
        return max(qualifying, key=lambda r: r.min_level)

    def describe(self, referral_count: int) -> LevelInfo:
        """
        Full progression state for a referral count.

        Args:
            referral_count: Successful referrals

        Returns:
            LevelInfo with level, rank, multiplier and next-level progress
        """
        count = max(referral_count, 0)
        level = self.level_for_referrals(count)
        is_max = level >= MAX_LEVEL

        next_cumulative = None if is_max else self.cumulative_invites(level + 1)
        remaining = 0 if next_cumulative is None else max(next_cumulative - count, 0)

        return LevelInfo(
            referral_count=count,
            level=level,
            rank=self.rank_for_level(level),
            multiplier=self.multiplier(level),
            cumulative_invites=self.cumulative_invites(level),
            next_level_cumulative=next_cumulative,
            invites_to_next_level=remaining,
            is_max_level=is_max,
        )
