"""
Referral leaderboard module.

Ranks users by referral count. Ties are broken by email so pages and
positions are deterministic.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.models.user import User
from app.repositories.user_repository import UserRepository
from calculator import LevelCalculator, ReferralConfig


@dataclass
class LeaderboardEntry:
    """One leaderboard row."""

    position: int
    email: str
    referral_code: str
    referral_count: int
    total_rewards_usd: Decimal
    total_rewards_vcn: Decimal
    level: int
    rank_name: str | None
    rank_color: str | None


class ReferralLeaderboard:
    """Read-only leaderboard queries."""

    def __init__(
        self,
        session: AsyncSession,
        config: ReferralConfig,
        max_limit: int | None = None,
    ) -> None:
        """Initialize leaderboard."""
        self.session = session
        self.user_repo = UserRepository(session)
        self.calculator = LevelCalculator(config)
        self.max_limit = max_limit or settings.leaderboard_max_limit

    def clamp_limit(self, limit: int | None) -> int:
        """Clamp a requested page size to [1, max_limit]."""
        if limit is None:
            limit = settings.leaderboard_default_limit
        return min(max(limit, 1), self.max_limit)

    async def get_top(
        self, limit: int | None = None, offset: int = 0
    ) -> list[LeaderboardEntry]:
        """
        Get top referrers.

        Args:
            limit: Page size (clamped to the configured maximum)
            offset: Number of users to skip

        Returns:
            Entries ordered by referral count, most first
        """
        offset = max(offset, 0)
        users = await self.user_repo.get_top_by_referral_count(
            self.clamp_limit(limit), offset
        )
        return [
            self._to_entry(user, offset + index + 1)
            for index, user in enumerate(users)
        ]

    async def get_position(self, email: str) -> int | None:
        """
        Get a user's 1-based leaderboard position.

        Args:
            email: User key

        Returns:
            Position, or None if the user does not exist
        """
        user = await self.user_repo.get_by_email(email)
        if user is None:
            return None
        return await self.user_repo.count_ranked_ahead(user) + 1

    async def get_neighbors(
        self, email: str, window: int = 5
    ) -> list[LeaderboardEntry]:
        """
        Get entries around a user's position.

        Args:
            email: User key
            window: Entries to include above and below the user

        Returns:
            Up to ``2 * window + 1`` entries including the user, or an
            empty list if the user does not exist
        """
        position = await self.get_position(email)
        if position is None:
            return []

        window = max(window, 0)
        offset = max(position - 1 - window, 0)
        limit = (position - 1 - offset) + window + 1

        users = await self.user_repo.get_top_by_referral_count(limit, offset)
        return [
            self._to_entry(user, offset + index + 1)
            for index, user in enumerate(users)
        ]

    async def search(
        self, query: str, limit: int | None = None
    ) -> list[LeaderboardEntry]:
        """
        Search users by email or referral code.

        Args:
            query: Case-insensitive substring
            limit: Max results (clamped to the configured maximum)

        Returns:
            Matching entries with their overall leaderboard positions
        """
        if not query or not query.strip():
            return await self.get_top(limit)

        users = await self.user_repo.search(query, self.clamp_limit(limit))
        entries = []
        for user in users:
            position = await self.user_repo.count_ranked_ahead(user) + 1
            entries.append(self._to_entry(user, position))
        return entries

    def _to_entry(self, user: User, position: int) -> LeaderboardEntry:
        level = self.calculator.level_for_referrals(user.referral_count)
        rank = self.calculator.rank_for_level(level)
        return LeaderboardEntry(
            position=position,
            email=user.email,
            referral_code=user.referral_code,
            referral_count=user.referral_count,
            total_rewards_usd=user.total_rewards_usd,
            total_rewards_vcn=user.total_rewards_vcn,
            level=level,
            rank_name=rank.name if rank else None,
            rank_color=rank.color if rank else None,
        )
