"""
Referral query management module.

Handles querying referrals, per-user referral summaries and the reward
ledger.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.models.enums import Currency
from app.models.referral_reward import ReferralReward
from app.repositories.referral_reward_repository import (
    ReferralRewardRepository,
)
from app.repositories.user_repository import UserRepository
from calculator import LevelCalculator, ReferralConfig


class ReferralQueryManager:
    """Manages referral query operations."""

    def __init__(self, session: AsyncSession, config: ReferralConfig) -> None:
        """Initialize query manager."""
        self.session = session
        self.config = config
        self.calculator = LevelCalculator(config)
        self.user_repo = UserRepository(session)
        self.reward_repo = ReferralRewardRepository(session)

    async def get_direct_referrals(
        self, email: str, page: int = 1, limit: int = 10
    ) -> dict:
        """
        Get users directly referred by a user.

        Args:
            email: Referrer key
            page: Page number
            limit: Items per page

        Returns:
            Dict with referrals, total, page, pages
        """
        page = max(page, 1)
        limit = max(limit, 1)
        offset = (page - 1) * limit

        users = await self.user_repo.get_direct_referrals(email, limit, offset)
        total = await self.user_repo.count_direct_referrals(email)

        referrals = [
            {
                "email": user.email,
                "referral_code": user.referral_code,
                "referral_count": user.referral_count,
                "joined_at": user.created_at,
            }
            for user in users
        ]

        pages = (total + limit - 1) // limit

        return {
            "referrals": referrals,
            "total": total,
            "page": page,
            "pages": pages,
        }

    async def get_referral_summary(self, email: str) -> dict | None:
        """
        Get a user's referral dashboard data.

        Args:
            email: User key

        Returns:
            Dict with level progress, rank, effective rates, totals (overall
            and per tier) and referral counts, or None if the user does not
            exist
        """
        user = await self.user_repo.get_by_email(email)
        if user is None:
            return None

        info = self.calculator.describe(user.referral_count)

        return {
            "email": user.email,
            "referral_code": user.referral_code,
            "referrer_id": user.referrer_id,
            "level_info": info,
            "level": info.level,
            "rank": info.rank_name,
            "multiplier": info.multiplier,
            "tier1_rate": self.calculator.tier_rate(1, info.level),
            "tier2_rate": self.calculator.tier_rate(2, info.level),
            "total_rewards": {
                currency.value: user.total_for(currency) for currency in Currency
            },
            "rewards_by_tier": await self.reward_repo.get_totals_by_tier(user.email),
            "direct_referrals": await self.user_repo.count_direct_referrals(user.email),
            "indirect_referrals": await self.user_repo.count_indirect_referrals(user.email),
        }

    async def get_recent_rewards(
        self, limit: int | None = None
    ) -> list[ReferralReward]:
        """Get latest ledger rows across all users."""
        return await self.reward_repo.get_recent(
            limit or settings.recent_rewards_limit
        )

    async def get_user_rewards(
        self, email: str, limit: int = 50
    ) -> list[ReferralReward]:
        return await self.reward_repo.get_user_rewards(email, limit)
