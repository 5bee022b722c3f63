"""
Referral service.

Entry point for revenue flows and admin screens. Loads the current config
snapshot and hands it to the referral managers.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import Currency
from app.models.referral_reward import ReferralReward
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService
from app.services.referral import (
    BackfillReport,
    LeaderboardEntry,
    ProcessResult,
    ReferralChainManager,
    ReferralConfigService,
    ReferralLeaderboard,
    ReferralQueryManager,
    ReferralRewardProcessor,
    RewardPointsManager,
)
from calculator import LevelCalculator, LevelInfo, ReferralConfig, SimulationRow


class ReferralService(BaseService):
    """Referral service for managing referral chains and rewards."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral service."""
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.config_service = ReferralConfigService(session)
        self.reward_processor = ReferralRewardProcessor(session)

    # Config

    async def get_config(self) -> ReferralConfig:
        return await self.config_service.get_config()

    async def save_config(
        self, config: ReferralConfig | dict[str, Any]
    ) -> ReferralConfig:
        return await self.config_service.save_config(config)

    async def preview_config(
        self, config: ReferralConfig | dict[str, Any] | None = None
    ) -> list[SimulationRow]:
        return await self.config_service.preview(config)

    # Rewards

    async def process_referral_rewards(
        self,
        event: str,
        triggering_user_id: str,
        amount: Decimal,
        currency: Currency | str,
        tx_hash: str | None = None,
    ) -> ProcessResult:
        """
        Process referral rewards for a revenue event.

        Reads the config snapshot once and passes it to the processor.

        Args:
            event: Event type (subscription, token_sale, staking)
            triggering_user_id: User whose action produced revenue
            amount: Revenue amount
            currency: Payout currency
            tx_hash: Optional transaction hash used for deduplication

        Returns:
            ProcessResult
        """
        config = await self.get_config()
        return await self.reward_processor.process_referral_rewards(
            event=event,
            triggering_user_id=triggering_user_id,
            amount=amount,
            currency=currency,
            config=config,
            tx_hash=tx_hash,
        )

    # Signup

    async def create_user(
        self, email: str, referral_code: str | None = None
    ) -> User:
        chain_manager = ReferralChainManager(self.session, await self.get_config())
        return await chain_manager.create_user(email, referral_code)

    async def link_referral(
        self, email: str, referral_code: str
    ) -> tuple[bool, str | None]:
        chain_manager = ReferralChainManager(self.session, await self.get_config())
        return await chain_manager.link_referral(email, referral_code)

    # Progression

    async def get_level_info(self, email: str) -> LevelInfo | None:
        """
        Get level, rank and multiplier for a user.

        Args:
            email: User key

        Returns:
            LevelInfo or None if the user does not exist
        """
        user = await self.user_repo.get_by_email(email)
        if user is None:
            return None
        calculator = LevelCalculator(await self.get_config())
        return calculator.describe(user.referral_count)

    # Leaderboard

    async def get_leaderboard(
        self, limit: int | None = None, offset: int = 0
    ) -> list[LeaderboardEntry]:
        leaderboard = ReferralLeaderboard(self.session, await self.get_config())
        return await leaderboard.get_top(limit, offset)

    async def get_leaderboard_position(self, email: str) -> int | None:
        leaderboard = ReferralLeaderboard(self.session, await self.get_config())
        return await leaderboard.get_position(email)

    async def get_leaderboard_neighbors(
        self, email: str, window: int = 5
    ) -> list[LeaderboardEntry]:
        leaderboard = ReferralLeaderboard(self.session, await self.get_config())
        return await leaderboard.get_neighbors(email, window)

    async def search_users(
        self, query: str, limit: int | None = None
    ) -> list[LeaderboardEntry]:
        leaderboard = ReferralLeaderboard(self.session, await self.get_config())
        return await leaderboard.search(query, limit)

    # Queries

    async def get_referral_summary(self, email: str) -> dict | None:
        query_manager = ReferralQueryManager(self.session, await self.get_config())
        return await query_manager.get_referral_summary(email)

    async def get_direct_referrals(
        self, email: str, page: int = 1, limit: int = 10
    ) -> dict:
        query_manager = ReferralQueryManager(self.session, await self.get_config())
        return await query_manager.get_direct_referrals(email, page, limit)

    async def get_recent_rewards(
        self, limit: int | None = None
    ) -> list[ReferralReward]:
        query_manager = ReferralQueryManager(self.session, await self.get_config())
        return await query_manager.get_recent_rewards(limit)

    async def get_user_rewards(
        self, email: str, limit: int = 50
    ) -> list[ReferralReward]:
        query_manager = ReferralQueryManager(self.session, await self.get_config())
        return await query_manager.get_user_rewards(email, limit)

    # Reward points

    async def backfill_reward_points(self, dry_run: bool = False) -> BackfillReport:
        manager = RewardPointsManager(self.session, await self.get_config())
        return await manager.backfill(dry_run=dry_run)
