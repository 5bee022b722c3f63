"""
Reward points repository.

Data access layer for RP balances and RP history.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import RewardPointType
from app.models.reward_points import RewardPointEntry, UserRewardPoints
from app.models.user import normalize_user_key
from app.repositories.base import BaseRepository


class RewardPointsRepository(BaseRepository[UserRewardPoints]):
    """RP balance repository with history helpers."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize reward points repository."""
        super().__init__(UserRewardPoints, session)

    async def get_balance(self, user_id: str) -> UserRewardPoints | None:
        return await self.get_by_id(normalize_user_key(user_id))

    async def add_points(
        self,
        user_id: str,
        amount: int,
        point_type: RewardPointType,
        source: str,
    ) -> UserRewardPoints:
        """
        Write a history row and add points to the balance.

        Creates the balance row on first award.

        Args:
            user_id: User key
            amount: Points to add (positive)
            point_type: Reason for the award
            source: Human-readable origin of the award

        Returns:
            Updated balance
        """
        key = normalize_user_key(user_id)

        self.session.add(
            RewardPointEntry(
                user_id=key,
                type=point_type.value,
                amount=amount,
                source=source,
            )
        )

        balance = await self.get_by_id(key)
        if balance is None:
            return await self.create(
                user_id=key,
                total_rp=amount,
                claimed_rp=0,
                available_rp=amount,
            )

        balance.total_rp += amount
        balance.available_rp += amount
        await self.session.flush()
        return balance

    async def get_history(
        self, user_id: str, limit: int = 50
    ) -> list[RewardPointEntry]:
        """Get RP history for a user, newest first."""
        stmt = (
            select(RewardPointEntry)
            .where(RewardPointEntry.user_id == normalize_user_key(user_id))
            .order_by(RewardPointEntry.timestamp.desc(), RewardPointEntry.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
