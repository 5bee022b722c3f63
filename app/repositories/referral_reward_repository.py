"""
Referral reward repository.

Data access layer for the append-only ReferralReward ledger.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import RewardStatus
from app.models.referral_reward import ReferralReward
from app.models.user import normalize_user_key
from app.repositories.base import BaseRepository


class ReferralRewardRepository(BaseRepository[ReferralReward]):
    """Ledger repository. Rows are inserted, never updated or deleted."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral reward repository."""
        super().__init__(ReferralReward, session)

    async def append(
        self,
        user_id: str,
        from_user_id: str,
        amount: Decimal,
        currency: str,
        tier: int,
        event: str,
        percentage: Decimal,
        tx_hash: str | None = None,
    ) -> ReferralReward:
        """
        Append a ledger row.

        Args:
            user_id: Beneficiary key
            from_user_id: Key of the user whose event triggered the payout
            amount: Payout amount
            currency: Payout currency code
            tier: 1 or 2
            event: Event type name
            percentage: Effective rate applied, in percent points
            tx_hash: Optional on-chain transaction hash

        Returns:
            Created ReferralReward (status pending)
        """
        return await self.create(
            user_id=normalize_user_key(user_id),
            from_user_id=normalize_user_key(from_user_id),
            amount=amount,
            currency=currency,
            tier=tier,
            event=event,
            percentage=percentage,
            status=RewardStatus.PENDING.value,
            tx_hash=tx_hash,
        )

    async def get_rewarded_tiers(
        self, from_user_id: str, event: str, tx_hash: str
    ) -> set[int]:
        """
        Get tiers already paid for one triggering event.

        Matches the ledger's idempotency key, so a tier that failed earlier
        is not reported and can still be paid on retry.

        Args:
            from_user_id: Triggering user key
            event: Event type name
            tx_hash: Transaction hash of the revenue event

        Returns:
            Set of paid tiers (subset of {1, 2})
        """
        stmt = select(ReferralReward.tier).where(
            ReferralReward.from_user_id == normalize_user_key(from_user_id),
            ReferralReward.event == event,
            ReferralReward.tx_hash == tx_hash,
        )
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def get_recent(self, limit: int = 20) -> list[ReferralReward]:
        """
        Get most recent ledger rows (admin "recent distributions").

        Args:
            limit: Max number of rows

        Returns:
            Rows, newest first
        """
        stmt = (
            select(ReferralReward)
            .order_by(ReferralReward.timestamp.desc(), ReferralReward.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_user_rewards(
        self, user_id: str, limit: int = 50
    ) -> list[ReferralReward]:
        """
        Get rewards earned by a beneficiary, newest first.

        Args:
            user_id: Beneficiary key
            limit: Max number of rows

        Returns:
            Ledger rows
        """
        stmt = (
            select(ReferralReward)
            .where(ReferralReward.user_id == normalize_user_key(user_id))
            .order_by(ReferralReward.timestamp.desc(), ReferralReward.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_totals_by_tier(
        self, user_id: str
    ) -> dict[int, dict[str, Decimal]]:
        """
        Sum a beneficiary's rewards per tier and currency.

        Args:
            user_id: Beneficiary key

        Returns:
            {1: {"USD": Decimal, "VCN": Decimal}, 2: {...}}
        """
        stmt = (
            select(
                ReferralReward.tier,
                ReferralReward.currency,
                func.coalesce(func.sum(ReferralReward.amount), 0).label("total"),
            )
            .where(ReferralReward.user_id == normalize_user_key(user_id))
            .group_by(ReferralReward.tier, ReferralReward.currency)
        )
        result = await self.session.execute(stmt)

        totals: dict[int, dict[str, Decimal]] = {1: {}, 2: {}}
        for row in result.all():
            totals[row.tier][row.currency] = Decimal(str(row.total))
        return totals
