"""
Referral reward model.

Append-only ledger of tiered payouts. Rows are never updated or deleted by
the engine; settlement status changes happen in the external settlement
process.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import RewardStatus
from app.models.types import MoneyType, RatePercentType


class ReferralReward(Base):
    """One payout to one beneficiary for one triggering event."""

    __tablename__ = "referral_rewards"
    __table_args__ = (
        CheckConstraint('tier IN (1, 2)', name='check_referral_reward_tier'),
        CheckConstraint('amount >= 0', name='check_referral_reward_amount_non_negative'),
        # Idempotency key: a retried event cannot pay the same tier twice
        UniqueConstraint(
            'from_user_id', 'event', 'tx_hash', 'tier',
            name='uq_referral_rewards_event_identity',
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Beneficiary
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.email", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Referred user whose event triggered the payout
    from_user_id: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True
    )

    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    currency: Mapped[str] = mapped_column(String(10), nullable=False)
    tier: Mapped[int] = mapped_column(Integer, nullable=False)
    event: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    # Effective rate in percent points, recorded for audit
    percentage: Mapped[Decimal] = mapped_column(RatePercentType, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20), default=RewardStatus.PENDING.value, nullable=False, index=True
    )
    tx_hash: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ReferralReward(id={self.id}, user_id={self.user_id!r}, "
            f"from_user_id={self.from_user_id!r}, tier={self.tier}, "
            f"amount={self.amount} {self.currency}, event={self.event!r})>"
        )
