"""
Reward point (RP) models.

RP are a non-monetary score awarded for successful referrals and level
milestones.
"""

from datetime import UTC, datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class UserRewardPoints(Base):
    """Per-user RP balance."""

    __tablename__ = "user_reward_points"
    __table_args__ = (
        CheckConstraint('total_rp >= 0', name='check_rp_total_non_negative'),
        CheckConstraint('available_rp >= 0', name='check_rp_available_non_negative'),
    )

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.email", ondelete="CASCADE"), primary_key=True
    )
    total_rp: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    claimed_rp: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    available_rp: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<UserRewardPoints(user_id={self.user_id!r}, total={self.total_rp}, "
            f"available={self.available_rp})>"
        )


class RewardPointEntry(Base):
    """RP history row."""

    __tablename__ = "reward_point_history"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.email", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # referral | levelup
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<RewardPointEntry(user_id={self.user_id!r}, type={self.type!r}, "
            f"amount={self.amount})>"
        )
