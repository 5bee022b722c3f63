"""
User model.

Represents a registered user and their position in the referral graph.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import Currency
from app.models.types import MoneyType


def normalize_user_key(email: str) -> str:
    """
    Normalize an email address into a user key.

    Keys are case-insensitive, so every lookup and insert goes through
    this function.

    Example:
        >>> normalize_user_key("  Alice@Example.COM ")
        'alice@example.com'
    """
    return email.strip().lower()


class User(Base):
    """User model - registered users keyed by normalized email."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            'referral_count >= 0', name='check_user_referral_count_non_negative'
        ),
        CheckConstraint(
            'total_rewards_usd >= 0',
            name='check_user_total_rewards_usd_non_negative'
        ),
        CheckConstraint(
            'total_rewards_vcn >= 0',
            name='check_user_total_rewards_vcn_non_negative'
        ),
        CheckConstraint(
            'referrer_id IS NULL OR referrer_id != email',
            name='check_user_not_self_referred'
        ),
    )

    # Primary key (lower-cased email)
    email: Mapped[str] = mapped_column(String(255), primary_key=True)

    referral_code: Mapped[str] = mapped_column(
        String(20), unique=True, index=True, nullable=False
    )

    # Referral graph (set once at signup, never re-derived)
    referrer_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.email", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    grand_referrer_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.email", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Counters
    referral_count: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False, index=True
    )
    total_rewards_usd: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_rewards_vcn: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Timestamps
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

    @staticmethod
    def total_field_for(currency: Currency) -> str:
        """
        Name of the cumulative total column for a currency.

        Args:
            currency: Payout currency

        Returns:
            Attribute name, e.g. "total_rewards_usd"
        """
        return f"total_rewards_{currency.value.lower()}"

    def total_for(self, currency: Currency) -> Decimal:
        return getattr(self, self.total_field_for(currency))

    @property
    def has_referrer(self) -> bool:
        return self.referrer_id is not None

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(email={self.email!r}, code={self.referral_code!r}, "
            f"referrer={self.referrer_id!r}, referrals={self.referral_count})>"
        )
