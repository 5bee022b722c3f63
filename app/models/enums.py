"""
Enums for referral models.
"""

from enum import Enum


class Currency(str, Enum):
    """Reward payout currency."""

    USD = "USD"
    VCN = "VCN"


class RewardEvent(str, Enum):
    """Revenue-producing events that can trigger referral rewards."""

    SUBSCRIPTION = "subscription"
    TOKEN_SALE = "token_sale"
    STAKING = "staking"

    @classmethod
    def parse(cls, value: str) -> "RewardEvent | None":
        """Return the event for a name, or None if it is not a known event."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class RewardStatus(str, Enum):
    """Settlement status of a ledger row (set to settled externally)."""

    PENDING = "pending"
    SETTLED = "settled"


class RewardPointType(str, Enum):
    """Reason a reward point history entry was written."""

    REFERRAL = "referral"
    LEVELUP = "levelup"
