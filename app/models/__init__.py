"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from app.models.base import Base
from app.models.enums import Currency, RewardEvent, RewardPointType, RewardStatus
from app.models.referral_config import ReferralConfigDocument
from app.models.referral_reward import ReferralReward
from app.models.reward_points import RewardPointEntry, UserRewardPoints
from app.models.user import User, normalize_user_key

__all__ = [
    # Base
    "Base",
    # Enums
    "Currency",
    "RewardEvent",
    "RewardPointType",
    "RewardStatus",
    # Core Models
    "User",
    "normalize_user_key",
    "ReferralReward",
    "ReferralConfigDocument",
    # Reward points
    "UserRewardPoints",
    "RewardPointEntry",
]
