"""
Referral services package.

Contains modular services for referral processing:
- config_service: Loads, saves and previews the referral config
- chain_manager: Signup linking and referral code generation
- referral_reward_processor: Tier-1/tier-2 reward payouts
- leaderboard: Referral count rankings
- query_manager: Referral lists, summaries and ledger queries
- reward_points: Reward point (RP) awards and backfill
"""

from app.services.referral.chain_manager import ReferralChainManager
from app.services.referral.config_service import ReferralConfigService
from app.services.referral.leaderboard import (
    LeaderboardEntry,
    ReferralLeaderboard,
)
from app.services.referral.query_manager import ReferralQueryManager
from app.services.referral.referral_reward_processor import (
    ProcessResult,
    ProcessStatus,
    ReferralRewardProcessor,
    RewardNotification,
)
from app.services.referral.reward_points import (
    BackfillReport,
    RewardPointsManager,
)


__all__ = [
    # Configuration
    "ReferralConfigService",
    # Managers
    "ReferralChainManager",
    "ReferralLeaderboard",
    "ReferralQueryManager",
    "RewardPointsManager",
    # Reward processing
    "ReferralRewardProcessor",
    "ProcessResult",
    "ProcessStatus",
    "RewardNotification",
    # Results
    "LeaderboardEntry",
    "BackfillReport",
]
