"""
Services.

Business logic layer.
"""

# Base Service Infrastructure
from app.services.base_service import (
    BaseService,
    log_operation,
    transaction,
)

# Referral Services
from app.services.referral import (
    ProcessResult,
    ProcessStatus,
    ReferralChainManager,
    ReferralConfigService,
    ReferralLeaderboard,
    ReferralQueryManager,
    ReferralRewardProcessor,
    RewardPointsManager,
)
from app.services.referral_service import ReferralService


__all__ = [
    # Base
    "BaseService",
    "log_operation",
    "transaction",
    # Referral
    "ReferralService",
    "ReferralConfigService",
    "ReferralChainManager",
    "ReferralLeaderboard",
    "ReferralQueryManager",
    "ReferralRewardProcessor",
    "RewardPointsManager",
    "ProcessResult",
    "ProcessStatus",
]
