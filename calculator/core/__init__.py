"""
Core calculator functionality.

Level/rank progression logic, the reward-curve simulator and data models.
"""

from calculator.core.calculator import LevelCalculator
from calculator.core.models import (
    MAX_LEVEL,
    LevelInfo,
    LevelThreshold,
    RankTier,
    ReferralConfig,
    SimulationRow,
)
from calculator.core.simulator import RewardCurveSimulator, format_rate

__all__ = [
    "LevelCalculator",
    "RewardCurveSimulator",
    "format_rate",
    "MAX_LEVEL",
    "LevelInfo",
    "LevelThreshold",
    "RankTier",
    "ReferralConfig",
    "SimulationRow",
]
