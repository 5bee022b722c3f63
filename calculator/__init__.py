"""
Referral progression calculator.

Standalone package for level, rank and reward-multiplier calculations and
the admin reward-curve simulator. No database dependencies.

Example:
    >>> from calculator import LevelCalculator, default_config
    >>>
    >>> calc = LevelCalculator(default_config())
    >>> info = calc.describe(25)
    >>> print(f"Level {info.level} ({info.rank_name})")
    Level 23 (Ranger)
"""

from calculator.constants import default_config
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
from calculator.utils import format_simulation_table


__version__ = "1.0.0"
__all__ = [
    # Core
    "LevelCalculator",
    "RewardCurveSimulator",
    # Models
    "ReferralConfig",
    "LevelThreshold",
    "RankTier",
    "LevelInfo",
    "SimulationRow",
    # Constants
    "MAX_LEVEL",
    "default_config",
    # Formatters
    "format_rate",
    "format_simulation_table",
]
