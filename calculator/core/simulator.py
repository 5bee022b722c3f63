"""
Reward curve simulator.

Projects invite thresholds and effective payout percentages over the full
level range for a (possibly unsaved) configuration. Pure: never touches
the database.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from calculator.core.calculator import LevelCalculator
from calculator.core.models import MAX_LEVEL, ReferralConfig, SimulationRow
from calculator.types import SimulationRowDict

NO_RANK_NAME = "None"


def format_rate(rate: Decimal) -> str:
    """
    Format a fractional rate as a percentage string.

    Example:
        >>> format_rate(Decimal("0.105"))
        '10.50%'
    """
    percent = (rate * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{percent}%"


class RewardCurveSimulator:
    """
    Level-by-level preview of the referral economics.

    Accepts either a validated ``ReferralConfig`` or the raw dict an admin
    form produces (camelCase keys), so edited values can be previewed
    before they are saved.
    """

    def __init__(self, config: ReferralConfig | dict[str, Any]) -> None:
        if not isinstance(config, ReferralConfig):
            config = ReferralConfig.model_validate(config)
        self.config = config
        self.calculator = LevelCalculator(config)

    def row(self, level: int) -> SimulationRow:
        """Simulation row for a single level."""
        rank = self.calculator.rank_for_level(level)
        multiplier = self.calculator.multiplier(level)

        return SimulationRow(
            level=level,
            rank_name=rank.name if rank else NO_RANK_NAME,
            rank_color=rank.color if rank else None,
            invites_to_next=self.calculator.invites_for_level(level),
            cumulative=self.calculator.cumulative_invites(level),
            multiplier=multiplier,
            tier1_rate=format_rate(self.config.tier1_rate * multiplier),
            tier2_rate=format_rate(self.config.tier2_rate * multiplier),
        )

    def run(self, max_level: int = MAX_LEVEL) -> list[SimulationRow]:
        """
        Simulate levels 1..max_level.

        Args:
            max_level: Last level to include (capped at 100)

        Returns:
            One SimulationRow per level
        """
        last = min(max(max_level, 1), MAX_LEVEL)
        return [self.row(level) for level in range(1, last + 1)]

    def as_dicts(self, max_level: int = MAX_LEVEL) -> list[SimulationRowDict]:
        """Simulation rows as plain dicts for JSON responses and tables."""
        return [
            SimulationRowDict(
                level=row.level,
                rank_name=row.rank_name,
                rank_color=row.rank_color,
                invites_to_next=row.invites_to_next,
                cumulative=row.cumulative,
                multiplier=str(row.multiplier),
                tier1_rate=row.tier1_rate,
                tier2_rate=row.tier2_rate,
            )
            for row in self.run(max_level)
        ]
