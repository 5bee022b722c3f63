"""
Type definitions for calculator module.

TypedDict shapes for values that leave the calculator as plain dicts
(admin tables, JSON responses, CSV export).
"""

from typing import TypedDict


class SimulationRowDict(TypedDict):
    """
    One level of a reward-curve simulation.

    Attributes:
        level: Level number (1-100)
        rank_name: Rank at this level ("None" when no rank qualifies)
        rank_color: Display hint of the rank
        invites_to_next: Referrals needed to advance one level
        cumulative: Referrals needed to reach this level from zero
        multiplier: Reward multiplier as a decimal string
        tier1_rate: Effective direct rate, e.g. "10.50%"
        tier2_rate: Effective indirect rate, e.g. "2.10%"
    """
    level: int
    rank_name: str
    rank_color: str | None
    invites_to_next: int
    cumulative: int
    multiplier: str
    tier1_rate: str
    tier2_rate: str


class LevelInfoDict(TypedDict):
    """Progression state of a user."""
    referral_count: int
    level: int
    rank: str | None
    multiplier: str
    invites_to_next_level: int
    is_max_level: bool
