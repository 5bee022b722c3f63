"""
Formatting utilities for simulation output.

Turns calculator rows into a text table for script output.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from calculator.core.models import SimulationRow


def format_simulation_table(rows: list["SimulationRow"]) -> str:
    """
    Render simulation rows as a fixed-width text table.

    Args:
        rows: Rows produced by RewardCurveSimulator.run()

    Returns:
        Multi-line table with a header
    """
    header = (
        f"{'LVL':>3}  {'RANK':<10}  {'TO NEXT':>7}  {'CUMULATIVE':>10}  "
        f"{'TIER 1':>8}  {'TIER 2':>8}"
    )
    lines = [header, "-" * len(header)]
    for row in rows:
        lines.append(
            f"{row.level:>3}  {row.rank_name:<10}  {row.invites_to_next:>7}  "
            f"{row.cumulative:>10}  {row.tier1_rate:>8}  {row.tier2_rate:>8}"
        )
    return "\n".join(lines)
