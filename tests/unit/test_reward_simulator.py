"""
Unit tests for the reward curve simulator.
"""

from decimal import Decimal

from calculator import (
    MAX_LEVEL,
    LevelCalculator,
    RewardCurveSimulator,
    format_rate,
    format_simulation_table,
)
from calculator.core.simulator import NO_RANK_NAME


class TestFormatRate:
    """Tests for percentage formatting."""

    def test_two_decimals(self):
        assert format_rate(Decimal("0.1")) == "10.00%"

    def test_rounds_half_up(self):
        assert format_rate(Decimal("0.12345")) == "12.35%"

    def test_zero(self):
        assert format_rate(Decimal("0")) == "0.00%"


class TestRewardCurveSimulator:
    """Tests for the level 1..100 projection."""

    def test_covers_all_levels(self, config):
        rows = RewardCurveSimulator(config).run()

        assert len(rows) == MAX_LEVEL
        assert [row.level for row in rows] == list(range(1, MAX_LEVEL + 1))

    def test_cumulative_recurrence(self, config):
        rows = RewardCurveSimulator(config).run()

        assert rows[0].cumulative == 0
        for current, following in zip(rows, rows[1:]):
            assert following.cumulative == current.cumulative + current.invites_to_next

    def test_matches_level_calculator(self, config):
        calc = LevelCalculator(config)

        for row in RewardCurveSimulator(config).run():
            assert row.cumulative == calc.cumulative_invites(row.level)
            assert row.multiplier == calc.multiplier(row.level)
            assert calc.level_for_referrals(row.cumulative) == row.level

    def test_effective_rates(self, config):
        rows = RewardCurveSimulator(config).run()

        assert rows[0].tier1_rate == "10.00%"
        assert rows[0].tier2_rate == "2.00%"
        # Level 3: 1.0 + 2 * 0.05 = 1.10
        assert rows[2].tier1_rate == "11.00%"
        assert rows[2].tier2_rate == "2.20%"
        # Level 100: 5.95
        assert rows[-1].tier1_rate == "59.50%"

    def test_rank_names(self, config):
        rows = RewardCurveSimulator(config).run()

        assert rows[0].rank_name == "Novice"
        assert rows[0].rank_color == "text-gray-400"
        assert rows[9].rank_name == "Scout"
        assert rows[-1].rank_name == "Visionary"

    def test_missing_rank_shown_as_none(self):
        simulator = RewardCurveSimulator(
            {
                "tier1Rate": "0.05",
                "tier2Rate": "0.01",
                "ranks": [{"name": "Scout", "minLvl": 10}],
            }
        )
        rows = simulator.run()

        assert rows[0].rank_name == NO_RANK_NAME
        assert rows[0].rank_color is None
        assert rows[9].rank_name == "Scout"

    def test_accepts_unsaved_form_values(self):
        simulator = RewardCurveSimulator(
            {
                "tier1Rate": "0.2",
                "tier2Rate": "0.05",
                "baseXpMultiplier": "1.5",
                "xpMultiplierPerLevel": "0",
                "levelThresholds": [
                    {"minLevel": 1, "maxLevel": 100, "invitesPerLevel": 4}
                ],
            }
        )
        row = simulator.row(50)

        assert row.tier1_rate == "30.00%"
        assert row.tier2_rate == "7.50%"
        assert row.invites_to_next == 4
        assert row.cumulative == 196

    def test_max_level_limits_rows(self, config):
        assert len(RewardCurveSimulator(config).run(max_level=10)) == 10

    def test_as_dicts(self, config):
        first = RewardCurveSimulator(config).as_dicts(max_level=1)[0]

        assert first["level"] == 1
        assert first["multiplier"] == "1.00"
        assert first["tier1_rate"] == "10.00%"

    def test_table_output(self, config):
        table = format_simulation_table(RewardCurveSimulator(config).run(max_level=3))
        lines = table.splitlines()

        assert len(lines) == 5
        assert "Novice" in lines[2]
