"""
Unit tests for ReferralConfig validation.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from calculator import ReferralConfig, default_config


def make_document(**overrides):
    document = {
        "tier1Rate": "0.10",
        "tier2Rate": "0.02",
        "enabledEvents": ["subscription", "staking"],
        "baseXpMultiplier": "1.0",
        "xpMultiplierPerLevel": "0.05",
        "levelThresholds": [
            {"minLevel": 1, "maxLevel": 50, "invitesPerLevel": 1},
            {"minLevel": 51, "maxLevel": 100, "invitesPerLevel": 3},
        ],
        "ranks": [
            {"name": "Novice", "minLvl": 1, "color": "text-gray-400"},
            {"name": "Elite", "minLvl": 40},
        ],
    }
    document.update(overrides)
    return document


class TestReferralConfig:
    """Tests for config document validation."""

    def test_camel_case_document(self):
        config = ReferralConfig.model_validate(make_document())

        assert config.tier1_rate == Decimal("0.10")
        assert config.enabled_events == ("subscription", "staking")
        assert config.level_thresholds[1].invites_per_level == 3
        assert config.ranks[1].min_level == 40

    def test_document_round_trip(self):
        config = default_config()

        assert ReferralConfig.model_validate(config.to_document()) == config

    def test_to_document_uses_admin_field_names(self):
        document = default_config().to_document()

        assert "tier1Rate" in document
        assert "minLevel" in document["levelThresholds"][0]
        assert "minLvl" in document["ranks"][0]

    def test_events_normalized(self):
        config = ReferralConfig.model_validate(
            make_document(enabledEvents=[" Subscription", "STAKING", "staking"])
        )

        assert config.enabled_events == ("subscription", "staking")
        assert config.is_event_enabled("Staking")
        assert not config.is_event_enabled("token_sale")

    @pytest.mark.parametrize("field", ["tier1Rate", "tier2Rate"])
    def test_rate_out_of_range(self, field):
        with pytest.raises(ValidationError):
            ReferralConfig.model_validate(make_document(**{field: "1.5"}))

    def test_negative_multiplier_rejected(self):
        with pytest.raises(ValidationError):
            ReferralConfig.model_validate(make_document(xpMultiplierPerLevel="-0.1"))

    def test_overlapping_thresholds_rejected(self):
        thresholds = [
            {"minLevel": 1, "maxLevel": 20, "invitesPerLevel": 1},
            {"minLevel": 20, "maxLevel": 40, "invitesPerLevel": 2},
        ]
        with pytest.raises(ValidationError):
            ReferralConfig.model_validate(make_document(levelThresholds=thresholds))

    def test_inverted_threshold_rejected(self):
        thresholds = [{"minLevel": 30, "maxLevel": 10, "invitesPerLevel": 1}]
        with pytest.raises(ValidationError):
            ReferralConfig.model_validate(make_document(levelThresholds=thresholds))

    def test_threshold_beyond_max_level_rejected(self):
        thresholds = [{"minLevel": 1, "maxLevel": 101, "invitesPerLevel": 1}]
        with pytest.raises(ValidationError):
            ReferralConfig.model_validate(make_document(levelThresholds=thresholds))

    def test_thresholds_sorted(self):
        thresholds = [
            {"minLevel": 51, "maxLevel": 100, "invitesPerLevel": 3},
            {"minLevel": 1, "maxLevel": 50, "invitesPerLevel": 1},
        ]
        config = ReferralConfig.model_validate(make_document(levelThresholds=thresholds))

        assert [t.min_level for t in config.level_thresholds] == [1, 51]

    def test_duplicate_rank_names_rejected(self):
        ranks = [{"name": "Scout", "minLvl": 1}, {"name": "Scout", "minLvl": 10}]
        with pytest.raises(ValidationError):
            ReferralConfig.model_validate(make_document(ranks=ranks))

    def test_rank_table_without_floor_accepted(self):
        config = ReferralConfig.model_validate(
            make_document(ranks=[{"name": "Scout", "minLvl": 10}])
        )

        assert config.ranks[0].name == "Scout"

    def test_config_is_frozen(self):
        config = default_config()

        with pytest.raises(ValidationError):
            config.tier1_rate = Decimal("0.5")
