"""
Integration tests for the config store and the ReferralService facade.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.services.referral.config_service import ReferralConfigService
from app.services.referral.referral_reward_processor import ProcessStatus
from app.services.referral_service import ReferralService
from calculator import MAX_LEVEL, default_config


def flat_document(**overrides):
    document = default_config().to_document()
    document["xpMultiplierPerLevel"] = "0"
    document.update(overrides)
    return document


class TestReferralConfigService:
    """Tests for loading, saving and previewing config."""

    @pytest.mark.asyncio
    async def test_defaults_when_nothing_stored(self, db_session):
        config = await ReferralConfigService(db_session).get_config()

        assert config == default_config()

    @pytest.mark.asyncio
    async def test_save_and_reload(self, db_session):
        service = ReferralConfigService(db_session)

        await service.save_config(flat_document(tier1Rate="0.15"))
        config = await service.get_config()

        assert config.tier1_rate == Decimal("0.15")
        assert config.xp_multiplier_per_level == Decimal("0")

    @pytest.mark.asyncio
    async def test_save_replaces_document(self, db_session):
        service = ReferralConfigService(db_session)

        await service.save_config(flat_document(tier1Rate="0.15"))
        await service.save_config(flat_document(tier1Rate="0.05"))

        assert (await service.get_config()).tier1_rate == Decimal("0.05")

    @pytest.mark.asyncio
    async def test_invalid_config_not_saved(self, db_session):
        service = ReferralConfigService(db_session)

        with pytest.raises(ValidationError):
            await service.save_config(flat_document(tier2Rate="2"))

        assert await service.get_config() == default_config()

    @pytest.mark.asyncio
    async def test_separate_keys(self, db_session):
        await ReferralConfigService(db_session, key="staging").save_config(
            flat_document(tier1Rate="0.3")
        )

        assert (await ReferralConfigService(db_session).get_config()) == default_config()

    @pytest.mark.asyncio
    async def test_preview_unsaved_config(self, db_session):
        service = ReferralConfigService(db_session)

        rows = await service.preview(flat_document(tier1Rate="0.2"))

        assert len(rows) == MAX_LEVEL
        assert rows[-1].tier1_rate == "20.00%"
        assert await service.get_config() == default_config()

    @pytest.mark.asyncio
    async def test_preview_stored_config(self, db_session):
        rows = await ReferralConfigService(db_session).preview()

        assert rows[0].tier1_rate == "10.00%"


class TestReferralService:
    """Tests for the facade wiring."""

    @pytest.mark.asyncio
    async def test_process_uses_stored_config(self, db_session):
        service = ReferralService(db_session)
        await service.save_config(flat_document())

        alice = await service.create_user("alice@example.com")
        await service.create_user("bob@example.com", alice.referral_code)

        result = await service.process_referral_rewards(
            "subscription", "bob@example.com", Decimal("100"), "USD", tx_hash="0x01"
        )

        assert result.status == ProcessStatus.PROCESSED
        assert result.total_rewards == Decimal("10")

    @pytest.mark.asyncio
    async def test_disabled_event_from_stored_config(self, db_session):
        service = ReferralService(db_session)
        await service.save_config(flat_document(enabledEvents=["staking"]))

        alice = await service.create_user("alice@example.com")
        await service.create_user("bob@example.com", alice.referral_code)

        result = await service.process_referral_rewards(
            "subscription", "bob@example.com", Decimal("100"), "USD"
        )

        assert result.status == ProcessStatus.EVENT_DISABLED
        assert await service.get_recent_rewards() == []

    @pytest.mark.asyncio
    async def test_summary_and_queries(self, db_session):
        service = ReferralService(db_session)

        alice = await service.create_user("alice@example.com")
        bob = await service.create_user("bob@example.com", alice.referral_code)
        await service.create_user("carol@example.com", alice.referral_code)
        await service.create_user("dave@example.com", bob.referral_code)

        await service.process_referral_rewards(
            "staking", "dave@example.com", Decimal("200"), "USD", tx_hash="0x02"
        )

        summary = await service.get_referral_summary("alice@example.com")
        assert summary["level"] == 3
        assert summary["rank"] == "Novice"
        assert summary["multiplier"] == Decimal("1.10")
        assert summary["tier1_rate"] == Decimal("0.11")
        assert summary["direct_referrals"] == 2
        assert summary["indirect_referrals"] == 1
        # alice is dave's grand referrer: 200 * 0.02 * 1.10
        assert summary["total_rewards"]["USD"] == Decimal("4.4")
        assert summary["rewards_by_tier"] == {1: {}, 2: {"USD": Decimal("4.4")}}

        bob_summary = await service.get_referral_summary("bob@example.com")
        # bob is dave's direct referrer at level 2: 200 * 0.10 * 1.05
        assert bob_summary["rewards_by_tier"][1] == {"USD": Decimal("21")}
        assert bob_summary["rewards_by_tier"][2] == {}

        page = await service.get_direct_referrals("alice@example.com", page=1, limit=1)
        assert page["total"] == 2
        assert page["pages"] == 2
        assert len(page["referrals"]) == 1

        recent = await service.get_recent_rewards()
        assert {row.tier for row in recent} == {1, 2}

        alice_rewards = await service.get_user_rewards("alice@example.com")
        assert [row.tier for row in alice_rewards] == [2]

    @pytest.mark.asyncio
    async def test_level_info(self, db_session):
        service = ReferralService(db_session)
        alice = await service.create_user("alice@example.com")
        await service.create_user("bob@example.com", alice.referral_code)

        info = await service.get_level_info("alice@example.com")

        assert info.level == 2
        assert info.invites_to_next_level == 1
        assert await service.get_level_info("nobody@example.com") is None

    @pytest.mark.asyncio
    async def test_leaderboard_and_link(self, db_session):
        service = ReferralService(db_session)
        alice = await service.create_user("alice@example.com")
        await service.create_user("bob@example.com")

        ok, _ = await service.link_referral("bob@example.com", alice.referral_code)
        top = await service.get_leaderboard(limit=1)

        assert ok is True
        assert top[0].email == "alice@example.com"
        assert await service.get_leaderboard_position("bob@example.com") == 2
        assert len(await service.get_leaderboard_neighbors("bob@example.com", window=1)) == 2
        assert (await service.search_users("bob"))[0].email == "bob@example.com"

    @pytest.mark.asyncio
    async def test_backfill_via_service(self, db_session):
        service = ReferralService(db_session)
        alice = await service.create_user("alice@example.com")
        await service.create_user("bob@example.com", alice.referral_code)

        report = await service.backfill_reward_points(dry_run=True)

        assert report.processed == 1
        assert report.awarded == 0
