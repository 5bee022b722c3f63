"""
Integration tests for reward point awards and backfill.
"""

import pytest

from app.models.enums import RewardPointType
from app.repositories.reward_points_repository import RewardPointsRepository
from app.services.referral.chain_manager import ReferralChainManager
from app.services.referral.reward_points import RewardPointsManager


@pytest.fixture
def points(db_session, config):
    return RewardPointsManager(db_session, config)


class TestRewardPointFormula:
    """Tests for expected RP totals."""

    def test_expected_total(self, points):
        # 25 referrals -> level 23 -> milestones 10 and 20
        assert points.expected_total(25) == 25 * 10 + 2 * 100

    def test_no_referrals(self, points):
        assert points.expected_total(0) == 0

    def test_settings_override(self, db_session, config):
        manager = RewardPointsManager(
            db_session, config, points_per_referral=5, levelup_bonus=0
        )

        assert manager.expected_total(25) == 125


class TestAwardReferral:
    """Tests for incremental awards."""

    @pytest.mark.asyncio
    async def test_milestone_crossed(self, db_session, make_user, points):
        await make_user("alice@example.com")

        # 9 referrals reach level 10
        awarded = await points.award_referral("alice@example.com", 8, 9)
        await db_session.commit()

        assert awarded == 110
        history = await RewardPointsRepository(db_session).get_history("alice@example.com")
        assert sorted(entry.type for entry in history) == [
            RewardPointType.LEVELUP.value,
            RewardPointType.REFERRAL.value,
        ]

    @pytest.mark.asyncio
    async def test_no_award_without_new_referrals(self, points):
        assert await points.award_referral("alice@example.com", 3, 3) == 0

    @pytest.mark.asyncio
    async def test_signups_accumulate_points(self, db_session, config):
        chain = ReferralChainManager(db_session, config)
        alice = await chain.create_user("alice@example.com")
        for i in range(9):
            await chain.create_user(f"friend{i}@example.com", alice.referral_code)

        balance = await RewardPointsRepository(db_session).get_balance(alice.email)

        assert balance.total_rp == 9 * 10 + 100
        assert balance.claimed_rp == 0


class TestBackfill:
    """Tests for the RP backfill."""

    @pytest.mark.asyncio
    async def test_dry_run_writes_nothing(self, db_session, make_user, points):
        await make_user("alice@example.com", referral_count=25)
        await make_user("bob@example.com")

        report = await points.backfill(dry_run=True)

        assert report.processed == 1
        assert report.awarded == 1
        assert report.total_awarded == 450
        assert report.details[0].status == "WOULD AWARD"
        assert await RewardPointsRepository(db_session).get_balance("alice@example.com") is None

    @pytest.mark.asyncio
    async def test_backfill_awards_difference(self, db_session, make_user, points):
        await make_user("alice@example.com", referral_count=25)
        repo = RewardPointsRepository(db_session)
        await repo.add_points("alice@example.com", 100, RewardPointType.REFERRAL, "Referral #10")
        await db_session.commit()

        report = await points.backfill()

        balance = await repo.get_balance("alice@example.com")
        assert report.total_awarded == 350
        assert balance.total_rp == 450
        assert balance.available_rp == 450

        history = await repo.get_history("alice@example.com")
        amounts = {entry.source: entry.amount for entry in history}
        assert amounts["Backfill: 25 referrals"] == 150
        assert amounts["Backfill: Level milestones up to LVL 23"] == 200

    @pytest.mark.asyncio
    async def test_backfill_is_repeatable(self, db_session, make_user, points):
        await make_user("alice@example.com", referral_count=3)

        await points.backfill()
        report = await points.backfill()

        assert report.awarded == 0
        assert report.skipped == 1
        assert report.details[0].status == "SKIP (already enough)"
