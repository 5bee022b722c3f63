"""
Integration tests for the referral leaderboard.
"""

from decimal import Decimal

import pytest
import pytest_asyncio

from app.services.referral.leaderboard import ReferralLeaderboard


@pytest_asyncio.fixture
async def ranked_users(make_user):
    """Five users; bob and alice tie on referral count."""
    await make_user("bob@example.com", referral_count=5, referral_code="BOB001")
    await make_user("alice@example.com", referral_count=5, referral_code="ALICE1")
    await make_user("carol@example.com", referral_count=3, referral_code="CAROL1")
    await make_user("dave@example.com", referral_count=1, referral_code="DAVE01")
    await make_user("erin@example.com", referral_count=0, referral_code="ERIN01")


@pytest.fixture
def leaderboard(db_session, config):
    return ReferralLeaderboard(db_session, config)


class TestLeaderboard:
    """Tests for ordering, positions and search."""

    @pytest.mark.asyncio
    async def test_ordered_by_count_then_email(self, leaderboard, ranked_users):
        entries = await leaderboard.get_top(10)

        assert [e.email for e in entries] == [
            "alice@example.com",
            "bob@example.com",
            "carol@example.com",
            "dave@example.com",
            "erin@example.com",
        ]
        assert [e.position for e in entries] == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_entry_carries_level_and_rank(self, leaderboard, ranked_users):
        top = (await leaderboard.get_top(1))[0]

        assert top.referral_count == 5
        assert top.level == 6
        assert top.rank_name == "Novice"
        assert top.total_rewards_usd == Decimal("0")

    @pytest.mark.asyncio
    async def test_pagination(self, leaderboard, ranked_users):
        page = await leaderboard.get_top(2, offset=2)

        assert [e.email for e in page] == ["carol@example.com", "dave@example.com"]
        assert [e.position for e in page] == [3, 4]

    @pytest.mark.asyncio
    async def test_limit_clamped(self, db_session, config, ranked_users):
        leaderboard = ReferralLeaderboard(db_session, config, max_limit=3)

        assert len(await leaderboard.get_top(1000)) == 3
        assert len(await leaderboard.get_top(0)) == 1

    @pytest.mark.asyncio
    async def test_position(self, leaderboard, ranked_users):
        assert await leaderboard.get_position("alice@example.com") == 1
        assert await leaderboard.get_position("BOB@example.com") == 2
        assert await leaderboard.get_position("erin@example.com") == 5
        assert await leaderboard.get_position("nobody@example.com") is None

    @pytest.mark.asyncio
    async def test_neighbors(self, leaderboard, ranked_users):
        entries = await leaderboard.get_neighbors("carol@example.com", window=1)

        assert [e.email for e in entries] == [
            "bob@example.com",
            "carol@example.com",
            "dave@example.com",
        ]

    @pytest.mark.asyncio
    async def test_neighbors_at_top(self, leaderboard, ranked_users):
        entries = await leaderboard.get_neighbors("alice@example.com", window=2)

        assert [e.position for e in entries] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_search_by_email(self, leaderboard, ranked_users):
        entries = await leaderboard.search("CAROL")

        assert len(entries) == 1
        assert entries[0].email == "carol@example.com"
        assert entries[0].position == 3

    @pytest.mark.asyncio
    async def test_search_by_code(self, leaderboard, ranked_users):
        entries = await leaderboard.search("dave0")

        assert [e.referral_code for e in entries] == ["DAVE01"]

    @pytest.mark.asyncio
    async def test_empty_search_returns_top(self, leaderboard, ranked_users):
        entries = await leaderboard.search("  ", limit=2)

        assert [e.position for e in entries] == [1, 2]

    @pytest.mark.asyncio
    async def test_search_wildcards_match_literally(self, leaderboard, make_user, ranked_users):
        await make_user("frank_x@example.com", referral_code="FRANK1")

        underscore = await leaderboard.search("_")
        percent = await leaderboard.search("%")

        assert [e.email for e in underscore] == ["frank_x@example.com"]
        assert percent == []
