"""Shared fixtures for integration tests."""

import pytest

from app.models.user import User
from app.repositories.user_repository import UserRepository


@pytest.fixture
def make_user(db_session):
    """
    Factory inserting a user row directly.

    Usage:
        alice = await make_user("alice@example.com", referral_count=2)
    """
    counter = {"n": 0}

    async def _make_user(
        email: str,
        referrer: User | None = None,
        grand_referrer: User | None = None,
        referral_count: int = 0,
        referral_code: str | None = None,
        referrer_id: str | None = None,
    ) -> User:
        counter["n"] += 1
        user = await UserRepository(db_session).create(
            email=email,
            referral_code=referral_code or f"CODE{counter['n']:02d}",
            referrer_id=referrer.email if referrer else referrer_id,
            grand_referrer_id=grand_referrer.email if grand_referrer else None,
            referral_count=referral_count,
        )
        await db_session.commit()
        return user

    return _make_user
