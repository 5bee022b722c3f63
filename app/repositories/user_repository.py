"""
User repository.

Data access layer for User model (the user directory).
"""

from decimal import Decimal

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import Currency
from app.models.user import User, normalize_user_key
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> User | None:
        """
        Get user by email (case-insensitive key).

        Args:
            email: Email address in any case

        Returns:
            User or None
        """
        if not email:
            return None
        return await self.get_by_id(normalize_user_key(email))

    async def get_by_referral_code(
        self, referral_code: str
    ) -> User | None:
        """
        Get user by referral code.

        Codes are stored uppercase; lookups are case-insensitive.

        Args:
            referral_code: Referral code

        Returns:
            User or None
        """
        if not referral_code:
            return None
        return await self.get_by(referral_code=referral_code.strip().upper())

    async def referral_code_exists(self, referral_code: str) -> bool:
        return await self.exists(referral_code=referral_code)

    async def increment_reward_total(
        self, email: str, currency: Currency, delta: Decimal
    ) -> bool:
        """
        Atomically add ``delta`` to the user's cumulative total.

        Single UPDATE statement, so concurrent payouts to the same user
        cannot lose an increment.

        Args:
            email: User key
            currency: Which total to increment
            delta: Amount to add

        Returns:
            True if a row was updated
        """
        column = getattr(User, User.total_field_for(currency))
        stmt = (
            update(User)
            .where(User.email == normalize_user_key(email))
            .values({column: column + delta})
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def increment_referral_count(self, email: str, delta: int = 1) -> bool:
        """
        Atomically add ``delta`` to the user's referral count.

        Args:
            email: User key
            delta: Count to add

        Returns:
            True if a row was updated
        """
        stmt = (
            update(User)
            .where(User.email == normalize_user_key(email))
            .values(referral_count=User.referral_count + delta)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def get_top_by_referral_count(
        self, limit: int, offset: int = 0
    ) -> list[User]:
        """
        Get users ordered by referral count.

        Ties are broken by email so pagination is deterministic.

        Args:
            limit: Max number of users
            offset: Number of users to skip

        Returns:
            Users, most referrals first
        """
        stmt = (
            select(User)
            .order_by(User.referral_count.desc(), User.email.asc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_ranked_ahead(self, user: User) -> int:
        """
        Count users ordered ahead of ``user`` on the leaderboard.

        Args:
            user: User to locate

        Returns:
            Number of users with more referrals, or equal referrals and a
            smaller email
        """
        stmt = select(func.count()).select_from(User).where(
            or_(
                User.referral_count > user.referral_count,
                (User.referral_count == user.referral_count)
                & (User.email < user.email),
            )
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def search(self, query: str, limit: int) -> list[User]:
        """
        Search users by email or referral code substring (case-insensitive).

        ``%`` and ``_`` in the query match literally.

        Args:
            query: Search text
            limit: Max number of users

        Returns:
            Matching users in leaderboard order
        """
        term = query.strip().lower()
        for char in ("\\", "%", "_"):
            term = term.replace(char, "\\" + char)
        pattern = f"%{term}%"
        stmt = (
            select(User)
            .where(
                or_(
                    func.lower(User.email).like(pattern, escape="\\"),
                    func.lower(User.referral_code).like(pattern, escape="\\"),
                )
            )
            .order_by(User.referral_count.desc(), User.email.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_direct_referrals(
        self, email: str, limit: int, offset: int = 0
    ) -> list[User]:
        """
        Get users directly referred by ``email``, newest first.

        Args:
            email: Referrer key
            limit: Page size
            offset: Number of users to skip

        Returns:
            Referred users
        """
        stmt = (
            select(User)
            .where(User.referrer_id == normalize_user_key(email))
            .order_by(User.created_at.desc(), User.email.asc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_direct_referrals(self, email: str) -> int:
        return await self.count(referrer_id=normalize_user_key(email))

    async def count_indirect_referrals(self, email: str) -> int:
        return await self.count(grand_referrer_id=normalize_user_key(email))

    async def get_users_with_referrals(self) -> list[User]:
        """Get all users with at least one referral, in leaderboard order."""
        stmt = (
            select(User)
            .where(User.referral_count > 0)
            .order_by(User.referral_count.desc(), User.email.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
