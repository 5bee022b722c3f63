"""
Referral chain management module.

Handles user signup with a referral code: code generation, referrer
linking with grand-referrer snapshot, and loop protection.
"""

import secrets
import string

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.models.user import User, normalize_user_key
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService, transaction
from app.services.referral.reward_points import RewardPointsManager
from app.utils.exceptions import (
    InvalidReferralCodeError,
    ReferralAlreadyLinkedError,
    ReferralCycleError,
    ReferralError,
    SelfReferralError,
    UserAlreadyExistsError,
)
from calculator import ReferralConfig

REFERRAL_CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_CODE_ATTEMPTS = 20
# Upper bound on hops walked during loop detection
MAX_CHAIN_DEPTH = 10_000


class ReferralChainManager(BaseService):
    """Manages referral chain operations."""

    def __init__(
        self,
        session: AsyncSession,
        config: ReferralConfig,
        code_length: int | None = None,
    ) -> None:
        """Initialize chain manager."""
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.reward_points = RewardPointsManager(session, config)
        self.code_length = code_length or settings.referral_code_length

    async def generate_referral_code(self) -> str:
        """
        Generate an unused referral code.

        Returns:
            Uppercase alphanumeric code

        Raises:
            RuntimeError: If no free code was found
        """
        for _ in range(MAX_CODE_ATTEMPTS):
            code = "".join(
                secrets.choice(REFERRAL_CODE_ALPHABET)
                for _ in range(self.code_length)
            )
            if not await self.user_repo.referral_code_exists(code):
                return code

        raise RuntimeError(
            f"Could not generate a free referral code in {MAX_CODE_ATTEMPTS} attempts"
        )

    @transaction
    async def create_user(
        self, email: str, referral_code: str | None = None
    ) -> User:
        """
        Register a user, optionally linked to a referrer.

        Args:
            email: Email address (normalized to the user key)
            referral_code: Referral code the user signed up with

        Returns:
            Created user

        Raises:
            UserAlreadyExistsError: If the email is registered
            ReferralError: If the referral code cannot be used
        """
        key = normalize_user_key(email)
        if not key:
            raise ValueError("Email is required")

        if await self.user_repo.get_by_email(key) is not None:
            raise UserAlreadyExistsError(f"User {key} already exists")

        user = await self.user_repo.create(
            email=key,
            referral_code=await self.generate_referral_code(),
        )

        logger.info(
            "User created",
            extra={"user_id": key, "referral_code": user.referral_code},
        )

        if referral_code:
            await self._link(user, referral_code)

        return user

    async def link_referral(
        self, email: str, referral_code: str
    ) -> tuple[bool, str | None]:
        """
        Link an existing user to the owner of a referral code.

        Args:
            email: User key
            referral_code: Referrer's code

        Returns:
            Tuple of (success, error_message)
        """
        user = await self.user_repo.get_by_email(email)
        if user is None:
            return False, "User not found"

        try:
            await self._link(user, referral_code)
            await self.commit()
        except ReferralError as e:
            # Raised before any write, nothing to roll back
            logger.warning(
                "Referral link refused",
                extra={"user_id": user.email, "referral_code": referral_code, "reason": str(e)},
            )
            return False, str(e)
        except SQLAlchemyError:
            await self.rollback()
            raise

        return True, None

    async def get_referral_chain(self, email: str) -> list[User]:
        """
        Get tier-1 and tier-2 referrers of a user.

        Args:
            email: User key

        Returns:
            Users from direct referrer to grand referrer (missing ones omitted)
        """
        user = await self.user_repo.get_by_email(email)
        if user is None:
            return []

        chain = []
        for referrer_id in (user.referrer_id, user.grand_referrer_id):
            if referrer_id is None:
                continue
            referrer = await self.user_repo.get_by_email(referrer_id)
            if referrer is not None:
                chain.append(referrer)
        return chain

    async def _link(self, user: User, referral_code: str) -> None:
        """Validate and write the referral link. Does not commit."""
        if user.referrer_id is not None:
            raise ReferralAlreadyLinkedError(
                f"User {user.email} already has a referrer"
            )

        referrer = await self.user_repo.get_by_referral_code(referral_code)
        if referrer is None:
            raise InvalidReferralCodeError(
                f"Referral code {referral_code!r} not found"
            )

        if referrer.email == user.email:
            raise SelfReferralError("Cannot use your own referral code")

        await self._ensure_no_loop(user.email, referrer)

        # Grand referrer is a snapshot taken now, never re-derived
        user.referrer_id = referrer.email
        user.grand_referrer_id = referrer.referrer_id
        await self.session.flush()

        await self.user_repo.increment_referral_count(referrer.email)
        await self.session.refresh(referrer)
        new_count = referrer.referral_count

        await self.reward_points.award_referral(
            referrer.email, new_count - 1, new_count
        )

        logger.info(
            "Referral linked",
            extra={
                "user_id": user.email,
                "referrer_id": referrer.email,
                "grand_referrer_id": user.grand_referrer_id,
                "referral_count": new_count,
            },
        )

    async def _ensure_no_loop(self, new_user_id: str, referrer: User) -> None:
        """
        Refuse a link that would make the user their own ancestor.

        Raises:
            ReferralCycleError: If the user is already in the referrer's chain
        """
        visited = {referrer.email}
        current_id = referrer.referrer_id

        while current_id is not None and len(visited) < MAX_CHAIN_DEPTH:
            if current_id == new_user_id:
                logger.warning(
                    "Referral loop detected",
                    extra={
                        "new_user_id": new_user_id,
                        "direct_referrer_id": referrer.email,
                        "chain_ids": sorted(visited),
                    },
                )
                raise ReferralCycleError(
                    "Cannot create a circular referral chain"
                )
            if current_id in visited:
                break
            visited.add(current_id)

            ancestor = await self.user_repo.get_by_email(current_id)
            current_id = ancestor.referrer_id if ancestor else None
