"""
Reward points (RP) module.

Awards non-monetary reward points for successful referrals and level
milestones, and backfills balances for users whose RP fell behind their
referral count.
"""

from dataclasses import dataclass, field

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.models.enums import RewardPointType
from app.models.user import normalize_user_key
from app.repositories.reward_points_repository import RewardPointsRepository
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService, log_operation
from calculator import LevelCalculator, ReferralConfig


@dataclass
class BackfillEntry:
    """Backfill outcome for one user."""

    email: str
    referrals: int
    level: int
    existing: int
    expected: int
    awarded: int
    status: str


@dataclass
class BackfillReport:
    """Summary of a backfill run."""

    dry_run: bool
    processed: int = 0
    awarded: int = 0
    skipped: int = 0
    total_awarded: int = 0
    details: list[BackfillEntry] = field(default_factory=list)


class RewardPointsManager(BaseService):
    """
    Reward point accounting.

    Level milestones use the same level curve as monetary rewards.
    """

    def __init__(
        self,
        session: AsyncSession,
        config: ReferralConfig,
        points_per_referral: int | None = None,
        levelup_bonus: int | None = None,
        levelup_interval: int | None = None,
    ) -> None:
        """
        Initialize reward points manager.

        Args:
            session: Async database session
            config: Referral config (for the level curve)
            points_per_referral: RP per referral (default from settings)
            levelup_bonus: RP per level milestone (default from settings)
            levelup_interval: Milestone spacing in levels (default from settings)
        """
        super().__init__(session)
        self.calculator = LevelCalculator(config)
        self.points_repo = RewardPointsRepository(session)
        self.user_repo = UserRepository(session)

        self.points_per_referral = (
            settings.reward_points_per_referral
            if points_per_referral is None else points_per_referral
        )
        self.levelup_bonus = (
            settings.reward_points_levelup_bonus
            if levelup_bonus is None else levelup_bonus
        )
        self.levelup_interval = (
            settings.reward_points_levelup_interval
            if levelup_interval is None else levelup_interval
        )

    def milestones_reached(self, level: int) -> int:
        """Number of level milestones at or below ``level``."""
        return level // self.levelup_interval

    def referral_points(self, referral_count: int) -> int:
        return max(referral_count, 0) * self.points_per_referral

    def levelup_points(self, referral_count: int) -> int:
        level = self.calculator.level_for_referrals(referral_count)
        return self.milestones_reached(level) * self.levelup_bonus

    def expected_total(self, referral_count: int) -> int:
        """
        RP a user should hold for a referral count.

        Formula: count * per_referral + milestones(level) * levelup_bonus
        """
        return self.referral_points(referral_count) + self.levelup_points(
            referral_count
        )

    async def award_referral(
        self, email: str, old_count: int, new_count: int
    ) -> int:
        """
        Award RP for new referrals and any level milestones they crossed.

        Does not commit; runs inside the caller's transaction.

        Args:
            email: Referrer key
            old_count: Referral count before the new referrals
            new_count: Referral count after the new referrals

        Returns:
            RP awarded
        """
        if new_count <= old_count:
            return 0

        key = normalize_user_key(email)
        awarded = 0

        referral_rp = (new_count - old_count) * self.points_per_referral
        if referral_rp > 0:
            await self.points_repo.add_points(
                key,
                referral_rp,
                RewardPointType.REFERRAL,
                source=f"Referral #{new_count}",
            )
            awarded += referral_rp

        old_level = self.calculator.level_for_referrals(old_count)
        new_level = self.calculator.level_for_referrals(new_count)
        milestones = self.milestones_reached(new_level) - self.milestones_reached(old_level)

        if milestones > 0 and self.levelup_bonus > 0:
            levelup_rp = milestones * self.levelup_bonus
            await self.points_repo.add_points(
                key,
                levelup_rp,
                RewardPointType.LEVELUP,
                source=f"Level {new_level} milestone",
            )
            awarded += levelup_rp

            self.logger.info(
                "Level milestone reached",
                extra={"user_id": key, "old_level": old_level, "new_level": new_level},
            )

        return awarded

    @log_operation
    async def backfill(self, dry_run: bool = False) -> BackfillReport:
        """
        Bring every referrer's RP up to the expected total.

        Users already holding at least the expected RP are skipped; RP is
        never taken away.

        Args:
            dry_run: Report what would be awarded without writing

        Returns:
            BackfillReport
        """
        report = BackfillReport(dry_run=dry_run)

        for user in await self.user_repo.get_users_with_referrals():
            report.processed += 1

            count = user.referral_count
            level = self.calculator.level_for_referrals(count)
            referral_rp = self.referral_points(count)
            expected = self.expected_total(count)

            balance = await self.points_repo.get_balance(user.email)
            existing = balance.total_rp if balance else 0
            to_award = expected - existing

            if to_award <= 0:
                report.skipped += 1
                report.details.append(
                    BackfillEntry(
                        email=user.email,
                        referrals=count,
                        level=level,
                        existing=existing,
                        expected=expected,
                        awarded=0,
                        status="SKIP (already enough)",
                    )
                )
                continue

            backfill_referral = max(0, referral_rp - existing)
            backfill_levelup = to_award - backfill_referral

            if not dry_run:
                if backfill_referral > 0:
                    await self.points_repo.add_points(
                        user.email,
                        backfill_referral,
                        RewardPointType.REFERRAL,
                        source=f"Backfill: {count} referrals",
                    )
                if backfill_levelup > 0:
                    await self.points_repo.add_points(
                        user.email,
                        backfill_levelup,
                        RewardPointType.LEVELUP,
                        source=f"Backfill: Level milestones up to LVL {level}",
                    )

            report.awarded += 1
            report.total_awarded += to_award
            report.details.append(
                BackfillEntry(
                    email=user.email,
                    referrals=count,
                    level=level,
                    existing=existing,
                    expected=expected,
                    awarded=to_award,
                    status="WOULD AWARD" if dry_run else "AWARDED",
                )
            )

        if not dry_run:
            await self.commit()

        logger.info(
            "Reward points backfill finished",
            extra={
                "dry_run": dry_run,
                "processed": report.processed,
                "awarded": report.awarded,
                "skipped": report.skipped,
                "total_awarded": report.total_awarded,
            },
        )

        return report
