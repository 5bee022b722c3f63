"""
Referral reward processor.

Pays tier-1 and tier-2 referral rewards for a revenue event (subscription,
token sale, staking). Effective rates are scaled by the beneficiary's level
multiplier, every payout is appended to the reward ledger and counters are
incremented atomically.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import Currency, RewardEvent
from app.models.referral_reward import ReferralReward
from app.models.user import normalize_user_key
from app.repositories.referral_reward_repository import (
    ReferralRewardRepository,
)
from app.repositories.user_repository import UserRepository
from app.utils.exceptions import is_duplicate_violation
from calculator import LevelCalculator, ReferralConfig


# Ledger amounts are stored as DECIMAL(18, 8)
AMOUNT_QUANTUM = Decimal("0.00000001")


class ProcessStatus(str, Enum):
    """Outcome of a reward processing call."""

    PROCESSED = "processed"
    NOTHING_TO_PAY = "nothing_to_pay"
    USER_NOT_FOUND = "user_not_found"
    NO_REFERRER = "no_referrer"
    UNKNOWN_EVENT = "unknown_event"
    EVENT_DISABLED = "event_disabled"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass(frozen=True)
class RewardRecord:
    """Committed ledger row, detached from the session."""

    id: int
    user_id: str
    from_user_id: str
    amount: Decimal
    currency: str
    tier: int
    event: str
    percentage: Decimal
    status: str
    tx_hash: str | None
    timestamp: datetime

    @classmethod
    def from_row(cls, row: ReferralReward) -> "RewardRecord":
        return cls(
            id=row.id,
            user_id=row.user_id,
            from_user_id=row.from_user_id,
            amount=row.amount,
            currency=row.currency,
            tier=row.tier,
            event=row.event,
            percentage=row.percentage,
            status=row.status,
            tx_hash=row.tx_hash,
            timestamp=row.timestamp,
        )


@dataclass
class RewardNotification:
    """Data for notifying a beneficiary about a reward."""

    beneficiary_id: str
    from_user_id: str
    reward_amount: Decimal
    currency: str
    tier: int
    event: str
    level: int
    rank_name: str | None


@dataclass
class ProcessResult:
    """Result of reward processing."""

    success: bool
    status: ProcessStatus
    total_rewards: Decimal = Decimal("0")
    error_message: str | None = None
    rewards_count: int = 0
    rewards: list[RewardRecord] = field(default_factory=list)
    notifications: list[RewardNotification] = field(default_factory=list)
    failed_tiers: list[int] = field(default_factory=list)
    duplicate_tiers: list[int] = field(default_factory=list)


@dataclass
class _TierOutcome:
    reward: RewardRecord | None = None
    notification: RewardNotification | None = None
    duplicate: bool = False
    error: str | None = None


class ReferralRewardProcessor:
    """
    Two-tier referral reward processor.

    The config snapshot is passed in by the caller on every call; the
    processor never reads configuration on its own.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize referral reward processor.

        Args:
            session: Async database session
        """
        self.session = session
        self.user_repo = UserRepository(session)
        self.reward_repo = ReferralRewardRepository(session)

    async def process_referral_rewards(
        self,
        event: str,
        triggering_user_id: str,
        amount: Decimal,
        currency: Currency | str,
        config: ReferralConfig,
        tx_hash: str | None = None,
    ) -> ProcessResult:
        """
        Process referral rewards for a revenue event.

        Args:
            event: Event type (subscription, token_sale, staking)
            triggering_user_id: Key of the user whose action produced revenue
            amount: Revenue amount the rewards are computed from
            currency: Payout currency
            config: Referral config snapshot
            tx_hash: Optional transaction hash; when given, each tier is
                paid at most once for the event

        Returns:
            ProcessResult describing what was paid, or why nothing was

        Raises:
            ValueError: If amount is negative or currency is unknown
        """
        amount = self._validate_amount(amount)
        currency = self._validate_currency(currency)
        user_key = normalize_user_key(triggering_user_id)

        user = await self.user_repo.get_by_email(user_key)
        if user is None:
            logger.warning(
                "Triggering user not found, no referral rewards",
                extra={"user_id": user_key, "event": event, "tx_hash": tx_hash},
            )
            return ProcessResult(success=True, status=ProcessStatus.USER_NOT_FOUND)

        # Plain values survive a rollback in a later tier
        referrer_id = user.referrer_id
        grand_referrer_id = user.grand_referrer_id

        if referrer_id is None:
            logger.info(
                "User has no referrer, nothing to pay",
                extra={"user_id": user_key, "event": event},
            )
            return ProcessResult(success=True, status=ProcessStatus.NO_REFERRER)

        reward_event = RewardEvent.parse(event)
        if reward_event is None:
            logger.warning(
                "Unknown referral event type",
                extra={"user_id": user_key, "event": event, "tx_hash": tx_hash},
            )
            return ProcessResult(success=True, status=ProcessStatus.UNKNOWN_EVENT)

        if not config.is_event_enabled(reward_event.value):
            logger.info(
                "Referral event disabled, nothing to pay",
                extra={"user_id": user_key, "event": reward_event.value},
            )
            return ProcessResult(success=True, status=ProcessStatus.EVENT_DISABLED)

        beneficiaries = [
            (tier, beneficiary_id)
            for tier, beneficiary_id in ((1, referrer_id), (2, grand_referrer_id))
            if beneficiary_id is not None
        ]

        paid_tiers: set[int] = set()
        if tx_hash is not None:
            paid_tiers = await self.reward_repo.get_rewarded_tiers(
                user_key, reward_event.value, tx_hash
            )

        if paid_tiers and all(tier in paid_tiers for tier, _ in beneficiaries):
            logger.warning(
                "Duplicate referral event ignored",
                extra={
                    "user_id": user_key,
                    "event": reward_event.value,
                    "tx_hash": tx_hash,
                },
            )
            return ProcessResult(
                success=True,
                status=ProcessStatus.DUPLICATE,
                duplicate_tiers=sorted(paid_tiers),
            )

        calculator = LevelCalculator(config)

        result = ProcessResult(success=True, status=ProcessStatus.NOTHING_TO_PAY)
        errors: list[str] = []

        for tier, beneficiary_id in beneficiaries:
            if tier in paid_tiers:
                # Paid by an earlier call for the same event
                result.duplicate_tiers.append(tier)
                continue

            outcome = await self._pay_tier(
                calculator=calculator,
                tier=tier,
                beneficiary_id=beneficiary_id,
                from_user_id=user_key,
                amount=amount,
                currency=currency,
                event=reward_event,
                tx_hash=tx_hash,
            )

            if outcome.reward is not None:
                result.rewards.append(outcome.reward)
                result.notifications.append(outcome.notification)
                result.total_rewards += outcome.notification.reward_amount
                result.rewards_count += 1
            elif outcome.duplicate:
                result.duplicate_tiers.append(tier)
            elif outcome.error is not None:
                result.failed_tiers.append(tier)
                errors.append(outcome.error)

        if errors:
            result.success = False
            result.error_message = "; ".join(errors)

        if result.rewards_count:
            result.status = ProcessStatus.PROCESSED
        elif result.failed_tiers:
            result.status = ProcessStatus.FAILED
        elif result.duplicate_tiers:
            result.status = ProcessStatus.DUPLICATE

        logger.info(
            "Referral rewards processed",
            extra={
                "user_id": user_key,
                "event": reward_event.value,
                "status": result.status.value,
                "total_rewards": str(result.total_rewards),
                "currency": currency.value,
                "rewards_count": result.rewards_count,
                "tx_hash": tx_hash,
            },
        )

        return result

    async def _pay_tier(
        self,
        calculator: LevelCalculator,
        tier: int,
        beneficiary_id: str,
        from_user_id: str,
        amount: Decimal,
        currency: Currency,
        event: RewardEvent,
        tx_hash: str | None,
    ) -> _TierOutcome:
        """
        Pay one tier and commit it on its own.

        A failure here is rolled back and reported without touching the
        other tier.
        """
        beneficiary = await self.user_repo.get_by_email(beneficiary_id)
        if beneficiary is None:
            logger.warning(
                "Referrer not found for reward",
                extra={
                    "tier": tier,
                    "referrer_id": beneficiary_id,
                    "from_user_id": from_user_id,
                    "event": event.value,
                },
            )
            return _TierOutcome()

        level = calculator.level_for_referrals(beneficiary.referral_count)
        rank = calculator.rank_for_level(level)
        rate = calculator.tier_rate(tier, level)
        reward_amount = self._calculate_reward(amount, rate)

        if reward_amount <= 0:
            logger.info(
                "Referral reward is zero, tier skipped",
                extra={
                    "tier": tier,
                    "referrer_id": beneficiary_id,
                    "event": event.value,
                    "rate": str(rate),
                },
            )
            return _TierOutcome()

        try:
            reward = await self.reward_repo.append(
                user_id=beneficiary_id,
                from_user_id=from_user_id,
                amount=reward_amount,
                currency=currency.value,
                tier=tier,
                event=event.value,
                percentage=(rate * 100).quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP),
                tx_hash=tx_hash,
            )
            # Plain copy; a rollback in the next tier expires the row
            record = RewardRecord.from_row(reward)
            await self.user_repo.increment_reward_total(
                beneficiary_id, currency, reward_amount
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()

            if is_duplicate_violation(e):
                logger.warning(
                    "Duplicate referral reward rejected by ledger",
                    extra={
                        "tier": tier,
                        "referrer_id": beneficiary_id,
                        "from_user_id": from_user_id,
                        "event": event.value,
                        "tx_hash": tx_hash,
                    },
                )
                return _TierOutcome(duplicate=True)

            logger.opt(exception=True).error(
                "Failed to write referral reward",
                extra={
                    "tier": tier,
                    "referrer_id": beneficiary_id,
                    "from_user_id": from_user_id,
                    "event": event.value,
                },
            )
            return _TierOutcome(error=f"tier {tier}: {e}")

        logger.info(
            "Referral reward created",
            extra={
                "tier": tier,
                "referrer_id": beneficiary_id,
                "from_user_id": from_user_id,
                "level": level,
                "rate": str(rate),
                "amount": str(reward_amount),
                "currency": currency.value,
                "event": event.value,
            },
        )

        return _TierOutcome(
            reward=record,
            notification=RewardNotification(
                beneficiary_id=beneficiary_id,
                from_user_id=from_user_id,
                reward_amount=reward_amount,
                currency=currency.value,
                tier=tier,
                event=event.value,
                level=level,
                rank_name=rank.name if rank else None,
            ),
        )

    def _calculate_reward(self, amount: Decimal, rate: Decimal) -> Decimal:
        """
        Calculate reward amount for an effective rate.

        Args:
            amount: Revenue amount
            rate: Effective rate (tier rate times level multiplier)

        Returns:
            Reward rounded to ledger precision
        """
        if rate <= 0:
            return Decimal("0")
        return (amount * rate).quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)

    @staticmethod
    def _validate_amount(amount: Decimal) -> Decimal:
        if not isinstance(amount, Decimal):
            try:
                amount = Decimal(str(amount))
            except InvalidOperation:
                raise ValueError(f"Invalid reward base amount: {amount!r}") from None
        if not amount.is_finite() or amount < 0:
            raise ValueError(f"Reward base amount must be a non-negative number, got {amount}")
        return amount

    @staticmethod
    def _validate_currency(currency: Currency | str) -> Currency:
        if isinstance(currency, Currency):
            return currency
        try:
            return Currency(str(currency).strip().upper())
        except ValueError:
            raise ValueError(
                f"Unsupported currency {currency!r}; expected one of "
                f"{', '.join(c.value for c in Currency)}"
            ) from None
