"""Pydantic models for the referral progression calculator."""

from decimal import Decimal

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MAX_LEVEL = 100


class LevelThreshold(BaseModel):
    """Range of levels sharing the same invites-per-level requirement.

    Example: ``{"minLevel": 1, "maxLevel": 20, "invitesPerLevel": 1}``
    means every level from 1 to 20 needs one more successful referral
    to advance to the next level.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    min_level: int = Field(..., ge=1, le=MAX_LEVEL, alias="minLevel")
    max_level: int = Field(..., ge=1, le=MAX_LEVEL, alias="maxLevel")
    invites_per_level: int = Field(..., ge=0, alias="invitesPerLevel")

    @model_validator(mode="after")
    def check_bounds(self) -> "LevelThreshold":
        if self.min_level > self.max_level:
            raise ValueError(
                f"minLevel {self.min_level} is greater than maxLevel {self.max_level}"
            )
        return self

    def contains(self, level: int) -> bool:
        return self.min_level <= level <= self.max_level


class RankTier(BaseModel):
    """Named badge unlocked at ``min_level``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., min_length=1, max_length=50)
    min_level: int = Field(..., ge=1, le=MAX_LEVEL, alias="minLvl")
    color: str | None = Field(default=None, description="Display hint for UIs")


class ReferralConfig(BaseModel):
    """Global referral economics.

    Field aliases follow the JSON document edited on the admin settings
    screen, so stored documents and form payloads validate as-is.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    tier1_rate: Decimal = Field(..., ge=0, le=1, alias="tier1Rate")
    tier2_rate: Decimal = Field(..., ge=0, le=1, alias="tier2Rate")
    enabled_events: tuple[str, ...] = Field(default=(), alias="enabledEvents")
    base_xp_multiplier: Decimal = Field(
        default=Decimal("1.0"), ge=0, alias="baseXpMultiplier"
    )
    xp_multiplier_per_level: Decimal = Field(
        default=Decimal("0.05"), ge=0, alias="xpMultiplierPerLevel"
    )
    level_thresholds: tuple[LevelThreshold, ...] = Field(
        default=(), alias="levelThresholds"
    )
    ranks: tuple[RankTier, ...] = Field(default=())

    @field_validator("enabled_events")
    @classmethod
    def normalize_events(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Strip, lowercase and de-duplicate event names keeping order."""
        seen: list[str] = []
        for event in v:
            name = event.strip().lower()
            if name and name not in seen:
                seen.append(name)
        return tuple(seen)

    @field_validator("level_thresholds")
    @classmethod
    def check_thresholds(
        cls, v: tuple[LevelThreshold, ...]
    ) -> tuple[LevelThreshold, ...]:
        """Ranges are sorted by minLevel and must not overlap."""
        ordered = tuple(sorted(v, key=lambda t: t.min_level))
        for previous, current in zip(ordered, ordered[1:]):
            if current.min_level <= previous.max_level:
                raise ValueError(
                    f"Level range {current.min_level}-{current.max_level} overlaps "
                    f"{previous.min_level}-{previous.max_level}"
                )
        return ordered

    @field_validator("ranks")
    @classmethod
    def check_ranks(cls, v: tuple[RankTier, ...]) -> tuple[RankTier, ...]:
        names = [rank.name for rank in v]
        if len(names) != len(set(names)):
            raise ValueError("Rank names must be unique")
        ordered = tuple(sorted(v, key=lambda r: r.min_level))
        if ordered and ordered[0].min_level != 1:
            logger.warning(
                "Rank table has no floor rank at level 1; low levels will have no rank",
                extra={"lowest_min_level": ordered[0].min_level},
            )
        return ordered

    def is_event_enabled(self, event: str) -> bool:
        return event.strip().lower() in self.enabled_events

    def to_document(self) -> dict:
        """Serialize to the JSON document shape used by the config store."""
        return self.model_dump(mode="json", by_alias=True)


class LevelInfo(BaseModel):
    """Derived progression state for a referral count."""

    model_config = ConfigDict(frozen=True)

    referral_count: int = Field(..., ge=0)
    level: int = Field(..., ge=1, le=MAX_LEVEL)
    rank: RankTier | None = None
    multiplier: Decimal
    cumulative_invites: int = Field(..., ge=0, description="Invites needed to reach this level")
    next_level_cumulative: int | None = Field(
        default=None, description="Invites needed to reach the next level (None at max level)"
    )
    invites_to_next_level: int = Field(
        default=0, ge=0, description="Remaining referrals before the next level"
    )
    is_max_level: bool = False

    @property
    def rank_name(self) -> str | None:
        return self.rank.name if self.rank else None


class SimulationRow(BaseModel):
    """One level of a reward-curve simulation."""

    model_config = ConfigDict(frozen=True)

    level: int
    rank_name: str
    rank_color: str | None = None
    invites_to_next: int
    cumulative: int
    multiplier: Decimal
    tier1_rate: str
    tier2_rate: str
