"""
Referral configuration service.

Loads, validates, saves and previews the global referral config document.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.repositories.referral_config_repository import (
    ReferralConfigRepository,
)
from app.services.base_service import BaseService, transaction
from calculator import (
    ReferralConfig,
    RewardCurveSimulator,
    SimulationRow,
    default_config,
)


class ReferralConfigService(BaseService):
    """Config store for referral economics."""

    def __init__(self, session: AsyncSession, key: str | None = None) -> None:
        """
        Initialize config service.

        Args:
            session: Async database session
            key: Document key (default REFERRAL_CONFIG_KEY)
        """
        super().__init__(session)
        self.key = key or settings.referral_config_key
        self.config_repo = ReferralConfigRepository(session)

    async def get_config(self) -> ReferralConfig:
        """
        Get the current config snapshot.

        Returns:
            Stored config, or the defaults when nothing has been saved
        """
        config = await self.config_repo.get_config(self.key)
        if config is None:
            self.logger.info(
                "No referral config stored, using defaults",
                extra={"key": self.key},
            )
            return default_config()
        return config

    @transaction
    async def save_config(
        self, config: ReferralConfig | dict[str, Any]
    ) -> ReferralConfig:
        """
        Validate and store a config.

        Args:
            config: ReferralConfig or admin form payload (camelCase keys)

        Returns:
            Saved config

        Raises:
            pydantic.ValidationError: If the payload is invalid
        """
        if not isinstance(config, ReferralConfig):
            config = ReferralConfig.model_validate(config)

        await self.config_repo.save_config(self.key, config)

        self.logger.info(
            "Referral config saved",
            extra={
                "key": self.key,
                "tier1_rate": str(config.tier1_rate),
                "tier2_rate": str(config.tier2_rate),
                "enabled_events": list(config.enabled_events),
            },
        )
        return config

    async def preview(
        self, config: ReferralConfig | dict[str, Any] | None = None
    ) -> list[SimulationRow]:
        """
        Simulate levels 1..100 for an edited (unsaved) config.

        Args:
            config: Config to preview; the stored config when omitted

        Returns:
            Simulation rows
        """
        if config is None:
            config = await self.get_config()
        return RewardCurveSimulator(config).run()
