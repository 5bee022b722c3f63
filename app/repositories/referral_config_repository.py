"""
Referral config repository.

Reads and writes the referral configuration document stored under a
well-known key.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.referral_config import ReferralConfigDocument
from app.repositories.base import BaseRepository
from calculator import ReferralConfig


class ReferralConfigRepository(BaseRepository[ReferralConfigDocument]):
    """Config document repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral config repository."""
        super().__init__(ReferralConfigDocument, session)

    async def get_config(self, key: str) -> ReferralConfig | None:
        """
        Load and validate the stored config.

        Args:
            key: Document key

        Returns:
            Validated ReferralConfig, or None if nothing is stored

        Raises:
            pydantic.ValidationError: If the stored document is invalid
        """
        document = await self.get_by_id(key)
        if document is None:
            return None
        return ReferralConfig.model_validate(document.data)

    async def save_config(self, key: str, config: ReferralConfig) -> ReferralConfigDocument:
        """
        Insert or replace the config document.

        Args:
            key: Document key
            config: Validated config

        Returns:
            Stored document
        """
        data = config.to_document()
        document = await self.get_by_id(key)

        if document is None:
            document = await self.create(key=key, data=data)
            logger.info("Referral config created", extra={"key": key})
        else:
            document.data = data
            await self.session.flush()
            await self.session.refresh(document)
            logger.info("Referral config replaced", extra={"key": key})

        return document
