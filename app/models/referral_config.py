"""
Referral config document model.

Stores the admin-edited referral configuration as a JSON document under a
well-known key. Validation lives in ``calculator.ReferralConfig``.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class ReferralConfigDocument(Base):
    """Referral configuration document."""

    __tablename__ = "referral_configs"

    key: Mapped[str] = mapped_column(String(50), primary_key=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<ReferralConfigDocument(key={self.key!r}, updated_at={self.updated_at})>"
