"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str
    database_echo: bool = False

    # Application
    environment: str = "production"
    log_level: str = "INFO"
    log_file: str | None = Field(
        default="logs/referral_engine.log",
        description="Rotating log file path; empty disables the file sink",
    )

    # Referral config store
    referral_config_key: str = Field(
        default="global",
        min_length=1,
        max_length=50,
        description="Well-known key of the referral config document",
    )
    referral_code_length: int = Field(default=6, ge=4, le=20)

    # Leaderboard
    leaderboard_default_limit: int = Field(default=10, ge=1)
    leaderboard_max_limit: int = Field(default=100, ge=1)
    recent_rewards_limit: int = Field(default=20, ge=1)

    # Reward points (RP)
    reward_points_per_referral: int = Field(default=10, ge=0)
    reward_points_levelup_bonus: int = Field(default=100, ge=0)
    reward_points_levelup_interval: int = Field(
        default=10, ge=1, description="Level-up bonus is paid every N levels"
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(
            ("postgresql://", "postgresql+asyncpg://", "sqlite+aiosqlite://")
        ):
            raise ValueError(
                "DATABASE_URL must start with postgresql+asyncpg:// "
                "(or sqlite+aiosqlite:// for local runs)"
            )
        if v.startswith("postgresql://"):
            # Async engine needs the asyncpg driver
            v = v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return level

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        if self.leaderboard_default_limit > self.leaderboard_max_limit:
            raise ValueError(
                "LEADERBOARD_DEFAULT_LIMIT cannot exceed LEADERBOARD_MAX_LIMIT"
            )
        if self.environment == "production" and self.database_url.startswith("sqlite"):
            logger.warning(
                "SQLite database configured in production environment. "
                "Use PostgreSQL for concurrent reward processing."
            )
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


# Global settings instance
settings = Settings()
