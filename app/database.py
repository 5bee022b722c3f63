"""
Database engine and session factory.

Engines are created on demand rather than at import time, so importing
services never opens a connection.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config.settings import settings


def create_engine(database_url: str | None = None, **kwargs) -> AsyncEngine:
    """
    Create an async engine.

    Args:
        database_url: Overrides DATABASE_URL
        **kwargs: Extra create_async_engine arguments

    Returns:
        AsyncEngine
    """
    kwargs.setdefault("echo", settings.database_echo)
    return create_async_engine(database_url or settings.database_url, **kwargs)


def create_session_maker(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create a session maker bound to ``engine`` (a new engine if omitted)."""
    if engine is None:
        engine = create_engine()
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
