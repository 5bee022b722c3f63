"""
Logging setup.

Configures loguru sinks for services and admin scripts.
Sets up log rotation and retention policies.
"""

import sys

from loguru import logger

from app.config.settings import settings


def setup_logging(level: str | None = None, log_file: str | None = None) -> None:
    """
    Configure logger with a stderr sink and a rotating file sink.

    Args:
        level: Minimum level (defaults to LOG_LEVEL)
        log_file: File sink path (defaults to LOG_FILE; empty disables it)
    """
    level = level or settings.log_level
    log_file = settings.log_file if log_file is None else log_file

    # Variable values in tracebacks stay out of production logs
    diagnose = not settings.is_production

    logger.remove()
    logger.add(sys.stderr, level=level, diagnose=diagnose)

    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            level=level,
            diagnose=diagnose,
            encoding="utf-8",
        )

    logger.debug(
        "Logging configured",
        extra={
            "level": level,
            "log_file": log_file or None,
            "environment": settings.environment,
        },
    )
