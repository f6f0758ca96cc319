"""
Logging configuration.

Configures loguru sinks: stderr plus an optional rotating file.
"""

import sys

from loguru import logger

from referral_engine.config.settings import Settings, settings as default_settings


def setup_logging(config: Settings | None = None) -> None:
    """Configure logger with file rotation."""
    config = config or default_settings

    logger.remove()
    logger.add(sys.stderr, level=config.log_level)

    if config.log_file:
        logger.add(
            config.log_file,
            rotation=config.log_rotation,
            retention=config.log_retention,
            level=config.log_level,
            encoding="utf-8",
        )

    logger.info(
        "Logging configured",
        extra={
            "environment": config.environment,
            "level": config.log_level,
        },
    )
