"""
Logging setup.

Configures loguru sinks from application settings.
"""

import sys

from loguru import logger

from affiliate.config.settings import Settings, settings as default_settings


def setup_logging(app_settings: Settings | None = None) -> None:
    """Configure stderr and rotating file sinks."""
    cfg = app_settings or default_settings

    logger.remove()
    logger.add(sys.stderr, level=cfg.log_level)

    if cfg.log_file:
        logger.add(
            cfg.log_file,
            rotation=cfg.log_rotation,
            retention=cfg.log_retention,
            level=cfg.log_level,
            encoding="utf-8",
        )

    logger.info(
        "Affiliate logging configured",
        extra={"environment": cfg.environment, "level": cfg.log_level},
    )
