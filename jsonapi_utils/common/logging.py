"""
Logging configuration helpers.
Library modules only create named loggers; the hosting process calls
`configure_logging` once during startup.
"""

from __future__ import annotations

import logging

from jsonapi_utils.common.settings import get_config

_LOGGING_CONFIGURED = False


def configure_logging() -> None:
    """Configure process-wide logging from the loaded configuration."""

    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    config = get_config()
    level_name = config.log_level.upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    _LOGGING_CONFIGURED = True
