"""Logging setup for huetrack.

The capture loop runs on its own thread, so the default format includes
the thread name alongside the logger name.
"""

from __future__ import annotations

import logging
import sys

from huetrack.config.settings import LoggingConfig

PACKAGE_LOGGER = "huetrack"


def setup_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Configure the 'huetrack' logger from a LoggingConfig.

    Replaces handlers installed by an earlier call, so calling this twice
    does not duplicate output. Returns the configured logger.
    """
    if config is None:
        config = LoggingConfig()

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(logging.FileHandler(config.file))
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    package_logger.debug("Logging initialized at %s level", config.level)
    return package_logger
