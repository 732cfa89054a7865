"""Logging configuration for the application."""

import logging
import sys

from app.core.config import get_settings

# Libraries that log every command at DEBUG; kept at WARNING even in debug mode.
_NOISY_LOGGERS = ("aiosmtplib", "sqlalchemy.engine", "redis")


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO.
    Output goes to stdout.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
