"""Shared logging configuration helpers for the API process."""

from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_QUIET_LOGGERS = ("aiosqlite", "sqlalchemy.engine")


def configure_logging(*, level: str) -> None:
    """Configure process logging with a fixed format and runtime level.

    Driver and engine loggers stay at WARNING so statement parameters, which
    may include lookup emails and tokens, are not echoed at debug level.
    """

    normalized_level = level.strip().upper() if level.strip() else "INFO"
    resolved_level = getattr(logging, normalized_level, logging.INFO)

    logging.basicConfig(level=resolved_level, format=_LOG_FORMAT)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
