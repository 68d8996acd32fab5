"""Diagnostic logging. User-facing output of the commands stays on `print`."""

from __future__ import annotations

import logging

from .config import LOG_LEVEL

_CONFIGURED = False


def setup_logging(level: str | None = None) -> None:
    """Set up the root logger for elantools.

    Module loggers call this without a level when they are created, which
    applies `LOG_LEVEL`. The CLI calls it again with `--log-level`, which
    then only changes the level of the already configured root logger.

    Args:
        level: Level name such as "DEBUG". Unknown names fall back to WARNING.
    """
    global _CONFIGURED
    log_level = getattr(logging, (level or LOG_LEVEL).upper(), logging.WARNING)

    if _CONFIGURED:
        if level is not None:
            logging.getLogger().setLevel(log_level)
        return

    logging.basicConfig(level=log_level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)
