from __future__ import annotations

import sys
from typing import Any

from loguru import logger

from .config import LOG_LEVELS, ConfigError

LOG_FORMAT = "<green>{time:HH:mm:ss.SSS}</green> <level>{level: <8}</level> | <level>{message}</level>"


def _stderr_sink(message: Any) -> None:
    # Resolve sys.stderr per write so replaced streams (pytest capture, CliRunner) still work.
    sys.stderr.write(str(message))
    sys.stderr.flush()


def configure_logging(level: str = "INFO") -> int:
    """Replace loguru's default handler with a single stderr sink. Returns the handler id."""
    level = level.upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"unknown log level: {level}")

    logger.remove()
    return logger.add(
        _stderr_sink,
        level=level,
        format=LOG_FORMAT,
        colorize=False,
        diagnose=False,
    )
