"""Logging setup for applications embedding the arcade."""

from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single stdout handler to the package logger.

    Safe to call more than once; the previous handler is replaced.
    """
    resolved = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT))

    logger = logging.getLogger("nebula_arcade")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(resolved)

    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.debug("logging initialised at %s", logging.getLevelName(resolved))
    return logger
