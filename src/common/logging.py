"""Logging configuration for the catalog demo."""

from __future__ import annotations

import logging
import sys

from .config import LoggingSettings


def setup_logging(
    settings: LoggingSettings | None = None,
    module_name: str = "src.catalog",
) -> logging.Logger:
    """Attach a stdout handler to ``module_name`` using ``settings``.

    Module loggers below ``module_name`` inherit the handler. Calling
    again only updates the level and format of the existing handler.
    """
    settings = settings or LoggingSettings()
    logger = logging.getLogger(module_name)
    logger.setLevel(settings.level)

    formatter = logging.Formatter(fmt=settings.format, datefmt=settings.datefmt)
    if not logger.handlers:
        logger.addHandler(logging.StreamHandler(sys.stdout))
    for handler in logger.handlers:
        handler.setFormatter(formatter)

    return logger
