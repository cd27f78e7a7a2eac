"""
Logging setup for the chart service.

Modules log through ``get_logger(__name__)``.  Records go to stdout as
``time | level | logger | message`` at the configured ``LOG_LEVEL``.
"""
from __future__ import annotations

import logging
import sys

from src.core.config import get_settings

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def _stdout_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
    return handler


def get_logger(name: str) -> logging.Logger:
    settings = get_settings()
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.addHandler(_stdout_handler())
    logger.setLevel(_level(settings.log_level))
    return logger


def configure_sql_logging(echo: bool | None = None) -> None:
    """Route SQLAlchemy's statement log through the same handler.

    Statements are logged at INFO when *echo* (default: ``SQL_ECHO``) is set;
    otherwise only warnings from the engine come through.
    """
    if echo is None:
        echo = get_settings().sql_echo
    sa_logger = get_logger("sqlalchemy.engine")
    sa_logger.setLevel(logging.INFO if echo else logging.WARNING)
