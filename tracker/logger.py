"""
Logging setup shared by the app and the store clients.

Modules log through ``logging.getLogger(__name__)``; only the entry point
calls setup_logger() to install the handler and level.
"""

import logging
import sys
from logging import Logger, StreamHandler
from typing import Final

LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

LOG_LEVELS: Final[dict[str, int]] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def setup_logger(name: str = "tracker", level: str = "INFO") -> Logger:
    """
    Configure root logging and return a named logger.

    ``level`` is a string such as "DEBUG" or "error"; unknown values fall
    back to INFO.
    """
    logging.basicConfig(
        level=LOG_LEVELS.get(level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[StreamHandler(sys.stdout)],
        force=True,
    )
    return logging.getLogger(name)
