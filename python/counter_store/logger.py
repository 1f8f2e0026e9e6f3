"""Centralized logger configuration for the counter store service.

Modules call :func:`get_logger` at import time, which installs the stdout
handler with the environment's level. ``python -m counter_store`` loads
``.env`` afterwards and calls :func:`configure_root_logger` again with the
settled level; an explicit level always wins over the import-time one.
"""

import logging
import os
import sys
from typing import Optional

_LOG_FORMAT = "%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Shared by the root and uvicorn loggers once installed
_handler: Optional[logging.Handler] = None


def _install_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for logger_name in _UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.addHandler(handler)
        uvicorn_logger.propagate = False

    return handler


def _apply_level(level: str) -> None:
    _handler.setLevel(level)
    logging.getLogger().setLevel(level)
    for logger_name in _UVICORN_LOGGERS:
        logging.getLogger(logger_name).setLevel(level)


def configure_root_logger(level: Optional[str] = None) -> None:
    """Install the service log format and set the log level.

    The handler is installed once. Without ``level`` an already configured
    logger is left as is; with ``level`` the root, handler and uvicorn
    loggers are all moved to it.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If None, reads from COUNTER_STORE_LOG_LEVEL or defaults to INFO.
    """
    global _handler

    if _handler is not None and level is None:
        return

    if _handler is None:
        _handler = _install_handler()

    if level is None:
        level = os.environ.get("COUNTER_STORE_LOG_LEVEL", "INFO")
    _apply_level(level.upper())


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Return a logger with the service formatting applied.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Counter store ready")
        2024-01-15 10:30:45.123 | INFO     | counter_store.store | Counter store ready
    """
    if _handler is None:
        configure_root_logger()

    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level.upper())
    return logger
