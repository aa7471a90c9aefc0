"""
Logger lookup shared by every CrispHooks module.

Modules call ``get_logger(__name__)`` and get a standard library logger under
the ``crisphooks`` namespace. Applications that log through something else
(structlog, loguru) install it with ``set_logger``. Lookups happen when a
component is created, so listeners built afterwards (the lifecycle logging
of a new HooksConfig) use it; ``disable_logging`` silences them.

    >>> from crisphooks.core.logger import get_logger, set_logger
    >>> logger = get_logger(__name__)
    >>> set_logger(structlog.get_logger("hooks"))
"""

import logging
from typing import Any

ROOT_LOGGER_NAME = "crisphooks"

# Replaces standard logging for every module when set
_custom_logger: Any = None


class NullLogger:
    """Accepts every logging call and drops it."""

    def debug(self, *args, **kwargs): pass
    def info(self, *args, **kwargs): pass
    def warning(self, *args, **kwargs): pass
    def error(self, *args, **kwargs): pass
    def exception(self, *args, **kwargs): pass
    def critical(self, *args, **kwargs): pass


def set_logger(logger: Any) -> None:
    """
    Route all CrispHooks logging through ``logger``.

    The object needs debug/info/warning/error/exception/critical methods.
    Pass None to return to standard logging.
    """
    global _custom_logger
    _custom_logger = logger


def disable_logging() -> None:
    set_logger(NullLogger())


def get_logger(name: str = ROOT_LOGGER_NAME) -> Any:
    """
    Return the logger for ``name``, or the logger installed with set_logger().

    Names outside the ``crisphooks`` namespace are placed under it, so that
    one level setting on the root logger covers listeners named by users.
    """
    if _custom_logger is not None:
        return _custom_logger

    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        root.addHandler(logging.NullHandler())

    return logging.getLogger(name)

