"""
Logging helpers for the arbtransfer SDK.

Modules obtain a logger with ``get_logger(__name__)`` and attach
structured fields through ``extra={...}``. Nothing is emitted until the
host application (or the CLI) calls ``configure_logging``.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO, Union

__all__ = ["get_logger", "configure_logging", "ROOT_LOGGER_NAME"]

ROOT_LOGGER_NAME = "arbtransfer"

_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class _ExtraFormatter(logging.Formatter):
    """Appends ``extra`` fields as key=value pairs after the message."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS}
        if not extras:
            return base
        fields = " ".join(f"{k}={v}" for k, v in sorted(extras.items()))
        return f"{base} | {fields}"


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``arbtransfer`` namespace."""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: Union[int, str] = logging.INFO,
    stream: Optional[TextIO] = None,
    fmt: str = "%(asctime)s %(levelname)s %(name)s: %(message)s",
) -> logging.Logger:
    """
    Install a stream handler on the ``arbtransfer`` logger.

    Calling it again replaces the previous handler instead of stacking.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_arbtransfer_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(_ExtraFormatter(fmt))
    handler._arbtransfer_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
