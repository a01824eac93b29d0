"""Shared logging utilities with secret redaction.

Usage example:
    from foundry_core.observability.logging import get_logger

    logger = get_logger("foundry_core.infrastructure.http")
    logger.warning("Retrying after status %s", 503)
"""

from __future__ import annotations

import logging
import time
from typing import override

from ..domain.sanitize import sanitize

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


class RedactingFilter(logging.Filter):
    """Sanitise the rendered message of every record before it is emitted."""

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = sanitize(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def get_logger(name: str) -> logging.Logger:
    """Return a standard logger configured for UTC timestamps and redaction.

    Args:
        name: Logger name (use a stable module-qualified name).

    Returns:
        A logger with a single redacting stream handler and a consistent UTC format.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)
        formatter.converter = time.gmtime
        handler.setFormatter(formatter)
        handler.addFilter(RedactingFilter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger
