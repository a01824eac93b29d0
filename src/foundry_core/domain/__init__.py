"""Pure domain rules for the transport core."""

from .classification import RETRIABLE_STATUSES, ResponseClass, classify
from .sanitize import REDACTION_MARKER, sanitize, sanitize_and_truncate, truncate_message

__all__ = [
    "REDACTION_MARKER",
    "RETRIABLE_STATUSES",
    "ResponseClass",
    "classify",
    "sanitize",
    "sanitize_and_truncate",
    "truncate_message",
]
