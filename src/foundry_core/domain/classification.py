"""Status-code classification for the retry loop."""

from __future__ import annotations

from enum import StrEnum

RETRIABLE_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})


class ResponseClass(StrEnum):
    SUCCESS = "success"
    RETRIABLE = "retriable"
    FATAL = "fatal"


def classify(status_code: int) -> ResponseClass:
    """Map an HTTP status code to success, retriable, or fatal.

    The table is exhaustive: 2xx succeeds, the transient subset is retried,
    and every other status is fatal.
    """
    if 200 <= status_code < 300:
        return ResponseClass.SUCCESS
    if status_code in RETRIABLE_STATUSES:
        return ResponseClass.RETRIABLE
    return ResponseClass.FATAL
