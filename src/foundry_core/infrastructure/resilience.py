"""Retry policy and backoff computation.

Usage example:
    from foundry_core.infrastructure.resilience import RetryPolicy

    policy = RetryPolicy(max_retries=3, initial_backoff_seconds=0.5)
    delay = policy.compute_delay(attempt=0, retry_after=None)
"""

from __future__ import annotations

import random
from collections.abc import Mapping
from dataclasses import dataclass

from ..exceptions import RetryPolicyRangeError

MAX_RETRIES_LIMIT = 10
MAX_BACKOFF_SECONDS = 60.0
JITTER_MIN = 0.75
JITTER_MAX = 1.25
# 2**30 is already far past MAX_BACKOFF_SECONDS for any positive base.
_MAX_EXPONENT = 30


def compute_backoff(attempt: int, initial_backoff_seconds: float) -> float:
    """Exponential backoff with multiplicative jitter, capped at MAX_BACKOFF_SECONDS.

    The exponent is clamped before it is applied, so very large attempt numbers
    cannot overflow; the result never exceeds MAX_BACKOFF_SECONDS * JITTER_MAX.
    """
    exponent = min(max(attempt, 0), _MAX_EXPONENT)
    base = min(initial_backoff_seconds * (2**exponent), MAX_BACKOFF_SECONDS)
    return base * random.uniform(JITTER_MIN, JITTER_MAX)


def parse_retry_after(headers: Mapping[str, str] | None) -> int | None:
    """Parse a Retry-After header holding a non-negative integer number of seconds."""
    if not headers:
        return None
    value = headers.get("Retry-After")
    if not value:
        return None
    value = value.strip()
    # str.isdigit also accepts non-ASCII digits such as "\u00b2", which int() rejects.
    if value.isascii() and value.isdigit():
        return int(value)
    return None


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable retry configuration for transient failures.

    Raises:
        RetryPolicyRangeError: If max_retries is outside 0..10 or
            initial_backoff_seconds is outside 0..60.
    """

    max_retries: int = 3
    initial_backoff_seconds: float = 0.5

    def __post_init__(self) -> None:
        if (
            isinstance(self.max_retries, bool)
            or not isinstance(self.max_retries, int)
            or not 0 <= self.max_retries <= MAX_RETRIES_LIMIT
        ):
            raise RetryPolicyRangeError("max_retries", self.max_retries, MAX_RETRIES_LIMIT)
        if (
            isinstance(self.initial_backoff_seconds, bool)
            or not isinstance(self.initial_backoff_seconds, int | float)
            or not 0 <= self.initial_backoff_seconds <= MAX_BACKOFF_SECONDS
        ):
            raise RetryPolicyRangeError(
                "initial_backoff_seconds", self.initial_backoff_seconds, MAX_BACKOFF_SECONDS
            )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def compute_delay(self, attempt: int, retry_after: int | None = None) -> float:
        """Compute the wait before the next attempt.

        A server-provided Retry-After always wins (capped); otherwise jittered
        exponential backoff from `initial_backoff_seconds`.
        """
        if retry_after is not None:
            return float(min(retry_after, MAX_BACKOFF_SECONDS))
        return compute_backoff(attempt, self.initial_backoff_seconds)
