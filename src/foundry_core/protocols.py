"""Protocol definitions for dependency injection.

These protocols define the abstract seams the transport core depends on,
enabling isolated unit testing with fake implementations.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class AccessToken:
    """A bearer token and its absolute expiry (epoch seconds)."""

    token: str
    expires_on: float

    def __repr__(self) -> str:
        return f"AccessToken(token=****, expires_on={self.expires_on!r})"


@runtime_checkable
class TokenProvider(Protocol):
    """Source of access tokens (identity service, CLI login, managed identity)."""

    async def get_token(self, scopes: Sequence[str]) -> AccessToken:
        """Acquire a fresh token for the given scopes.

        Raises:
            Exception: Any failure; callers wrap it in AuthenticationError.
        """
        ...


@runtime_checkable
class Sleeper(Protocol):
    """Awaitable delay used between retry attempts."""

    async def __call__(self, delay: float, /) -> None:
        """Suspend the current task for `delay` seconds."""
        ...


@runtime_checkable
class Clock(Protocol):
    """Wall-clock source in epoch seconds, compared against token expiry."""

    def __call__(self) -> float:
        """Return the current time."""
        ...
