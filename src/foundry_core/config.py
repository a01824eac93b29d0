"""Centralised, injectable configuration for the Foundry transport core."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Self

import httpx
from dotenv import load_dotenv

from .exceptions import ValidationError
from .infrastructure.http import DEFAULT_API_VERSION
from .infrastructure.resilience import RetryPolicy


class NonNegativeIntegerEnvVarError(ValidationError):
    """Raised when an environment variable must be a non-negative integer."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a non-negative integer.")


class NonNegativeFloatEnvVarError(ValidationError):
    """Raised when an environment variable must be a non-negative number."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a non-negative number.")


@dataclass(frozen=True)
class FoundryConfig:
    """Immutable configuration for the transport core.

    Load from environment with `FoundryConfig.from_env()` or construct directly for testing.
    """

    # Endpoint and credentials
    endpoint: str = ""
    api_key: str = ""
    api_version: str = DEFAULT_API_VERSION

    # Retry policy
    max_retries: int = 3
    initial_backoff_seconds: float = 0.5

    # Transport timeouts
    connect_timeout_seconds: float = 10.0
    read_timeout_seconds: float = 60.0
    stream_read_timeout_seconds: float = 300.0

    def __repr__(self) -> str:
        masked_key = "****" if self.api_key else ""
        return (
            f"FoundryConfig(endpoint={self.endpoint!r}, api_key={masked_key!r}, "
            f"api_version={self.api_version!r}, max_retries={self.max_retries}, "
            f"initial_backoff_seconds={self.initial_backoff_seconds})"
        )

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Self:
        """Load configuration from environment variables.

        Args:
            dotenv_path: Optional path to .env file. If None, uses default .env discovery.

        Returns:
            FoundryConfig instance populated from environment.
        """
        load_dotenv(dotenv_path)

        return cls(
            endpoint=os.getenv("AZURE_AI_FOUNDRY_ENDPOINT", "").strip(),
            api_key=os.getenv("AZURE_AI_FOUNDRY_API_KEY", "").strip(),
            api_version=(
                os.getenv("AZURE_AI_FOUNDRY_API_VERSION", "").strip() or DEFAULT_API_VERSION
            ),
            max_retries=_parse_non_negative_int(
                os.getenv("FOUNDRY_MAX_RETRIES", "3"), env_name="FOUNDRY_MAX_RETRIES"
            ),
            initial_backoff_seconds=_parse_non_negative_float(
                os.getenv("FOUNDRY_INITIAL_BACKOFF_SECONDS", "0.5"),
                env_name="FOUNDRY_INITIAL_BACKOFF_SECONDS",
            ),
            connect_timeout_seconds=_parse_non_negative_float(
                os.getenv("FOUNDRY_CONNECT_TIMEOUT_SECONDS", "10"),
                env_name="FOUNDRY_CONNECT_TIMEOUT_SECONDS",
            ),
            read_timeout_seconds=_parse_non_negative_float(
                os.getenv("FOUNDRY_READ_TIMEOUT_SECONDS", "60"),
                env_name="FOUNDRY_READ_TIMEOUT_SECONDS",
            ),
            stream_read_timeout_seconds=_parse_non_negative_float(
                os.getenv("FOUNDRY_STREAM_READ_TIMEOUT_SECONDS", "300"),
                env_name="FOUNDRY_STREAM_READ_TIMEOUT_SECONDS",
            ),
        )

    def with_overrides(
        self,
        *,
        endpoint: str | None = None,
        api_version: str | None = None,
        max_retries: int | None = None,
        initial_backoff_seconds: float | None = None,
    ) -> Self:
        """Return a new config with specified overrides."""
        return replace(
            self,
            endpoint=self.endpoint if endpoint is None else endpoint.strip(),
            api_version=self.api_version if api_version is None else api_version,
            max_retries=self.max_retries if max_retries is None else max_retries,
            initial_backoff_seconds=self.initial_backoff_seconds
            if initial_backoff_seconds is None
            else initial_backoff_seconds,
        )

    def retry_policy(self) -> RetryPolicy:
        """Build the retry policy; raises RetryPolicyRangeError if out of range."""
        return RetryPolicy(
            max_retries=self.max_retries,
            initial_backoff_seconds=self.initial_backoff_seconds,
        )

    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.read_timeout_seconds, connect=self.connect_timeout_seconds)

    def stream_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            self.stream_read_timeout_seconds, connect=self.connect_timeout_seconds
        )


def _parse_non_negative_int(value: str, *, env_name: str) -> int:
    """Parse a non-negative integer from an environment variable."""
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise NonNegativeIntegerEnvVarError(env_name) from exc
    if parsed < 0:
        raise NonNegativeIntegerEnvVarError(env_name)
    return parsed


def _parse_non_negative_float(value: str, *, env_name: str) -> float:
    """Parse a non-negative number from an environment variable."""
    try:
        parsed = float(value.strip())
    except ValueError as exc:
        raise NonNegativeFloatEnvVarError(env_name) from exc
    if not parsed >= 0:
        raise NonNegativeFloatEnvVarError(env_name)
    return parsed
