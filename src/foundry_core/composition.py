"""Composition root for wiring the transport core from configuration."""

from __future__ import annotations

import httpx

from .config import FoundryConfig
from .exceptions import MissingConfigError
from .infrastructure.auth import ApiKeyCredential, Credential, TokenCredential
from .infrastructure.http import FoundryClient
from .protocols import Sleeper, TokenProvider


def build_foundry_client(
    config: FoundryConfig,
    *,
    credential: Credential | None = None,
    token_provider: TokenProvider | None = None,
    http_client: httpx.AsyncClient | None = None,
    sleeper: Sleeper | None = None,
) -> FoundryClient:
    """Build a FoundryClient with configured timeouts and retry policy.

    Args:
        config: Transport configuration (endpoint, key, retry, timeouts).
        credential: Explicit credential; wins over anything in `config`.
        token_provider: Used for a token credential when no API key is configured.
        http_client: Optional pre-built httpx client (tests inject MockTransport here).
        sleeper: Optional retry sleeper (tests inject a recorder here).

    Raises:
        MissingConfigError: If no endpoint, or neither credential source, is available.
        InvalidEndpointError: If the endpoint is malformed.
        RetryPolicyRangeError: If the configured retry values are out of range.
    """
    if not config.endpoint:
        raise MissingConfigError.for_endpoint()
    if credential is None:
        if config.api_key:
            credential = ApiKeyCredential(config.api_key)
        elif token_provider is not None:
            credential = TokenCredential(provider=token_provider)
        else:
            raise MissingConfigError.for_credential()
    return FoundryClient(
        endpoint=config.endpoint,
        credential=credential,
        retry_policy=config.retry_policy(),
        api_version=config.api_version,
        http_client=http_client,
        timeout=config.timeout(),
        stream_timeout=config.stream_timeout(),
        sleeper=sleeper,
    )
