"""Credential types and token caching.

Usage example:
    from foundry_core.infrastructure.auth import ApiKeyCredential, TokenCredential

    api_key = ApiKeyCredential("your-api-key")
    header = await api_key.resolve()  # "Bearer your-api-key"

    entra = TokenCredential(provider=my_token_provider)
    header = await entra.resolve()  # cached until 60s before expiry
"""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from ..domain.sanitize import sanitize_and_truncate
from ..exceptions import AuthenticationError, MissingConfigError
from ..observability import get_logger
from ..protocols import AccessToken, Clock, TokenProvider

logger = get_logger("foundry_core.infrastructure.auth")

COGNITIVE_SERVICES_SCOPE = "https://cognitiveservices.azure.com/.default"
EXPIRY_BUFFER_SECONDS = 60.0
API_KEY_ENV_VAR = "AZURE_AI_FOUNDRY_API_KEY"


class TokenCache:
    """Holds at most one access token, guarded by a single lock.

    Shared by reference between copies of the owning credential, never global.
    """

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.token: AccessToken | None = None

    def is_fresh(self, now: float, buffer_seconds: float = EXPIRY_BUFFER_SECONDS) -> bool:
        return self.token is not None and now < self.token.expires_on - buffer_seconds

    def clear(self) -> None:
        self.token = None


@dataclass(frozen=True)
class ApiKeyCredential:
    """Static API key authentication. Resolution performs no I/O and takes no lock."""

    secret: str

    def __repr__(self) -> str:
        return "ApiKeyCredential(****)"

    def header_value(self) -> str:
        return f"Bearer {self.secret}"

    async def resolve(self) -> str:
        return self.header_value()

    async def get_token(self) -> AccessToken:
        raise AuthenticationError.for_api_key_token_request()


@dataclass(frozen=True)
class TokenCredential:
    """Token-backed authentication with a proactive-refresh cache.

    The cache lock is held across the provider call, so concurrent callers on
    an empty or stale cache trigger exactly one acquisition and all observe the
    same token.
    """

    provider: TokenProvider
    scopes: tuple[str, ...] = (COGNITIVE_SERVICES_SCOPE,)
    cache: TokenCache = field(default_factory=TokenCache, compare=False)
    clock: Clock = field(default=time.time, compare=False)

    def __repr__(self) -> str:
        return "TokenCredential(...)"

    async def get_token(self) -> AccessToken:
        """Return a cached or freshly acquired token.

        Raises:
            AuthenticationError: If the provider fails.
        """
        async with self.cache.lock:
            cached = self.cache.token
            if cached is not None and self.cache.is_fresh(self.clock()):
                return cached
            try:
                token = await self.provider.get_token(self.scopes)
            except Exception as exc:
                raise AuthenticationError(sanitize_and_truncate(str(exc))) from exc
            self.cache.token = token
            logger.info("Acquired access token (expires_on=%s)", token.expires_on)
            return token

    async def resolve(self) -> str:
        token = await self.get_token()
        return f"Bearer {token.token}"


Credential = ApiKeyCredential | TokenCredential


def credential_from_env(
    *,
    fallback_provider: TokenProvider | None = None,
    scopes: Sequence[str] = (COGNITIVE_SERVICES_SCOPE,),
) -> Credential:
    """Build a credential from AZURE_AI_FOUNDRY_API_KEY, else from a token provider.

    Raises:
        MissingConfigError: If the key is unset or empty and no provider is given.
    """
    api_key = os.getenv(API_KEY_ENV_VAR, "").strip()
    if api_key:
        return ApiKeyCredential(api_key)
    if fallback_provider is None:
        raise MissingConfigError.for_credential()
    return TokenCredential(provider=fallback_provider, scopes=tuple(scopes))
