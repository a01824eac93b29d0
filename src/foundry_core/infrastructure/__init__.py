"""Concrete infrastructure implementations and shared helpers."""

from .auth import (
    COGNITIVE_SERVICES_SCOPE,
    ApiKeyCredential,
    Credential,
    TokenCache,
    TokenCredential,
    credential_from_env,
)
from .http import DEFAULT_API_VERSION, EventStream, FoundryClient, build_error, parse_endpoint
from .resilience import MAX_BACKOFF_SECONDS, RetryPolicy, compute_backoff, parse_retry_after
from .streaming import StreamDecoder, StreamItem, decode_stream, parse_line

__all__ = [
    "COGNITIVE_SERVICES_SCOPE",
    "DEFAULT_API_VERSION",
    "MAX_BACKOFF_SECONDS",
    "ApiKeyCredential",
    "Credential",
    "EventStream",
    "FoundryClient",
    "RetryPolicy",
    "StreamDecoder",
    "StreamItem",
    "TokenCache",
    "TokenCredential",
    "build_error",
    "compute_backoff",
    "credential_from_env",
    "decode_stream",
    "parse_endpoint",
    "parse_line",
    "parse_retry_after",
]
