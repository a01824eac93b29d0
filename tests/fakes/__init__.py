"""Exports for test fakes."""

from .auth import BlockingTokenProvider, CountingTokenProvider, FailingTokenProvider
from .http import (
    ScriptedResponse,
    ScriptedTransport,
    chunk_stream,
    request_json,
    split_every,
)
from .resilience import RecordingSleeper

__all__ = [
    "BlockingTokenProvider",
    "CountingTokenProvider",
    "FailingTokenProvider",
    "RecordingSleeper",
    "ScriptedResponse",
    "ScriptedTransport",
    "chunk_stream",
    "request_json",
    "split_every",
]
