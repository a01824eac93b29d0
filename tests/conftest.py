"""Pytest fixtures for testing.

All tests are network-isolated - socket connections are blocked by default.
"""

from __future__ import annotations

import socket

import pytest

from foundry_core.infrastructure.auth import ApiKeyCredential, Credential
from foundry_core.infrastructure.http import FoundryClient
from foundry_core.infrastructure.resilience import RetryPolicy
from tests.fakes import RecordingSleeper, ScriptedResponse, ScriptedTransport

TEST_ENDPOINT = "https://test.services.ai.azure.com"

# =============================================================================
# Network Isolation - Block all socket connections in tests
# =============================================================================


def _blocked_socket_connect(self, *args, **kwargs):
    """Raise an error if any test tries to make a real network connection."""
    raise RuntimeError(
        "Tests must not make network connections! "
        "Use ScriptedTransport (httpx.MockTransport) instead. "
        f"Attempted connection to: {args}"
    )


@pytest.fixture(autouse=True)
def block_network_access(monkeypatch):
    """Block all network access in tests.

    This fixture runs automatically for all tests and prevents any real
    network connections. Tests that need HTTP should use ScriptedTransport.

    If you need E2E tests with real network access, mark them with:
        @pytest.mark.e2e
    and run them separately with: pytest -m e2e
    """
    monkeypatch.setattr(socket.socket, "connect", _blocked_socket_connect)
    yield


@pytest.fixture
def sleeper() -> RecordingSleeper:
    """Provide a sleeper that records retry delays without waiting."""
    return RecordingSleeper()


@pytest.fixture
def make_client(sleeper: RecordingSleeper):
    """Build a FoundryClient over a scripted transport."""

    def _make(
        script: list[ScriptedResponse | Exception],
        *,
        max_retries: int = 3,
        initial_backoff_seconds: float = 0.01,
        credential: Credential | None = None,
    ) -> tuple[FoundryClient, ScriptedTransport]:
        transport = ScriptedTransport(script=script)
        client = FoundryClient(
            endpoint=TEST_ENDPOINT,
            credential=credential or ApiKeyCredential("test-api-key"),
            retry_policy=RetryPolicy(
                max_retries=max_retries, initial_backoff_seconds=initial_backoff_seconds
            ),
            http_client=transport.client(),
            sleeper=sleeper,
        )
        return client, transport

    return _make
