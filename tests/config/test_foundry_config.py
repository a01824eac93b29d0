"""Tests for FoundryConfig behaviour."""

import httpx
import pytest

import foundry_core.config as config_module
from foundry_core.config import (
    FoundryConfig,
    NonNegativeFloatEnvVarError,
    NonNegativeIntegerEnvVarError,
)
from foundry_core.exceptions import RetryPolicyRangeError, ValidationError
from foundry_core.infrastructure.http import DEFAULT_API_VERSION


def _fake_env(monkeypatch: pytest.MonkeyPatch, env: dict[str, str]) -> None:
    def fake_getenv(key: str, default: str | None = None) -> str | None:
        return env.get(key, default)

    def fake_load_dotenv(_: str | None = None) -> bool:
        return False

    monkeypatch.setattr(config_module.os, "getenv", fake_getenv)
    monkeypatch.setattr(config_module, "load_dotenv", fake_load_dotenv)


def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    _fake_env(monkeypatch, {})

    config = FoundryConfig.from_env()

    assert config.endpoint == ""
    assert config.api_key == ""
    assert config.api_version == DEFAULT_API_VERSION
    assert config.max_retries == 3
    assert config.initial_backoff_seconds == 0.5
    assert config.connect_timeout_seconds == 10.0
    assert config.read_timeout_seconds == 60.0
    assert config.stream_read_timeout_seconds == 300.0


def test_from_env_reads_all_values(monkeypatch: pytest.MonkeyPatch) -> None:
    _fake_env(
        monkeypatch,
        {
            "AZURE_AI_FOUNDRY_ENDPOINT": " https://demo.services.ai.azure.com ",
            "AZURE_AI_FOUNDRY_API_KEY": "secret-key",
            "AZURE_AI_FOUNDRY_API_VERSION": "2024-10-21",
            "FOUNDRY_MAX_RETRIES": "5",
            "FOUNDRY_INITIAL_BACKOFF_SECONDS": "1.5",
            "FOUNDRY_CONNECT_TIMEOUT_SECONDS": "3",
            "FOUNDRY_READ_TIMEOUT_SECONDS": "30",
            "FOUNDRY_STREAM_READ_TIMEOUT_SECONDS": "120",
        },
    )

    config = FoundryConfig.from_env()

    assert config.endpoint == "https://demo.services.ai.azure.com"
    assert config.api_key == "secret-key"
    assert config.api_version == "2024-10-21"
    assert config.max_retries == 5
    assert config.initial_backoff_seconds == 1.5
    assert config.timeout() == httpx.Timeout(30.0, connect=3.0)
    assert config.stream_timeout() == httpx.Timeout(120.0, connect=3.0)


def test_blank_api_version_uses_default(monkeypatch: pytest.MonkeyPatch) -> None:
    _fake_env(monkeypatch, {"AZURE_AI_FOUNDRY_API_VERSION": "   "})
    assert FoundryConfig.from_env().api_version == DEFAULT_API_VERSION


@pytest.mark.parametrize("value", ["-1", "three", "1.5"])
def test_invalid_max_retries_env(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    _fake_env(monkeypatch, {"FOUNDRY_MAX_RETRIES": value})
    with pytest.raises(NonNegativeIntegerEnvVarError, match="FOUNDRY_MAX_RETRIES"):
        FoundryConfig.from_env()


@pytest.mark.parametrize("value", ["-0.5", "soon", "nan"])
def test_invalid_backoff_env(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    _fake_env(monkeypatch, {"FOUNDRY_INITIAL_BACKOFF_SECONDS": value})
    with pytest.raises(NonNegativeFloatEnvVarError, match="FOUNDRY_INITIAL_BACKOFF_SECONDS"):
        FoundryConfig.from_env()


def test_env_errors_are_validation_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    _fake_env(monkeypatch, {"FOUNDRY_READ_TIMEOUT_SECONDS": "-1"})
    with pytest.raises(ValidationError):
        FoundryConfig.from_env()


def test_with_overrides_preserves_fields() -> None:
    base = FoundryConfig(
        endpoint="https://demo.services.ai.azure.com",
        api_key="key",
        api_version="2024-10-21",
        max_retries=4,
        initial_backoff_seconds=0.25,
        connect_timeout_seconds=5.0,
        read_timeout_seconds=20.0,
        stream_read_timeout_seconds=200.0,
    )

    updated = base.with_overrides(endpoint=" https://other.services.ai.azure.com ", max_retries=1)

    assert updated.endpoint == "https://other.services.ai.azure.com"
    assert updated.max_retries == 1
    assert updated.api_key == base.api_key
    assert updated.api_version == base.api_version
    assert updated.initial_backoff_seconds == base.initial_backoff_seconds
    assert updated.connect_timeout_seconds == base.connect_timeout_seconds
    assert updated.read_timeout_seconds == base.read_timeout_seconds
    assert updated.stream_read_timeout_seconds == base.stream_read_timeout_seconds


def test_retry_policy_is_range_checked() -> None:
    policy = FoundryConfig(max_retries=2, initial_backoff_seconds=0.1).retry_policy()
    assert policy.max_attempts == 3

    with pytest.raises(RetryPolicyRangeError):
        FoundryConfig(max_retries=11).retry_policy()


def test_repr_masks_api_key() -> None:
    config = FoundryConfig(endpoint="https://demo", api_key="very-secret")
    assert "very-secret" not in repr(config)
    assert "****" in repr(config)
