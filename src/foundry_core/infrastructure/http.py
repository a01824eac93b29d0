"""Retrying HTTP executor for Azure AI Foundry style APIs.

Usage example:
    from foundry_core.infrastructure.auth import ApiKeyCredential
    from foundry_core.infrastructure.http import FoundryClient
    from foundry_core.infrastructure.resilience import RetryPolicy

    async with FoundryClient(
        endpoint="https://your-resource.services.ai.azure.com",
        credential=ApiKeyCredential("your-key"),
        retry_policy=RetryPolicy(max_retries=3, initial_backoff_seconds=0.5),
    ) as client:
        response = await client.post("/openai/v1/chat/completions", {"model": "gpt-4o"})
        async with await client.post_stream("/openai/v1/chat/completions", body) as events:
            async for item in events:
                ...
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from types import TracebackType
from typing import Self

import httpx

from ..domain.classification import ResponseClass, classify
from ..domain.sanitize import sanitize_and_truncate
from ..exceptions import (
    ApiError,
    FoundryError,
    HttpStatusError,
    InvalidEndpointError,
    TransportError,
)
from ..observability import get_logger
from ..protocols import Sleeper
from .auth import Credential
from .resilience import RetryPolicy, parse_retry_after
from .streaming import StreamItem, decode_stream
from .validation import parse_service_error

logger = get_logger("foundry_core.infrastructure.http")

DEFAULT_API_VERSION = "2025-01-01-preview"
DEFAULT_TIMEOUT = httpx.Timeout(60.0, connect=10.0)
DEFAULT_STREAM_TIMEOUT = httpx.Timeout(300.0, connect=10.0)
IDEMPOTENCY_KEY_HEADER = "Idempotency-Key"

JsonBody = dict[str, object] | list[object]


@dataclass(frozen=True)
class AttemptContext:
    """Per-attempt request state; rebuilt every attempt, never persisted."""

    attempt: int
    url: httpx.URL
    auth_header: str

    def __repr__(self) -> str:
        return f"AttemptContext(attempt={self.attempt}, url={self.url!s}, auth_header=****)"


def parse_endpoint(endpoint: str) -> httpx.URL:
    """Validate a base endpoint URL and normalise it to end with a slash.

    Raises:
        InvalidEndpointError: If the URL is unparseable or lacks an http(s) scheme or host.
    """
    try:
        url = httpx.URL(endpoint.strip())
    except httpx.InvalidURL as exc:
        raise InvalidEndpointError(str(exc)) from exc
    if url.scheme not in {"http", "https"} or not url.host:
        raise InvalidEndpointError(f"expected an absolute http(s) URL, got {endpoint!r}")
    if not url.path.endswith("/"):
        url = url.copy_with(path=url.path + "/")
    return url


def _read_body_text(response: httpx.Response) -> str:
    try:
        return response.text
    except (UnicodeDecodeError, httpx.ResponseNotRead):
        return "<unreadable>"


def build_error(status: int, body: str) -> FoundryError:
    """Build the surfaced error for a failed response.

    A structured `{"error": {code, message}}` body yields ApiError; anything else
    yields HttpStatusError. Messages are sanitised before they are capped.
    """
    parsed = parse_service_error(body)
    if parsed is not None:
        code, message = parsed
        return ApiError(
            code,
            sanitize_and_truncate(message if message is not None else body),
            status=status,
        )
    return HttpStatusError(status, sanitize_and_truncate(body))


class EventStream:
    """Lazy, forward-only stream of decoded items over an open response.

    Closing (explicitly, via `async with`, or by exhausting the stream) releases
    the underlying connection. Not restartable.
    """

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self._items = decode_stream(response.aiter_bytes())
        self._closed = False

    def __aiter__(self) -> Self:
        return self

    async def __anext__(self) -> StreamItem:
        if self._closed:
            raise StopAsyncIteration
        try:
            return await anext(self._items)
        except BaseException:
            await self.aclose()
            raise

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._items.aclose()
        finally:
            await self.response.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


class FoundryClient:
    """HTTP executor with per-attempt credential resolution and bounded retries.

    Provides robust error handling:
    - 2xx responses are returned immediately
    - 429/500/502/503/504 are retried with jittered backoff or Retry-After
    - Any other status raises ApiError/HttpStatusError immediately
    - Send failures raise TransportError immediately (not retried here)
    - Credential failures raise AuthenticationError immediately
    """

    def __init__(
        self,
        *,
        endpoint: str,
        credential: Credential,
        retry_policy: RetryPolicy | None = None,
        api_version: str = DEFAULT_API_VERSION,
        http_client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
        stream_timeout: httpx.Timeout = DEFAULT_STREAM_TIMEOUT,
        sleeper: Sleeper | None = None,
    ) -> None:
        self.endpoint = parse_endpoint(endpoint)
        self.credential = credential
        self.retry_policy = retry_policy or RetryPolicy()
        self.api_version = api_version
        self.timeout = timeout
        self.stream_timeout = stream_timeout
        self._owns_http = http_client is None
        self.http = http_client or httpx.AsyncClient(timeout=timeout)
        self._sleep: Sleeper = sleeper or asyncio.sleep

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def url(self, path: str) -> httpx.URL:
        """Resolve `path` against the endpoint.

        Raises:
            InvalidEndpointError: If the path cannot be joined.
        """
        try:
            return self.endpoint.join(path)
        except httpx.InvalidURL as exc:
            raise InvalidEndpointError(str(exc)) from exc

    async def execute(
        self,
        method: str,
        path: str,
        body: JsonBody | None = None,
        *,
        idempotency_key: str | None = None,
    ) -> httpx.Response:
        """Send a request, retrying transient failures per the retry policy.

        Raises:
            AuthenticationError: If the credential cannot be resolved.
            TransportError: If the request cannot be sent.
            ApiError: For a failed response with a service error envelope.
            HttpStatusError: For any other failed response.
            InvalidEndpointError: If `path` cannot be joined to the endpoint.
        """
        return await self._send_with_retries(
            method, path, body, stream=False, idempotency_key=idempotency_key
        )

    async def execute_streaming(
        self,
        path: str,
        body: JsonBody,
        *,
        idempotency_key: str | None = None,
    ) -> EventStream:
        """POST and return the decoded event stream once headers indicate success.

        Retries happen only before the body starts flowing; mid-stream failures
        surface from the returned stream as StreamError.
        """
        response = await self._send_with_retries(
            "POST", path, body, stream=True, idempotency_key=idempotency_key
        )
        return EventStream(response)

    async def get(self, path: str) -> httpx.Response:
        return await self.execute("GET", path)

    async def post(
        self, path: str, body: JsonBody, *, idempotency_key: str | None = None
    ) -> httpx.Response:
        return await self.execute("POST", path, body, idempotency_key=idempotency_key)

    async def delete(self, path: str) -> httpx.Response:
        return await self.execute("DELETE", path)

    async def post_stream(
        self, path: str, body: JsonBody, *, idempotency_key: str | None = None
    ) -> EventStream:
        return await self.execute_streaming(path, body, idempotency_key=idempotency_key)

    async def _send_with_retries(
        self,
        method: str,
        path: str,
        body: JsonBody | None,
        *,
        stream: bool,
        idempotency_key: str | None,
    ) -> httpx.Response:
        url = self.url(path)
        policy = self.retry_policy

        for attempt in range(policy.max_retries):
            response = await self._attempt(method, url, body, attempt, stream, idempotency_key)
            if classify(response.status_code) is not ResponseClass.RETRIABLE:
                return await self._finish(response, attempt, stream)
            retry_after = parse_retry_after(response.headers)
            await self._discard(response, stream)
            delay = policy.compute_delay(attempt, retry_after)
            logger.warning(
                "Retrying %s %s after status %s (attempt %s/%s, waiting %.2fs)",
                method,
                url.path,
                response.status_code,
                attempt + 1,
                policy.max_attempts,
                delay,
            )
            await self._sleep(delay)

        response = await self._attempt(
            method, url, body, policy.max_retries, stream, idempotency_key
        )
        return await self._finish(response, policy.max_retries, stream)

    async def _attempt(
        self,
        method: str,
        url: httpx.URL,
        body: JsonBody | None,
        attempt: int,
        stream: bool,
        idempotency_key: str | None,
    ) -> httpx.Response:
        context = AttemptContext(
            attempt=attempt, url=url, auth_header=await self.credential.resolve()
        )
        headers = {"Authorization": context.auth_header, "api-version": self.api_version}
        if idempotency_key is not None:
            headers[IDEMPOTENCY_KEY_HEADER] = idempotency_key
        request = self.http.build_request(
            method,
            context.url,
            headers=headers,
            json=body,
            timeout=self.stream_timeout if stream else self.timeout,
        )
        try:
            return await self.http.send(request, stream=stream)
        except httpx.TransportError as exc:
            message = sanitize_and_truncate(str(exc) or type(exc).__name__)
            logger.warning("Transport failure for %s %s: %s", method, url.path, message)
            raise TransportError(message) from exc

    async def _finish(self, response: httpx.Response, attempt: int, stream: bool) -> httpx.Response:
        if classify(response.status_code) is ResponseClass.SUCCESS:
            return response
        if stream:
            try:
                await response.aread()
            except httpx.HTTPError as exc:
                logger.warning(
                    "Could not read error body for status %s: %s", response.status_code, exc
                )
            finally:
                await response.aclose()
        error = build_error(response.status_code, _read_body_text(response))
        logger.warning("Request failed after %s attempt(s): %s", attempt + 1, error)
        raise error

    async def _discard(self, response: httpx.Response, stream: bool) -> None:
        if stream:
            await response.aclose()

