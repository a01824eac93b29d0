"""Incremental decoding of server-sent-event style response bodies.

Usage example:
    from foundry_core.infrastructure.streaming import decode_stream

    async for item in decode_stream(response.aiter_bytes()):
        if isinstance(item, StreamDecodeError):
            continue
        print(item["choices"])
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterable
from enum import Enum
from typing import Final

from ..domain.sanitize import sanitize_and_truncate
from ..exceptions import StreamDecodeError, StreamError
from ..io_contracts import StreamEvent
from .validation import IncomingDataError, parse_stream_event

DATA_PREFIX: Final = "data:"
DONE_SENTINEL: Final = "[DONE]"
_NEWLINE: Final = b"\n"

StreamItem = StreamEvent | StreamDecodeError


class _Marker(Enum):
    END = "end"


END_OF_STREAM: Final = _Marker.END


class StreamDecoder:
    """Splits an arbitrarily fragmented byte stream into complete lines.

    The buffer holds only the bytes after the last line terminator. Each byte is
    scanned for a terminator once, however the input is fragmented.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._scan_from = 0

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def feed(self, fragment: bytes) -> list[bytes]:
        """Append a fragment and return every line it completes, in order."""
        self._buffer += fragment
        lines: list[bytes] = []
        start = 0
        position = self._buffer.find(_NEWLINE, self._scan_from)
        while position != -1:
            lines.append(bytes(self._buffer[start:position]))
            start = position + 1
            position = self._buffer.find(_NEWLINE, start)
        if start:
            del self._buffer[:start]
        self._scan_from = len(self._buffer)
        return lines

    def flush(self) -> bytes:
        """Return and clear whatever remains after the last terminator."""
        tail = bytes(self._buffer)
        self._buffer.clear()
        self._scan_from = 0
        return tail


def parse_line(raw: bytes) -> StreamItem | _Marker | None:
    """Interpret one line.

    Returns an event, a per-line decode error, END_OF_STREAM for the sentinel,
    or None for lines that carry nothing (blank, comment, id/event/retry fields).
    """
    try:
        line = raw.decode("utf-8").strip()
    except UnicodeDecodeError:
        return StreamDecodeError("stream line is not valid UTF-8")
    if not line or line.startswith(":"):
        return None
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX) :].strip()
    if payload == DONE_SENTINEL:
        return END_OF_STREAM
    try:
        return parse_stream_event(payload)
    except IncomingDataError:
        return StreamDecodeError(
            "failed to parse SSE event", line=sanitize_and_truncate(payload)
        )


async def decode_stream(chunks: AsyncIterable[bytes]) -> AsyncGenerator[StreamItem, None]:
    """Lazily decode `chunks` into events and per-line decode errors.

    Ends at the sentinel or when `chunks` is exhausted (after one final parse of
    any unterminated tail).

    Raises:
        StreamError: If `chunks` itself fails; no further items follow.
    """
    decoder = StreamDecoder()
    iterator = aiter(chunks)
    while True:
        try:
            fragment = await anext(iterator)
        except StopAsyncIteration:
            break
        except Exception as exc:
            raise StreamError(sanitize_and_truncate(str(exc) or type(exc).__name__)) from exc
        for line in decoder.feed(fragment):
            outcome = parse_line(line)
            if outcome is END_OF_STREAM:
                return
            if outcome is not None:
                yield outcome

    outcome = parse_line(decoder.flush())
    if outcome is not None and outcome is not END_OF_STREAM:
        yield outcome
