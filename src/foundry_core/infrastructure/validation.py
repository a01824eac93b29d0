"""Pydantic-based validation helpers for inbound payloads."""

from __future__ import annotations

from pydantic import TypeAdapter, ValidationError

from ..io_contracts import ServiceErrorEnvelopeIO, StreamEvent


class IncomingDataError(ValueError):
    """Raised when inbound data fails validation."""


def validate_as[SchemaT](schema: type[SchemaT], payload: object) -> SchemaT:
    try:
        return TypeAdapter(schema).validate_python(payload)
    except ValidationError as exc:
        message = f"Invalid payload for {schema}."
        raise IncomingDataError(message) from exc


def validate_json_as[SchemaT](schema: type[SchemaT], payload: str | bytes | bytearray) -> SchemaT:
    try:
        return TypeAdapter(schema).validate_json(payload)
    except ValidationError as exc:
        message = f"Invalid JSON payload for {schema}."
        raise IncomingDataError(message) from exc


def parse_service_error(body: str) -> tuple[str, str | None] | None:
    """Return `(code, message)` if `body` is a service error envelope.

    `code` falls back to "unknown"; `message` is None when absent or not a string.
    """
    try:
        envelope = validate_json_as(ServiceErrorEnvelopeIO, body)
    except IncomingDataError:
        return None
    error = envelope["error"]
    code = error.get("code")
    message = error.get("message")
    return (
        code if isinstance(code, str) else "unknown",
        message if isinstance(message, str) else None,
    )


def parse_stream_event(payload: str) -> StreamEvent:
    """Decode one `data:` payload into a JSON object."""
    return validate_json_as(StreamEvent, payload)
