"""Boundary-neutral IO contracts for response validation.

Usage example:
    from foundry_core.io_contracts import ServiceErrorEnvelopeIO

    envelope: ServiceErrorEnvelopeIO = {
        "error": {"code": "InvalidRequest", "message": "Bad request body"},
    }
"""

from __future__ import annotations

from typing import TypedDict


class ServiceErrorIO(TypedDict, total=False):
    """Inner object of a structured service error response."""

    code: object
    message: object


class ServiceErrorEnvelopeIO(TypedDict):
    """Structured service error response shape: `{"error": {code, message}}`."""

    error: ServiceErrorIO


StreamEvent = dict[str, object]
"""One decoded `data:` payload of a streaming response."""
