"""Secret redaction for error output and log lines.

Usage example:
    from foundry_core.domain.sanitize import sanitize_and_truncate

    message = sanitize_and_truncate('{"detail": "Bearer abc123 rejected"}')
    assert "abc123" not in message
"""

from __future__ import annotations

import re

REDACTION_MARKER = "[REDACTED]"
MAX_ERROR_MESSAGE_LEN = 1000
TRUNCATION_SUFFIX = "... (truncated)"

# A secret value runs until whitespace, a quote, or a comma.
_VALUE = r"""[^\s"',]+"""
_NOT_REDACTED = r"(?!\[REDACTED\])"

# Order matters: "Bearer sk-..." must be consumed by the Bearer rule first.
_KEYED_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"(Bearer\s+){_NOT_REDACTED}{_VALUE}"),
    re.compile(rf"""((?i:Ocp-Apim-Subscription-Key)["']?\s*[:=]\s*["']?){_NOT_REDACTED}{_VALUE}"""),
    re.compile(rf"""((?i:api-key)["']?\s*[:=]\s*["']?){_NOT_REDACTED}{_VALUE}"""),
)
_BARE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"\bsk-{_VALUE}"),
    re.compile(rf"\beyJ{_VALUE}"),
)


def sanitize(text: str) -> str:
    """Replace every recognisable secret in `text` with the redaction marker.

    Key names (`Bearer`, `api-key:`) are preserved so the output still says what
    was redacted. Running the function on its own output is a no-op.
    """
    for pattern in _KEYED_PATTERNS:
        text = pattern.sub(lambda match: match.group(1) + REDACTION_MARKER, text)
    for pattern in _BARE_PATTERNS:
        text = pattern.sub(REDACTION_MARKER, text)
    return text


def truncate_message(text: str, limit: int = MAX_ERROR_MESSAGE_LEN) -> str:
    """Cap `text` at `limit` characters, marking the cut."""
    if len(text) > limit:
        return text[:limit] + TRUNCATION_SUFFIX
    return text


def sanitize_and_truncate(text: str, limit: int = MAX_ERROR_MESSAGE_LEN) -> str:
    """Sanitise first, then cap.

    Truncating first could cut a secret in half and leave a prefix that no
    pattern recognises.
    """
    return truncate_message(sanitize(text), limit)
