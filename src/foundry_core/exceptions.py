"""Custom exceptions for the Foundry transport core.

These exceptions provide clear error handling and enable testing of error paths.
Every message that carries a response body has already been sanitised and capped
by the time it reaches one of these constructors.
"""

from __future__ import annotations


class FoundryError(Exception):
    """Base exception for all transport core errors."""

    pass


class AuthenticationError(FoundryError):
    """Raised when a credential cannot produce an authorization header.

    This is a fatal error - it is never retried by the executor.
    """

    def __init__(self, message: str = "token acquisition failed") -> None:
        self.message = message
        super().__init__(f"Authentication failed: {message}")

    @classmethod
    def for_api_key_token_request(cls) -> AuthenticationError:
        return cls("Cannot get token from API key credential. Use resolve() instead.")


class TransportError(FoundryError):
    """Raised when the request could not be sent (connection, timeout).

    Not retried by the executor; the underlying httpx transport owns any
    connection-level retries.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Request error: {message}")


class HttpStatusError(FoundryError):
    """Raised for a non-2xx response whose body is not a service error envelope."""

    def __init__(self, status: int, message: str) -> None:
        self.status = status
        self.message = message
        super().__init__(f"HTTP error: {status} - {message}")


class ApiError(FoundryError):
    """Raised for a non-2xx response carrying a `{"error": {code, message}}` body."""

    def __init__(self, code: str, message: str, *, status: int | None = None) -> None:
        self.code = code
        self.message = message
        self.status = status
        super().__init__(f"API error ({code}): {message}")


class StreamDecodeError(FoundryError):
    """A single streamed line that could not be decoded.

    Yielded as an item by the stream decoder rather than raised, so the
    stream continues with the next line.
    """

    def __init__(self, message: str, *, line: str = "") -> None:
        self.message = message
        self.line = line
        super().__init__(f"Stream error: {message}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StreamDecodeError):
            return NotImplemented
        return (self.message, self.line) == (other.message, other.line)

    def __hash__(self) -> int:
        return hash((self.message, self.line))


class StreamError(FoundryError):
    """Raised when the upstream byte source fails mid-stream. Terminal."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Stream error: {message}")


class ValidationError(FoundryError, ValueError):
    """Raised for invalid local configuration, policy, or request construction.

    Always raised before any network activity, never retried.
    """

    pass


class MissingConfigError(ValidationError):
    """Raised when a required configuration value is absent."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Missing configuration: {message}")

    @classmethod
    def for_endpoint(cls) -> MissingConfigError:
        return cls(
            "endpoint is required. Set AZURE_AI_FOUNDRY_ENDPOINT or pass it to FoundryConfig."
        )

    @classmethod
    def for_credential(cls) -> MissingConfigError:
        return cls(
            "credential is required. Set AZURE_AI_FOUNDRY_API_KEY or supply a token provider."
        )


class InvalidEndpointError(FoundryError):
    """Raised when the base endpoint URL or a joined path is malformed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Invalid endpoint URL: {message}")


class RetryPolicyRangeError(ValidationError):
    """Raised when a retry policy field is outside its permitted range."""

    def __init__(self, field_name: str, value: object, upper: object) -> None:
        self.field_name = field_name
        self.value = value
        super().__init__(f"{field_name} must be between 0 and {upper} (got {value!r}).")
