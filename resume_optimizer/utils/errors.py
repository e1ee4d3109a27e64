"""Exception types shared by the transport, completion and HTTP layers."""
from typing import Optional


class TransportError(Exception):
    """Base class for failures raised by an outbound HTTP transport."""


class NetworkError(TransportError):
    """Connection-level failure (DNS, refused, reset, TLS)."""


class TransportTimeoutError(TransportError):
    """Request aborted after the configured timeout."""

    def __init__(self, message: str, elapsed_ms: int):
        super().__init__(message)
        self.elapsed_ms = elapsed_ms


class HttpError(TransportError):
    """Non-2xx response."""

    def __init__(self, status_code: int, body: str, reason: str = ""):
        super().__init__(f"HTTP {status_code}: {reason or 'request failed'}")
        self.status_code = status_code
        self.body = body
        self.reason = reason


class ParseError(TransportError):
    """Response body could not be decoded as JSON."""


class EnvelopeError(Exception):
    """Backend response did not contain usable generated text."""


class SafetyBlockedError(EnvelopeError):
    """Completion was blocked by the backend's safety filters."""


class ConfigurationError(Exception):
    """Required backend configuration (API key) is missing."""


class BackendExhaustedError(Exception):
    """Every attempt against the completion backend failed."""

    def __init__(self, attempts: int, last_error: Optional[BaseException]):
        super().__init__(f"AI service failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class AppError(Exception):
    """Operational error rendered as a JSON error response."""

    def __init__(self, message: str, status_code: int = 400, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
