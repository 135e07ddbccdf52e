from __future__ import annotations


class FormwireError(Exception):
    """Base error for formwire."""


class ConnectionError(FormwireError):
    """Raised when a TCP/TLS connection fails."""


class TLSNegotiationError(ConnectionError):
    """Raised when the TLS handshake fails."""


class ProtocolError(FormwireError):
    """Raised when the server sends a malformed HTTP response."""


class HTTPError(FormwireError):
    """Raised for responses with a 4xx or 5xx status code."""

    def __init__(self, message: str, response=None) -> None:
        super().__init__(message)
        self.response = response


class BodyBuildError(FormwireError):
    """Raised when a request body cannot be serialized."""


class ParseError(FormwireError):
    """Raised when a network response cannot be interpreted."""


class RetryError(FormwireError):
    """Raised when the retry policy gives up."""


class InvalidURLError(FormwireError, ValueError):
    """Raised when a URL cannot be sent to (bad scheme or missing host)."""
