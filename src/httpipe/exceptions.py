"""
Custom exceptions for httpipe.

This module defines the exception hierarchy used throughout
the library for error handling and debugging.
"""

from typing import Optional


class HTTPipeError(Exception):
    """Base exception for all httpipe errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class NotInitializedError(HTTPipeError):
    """Raised when a pipe has no transport bound."""

    def __init__(self, message: str = "not initialized") -> None:
        super().__init__(message)


class NotReadyError(HTTPipeError):
    """Raised when reading before a request was dispatched."""

    def __init__(self, message: str = "not ready") -> None:
        super().__init__(message)


class InvalidVersionError(HTTPipeError):
    """Raised for an HTTP version selector other than 0 or 1."""

    def __init__(self, version: object) -> None:
        super().__init__(f"unknown HTTP version: {version!r}")
        self.version = version


class InvalidArgumentCountError(HTTPipeError):
    """Raised when request() receives too few or too many targets."""

    def __init__(self, count: int, message: Optional[str] = None) -> None:
        super().__init__(message or f"expecting 1, 2, or 3 arguments, but seen {count}")
        self.count = count


class BadStateError(HTTPipeError):
    """Raised when the parser state has no handler."""

    def __init__(self, state: object) -> None:
        super().__init__(f"bad state: {state!r}")
        self.state = state


class BodyLengthMismatchError(HTTPipeError):
    """Raised when a body producer disagrees with Content-Length."""

    def __init__(self, expected: int, sent: int) -> None:
        super().__init__(
            f"request body length mismatch: declared {expected} bytes, "
            f"producer supplied {sent}"
        )
        self.expected = expected
        self.sent = sent


class StreamError(HTTPipeError):
    """Raised when a request body source yields something unusable."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Stream error: {message}", cause)


class TransportError(HTTPipeError):
    """Raised when there's an error with the underlying transport."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Transport error: {message}", cause)


class TransportClosedError(TransportError):
    """
    Raised when the peer closed the connection.

    Any bytes received before the close are kept in ``partial``.
    """

    def __init__(
        self,
        message: str = "closed",
        partial: bytes = b"",
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message, cause)
        self.partial = partial


class PrematureCloseError(TransportClosedError):
    """Raised when a close truncates a length-delimited body."""

    def __init__(self, remaining: int, partial: bytes = b"") -> None:
        super().__init__(
            f"connection closed with {remaining} body bytes outstanding",
            partial=partial,
        )
        self.remaining = remaining


class TransportTimeoutError(TransportError):
    """Raised when a transport operation times out."""

    def __init__(self, message: str, timeout: Optional[float] = None) -> None:
        if timeout is not None:
            message = f"{message} (timeout: {timeout}s)"
        super().__init__(message)
        self.timeout = timeout


class ProtocolError(HTTPipeError):
    """Raised when there's an error with HTTP protocol handling."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Protocol error: {message}", cause)


class MalformedStatusLineError(ProtocolError):
    """Raised by response() when the status line cannot be parsed."""

    def __init__(self, line: str) -> None:
        super().__init__(f"malformed status line: {line!r}")
        self.line = line
