"""
Unit tests for custom exceptions.

Tests the exception hierarchy to ensure proper error handling
and cause tracking.
"""

import pytest

from httpipe.exceptions import (
    HTTPipeError,
    NotInitializedError,
    NotReadyError,
    InvalidVersionError,
    InvalidArgumentCountError,
    BadStateError,
    BodyLengthMismatchError,
    StreamError,
    TransportError,
    TransportClosedError,
    PrematureCloseError,
    TransportTimeoutError,
    ProtocolError,
    MalformedStatusLineError,
)


class TestHTTPipeError:
    """Test base HTTPipeError class."""

    def test_basic_creation(self) -> None:
        """Test creating basic HTTPipeError."""
        error = HTTPipeError("Test error message")
        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.cause is None

    def test_with_cause(self) -> None:
        """Test creating HTTPipeError with cause."""
        original_error = ValueError("Original error")
        error = HTTPipeError("Test error message", cause=original_error)
        assert error.cause == original_error


class TestUsageErrors:
    """Test errors signalling programming misuse."""

    def test_not_initialized(self) -> None:
        error = NotInitializedError()
        assert str(error) == "not initialized"
        assert isinstance(error, HTTPipeError)

    def test_not_ready_default_and_custom(self) -> None:
        assert str(NotReadyError()) == "not ready"
        assert str(NotReadyError("not ready for reading body")) == "not ready for reading body"

    def test_invalid_version(self) -> None:
        error = InvalidVersionError(2)
        assert error.version == 2
        assert "unknown HTTP version" in str(error)

    def test_invalid_argument_count(self) -> None:
        error = InvalidArgumentCountError(4)
        assert error.count == 4
        assert str(error) == "expecting 1, 2, or 3 arguments, but seen 4"

    def test_invalid_argument_count_message(self) -> None:
        error = InvalidArgumentCountError(1, "missing host target before request options")
        assert error.count == 1
        assert str(error) == "missing host target before request options"

    def test_bad_state(self) -> None:
        error = BadStateError(9)
        assert error.state == 9
        assert "bad state" in str(error)

    def test_body_length_mismatch(self) -> None:
        error = BodyLengthMismatchError(expected=10, sent=4)
        assert error.expected == 10
        assert error.sent == 4
        assert "declared 10" in str(error)

    def test_stream_error(self) -> None:
        error = StreamError("bad chunk")
        assert "Stream error: bad chunk" in str(error)


class TestTransportErrors:
    """Test transport error family."""

    def test_transport_error_prefix(self) -> None:
        error = TransportError("connect failed")
        assert error.message == "Transport error: connect failed"

    def test_closed_carries_partial(self) -> None:
        error = TransportClosedError(partial=b"abc")
        assert error.partial == b"abc"
        assert "closed" in str(error)
        assert isinstance(error, TransportError)

    def test_closed_default_partial_is_empty(self) -> None:
        assert TransportClosedError().partial == b""

    def test_premature_close(self) -> None:
        error = PrematureCloseError(remaining=3, partial=b"t")
        assert error.remaining == 3
        assert error.partial == b"t"
        assert isinstance(error, TransportClosedError)

    def test_timeout_with_value(self) -> None:
        error = TransportTimeoutError("receive timed out", timeout=1.5)
        assert "receive timed out (timeout: 1.5s)" in str(error)
        assert error.timeout == 1.5

    def test_timeout_without_value(self) -> None:
        error = TransportTimeoutError("receive timed out")
        assert "timeout:" not in str(error)


class TestProtocolErrors:
    """Test protocol error family."""

    def test_protocol_error_prefix(self) -> None:
        error = ProtocolError("invalid chunk size")
        assert "Protocol error: invalid chunk size" in str(error)

    def test_malformed_status_line_keeps_line(self) -> None:
        error = MalformedStatusLineError("garbage")
        assert error.line == "garbage"
        assert isinstance(error, ProtocolError)


class TestExceptionHierarchy:
    """Test that every error derives from HTTPipeError."""

    @pytest.mark.parametrize(
        "error",
        [
            NotInitializedError(),
            NotReadyError(),
            InvalidVersionError(3),
            InvalidArgumentCountError(0),
            BadStateError(7),
            BodyLengthMismatchError(1, 0),
            StreamError("x"),
            TransportError("x"),
            TransportClosedError(),
            PrematureCloseError(1),
            TransportTimeoutError("x"),
            ProtocolError("x"),
            MalformedStatusLineError("x"),
        ],
    )
    def test_catchable_as_base(self, error) -> None:
        with pytest.raises(HTTPipeError):
            raise error
