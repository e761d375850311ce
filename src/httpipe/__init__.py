"""
httpipe - HTTP/1.x client protocol engine

A compact HTTP/1.0 and HTTP/1.1 request encoder and incremental
response parser driven over an established asyncio byte stream, with
chunked and length-delimited bodies and keepalive connection reuse.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

# Import main components for easy access
from .http_primitives import (
    Event,
    EventType,
    HeaderLine,
    MalformedStatusLine,
    RequestOptions,
    Response,
    State,
    StreamMode,
)
from .headers import normalize_header
from .escaping import escape_path, escape_uri, encode_args
from .encoder import encode_request
from .pipe import Pipe
from .streams import BodyReader
from .exceptions import (
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

__all__ = [
    "Event",
    "EventType",
    "HeaderLine",
    "MalformedStatusLine",
    "RequestOptions",
    "Response",
    "State",
    "StreamMode",
    "normalize_header",
    "escape_path",
    "escape_uri",
    "encode_args",
    "encode_request",
    "Pipe",
    "BodyReader",
    "HTTPipeError",
    "NotInitializedError",
    "NotReadyError",
    "InvalidVersionError",
    "InvalidArgumentCountError",
    "BadStateError",
    "BodyLengthMismatchError",
    "StreamError",
    "TransportError",
    "TransportClosedError",
    "PrematureCloseError",
    "TransportTimeoutError",
    "ProtocolError",
    "MalformedStatusLineError",
]
