"""
HTTP primitives for httpipe.

This module defines the data structures passed between the encoder,
the parser and the pipe: request options, parse events and the
assembled response.
"""

from dataclasses import dataclass, field, fields
from enum import Enum, IntEnum
from typing import (
    Any,
    AsyncIterable,
    Awaitable,
    Callable,
    Iterable,
    Mapping,
    NamedTuple,
    Optional,
    Union,
)

from .headers import HeaderMap


class State(IntEnum):
    """Parser states of a pipe, in wire order."""
    NOT_READY = 0
    BEGIN = 1
    READING_HEADER = 2
    READING_BODY = 3
    EOF = 4


class EventType(Enum):
    """Kinds of events produced by Pipe.read()."""
    STATUSLINE = "statusline"
    HEADER = "header"
    HEADER_END = "header_end"
    BODY = "body"
    BODY_END = "body_end"
    EOF = "eof"


class StreamMode(IntEnum):
    """How much of the response request() reads on the caller's behalf."""
    NONE = 0  # read the whole response
    FULL = 1  # return right after sending, caller drives read()
    BODY = 2  # read status and headers, caller reads the body


class HeaderLine(NamedTuple):
    """A parsed ``name: value`` header line."""
    name: str
    value: str
    raw: str


class MalformedStatusLine(NamedTuple):
    """A status line that did not match ``HTTP/x.y nnn``."""
    line: str


class Event(NamedTuple):
    """One unit of output from the response state machine."""
    type: EventType
    value: Any = None


BodyChunk = Union[bytes, str]
BodyProducer = Callable[[], Union[Optional[BodyChunk], Awaitable[Optional[BodyChunk]]]]
RequestBody = Union[
    None,
    BodyChunk,
    BodyProducer,
    Iterable[BodyChunk],
    AsyncIterable[BodyChunk],
]


@dataclass(frozen=True)
class RequestOptions:
    """
    Immutable description of one request.

    Timeouts are in seconds. ``timeout`` applies to connect; when
    ``send_timeout`` is set it replaces the transport timeout once the
    connection is up, and ``read_timeout`` is reapplied before every
    read of the response.
    """

    method: str = "GET"
    path: str = "/"
    query: Optional[Union[str, Mapping[str, Any]]] = None
    headers: Mapping[str, Any] = field(default_factory=dict)
    body: RequestBody = None
    version: Optional[int] = None
    stream: StreamMode = StreamMode.NONE
    timeout: Optional[float] = None
    send_timeout: Optional[float] = None
    read_timeout: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate option types after initialization."""
        if self.method is not None and not isinstance(self.method, str):
            raise ValueError("method must be a string")

        if self.headers is None:
            object.__setattr__(self, "headers", {})
        elif not isinstance(self.headers, Mapping):
            raise ValueError("headers must be a mapping")

        if not isinstance(self.stream, StreamMode):
            object.__setattr__(self, "stream", StreamMode(self.stream))

    @classmethod
    def create(
        cls,
        options: Optional[Union["RequestOptions", Mapping[str, Any]]] = None,
        **overrides: Any,
    ) -> "RequestOptions":
        """
        Build options from an existing instance, a mapping, keywords, or a mix.

        Keywords win over values taken from ``options``.
        """
        if isinstance(options, RequestOptions):
            values = {f.name: getattr(options, f.name) for f in fields(cls)}
        else:
            values = dict(options or {})

        values.update(overrides)

        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"unknown request options: {sorted(unknown)}")

        return cls(**values)


@dataclass(frozen=True)
class Response:
    """Assembled result of one request/response cycle."""

    status: Optional[int]
    headers: HeaderMap = field(default_factory=dict)
    body: bytes = b""
    eof: bool = False

    def get_header(self, name: str) -> Optional[Any]:
        """Get a header value by name (case-insensitive)."""
        name_lower = name.lower()
        for header_name, header_value in self.headers.items():
            if header_name.lower() == name_lower:
                return header_value
        return None

    def has_header(self, name: str) -> bool:
        """Check if a header exists (case-insensitive)."""
        return self.get_header(name) is not None
