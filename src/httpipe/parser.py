"""
Response state machine for httpipe.

Each parser state has one async handler taking the pipe. A handler
reads as much from the transport as it needs to produce exactly one
Event, updates the pipe's parse state, and returns the event. read_event()
dispatches on ``pipe.state`` through the module-level handler table.
"""

import logging
import re
from typing import TYPE_CHECKING, Awaitable, Callable, Mapping

from . import lifecycle
from .exceptions import (
    BadStateError,
    NotReadyError,
    PrematureCloseError,
    ProtocolError,
    TransportClosedError,
    TransportError,
)
from .headers import normalize_header
from .http_primitives import Event, EventType, HeaderLine, MalformedStatusLine, State
from .network.transport import LineReader

if TYPE_CHECKING:
    from .pipe import Pipe  # Forward reference

logger = logging.getLogger(__name__)

CRLF = b"\r\n"

_STATUS_LINE = re.compile(r"HTTP/(\d+)\.(\d+) (\d{3})")
_HEADER_LINE = re.compile(r"(.*?):\s*(.*)")

Handler = Callable[["Pipe"], Awaitable[Event]]


def _line_reader(pipe: "Pipe") -> LineReader:
    if pipe.read_line is None:
        pipe.read_line = pipe.transport.receive_until(CRLF)
    return pipe.read_line


async def _next_line(pipe: "Pipe") -> str:
    line = await _line_reader(pipe)()
    return line.decode("latin-1")


def _connection_tokens(value: str) -> set:
    return {token.strip().lower() for token in value.split(",")}


async def read_statusline(pipe: "Pipe") -> Event:
    """Handle BEGIN: read the status line."""
    try:
        line = await _next_line(pipe)
    except TransportError as e:
        logger.debug(f"read status line failed: {e}")
        raise

    match = _STATUS_LINE.match(line)
    if match is None:
        logger.debug(f"Malformed status line: {line!r}")
        return Event(EventType.STATUSLINE, MalformedStatusLine(line))

    major, minor, status = int(match.group(1)), int(match.group(2)), int(match.group(3))

    if status == 100:
        # interim response, the real status line follows its blank line
        await _next_line(pipe)
        pipe.state = State.BEGIN
        logger.debug("Skipped 100 Continue")
    else:
        if (major, minor) < (1, 1):
            pipe.keepalive = False
        pipe.state = State.READING_HEADER

    return Event(EventType.STATUSLINE, status)


async def read_header_part(pipe: "Pipe") -> Event:
    """Handle READING_HEADER: read one header line."""
    line = await _next_line(pipe)

    if line == "":
        if pipe.chunked:
            pipe.remaining_len = 0
        pipe.state = State.READING_BODY
        return Event(EventType.HEADER_END)

    match = _HEADER_LINE.match(line)
    if match is None:
        return Event(EventType.HEADER, line)

    name, value = match.group(1), match.group(2)
    lowered = name.lower()

    if lowered == "content-length":
        try:
            length = int(value.strip())
        except ValueError as e:
            raise ProtocolError(f"invalid Content-Length: {value!r}", e) from e
        if length < 0:
            raise ProtocolError(f"invalid Content-Length: {value!r}")
        pipe.remaining_len = length

    elif lowered == "transfer-encoding" and value.strip().lower() != "identity":
        pipe.chunked = True

    elif lowered == "connection":
        tokens = _connection_tokens(value)
        if "close" in tokens:
            pipe.keepalive = False
        elif "keep-alive" in tokens:
            pipe.keepalive = True

    return Event(EventType.HEADER, HeaderLine(normalize_header(name), value, line))


def _parse_chunk_size(line: str) -> int:
    size = line.split(";", 1)[0].strip()
    try:
        length = int(size, 16)
    except ValueError as e:
        raise ProtocolError(f"invalid chunk size: {line!r}", e) from e
    if length < 0:
        raise ProtocolError(f"invalid chunk size: {line!r}")
    return length


async def _discard_trailer(pipe: "Pipe") -> None:
    while await _next_line(pipe) != "":
        pass


async def read_body_part(pipe: "Pipe") -> Event:
    """Handle READING_BODY: read one body fragment or finish the body."""
    if pipe.method == "HEAD":
        pipe.state = State.EOF
        return Event(EventType.BODY_END)

    if pipe.chunked and pipe.remaining_len == 0:
        line = await _next_line(pipe)
        if line == "":
            # CRLF closing the previous chunk
            line = await _next_line(pipe)

        length = _parse_chunk_size(line)
        if length == 0:
            await _discard_trailer(pipe)
            pipe.state = State.EOF
            return Event(EventType.BODY_END)

        logger.debug(f"Reading chunk of {length} bytes")
        pipe.remaining_len = length

    if pipe.remaining_len == 0:
        pipe.state = State.EOF
        return Event(EventType.BODY_END)

    size = min(pipe.remaining_len, pipe.chunk_size)

    try:
        data = await pipe.transport.receive(size)
    except TransportClosedError as e:
        pipe.keepalive = False
        partial = e.partial
        if not partial:
            pipe.state = State.EOF
            return Event(EventType.BODY_END)

        remaining = pipe.remaining_len - len(partial)
        if remaining != 0:
            pipe.state = State.EOF
            raise PrematureCloseError(remaining, partial) from e

        # nothing more can arrive, the next read ends the body
        pipe.remaining_len = 0
        pipe.chunked = False
        return Event(EventType.BODY, partial)

    pipe.remaining_len -= len(data)
    return Event(EventType.BODY, data)


async def read_eof(pipe: "Pipe") -> Event:
    """Handle EOF: finalize the connection unless read_body() already did."""
    if not pipe.eof:
        await lifecycle.finalize(pipe)
    return Event(EventType.EOF)


STATE_HANDLERS: Mapping[State, Handler] = {
    State.BEGIN: read_statusline,
    State.READING_HEADER: read_header_part,
    State.READING_BODY: read_body_part,
    State.EOF: read_eof,
}


async def read_event(pipe: "Pipe") -> Event:
    """
    Produce the next event for ``pipe``.

    Raises:
        NotReadyError: If no request has been dispatched
        BadStateError: If the state has no handler
    """
    if pipe.state == State.NOT_READY:
        raise NotReadyError()

    handler = STATE_HANDLERS.get(pipe.state)
    if handler is None:
        raise BadStateError(pipe.state)

    return await handler(pipe)
