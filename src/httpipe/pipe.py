"""
HTTP/1.x pipe implementation for httpipe.

This module implements the Pipe class that drives one request/response
cycle at a time over a Transport, with keep-alive reuse of the
underlying connection.
"""

import inspect
import logging
from typing import Any, Callable, Mapping, Optional, Union

from . import lifecycle
from .encoder import encode_request
from .exceptions import (
    BodyLengthMismatchError,
    HTTPipeError,
    InvalidArgumentCountError,
    InvalidVersionError,
    MalformedStatusLineError,
    NotReadyError,
)
from .headers import HeaderMap, add_header_value
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
from .network.asyncio_transport import AsyncioTransport
from .network.transport import LineReader, Transport
from .network.utils import format_host_header
from .parser import read_event
from .streams import BodyReader, request_body_chunks

logger = logging.getLogger(__name__)

HeaderFilter = Callable[[Optional[int], HeaderMap], Any]
BodyFilter = Callable[[bytes], Any]


async def _call_filter(callback: Callable[..., Any], *args: Any) -> bool:
    result = callback(*args)
    if inspect.isawaitable(result):
        result = await result
    return bool(result)


class Pipe:
    """
    HTTP/1.x request/response driver bound to one transport.

    A pipe sends one request at a time and exposes the response either
    assembled (response()), as raw parse events (read()), or as body
    chunks (read_body(), iter_body()). It is not safe to drive one pipe
    from two tasks at once.
    """

    # Default configuration
    DEFAULT_CHUNK_SIZE = 8192
    DEFAULT_CONNECT_TIMEOUT = 5.0  # seconds

    def __init__(
        self,
        transport: Optional[Transport] = None,
        chunk_size: Optional[int] = None,
    ):
        """
        Initialize the pipe.

        Args:
            transport: Transport to drive; a new AsyncioTransport on the
                process-wide keepalive pool when omitted
            chunk_size: Maximum number of body bytes read per event
        """
        self.transport: Optional[Transport] = (
            transport if transport is not None else AsyncioTransport()
        )
        self.chunk_size = chunk_size or self.DEFAULT_CHUNK_SIZE
        self.state = State.NOT_READY
        self.read_line: Optional[LineReader] = None
        self.read_timeout: Optional[float] = None
        self.remaining_len = 0
        self.chunked = False
        self.keepalive = True
        self.method: Optional[str] = None
        self.eof = False

        logger.debug(f"Pipe initialized (chunk size {self.chunk_size})")

    def _require_transport(self) -> Transport:
        return lifecycle.bound_transport(self)

    def _start_cycle(self) -> None:
        self.remaining_len = 0
        self.chunked = False
        self.keepalive = True
        self.eof = False

    def set_timeout(self, timeout: Optional[float]) -> None:
        """Set the transport timeout in seconds."""
        self._require_transport().set_timeout(timeout)

    async def request(
        self,
        *args: Any,
        **fields: Any,
    ) -> Optional[Response]:
        """
        Send a request and, unless streaming fully, read the response.

        Accepted forms::

            await pipe.request("example.com", 80, options)
            await pipe.request("example.com", 80, path="/", method="GET")
            await pipe.request("unix:/run/app.sock", {"path": "/status"})

        Args:
            *args: ``host``, ``host, port`` or ``unix:/path``, optionally
                followed by RequestOptions or a mapping of its fields
            **fields: RequestOptions fields, overriding the options argument

        Returns:
            The Response, or None for StreamMode.FULL

        Raises:
            InvalidArgumentCountError: If 1 to 3 arguments are not given
            InvalidVersionError: If the version is neither 0 nor 1
            ProtocolError: If the request head is not latin-1 encodable
            BodyLengthMismatchError: If a body producer does not match the
                declared Content-Length
            TransportError: If connecting or sending fails
        """
        transport = self._require_transport()

        count = len(args)
        if count not in (1, 2, 3):
            raise InvalidArgumentCountError(count)

        targets = list(args)
        options: Optional[Union[RequestOptions, Mapping[str, Any]]] = None
        if isinstance(targets[-1], (RequestOptions, Mapping)):
            options = targets.pop()
        if not targets:
            raise InvalidArgumentCountError(count, "missing host target before request options")
        if len(targets) > 2:
            raise InvalidArgumentCountError(count)

        opts = RequestOptions.create(options, **fields)

        version = 1 if opts.version is None else opts.version
        if version not in (0, 1) or isinstance(version, bool):
            raise InvalidVersionError(version)

        host = targets[0]
        port = targets[1] if len(targets) == 2 else None

        self._start_cycle()

        transport.set_timeout(
            opts.timeout if opts.timeout is not None else self.DEFAULT_CONNECT_TIMEOUT
        )
        await transport.connect(host, port)

        if opts.send_timeout is not None:
            transport.set_timeout(opts.send_timeout)

        if opts.read_timeout is not None:
            self.read_timeout = opts.read_timeout

        try:
            head, headers = encode_request(self, opts, format_host_header(host))
            logger.debug(f"Sending {self.method} {opts.path or '/'} to {host}")

            await transport.send(head)
            await self._send_body(opts, headers)
        except HTTPipeError as e:
            logger.warning(f"Sending request failed, closing connection: {e}")
            await lifecycle.close(self)
            raise

        self.state = State.BEGIN

        if opts.stream == StreamMode.FULL:
            return None

        stream_body = opts.stream == StreamMode.BODY
        return await self.response(header_filter=lambda status, headers: stream_body)

    async def _send_body(self, opts: RequestOptions, headers: HeaderMap) -> None:
        body = opts.body
        if body is None:
            return

        if isinstance(body, (bytes, str)):
            if body:
                await self.transport.send(
                    body.encode("utf-8") if isinstance(body, str) else body
                )
            return

        try:
            budget = int(str(headers.get("Content-Length", 0)))
        except ValueError:
            budget = 0

        sent = 0
        if budget > 0:
            async for chunk in request_body_chunks(body):
                if sent + len(chunk) > budget:
                    raise BodyLengthMismatchError(budget, sent + len(chunk))
                await self.transport.send(chunk)
                sent += len(chunk)
                if sent == budget:
                    break

        if sent != budget:
            raise BodyLengthMismatchError(budget, sent)

    async def read(self) -> Event:
        """
        Read the next parse event of the response.

        Raises:
            NotInitializedError: If no transport is bound
            NotReadyError: If no request has been dispatched
            TransportError: If the transport fails
            ProtocolError: If the response framing is invalid
        """
        transport = self._require_transport()

        if self.state == State.NOT_READY:
            raise NotReadyError()

        if self.read_timeout is not None:
            transport.set_timeout(self.read_timeout)

        return await read_event(self)

    async def read_body(self) -> Optional[bytes]:
        """
        Read the next body chunk.

        Returns:
            The chunk, or None once the body is complete (the connection
            has then been finalized)

        Raises:
            NotReadyError: If the headers have not been read yet
        """
        self._require_transport()

        if self.state < State.READING_BODY:
            raise NotReadyError("not ready for reading body")

        event = await self.read()

        if event.type is EventType.BODY:
            return event.value

        if event.type is EventType.BODY_END:
            await lifecycle.finalize(self)

        return None

    def iter_body(self) -> BodyReader:
        """Get an async iterator over the remaining body chunks."""
        return BodyReader(self)

    async def response(
        self,
        header_filter: Optional[HeaderFilter] = None,
        body_filter: Optional[BodyFilter] = None,
    ) -> Response:
        """
        Read the response until the end, or until a filter asks to stop.

        Args:
            header_filter: Called with ``(status, headers)`` once the
                headers are complete; a truthy result stops reading
            body_filter: Called with each body chunk instead of buffering
                it; a truthy result stops reading

        Returns:
            The assembled Response

        Raises:
            MalformedStatusLineError: If the status line cannot be parsed
            TransportError: If the transport fails
            ProtocolError: If the response framing is invalid
        """
        self._require_transport()

        status: Optional[int] = None
        headers: HeaderMap = {}
        chunks = []

        try:
            while not self.eof:
                event = await self.read()

                if event.type is EventType.STATUSLINE:
                    if isinstance(event.value, MalformedStatusLine):
                        raise MalformedStatusLineError(event.value.line)
                    status = event.value

                elif event.type is EventType.HEADER:
                    if isinstance(event.value, HeaderLine):
                        add_header_value(headers, event.value.name, event.value.value)

                elif event.type is EventType.HEADER_END:
                    if header_filter is not None and await _call_filter(
                        header_filter, status, headers
                    ):
                        break

                elif event.type is EventType.BODY:
                    if body_filter is not None:
                        if await _call_filter(body_filter, event.value):
                            break
                    else:
                        chunks.append(event.value)

                elif event.type is EventType.EOF:
                    break

        except HTTPipeError as e:
            logger.error(f"Response failed: {e}")
            await lifecycle.close(self)
            raise

        return Response(status=status, headers=headers, body=b"".join(chunks), eof=self.eof)

    async def set_keepalive(
        self,
        max_idle_timeout: Optional[float] = None,
        pool_size: Optional[int] = None,
    ) -> bool:
        """
        Finish the cycle, pooling the connection if the response allows it.

        Returns:
            True if the connection was pooled
        """
        return await lifecycle.finalize(self, max_idle_timeout, pool_size)

    async def close(self) -> None:
        """Close the connection unconditionally."""
        await lifecycle.close(self)

    def get_reused_times(self) -> int:
        """Number of times the current connection came from the pool."""
        return lifecycle.get_reused_times(self)

    @property
    def is_eof(self) -> bool:
        """Check if the current cycle has been finalized."""
        return self.eof
