"""
Mock transport implementations for testing.

This module provides in-memory Transport implementations that can be
used for unit testing without requiring actual network connections.
"""

from collections import deque
from typing import Any, Deque, Dict, Iterable, List, NamedTuple, Optional, Tuple, Union

import h11

from ..exceptions import TransportClosedError, TransportError, TransportTimeoutError
from .transport import LineReader, Transport


class MockTransport(Transport):
    """
    Mock transport for testing.

    Incoming data is scripted with ``add_data``. When the script runs
    dry the peer is treated as having closed the connection, unless
    ``close_when_drained`` is False, in which case reads time out.
    """

    def __init__(self, data: bytes = b"", close_when_drained: bool = True):
        """
        Initialize the mock transport.

        Args:
            data: Initial data to be available for reading.
            close_when_drained: Whether running out of data means the
                peer closed.
        """
        self._incoming = bytearray(data)
        self._close_when_drained = close_when_drained
        self._write_buffer: List[bytes] = []
        self._pooled = False
        self._reused_times = 0

        self.connected = False
        self.connects: List[Tuple[str, Optional[int]]] = []
        self.timeouts: List[Optional[float]] = []
        self.close_count = 0
        self.keepalive_calls: List[Dict[str, Any]] = []

        self.connect_error: Optional[TransportError] = None
        self.send_error: Optional[TransportError] = None

    def add_data(self, data: bytes) -> None:
        """
        Add data to be available for reading.

        Args:
            data: The data to add.
        """
        self._incoming += data

    @property
    def written_data(self) -> bytes:
        """Get all data that was sent through the transport."""
        return b"".join(self._write_buffer)

    @property
    def pending_data(self) -> bytes:
        """Get scripted data not consumed yet."""
        return bytes(self._incoming)

    @property
    def keepalive_count(self) -> int:
        """Number of times a connection was handed to the pool."""
        return len(self.keepalive_calls)

    def _require_connected(self) -> None:
        if not self.connected:
            raise TransportClosedError()

    async def _fill(self) -> None:
        """Hook for subclasses that produce incoming data on demand."""

    def _take(self, size: int) -> bytes:
        data = bytes(self._incoming[:size])
        del self._incoming[:size]
        return data

    def _drained(self) -> TransportError:
        if self._close_when_drained:
            partial = self._take(len(self._incoming))
            self.connected = False
            return TransportClosedError(partial=partial)
        return TransportTimeoutError("receive timed out", self.timeouts[-1] if self.timeouts else None)

    async def connect(self, host: str, port: Optional[int] = None) -> None:
        if self.connect_error is not None:
            raise self.connect_error

        self.connects.append((host, port))
        self._reused_times = self._reused_times + 1 if self._pooled else 0
        self._pooled = False
        self.connected = True

    async def send(self, data: bytes) -> int:
        self._require_connected()
        if self.send_error is not None:
            raise self.send_error
        self._write_buffer.append(bytes(data))
        return len(data)

    async def receive(self, size: int) -> bytes:
        self._require_connected()
        await self._fill()
        if len(self._incoming) >= size:
            return self._take(size)
        raise self._drained()

    def receive_until(self, delimiter: bytes) -> LineReader:
        async def read_line() -> bytes:
            self._require_connected()
            await self._fill()
            index = self._incoming.find(delimiter)
            if index < 0:
                raise self._drained()
            line = self._take(index)
            del self._incoming[: len(delimiter)]
            return line

        return read_line

    def set_timeout(self, timeout: Optional[float]) -> None:
        self.timeouts.append(timeout)

    async def close(self) -> None:
        self.connected = False
        self.close_count += 1

    async def set_keepalive(
        self,
        max_idle_timeout: Optional[float] = None,
        pool_size: Optional[int] = None,
    ) -> None:
        self._require_connected()
        self.keepalive_calls.append(
            {"max_idle_timeout": max_idle_timeout, "pool_size": pool_size}
        )
        self._pooled = True
        self.connected = False

    def get_reused_times(self) -> int:
        return self._reused_times


class ReceivedRequest(NamedTuple):
    """A request as seen by H11ServerTransport."""
    method: str
    target: str
    http_version: str
    headers: List[Tuple[str, str]]
    body: bytes

    def get_header(self, name: str) -> Optional[str]:
        """Get the first header value by name (case-insensitive)."""
        name_lower = name.lower()
        for header_name, value in self.headers:
            if header_name.lower() == name_lower:
                return value
        return None


class _QueuedResponse(NamedTuple):
    status: int
    headers: List[Tuple[str, str]]
    chunks: List[bytes]
    informational: Tuple[int, ...]


class H11ServerTransport(MockTransport):
    """
    In-memory HTTP/1.1 server built on h11.

    Everything the pipe sends is parsed by an h11 server connection, so a
    malformed request fails loudly. Responses queued with
    ``queue_response`` are serialized by h11 once a complete request
    has arrived.
    """

    def __init__(self) -> None:
        super().__init__(close_when_drained=True)
        self._h11 = h11.Connection(h11.SERVER)
        self._responses: Deque[_QueuedResponse] = deque()
        self._current: Optional[Dict[str, Any]] = None
        self.requests: List[ReceivedRequest] = []

    def queue_response(
        self,
        status: int = 200,
        headers: Iterable[Tuple[str, str]] = (),
        body: Union[bytes, Iterable[bytes]] = b"",
        informational: Iterable[int] = (),
    ) -> None:
        """
        Queue the response to the next complete request.

        Args:
            status: Final status code
            headers: Response headers; give Transfer-Encoding: chunked to
                get a chunked body, one chunk per item of ``body``
            body: Body bytes, or an iterable of chunks
            informational: Interim status codes sent first (e.g. 100)
        """
        chunks = [body] if isinstance(body, bytes) else list(body)
        self._responses.append(
            _QueuedResponse(status, list(headers), chunks, tuple(informational))
        )

    async def connect(self, host: str, port: Optional[int] = None) -> None:
        reusing = self._pooled
        await super().connect(host, port)
        if not reusing:
            self._h11 = h11.Connection(h11.SERVER)
            self._incoming.clear()

    async def send(self, data: bytes) -> int:
        sent = await super().send(data)
        self._h11.receive_data(bytes(data))
        return sent

    async def _fill(self) -> None:
        if self._incoming:
            return

        while True:
            event = self._h11.next_event()
            if event is h11.NEED_DATA or event is h11.PAUSED:
                return

            if isinstance(event, h11.Request):
                self._current = {
                    "method": event.method.decode("ascii"),
                    "target": event.target.decode("ascii"),
                    "http_version": event.http_version.decode("ascii"),
                    "headers": [
                        (name.decode("latin-1"), value.decode("latin-1"))
                        for name, value in event.headers.raw_items()
                    ],
                    "body": bytearray(),
                }
            elif isinstance(event, h11.Data):
                self._current["body"] += event.data
            elif isinstance(event, h11.EndOfMessage):
                current = self._current
                self.requests.append(
                    ReceivedRequest(
                        method=current["method"],
                        target=current["target"],
                        http_version=current["http_version"],
                        headers=current["headers"],
                        body=bytes(current["body"]),
                    )
                )
                self._current = None
                self._respond(current["method"])
                return
            elif isinstance(event, h11.ConnectionClosed):
                return

    def _respond(self, method: str) -> None:
        if not self._responses:
            return

        queued = self._responses.popleft()
        out = bytearray()
        for code in queued.informational:
            out += self._h11.send(h11.InformationalResponse(status_code=code, headers=[]))

        out += self._h11.send(h11.Response(status_code=queued.status, headers=queued.headers))
        if method != "HEAD":
            for chunk in queued.chunks:
                if chunk:
                    out += self._h11.send(h11.Data(data=chunk))
        out += self._h11.send(h11.EndOfMessage())

        self._incoming += out

        if self._h11.our_state is h11.DONE and self._h11.their_state is h11.DONE:
            self._h11.start_next_cycle()
