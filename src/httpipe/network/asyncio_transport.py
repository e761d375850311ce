"""
asyncio streams transport for httpipe.

AsyncioTransport implements the Transport interface on top of
asyncio.open_connection / asyncio.open_unix_connection and draws idle
connections from a KeepalivePool.
"""

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from ..exceptions import TransportClosedError, TransportError, TransportTimeoutError
from .pool import KeepalivePool, PooledConnection
from .transport import LineReader, Transport
from .utils import Target, parse_target

logger = logging.getLogger(__name__)

T = TypeVar("T")

_default_pool: Optional[KeepalivePool] = None


def get_default_pool() -> KeepalivePool:
    """Get the process-wide keepalive pool, creating it on first use."""
    global _default_pool
    if _default_pool is None:
        _default_pool = KeepalivePool()
    return _default_pool


class AsyncioTransport(Transport):
    """
    Transport over asyncio streams.

    One instance owns at most one connection at a time. Connecting
    takes an idle connection for the same target from the pool when one
    is available; set_keepalive() hands the connection back.
    """

    DEFAULT_TIMEOUT: Optional[float] = None
    DEFAULT_READ_LIMIT = 64 * 1024

    def __init__(
        self,
        pool: Optional[KeepalivePool] = None,
        timeout: Optional[float] = None,
        read_limit: Optional[int] = None,
    ):
        """
        Initialize the transport.

        Args:
            pool: Keepalive pool; the process-wide pool when omitted
            timeout: Initial timeout for operations in seconds
            read_limit: Maximum length of a single line read
        """
        self._pool = pool if pool is not None else get_default_pool()
        self._timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT
        self._read_limit = read_limit or self.DEFAULT_READ_LIMIT
        self._conn: Optional[PooledConnection] = None
        self._target: Optional[Target] = None
        self._reused_times = 0

    @property
    def is_connected(self) -> bool:
        """Check if the transport currently owns a connection."""
        return self._conn is not None

    @property
    def timeout(self) -> Optional[float]:
        """Current operation timeout in seconds."""
        return self._timeout

    def set_timeout(self, timeout: Optional[float]) -> None:
        self._timeout = timeout

    async def _wait(self, operation: Awaitable[T], what: str) -> T:
        try:
            if self._timeout is None:
                return await operation
            return await asyncio.wait_for(operation, self._timeout)
        except asyncio.TimeoutError as e:
            raise TransportTimeoutError(f"{what} timed out", self._timeout) from e

    def _require_connection(self) -> PooledConnection:
        if self._conn is None:
            raise TransportClosedError()
        return self._conn

    async def connect(self, host: str, port: Optional[int] = None) -> None:
        if self._conn is not None:
            await self.close()

        try:
            target = parse_target(host, port)
        except ValueError as e:
            raise TransportError(str(e), e) from e

        conn = self._pool.acquire(target.key)
        if conn is None:
            try:
                if target.unix_path is not None:
                    opening = asyncio.open_unix_connection(
                        target.unix_path, limit=self._read_limit
                    )
                else:
                    opening = asyncio.open_connection(
                        target.host, target.port, limit=self._read_limit
                    )
                reader, writer = await self._wait(opening, f"connect to {target.key}")
            except OSError as e:
                raise TransportError(f"connect to {target.key} failed: {e}", e) from e

            conn = PooledConnection(reader=reader, writer=writer)
            logger.debug(f"Opened new connection to {target.key}")

        self._conn = conn
        self._target = target
        self._reused_times = conn.reused_times

    async def send(self, data: bytes) -> int:
        conn = self._require_connection()
        try:
            conn.writer.write(data)
            await self._wait(conn.writer.drain(), "send")
        except ConnectionError as e:
            raise TransportClosedError(cause=e) from e
        except OSError as e:
            raise TransportError(f"send failed: {e}", e) from e
        return len(data)

    async def receive(self, size: int) -> bytes:
        conn = self._require_connection()
        if size <= 0:
            return b""
        try:
            return await self._wait(conn.reader.readexactly(size), "receive")
        except asyncio.IncompleteReadError as e:
            raise TransportClosedError(partial=e.partial) from e
        except ConnectionError as e:
            raise TransportClosedError(cause=e) from e
        except OSError as e:
            raise TransportError(f"receive failed: {e}", e) from e

    def receive_until(self, delimiter: bytes) -> LineReader:
        async def read_line() -> bytes:
            conn = self._require_connection()
            try:
                data = await self._wait(conn.reader.readuntil(delimiter), "receive")
            except asyncio.IncompleteReadError as e:
                raise TransportClosedError(partial=e.partial) from e
            except asyncio.LimitOverrunError as e:
                raise TransportError("line exceeds read limit", e) from e
            except ConnectionError as e:
                raise TransportClosedError(cause=e) from e
            except OSError as e:
                raise TransportError(f"receive failed: {e}", e) from e
            return data[: -len(delimiter)]

        return read_line

    async def close(self) -> None:
        conn = self._conn
        if conn is None:
            return

        self._conn = None
        conn.writer.close()
        try:
            await conn.writer.wait_closed()
        except OSError as e:
            logger.debug(f"Error while closing connection: {e}")

    async def set_keepalive(
        self,
        max_idle_timeout: Optional[float] = None,
        pool_size: Optional[int] = None,
    ) -> None:
        conn = self._require_connection()
        self._conn = None
        self._pool.release(self._target.key, conn, max_idle_timeout, pool_size)

    def get_reused_times(self) -> int:
        return self._reused_times
