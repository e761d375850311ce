"""
Transport interface for httpipe.

This module defines the Transport interface that the pipe drives. A
transport owns exactly one byte-stream connection at a time and knows
how to hand that connection back to a keepalive pool.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

# Zero-argument coroutine function returning the next line, delimiter stripped.
LineReader = Callable[[], Awaitable[bytes]]


class Transport(ABC):
    """
    Interface for byte-stream transports with async I/O operations.

    Every I/O method is a coroutine, so each call is a point where the
    event loop may run other tasks. Failures are reported by raising
    TransportError or one of its subclasses.
    """

    @abstractmethod
    async def connect(self, host: str, port: Optional[int] = None) -> None:
        """
        Connect to ``host:port``, or to ``host`` when it is a
        ``unix:/path`` socket target.

        Implementations backed by a pool take an idle connection for the
        same target when one is available.

        Raises:
            TransportError: If the connection fails.
            TransportTimeoutError: If the connection times out.
        """
        pass

    @abstractmethod
    async def send(self, data: bytes) -> int:
        """
        Send ``data`` in full.

        Returns:
            The number of bytes sent.

        Raises:
            TransportError: If the connection is not usable.
        """
        pass

    @abstractmethod
    async def receive(self, size: int) -> bytes:
        """
        Receive exactly ``size`` bytes.

        Raises:
            TransportClosedError: If the peer closes first; the bytes
                received so far are available as ``partial``.
            TransportError: On any other failure.
        """
        pass

    @abstractmethod
    def receive_until(self, delimiter: bytes) -> LineReader:
        """
        Create a reader returning successive ``delimiter``-terminated
        pieces of the stream, without the delimiter.

        The reader stays valid across reconnects of this transport.
        """
        pass

    @abstractmethod
    def set_timeout(self, timeout: Optional[float]) -> None:
        """Set the timeout in seconds for subsequent operations."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the current connection."""
        pass

    @abstractmethod
    async def set_keepalive(
        self,
        max_idle_timeout: Optional[float] = None,
        pool_size: Optional[int] = None,
    ) -> None:
        """
        Hand the current connection to the keepalive pool.

        After this call the transport no longer owns a connection.
        """
        pass

    @abstractmethod
    def get_reused_times(self) -> int:
        """Number of times the current connection was taken from the pool."""
        pass
