"""
Keepalive pool for idle stream connections.

This module stores connections that finished a request/response cycle
so that a later connect() to the same target can reuse them instead of
opening a new socket.
"""

import asyncio
import logging
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class PooledConnection:
    """A connection together with its reuse bookkeeping."""

    reader: asyncio.StreamReader
    writer: asyncio.StreamWriter
    reused_times: int = 0
    idle_since: Optional[float] = None
    max_idle_timeout: Optional[float] = None

    def has_expired(self, now: Optional[float] = None) -> bool:
        """Check if the idle connection outlived its timeout."""
        if self.idle_since is None or self.max_idle_timeout is None:
            return False
        now = time.monotonic() if now is None else now
        return (now - self.idle_since) > self.max_idle_timeout

    @property
    def is_usable(self) -> bool:
        """Check if the peer has not closed the connection while idle."""
        return not self.reader.at_eof() and not self.writer.is_closing()


class KeepalivePool:
    """
    Idle connection pool keyed by connection target.

    Each key keeps at most ``pool_size`` idle connections; releasing one
    more evicts and closes the least recently used. Connections idle for
    longer than ``max_idle_timeout`` seconds are dropped on the next
    acquire.
    """

    DEFAULT_POOL_SIZE = 30
    DEFAULT_MAX_IDLE_TIMEOUT = 60.0

    def __init__(
        self,
        pool_size: Optional[int] = None,
        max_idle_timeout: Optional[float] = None,
    ):
        """
        Initialize keepalive pool.

        Args:
            pool_size: Maximum idle connections per target
            max_idle_timeout: Idle timeout in seconds
        """
        self._pool_size = pool_size or self.DEFAULT_POOL_SIZE
        self._max_idle_timeout = max_idle_timeout or self.DEFAULT_MAX_IDLE_TIMEOUT

        # Connection storage: {target -> deque of idle connections, oldest first}
        self._idle: Dict[str, Deque[PooledConnection]] = defaultdict(deque)

        # Metrics
        self._total_released = 0
        self._total_reused = 0
        self._total_evicted = 0

        logger.debug(
            f"Keepalive pool initialized: size={self._pool_size}, "
            f"idle_timeout={self._max_idle_timeout}s"
        )

    def acquire(self, key: str) -> Optional[PooledConnection]:
        """
        Take the most recently released usable connection for ``key``.

        Args:
            key: Connection target

        Returns:
            The pooled connection with its reuse count bumped, or None
        """
        idle = self._idle.get(key)
        now = time.monotonic()

        while idle:
            conn = idle.pop()
            if conn.has_expired(now) or not conn.is_usable:
                self._discard(conn)
                logger.debug(f"Dropped stale idle connection to {key}")
                continue

            conn.reused_times += 1
            conn.idle_since = None
            self._total_reused += 1
            logger.debug(f"Reusing connection to {key} (reused {conn.reused_times} times)")
            return conn

        return None

    def release(
        self,
        key: str,
        conn: PooledConnection,
        max_idle_timeout: Optional[float] = None,
        pool_size: Optional[int] = None,
    ) -> None:
        """
        Put ``conn`` back into the pool for ``key``.

        Args:
            key: Connection target
            conn: Connection that finished its cycle
            max_idle_timeout: Idle timeout override for this connection
            pool_size: Pool size override for this target
        """
        if not conn.is_usable:
            self._discard(conn)
            logger.debug(f"Not pooling closed connection to {key}")
            return

        conn.idle_since = time.monotonic()
        conn.max_idle_timeout = max_idle_timeout or self._max_idle_timeout

        idle = self._idle[key]
        idle.append(conn)
        self._total_released += 1

        limit = pool_size or self._pool_size
        while len(idle) > limit:
            evicted = idle.popleft()
            self._total_evicted += 1
            self._discard(evicted)
            logger.debug(f"Evicted idle connection to {key} (pool size {limit})")

        logger.debug(f"Returned connection to pool for {key}")

    def idle_count(self, key: str) -> int:
        """Get number of idle connections for ``key``."""
        return len(self._idle.get(key, ()))

    def _discard(self, conn: PooledConnection) -> None:
        conn.writer.close()

    async def close_all(self) -> None:
        """Close every idle connection in the pool."""
        for key, idle in self._idle.items():
            while idle:
                conn = idle.popleft()
                conn.writer.close()
                try:
                    await conn.writer.wait_closed()
                except OSError as e:
                    logger.warning(f"Error closing idle connection to {key}: {e}")

        self._idle.clear()
        logger.debug("Keepalive pool closed")

    @property
    def metrics(self) -> Dict[str, Any]:
        """
        Get pool metrics.

        Returns:
            Dictionary with pool metrics
        """
        return {
            "idle_connections": sum(len(idle) for idle in self._idle.values()),
            "total_released": self._total_released,
            "total_reused": self._total_reused,
            "total_evicted": self._total_evicted,
        }
