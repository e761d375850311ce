"""
Transport components for httpipe.

This module provides the transport abstraction the pipe drives, a
concrete asyncio streams transport with its keepalive pool, and
in-memory transports for tests.
"""

from .transport import Transport, LineReader
from .pool import KeepalivePool, PooledConnection
from .asyncio_transport import AsyncioTransport, get_default_pool
from .mock import MockTransport, H11ServerTransport, ReceivedRequest
from .utils import (
    Target,
    parse_target,
    validate_port,
    format_host_header,
    is_unix_target,
)

__all__ = [
    "Transport",
    "LineReader",
    "KeepalivePool",
    "PooledConnection",
    "AsyncioTransport",
    "get_default_pool",
    "MockTransport",
    "H11ServerTransport",
    "ReceivedRequest",
    "Target",
    "parse_target",
    "validate_port",
    "format_host_header",
    "is_unix_target",
]
