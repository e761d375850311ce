"""
Pytest configuration for httpipe tests.

This file contains shared fixtures and configuration
for all tests in the project.
"""

import pytest
from typing import List

from httpipe import Pipe
from httpipe.network.mock import H11ServerTransport, MockTransport


@pytest.fixture
def mock_transport():
    """Create a scripted mock transport."""
    return MockTransport()


@pytest.fixture
def pipe(mock_transport):
    """Create a pipe over the scripted mock transport."""
    return Pipe(mock_transport)


@pytest.fixture
def h11_server():
    """Create an in-memory h11 server transport."""
    return H11ServerTransport()


@pytest.fixture
def h11_pipe(h11_server):
    """Create a pipe over the h11 server transport."""
    return Pipe(h11_server)


@pytest.fixture
def simple_response() -> bytes:
    """Length-delimited 200 response."""
    return (
        b"HTTP/1.1 200 OK\r\n"
        b"Content-Length: 4\r\n"
        b"\r\n"
        b"test"
    )


@pytest.fixture
def chunked_response() -> bytes:
    """Chunked 200 response carrying ``test``."""
    return (
        b"HTTP/1.1 200 OK\r\n"
        b"Transfer-Encoding: chunked\r\n"
        b"\r\n"
        b"4\r\n"
        b"test\r\n"
        b"0\r\n"
        b"\r\n"
    )


@pytest.fixture
def producer():
    """Create a zero-argument body producer over a list of chunks."""
    def _create(chunks: List[bytes]):
        pending = list(chunks)

        def produce():
            if not pending:
                return None
            return pending.pop(0)

        return produce
    return _create
