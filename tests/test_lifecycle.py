"""
Tests for connection lifecycle management.
"""

import pytest

from httpipe import Pipe, lifecycle
from httpipe.exceptions import NotInitializedError
from httpipe.network.mock import MockTransport


class TestLifecycle:
    """Test finalize, close and get_reused_times."""

    @pytest.fixture
    def transport(self):
        return MockTransport()

    @pytest.fixture
    def unbound_pipe(self):
        pipe = Pipe(MockTransport())
        pipe.transport = None
        return pipe

    @pytest.mark.asyncio
    async def test_finalize_pools_keepalive_connection(self, transport):
        await transport.connect("example.com", 80)
        pipe = Pipe(transport)

        pooled = await lifecycle.finalize(pipe, 30.0, 10)

        assert pooled is True
        assert pipe.eof is True
        assert transport.keepalive_calls == [{"max_idle_timeout": 30.0, "pool_size": 10}]
        assert transport.close_count == 0

    @pytest.mark.asyncio
    async def test_finalize_closes_when_keepalive_cleared(self, transport):
        await transport.connect("example.com", 80)
        pipe = Pipe(transport)
        pipe.keepalive = False

        pooled = await lifecycle.finalize(pipe)

        assert pooled is False
        assert pipe.eof is True
        assert transport.close_count == 1
        assert transport.keepalive_count == 0

    @pytest.mark.asyncio
    async def test_double_finalize_is_noop(self, transport):
        await transport.connect("example.com", 80)
        pipe = Pipe(transport)

        assert await lifecycle.finalize(pipe) is True
        assert await lifecycle.finalize(pipe) is False
        assert transport.keepalive_count == 1

    @pytest.mark.asyncio
    async def test_close_after_finalize_is_noop(self, transport):
        await transport.connect("example.com", 80)
        pipe = Pipe(transport)

        await lifecycle.finalize(pipe)
        await lifecycle.close(pipe)

        assert transport.keepalive_count == 1
        assert transport.close_count == 0

    @pytest.mark.asyncio
    async def test_close_ignores_keepalive(self, transport):
        await transport.connect("example.com", 80)
        pipe = Pipe(transport)

        await lifecycle.close(pipe)

        assert pipe.eof is True
        assert transport.close_count == 1
        assert transport.keepalive_count == 0

    @pytest.mark.asyncio
    async def test_get_reused_times_passes_through(self, transport):
        pipe = Pipe(transport)
        await transport.connect("example.com", 80)
        assert lifecycle.get_reused_times(pipe) == 0

        await lifecycle.finalize(pipe)
        await transport.connect("example.com", 80)
        assert lifecycle.get_reused_times(pipe) == 1

    @pytest.mark.asyncio
    async def test_unbound_pipe(self, unbound_pipe):
        with pytest.raises(NotInitializedError):
            await lifecycle.finalize(unbound_pipe)
        with pytest.raises(NotInitializedError):
            await lifecycle.close(unbound_pipe)
        with pytest.raises(NotInitializedError):
            lifecycle.get_reused_times(unbound_pipe)
