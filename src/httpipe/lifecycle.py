"""
Connection lifecycle management for httpipe.

The functions here are the only place a pipe's transport is handed back
to its keepalive pool or closed once a response is complete.
"""

import logging
from typing import TYPE_CHECKING, Optional

from .exceptions import NotInitializedError
from .network.transport import Transport

if TYPE_CHECKING:
    from .pipe import Pipe  # Forward reference

logger = logging.getLogger(__name__)


def bound_transport(pipe: "Pipe") -> Transport:
    transport = pipe.transport
    if transport is None:
        raise NotInitializedError()
    return transport


async def finalize(
    pipe: "Pipe",
    max_idle_timeout: Optional[float] = None,
    pool_size: Optional[int] = None,
) -> bool:
    """
    End the current cycle of ``pipe``.

    The transport goes back to its keepalive pool when the response
    allowed reuse, and is closed otherwise.

    Args:
        pipe: The pipe whose response is complete
        max_idle_timeout: Idle timeout for the pooled connection
        pool_size: Pool size for the connection's target

    Returns:
        True if the connection was pooled, False if it was closed or the
        cycle had already been finalized

    Raises:
        NotInitializedError: If no transport is bound
    """
    transport = bound_transport(pipe)

    if pipe.eof:
        logger.warning("Pipe already finalized, ignoring repeated finalize")
        return False

    pipe.eof = True

    if pipe.keepalive:
        await transport.set_keepalive(max_idle_timeout, pool_size)
        logger.debug("Connection returned to keepalive pool")
        return True

    await transport.close()
    logger.debug("Connection closed, response did not allow keepalive")
    return False


async def close(pipe: "Pipe") -> None:
    """
    Close the transport of ``pipe`` regardless of keepalive.

    Raises:
        NotInitializedError: If no transport is bound
    """
    transport = bound_transport(pipe)

    if pipe.eof:
        logger.debug("Pipe already finalized, nothing to close")
        return

    pipe.eof = True
    await transport.close()
    logger.debug("Connection closed")


def get_reused_times(pipe: "Pipe") -> int:
    """
    Number of times the pipe's connection was taken from the pool.

    Raises:
        NotInitializedError: If no transport is bound
    """
    return bound_transport(pipe).get_reused_times()
