"""
Streaming helpers for httpipe.

Request bodies may be given as a producer function, an iterable or an
async iterable; request_body_chunks() turns all of them into one async
chunk source. BodyReader exposes the body of a streamed response as an
async iterator driven by Pipe.read_body().
"""

import inspect
from typing import TYPE_CHECKING, AsyncIterator, List, Optional

from .exceptions import StreamError
from .http_primitives import BodyChunk, RequestBody

if TYPE_CHECKING:
    from .pipe import Pipe  # Forward reference


def _as_bytes(chunk: BodyChunk) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    if isinstance(chunk, (bytes, bytearray, memoryview)):
        return bytes(chunk)
    raise StreamError(f"body chunks must be bytes or str, not {type(chunk).__name__}")


async def request_body_chunks(body: RequestBody) -> AsyncIterator[bytes]:
    """
    Iterate over the chunks of a streamed request body.

    A producer function is called until it returns None or an empty
    chunk; it may be a coroutine function. Iterables and async iterables
    are consumed as they are. Empty chunks from iterables are skipped.
    """
    if body is None or isinstance(body, (bytes, str)):
        if body:
            yield _as_bytes(body)
        return

    if callable(body):
        while True:
            chunk = body()
            if inspect.isawaitable(chunk):
                chunk = await chunk
            if not chunk:
                return
            yield _as_bytes(chunk)

    if hasattr(body, "__aiter__"):
        async for chunk in body:
            if chunk:
                yield _as_bytes(chunk)
        return

    for chunk in body:
        if chunk:
            yield _as_bytes(chunk)


class BodyReader:
    """
    Async iterator over the response body of a pipe.

    Used after request() with StreamMode.BODY or FULL. Iteration ends
    when the body is complete, at which point the pipe has already been
    finalized.
    """

    def __init__(self, pipe: "Pipe") -> None:
        self._pipe = pipe
        self._done = False
        self._bytes_read = 0

    def __aiter__(self) -> "BodyReader":
        return self

    async def __anext__(self) -> bytes:
        if self._done:
            raise StopAsyncIteration

        chunk: Optional[bytes] = await self._pipe.read_body()
        if chunk is None:
            self._done = True
            raise StopAsyncIteration

        self._bytes_read += len(chunk)
        return chunk

    async def aread(self) -> bytes:
        """Read the rest of the body and return it as bytes."""
        chunks: List[bytes] = []
        async for chunk in self:
            chunks.append(chunk)
        return b"".join(chunks)

    @property
    def bytes_read(self) -> int:
        """Get the number of bytes read so far."""
        return self._bytes_read

    @property
    def done(self) -> bool:
        """Get whether the body has been read completely."""
        return self._done
