"""
Streaming examples for httpipe.

Shows the three ways of consuming a response: raw parse events,
streamed body chunks, and filters on the assembled response; and a
request body produced incrementally.
"""

import asyncio
import logging

from httpipe import EventType, Pipe, StreamMode

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

HOST = "httpbin.org"
PORT = 80


async def event_stream_example():
    """Example: Driving the parser one event at a time."""
    print("\n=== Event Stream Example ===")

    pipe = Pipe()
    await pipe.request(HOST, PORT, path="/stream/3", stream=StreamMode.FULL)

    while True:
        event = await pipe.read()
        if event.type is EventType.BODY:
            print(f"{event.type.value}: {len(event.value)} bytes")
        else:
            print(f"{event.type.value}: {event.value!r}")
        if event.type is EventType.EOF:
            break


async def body_stream_example():
    """Example: Reading the body in chunks after the headers."""
    print("\n=== Body Stream Example ===")

    pipe = Pipe(chunk_size=256)
    response = await pipe.request(HOST, PORT, path="/bytes/2048", stream=StreamMode.BODY)
    print(f"Response status: {response.status}")

    total_bytes = 0
    async for chunk in pipe.iter_body():
        total_bytes += len(chunk)
        print(f"Received {len(chunk)} bytes ({total_bytes} bytes total)")


async def filter_example():
    """Example: Stopping early from a header filter."""
    print("\n=== Filter Example ===")

    def too_large(status, headers):
        length = int(headers.get("Content-Length", 0))
        print(f"Status {status}, {length} bytes announced")
        return length > 1024

    pipe = Pipe()
    await pipe.request(HOST, PORT, path="/bytes/4096", stream=StreamMode.FULL)
    response = await pipe.response(header_filter=too_large)
    if not response.eof:
        print("Body skipped, closing connection")
        await pipe.close()


async def producer_example():
    """Example: Uploading a body from a producer function."""
    print("\n=== Producer Example ===")

    parts = [b"Hello", b", ", b"World", b"!"]

    async def produce():
        await asyncio.sleep(0.1)  # Simulate slow source
        return parts.pop(0) if parts else None

    pipe = Pipe()
    response = await pipe.request(
        HOST,
        PORT,
        method="PUT",
        path="/put",
        headers={"Content-Length": 13, "Content-Type": "text/plain"},
        body=produce,
    )
    print(f"Response status: {response.status}")


async def main():
    """Run all streaming examples."""
    print("httpipe Streaming Examples")
    print("=" * 40)

    await event_stream_example()
    await body_stream_example()
    await filter_example()
    await producer_example()

    print("\n" + "=" * 40)
    print("All examples completed!")


if __name__ == "__main__":
    asyncio.run(main())
