"""
Basic HTTP/1.1 client example using httpipe.

This example demonstrates how to use a Pipe to make requests,
post a body, and reuse the connection through the keepalive pool.
"""

import asyncio
import json
import logging

from httpipe import Pipe, TransportError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

HOST = "httpbin.org"
PORT = 80


async def simple_get_request():
    """Demonstrate a simple GET request."""
    logger.info("Making simple GET request...")

    pipe = Pipe()
    response = await pipe.request(HOST, PORT, path="/get", query={"demo": "httpipe"})

    logger.info(f"Response status: {response.status}")
    logger.info(f"Content-Type: {response.get_header('Content-Type')}")
    logger.info(f"Response body length: {len(response.body)} bytes")


async def post_request_with_body():
    """Demonstrate a POST request with body."""
    logger.info("Making POST request with body...")

    pipe = Pipe()
    response = await pipe.request(
        HOST,
        PORT,
        method="POST",
        path="/post",
        headers={"Content-Type": "application/json"},
        body=json.dumps({"message": "Hello, World!"}),
    )

    logger.info(f"Response status: {response.status}")
    logger.info(f"Echoed data: {json.loads(response.body)['data']}")


async def keepalive_requests():
    """Demonstrate connection reuse across requests."""
    logger.info("Making requests over one kept-alive connection...")

    pipe = Pipe()
    for i in range(3):
        response = await pipe.request(HOST, PORT, path="/get", query={"n": i})
        logger.info(
            f"Request {i + 1}: status {response.status}, "
            f"connection reused {pipe.get_reused_times()} times"
        )


async def main():
    """Run all examples."""
    logger.info("Starting httpipe examples...")

    try:
        await simple_get_request()
        await post_request_with_body()
        await keepalive_requests()
    except TransportError as e:
        logger.error(f"Example failed: {e}")
        return

    logger.info("All examples completed!")


if __name__ == "__main__":
    asyncio.run(main())
