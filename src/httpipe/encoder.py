"""
Request serialization for httpipe.

Turns a RequestOptions instance into the request line and header block
that go on the wire ahead of the body.
"""

import logging
from typing import TYPE_CHECKING, Optional, Tuple

from . import __version__
from .escaping import encode_args, escape_path
from .exceptions import InvalidVersionError, ProtocolError
from .headers import HeaderMap, header_values, normalize_header
from .http_primitives import RequestOptions

if TYPE_CHECKING:
    from .pipe import Pipe  # Forward reference

logger = logging.getLogger(__name__)

HTTP_1_1 = " HTTP/1.1\r\n"
HTTP_1_0 = " HTTP/1.0\r\n"

USER_AGENT = f"httpipe/{__version__}"

_LENGTH_METHODS = ("PUT", "POST")


def _coerce_length(value: object) -> int:
    try:
        return int(str(value).strip())
    except ValueError:
        return 0


def encode_request(
    pipe: "Pipe",
    options: RequestOptions,
    host: Optional[str] = None,
) -> Tuple[bytes, HeaderMap]:
    """
    Build the request head for ``options``.

    The uppercased method is recorded on ``pipe`` so the parser knows
    whether a body follows the response headers.

    Args:
        pipe: The pipe the request will be sent on
        options: Request description
        host: Connection target, used when no Host header is given

    Returns:
        Tuple of (encoded request head, normalized headers)

    Raises:
        InvalidVersionError: If the version is neither 0 nor 1
        ProtocolError: If the head is not latin-1 encodable
    """
    method = (options.method or "GET").upper()
    pipe.method = method

    version = 1 if options.version is None else options.version
    if version not in (0, 1) or isinstance(version, bool):
        raise InvalidVersionError(version)

    target = escape_path(options.path or "/")

    query = options.query
    if query is not None and not isinstance(query, str):
        query = encode_args(query)
    if isinstance(query, str):
        target += "?" + query

    headers: HeaderMap = {}
    for name, value in options.headers.items():
        headers[normalize_header(name)] = value

    body = options.body
    if isinstance(body, str):
        body = body.encode("utf-8")
    if isinstance(body, bytes):
        headers["Content-Length"] = len(body)

    if method in _LENGTH_METHODS:
        headers["Content-Length"] = _coerce_length(headers.get("Content-Length"))

    if "Host" not in headers and host is not None:
        headers["Host"] = host

    if "User-Agent" not in headers:
        headers["User-Agent"] = USER_AGENT

    if "Accept" not in headers:
        headers["Accept"] = "*/*"

    if version == 0 and "Connection" not in headers:
        headers["Connection"] = "Keep-Alive"

    lines = [method, " ", target, HTTP_1_1 if version == 1 else HTTP_1_0]
    for name, value in headers.items():
        for item in header_values(value):
            lines.append(f"{name}: {item}\r\n")
    lines.append("\r\n")

    try:
        head = "".join(lines).encode("latin-1")
    except UnicodeEncodeError as e:
        raise ProtocolError(f"request head is not latin-1 encodable: {e}", e) from e

    logger.debug(f"Encoded request {method} {target} (HTTP/1.{version})")

    return head, headers
