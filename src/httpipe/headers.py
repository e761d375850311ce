"""
Header name canonicalization for httpipe.

Header names are compared case-insensitively on the wire, but the pipe
always emits and reports them in one display form so that callers can
index the resulting maps with plain dictionary lookups.
"""

import re
from types import MappingProxyType
from typing import Dict, List, Mapping, Union

HeaderValue = Union[str, int, List[Union[str, int]]]
HeaderMap = Dict[str, HeaderValue]

_COMMON_HEADER_NAMES = (
    "Cache-Control",
    "Content-Length",
    "Content-Type",
    "Date",
    "ETag",
    "Expires",
    "Host",
    "Location",
    "User-Agent",
)

# lowercased name -> display name
COMMON_HEADERS: Mapping[str, str] = MappingProxyType(
    {name.lower(): name for name in _COMMON_HEADER_NAMES}
)

_TITLE_POSITIONS = re.compile(r"(^|-)([a-z])")


def normalize_header(name: str) -> str:
    """
    Return the canonical display form of a header name.

    Well-known names come from a fixed table (so ``etag`` becomes
    ``ETag``). Any other name is lowercased, then its first letter and each
    letter following a hyphen are uppercased, so names differing only in
    case normalize equal.

    Args:
        name: Header name in any casing

    Returns:
        The canonical header name
    """
    lowered = name.lower()
    common = COMMON_HEADERS.get(lowered)
    if common is not None:
        return common

    return _TITLE_POSITIONS.sub(lambda m: m.group(1) + m.group(2).upper(), lowered)


def add_header_value(headers: HeaderMap, name: str, value: HeaderValue) -> None:
    """Add ``value`` under ``name``, turning repeated names into a list."""
    existing = headers.get(name)
    if existing is None:
        headers[name] = value
    elif isinstance(existing, list):
        existing.append(value)
    else:
        headers[name] = [existing, value]


def header_values(value: HeaderValue) -> List[str]:
    """Flatten a header map value into the strings emitted on the wire."""
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]
