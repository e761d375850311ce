"""
URI escaping helpers for httpipe.

Paths are escaped one segment at a time so that the slash structure of
the request target survives untouched.
"""

from typing import Any, Mapping
from urllib.parse import quote


def escape_uri(text: str) -> str:
    """Percent-encode everything except unreserved characters."""
    return quote(text, safe="")


def escape_path(path: str) -> str:
    """
    Percent-encode a URL path segment-wise.

    Args:
        path: Raw path, with or without a leading slash

    Returns:
        Escaped path that always starts with ``/`` and keeps a trailing
        slash when the input had one
    """
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return "/"

    escaped = "/" + "/".join(escape_uri(segment) for segment in segments)
    if path.endswith("/"):
        escaped += "/"
    return escaped


def encode_args(args: Mapping[str, Any]) -> str:
    """
    Serialize a query table into ``key=value&...`` form.

    List and tuple values repeat the key once per item. ``True`` emits the
    bare key; ``False`` and ``None`` are skipped.
    """
    parts = []
    for key, value in args.items():
        values = value if isinstance(value, (list, tuple)) else (value,)
        name = escape_uri(str(key))
        for item in values:
            if item is True:
                parts.append(name)
            elif item is False or item is None:
                continue
            else:
                parts.append(f"{name}={escape_uri(str(item))}")
    return "&".join(parts)
