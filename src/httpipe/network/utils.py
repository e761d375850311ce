"""
Network utilities for httpipe.

Helpers for interpreting connection targets: ``host, port`` pairs and
``unix:/path/to/socket`` strings.
"""

from typing import NamedTuple, Optional

UNIX_PREFIX = "unix:"


class Target(NamedTuple):
    """A parsed connection target."""
    host: str
    port: Optional[int]
    unix_path: Optional[str]

    @property
    def key(self) -> str:
        """Pool key identifying the target."""
        if self.unix_path is not None:
            return UNIX_PREFIX + self.unix_path
        return f"{self.host}:{self.port}"


def is_unix_target(host: str) -> bool:
    """Check whether ``host`` names a unix domain socket."""
    return host.startswith(UNIX_PREFIX)


def validate_port(port: int) -> bool:
    """
    Validate port number.

    Args:
        port: Port number to validate

    Returns:
        True if valid, False otherwise
    """
    return isinstance(port, int) and not isinstance(port, bool) and 0 < port <= 65535


def parse_target(host: str, port: Optional[int] = None) -> Target:
    """
    Parse a connect() target.

    Args:
        host: Hostname, IP address, or ``unix:/path`` socket target
        port: Port number, required unless ``host`` is a unix target

    Returns:
        Parsed Target

    Raises:
        ValueError: If the target is malformed
    """
    if not isinstance(host, str) or not host:
        raise ValueError("host must be a non-empty string")

    if is_unix_target(host):
        path = host[len(UNIX_PREFIX):]
        if not path:
            raise ValueError("unix socket target has an empty path")
        if port is not None:
            raise ValueError("port must not be given for a unix socket target")
        return Target(host=host, port=None, unix_path=path)

    if port is None:
        raise ValueError(f"port required for host {host!r}")

    if not validate_port(port):
        raise ValueError(f"Invalid port: {port}")

    return Target(host=host, port=port, unix_path=None)


def format_host_header(host: str) -> str:
    """
    Format the default Host header value for a connection target.

    Unix socket targets have no meaningful host name, so ``localhost``
    is used for them. IPv6 literals are bracketed.
    """
    if is_unix_target(host):
        return "localhost"

    if ":" in host and not host.startswith("["):
        return f"[{host}]"

    return host
