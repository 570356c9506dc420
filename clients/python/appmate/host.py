"""Host string parsing.

Accepted forms are ``host``, ``host:port``, ``user:pass@host`` and
``user:pass@host:port``, optionally prefixed by ``http://`` or ``https://``.
The host part must contain at least one dot, so a bare ``localhost`` is
rejected; use ``127.0.0.1`` instead.
"""

import re
from dataclasses import dataclass, field

from .exceptions import MalformedResourceError

_HOST_PATTERN = re.compile(
    r"^(?:(?P<scheme>https?)://)?"
    r"(?:(?P<username>[\w.-]+):(?P<password>[^@/\s]+)@)?"
    r"(?P<host>\w[\w-]*(?:\.[\w-]+)+)"
    r"(?::(?P<port>\d+))?"
    r"/?$",
    re.IGNORECASE,
)

API_PATH = "/api/"


@dataclass(frozen=True)
class HostSpec:
    """Structured form of a host string."""

    host: str
    port: int | None = None
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    scheme: str = "http"

    @property
    def netloc(self) -> str:
        """``host[:port]`` without credentials."""
        if self.port is None:
            return self.host
        return f"{self.host}:{self.port}"

    @property
    def has_credentials(self) -> bool:
        return self.username is not None

    @property
    def api_root(self) -> str:
        """URL of the API root served by this host."""
        return f"{self.scheme}://{self.netloc}{API_PATH}"


def parse_host(raw: str) -> HostSpec:
    """Parse a host string into a :class:`HostSpec`.

    Args:
        raw: Host string, e.g. ``"user:secret@db.example.com:8000"``.

    Returns:
        The parsed host specification.

    Raises:
        MalformedResourceError: The string has no recognizable host, carries
            a path after the host, or names an invalid port.

    Example:
        >>> parse_host("user:secret@db.example.com:8000").port
        8000
    """
    if not raw or not raw.strip():
        raise MalformedResourceError("illegal host name: empty string")

    match = _HOST_PATTERN.match(raw.strip())
    if match is None:
        raise MalformedResourceError(f"host domain not found in {raw!r}")

    port = match.group("port")
    if port is not None:
        port = int(port)
        if not 0 < port < 65536:
            raise MalformedResourceError(f"port out of range: {port}")

    return HostSpec(
        host=match.group("host"),
        port=port,
        username=match.group("username"),
        password=match.group("password"),
        scheme=(match.group("scheme") or "http").lower(),
    )
