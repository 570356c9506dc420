"""Composable resource addresses.

A :class:`ResourceAddress` is a URL below the API root plus the auth context
used to reach it. Addresses are built by descending one relative segment at a
time::

    root = ResourceAddress.root("http://db.example.com/api/")
    root.descend("book").descend(3).url  # 'http://db.example.com/api/book/3/'

Relative resolution follows RFC 3986, which drops the last path segment of a
base that does not end in ``/``. Every path segment is therefore normalized to
end in ``/`` before it becomes a join base.
"""

from dataclasses import dataclass, field
from typing import Any

import httpx

from .auth import AuthContext
from .exceptions import MalformedResourceError


def _ensure_slash(path: str) -> str:
    if not path.endswith("/"):
        path += "/"
    return path


@dataclass(frozen=True)
class ResourceAddress:
    """Immutable URL of a database, table or record resource."""

    url: str
    auth: AuthContext = field(default_factory=AuthContext, compare=False)

    @classmethod
    def root(cls, url: str, auth: AuthContext | None = None) -> "ResourceAddress":
        """Create the address of an API root.

        Raises:
            MalformedResourceError: ``url`` is not an absolute http(s) URL.
        """
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as e:
            raise MalformedResourceError(f"not a valid url: {url!r}") from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise MalformedResourceError(f"not an absolute http url: {url!r}")
        if parsed.query or parsed.fragment:
            raise MalformedResourceError(f"api root must not carry a query: {url!r}")
        return cls(_ensure_slash(str(parsed)), auth or AuthContext())

    def descend(self, segment: Any) -> "ResourceAddress":
        """Return the address of a child resource.

        Args:
            segment: Relative path (table name, record key, ``"a/b"``) or a
                query suffix starting with ``?``. Non-string keys are
                converted with ``str()``.

        Raises:
            MalformedResourceError: The segment would leave the current
                resource (absolute path, scheme, ``..``) or is empty.
        """
        segment = str(segment)
        path, sep, query = segment.partition("?")

        if not segment or "#" in segment or "://" in path or path.startswith("/"):
            raise MalformedResourceError(f"illegal path segment: {segment!r}")
        if path:
            parts = path.rstrip("/").split("/")
            if any(part in ("", ".", "..") for part in parts):
                raise MalformedResourceError(f"illegal path segment: {segment!r}")

        relative = (_ensure_slash(path) if path else "") + sep + query
        try:
            target = self._url.join(relative)
        except httpx.InvalidURL as e:
            raise MalformedResourceError(f"illegal path segment: {segment!r}") from e
        return ResourceAddress(str(target), self.auth)

    def resolve(self, url: str) -> "ResourceAddress":
        """Address an absolute URL with the same auth context."""
        try:
            target = self._url.join(url)
        except httpx.InvalidURL as e:
            raise MalformedResourceError(f"not a valid url: {url!r}") from e
        return ResourceAddress(str(target), self.auth)

    def same_origin(self, url: str) -> bool:
        """Whether ``url`` has the scheme, host and port of this address."""
        try:
            other = self._url.join(url)
        except httpx.InvalidURL:
            return False
        return self.origin == (other.scheme, other.host, other.port)

    @property
    def origin(self) -> tuple[str, str, int | None]:
        url = self._url
        return url.scheme, url.host, url.port

    @property
    def host(self) -> str:
        return self._url.host

    @property
    def _url(self) -> httpx.URL:
        return httpx.URL(self.url)

    def __str__(self) -> str:
        return self.url
