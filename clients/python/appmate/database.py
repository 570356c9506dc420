"""Database handle: the API root and its tables."""

import logging
from typing import Any

import httpx

from .address import ResourceAddress
from .auth import AuthContext, resolve_auth
from .connection import Connection
from .exceptions import MalformedResourceError, MalformedResponseError
from .host import parse_host
from .log import get_logger
from .table import Table


class Database:
    """Handle on the API root ``http://<host>/api/``.

    Creating a database does no I/O.

    Args:
        host: Host string: ``host``, ``host:port``, ``user:pass@host`` or
            ``user:pass@host:port``, optionally with an ``http(s)://`` prefix.
        username: User for Basic authentication.
        password: Password for Basic authentication.
        timeout: Request timeout in seconds.
        client: httpx client to use instead of creating one. It is not
            closed by :meth:`close`.
        logger: Logger for request traces.
        same_origin: Refuse to follow foreign-key or file URLs that point to
            another scheme, host or port.

    Raises:
        MalformedResourceError: The host string is not valid.
        DuplicateCredentialsError: Credentials appear in ``host`` and are
            also passed as arguments.

    Example:
        >>> with Database("db.example.com:8000", "user", "secret") as db:
        ...     print(db.table_names())
    """

    def __init__(
        self,
        host: str,
        username: str | None = None,
        password: str | None = None,
        *,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
        logger: logging.Logger | None = None,
        same_origin: bool = True,
    ):
        spec = parse_host(host)
        auth = resolve_auth(spec, username, password)
        self._setup(
            ResourceAddress.root(spec.api_root, auth),
            timeout,
            client,
            logger,
            same_origin,
        )

    @classmethod
    def from_api_root(
        cls,
        url: str,
        username: str | None = None,
        password: str | None = None,
        *,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
        logger: logging.Logger | None = None,
        same_origin: bool = True,
    ) -> "Database":
        """Create a database from a full API root URL.

        Example:
            >>> db = Database.from_api_root("https://example.com:8443/v2/api/")
        """
        auth = AuthContext.from_credentials(username, password) if username else None
        database = cls.__new__(cls)
        database._setup(
            ResourceAddress.root(url, auth), timeout, client, logger, same_origin
        )
        return database

    def _setup(
        self,
        address: ResourceAddress,
        timeout: float,
        client: httpx.Client | None,
        logger: logging.Logger | None,
        same_origin: bool,
    ) -> None:
        self.address = address
        self.same_origin = same_origin
        self.logger = logger or get_logger()
        self._owns_client = client is None
        self.client = client if client is not None else httpx.Client(timeout=timeout)

    @property
    def username(self) -> str | None:
        return self.address.auth.username

    def close(self) -> None:
        """Close the HTTP client if this database created it."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Database({self.address.url})"

    def table(self, name: str) -> Table:
        """Return a handle on table ``name``. Does no I/O."""
        return Table(self, name)

    def table_names(self) -> list[str]:
        """Names of all tables, in the order the server lists them."""
        data = Connection(self.client, self.address, self.logger).json("GET")
        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"expected a JSON object from {self.address.url}, got {type(data).__name__}"
            )
        return list(data)

    def tables(self) -> list[Table]:
        return [self.table(name) for name in self.table_names()]

    def table_for(self, url: str) -> Table | None:
        """Table owning a resource URL below this API root, if any."""
        root = self.address.url
        if not url.startswith(root):
            return None
        name = url[len(root):].split("/", 1)[0]
        try:
            return self.table(name)
        except MalformedResourceError:
            return None
