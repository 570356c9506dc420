"""Table handle: CRUD operations on one collection resource."""

import re
from typing import TYPE_CHECKING, Any

from .address import ResourceAddress
from .connection import Connection
from .exceptions import (
    MalformedResourceError,
    MalformedResponseError,
    UnsupportedOperationError,
)
from .filters import compile_filters
from .record import Record
from .types import FieldSchema

if TYPE_CHECKING:
    from .database import Database

_TABLE_NAME = re.compile(r"[\w-]+")

NO_CONTENT = 204


def validate_table_name(name: str) -> str:
    if not isinstance(name, str) or not _TABLE_NAME.fullmatch(name):
        raise MalformedResourceError(f"illegal table name: {name!r}")
    return name


class Table:
    """Handle on ``<api root>/<name>/``.

    Creating a table does no I/O. Every operation below is one or more
    blocking round trips, each authenticated on its own.

    Args:
        database: Database the table belongs to; its HTTP client, logger and
            auth context are reused.
        name: Table name.

    Example:
        >>> db = Database("user:secret@db.example.com:8000")
        >>> books = db.table("book")
        >>> cheap = books.get_filtered("price<10", "stock>0")
    """

    def __init__(self, database: "Database", name: str):
        self.name = validate_table_name(name)
        self._database = database
        self._owns_database = False
        self.address = database.address.descend(name)

    @classmethod
    def from_host(
        cls,
        host: str,
        name: str,
        username: str | None = None,
        password: str | None = None,
        **options: Any,
    ) -> "Table":
        """Create a table without an explicit :class:`Database`.

        Accepts the same keyword options as :class:`Database`. The private
        database is closed together with the table.
        """
        from .database import Database

        table = cls(Database(host, username, password, **options), name)
        table._owns_database = True
        return table

    @property
    def database(self) -> "Database":
        return self._database

    def close(self) -> None:
        """Close the HTTP client if this table created it."""
        if self._owns_database:
            self._database.close()

    def __enter__(self) -> "Table":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Table({self.name}@{self.address.host})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Table) and self.address.url == other.address.url

    def __hash__(self) -> int:
        return hash(self.address.url)

    def connection(self, address: ResourceAddress | None = None) -> Connection:
        """Create a connection to this table or to ``address``."""
        return Connection(
            self._database.client, address or self.address, self._database.logger
        )

    def _records(self, data: Any) -> list[Record]:
        if not isinstance(data, list):
            raise MalformedResponseError(
                f"expected a JSON array from {self.address.url}, got {type(data).__name__}"
            )
        return [self._record(item) for item in data]

    def _record(self, data: Any) -> Record:
        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"expected a JSON object, got {type(data).__name__}"
            )
        return Record(data, self)

    # Reads

    def get_all(self) -> list[Record]:
        """Fetch every record; an empty table gives an empty list."""
        return self._records(self.connection().json("GET"))

    def get(self, key: Any) -> Record:
        """Fetch the record with primary key ``key``.

        Raises:
            NotFoundError: No record has this key.
        """
        address = self.address.descend(key)
        return self._record(self.connection(address).json("GET"))

    def get_filtered(self, *expressions: str) -> list[Record]:
        """Fetch the records matching all filter expressions.

        Args:
            expressions: Comparisons such as ``"qty>50"``, ``"pri<=2.8"`` or
                ``"name=Hello World"``. Malformed ones are ignored.

        Returns:
            Matching records; every record when no expression parses.
        """
        query = compile_filters(expressions)
        address = self.address.descend(f"?{query}") if query else self.address
        return self._records(self.connection(address).json("GET"))

    def get_schema(self) -> Record:
        """Field metadata the server reports for creating records.

        Returns the ``actions.POST`` object of the OPTIONS response, e.g.
        ``{"name": {"type": "string", "required": true, ...}, ...}``.
        """
        data = self.connection().json("OPTIONS")
        try:
            schema = data["actions"]["POST"]
        except (KeyError, TypeError) as e:
            raise MalformedResponseError(
                f"OPTIONS {self.address.url} did not describe POST fields"
            ) from e
        return self._record(schema)

    def get_fields(self) -> dict[str, FieldSchema]:
        return FieldSchema.from_schema(self.get_schema().to_dict())

    # Writes

    def add(self, *records: Record) -> list[Record]:
        """Create records, one POST each.

        Returns:
            New records built from the server's answers, including
            server-assigned fields such as ``id``. The arguments are not
            modified.
        """
        return [self._write(self.address, "POST", record) for record in records]

    def update(
        self,
        record: Record,
        key: Any = None,
        overwrite: bool = False,
    ) -> Record:
        """Update the record stored under ``key``.

        With ``overwrite`` the record replaces the stored one (PUT) and must
        carry every required field, otherwise the server rejects it with 400.
        Without it only the fields present in ``record`` change (PATCH).

        Args:
            record: Fields to send.
            key: Primary key to update; defaults to ``record.primary_key``.
            overwrite: Replace instead of merge.

        Returns:
            A new record built from the server's answer, or from the sent
            fields when the server answers 204 No Content.

        Raises:
            UnsupportedOperationError: No key given and the record has none.
        """
        if key is None:
            key = record.primary_key
            if key is None:
                raise UnsupportedOperationError("record primary key not specified")

        method = "PUT" if overwrite else "PATCH"
        return self._write(self.address.descend(key), method, record)

    def _write(self, address: ResourceAddress, method: str, record: Record) -> Record:
        connection = self.connection(address)
        response = connection.execute(method, files=record.to_request_body())
        # 204 or an empty body: the server kept what was sent
        if response.status_code == NO_CONTENT or not response.content:
            return record.apply(record.to_dict(), self)
        return record.apply(connection.decode(response), self)

    def delete(self, *keys: Any) -> bool:
        """Delete records by key, one DELETE each.

        Every key is attempted even after a failure.

        Returns:
            True only if every DELETE answered 204 No Content.
        """
        success = True
        for key in keys:
            status = self.connection(self.address.descend(key)).status("DELETE")
            if status != NO_CONTENT:
                self._database.logger.warning(
                    "delete of %s/%s answered %d", self.name, key, status
                )
            success &= status == NO_CONTENT
        return success

    # Links

    def _check_origin(self, url: str) -> ResourceAddress:
        if self._database.same_origin and not self.address.same_origin(url):
            raise UnsupportedOperationError(
                f"{url} is not served by {self.address.host}"
            )
        return self.address.resolve(url)

    def follow(self, url: str) -> Record:
        """Fetch the record a foreign-key URL points to."""
        address = self._check_origin(url)
        data = self.connection(address).json("GET")
        table = self._database.table_for(address.url) or self
        return table._record(data)

    def download(self, url: str) -> bytes:
        """Fetch the raw content behind a file URL."""
        address = self._check_origin(url)
        return self.connection(address).execute("GET").content
