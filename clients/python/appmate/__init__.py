"""AppMate Python Client.

A Python client for tabular REST APIs that serve tables of records under
``/api/<table>/`` with HTTP Basic authentication.

Usage:
    from appmate import Database, Record

    db = Database("user:secret@db.example.com:8000")
    books = db.table("book")

    # Query records
    cheap = books.get_filtered("price<10", "stock>0")

    # Create a record
    record = Record()
    record["title"] = "Dune"
    created = books.add(record)[0]

    # Update it
    created["stock"] = 3
    created = books.update(created)

    # Delete it
    books.delete(created.primary_key)
"""

from .address import ResourceAddress
from .auth import AuthContext
from .connection import Connection
from .database import Database
from .exceptions import (
    AppmateError,
    DuplicateCredentialsError,
    MalformedResourceError,
    MalformedResponseError,
    NotFoundError,
    TransportError,
    TypeMismatchError,
    UnexpectedStatusError,
    UnsupportedOperationError,
)
from .filters import compile_filters
from .host import HostSpec, parse_host
from .record import Attachment, Record
from .table import Table
from .types import FieldSchema

__version__ = "1.3.2"
__all__ = [
    "Database",
    "Table",
    "Record",
    "Attachment",
    "HostSpec",
    "parse_host",
    "AuthContext",
    "ResourceAddress",
    "Connection",
    "compile_filters",
    "FieldSchema",
    "AppmateError",
    "MalformedResourceError",
    "DuplicateCredentialsError",
    "TransportError",
    "UnexpectedStatusError",
    "NotFoundError",
    "MalformedResponseError",
    "TypeMismatchError",
    "UnsupportedOperationError",
]
