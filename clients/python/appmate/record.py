"""Schema-less records.

A :class:`Record` is an ordered mapping from field name to JSON value
(``None``, ``bool``, ``int``, ``float``, ``str``, ``list`` or ``dict``). Values
stay in their JSON form; the ``get_as_*`` accessors coerce on read and raise
:class:`~appmate.exceptions.TypeMismatchError` when they cannot.

Usage:
    record = Record()
    record["name"] = "Alice"
    record.put("birthday", date(1990, 5, 17))
    record.put_image("avatar", "alice", png_bytes)

    created = table.add(record)[0]
    created.primary_key  # server-assigned id
"""

import copy
import itertools
import json
import math
import struct
from collections.abc import MutableMapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Iterator, Mapping

import aniso8601

from .address import ResourceAddress
from .exceptions import (
    MalformedResponseError,
    TypeMismatchError,
    UnsupportedOperationError,
)

if TYPE_CHECKING:
    from .table import Table

PNG_CONTENT_TYPE = "image/png"
OCTET_STREAM = "application/octet-stream"

_JSON_SCALARS = (type(None), bool, int, float, str)

_attachment_tokens = itertools.count(1)


@dataclass(frozen=True)
class Attachment:
    """Binary content uploaded with a field; the field value is its filename."""

    content: bytes
    content_type: str = OCTET_STREAM


def render(value: Any) -> str:
    """String form of a JSON value as sent in a form part."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


class Record(MutableMapping):
    """Ordered field mapping backed by a JSON object.

    Args:
        data: Initial fields; copied, never aliased.
        table: Table the record was read from. Needed to follow foreign keys
            and to download binary fields.
    """

    primary_key_field = "id"

    def __init__(self, data: Mapping[str, Any] | None = None, table: "Table | None" = None):
        self._data: dict[str, Any] = {}
        self._table = table
        # field name -> attachment token -> blob; the token is dropped whenever
        # the field is reassigned so a blob never outlives its filename value
        self._tokens: dict[str, int] = {}
        self._attachments: dict[int, Attachment] = {}
        if data:
            for key, value in data.items():
                self._data[str(key)] = copy.deepcopy(value)

    @classmethod
    def from_json(cls, text: str, table: "Table | None" = None) -> "Record":
        """Create a Record from a JSON object document."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise TypeMismatchError(f"expected a JSON object, got {type(data).__name__}")
        return cls(data, table)

    def apply(self, data: Any, table: "Table | None" = None) -> "Record":
        """Return a new record holding ``data``.

        Used after a create or update: the server's answer becomes a fresh
        record bound to ``table`` (default: this record's table) and this one
        is left as it was. Rebind your variable to keep the server's view.
        """
        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"expected a JSON object, got {type(data).__name__}"
            )
        return type(self)(data, table or self._table)

    # Mapping protocol

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.put(key, value)

    def __delitem__(self, key: str) -> None:
        del self._data[key]
        self._detach(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Record({self._data!r})"

    def __str__(self) -> str:
        return self.to_json()

    # Properties

    @property
    def table(self) -> "Table | None":
        return self._table

    @property
    def is_empty(self) -> bool:
        return not self._data

    @property
    def primary_key(self) -> Any:
        """Value of the primary key field, or None for a local record."""
        return self._data.get(self.primary_key_field)

    @property
    def address(self) -> ResourceAddress | None:
        """Resource address of this record, if it has a table and a key."""
        if self._table is None or self.primary_key is None:
            return None
        return self._table.address.descend(self.primary_key)

    @property
    def url(self) -> str | None:
        address = self.address
        return address.url if address is not None else None

    # Conversion

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def to_json(self) -> str:
        return json.dumps(self._data)

    def entries(self) -> list[tuple[str, str]]:
        """Field name and string value pairs, in field order."""
        return [(key, render(value)) for key, value in self._data.items()]

    def to_request_body(self) -> list[tuple[str, tuple[Any, ...]]]:
        """Encode the fields as ordered ``multipart/form-data`` parts.

        Fields carrying an attachment become file parts named after the
        field, with the field value as filename. All other fields become
        plain text parts.

        Returns:
            Parts in the format of the httpx ``files`` argument.
        """
        parts = []
        for key, value in self._data.items():
            attachment = self.attachment(key)
            if attachment is not None:
                parts.append(
                    (key, (render(value), attachment.content, attachment.content_type))
                )
            else:
                parts.append((key, (None, render(value).encode("utf-8"))))
        return parts

    # Getters

    def _value(self, key: str) -> Any:
        return self._data[key]

    def _mismatch(self, key: str, target: str) -> TypeMismatchError:
        value = self._data[key]
        return TypeMismatchError(
            f"field {key!r} holds {type(value).__name__} {value!r}, not {target}"
        )

    def get_as_str(self, key: str) -> str:
        """Value as text: strings as-is, anything else as its JSON form."""
        return render(self._value(key))

    def get_as_bool(self, key: str) -> bool:
        value = self._value(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        raise self._mismatch(key, "bool")

    def get_as_int(self, key: str) -> int:
        value = self._value(key)
        if isinstance(value, bool):
            raise self._mismatch(key, "int")
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        raise self._mismatch(key, "int")

    def get_as_byte(self, key: str) -> int:
        """Integer value restricted to the signed 8-bit range."""
        value = self.get_as_int(key)
        if not -128 <= value <= 127:
            raise self._mismatch(key, "byte")
        return value

    def get_as_char(self, key: str) -> str:
        value = self._value(key)
        if isinstance(value, str) and len(value) == 1:
            return value
        raise self._mismatch(key, "char")

    def get_as_double(self, key: str) -> float:
        value = self._value(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                pass
        raise self._mismatch(key, "float")

    def get_as_float(self, key: str) -> float:
        """Value rounded to single precision."""
        value = self.get_as_double(key)
        try:
            result = struct.unpack("f", struct.pack("f", value))[0]
        except OverflowError:
            raise self._mismatch(key, "single precision float") from None
        # newer interpreters pack out-of-range doubles as inf
        if math.isinf(result) and not math.isinf(value):
            raise self._mismatch(key, "single precision float")
        return result

    def get_as_date(self, key: str) -> date:
        value = self._value(key)
        if isinstance(value, str):
            try:
                return aniso8601.parse_date(value)
            except (ValueError, NotImplementedError):
                pass
        raise self._mismatch(key, "date")

    def get_as_datetime(self, key: str) -> datetime:
        """Parse an ISO 8601 date-time such as ``2017-03-01T08:30:00Z``."""
        value = self._value(key)
        if isinstance(value, str):
            try:
                return aniso8601.parse_datetime(value)
            except (ValueError, NotImplementedError):
                pass
        raise self._mismatch(key, "datetime")

    def get_as_record(self, key: str) -> "Record":
        """Follow the URL stored in ``key`` and return the referenced record.

        Raises:
            UnsupportedOperationError: The record has no table, or the URL
                leaves the table's origin while same-origin checks are on.
        """
        table = self._require_table(key)
        return table.follow(self.get_as_str(key))

    def get_as_binary(self, key: str) -> bytes:
        """Content of a binary field.

        Returns the local attachment if one was set, otherwise downloads the
        URL stored in the field. Downloads are not cached.
        """
        attachment = self.attachment(key)
        if attachment is not None:
            return attachment.content
        table = self._require_table(key)
        return table.download(self.get_as_str(key))

    def attachment(self, key: str) -> Attachment | None:
        token = self._tokens.get(key)
        if token is None:
            return None
        return self._attachments.get(token)

    def _require_table(self, key: str) -> "Table":
        if self._table is None:
            raise UnsupportedOperationError(
                f"cannot resolve field {key!r}: record is not bound to a table"
            )
        return self._table

    # Setters

    def put(self, key: str, value: Any) -> None:
        """Set a field.

        Dates are stored as ``yyyy-MM-dd``, date-times as
        ``yyyy-MM-ddTHH:mm:ssZ`` and records as their resource URL.
        """
        if isinstance(value, Record):
            self.put_record(key, value)
            return

        if isinstance(value, datetime):
            # the Z is literal: the time is formatted as given, not converted
            value = value.replace(microsecond=0, tzinfo=None).isoformat() + "Z"
        elif isinstance(value, date):
            value = value.isoformat()
        elif isinstance(value, (list, dict)):
            value = copy.deepcopy(value)
        elif not isinstance(value, _JSON_SCALARS):
            raise TypeMismatchError(
                f"cannot store {type(value).__name__} in field {key!r}"
            )

        self._detach(key)
        self._data[key] = value

    def put_record(self, key: str, other: "Record") -> None:
        """Store a reference to ``other`` (its resource URL) in ``key``."""
        url = other.url
        if url is None:
            raise UnsupportedOperationError(
                "cannot reference a record without table and primary key"
            )
        self._detach(key)
        self._data[key] = url

    def put_attachment(
        self,
        key: str,
        filename: str,
        content: bytes,
        content_type: str = OCTET_STREAM,
    ) -> None:
        """Set ``key`` to ``filename`` and upload ``content`` with it."""
        self._detach(key)
        self._data[key] = filename
        token = next(_attachment_tokens)
        self._tokens[key] = token
        self._attachments[token] = Attachment(bytes(content), content_type)

    def put_image(self, key: str, filename: str, content: bytes) -> None:
        """Attach PNG data; ``.png`` is appended to the filename if missing."""
        if not filename.lower().endswith(".png"):
            filename += ".png"
        self.put_attachment(key, filename, content, PNG_CONTENT_TYPE)

    def remove(self, key: str) -> bool:
        """Remove a field. Returns False if it was not present."""
        if key not in self._data:
            return False
        del self[key]
        return True

    def clear(self) -> None:
        self._data.clear()
        self._tokens.clear()
        self._attachments.clear()

    def _detach(self, key: str) -> None:
        token = self._tokens.pop(key, None)
        if token is not None:
            self._attachments.pop(token, None)
