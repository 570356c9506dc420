"""Tests for local record behavior (no I/O)."""
import json
from datetime import date, datetime, timezone

import pytest

from appmate import Record, TypeMismatchError, UnsupportedOperationError
from appmate.record import PNG_CONTENT_TYPE


@pytest.fixture
def record():
    return Record(
        {
            "id": 1,
            "name": "x",
            "qty": 50,
            "price": 2.5,
            "flag": True,
            "flag_text": "False",
            "letter": "c",
            "count_text": "42",
            "big": 1000,
            "day": "2017-03-01",
            "stamp": "2017-03-01T08:30:00Z",
            "nothing": None,
        }
    )


def test_json_round_trip():
    text = '{"id": 1, "name": "x"}'
    record = Record.from_json(text)

    assert record.to_json() == text
    assert json.loads(str(record)) == {"id": 1, "name": "x"}
    assert list(record.to_dict()) == ["id", "name"]


def test_from_json_requires_object():
    with pytest.raises(TypeMismatchError):
        Record.from_json("[1, 2]")


def test_field_order_preserved():
    record = Record()
    for key in ["b", "a", "c"]:
        record[key] = key

    assert list(record) == ["b", "a", "c"]


def test_data_is_copied():
    data = {"tags": ["a"]}
    record = Record(data)
    data["tags"].append("b")

    assert record["tags"] == ["a"]
    record.to_dict()["tags"].append("c")
    assert record["tags"] == ["a"]


def test_mapping_protocol(record):
    assert len(record) == 12
    assert "name" in record
    assert "missing" not in record
    assert record.get("missing") is None
    assert not record.is_empty
    assert Record().is_empty


def test_primary_key(record):
    assert record.primary_key == 1
    assert Record({"name": "local"}).primary_key is None
    assert Record({"id": -1}).primary_key == -1


def test_primary_key_field_override():
    class SlugRecord(Record):
        primary_key_field = "slug"

    assert SlugRecord({"id": 1, "slug": "dune"}).primary_key == "dune"


def test_get_as_str(record):
    assert record.get_as_str("name") == "x"
    assert record.get_as_str("qty") == "50"
    assert record.get_as_str("flag") == "true"
    assert record.get_as_str("nothing") == ""


def test_get_as_bool(record):
    assert record.get_as_bool("flag") is True
    assert record.get_as_bool("flag_text") is False
    with pytest.raises(TypeMismatchError):
        record.get_as_bool("qty")


def test_get_as_int(record):
    assert record.get_as_int("qty") == 50
    assert record.get_as_int("count_text") == 42
    assert Record({"n": 3.0}).get_as_int("n") == 3
    for key in ["price", "name", "flag", "nothing"]:
        with pytest.raises(TypeMismatchError):
            record.get_as_int(key)


def test_get_as_byte(record):
    assert record.get_as_byte("qty") == 50
    with pytest.raises(TypeMismatchError):
        record.get_as_byte("big")


def test_get_as_char(record):
    assert record.get_as_char("letter") == "c"
    with pytest.raises(TypeMismatchError):
        record.get_as_char("count_text")
    with pytest.raises(TypeMismatchError):
        record.get_as_char("qty")


def test_get_as_float_and_double(record):
    assert record.get_as_double("price") == 2.5
    assert record.get_as_double("qty") == 50.0
    assert record.get_as_double("count_text") == 42.0
    assert Record({"f": 0.1}).get_as_float("f") != 0.1
    assert Record({"f": 0.1}).get_as_float("f") == pytest.approx(0.1)
    with pytest.raises(TypeMismatchError):
        record.get_as_double("flag")
    with pytest.raises(TypeMismatchError):
        Record({"f": 1e300}).get_as_float("f")
    with pytest.raises(TypeMismatchError):
        Record({"f": -1e39}).get_as_float("f")
    assert Record({"f": "inf"}).get_as_float("f") == float("inf")


def test_get_as_date(record):
    assert record.get_as_date("day") == date(2017, 3, 1)
    with pytest.raises(TypeMismatchError):
        record.get_as_date("name")
    with pytest.raises(TypeMismatchError):
        record.get_as_date("qty")


def test_get_as_datetime(record):
    value = record.get_as_datetime("stamp")

    assert value.replace(tzinfo=None) == datetime(2017, 3, 1, 8, 30)
    assert value.utcoffset().total_seconds() == 0
    with pytest.raises(TypeMismatchError):
        record.get_as_datetime("day")


def test_type_mismatch_is_type_error(record):
    with pytest.raises(TypeError):
        record.get_as_int("name")


def test_missing_field_raises_key_error(record):
    with pytest.raises(KeyError):
        record.get_as_int("missing")


def test_put_dates():
    record = Record()
    record.put("day", date(2017, 3, 1))
    record.put("stamp", datetime(2017, 3, 1, 8, 30, 5))
    # the Z is appended to the wall-clock time as given
    record.put("aware", datetime(2017, 3, 1, 8, 30, 5, tzinfo=timezone.utc))

    assert record["day"] == "2017-03-01"
    assert record["stamp"] == "2017-03-01T08:30:05Z"
    assert record["aware"] == "2017-03-01T08:30:05Z"


def test_put_dates_pad_early_years():
    record = Record()
    record.put("day", date(999, 1, 2))
    record.put("stamp", datetime(42, 1, 2, 3, 4, 5, 678))

    assert record["day"] == "0999-01-02"
    assert record["stamp"] == "0042-01-02T03:04:05Z"


def test_put_rejects_unsupported_type():
    with pytest.raises(TypeMismatchError):
        Record().put("blob", object())


def test_put_record_without_address():
    with pytest.raises(UnsupportedOperationError):
        Record().put("author", Record({"id": 1}))


def test_remove(record):
    assert record.remove("name") is True
    assert record.remove("name") is False
    assert "name" not in record


def test_clear(record):
    record.put_image("cover", "dune", b"png")
    record.clear()

    assert record.is_empty
    assert record.attachment("cover") is None


def test_entries(record):
    entries = dict(record.entries())

    assert entries["qty"] == "50"
    assert entries["flag"] == "true"
    assert entries["name"] == "x"


def test_put_image_appends_extension():
    record = Record()
    record.put_image("cover", "dune", b"\x89PNG")
    record.put_image("back", "back.PNG", b"\x89PNG")

    assert record["cover"] == "dune.png"
    assert record["back"] == "back.PNG"
    assert record.attachment("cover").content_type == PNG_CONTENT_TYPE
    assert record.get_as_binary("cover") == b"\x89PNG"


def test_reassigning_field_drops_attachment():
    record = Record()
    record.put_image("cover", "dune.png", b"blob")
    record["cover"] = "dune.png"

    assert record.attachment("cover") is None


def test_attachment_does_not_follow_value():
    record = Record()
    record.put_image("cover", "same.png", b"one")
    record["copy"] = record["cover"]

    assert record.attachment("copy") is None
    assert record.attachment("cover").content == b"one"


def test_request_body_plain_fields():
    record = Record({"name": "x", "qty": 50, "flag": False, "note": None})

    assert record.to_request_body() == [
        ("name", (None, b"x")),
        ("qty", (None, b"50")),
        ("flag", (None, b"false")),
        ("note", (None, b"")),
    ]


def test_request_body_distinct_attachments_with_same_filename():
    record = Record()
    record.put_image("front", "same.png", b"front-bytes")
    record["title"] = "Dune"
    record.put_image("back", "same.png", b"back-bytes")

    assert record.to_request_body() == [
        ("front", ("same.png", b"front-bytes", PNG_CONTENT_TYPE)),
        ("title", (None, b"Dune")),
        ("back", ("same.png", b"back-bytes", PNG_CONTENT_TYPE)),
    ]


def test_apply_returns_new_record(record):
    updated = record.apply({"id": 1, "name": "y"})

    assert updated is not record
    assert updated["name"] == "y"
    assert record["name"] == "x"


def test_unbound_record_cannot_follow_links():
    record = Record({"author": "http://db.example.com/api/author/1/", "cover": "x.png"})

    with pytest.raises(UnsupportedOperationError):
        record.get_as_record("author")
    with pytest.raises(UnsupportedOperationError):
        record.get_as_binary("cover")
    assert record.address is None
    assert record.url is None


def test_equality():
    assert Record({"a": 1}) == Record({"a": 1})
    assert Record({"a": 1}) == {"a": 1}
    assert Record({"a": 1}) != Record({"a": 2})
