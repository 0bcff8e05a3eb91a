from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

import pytest
from pydantic import BaseModel, Field

from core.codecs import (
    decode_into,
    decode_json,
    decode_xml,
    encode_body,
    encode_json,
    encode_xml,
)
from core.exceptions import (
    ResponseDecodeError,
    SerializationError,
    UnsupportedContentType,
    UnsupportedResponseFormat,
)


class Note(BaseModel):
    to: str
    from_: str = Field(alias="from")
    tags: list[str] = []


@dataclass
class Point:
    x: int
    y: int


@pytest.mark.parametrize("content_type", ["application/json", "application/xml"])
def test_model_round_trip(content_type):
    original = Note(to="Alice", tags=["a", "b"], **{"from": "Bob"})
    data = encode_body(original, content_type)

    target = Note(to="", **{"from": ""})
    decode_into(target, data, content_type)
    assert target == original


def test_single_xml_element_fills_list_field():
    target = Note(to="", **{"from": ""})
    decode_into(target, b"<Note><to>A</to><from>B</from><tags>only</tags></Note>", "application/xml")
    assert target.tags == ["only"]


class Reading(BaseModel):
    sensor: str = ""
    value: int = 0
    active: bool = False


@dataclass
class Sample:
    sensor: str = ""
    value: int = 0
    active: bool = False


@pytest.mark.parametrize(
    ("original", "empty", "content_type"),
    [
        (Reading(sensor="s1", value=5, active=True), Reading(), "application/json"),
        (Reading(sensor="s1", value=5, active=True), Reading(), "application/xml"),
        (Sample(sensor="s1", value=5, active=True), Sample(), "application/json"),
        (Sample(sensor="s1", value=5, active=True), Sample(), "application/xml"),
        ({"sensor": "s1", "value": 5, "active": True}, {}, "application/json"),
        # plain XML carries no types, so a dict target gets text back
        ({"sensor": "s1", "value": "5", "active": "true"}, {}, "application/xml"),
    ],
    ids=["model-json", "model-xml", "dataclass-json", "dataclass-xml", "dict-json", "dict-xml"],
)
def test_typed_round_trip(original, empty, content_type):
    decode_into(empty, encode_body(original, content_type), content_type)
    assert empty == original


def test_dataclass_xml_values_are_typed():
    target = Point(0, 0)
    decode_into(target, encode_xml(Point(1, 2)), "application/xml")
    assert target == Point(1, 2)
    assert isinstance(target.x, int)


def test_nested_values_in_mapping_body():
    body = {
        "note": Note(to="Alice", **{"from": "Bob"}),
        "at": Point(1, 2),
        "when": datetime(2024, 1, 2, 3, 4, 5),
        "ref": UUID("12345678-1234-5678-1234-567812345678"),
    }
    assert decode_json(encode_body(body, "application/json")) == {
        "note": {"to": "Alice", "from": "Bob", "tags": []},
        "at": {"x": 1, "y": 2},
        "when": "2024-01-02T03:04:05",
        "ref": "12345678-1234-5678-1234-567812345678",
    }


def test_nested_values_in_xml_body():
    assert encode_body({"at": Point(1, 2)}, "application/xml") == (
        b"<root><at><x>1</x><y>2</y></at></root>"
    )


def test_encode_json_is_compact():
    assert encode_json({"id": 1, "title": "Hello"}) == b'{"id":1,"title":"Hello"}'
    assert encode_json(Point(1, 2)) == b'{"x":1,"y":2}'


def test_encode_json_keeps_unicode():
    assert encode_json({"name": "Zoë"}) == '{"name":"Zoë"}'.encode("utf-8")


def test_encode_xml_shapes():
    assert encode_xml(Point(1, 2)) == b"<Point><x>1</x><y>2</y></Point>"
    assert encode_xml({"@id": 3, "ok": True, "skip": None}) == b'<root id="3"><ok>true</ok></root>'
    assert encode_xml([1, 2]) == b"<root><item>1</item><item>2</item></root>"


def test_encode_xml_rejects_bad_names():
    with pytest.raises(SerializationError):
        encode_body({"not a tag": 1}, "application/xml")


def test_decode_xml_structure():
    data = b'<feed xmlns="urn:x"><entry id="1">a</entry><entry id="2">b</entry><title>t</title></feed>'
    assert decode_xml(data) == {
        "entry": [{"@id": "1", "#text": "a"}, {"@id": "2", "#text": "b"}],
        "title": "t",
    }


def test_decode_xml_rejects_entity_expansion():
    bomb = b'<!DOCTYPE x [<!ENTITY a "aaaa">]><x>&a;</x>'
    with pytest.raises(ResponseDecodeError):
        decode_into({}, bomb, "application/xml")


def test_decode_json_accepts_bytes():
    assert decode_json(b'{"a": [1, 2]}') == {"a": [1, 2]}


def test_raw_bodies_pass_through():
    assert encode_body(b"\x00\x01", "anything/at-all") == b"\x00\x01"
    assert encode_body(bytearray(b"ab"), "") == b"ab"
    assert encode_body("héllo", "text/plain") == "héllo".encode("utf-8")


def test_content_type_match_is_exact_for_requests():
    with pytest.raises(UnsupportedContentType):
        encode_body({"a": 1}, "application/json; charset=utf-8")


def test_response_content_type_match_is_substring():
    target: dict = {}
    decode_into(target, b'{"a": 1}', "application/json; charset=utf-8")
    assert target == {"a": 1}

    decode_into(target, b"<r><b>2</b></r>", "application/xml; charset=utf-8")
    assert target == {"a": 1, "b": "2"}


def test_empty_content_type_decodes_json():
    target: list = []
    decode_into(target, b"[1, 2, 3]", "")
    assert target == [1, 2, 3]


def test_unknown_content_type_with_invalid_json():
    with pytest.raises(UnsupportedResponseFormat) as exc_info:
        decode_into({}, b"RAW DATA", "text/plain")
    assert exc_info.value.content_type == "text/plain"
    assert isinstance(exc_info.value.cause, ValueError)
