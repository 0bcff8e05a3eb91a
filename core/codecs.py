"""Body serialization strategies dispatched by content type.

Request bodies are encoded by exact content type (``""`` and
``application/json`` mean JSON, ``application/xml`` means XML). Response
bodies are decoded by substring match on the effective content type, with a
JSON fallback for anything unrecognized.
"""

import dataclasses
import json
import re
from collections.abc import Callable, Mapping
from typing import Any
from xml.etree.ElementTree import Element, ParseError, SubElement, tostring

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET
from pydantic import BaseModel, TypeAdapter

from core.exceptions import (
    ResponseDecodeError,
    SerializationError,
    TargetError,
    UnsupportedContentType,
    UnsupportedResponseFormat,
)
from core.targets import populate_target

JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "application/xml"

XML_ROOT_TAG = "root"
XML_ITEM_TAG = "item"

_XML_NAME = re.compile(r"^[A-Za-z_][\w.\-]*$")

_PLAIN = TypeAdapter(Any)


def to_plain(value: Any) -> Any:
    """Convert a value into JSON-compatible containers, recursively.

    Models, dataclasses, datetimes and UUIDs are converted wherever they
    appear in the value.
    """
    return _PLAIN.dump_python(value, mode="json", by_alias=True)


def encode_json(value: Any) -> bytes:
    return json.dumps(to_plain(value), ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def decode_json(data: bytes) -> Any:
    return json.loads(data)


def encode_xml(value: Any) -> bytes:
    """Encode a value as an XML document.

    Models and dataclasses are rooted at an element named after their class,
    everything else at ``<root>``. Mapping keys become child elements, keys
    starting with ``@`` become attributes and lists become repeated elements.
    """
    if isinstance(value, BaseModel) or (
        dataclasses.is_dataclass(value) and not isinstance(value, type)
    ):
        root = Element(type(value).__name__)
    else:
        root = Element(XML_ROOT_TAG)
    _fill_element(root, to_plain(value))
    return tostring(root, encoding="unicode").encode("utf-8")


def _fill_element(element: Element, value: Any) -> None:
    if isinstance(value, Mapping):
        for key, item in value.items():
            key = str(key)
            if item is None:
                continue
            if key.startswith("@"):
                element.set(_xml_name(key[1:]), _xml_text(item))
            elif isinstance(item, (list, tuple)):
                for entry in item:
                    _fill_element(SubElement(element, _xml_name(key)), entry)
            else:
                _fill_element(SubElement(element, _xml_name(key)), item)
    elif isinstance(value, (list, tuple)):
        for entry in value:
            _fill_element(SubElement(element, XML_ITEM_TAG), entry)
    elif value is not None:
        element.text = _xml_text(value)


def _xml_name(name: str) -> str:
    if not _XML_NAME.match(name):
        raise ValueError(f"invalid XML name: {name!r}")
    return name


def _xml_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise TypeError(f"cannot encode {type(value).__name__} as XML text")


def decode_xml(data: bytes) -> Any:
    """Decode an XML document into the content of its root element."""
    return _element_value(DefusedET.fromstring(data))


def _element_value(element: Element) -> Any:
    children = list(element)
    if not children and not element.attrib:
        return element.text or ""

    result: dict[str, Any] = {f"@{key}": value for key, value in element.attrib.items()}
    if not children and element.text and element.text.strip():
        result["#text"] = element.text
    grouped: dict[str, list[Any]] = {}
    for child in children:
        grouped.setdefault(_local_name(child.tag), []).append(_element_value(child))
    for tag, values in grouped.items():
        result[tag] = values[0] if len(values) == 1 else values
    return result


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


_ENCODERS: dict[str, Callable[[Any], bytes]] = {
    "": encode_json,
    JSON_CONTENT_TYPE: encode_json,
    XML_CONTENT_TYPE: encode_xml,
}

_DECODE_ERRORS = (ValueError, ParseError, DefusedXmlException, TargetError)


def encode_body(value: Any, content_type: str) -> bytes:
    """Prepare a request body; raw bytes and strings pass through untouched."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")

    return serialize(value, content_type)


def serialize(value: Any, content_type: str) -> bytes:
    """Encode any value, strings included, in the format named by ``content_type``."""
    encoder = _ENCODERS.get(content_type)
    if encoder is None:
        raise UnsupportedContentType(content_type)
    try:
        return encoder(value)
    except (TypeError, ValueError) as e:
        raise SerializationError("error marshal request body", e) from e


def decode_into(target: Any, data: bytes, content_type: str) -> None:
    """Decode a response body into ``target`` according to ``content_type``."""
    if JSON_CONTENT_TYPE in content_type or content_type == "":
        try:
            populate_target(target, decode_json(data))
        except _DECODE_ERRORS as e:
            raise ResponseDecodeError("failed to unmarshal JSON response", e) from e
    elif XML_CONTENT_TYPE in content_type:
        try:
            populate_target(target, decode_xml(data))
        except _DECODE_ERRORS as e:
            raise ResponseDecodeError("failed to unmarshal XML response", e) from e
    else:
        try:
            populate_target(target, decode_json(data))
        except _DECODE_ERRORS as e:
            raise UnsupportedResponseFormat(content_type, e) from e
