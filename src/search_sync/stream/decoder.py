"""Decoding of inbound payloads and DynamoDB typed attribute images."""

import json
import math
import re
from collections.abc import Callable
from typing import Any

import structlog
from pydantic import ValidationError

from search_sync.errors import DecodeError, UnknownEventError
from search_sync.stream.types import (
    AttributeMap,
    ChangeBatch,
    ChangeRecord,
    InboundEvent,
    QueryInvocation,
)

logger = structlog.get_logger()

Document = dict[str, Any]

_NUMBER_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


def _to_number(text: Any) -> int | float:
    """Convert a DynamoDB number string to int or float.

    Only plain decimal or exponent notation is accepted; ``NaN``,
    infinities and underscore separators are rejected.

    Args:
        text: Number as transmitted in an ``N`` attribute.

    Returns:
        An int for integral text, a float otherwise.

    Raises:
        DecodeError: If the text is not a finite number.
    """
    if not isinstance(text, str):
        raise DecodeError(f"Number attribute must be a string, got {text!r}")
    if not _NUMBER_PATTERN.fullmatch(text):
        raise DecodeError(f"Malformed number attribute: {text!r}")
    if _INTEGER_PATTERN.fullmatch(text):
        return int(text)

    number = float(text)
    if not math.isfinite(number):
        raise DecodeError(f"Number attribute out of range: {text!r}")
    return number


def _to_str(value: Any, tag: str = "S") -> str:
    if not isinstance(value, str):
        raise DecodeError(f"{tag} attribute must be a string, got {value!r}")
    return value


def _to_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise DecodeError(f"BOOL attribute must be a boolean, got {value!r}")
    return value


def _to_null(value: Any) -> None:
    if value is not True:
        raise DecodeError(f"NULL attribute must be true, got {value!r}")
    return None


def _to_list(value: Any, tag: str) -> list[Any]:
    if not isinstance(value, list):
        raise DecodeError(f"{tag} attribute must be a list, got {type(value).__name__}")
    return value


def _to_map(value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(f"M attribute must be a mapping, got {type(value).__name__}")
    return {key: deserialize_attribute(item) for key, item in value.items()}


_DESERIALIZERS: dict[str, Callable[[Any], Any]] = {
    "S": _to_str,
    "N": _to_number,
    "B": lambda value: _to_str(value, "B"),
    "BOOL": _to_bool,
    "NULL": _to_null,
    "M": _to_map,
    "L": lambda value: [deserialize_attribute(item) for item in _to_list(value, "L")],
    "SS": lambda value: [_to_str(item, "SS") for item in _to_list(value, "SS")],
    "NS": lambda value: [_to_number(item) for item in _to_list(value, "NS")],
    "BS": lambda value: [_to_str(item, "BS") for item in _to_list(value, "BS")],
}


def deserialize_attribute(attribute: Any) -> Any:
    """Convert one typed attribute value into a plain Python value.

    Binary values are kept as their base64 text so documents stay
    JSON-serializable.

    Args:
        attribute: Single-tag mapping such as ``{"S": "text"}``.

    Returns:
        The plain value.

    Raises:
        DecodeError: If the value is not a single-tag mapping or the tag
            is unknown.
    """
    if not isinstance(attribute, dict) or len(attribute) != 1:
        raise DecodeError(f"Expected a single-tag attribute value, got {attribute!r}")

    tag, value = next(iter(attribute.items()))
    deserializer = _DESERIALIZERS.get(tag)
    if deserializer is None:
        raise DecodeError(f"Unknown attribute type tag: {tag!r}")
    return deserializer(value)


def deserialize_image(image: AttributeMap) -> Document:
    """Convert a typed attribute image into a plain document.

    Args:
        image: Attribute name to typed value mapping.

    Returns:
        Plain attribute map.
    """
    return {name: deserialize_attribute(value) for name, value in image.items()}


def decode_record(record: ChangeRecord) -> Document:
    """Decode the relevant image of a change record.

    The new image is used when present, otherwise the old image.

    Args:
        record: Validated stream record.

    Returns:
        Plain document for the changed item.

    Raises:
        DecodeError: If neither image is present or an attribute is malformed.
    """
    image = record.images.new_image
    if image is None:
        image = record.images.old_image
    if image is None:
        raise DecodeError("Change record carries no image", event_id=record.event_id)

    try:
        return deserialize_image(image)
    except DecodeError as e:
        e.event_id = record.event_id
        raise


def parse_event(payload: Any) -> InboundEvent:
    """Classify and validate an inbound payload.

    Accepts a stream batch mapping, a query invocation mapping, or the JSON
    text of either.

    Args:
        payload: Raw invocation payload.

    Returns:
        A ChangeBatch or a QueryInvocation.

    Raises:
        UnknownEventError: If the payload matches neither shape.
        DecodeError: If a stream batch contains a malformed record.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError:
            raise UnknownEventError("Payload is not valid JSON") from None

    if not isinstance(payload, dict):
        raise UnknownEventError(f"Unsupported payload type: {type(payload).__name__}")

    records = payload.get("Records")
    if isinstance(records, list) and records:
        try:
            return ChangeBatch.model_validate(payload)
        except ValidationError as e:
            raise DecodeError(f"Malformed change record: {e}") from e

    if "typeName" in payload:
        try:
            return QueryInvocation.model_validate(payload)
        except ValidationError as e:
            raise UnknownEventError(f"Malformed query invocation: {e}") from e

    logger.warning("event_unrecognized", keys=sorted(payload)[:10])
    raise UnknownEventError("Payload is neither a change batch nor a query invocation")
