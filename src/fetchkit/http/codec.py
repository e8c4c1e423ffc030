# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request body encoding and content-type driven response decoding.

Decode targets mirror how callers describe the shape they expect:

- ``None``: the generic parsed value is returned.
- a dataclass instance: its fields are filled in place.
- a dataclass type: a new instance is built and returned.
- a ``dict`` / ``list`` instance: updated / replaced in place.
- any other type (``dict``, ``str`` ...): the parsed value is type-checked and returned.

Dataclass fields map to JSON keys and XML child tags by name, or by
``field(metadata={"json": "userId", "xml": "user-id"})`` when the wire name differs.
"""

from __future__ import annotations

import dataclasses
import json
import types
import typing
from collections.abc import Mapping
from typing import Any
from xml.etree import ElementTree

from ..errors import DecodeError, EncodeError, UnsupportedContentTypeError
from .headers import media_type

JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "application/xml"


def _jsonable_dataclass(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.metadata.get("json", f.name): getattr(value, f.name) for f in dataclasses.fields(value)}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_body(value: Any) -> bytes:
    """Serialize a request body as JSON. Non-finite floats are rejected."""
    try:
        return json.dumps(value, allow_nan=False, default=_jsonable_dataclass).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise EncodeError(f"json: unsupported value: {exc}") from exc


def _element_to_value(element: ElementTree.Element) -> Any:
    children = list(element)
    if not children and not element.attrib:
        return element.text or ""

    out: dict[str, Any] = {f"@{name}": value for name, value in element.attrib.items()}
    for child in children:
        value = _element_to_value(child)
        if child.tag in out:
            existing = out[child.tag]
            if not isinstance(existing, list):
                out[child.tag] = [existing]
            out[child.tag].append(value)
        else:
            out[child.tag] = value
    text = (element.text or "").strip()
    if text:
        out["#text"] = text
    return out


def parse_json(data: bytes) -> Any:
    try:
        return json.loads(data)
    except (ValueError, UnicodeDecodeError) as exc:
        raise DecodeError(str(exc)) from exc


def parse_xml(data: bytes) -> Any:
    """Parse an XML document into nested dicts keyed by child tag; leaves become their text."""
    try:
        root = ElementTree.fromstring(data)
    except ElementTree.ParseError as exc:
        raise DecodeError(f"XML syntax error: {exc}") from exc
    return _element_to_value(root)


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        return {}


_UNION_ORIGINS = (typing.Union, types.UnionType)


def _allows_none(hint: Any) -> bool:
    if hint is None or hint is Any:
        return True
    return typing.get_origin(hint) in _UNION_ORIGINS and type(None) in typing.get_args(hint)


def _strip_optional(hint: Any) -> Any:
    """`X | None` -> `X`; other hints are returned unchanged."""
    if typing.get_origin(hint) not in _UNION_ORIGINS:
        return hint
    args = [arg for arg in typing.get_args(hint) if arg is not type(None)]
    return args[0] if len(args) == 1 else hint


def _is_dataclass_type(hint: Any) -> bool:
    return isinstance(hint, type) and dataclasses.is_dataclass(hint)


def _is_dataclass_instance(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _xml_leaf_as_mapping(value: Any) -> Any:
    # A childless element parses to its text; a struct-shaped target reads it as no fields.
    if isinstance(value, str):
        text = value.strip()
        return {"#text": text} if text else {}
    return value


def _coerce_scalar(value: str, hint: Any) -> Any:
    if hint is bool:
        lowered = value.strip().lower()
        if lowered in {"true", "1"}:
            return True
        if lowered in {"false", "0", ""}:
            return False
        raise DecodeError(f'strconv.ParseBool: parsing "{value}": invalid syntax')
    try:
        return hint(value.strip())
    except ValueError as exc:
        raise DecodeError(f'cannot parse "{value}" as {hint.__name__}') from exc


def _convert(value: Any, hint: Any, fmt: str, current: Any = None) -> Any:
    if value is None:
        return None
    hint = _strip_optional(hint)
    if _is_dataclass_instance(current):
        if fmt == "xml":
            value = _xml_leaf_as_mapping(value)
        _populate(current, value, fmt)
        return current
    if _is_dataclass_type(hint):
        if fmt == "xml":
            value = _xml_leaf_as_mapping(value)
        return _build(hint, value, fmt)

    origin = typing.get_origin(hint)
    args = typing.get_args(hint)
    if origin is list:
        # XML yields a single value for a tag that occurs once.
        if fmt == "xml" and not isinstance(value, list):
            value = [value]
        if isinstance(value, list):
            item_hint = args[0] if args else Any
            return [_convert(item, item_hint, fmt) for item in value]
        return value
    if origin is dict and isinstance(value, Mapping):
        item_hint = args[1] if len(args) == 2 else Any
        return {key: _convert(item, item_hint, fmt) for key, item in value.items()}

    if fmt == "xml" and isinstance(value, str) and hint in (int, float, bool):
        return _coerce_scalar(value, hint)
    return value


def _require_mapping(data: Any, cls: type) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise DecodeError(f"cannot unmarshal {type(data).__name__} into value of type {cls.__name__}")
    return data


def _populate(instance: Any, data: Any, fmt: str) -> None:
    cls = type(instance)
    mapping = _require_mapping(data, cls)
    hints = _type_hints(cls)
    for f in dataclasses.fields(instance):
        key = f.metadata.get(fmt, f.name)
        if key not in mapping:
            continue
        hint = hints.get(f.name)
        current = getattr(instance, f.name, None)
        value = mapping[key]
        # null leaves a field that cannot hold None untouched.
        if value is None and (not _allows_none(hint) or (hint is None and _is_dataclass_instance(current))):
            continue
        setattr(instance, f.name, _convert(value, hint, fmt, current))


def _build(cls: type, data: Any, fmt: str) -> Any:
    mapping = _require_mapping(data, cls)
    hints = _type_hints(cls)
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        key = f.metadata.get(fmt, f.name)
        if key not in mapping:
            continue
        hint = hints.get(f.name)
        if mapping[key] is None and not _allows_none(hint):
            continue
        kwargs[f.name] = _convert(mapping[key], hint, fmt)
    try:
        return cls(**kwargs)
    except TypeError as exc:
        raise DecodeError(f"cannot build {cls.__name__}: {exc}") from exc


def assign(parsed: Any, target: Any, fmt: str = "json") -> Any:
    """Store a parsed document into `target` and return the decoded value."""
    if target is None:
        return parsed
    if fmt == "xml" and (_is_dataclass_type(target) or _is_dataclass_instance(target) or isinstance(target, dict)):
        parsed = _xml_leaf_as_mapping(parsed)
    if isinstance(target, type):
        if dataclasses.is_dataclass(target):
            return _build(target, parsed, fmt)
        if not isinstance(parsed, target):
            raise DecodeError(f"cannot unmarshal {type(parsed).__name__} into value of type {target.__name__}")
        return parsed
    if dataclasses.is_dataclass(target):
        _populate(target, parsed, fmt)
        return target
    if isinstance(target, dict):
        if not isinstance(parsed, Mapping):
            raise DecodeError(f"cannot unmarshal {type(parsed).__name__} into value of type dict")
        target.update(parsed)
        return target
    if isinstance(target, list):
        if not isinstance(parsed, list):
            raise DecodeError(f"cannot unmarshal {type(parsed).__name__} into value of type list")
        target[:] = parsed
        return target
    raise DecodeError(f"unsupported decode target of type {type(target).__name__}")


def decode_body(content_type: str | None, data: bytes, target: Any = None) -> Any:
    """
    Decode `data` according to its declared content type into `target`.

    Only `application/json` and `application/xml` are understood (media type parameters
    such as charset are ignored); anything else raises UnsupportedContentTypeError.
    """
    kind = media_type(content_type)
    if kind == JSON_CONTENT_TYPE:
        return assign(parse_json(data), target, "json")
    if kind == XML_CONTENT_TYPE:
        return assign(parse_xml(data), target, "xml")
    raise UnsupportedContentTypeError(content_type)


__all__ = [
    "JSON_CONTENT_TYPE",
    "XML_CONTENT_TYPE",
    "assign",
    "decode_body",
    "encode_body",
    "parse_json",
    "parse_xml",
]
