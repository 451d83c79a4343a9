"""Rewrite AWS shapes into OpenAPI schema objects."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from aws_openapi.converter.context import schema_ref
from aws_openapi.converter.patterns import compatible_pattern
from aws_openapi.converter.text import clean
from aws_openapi.model.parser import MemberRef, Shape

logger = logging.getLogger(__name__)

# Members carried outside the body; the Location Extractor describes them.
RELOCATED_LOCATIONS = frozenset({"header", "headers", "uri", "querystring", "statusCode"})

_TYPE_MAP: dict[str, tuple[str, str | None]] = {
    "structure": ("object", None),
    "map": ("object", None),
    "list": ("array", None),
    "float": ("number", "float"),
    "double": ("number", "double"),
    "long": ("integer", None),
    "blob": ("string", None),
    "character": ("string", None),
    "timestamp": ("string", "date-time"),
}

_BOUND_NAMES: dict[str, tuple[str, str]] = {
    "string": ("minLength", "maxLength"),
    "character": ("minLength", "maxLength"),
    "blob": ("minLength", "maxLength"),
    "integer": ("minimum", "maximum"),
    "long": ("minimum", "maximum"),
    "float": ("minimum", "maximum"),
    "double": ("minimum", "maximum"),
    "list": ("minItems", "maxItems"),
    "map": ("minProperties", "maxProperties"),
}

_INTEGER_BOUNDS = frozenset(
    {"minLength", "maxLength", "minItems", "maxItems", "minProperties", "maxProperties"}
)


@dataclass
class RelocatedMember:
    """A structure member moved out of the body schema."""

    name: str
    member: MemberRef
    required: bool

    @property
    def wire_name(self) -> str:
        return self.member.location_name or self.name


@dataclass
class ShapeResult:
    schema: dict[str, Any]
    discovered: set[str] = field(default_factory=set)
    relocated: list[RelocatedMember] = field(default_factory=list)


def transform_shape(
    shape: Shape,
    *,
    name: str | None = None,
    xml_query: bool = False,
) -> ShapeResult:
    """Build the schema for one shape without touching the schema dictionary.

    Shape names referenced by the result are returned in ``discovered`` so the
    caller can register them; header/uri/querystring members are returned in
    ``relocated`` instead of appearing in ``properties``.
    """
    result = ShapeResult(schema={})
    schema = result.schema

    target_type, target_format = _TYPE_MAP.get(shape.type, (shape.type, None))
    schema["type"] = target_type
    if target_format:
        schema["format"] = target_format

    description = _description(shape.documentation, shape.deprecated_message)
    if description is not None:
        schema["description"] = description
    if shape.deprecated:
        schema["deprecated"] = True

    _apply_bounds(schema, shape)

    if target_type == "string" and shape.type != "timestamp":
        if shape.sensitive:
            schema["format"] = "password"
        if shape.pattern:
            _apply_pattern(schema, shape.pattern, name)
    if shape.enum:
        schema["enum"] = list(shape.enum)

    if shape.type == "structure":
        _build_structure(result, shape)
    elif shape.type == "list" and shape.member is not None:
        items = _member_schema(result, "items", shape.member)
        if xml_query and "xml" not in items:
            items["xml"] = {"name": "member"}
        schema["items"] = items
    elif shape.type == "map" and shape.value is not None:
        # Key names cannot be constrained in OpenAPI 3.0; only the value is kept.
        schema["additionalProperties"] = {"$ref": schema_ref(shape.value.shape)}
        result.discovered.add(shape.value.shape)

    xml: dict[str, Any] = {}
    if shape.flattened:
        xml["wrapped"] = False
    if shape.xml_namespace:
        xml["namespace"] = shape.xml_namespace
    if xml:
        schema["xml"] = xml

    return result


def _build_structure(result: ShapeResult, shape: Shape) -> None:
    properties: dict[str, Any] = {}
    required = list(shape.required)
    for member_name, member in shape.members.items():
        if member.location in RELOCATED_LOCATIONS:
            result.relocated.append(
                RelocatedMember(
                    name=member_name,
                    member=member,
                    required=member_name in shape.required,
                )
            )
            # Parameters built from relocated members still reference the shape.
            result.discovered.add(member.shape)
            if member_name in required:
                required.remove(member_name)
            continue
        properties[member_name] = _member_schema(result, member_name, member)
    result.schema["properties"] = properties
    if required:
        result.schema["required"] = required


def _member_schema(result: ShapeResult, key: str, member: MemberRef) -> dict[str, Any]:
    schema: dict[str, Any] = {"$ref": schema_ref(member.shape)}
    result.discovered.add(member.shape)

    description = _description(member.documentation, member.deprecated_message)
    if description is not None:
        schema["description"] = description
    if member.deprecated:
        schema["deprecated"] = True

    xml: dict[str, Any] = {}
    # The property key stays stable; the wire name is only a serialization hint.
    if member.location_name and member.location_name != key:
        xml["name"] = member.location_name
    if member.xml_namespace:
        xml["namespace"] = member.xml_namespace
    if member.xml_attribute:
        xml["attribute"] = True
    if member.flattened is not None:
        xml["wrapped"] = not member.flattened
    if xml:
        schema["xml"] = xml
    return schema


def _description(documentation: str | None, deprecated_message: str | None) -> str | None:
    if documentation is None and deprecated_message is None:
        return None
    text = clean(documentation) or ""
    if deprecated_message:
        text += deprecated_message
    return text


def _apply_bounds(schema: dict[str, Any], shape: Shape) -> None:
    names = _BOUND_NAMES.get(shape.type)
    if names is None:
        return
    for value, target in ((shape.min, names[0]), (shape.max, names[1])):
        if value is None:
            continue
        integer = target in _INTEGER_BOUNDS or shape.type in ("integer", "long")
        parsed = _parse_bound(value, integer=integer)
        if parsed is not None:
            schema[target] = parsed


def _parse_bound(value: int | float | str, *, integer: bool) -> int | float | None:
    if isinstance(value, str):
        try:
            return int(value, 10) if integer else float(value)
        except ValueError:
            logger.debug("Ignoring unparseable bound %r", value)
            return None
    if integer:
        return int(value)
    return value


def _apply_pattern(schema: dict[str, Any], pattern: str, name: str | None) -> None:
    converted, enforceable = compatible_pattern(pattern)
    if enforceable:
        schema["pattern"] = converted
        if converted != pattern:
            logger.debug("Rewrote pattern of %s: %r -> %r", name or "<inline>", pattern, converted)
        return
    logger.warning(
        "Pattern of %s is not ECMAScript compatible, keeping it as x-pattern: %r",
        name or "<inline>",
        pattern,
    )
    schema["x-pattern"] = converted
