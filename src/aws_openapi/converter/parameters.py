"""Turn an operation's input shape into request parameters and a request body."""

from __future__ import annotations

import copy
import logging
from typing import Any

from aws_openapi.converter.context import ConversionContext, ref_name, schema_ref
from aws_openapi.converter.locations import PARAMETER_LOCATIONS
from aws_openapi.converter.shapes import transform_shape
from aws_openapi.converter.text import clean
from aws_openapi.model.parser import MemberRef, Operation, Shape

logger = logging.getLogger(__name__)

_SKIPPED_BODY_LOCATIONS = frozenset({"headers", "statusCode"})


def attach_parameters(
    ctx: ConversionContext,
    operation: Operation,
    action: dict[str, Any],
    method: str,
) -> None:
    """Populate ``action["parameters"]`` and ``action["requestBody"]`` for one verb."""
    parameters: list[dict[str, Any]] = action.setdefault("parameters", [])

    if operation.input is not None:
        input_name = operation.input.shape
        shape = ctx.description.get_shape(input_name)
        protocol = ctx.protocol

        if protocol in ("rest-json", "rest-xml"):
            if shape is not None:
                _build_rest(ctx, shape, action, parameters)
        elif protocol in ("query", "ec2"):
            if method == "get":
                if shape is not None:
                    parameters.extend(_build_query(ctx, shape))
            else:
                ctx.register(input_name)
                action["requestBody"] = _ref_body(ctx, input_name, required=None)
        elif protocol == "json":
            ctx.register(input_name)
            action["requestBody"] = _ref_body(ctx, input_name, required=True)
        else:
            raise ValueError(f"Unknown protocol: {protocol}")

        action["parameters"] = flatten_parameters(ctx, parameters)

    _add_pagination_parameters(ctx, operation, action["parameters"])


def _build_rest(
    ctx: ConversionContext,
    shape: Shape,
    action: dict[str, Any],
    parameters: list[dict[str, Any]],
) -> None:
    properties: dict[str, Any] = {}
    required: list[str] = []
    for member_name, member in shape.members.items():
        wire_name = member.location_name or member_name
        is_required = member_name in shape.required
        location = PARAMETER_LOCATIONS.get(member.location or "")
        if location is not None:
            parameters.append(
                {
                    "name": wire_name,
                    "in": location,
                    "required": True if location == "path" else is_required,
                    "description": clean(member.documentation) or "",
                    "schema": inline_schema(ctx, member.shape),
                }
            )
            continue
        if member.location in _SKIPPED_BODY_LOCATIONS:
            logger.debug("Skipping %s member %s of request body", member.location, member_name)
            continue
        properties[wire_name] = {
            "description": clean(member.documentation) or "",
            **inline_schema(ctx, member.shape),
        }
        if is_required:
            required.append(wire_name)

    if not properties:
        return
    body_schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        body_schema["required"] = required
    action["requestBody"] = {
        "required": True,
        "content": {media: {"schema": copy.deepcopy(body_schema)} for media in ctx.consumes},
    }


def _build_query(ctx: ConversionContext, shape: Shape) -> list[dict[str, Any]]:
    parameters = []
    for member_name, member in shape.members.items():
        parameters.append(
            {
                "name": query_parameter_name(ctx.protocol, member_name, member),
                "in": "query",
                "required": member_name in shape.required,
                "description": clean(member.documentation) or "",
                "schema": inline_schema(ctx, member.shape),
            }
        )
    return parameters


def query_parameter_name(protocol: str, member_name: str, member: MemberRef) -> str:
    """Wire name of a member serialized by the query/ec2 protocols.

    EC2 upper-cases the first character unless a ``queryName`` is given.
    """
    if member.query_name:
        return member.query_name
    if protocol == "ec2":
        return _upper_first(member.location_name or member_name)
    return member.location_name or _upper_first(member_name)


def _upper_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def _ref_body(ctx: ConversionContext, shape_name: str, *, required: bool | None) -> dict[str, Any]:
    body: dict[str, Any] = {}
    if required is not None:
        body["required"] = required
    body["content"] = {
        media: {"schema": {"$ref": schema_ref(shape_name)}} for media in ctx.consumes
    }
    return body


def inline_schema(ctx: ConversionContext, shape_name: str) -> dict[str, Any]:
    """Transform a member's shape in place of a ``$ref``, registering what it uses."""
    shape = ctx.description.get_shape(shape_name)
    if shape is None:
        return {}
    result = transform_shape(shape, name=shape_name, xml_query=ctx.xml_query)
    ctx.register_all(result.discovered)
    return result.schema


def flatten_parameters(
    ctx: ConversionContext,
    parameters: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Reduce query parameters to transport primitives.

    Maps become a bounded run of indexed key/value pairs, structures are
    flattened one level deep with dotted names, and arrays become string
    arrays. Deeper nesting is not expanded.
    """
    flattened: list[dict[str, Any]] = []
    for parameter in parameters:
        if parameter.get("in") != "query":
            flattened.append(parameter)
            continue
        schema = parameter.get("schema", {})
        name = parameter["name"]
        if "additionalProperties" in schema:
            count = schema.get("maxProperties") or ctx.settings.map_parameter_cap
            count = min(count, ctx.settings.map_parameter_cap)
            logger.debug("Enumerating %d entries for map parameter %s", count, name)
            for index in range(count):
                for part in ("key", "value"):
                    flattened.append(
                        {
                            "name": f"{name}.{index}.{part}",
                            "in": parameter["in"],
                            "schema": {"type": "string"},
                        }
                    )
        elif schema.get("type") == "object":
            for child_name, child in schema.get("properties", {}).items():
                child_type = child.get("type") or _referenced_type(ctx, child)
                parts = (parameter.get("description"), child.get("description"))
                description = "\n".join(part for part in parts if part)
                child_schema: dict[str, Any] = {"type": "string"}
                if child_type == "array":
                    child_schema = {"type": "array", "items": {"type": "string"}}
                entry: dict[str, Any] = {"name": f"{name}.{child_name}", "in": parameter["in"]}
                if description:
                    entry["description"] = description
                entry["schema"] = child_schema
                flattened.append(entry)
        elif schema.get("type") == "array":
            entry = {key: value for key, value in parameter.items() if key != "schema"}
            entry["schema"] = {"type": "array", "items": {"type": "string"}}
            flattened.append(entry)
        else:
            flattened.append(parameter)
    return flattened


def _referenced_type(ctx: ConversionContext, schema: dict[str, Any]) -> str | None:
    ref = schema.get("$ref")
    if not ref:
        return None
    shape = ctx.description.get_shape(ref_name(ref))
    if shape is None:
        return None
    return transform_shape(shape, xml_query=ctx.xml_query).schema.get("type")


def _add_pagination_parameters(
    ctx: ConversionContext,
    operation: Operation,
    parameters: list[dict[str, Any]],
) -> None:
    paginator = ctx.options.paginator_for(operation.name)
    if paginator is None:
        return
    existing = {parameter.get("name") for parameter in parameters}
    wanted: list[tuple[str, str]] = []
    if paginator.limit_key:
        wanted.append((paginator.limit_key, "Pagination limit"))
    wanted.extend((token, "Pagination token") for token in paginator.input_token)
    for name, description in wanted:
        if name in existing:
            continue
        parameters.append(
            {
                "name": name,
                "in": "query",
                "schema": {"type": "string"},
                "description": description,
                "required": False,
            }
        )
        existing.add(name)
