"""Attach header/uri/querystring members to the operations that use them."""

from __future__ import annotations

import logging
from typing import Any

from aws_openapi.converter.context import ConversionContext, schema_ref
from aws_openapi.converter.shapes import RelocatedMember
from aws_openapi.converter.text import clean

logger = logging.getLogger(__name__)

PARAMETER_LOCATIONS = {
    "header": "header",
    "uri": "path",
    "querystring": "query",
}


def parameter_for(member: RelocatedMember) -> dict[str, Any] | None:
    """Build the parameter descriptor for a relocated member, if it has one."""
    location = PARAMETER_LOCATIONS.get(member.member.location or "")
    if location is None:
        return None
    parameter: dict[str, Any] = {
        "name": member.wire_name,
        "in": location,
        # OpenAPI requires every path parameter to be required.
        "required": True if location == "path" else member.required,
    }
    if member.member.documentation:
        parameter["description"] = clean(member.member.documentation)
    parameter["schema"] = {"$ref": schema_ref(member.member.shape)}
    return parameter


def response_header_for(member: RelocatedMember) -> dict[str, Any]:
    return {
        "description": clean(member.member.documentation) or "",
        "schema": {"type": "string"},
    }


def attach_relocated_members(
    ctx: ConversionContext,
    shape_name: str,
    relocated: list[RelocatedMember],
) -> int:
    """Attach relocated members of ``shape_name`` to referencing operations.

    Returns the number of members that could not be attached anywhere; those
    are dropped.
    """
    dropped = 0
    references = ctx.references_to(shape_name)
    for member in relocated:
        attached = False
        for reference in references:
            actions = ctx.actions_by_operation.get(reference.operation, [])
            if reference.role == "input":
                parameter = parameter_for(member)
                if parameter is None:
                    continue
                for action in actions:
                    parameters = action.setdefault("parameters", [])
                    if not _already_built(parameters, parameter):
                        parameters.append(dict(parameter))
                    attached = True
            elif member.member.location == "header":
                for action in actions:
                    if _attach_response_header(action, shape_name, member):
                        attached = True
        if not attached:
            dropped += 1
            logger.debug(
                "No operation uses %s.%s (location=%s); dropping it",
                shape_name,
                member.name,
                member.member.location,
            )
    return dropped


def _already_built(parameters: list[dict[str, Any]], parameter: dict[str, Any]) -> bool:
    """True when the parameter, or its flattened ``name.*`` expansion, is present."""
    name = parameter["name"]
    for existing in parameters:
        if existing.get("in") != parameter["in"]:
            continue
        existing_name = str(existing.get("name", ""))
        if existing_name == name or existing_name.startswith(name + "."):
            return True
    return False


def _attach_response_header(
    action: dict[str, Any],
    shape_name: str,
    member: RelocatedMember,
) -> bool:
    attached = False
    target = schema_ref(shape_name)
    for status, response in action.get("responses", {}).items():
        if not str(status).isdigit() or not 200 <= int(status) < 700:
            continue
        content = response.get("content", {})
        if not any(media.get("schema", {}).get("$ref") == target for media in content.values()):
            continue
        response.setdefault("headers", {})[member.wire_name] = response_header_for(member)
        attached = True
    return attached
