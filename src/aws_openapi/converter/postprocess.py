"""Final passes over the assembled document."""

from __future__ import annotations

import logging
import re
from typing import Any, Callable

from aws_openapi.converter.context import ConversionContext
from aws_openapi.converter.routes import RouteTable

logger = logging.getLogger(__name__)

_PATH_VARIABLE = re.compile(r"\{(.+?)\}")


def _drop_required(schema_name: str) -> Callable[[dict[str, Any]], None]:
    def correct(openapi: dict[str, Any]) -> None:
        schema = openapi.get("components", {}).get("schemas", {}).get(schema_name)
        if schema is not None:
            schema.pop("required", None)

    return correct


# Keyed by metadata.endpointPrefix, which can differ from info.x-serviceName.
SERVICE_CORRECTIONS: dict[str, list[Callable[[dict[str, Any]], None]]] = {
    "data.mediastore": [_drop_required("GetObjectResponse")],
}


def post_process(ctx: ConversionContext, openapi: dict[str, Any], routes: RouteTable) -> None:
    for _route, _method, action in routes.operations():
        if "parameters" in action:
            action["parameters"] = dedupe_parameters(action["parameters"])
        _attach_waiters(ctx, action)
        _attach_paginator(ctx, action)

    if has_equivalent_paths(list(routes.paths)):
        openapi["x-hasEquivalentPaths"] = True
    else:
        openapi.pop("x-hasEquivalentPaths", None)

    fill_missing_path_parameters(routes)
    _type_multi_valued_parameters(ctx)
    apply_corrections(openapi, ctx.description.metadata.endpoint_prefix)


def dedupe_parameters(parameters: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Keep the first parameter for each ``(name, in)`` pair."""
    seen: set[tuple[Any, Any]] = set()
    unique = []
    for parameter in parameters:
        key = (parameter.get("name"), parameter.get("in"))
        if key in seen:
            continue
        seen.add(key)
        unique.append(parameter)
    return unique


def _operation_name(action: dict[str, Any]) -> str | None:
    return action.get("x-aws-operation-name") or action.get("operationId")


def _attach_waiters(ctx: ConversionContext, action: dict[str, Any]) -> None:
    if ctx.options.waiters is None:
        return
    name = _operation_name(action)
    if name is None:
        return
    for waiter in ctx.options.waiters.for_operation(name):
        action.setdefault("x-waiters", []).append(dict(waiter))


def _attach_paginator(ctx: ConversionContext, action: dict[str, Any]) -> None:
    name = _operation_name(action)
    if name is None:
        return
    paginator = ctx.options.paginator_for(name)
    if paginator is not None:
        action["x-paginator"] = paginator.model_dump(exclude_none=True)


def deparameterise_path(route: str) -> str:
    return _PATH_VARIABLE.sub("{param}", route).split("#", 1)[0]


def has_equivalent_paths(routes: list[str]) -> bool:
    return len({deparameterise_path(route) for route in routes}) != len(routes)


def fill_missing_path_parameters(routes: RouteTable) -> None:
    for route, method, action in routes.operations():
        path = route.split("#", 1)[0]
        path_level = routes.paths[route].get("parameters", [])
        parameters = action.setdefault("parameters", [])
        for name in _PATH_VARIABLE.findall(path):
            if any(
                parameter.get("name") == name and parameter.get("in") == "path"
                for parameter in parameters + path_level
            ):
                continue
            logger.debug("Adding missing path parameter %s to %s %s", name, method.upper(), route)
            parameters.append(
                {"name": name, "in": "path", "required": True, "schema": {"type": "string"}}
            )


def _type_multi_valued_parameters(ctx: ConversionContext) -> None:
    for multi in ctx.multi_params:
        for action in ctx.actions_by_operation.get(multi.operation, []):
            for parameter in action.get("parameters", []):
                if parameter.get("name") == multi.name and parameter.get("in") == "path":
                    parameter["schema"] = {"type": "array", "items": {"type": "string"}}
                    parameter["style"] = "simple"
                    parameter["explode"] = False


def apply_corrections(openapi: dict[str, Any], endpoint_prefix: str | None) -> None:
    service = endpoint_prefix or ""
    for correct in SERVICE_CORRECTIONS.get(service, []):
        logger.info("Applying correction for %s", service)
        correct(openapi)
