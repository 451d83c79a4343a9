"""Route keys and the route table they are attached to."""

from __future__ import annotations

import copy
import logging
import re
from typing import Any

from aws_openapi.converter.context import ConversionContext, MultiValuedParam
from aws_openapi.model.parser import Operation

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "post", "put", "patch", "delete", "head", "options", "trace")
DEPRECATED_MARKER = "deprecated!"

_PATH_VARIABLE = re.compile(r"\{(.+?)\}")
_SUFFIX_LOCATIONS = frozenset({"querystring", "header", "headers"})


class ConversionError(RuntimeError):
    """A service description that cannot be converted into a single document."""


class RouteConflictError(ConversionError):
    """Two operations claim the same route key and verb."""


def append_suffix(route: str, token: str) -> str:
    """Add a token to the route's fragment suffix, creating it if needed."""
    return route + ("&" if "#" in route else "#") + token


def build_route(
    ctx: ConversionContext,
    operation: Operation,
    action: dict[str, Any],
) -> str:
    """Derive the route key for an operation, adding the parameters it implies."""
    route = operation.http.request_uri if operation.http else "/"
    parameters: list[dict[str, Any]] = action.setdefault("parameters", [])

    if ctx.description.metadata.endpoint_prefix == "sqs":
        route = _apply_queue_url(route, action)
        parameters = action["parameters"]

    route = _normalize_multi_valued(ctx, operation, route)

    if "?" in route:
        path, query = route.split("?", 1)
        parameters.extend(literal_query_parameters(query))
        route = path + "#" + query

    for name in _required_suffix_names(ctx, operation):
        route = append_suffix(route, name)

    if ctx.is_query_style:
        route = append_suffix(route, f"Action={operation.name}")
        parameters.extend(
            [
                {
                    "name": "Action",
                    "in": "query",
                    "required": True,
                    "schema": {"type": "string", "enum": [operation.name]},
                },
                {
                    "name": "Version",
                    "in": "query",
                    "required": True,
                    "schema": {
                        "type": "string",
                        "enum": [ctx.description.metadata.api_version],
                    },
                },
            ]
        )
    elif ctx.protocol == "json":
        target = f"{ctx.description.metadata.target_prefix}.{operation.name}"
        route = append_suffix(route, f"X-Amz-Target={target}")
        parameters.append(
            {
                "name": "X-Amz-Target",
                "in": "header",
                "required": True,
                "schema": {"type": "string", "enum": [target]},
            }
        )
    elif ctx.protocol not in ("rest-json", "rest-xml"):
        raise ValueError(f"Unknown protocol: {ctx.protocol}")

    return route


def literal_query_parameters(query: str) -> list[dict[str, Any]]:
    """Parameters for a literal query string embedded in a request URI.

    ``versioning`` becomes a required presence-only flag and ``list-type=2``
    a required single-value enum.
    """
    parameters = []
    for pair in query.split("&"):
        name, _, value = pair.partition("=")
        if not name:
            continue
        parameter: dict[str, Any] = {"name": name, "in": "query", "required": True}
        if value:
            parameter["schema"] = {"type": "string", "enum": [value]}
        else:
            parameter["allowEmptyValue"] = True
            parameter["schema"] = {"type": "boolean", "enum": [True]}
        parameters.append(parameter)
    return parameters


def _normalize_multi_valued(ctx: ConversionContext, operation: Operation, route: str) -> str:
    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name.endswith("+"):
            name = name[:-1]
            ctx.multi_params.append(MultiValuedParam(operation=operation.name, name=name))
        return "{" + name + "}"

    return _PATH_VARIABLE.sub(replace, route)


def _required_suffix_names(ctx: ConversionContext, operation: Operation) -> list[str]:
    if operation.input is None:
        return []
    shape = ctx.description.get_shape(operation.input.shape)
    if shape is None:
        return []
    return [
        member.location_name or member_name
        for member_name, member in shape.members.items()
        if member.location in _SUFFIX_LOCATIONS and member_name in shape.required
    ]


def _apply_queue_url(route: str, action: dict[str, Any]) -> str:
    # SQS sends queue operations to the queue URL itself, so the account and
    # queue name become path segments in place of the QueueUrl parameter.
    parameters = action["parameters"]
    if not any(parameter.get("name") == "QueueUrl" for parameter in parameters):
        return route
    parameters.extend(
        [
            {
                "in": "path",
                "name": "AccountNumber",
                "required": True,
                "description": "The AWS account number",
                "schema": {"type": "integer"},
            },
            {
                "in": "path",
                "name": "QueueName",
                "required": True,
                "description": "The name of the queue",
                "schema": {"type": "string"},
            },
        ]
    )
    action["parameters"] = [p for p in parameters if p.get("name") != "QueueUrl"]
    return "/{AccountNumber}/{QueueName}" + route


class RouteTable:
    """OpenAPI ``paths`` with the deprecated-operation collision policy."""

    def __init__(self, path_parameters: list[dict[str, Any]] | None = None) -> None:
        self._path_parameters = path_parameters or []
        self.paths: dict[str, dict[str, Any]] = {}

    def attach(self, route: str, method: str, action: dict[str, Any]) -> str:
        """Attach ``action`` at ``route``/``method`` and return the key it landed on.

        Raises:
            RouteConflictError: If two live operations, or two deprecated
                operations, claim the same key and verb.
        """
        existing = self.paths.get(route, {}).get(method)
        if existing is not None:
            shadow = append_suffix(route, DEPRECATED_MARKER)
            new_deprecated = bool(action.get("deprecated"))
            old_deprecated = bool(existing.get("deprecated"))
            if new_deprecated == old_deprecated:
                state = "both deprecated" if new_deprecated else "neither deprecated"
                raise RouteConflictError(
                    f"Two conflicting actions, {state}: "
                    f"{existing.get('operationId')} and {action.get('operationId')} "
                    f"at {method.upper()} {route}"
                )
            if method in self.paths.get(shadow, {}):
                raise RouteConflictError(
                    f"Multiple deprecated methods for {method.upper()} {route}"
                )
            if old_deprecated:
                logger.info(
                    "Moving deprecated %s to %s", existing.get("operationId"), shadow
                )
                self._place(shadow, method, existing)
            else:
                logger.info("Placing deprecated %s at %s", action.get("operationId"), shadow)
                route = shadow
        self._place(route, method, action)
        return route

    def _place(self, route: str, method: str, action: dict[str, Any]) -> None:
        if route not in self.paths:
            self.paths[route] = {}
            if self._path_parameters:
                self.paths[route]["parameters"] = copy.deepcopy(self._path_parameters)
        self.paths[route][method] = action

    def operations(self):
        """Yield ``(route, method, action)`` for every attached operation."""
        for route, path_item in self.paths.items():
            for method in HTTP_METHODS:
                action = path_item.get(method)
                if action is not None:
                    yield route, method, action
