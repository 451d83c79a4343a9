"""Conversion entry points."""

from __future__ import annotations

from typing import Any, Callable, Iterator, Mapping

from pydantic import ValidationError

from aws_openapi.config import ConversionSettings, load_settings
from aws_openapi.converter.context import ConversionContext, schema_ref
from aws_openapi.converter.envelope import (
    build_external_docs,
    build_info,
    build_security,
    media_types,
)
from aws_openapi.converter.locations import attach_relocated_members
from aws_openapi.converter.options import ConversionOptions
from aws_openapi.converter.parameters import attach_parameters
from aws_openapi.converter.postprocess import post_process
from aws_openapi.converter.routes import ConversionError, RouteTable, build_route
from aws_openapi.converter.servers import build_servers
from aws_openapi.converter.shapes import transform_shape
from aws_openapi.converter.text import clean
from aws_openapi.logging_utils import get_logger
from aws_openapi.model.parser import Operation, ServiceDescription, parse_service_description
from aws_openapi.model.validation import UnsupportedDocumentError, precheck

Callback = Callable[[Exception | None, dict[str, Any] | None], None]
DocumentInput = Mapping[str, Any] | ServiceDescription
OptionsInput = ConversionOptions | Mapping[str, Any] | None


def convert(
    document: DocumentInput,
    options: OptionsInput,
    callback: Callback,
    settings: ConversionSettings | None = None,
) -> bool:
    """Convert a service description and hand the result to ``callback``.

    Returns False, without calling ``callback``, when the document fails the
    protocol/version precheck. Otherwise returns True after ``callback`` has
    been called exactly once, with ``(None, openapi)`` on success or
    ``(error, None)`` when the options block is invalid or the routes cannot
    be assembled unambiguously.
    """
    logger = get_logger(__name__)
    problems = precheck(_precheck_view(document))
    if problems:
        logger.warning(
            "Refusing to convert %s: %s",
            _label(options),
            "; ".join(problem.describe() for problem in problems),
        )
        return False

    try:
        openapi = _build(document, options, settings)
    except (ConversionError, ValidationError) as exc:
        logger.error("Conversion of %s failed: %s", _label(options), exc)
        callback(exc, None)
        return True
    callback(None, openapi)
    return True


def convert_document(
    document: DocumentInput,
    options: OptionsInput = None,
    settings: ConversionSettings | None = None,
) -> dict[str, Any]:
    """Convert a service description, raising instead of calling back.

    Raises:
        UnsupportedDocumentError: If the precheck refuses the document.
        pydantic.ValidationError: If the options block is malformed.
        ConversionError: If two operations collide on a route.
    """
    problems = precheck(_precheck_view(document))
    if problems:
        raise UnsupportedDocumentError(problems)
    return _build(document, options, settings)


def _precheck_view(document: DocumentInput) -> dict[str, Any]:
    if isinstance(document, ServiceDescription):
        view: dict[str, Any] = {"metadata": {"protocol": document.protocol}}
        if document.version is not None:
            view["version"] = document.version
        return view
    return dict(document)


def _label(options: OptionsInput) -> str:
    if isinstance(options, ConversionOptions):
        return options.filename or options.service_name or "<document>"
    if isinstance(options, Mapping):
        return str(options.get("filename") or "<document>")
    return "<document>"


def _build(
    document: DocumentInput,
    options: OptionsInput,
    settings: ConversionSettings | None,
) -> dict[str, Any]:
    if isinstance(document, ServiceDescription):
        description = document
    else:
        description = parse_service_description(dict(document))
    if not isinstance(options, ConversionOptions):
        options = ConversionOptions.model_validate(dict(options or {}))
    if settings is None:
        settings = load_settings().conversion

    ctx = ConversionContext(description=description, options=options, settings=settings)
    metadata = description.metadata
    ctx.xml_query = ctx.protocol == "query" and bool(metadata.xml_namespace)
    ctx.consumes = media_types(ctx)
    ctx.produces = list(ctx.consumes)
    ctx.index_references()

    openapi: dict[str, Any] = {
        "openapi": settings.openapi_version,
        "info": build_info(ctx),
        "externalDocs": build_external_docs(ctx),
    }
    if options.region_config is not None:
        openapi["servers"] = build_servers(
            metadata.endpoint_prefix or "",
            metadata.service_abbreviation or metadata.service_full_name or "",
            options.region_config,
        )
    openapi["x-hasEquivalentPaths"] = False

    components: dict[str, Any] = {"parameters": {}, "securitySchemes": {}, "schemas": ctx.schemas}
    routes = RouteTable(build_security(ctx, components))
    openapi["security"] = [{"hmac": []}]
    openapi["paths"] = routes.paths
    openapi["components"] = components

    for operation, method in _expand_operations(ctx):
        action = _build_action(ctx, operation, method)
        attach_parameters(ctx, operation, action, method)
        _attach_error_responses(ctx, operation, action)
        route = build_route(ctx, operation, action)
        routes.attach(route, method, action)
        ctx.track_action(operation.name, action)

    for name, shape in description.shapes.items():
        result = transform_shape(shape, name=name, xml_query=ctx.xml_query)
        if name in ctx.examples_by_shape:
            result.schema["example"] = ctx.examples_by_shape[name]
        ctx.schemas[name] = result.schema
        ctx.register_all(result.discovered)
        if result.relocated:
            attach_relocated_members(ctx, name, result.relocated)

    post_process(ctx, openapi, routes)
    return openapi


def _expand_operations(ctx: ConversionContext) -> Iterator[tuple[Operation, str]]:
    # Query and EC2 accept every action as either GET or POST.
    for operation in ctx.description.operations.values():
        if ctx.is_query_style:
            yield operation, "get"
            yield operation, "post"
        else:
            method = operation.http.method if operation.http else "POST"
            yield operation, method.lower()


def _build_action(ctx: ConversionContext, operation: Operation, method: str) -> dict[str, Any]:
    action: dict[str, Any] = {}
    if operation.deprecated:
        action["deprecated"] = True
    if ctx.is_query_style:
        action["x-aws-operation-name"] = operation.name
        action["operationId"] = f"{method.upper()}_{operation.name}"
    else:
        action["operationId"] = operation.name
    action["description"] = clean(operation.documentation) or ""
    if operation.documentation_url:
        action["externalDocs"] = {"url": operation.documentation_url}

    success: dict[str, Any] = {"description": "Success"}
    if operation.output is not None:
        output_name = operation.output.shape
        success["content"] = _content(ctx, output_name)
        ctx.register(output_name)
        if ctx.options.examples is not None:
            example = ctx.options.examples.last_output(operation.name)
            if example is not None:
                ctx.examples_by_shape[output_name] = example
    status = operation.http.response_code if operation.http else None
    action["responses"] = {str(status or 200): success}
    action["parameters"] = []
    return action


def _attach_error_responses(
    ctx: ConversionContext,
    operation: Operation,
    action: dict[str, Any],
) -> None:
    # Errors without a declared status get consecutive synthetic 4xx codes.
    synthetic_status = ctx.settings.first_synthetic_error_status
    for error in operation.errors:
        shape = ctx.description.get_shape(error.shape)
        failure: dict[str, Any] = {
            "description": clean(error.documentation) if error.documentation else error.shape
        }
        if error.exception or (shape is not None and shape.exception):
            failure["x-aws-exception"] = True
        failure["content"] = _content(ctx, error.shape)
        ctx.register(error.shape)
        if error.status is not None:
            status = error.status
        elif shape is not None and shape.error_status is not None:
            status = shape.error_status
        else:
            status = synthetic_status
            synthetic_status += 1
        action["responses"][str(status)] = failure


def _content(ctx: ConversionContext, shape_name: str) -> dict[str, Any]:
    return {media: {"schema": {"$ref": schema_ref(shape_name)}} for media in ctx.produces}
