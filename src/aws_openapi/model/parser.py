"""Parser for AWS SDK service descriptions (the ``*.normal.json`` format)."""

from __future__ import annotations

from dataclasses import dataclass, field

PRIMITIVE_TYPES = frozenset(
    {
        "string",
        "integer",
        "long",
        "float",
        "double",
        "boolean",
        "timestamp",
        "blob",
        "character",
    }
)

LOCATIONS = frozenset({"header", "headers", "uri", "querystring", "statusCode", "payload"})


@dataclass
class MemberRef:
    shape: str
    location: str | None = None
    location_name: str | None = None
    query_name: str | None = None
    xml_namespace: str | None = None
    xml_attribute: bool = False
    flattened: bool | None = None
    documentation: str | None = None
    deprecated: bool = False
    deprecated_message: str | None = None


@dataclass
class Shape:
    type: str
    documentation: str | None = None
    min: int | float | str | None = None
    max: int | float | str | None = None
    pattern: str | None = None
    sensitive: bool = False
    enum: list[str] | None = None
    members: dict[str, MemberRef] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)
    member: MemberRef | None = None
    key: MemberRef | None = None
    value: MemberRef | None = None
    flattened: bool | None = None
    xml_namespace: str | None = None
    deprecated: bool = False
    deprecated_message: str | None = None
    exception: bool = False
    error_status: int | None = None


@dataclass
class HttpBinding:
    method: str = "POST"
    request_uri: str = "/"
    response_code: int | None = None


@dataclass
class ErrorRef:
    shape: str
    status: int | None = None
    exception: bool = False
    documentation: str | None = None


@dataclass
class Operation:
    name: str
    http: HttpBinding | None = None
    input: MemberRef | None = None
    output: MemberRef | None = None
    errors: list[ErrorRef] = field(default_factory=list)
    deprecated: bool = False
    documentation: str | None = None
    documentation_url: str | None = None


@dataclass
class ServiceMetadata:
    protocol: str | None = None
    api_version: str | None = None
    service_full_name: str | None = None
    service_abbreviation: str | None = None
    signature_version: str | None = None
    endpoint_prefix: str | None = None
    target_prefix: str | None = None
    xml_namespace: str | None = None
    json_version: str | None = None


@dataclass
class ServiceDescription:
    metadata: ServiceMetadata
    shapes: dict[str, Shape]
    operations: dict[str, Operation]
    version: str | None = None
    documentation: str | None = None

    @property
    def protocol(self) -> str | None:
        return self.metadata.protocol

    def get_shape(self, name: str) -> Shape | None:
        return self.shapes.get(name)


def parse_service_description(data: dict[str, object]) -> ServiceDescription:
    raw_metadata = data.get("metadata")
    metadata = _parse_metadata(raw_metadata if isinstance(raw_metadata, dict) else {})

    shapes: dict[str, Shape] = {}
    raw_shapes = data.get("shapes")
    if isinstance(raw_shapes, dict):
        for name, raw_shape in raw_shapes.items():
            if not isinstance(name, str) or not isinstance(raw_shape, dict):
                continue
            shape = _parse_shape(raw_shape)
            if shape is not None:
                shapes[name] = shape

    operations: dict[str, Operation] = {}
    raw_operations = data.get("operations")
    if isinstance(raw_operations, dict):
        for name, raw_operation in raw_operations.items():
            if not isinstance(name, str) or not isinstance(raw_operation, dict):
                continue
            operations[name] = _parse_operation(name, raw_operation)

    version = data.get("version")
    return ServiceDescription(
        metadata=metadata,
        shapes=shapes,
        operations=operations,
        version=str(version) if version is not None else None,
        documentation=_str_or_none(data.get("documentation")),
    )


def _parse_metadata(raw: dict[str, object]) -> ServiceMetadata:
    xml_namespace = raw.get("xmlNamespace")
    if isinstance(xml_namespace, dict):
        xml_namespace = xml_namespace.get("uri")
    return ServiceMetadata(
        protocol=_str_or_none(raw.get("protocol")),
        api_version=_str_or_none(raw.get("apiVersion")),
        service_full_name=_str_or_none(raw.get("serviceFullName")),
        service_abbreviation=_str_or_none(raw.get("serviceAbbreviation")),
        signature_version=_str_or_none(raw.get("signatureVersion")),
        endpoint_prefix=_str_or_none(raw.get("endpointPrefix")),
        target_prefix=_str_or_none(raw.get("targetPrefix")),
        xml_namespace=_str_or_none(xml_namespace),
        json_version=_str_or_none(raw.get("jsonVersion")),
    )


def _parse_shape(raw: dict[str, object]) -> Shape | None:
    shape_type = raw.get("type")
    if not isinstance(shape_type, str):
        return None

    shape = Shape(
        type=shape_type,
        documentation=_str_or_none(raw.get("documentation")),
        min=_bound(raw.get("min")),
        max=_bound(raw.get("max")),
        pattern=_str_or_none(raw.get("pattern")),
        sensitive=raw.get("sensitive") is True,
        flattened=raw.get("flattened") if isinstance(raw.get("flattened"), bool) else None,
        xml_namespace=_namespace_uri(raw.get("xmlNamespace")),
        deprecated=raw.get("deprecated") is True,
        deprecated_message=_str_or_none(raw.get("deprecatedMessage")),
        exception=raw.get("exception") is True,
    )

    raw_enum = raw.get("enum")
    if isinstance(raw_enum, list):
        shape.enum = [item for item in raw_enum if isinstance(item, str)]

    raw_error = raw.get("error")
    if isinstance(raw_error, dict) and isinstance(raw_error.get("httpStatusCode"), int):
        shape.error_status = raw_error["httpStatusCode"]

    if shape_type == "structure":
        raw_members = raw.get("members") or {}
        if isinstance(raw_members, dict):
            for name, raw_member in raw_members.items():
                if not isinstance(name, str):
                    continue
                member = _parse_member(raw_member)
                if member is not None:
                    shape.members[name] = member
        raw_required = raw.get("required") or []
        if isinstance(raw_required, list):
            shape.required = [item for item in raw_required if isinstance(item, str)]
    elif shape_type == "list":
        shape.member = _parse_member(raw.get("member"))
        if shape.member is None:
            return None
    elif shape_type == "map":
        shape.key = _parse_member(raw.get("key"))
        shape.value = _parse_member(raw.get("value"))
        if shape.key is None or shape.value is None:
            return None

    return shape


def _parse_member(raw: object) -> MemberRef | None:
    if not isinstance(raw, dict):
        return None
    target = raw.get("shape")
    if not isinstance(target, str):
        return None
    location = raw.get("location")
    return MemberRef(
        shape=target,
        location=location if location in LOCATIONS else None,
        location_name=_str_or_none(raw.get("locationName")),
        query_name=_str_or_none(raw.get("queryName")),
        xml_namespace=_namespace_uri(raw.get("xmlNamespace")),
        xml_attribute=raw.get("xmlAttribute") is True,
        flattened=raw.get("flattened") if isinstance(raw.get("flattened"), bool) else None,
        documentation=_str_or_none(raw.get("documentation")),
        deprecated=raw.get("deprecated") is True,
        deprecated_message=_str_or_none(raw.get("deprecatedMessage")),
    )


def _parse_operation(name: str, raw: dict[str, object]) -> Operation:
    http = None
    raw_http = raw.get("http")
    if isinstance(raw_http, dict):
        response_code = raw_http.get("responseCode")
        http = HttpBinding(
            method=_str_or_none(raw_http.get("method")) or "POST",
            request_uri=_str_or_none(raw_http.get("requestUri")) or "/",
            response_code=response_code if isinstance(response_code, int) else None,
        )

    errors: list[ErrorRef] = []
    raw_errors = raw.get("errors") or []
    if isinstance(raw_errors, list):
        for raw_error in raw_errors:
            if not isinstance(raw_error, dict) or not isinstance(raw_error.get("shape"), str):
                continue
            status = None
            error_info = raw_error.get("error")
            if isinstance(error_info, dict) and isinstance(error_info.get("httpStatusCode"), int):
                status = error_info["httpStatusCode"]
            errors.append(
                ErrorRef(
                    shape=raw_error["shape"],
                    status=status,
                    exception=raw_error.get("exception") is True,
                    documentation=_str_or_none(raw_error.get("documentation")),
                )
            )

    return Operation(
        name=_str_or_none(raw.get("name")) or name,
        http=http,
        input=_parse_member(raw.get("input")),
        output=_parse_member(raw.get("output")),
        errors=errors,
        deprecated=raw.get("deprecated") is True,
        documentation=_str_or_none(raw.get("documentation")),
        documentation_url=_str_or_none(raw.get("documentationUrl")),
    )


def _namespace_uri(raw: object) -> str | None:
    if isinstance(raw, dict):
        return _str_or_none(raw.get("uri"))
    return _str_or_none(raw)


def _bound(raw: object) -> int | float | str | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float, str)):
        return raw
    return None


def _str_or_none(raw: object) -> str | None:
    return raw if isinstance(raw, str) else None
