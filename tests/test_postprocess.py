from __future__ import annotations

from typing import Any

from aws_openapi.converter.context import MultiValuedParam
from aws_openapi.converter.postprocess import (
    apply_corrections,
    dedupe_parameters,
    deparameterise_path,
    fill_missing_path_parameters,
    has_equivalent_paths,
    post_process,
)
from aws_openapi.converter.routes import RouteTable


def test_dedupe_parameters_keeps_first() -> None:
    parameters = [
        {"name": "Bucket", "in": "path", "description": "first"},
        {"name": "Bucket", "in": "query"},
        {"name": "Bucket", "in": "path", "description": "second"},
    ]

    assert dedupe_parameters(parameters) == parameters[:2]


def test_deparameterise_path() -> None:
    assert deparameterise_path("/{Bucket}/{Key}#acl") == "/{param}/{param}"


def test_has_equivalent_paths() -> None:
    assert has_equivalent_paths(["/{Bucket}", "/{Name}"]) is True
    assert has_equivalent_paths(["/#Action=A", "/#Action=B"]) is True
    assert has_equivalent_paths(["/a", "/b"]) is False


def test_fill_missing_path_parameters() -> None:
    table = RouteTable([{"$ref": "#/components/parameters/X-Amz-Date"}])
    action: dict[str, Any] = {
        "operationId": "GetObject",
        "parameters": [{"name": "Bucket", "in": "path", "required": True}],
    }
    table.attach("/{Bucket}/{Key}", "get", action)

    fill_missing_path_parameters(table)

    assert action["parameters"][1] == {
        "name": "Key",
        "in": "path",
        "required": True,
        "schema": {"type": "string"},
    }
    assert len(action["parameters"]) == 2


def test_apply_corrections_for_mediastore() -> None:
    openapi = {
        "info": {"x-serviceName": "mediastore-data"},
        "components": {"schemas": {"GetObjectResponse": {"required": ["StatusCode"]}}},
    }

    apply_corrections(openapi, "data.mediastore")

    assert openapi["components"]["schemas"]["GetObjectResponse"] == {}


def test_apply_corrections_ignores_other_services() -> None:
    openapi = {
        "info": {"x-serviceName": "s3"},
        "components": {"schemas": {"GetObjectResponse": {"required": ["StatusCode"]}}},
    }

    apply_corrections(openapi, "s3")

    assert openapi["components"]["schemas"]["GetObjectResponse"] == {"required": ["StatusCode"]}


def test_post_process_annotates_actions(make_document, make_context) -> None:
    document = make_document(
        "rest-json",
        operations={
            "GetObject": {"http": {"method": "GET", "requestUri": "/{Key+}"}},
            "ListObjects": {"http": {"method": "GET", "requestUri": "/"}},
        },
    )
    ctx = make_context(
        document,
        paginators={"pagination": {"ListObjects": {"input_token": "Marker"}}},
        waiters={"version": 2, "waiters": {"Ready": {"operation": "GetObject", "delay": 5}}},
    )
    get_action: dict[str, Any] = {
        "operationId": "GetObject",
        "parameters": [
            {"name": "Key", "in": "path", "required": True, "schema": {"type": "string"}},
            {"name": "Key", "in": "path", "required": True, "schema": {"type": "string"}},
        ],
    }
    list_action: dict[str, Any] = {"operationId": "ListObjects", "parameters": []}
    table = RouteTable()
    table.attach("/{Key}", "get", get_action)
    table.attach("/", "get", list_action)
    ctx.track_action("GetObject", get_action)
    ctx.track_action("ListObjects", list_action)
    ctx.multi_params.append(MultiValuedParam(operation="GetObject", name="Key"))
    openapi: dict[str, Any] = {"info": {"x-serviceName": "example"}, "x-hasEquivalentPaths": False}

    post_process(ctx, openapi, table)

    assert "x-hasEquivalentPaths" not in openapi
    assert get_action["x-waiters"] == [{"operation": "GetObject", "delay": 5}]
    assert list_action["x-paginator"] == {"input_token": ["Marker"]}
    assert get_action["parameters"] == [
        {
            "name": "Key",
            "in": "path",
            "required": True,
            "schema": {"type": "array", "items": {"type": "string"}},
            "style": "simple",
            "explode": False,
        }
    ]
