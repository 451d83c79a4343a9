from __future__ import annotations

import logging
from typing import Any

import pytest

from aws_openapi import __version__
from aws_openapi.converter.envelope import (
    AMZ_HEADERS,
    V2_PARAMS,
    build_external_docs,
    build_info,
    build_security,
    media_types,
)


def test_build_info_defaults(make_document, make_context) -> None:
    document = make_document("rest-json", apiVersion="2015-07-09")
    document["documentation"] = "<p>Manages things.</p>"
    ctx = make_context(document, filename="apigateway-2015-07-09.normal.json")

    info = build_info(ctx)

    assert info["version"] == "2015-07-09"
    assert info["x-release"] == "v4"
    assert info["title"] == "Example Service"
    assert info["description"] == "Manages things."
    assert info["x-serviceName"] == "apigateway"
    assert info["x-providerName"] == "amazonaws.com"
    assert info["x-preferred"] is True
    assert info["x-apisguru-categories"] == ["cloud"]
    assert "contact" not in info
    origin = info["x-origin"][0]
    assert origin["url"].endswith("/apis/apigateway-2015-07-09.normal.json")
    assert origin["converter"] == {"name": "aws-openapi", "version": __version__}


def test_build_info_preferred_version_mismatch(make_document, make_context) -> None:
    document = make_document("rest-json", apiVersion="2015-07-09")
    ctx = make_context(
        document,
        serviceName="apigateway",
        preferred=[{"serviceName": "apigateway", "preferred": "2018-11-29"}],
    )

    assert build_info(ctx)["x-preferred"] is False


def test_build_info_service_name_falls_back_to_endpoint_prefix(
    make_document, make_context
) -> None:
    ctx = make_context(make_document("json", endpointPrefix="dynamodb"))

    assert build_info(ctx)["x-serviceName"] == "dynamodb"


def test_build_external_docs_uses_last_prefix_component(make_document, make_context) -> None:
    ctx = make_context(make_document("rest-json", endpointPrefix="runtime.lex"))

    assert build_external_docs(ctx) == {
        "description": "Amazon Web Services documentation",
        "url": "https://docs.aws.amazon.com/lex/",
    }


def test_build_security_v4(make_document, make_context) -> None:
    ctx = make_context(make_document("rest-json", signatureVersion="v4"))
    components: dict[str, Any] = {}

    refs = build_security(ctx, components)

    assert ctx.signature_version == 4
    assert components["securitySchemes"]["hmac"]["x-amazon-apigateway-authtype"] == "awsSigv4"
    assert list(components["parameters"]) == list(AMZ_HEADERS)
    assert refs[0] == {"$ref": "#/components/parameters/X-Amz-Content-Sha256"}
    assert len(refs) == len(AMZ_HEADERS)


def test_build_security_v2_uses_required_query_parameters(make_document, make_context) -> None:
    ctx = make_context(make_document("query", signatureVersion="v2"))
    components: dict[str, Any] = {}

    build_security(ctx, components)

    assert ctx.signature_version == 2
    assert list(components["parameters"]) == list(V2_PARAMS)
    assert all(
        parameter["in"] == "query" and parameter["required"] is True
        for parameter in components["parameters"].values()
    )


def test_build_security_s3(make_document, make_context) -> None:
    ctx = make_context(make_document("rest-xml", signatureVersion="s3"))
    components: dict[str, Any] = {}

    refs = build_security(ctx, components)

    assert ctx.signature_version == 3
    assert refs == [{"$ref": "#/components/parameters/x-amz-security-token"}]


def test_build_security_unknown_signature(
    make_document, make_context, caplog: pytest.LogCaptureFixture
) -> None:
    ctx = make_context(make_document("rest-json", signatureVersion="bearer"))
    components: dict[str, Any] = {}

    with caplog.at_level(logging.WARNING, logger="aws_openapi.converter.envelope"):
        refs = build_security(ctx, components)

    assert refs == []
    assert ctx.signature_version is None
    assert components["securitySchemes"] == {
        "hmac": {"type": "apiKey", "name": "Authorization", "in": "header"}
    }
    assert "bearer" in caplog.text


@pytest.mark.parametrize(
    ("protocol", "metadata", "expected"),
    [
        ("rest-json", {}, ["application/json"]),
        ("json", {}, ["application/json"]),
        ("rest-xml", {}, ["text/xml"]),
        ("ec2", {}, ["text/xml"]),
        ("query", {"xmlNamespace": "https://sqs.amazonaws.com/doc/2012-11-05/"}, ["text/xml"]),
        ("query", {"jsonVersion": "1.0"}, ["application/json"]),
        ("query", {}, ["text/xml"]),
    ],
)
def test_media_types(
    make_document, make_context, protocol: str, metadata: dict[str, str], expected: list[str]
) -> None:
    ctx = make_context(make_document(protocol, **metadata))

    assert media_types(ctx) == expected
