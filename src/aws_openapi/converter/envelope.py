"""Document envelope: info block, security scheme and signing parameters."""

from __future__ import annotations

import logging
from typing import Any

from aws_openapi import __version__
from aws_openapi.converter.context import ConversionContext
from aws_openapi.converter.text import clean

logger = logging.getLogger(__name__)

# https://docs.aws.amazon.com/general/latest/gr/sigv4-signed-request-examples.html
AMZ_HEADERS = (
    "X-Amz-Content-Sha256",
    "X-Amz-Date",
    "X-Amz-Algorithm",
    "X-Amz-Credential",
    "X-Amz-Security-Token",
    "X-Amz-Signature",
    "X-Amz-SignedHeaders",
)
S3_HEADERS = ("x-amz-security-token",)
V2_PARAMS = (
    "AWSAccessKeyId",
    "Action",
    "SignatureMethod",
    "SignatureVersion",
    "Timestamp",
    "Version",
    "Signature",
)

PARAMETER_PREFIX = "#/components/parameters/"


def build_info(ctx: ConversionContext) -> dict[str, Any]:
    metadata = ctx.description.metadata
    settings = ctx.settings
    options = ctx.options

    info: dict[str, Any] = {
        "version": metadata.api_version,
        "x-release": metadata.signature_version,
        "title": metadata.service_full_name,
    }
    if ctx.description.documentation:
        info["description"] = clean(ctx.description.documentation)
    info["x-logo"] = {"url": settings.logo_url, "backgroundColor": settings.logo_background}
    info["termsOfService"] = settings.terms_of_service
    contact = {
        key: value
        for key, value in (
            ("name", settings.contact_name),
            ("email", settings.contact_email),
            ("url", settings.contact_url),
        )
        if value
    }
    if contact:
        info["contact"] = contact
    info["license"] = {"name": settings.license_name, "url": settings.license_url}
    info["x-providerName"] = settings.provider_name
    info["x-serviceName"] = options.service_name or metadata.endpoint_prefix
    info["x-origin"] = [
        {
            "contentType": "application/json",
            "url": settings.origin_url_template.format(filename=options.filename or ""),
            "converter": {"name": "aws-openapi", "version": __version__},
            "x-apisguru-driver": "external",
        }
    ]
    info["x-apiClientRegistration"] = {"url": settings.client_registration_url}
    info["x-apisguru-categories"] = list(settings.categories)

    preferred_version = options.preferred_version()
    info["x-preferred"] = (
        True if preferred_version is None else preferred_version == metadata.api_version
    )
    return info


def build_external_docs(ctx: ConversionContext) -> dict[str, str]:
    # Best guess: the last dotted component of the endpoint prefix is usually
    # the documentation slug.
    prefix = (ctx.description.metadata.endpoint_prefix or "").split(".")[-1]
    return {
        "description": "Amazon Web Services documentation",
        "url": f"{ctx.settings.docs_base_url}{prefix}/",
    }


def build_security(ctx: ConversionContext, components: dict[str, Any]) -> list[dict[str, Any]]:
    """Fill the ``hmac`` security scheme and signing parameters.

    Sets ``ctx.signature_version`` and returns the path-level ``$ref``
    parameters every new route must carry.
    """
    hmac: dict[str, Any] = {"type": "apiKey", "name": "Authorization", "in": "header"}
    components["securitySchemes"] = {"hmac": hmac}
    parameters = components.setdefault("parameters", {})

    signature = ctx.description.metadata.signature_version
    names: tuple[str, ...] = ()
    if signature in ("v4", "s3v4"):
        hmac["description"] = "Amazon Signature authorization v4"
        hmac["x-amazon-apigateway-authtype"] = "awsSigv4"
        ctx.signature_version = 4
        names = AMZ_HEADERS
        for name in names:
            parameters[name] = {
                "name": name,
                "in": "header",
                "schema": {"type": "string"},
                "required": False,
            }
    elif signature == "s3":
        hmac["description"] = "Amazon S3 signature"
        hmac["x-amazon-apigateway-authtype"] = "awsS3"
        ctx.signature_version = 3
        names = S3_HEADERS
        for name in names:
            parameters[name] = {
                "name": name,
                "in": "header",
                "required": False,
                "schema": {"type": "string"},
            }
    elif signature == "v2":
        hmac["description"] = "Amazon Signature authorization v2"
        hmac["x-amazon-apigateway-authtype"] = "awsSigv2"
        ctx.signature_version = 2
        names = V2_PARAMS
        for name in names:
            parameters[name] = {
                "name": name,
                "in": "query",
                "schema": {"type": "string"},
                "required": True,
            }
    elif signature:
        logger.warning("Unknown signatureVersion %s", signature)

    return [{"$ref": PARAMETER_PREFIX + name} for name in names]


def media_types(ctx: ConversionContext) -> list[str]:
    """Media types consumed and produced by the document's protocol."""
    metadata = ctx.description.metadata
    protocol = ctx.protocol
    types: list[str] = []
    if protocol in ("rest-json", "json") or (protocol == "query" and metadata.json_version):
        types.append("application/json")
    if protocol in ("rest-xml", "ec2") or ctx.xml_query:
        types.append("text/xml")
    if not types:
        # Query services without an XML namespace still answer in XML.
        types.append("text/xml")
    return types
