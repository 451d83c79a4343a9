"""OpenAPI ``servers`` built from aws-sdk endpoint rules."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from botocore.loaders import create_loader

from aws_openapi.converter.options import RegionConfig

logger = logging.getLogger(__name__)

_HAS_SCHEME = re.compile(r"^https?://")


@dataclass(frozen=True)
class Region:
    code: str
    full_name: str


def known_regions() -> list[Region]:
    """All regions of every partition shipped with botocore."""
    data = create_loader().load_data("endpoints")
    regions: list[Region] = []
    for partition in data.get("partitions", []):
        for code, details in partition.get("regions", {}).items():
            regions.append(Region(code=code, full_name=details.get("description", code)))
    return regions


def region_prefix(region: str | None) -> str | None:
    """``us-east-1`` -> ``us-*``; regions with fewer than three parts have none."""
    if not region:
        return None
    parts = region.split("-")
    if len(parts) < 3:
        return None
    return "-".join(parts[:-2]) + "-*"


def _endpoint_config(
    region: Region,
    endpoint_prefix: str,
    region_config: RegionConfig,
) -> dict[str, Any] | None:
    prefix = region_prefix(region.code)
    candidates = [
        (region.code, endpoint_prefix),
        (prefix, endpoint_prefix),
        (region.code, "*"),
        (prefix, "*"),
        ("*", endpoint_prefix),
        ("*", "*"),
    ]
    for region_part, service_part in candidates:
        if not region_part or not service_part:
            continue
        key = f"{region_part}/{service_part}"
        if key in region_config.rules:
            return region_config.lookup(key)
    return None


def _with_schemes(endpoint: str) -> list[str]:
    # No scheme means both HTTP and HTTPS are accepted.
    if _HAS_SCHEME.match(endpoint):
        return [endpoint]
    return ["http://" + endpoint, "https://" + endpoint]


def build_servers(
    endpoint_prefix: str,
    service_name: str,
    region_config: RegionConfig,
    regions: list[Region] | None = None,
) -> list[dict[str, Any]]:
    """Group regions by endpoint URL and describe each URL as a server."""
    if regions is None:
        regions = known_regions()

    regions_by_endpoint: dict[str, list[Region]] = {}
    for region in regions:
        config = _endpoint_config(region, endpoint_prefix, region_config)
        if not config or not isinstance(config.get("endpoint"), str):
            logger.debug("No endpoint rule for %s in %s", endpoint_prefix, region.code)
            continue
        endpoints = _with_schemes(config["endpoint"])
        if isinstance(config.get("generalEndpoint"), str):
            endpoints.extend(_with_schemes(config["generalEndpoint"]))
        for endpoint in endpoints:
            regions_by_endpoint.setdefault(endpoint, []).append(region)

    servers = []
    for endpoint, valid_regions in regions_by_endpoint.items():
        names = [region.full_name for region in valid_regions]
        if len(valid_regions) == 1:
            scope = " endpoint for " + names[0]
        elif len(valid_regions) <= 3:
            scope = " endpoint for " + ", ".join(names[:-1]) + " and " + names[-1]
        else:
            scope = " multi-region endpoint"

        url = endpoint.replace("{service}", endpoint_prefix)
        variables: dict[str, Any] = {}
        if "{region}" in url:
            variables["region"] = {
                "description": "The AWS region",
                "enum": [region.code for region in valid_regions],
            }
            description = "The " + service_name + scope
        else:
            description = "The general " + service_name + scope

        # S3 accepts either separator between service and region.
        if "{dash-or-dot}" in url:
            variables["dash-or-dot"] = {
                "description": "The service/region URL separator",
                "enum": [".", "-"],
            }

        for variable in variables.values():
            variable["default"] = variable["enum"][0]

        servers.append({"url": url, "variables": variables, "description": description})
    return servers
