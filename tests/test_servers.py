from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from aws_openapi.converter.options import RegionConfig
from aws_openapi.converter.servers import Region, build_servers, known_regions, region_prefix

REGIONS = [
    Region(code="us-east-1", full_name="US East (N. Virginia)"),
    Region(code="eu-west-1", full_name="Europe (Ireland)"),
    Region(code="cn-north-1", full_name="China (Beijing)"),
]


@pytest.mark.parametrize(
    ("region", "expected"),
    [
        ("us-east-1", "us-*"),
        ("us-gov-west-1", "us-gov-*"),
        ("local", None),
        (None, None),
    ],
)
def test_region_prefix(region: str | None, expected: str | None) -> None:
    assert region_prefix(region) == expected


def test_build_servers_groups_regions_by_endpoint() -> None:
    config = RegionConfig.model_validate(
        {
            "rules": {
                "*/*": {"endpoint": "{service}.{region}.amazonaws.com"},
                "cn-*/*": "china",
            },
            "patterns": {"china": {"endpoint": "https://{service}.{region}.amazonaws.com.cn"}},
        }
    )

    servers = build_servers("example", "Example", config, regions=REGIONS)

    assert [server["url"] for server in servers] == [
        "http://example.{region}.amazonaws.com",
        "https://example.{region}.amazonaws.com",
        "https://example.{region}.amazonaws.com.cn",
    ]
    assert servers[0]["variables"] == {
        "region": {
            "description": "The AWS region",
            "enum": ["us-east-1", "eu-west-1"],
            "default": "us-east-1",
        }
    }
    assert servers[0]["description"] == (
        "The Example endpoint for US East (N. Virginia) and Europe (Ireland)"
    )
    assert servers[2]["description"] == "The Example endpoint for China (Beijing)"


def test_build_servers_general_endpoint() -> None:
    config = RegionConfig.model_validate(
        {
            "rules": {
                "*/example": {"endpoint": "https://example.amazonaws.com"},
            }
        }
    )

    servers = build_servers("example", "Example", config, regions=REGIONS)

    assert servers == [
        {
            "url": "https://example.amazonaws.com",
            "variables": {},
            "description": "The general Example endpoint for US East (N. Virginia), "
            "Europe (Ireland) and China (Beijing)",
        }
    ]


def test_build_servers_dash_or_dot_variable() -> None:
    config = RegionConfig.model_validate(
        {"rules": {"us-east-1/example": {"endpoint": "https://example{dash-or-dot}{region}.aws"}}}
    )

    servers = build_servers("example", "Example", config, regions=REGIONS)

    assert len(servers) == 1
    assert servers[0]["variables"]["dash-or-dot"] == {
        "description": "The service/region URL separator",
        "enum": [".", "-"],
        "default": ".",
    }


def test_build_servers_without_rules_is_empty() -> None:
    assert build_servers("example", "Example", RegionConfig(), regions=REGIONS) == []


@patch("aws_openapi.converter.servers.create_loader")
def test_known_regions_reads_botocore_partitions(mock_create_loader: MagicMock) -> None:
    mock_create_loader.return_value.load_data.return_value = {
        "partitions": [
            {"regions": {"us-east-1": {"description": "US East (N. Virginia)"}}},
            {"regions": {"cn-north-1": {}}},
        ]
    }

    assert known_regions() == [
        Region(code="us-east-1", full_name="US East (N. Virginia)"),
        Region(code="cn-north-1", full_name="cn-north-1"),
    ]
    mock_create_loader.return_value.load_data.assert_called_once_with("endpoints")
