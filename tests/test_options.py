from __future__ import annotations

import pytest

from aws_openapi.converter.options import (
    ConversionOptions,
    ExampleTable,
    RegionConfig,
    WaiterTable,
    service_name_from_filename,
)


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("s3-2006-03-01.normal.json", "s3"),
        ("apis/runtime.lex-2016-11-28.normal.json", "runtime.lex"),
        ("cognito-idp-2016-04-18.normal.json", "cognito-idp"),
        ("mediastore-data-2017-09-01.normal.json", "mediastore-data"),
    ],
)
def test_service_name_from_filename(filename: str, expected: str) -> None:
    assert service_name_from_filename(filename) == expected


def test_options_derive_service_name_from_filename() -> None:
    options = ConversionOptions.model_validate({"filename": "sqs-2012-11-05.normal.json"})

    assert options.service_name == "sqs"


def test_options_explicit_service_name_wins() -> None:
    options = ConversionOptions.model_validate(
        {"filename": "sqs-2012-11-05.normal.json", "serviceName": "queues"}
    )

    assert options.service_name == "queues"


def test_options_preferred_version() -> None:
    options = ConversionOptions.model_validate(
        {
            "serviceName": "s3",
            "preferred": [
                {"serviceName": "ec2", "preferred": "2016-11-15"},
                {"serviceName": "s3", "versions": ["2006-03-01"], "preferred": "2006-03-01"},
            ],
        }
    )

    assert options.preferred_version() == "2006-03-01"


def test_options_preferred_accepts_single_entry() -> None:
    options = ConversionOptions.model_validate(
        {"serviceName": "s3", "preferred": {"serviceName": "s3", "preferred": "2006-03-01"}}
    )

    assert options.preferred_version() == "2006-03-01"


def test_options_without_preferred_entry() -> None:
    assert ConversionOptions(service_name="s3").preferred_version() is None


def test_paginator_input_token_is_normalised_to_list() -> None:
    options = ConversionOptions.model_validate(
        {
            "paginators": {
                "pagination": {
                    "ListThings": {
                        "input_token": "NextToken",
                        "output_token": "NextToken",
                        "limit_key": "MaxResults",
                        "result_key": "Things",
                    }
                }
            }
        }
    )

    paginator = options.paginator_for("ListThings")
    assert paginator is not None
    assert paginator.input_token == ["NextToken"]
    assert paginator.limit_key == "MaxResults"
    assert options.paginator_for("Missing") is None


def test_waiters_for_operation() -> None:
    table = WaiterTable.model_validate(
        {
            "version": 2,
            "waiters": {
                "ThingExists": {"operation": "DescribeThing", "delay": 5},
                "Other": {"operation": "ListThings"},
            },
        }
    )

    assert table.for_operation("DescribeThing") == [{"operation": "DescribeThing", "delay": 5}]


def test_examples_last_output_wins() -> None:
    table = ExampleTable.model_validate(
        {
            "version": 1.0,
            "examples": {
                "GetThing": [
                    {"output": {"Name": "first"}},
                    {"input": {}},
                    {"output": {"Name": "second"}},
                ]
            },
        }
    )

    assert table.version == "1.0"
    assert table.last_output("GetThing") == {"Name": "second"}
    assert table.last_output("Other") is None


def test_region_config_lookup_resolves_patterns() -> None:
    config = RegionConfig.model_validate(
        {
            "rules": {
                "*/*": {"endpoint": "{service}.{region}.amazonaws.com"},
                "cn-*/*": "china",
            },
            "patterns": {"china": {"endpoint": "{service}.{region}.amazonaws.com.cn"}},
        }
    )

    assert config.lookup("cn-*/*") == {"endpoint": "{service}.{region}.amazonaws.com.cn"}
    assert config.lookup("*/*") == {"endpoint": "{service}.{region}.amazonaws.com"}
    assert config.lookup("eu-*/*") is None
