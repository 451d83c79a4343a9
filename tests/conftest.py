from __future__ import annotations

from typing import Any, Callable

import pytest

from aws_openapi import config, logging_utils
from aws_openapi.config import ConversionSettings
from aws_openapi.converter.context import ConversionContext
from aws_openapi.converter.envelope import media_types
from aws_openapi.converter.options import ConversionOptions
from aws_openapi.model.parser import parse_service_description


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep a developer's .env out of the run and leave pytest's log capture
    # handlers on the root logger.
    monkeypatch.setattr(config, "load_dotenv", lambda **_: None)
    monkeypatch.setattr(logging_utils, "_logging_configured", True)
    config._load_settings_cached.cache_clear()
    yield
    config._load_settings_cached.cache_clear()


def _make_document(
    protocol: str,
    operations: dict[str, Any] | None = None,
    shapes: dict[str, Any] | None = None,
    **metadata: Any,
) -> dict[str, Any]:
    meta = {
        "protocol": protocol,
        "apiVersion": "2020-01-01",
        "endpointPrefix": "example",
        "serviceFullName": "Example Service",
        "signatureVersion": "v4",
    }
    meta.update(metadata)
    return {
        "version": "2.0",
        "metadata": meta,
        "operations": operations or {},
        "shapes": shapes or {},
    }


def _make_context(document: dict[str, Any], **options: Any) -> ConversionContext:
    ctx = ConversionContext(
        description=parse_service_description(document),
        options=ConversionOptions.model_validate(options),
        settings=ConversionSettings(),
    )
    ctx.xml_query = ctx.protocol == "query" and bool(ctx.description.metadata.xml_namespace)
    ctx.consumes = media_types(ctx)
    ctx.produces = list(ctx.consumes)
    ctx.index_references()
    return ctx


@pytest.fixture
def make_document() -> Callable[..., dict[str, Any]]:
    """Minimal service description with sensible metadata defaults."""
    return _make_document


@pytest.fixture
def make_context() -> Callable[..., ConversionContext]:
    """Conversion context prepared the way the engine prepares it."""
    return _make_context
