"""Options block and companion tables accepted by the converter."""

from __future__ import annotations

from pathlib import PurePath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _ensure_list(v: Any) -> list:
    """Convert None to empty list, wrap a bare value, pass through lists."""
    if v is None:
        return []
    if isinstance(v, list):
        return v
    return [v]


class PaginatorEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    input_token: list[str] = Field(default_factory=list)
    output_token: Any = None
    limit_key: str | None = None
    result_key: Any = None

    @field_validator("input_token", mode="before")
    @classmethod
    def _validate_input_token(cls, v: Any) -> list:
        return _ensure_list(v)


class PaginatorTable(BaseModel):
    model_config = ConfigDict(extra="ignore")

    pagination: dict[str, PaginatorEntry] = Field(default_factory=dict)


class WaiterTable(BaseModel):
    model_config = ConfigDict(extra="ignore")

    version: int | None = None
    waiters: dict[str, dict[str, Any]] = Field(default_factory=dict)

    def for_operation(self, operation: str) -> list[dict[str, Any]]:
        return [waiter for waiter in self.waiters.values() if waiter.get("operation") == operation]


class ExampleTable(BaseModel):
    model_config = ConfigDict(extra="ignore")

    version: str | None = None
    examples: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)

    @field_validator("version", mode="before")
    @classmethod
    def _validate_version(cls, v: Any) -> str | None:
        return None if v is None else str(v)

    def last_output(self, operation: str) -> Any:
        output = None
        for example in self.examples.get(operation, []):
            if example.get("output"):
                output = example["output"]
        return output


class PreferredEntry(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    service_name: str = Field(alias="serviceName")
    versions: list[str] = Field(default_factory=list)
    preferred: str | None = None


class RegionConfig(BaseModel):
    """Endpoint rules in the aws-sdk ``region_config_data.json`` layout.

    ``rules`` maps ``"<region>/<service>"`` keys (with ``*`` wildcards) to an
    endpoint config or to the name of an entry in ``patterns``.
    """

    model_config = ConfigDict(extra="ignore")

    rules: dict[str, str | dict[str, Any]] = Field(default_factory=dict)
    patterns: dict[str, dict[str, Any]] = Field(default_factory=dict)

    def lookup(self, key: str) -> dict[str, Any] | None:
        rule = self.rules.get(key)
        if isinstance(rule, str):
            return self.patterns.get(rule)
        return rule


class ConversionOptions(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    filename: str | None = None
    service_name: str | None = Field(default=None, alias="serviceName")
    preferred: list[PreferredEntry] = Field(default_factory=list)
    paginators: PaginatorTable | None = None
    waiters: WaiterTable | None = None
    examples: ExampleTable | None = None
    region_config: RegionConfig | None = Field(default=None, alias="regionConfig")

    @field_validator("preferred", mode="before")
    @classmethod
    def _validate_preferred(cls, v: Any) -> list:
        return _ensure_list(v)

    @model_validator(mode="after")
    def _derive_service_name(self) -> ConversionOptions:
        if self.service_name is None and self.filename:
            self.service_name = service_name_from_filename(self.filename)
        return self

    def preferred_version(self) -> str | None:
        for entry in self.preferred:
            if entry.service_name == self.service_name:
                return entry.preferred
        return None

    def paginator_for(self, operation: str) -> PaginatorEntry | None:
        if self.paginators is None:
            return None
        return self.paginators.pagination.get(operation)


def service_name_from_filename(filename: str) -> str:
    """Derive the service prefix from an SDK file name.

    ``s3-2006-03-01.normal.json`` becomes ``s3`` and
    ``runtime.lex-2016-11-28.normal.json`` becomes ``runtime.lex``.
    """
    stem = PurePath(filename.replace("\\", "/")).name.replace(".normal.json", "")
    components = stem.split("-")
    prefix = [components[0]]
    for component in components[1:]:
        if component.startswith("2"):
            break
        prefix.append(component)
    return "-".join(prefix)
