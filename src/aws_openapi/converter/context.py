"""Per-conversion state shared by the converter stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from aws_openapi.config import ConversionSettings
from aws_openapi.converter.options import ConversionOptions
from aws_openapi.model.parser import ServiceDescription

SCHEMA_PREFIX = "#/components/schemas/"


def schema_ref(name: str) -> str:
    return SCHEMA_PREFIX + name


def ref_name(ref: str) -> str:
    return ref.split("/")[-1]


@dataclass(frozen=True)
class ShapeReference:
    """An operation pointing at a shape as its input or output."""

    operation: str
    role: str  # "input" or "output"


@dataclass(frozen=True)
class MultiValuedParam:
    """A ``{name+}`` path segment seen while building an operation's route."""

    operation: str
    name: str


@dataclass
class ConversionContext:
    """Everything one conversion reads and writes.

    A fresh context is built for every ``convert`` call so that nothing
    leaks between documents.
    """

    description: ServiceDescription
    options: ConversionOptions
    settings: ConversionSettings
    schemas: dict[str, dict[str, Any]] = field(default_factory=dict)
    consumes: list[str] = field(default_factory=list)
    produces: list[str] = field(default_factory=list)
    xml_query: bool = False
    signature_version: int | None = None
    multi_params: list[MultiValuedParam] = field(default_factory=list)
    actions_by_operation: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    shape_references: dict[str, list[ShapeReference]] = field(default_factory=dict)
    examples_by_shape: dict[str, Any] = field(default_factory=dict)

    @property
    def protocol(self) -> str:
        return self.description.metadata.protocol or ""

    @property
    def is_query_style(self) -> bool:
        return self.protocol in ("query", "ec2")

    def register(self, name: str) -> None:
        """Make sure ``name`` resolves in the schema dictionary."""
        if name not in self.schemas:
            self.schemas[name] = {}

    def register_all(self, names: set[str] | list[str]) -> None:
        for name in sorted(names):
            self.register(name)

    def index_references(self) -> None:
        """Build the shape -> referencing operations index once per conversion."""
        self.shape_references.clear()
        for operation in self.description.operations.values():
            if operation.input is not None:
                self.shape_references.setdefault(operation.input.shape, []).append(
                    ShapeReference(operation=operation.name, role="input")
                )
            if operation.output is not None:
                self.shape_references.setdefault(operation.output.shape, []).append(
                    ShapeReference(operation=operation.name, role="output")
                )

    def references_to(self, shape_name: str) -> list[ShapeReference]:
        return self.shape_references.get(shape_name, [])

    def track_action(self, operation: str, action: dict[str, Any]) -> None:
        self.actions_by_operation.setdefault(operation, []).append(action)
