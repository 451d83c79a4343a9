"""Precheck of a service description's protocol and format version."""

from __future__ import annotations

from dataclasses import dataclass

from jsonschema import Draft202012Validator

SUPPORTED_PROTOCOLS = ("json", "rest-json", "rest-xml", "query", "ec2")
SUPPORTED_FORMAT_VERSION = "2.0"

# A missing "version" is accepted; older descriptions omit it.
PRECHECK_SCHEMA: dict[str, object] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["metadata"],
    "properties": {
        "version": {"enum": [SUPPORTED_FORMAT_VERSION, float(SUPPORTED_FORMAT_VERSION)]},
        "metadata": {
            "type": "object",
            "required": ["protocol"],
            "properties": {"protocol": {"enum": list(SUPPORTED_PROTOCOLS)}},
        },
    },
}


class UnsupportedDocumentError(ValueError):
    """Raised when a document fails the protocol/version precheck."""

    def __init__(self, problems: list[PrecheckProblem]) -> None:
        self.problems = problems
        summary = "; ".join(problem.describe() for problem in problems)
        super().__init__(f"Unsupported service description: {summary}")


@dataclass
class PrecheckProblem:
    """One reason a document was refused.

    Attributes:
        path: Dotted path of the offending field (e.g. "metadata.protocol").
        message: jsonschema's message for the failure.
    """

    path: str | None
    message: str

    def describe(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


def precheck(document: dict[str, object]) -> list[PrecheckProblem]:
    """Check a raw document against the supported protocols and version.

    Args:
        document: The parsed service description.

    Returns:
        List of problems; empty when the document can be converted.
    """
    validator = Draft202012Validator(PRECHECK_SCHEMA)
    problems: list[PrecheckProblem] = []
    for error in validator.iter_errors(document):
        path = ".".join(str(p) for p in error.absolute_path) if error.absolute_path else None
        problems.append(PrecheckProblem(path=path, message=error.message))
    return problems
