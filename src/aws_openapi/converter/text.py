"""Documentation text helpers."""

from __future__ import annotations


def clean(text: str | None) -> str | None:
    """Remove a wrapping ``<p>...</p>`` pair when it is the only paragraph markup."""
    if not text:
        return text
    stripped = text
    if stripped.startswith("<p>"):
        stripped = stripped[3:]
    if stripped.endswith("</p>"):
        stripped = stripped[:-4]
    if "<p>" in stripped or "</p>" in stripped:
        return text
    return stripped
