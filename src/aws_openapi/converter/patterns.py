"""Regex compatibility for string patterns.

AWS patterns are written for a POSIX/Java flavoured engine. OpenAPI patterns
are ECMAScript regular expressions without lookbehind support, so a pattern
either passes through untouched, is rewritten by the bracket-expression
rules below, or is demoted to an informational ``x-pattern``.
"""

from __future__ import annotations

import re
import warnings

_UNSUPPORTED_TOKENS = ("(?<=", "(?<!", "(?P<", "(?P=")
_NEGATIVE_LOOKBEHIND = re.compile(r"\(\?<![^)]*\)")
_BRE_TOKEN = re.compile(r"\[\^?\]?[^\]]*\]|\\.|.", re.DOTALL)
_LEADING_BRACKET = re.compile(r"^\[\^?\]")
_ESCAPED_GROUPING = re.compile(r"^\\[(){}]$")
_BARE_META = re.compile(r"^[+?|(){}]$")


def is_compatible(pattern: str) -> bool:
    """Return True when the pattern compiles and uses no unsupported groups."""
    if any(token in pattern for token in _UNSUPPORTED_TOKENS):
        return False
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", FutureWarning)
        try:
            re.compile(pattern)
        except re.error:
            return False
    return True


def _rewrite_token(match: re.Match[str]) -> str:
    token = match.group(0)
    # Inside a bracket expression a backslash matches itself.
    if token.startswith("["):
        token = token.replace("\\", "\\\\", 1)
    # An initial ] (or ^]) inside brackets is a literal.
    if _LEADING_BRACKET.match(token):
        return token.replace("]", "\\]", 1)
    if _ESCAPED_GROUPING.match(token):
        return token[1]
    if _BARE_META.match(token):
        return "\\" + token
    return token


def convert_regex(pattern: str) -> str:
    """Rewrite a POSIX basic regular expression into an ECMAScript-friendly one.

    Negative lookbehind groups are stripped, which makes the result more
    permissive than the source pattern.
    """
    pattern = _NEGATIVE_LOOKBEHIND.sub("", pattern)
    return _BRE_TOKEN.sub(_rewrite_token, pattern)


def compatible_pattern(pattern: str) -> tuple[str, bool]:
    """Return ``(pattern, enforceable)`` for a source pattern.

    When ``enforceable`` is False the returned pattern is the rewritten form
    that still failed to compile; callers keep it only as documentation.
    """
    if is_compatible(pattern):
        return pattern, True
    rewritten = convert_regex(pattern)
    return rewritten, is_compatible(rewritten)
