"""Generic hygiene for a single command argument.

The sanitizer knows nothing about the program an argument is meant for; it
only enforces rules that hold for every argv element.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

MAX_ARGUMENT_LENGTH = 200

ALLOWED_ABSOLUTE_PREFIXES: tuple[str, ...] = ("/tmp", "/dev/null")

_SHELL_METACHARS = re.compile(r"[;&|`$()><]")
# C0 and C1 controls (newline, tab, NUL, NEL, ...), DEL and the Unicode
# line and paragraph separators.
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f\u2028\u2029]")
_GLOB_CHARS = re.compile(r"[*?\[\]]")


@dataclass(frozen=True, slots=True)
class SanitizeResult:
    """Result of argument sanitization."""

    allowed: bool
    value: str | None = None
    reason: str | None = None


def _reject(reason: str) -> SanitizeResult:
    return SanitizeResult(allowed=False, reason=reason)


def is_allowed_absolute_path(
    path: str,
    prefixes: tuple[str, ...] = ALLOWED_ABSOLUTE_PREFIXES,
) -> bool:
    """True when ``path`` is one of ``prefixes`` or lies beneath one."""
    return any(path == prefix or path.startswith(prefix.rstrip("/") + "/") for prefix in prefixes)


def sanitize_argument(
    raw: str,
    *,
    allowed_absolute_prefixes: tuple[str, ...] = ALLOWED_ABSOLUTE_PREFIXES,
) -> SanitizeResult:
    """Validate one argument and return its trimmed form.

    Rules are applied in order and the first failing one is reported:
    shell metacharacters, control characters, glob wildcards, parent
    directory traversal, absolute paths outside the allowed prefixes,
    and finally the trimmed length.
    """
    if _SHELL_METACHARS.search(raw):
        return _reject("shell metacharacters are not allowed")

    if _CONTROL_CHARS.search(raw):
        return _reject("control characters are not allowed")

    if _GLOB_CHARS.search(raw):
        return _reject("glob wildcards are not allowed")

    if "../" in raw or "..\\" in raw:
        return _reject("path traversal is not allowed")

    trimmed = raw.strip()
    if trimmed.startswith("/") and not is_allowed_absolute_path(trimmed, allowed_absolute_prefixes):
        return _reject("absolute paths are not allowed")

    if not trimmed:
        return _reject("argument is empty")
    if len(trimmed) > MAX_ARGUMENT_LENGTH:
        return _reject(f"argument exceeds {MAX_ARGUMENT_LENGTH} characters")

    return SanitizeResult(allowed=True, value=trimmed)
