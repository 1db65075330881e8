"""Dangerous command-line fragments scanned as a second line of defense.

The allowlist is the primary control. These patterns run over the joined
command line after every argument already passed it, catching shapes that
only appear once arguments are put back together.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DangerousPattern:
    """A named regular expression that must never match a command line."""

    category: str
    regex: re.Pattern[str]

    def search(self, command_line: str) -> bool:
        return self.regex.search(command_line) is not None


def _p(category: str, pattern: str, flags: int = 0) -> DangerousPattern:
    return DangerousPattern(category, re.compile(pattern, flags))


# Order matters: the first match names the rejection.
DEFAULT_PATTERNS: tuple[DangerousPattern, ...] = (
    _p("recursive forced delete", r"\brm\s+-(?:[a-z]*r[a-z]*f|[a-z]*f[a-z]*r)", re.I),
    _p("privilege escalation", r"sudo|\b(?:su|doas|pkexec)\b", re.I),
    _p("credential file", r"passwd|shadow|sudoers|id_rsa|id_ed25519", re.I),
    _p("path traversal", r"\.\.[/\\]"),
    _p("command substitution", r"\$\("),
    _p("backtick", r"`"),
    _p("command chaining", r";"),
    _p("pipe", r"\|"),
    _p("background execution", r"&"),
    _p("output redirection", r">"),
    _p("input redirection", r"<"),
)


def compile_patterns(raw: dict[str, str] | None) -> tuple[DangerousPattern, ...]:
    """Build extra patterns from a ``{category: regex}`` mapping."""
    return tuple(_p(category, pattern, re.I) for category, pattern in (raw or {}).items())


def find_dangerous_pattern(
    command_line: str,
    patterns: tuple[DangerousPattern, ...] = DEFAULT_PATTERNS,
) -> DangerousPattern | None:
    """Return the first pattern matching ``command_line``, if any."""
    for pattern in patterns:
        if pattern.search(command_line):
            return pattern
    return None
