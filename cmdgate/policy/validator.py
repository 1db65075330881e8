"""Allowlist-first validation of a requested command line."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from cmdgate.core.types import (
    FLAT,
    Accepted,
    CommandSpec,
    Rejected,
    RejectionCode,
    ValidationResult,
)
from cmdgate.policy.allowlist import is_argument_allowed
from cmdgate.policy.commands import COMMAND_TABLE
from cmdgate.policy.patterns import DEFAULT_PATTERNS, DangerousPattern, find_dangerous_pattern
from cmdgate.policy.sanitizer import ALLOWED_ABSOLUTE_PREFIXES, sanitize_argument


class CommandValidator:
    """Decides whether a program and its argv may be spawned.

    Checks run in a fixed order: whitelist lookup, argument count,
    per-argument sanitation and allowlist matching, then a scan of the
    rebuilt command line against the dangerous-pattern library. The
    validator holds only read-only tables, so one instance can be shared
    by any number of concurrent callers.
    """

    def __init__(
        self,
        *,
        commands: Mapping[str, CommandSpec] = COMMAND_TABLE,
        patterns: Sequence[DangerousPattern] = DEFAULT_PATTERNS,
        extra_patterns: Sequence[DangerousPattern] = (),
        allowed_absolute_prefixes: tuple[str, ...] = ALLOWED_ABSOLUTE_PREFIXES,
    ) -> None:
        self._commands = commands
        self._patterns = tuple(patterns) + tuple(extra_patterns)
        self._absolute_prefixes = allowed_absolute_prefixes

    @property
    def commands(self) -> Mapping[str, CommandSpec]:
        return self._commands

    @property
    def patterns(self) -> tuple[DangerousPattern, ...]:
        return self._patterns

    def validate(self, program: str, args: Sequence[str] = ()) -> ValidationResult:
        """Return ``Accepted`` with trimmed args, or the first ``Rejected`` found."""
        spec = self._commands.get(program)
        if spec is None:
            return Rejected(
                RejectionCode.UNKNOWN_COMMAND,
                f"command not whitelisted: '{program}'",
            )

        if len(args) > spec.max_args:
            return Rejected(
                RejectionCode.TOO_MANY_ARGUMENTS,
                f"too many arguments for '{program}' (maximum {spec.max_args})",
            )

        checked = self._validate_arguments(spec, list(args))
        if isinstance(checked, Rejected):
            return checked

        command_line = " ".join([program, *checked])
        match = find_dangerous_pattern(command_line, self._patterns)
        if match is not None:
            return Rejected(
                RejectionCode.DANGEROUS_PATTERN,
                f"dangerous pattern: {match.category}",
            )

        return Accepted(tuple(checked))

    def _validate_arguments(self, spec: CommandSpec, args: list[str]) -> list[str] | Rejected:
        if not args:
            return []

        sanitized: list[str] = []
        if spec.is_flat:
            subcommand = FLAT
            remaining = args
        else:
            subcommand, *remaining = args
            if subcommand not in spec.subcommands:
                return Rejected(
                    RejectionCode.SUBCOMMAND_NOT_ALLOWED,
                    f"subcommand not allowed: '{subcommand}' for '{spec.name}'",
                )
            sanitized.append(subcommand)

        allowed = spec.allowed_args(subcommand)
        label = f"{spec.name} {subcommand}" if subcommand else spec.name
        for raw in remaining:
            result = sanitize_argument(raw, allowed_absolute_prefixes=self._absolute_prefixes)
            if not result.allowed:
                return Rejected(
                    RejectionCode.UNSAFE_ARGUMENT,
                    f"unsafe argument {raw!r}: {result.reason}",
                )
            # An empty set marks a free-form subcommand.
            if allowed and not is_argument_allowed(result.value, allowed):
                return Rejected(
                    RejectionCode.ARGUMENT_NOT_ALLOWED,
                    f"argument not allowed: '{result.value}' for '{label}'",
                )
            sanitized.append(result.value)

        return sanitized


_DEFAULT_VALIDATOR = CommandValidator()


def validate_command(program: str, args: Sequence[str] = ()) -> ValidationResult:
    """Validate against the built-in command table and pattern library."""
    return _DEFAULT_VALIDATOR.validate(program, args)
