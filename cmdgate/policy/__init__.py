"""Command policy engine: allowlist table, sanitizer, pattern scan."""

from cmdgate.policy.allowlist import is_argument_allowed
from cmdgate.policy.commands import COMMAND_TABLE, FREE_FORM, NUMERIC_FLAG, build_command_table
from cmdgate.policy.patterns import DEFAULT_PATTERNS, DangerousPattern, find_dangerous_pattern
from cmdgate.policy.sanitizer import SanitizeResult, sanitize_argument
from cmdgate.policy.validator import CommandValidator, validate_command
from cmdgate.policy.workdir import validate_working_directory

__all__ = [
    "COMMAND_TABLE",
    "CommandValidator",
    "DEFAULT_PATTERNS",
    "DangerousPattern",
    "FREE_FORM",
    "NUMERIC_FLAG",
    "SanitizeResult",
    "build_command_table",
    "find_dangerous_pattern",
    "is_argument_allowed",
    "sanitize_argument",
    "validate_command",
    "validate_working_directory",
]
