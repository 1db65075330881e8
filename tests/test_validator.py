"""Tests for the command validator."""

import re

import pytest

from cmdgate.core.types import FLAT, Accepted, CommandSpec, Rejected, RejectionCode
from cmdgate.policy.commands import build_command_table
from cmdgate.policy.patterns import DangerousPattern
from cmdgate.policy.validator import CommandValidator, validate_command


class TestScenarios:
    def test_npm_run_build_is_accepted(self):
        result = validate_command("npm", ["run", "build"])
        assert isinstance(result, Accepted)
        assert result.sanitized_args == ("run", "build")

    def test_injection_in_argument_is_rejected(self):
        result = validate_command("npm", ["run", "build; rm -rf /"])
        assert isinstance(result, Rejected)
        assert result.code in {RejectionCode.UNSAFE_ARGUMENT, RejectionCode.DANGEROUS_PATTERN}

    def test_git_log_with_count(self):
        result = validate_command("git", ["log", "-n", "10"])
        assert isinstance(result, Accepted)
        assert result.sanitized_args == ("log", "-n", "10")

    def test_ls_traversal_is_unsafe(self):
        result = validate_command("ls", ["-la", "../../etc"])
        assert isinstance(result, Rejected)
        assert result.code is RejectionCode.UNSAFE_ARGUMENT
        assert "traversal" in result.reason


class TestRejections:
    @pytest.mark.parametrize("program", ["rm", "bash", "sh", "curl", "NPM", "npm ", ""])
    def test_unknown_command(self, program):
        result = validate_command(program, [])
        assert isinstance(result, Rejected)
        assert result.code is RejectionCode.UNKNOWN_COMMAND
        assert "command not whitelisted" in result.reason

    def test_too_many_arguments(self):
        result = validate_command("pwd", ["-L"])
        assert result.code is RejectionCode.TOO_MANY_ARGUMENTS
        assert "too many arguments" in result.reason

    def test_subcommand_not_allowed(self):
        result = validate_command("npm", ["publish"])
        assert result.code is RejectionCode.SUBCOMMAND_NOT_ALLOWED
        assert "subcommand not allowed" in result.reason

    def test_subcommand_is_matched_exactly(self):
        assert validate_command("git", [" log"]).code is RejectionCode.SUBCOMMAND_NOT_ALLOWED

    def test_argument_not_allowed(self):
        result = validate_command("npm", ["run", "deploy"])
        assert result.code is RejectionCode.ARGUMENT_NOT_ALLOWED
        assert "'npm run'" in result.reason

    def test_flat_argument_not_allowed(self):
        result = validate_command("ls", ["-lh"])
        assert result.code is RejectionCode.ARGUMENT_NOT_ALLOWED

    def test_sanitation_runs_before_allowlist(self):
        result = validate_command("ls", ["/etc"])
        assert result.code is RejectionCode.UNSAFE_ARGUMENT

    @pytest.mark.parametrize("char", [";", "&", "|", "`", "$(", ")", ">", "<"])
    @pytest.mark.parametrize(
        "program,prefix",
        [("npm", ["update"]), ("git", ["log"]), ("ls", []), ("next", ["build"]), ("pwd", [])],
    )
    def test_metacharacters_always_rejected(self, char, program, prefix):
        result = validate_command(program, [*prefix, f"x{char}y"])
        assert isinstance(result, Rejected)


class TestFreeForm:
    def test_free_form_subcommand_accepts_sanitized_args(self):
        result = validate_command("npm", ["update", "react", "next"])
        assert isinstance(result, Accepted)
        assert result.sanitized_args == ("update", "react", "next")

    def test_free_form_subcommand_still_sanitizes(self):
        result = validate_command("npm", ["update", "react*"])
        assert result.code is RejectionCode.UNSAFE_ARGUMENT

    def test_dangerous_pattern_catches_free_form_words(self):
        result = validate_command("npm", ["update", "sudo"])
        assert result.code is RejectionCode.DANGEROUS_PATTERN
        assert "privilege escalation" in result.reason


class TestProperties:
    def test_accepted_args_are_only_trimmed(self):
        args = ["log", " --oneline ", "-n", "5 "]
        result = validate_command("git", args)
        assert isinstance(result, Accepted)
        assert len(result.sanitized_args) == len(args)
        assert list(result.sanitized_args) == [a.strip() for a in args]

    def test_idempotent(self):
        first = validate_command("git", ["diff", "--stat"])
        second = validate_command("git", ["diff", "--stat"])
        assert first == second
        rejected = validate_command("git", ["push"])
        assert rejected == validate_command("git", ["push"])

    def test_no_args(self):
        assert validate_command("pwd", []) == Accepted(())
        assert validate_command("git", []) == Accepted(())

    def test_key_value_option(self):
        result = validate_command("git", ["log", "--pretty=oneline"])
        assert isinstance(result, Accepted)
        result = validate_command("npm", ["audit", "--audit-level=high"])
        assert isinstance(result, Accepted)

    def test_allowed_absolute_path(self):
        assert isinstance(validate_command("npm", ["update", "/tmp/cache"]), Accepted)


class TestMaxArgsBoundary:
    validator = CommandValidator(
        commands=build_command_table(
            [
                CommandSpec(
                    name="tool",
                    subcommands=frozenset(),
                    args_by_subcommand={FLAT: frozenset({"-a", "-b", "-c", "-d"})},
                    max_args=3,
                )
            ]
        )
    )

    def test_accepts_exactly_max(self):
        result = self.validator.validate("tool", ["-a", "-b", "-c"])
        assert result == Accepted(("-a", "-b", "-c"))

    def test_rejects_one_more(self):
        result = self.validator.validate("tool", ["-a", "-b", "-c", "-d"])
        assert result.code is RejectionCode.TOO_MANY_ARGUMENTS

    def test_builtin_npm_boundary(self):
        assert isinstance(validate_command("npm", ["install", "--force", "--production"]), Accepted)
        result = validate_command("npm", ["install", "--force", "--production", "--legacy-peer-deps"])
        assert result.code is RejectionCode.TOO_MANY_ARGUMENTS


class TestExtraPatterns:
    def test_extra_pattern_rejects_otherwise_clean_command(self):
        validator = CommandValidator(
            extra_patterns=[DangerousPattern("lint autofix", re.compile(r"--fix\b"))]
        )
        result = validator.validate("next", ["lint", "--fix"])
        assert result.code is RejectionCode.DANGEROUS_PATTERN
        assert "lint autofix" in result.reason
        assert isinstance(validate_command("next", ["lint", "--fix"]), Accepted)

    def test_default_patterns_are_kept(self):
        validator = CommandValidator(extra_patterns=[])
        assert len(validator.patterns) >= 11


def test_result_to_dict():
    assert validate_command("pwd").to_dict() == {"allowed": True, "sanitized_args": []}
    payload = validate_command("rm", ["-rf"]).to_dict()
    assert payload["allowed"] is False
    assert payload["code"] == "unknown_command"
