"""Tests for the dangerous-pattern library."""

import pytest

from cmdgate.policy.patterns import (
    DEFAULT_PATTERNS,
    compile_patterns,
    find_dangerous_pattern,
)


@pytest.mark.parametrize(
    ("command_line", "category"),
    [
        ("npm run rm -rf", "recursive forced delete"),
        ("npm run rm -fr", "recursive forced delete"),
        ("sudo ls", "privilege escalation"),
        ("ls su", "privilege escalation"),
        ("ls passwd", "credential file"),
        ("ls shadow", "credential file"),
        ("ls ../etc", "path traversal"),
        ("ls $(id)", "command substitution"),
        ("ls `id`", "backtick"),
        ("ls ; id", "command chaining"),
        ("ls | id", "pipe"),
        ("ls & id", "background execution"),
        ("ls > out", "output redirection"),
        ("ls < in", "input redirection"),
    ],
)
def test_categories(command_line, category):
    match = find_dangerous_pattern(command_line)
    assert match is not None
    assert match.category == category


def test_first_match_wins():
    # Chaining and pipe both match; chaining comes first in the library.
    assert find_dangerous_pattern("ls ; id | cat").category == "command chaining"


@pytest.mark.parametrize(
    "command_line",
    ["npm run build", "git log -n 10", "git status --porcelain", "ls -la", "pwd", "git log --pretty=format:%h"],
)
def test_clean_command_lines(command_line):
    assert find_dangerous_pattern(command_line) is None


def test_library_is_immutable_tuple():
    assert isinstance(DEFAULT_PATTERNS, tuple)
    assert len({p.category for p in DEFAULT_PATTERNS}) == len(DEFAULT_PATTERNS)


def test_compile_extra_patterns():
    extra = compile_patterns({"package publish": r"\bpublish\b"})
    assert extra[0].category == "package publish"
    assert find_dangerous_pattern("npm PUBLISH", extra).category == "package publish"
    assert compile_patterns(None) == ()
