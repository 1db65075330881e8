"""Tests for CommandSpec invariants and the built-in command table."""

import pytest

from cmdgate.core.types import FLAT, CommandSpec
from cmdgate.policy.commands import COMMAND_TABLE, FREE_FORM, build_command_table


def test_spec_rejects_args_for_undeclared_subcommand():
    with pytest.raises(ValueError, match="undeclared"):
        CommandSpec(
            name="npm",
            subcommands=frozenset({"run"}),
            args_by_subcommand={"run": frozenset(), "publish": frozenset()},
            max_args=2,
        )


def test_spec_requires_an_entry_per_subcommand():
    with pytest.raises(ValueError, match="without an argument set"):
        CommandSpec(
            name="npm",
            subcommands=frozenset({"run", "ci"}),
            args_by_subcommand={"run": frozenset()},
            max_args=2,
        )


def test_flat_spec_uses_empty_key():
    with pytest.raises(ValueError):
        CommandSpec(name="ls", subcommands=frozenset(), args_by_subcommand={"x": frozenset()}, max_args=1)

    spec = CommandSpec(
        name="ls", subcommands=frozenset(), args_by_subcommand={FLAT: {"-l"}}, max_args=1
    )
    assert spec.is_flat
    assert spec.allowed_args() == frozenset({"-l"})


def test_spec_rejects_negative_max_args():
    with pytest.raises(ValueError):
        CommandSpec(name="pwd", subcommands=frozenset(), args_by_subcommand={FLAT: set()}, max_args=-1)


def test_spec_tables_are_read_only():
    spec = COMMAND_TABLE["git"]
    with pytest.raises(TypeError):
        spec.args_by_subcommand["push"] = frozenset()
    with pytest.raises(TypeError):
        COMMAND_TABLE["rm"] = spec
    with pytest.raises(AttributeError):
        spec.max_args = 99


def test_specs_are_hashable_and_compare_by_value():
    first = CommandSpec(name="ls", subcommands=frozenset(), args_by_subcommand={FLAT: {"-l"}}, max_args=1)
    second = CommandSpec(name="ls", subcommands=frozenset(), args_by_subcommand={FLAT: {"-l"}}, max_args=1)

    assert first == second
    assert hash(first) == hash(second)
    assert len({first, second, *COMMAND_TABLE.values()}) == 1 + len(COMMAND_TABLE)


def test_builtin_table_contents():
    assert set(COMMAND_TABLE) == {"npm", "next", "git", "ls", "pwd"}
    assert COMMAND_TABLE["npm"].max_args == 3
    assert COMMAND_TABLE["npm"].subcommands == {"install", "run", "audit", "update", "ci"}
    assert "build" in COMMAND_TABLE["npm"].allowed_args("run")
    assert COMMAND_TABLE["ls"].is_flat
    assert COMMAND_TABLE["pwd"].max_args == 0


def test_free_form_subcommands_are_explicit():
    assert COMMAND_TABLE["npm"].allowed_args("update") == FREE_FORM
    assert COMMAND_TABLE["next"].allowed_args("build") == FREE_FORM
    assert COMMAND_TABLE["git"].allowed_args("log") != FREE_FORM


def test_build_command_table_rejects_duplicates():
    spec = CommandSpec(name="pwd", subcommands=frozenset(), args_by_subcommand={FLAT: set()}, max_args=0)
    with pytest.raises(ValueError, match="duplicate"):
        build_command_table([spec, spec])
