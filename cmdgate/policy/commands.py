"""Static table of the programs administrators may run.

Adding a command is a data change: append a ``CommandSpec`` below.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from cmdgate.core.types import FLAT, CommandSpec

# Free-form: arguments only have to pass generic sanitation. Used on
# purpose for subcommands whose flags are harmless on their own.
FREE_FORM: frozenset[str] = frozenset()

# Allows a bare run of digits as its own argument (``git log -n 10``).
NUMERIC_FLAG = "-n"


def _spec(
    name: str,
    args_by_subcommand: dict[str, Iterable[str]],
    max_args: int,
) -> CommandSpec:
    subcommands = frozenset(key for key in args_by_subcommand if key != FLAT)
    return CommandSpec(
        name=name,
        subcommands=subcommands,
        args_by_subcommand={key: frozenset(value) for key, value in args_by_subcommand.items()},
        max_args=max_args,
    )


DEFAULT_COMMAND_SPECS: tuple[CommandSpec, ...] = (
    _spec(
        "npm",
        {
            "install": ("--force", "--legacy-peer-deps", "--production"),
            "run": ("build", "lint", "dev", "start", "test"),
            "audit": ("--audit-level=<level>", "fix"),
            "update": FREE_FORM,
            "ci": ("--production",),
        },
        max_args=3,
    ),
    _spec(
        "next",
        {
            "build": FREE_FORM,
            "lint": ("--fix", "--quiet"),
            "start": FREE_FORM,
        },
        max_args=2,
    ),
    _spec(
        "git",
        {
            "status": ("--porcelain",),
            "log": ("--oneline", NUMERIC_FLAG, "--graph", "--pretty=<format>"),
            "diff": ("--name-only", "--stat"),
            "branch": ("-v", "--list"),
        },
        max_args=5,
    ),
    _spec("ls", {FLAT: ("-la", "-l", "-a", "-R", "--help")}, max_args=2),
    _spec("pwd", {FLAT: FREE_FORM}, max_args=0),
)


def build_command_table(specs: Iterable[CommandSpec]) -> Mapping[str, CommandSpec]:
    """Index specs by program name into a read-only mapping."""
    table: dict[str, CommandSpec] = {}
    for spec in specs:
        if spec.name in table:
            raise ValueError(f"duplicate command spec: {spec.name}")
        table[spec.name] = spec
    return MappingProxyType(table)


COMMAND_TABLE: Mapping[str, CommandSpec] = build_command_table(DEFAULT_COMMAND_SPECS)
