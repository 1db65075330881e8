"""Membership test for a sanitized argument against a permitted set."""

from __future__ import annotations

from collections.abc import Iterable

from cmdgate.policy.commands import NUMERIC_FLAG


def _matches(arg: str, allowed: str) -> bool:
    if arg == allowed:
        return True
    # ``--flag=<anything>`` entries admit any value for that flag.
    if "=" in allowed:
        flag = allowed.split("=", 1)[0]
        if arg.startswith(flag + "="):
            return True
    if allowed == NUMERIC_FLAG and arg.isascii() and arg.isdigit():
        return True
    return False


def is_argument_allowed(arg: str, allowed_args: Iterable[str]) -> bool:
    """True when ``arg`` matches an entry exactly, as ``key=value``, or as a count."""
    return any(_matches(arg, allowed) for allowed in allowed_args)
