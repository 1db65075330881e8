"""Shared core DTOs used across the policy engine, gate and observability."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Union
from uuid import uuid4

FLAT = ""

MIN_TIMEOUT_MS = 1_000
MAX_TIMEOUT_MS = 300_000
DEFAULT_TIMEOUT_MS = 60_000


class RejectionCode(str, Enum):
    """Why a command request was refused."""

    UNKNOWN_COMMAND = "unknown_command"
    TOO_MANY_ARGUMENTS = "too_many_arguments"
    SUBCOMMAND_NOT_ALLOWED = "subcommand_not_allowed"
    ARGUMENT_NOT_ALLOWED = "argument_not_allowed"
    UNSAFE_ARGUMENT = "unsafe_argument"
    DANGEROUS_PATTERN = "dangerous_pattern"
    INVALID_WORKING_DIRECTORY = "invalid_working_directory"
    # Raised at the request boundary, before the validator runs.
    MALFORMED_REQUEST = "malformed_request"
    RATE_LIMITED = "rate_limited"


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """One allowed program and the argument shapes it may be invoked with.

    ``args_by_subcommand`` maps each subcommand (or ``FLAT`` for programs
    without subcommands) to the tokens permitted after it. An empty set
    means the subcommand takes free-form arguments that only have to pass
    generic sanitation.
    """

    name: str
    subcommands: frozenset[str]
    args_by_subcommand: Mapping[str, frozenset[str]]
    max_args: int

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("command spec needs a name")
        if self.max_args < 0:
            raise ValueError(f"{self.name}: max_args must be >= 0")

        keys = set(self.args_by_subcommand)
        if self.subcommands:
            unknown = keys - self.subcommands
            if unknown:
                raise ValueError(
                    f"{self.name}: argument sets for undeclared subcommands {sorted(unknown)}"
                )
            missing = self.subcommands - keys
            if missing:
                raise ValueError(
                    f"{self.name}: subcommands without an argument set {sorted(missing)}"
                )
        elif keys != {FLAT}:
            raise ValueError(f"{self.name}: flat programs take exactly one argument set keyed ''")

        frozen = {key: frozenset(value) for key, value in self.args_by_subcommand.items()}
        object.__setattr__(self, "subcommands", frozenset(self.subcommands))
        object.__setattr__(self, "args_by_subcommand", MappingProxyType(frozen))

    def __hash__(self) -> int:
        # The mapping proxy field is unhashable; equal specs share these.
        return hash((self.name, self.subcommands, self.max_args))

    @property
    def is_flat(self) -> bool:
        return not self.subcommands

    def allowed_args(self, subcommand: str = FLAT) -> frozenset[str]:
        return self.args_by_subcommand[subcommand]


@dataclass(frozen=True, slots=True)
class ValidationRequest:
    """Unit of work handed to the validator by the request boundary."""

    program: str
    args: tuple[str, ...] = ()
    working_directory: str | None = None
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


@dataclass(frozen=True, slots=True)
class Accepted:
    """The command may run with ``sanitized_args`` as its argv tail."""

    sanitized_args: tuple[str, ...] = ()

    allowed: ClassVar[bool] = True

    def to_dict(self) -> dict[str, Any]:
        return {"allowed": True, "sanitized_args": list(self.sanitized_args)}


@dataclass(frozen=True, slots=True)
class Rejected:
    """The command must not run."""

    code: RejectionCode
    reason: str

    allowed: ClassVar[bool] = False

    def to_dict(self) -> dict[str, Any]:
        return {"allowed": False, "code": self.code.value, "reason": self.reason}


ValidationResult = Union[Accepted, Rejected]


@dataclass(slots=True)
class DiagnosticEvent:
    """Structured audit event emitted by the gate."""

    name: str
    component: str
    severity: str = "info"
    event_id: str = field(default_factory=lambda: uuid4().hex)
    ts: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    actor: str | None = None
    program: str | None = None
    status: str | None = None
    latency_ms: float | None = None
    error_code: str | None = None
    error_message: str | None = None
    attrs: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable payload."""
        return {
            "event_id": self.event_id,
            "ts": self.ts.isoformat(),
            "name": self.name,
            "component": self.component,
            "severity": self.severity,
            "actor": self.actor,
            "program": self.program,
            "status": self.status,
            "latency_ms": self.latency_ms,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "attrs": self.attrs,
        }
