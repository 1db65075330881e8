"""Core domain models shared by the policy engine and the gate."""

from cmdgate.core.types import (
    Accepted,
    CommandSpec,
    DiagnosticEvent,
    Rejected,
    RejectionCode,
    ValidationRequest,
    ValidationResult,
)

__all__ = [
    "Accepted",
    "CommandSpec",
    "DiagnosticEvent",
    "Rejected",
    "RejectionCode",
    "ValidationRequest",
    "ValidationResult",
]
