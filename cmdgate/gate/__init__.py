"""Admission gate in front of the command-execution endpoint."""

from cmdgate.gate.rate_limit import RateLimitDecision, RateLimiter
from cmdgate.gate.service import CommandGate, GateDecision, resolve_working_directory

__all__ = [
    "CommandGate",
    "GateDecision",
    "RateLimitDecision",
    "RateLimiter",
    "resolve_working_directory",
]
