"""Gate facade consumed by the command-execution endpoint.

Runs the whole admission pipeline for one request: shape validation, rate
limiting, command validation and working-directory resolution, then writes
an audit event. The gate never spawns anything; the caller does, using
``GateDecision.argv`` with argv semantics and no shell.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from cmdgate.config.loader import get_audit_log_path
from cmdgate.config.schema import Config
from cmdgate.core.types import (
    Accepted,
    DiagnosticEvent,
    Rejected,
    RejectionCode,
    ValidationResult,
)
from cmdgate.gate.rate_limit import RateLimiter
from cmdgate.interfaces.request import CommandExecutionRequest, parse_request
from cmdgate.observability.logging_sink import JsonlLoggingSink
from cmdgate.observability.redaction import redact_text
from cmdgate.policy.patterns import compile_patterns
from cmdgate.policy.validator import CommandValidator
from cmdgate.policy.workdir import validate_working_directory


@dataclass(frozen=True, slots=True)
class GateDecision:
    """Everything the endpoint needs to either spawn or refuse."""

    result: ValidationResult
    program: str | None = None
    working_directory: str | None = None
    timeout_seconds: float | None = None

    @property
    def allowed(self) -> bool:
        return self.result.allowed

    @property
    def argv(self) -> list[str]:
        if not isinstance(self.result, Accepted) or self.program is None:
            return []
        return [self.program, *self.result.sanitized_args]

    @property
    def http_status(self) -> int:
        if isinstance(self.result, Accepted):
            return 200
        return 429 if self.result.code is RejectionCode.RATE_LIMITED else 400

    def to_dict(self) -> dict[str, Any]:
        payload = self.result.to_dict()
        payload.update(
            {
                "program": self.program,
                "argv": self.argv,
                "working_directory": self.working_directory,
                "timeout_seconds": self.timeout_seconds,
            }
        )
        return payload


def resolve_working_directory(
    working_directory: str | None,
    project_root: str,
) -> tuple[ValidationResult, str]:
    """Validate a requested cwd and return it normalized.

    Relative paths are joined to the project root. The joined path is
    validated before normalization so traversal segments are still visible.
    """
    if not working_directory:
        return Accepted(), project_root

    candidate = (
        working_directory
        if os.path.isabs(working_directory)
        else os.path.join(project_root, working_directory)
    )
    result = validate_working_directory(candidate, project_root)
    return result, os.path.normpath(candidate)


class CommandGate:
    """Admission pipeline in front of process spawning."""

    def __init__(
        self,
        *,
        project_root: str | Path,
        validator: CommandValidator | None = None,
        rate_limiter: RateLimiter | None = None,
        sink: JsonlLoggingSink | None = None,
    ) -> None:
        self.project_root = os.path.normpath(str(project_root))
        self.validator = validator or CommandValidator()
        self.rate_limiter = rate_limiter
        self.sink = sink

    @classmethod
    def from_config(cls, config: Config) -> CommandGate:
        validator = CommandValidator(extra_patterns=compile_patterns(config.policy.extra_patterns))

        rate_limiter = None
        if config.rate_limit.enabled:
            rl = config.rate_limit
            rate_limiter = RateLimiter(
                max_per_window=rl.max_commands_per_window,
                window_seconds=rl.window_seconds,
                max_violations=rl.max_violations,
                lockout_seconds=rl.lockout_seconds,
            )

        sink = None
        if config.audit.enabled:
            sink = JsonlLoggingSink(
                get_audit_log_path(config),
                rotate_bytes=config.audit.rotate_bytes,
                max_backups=config.audit.max_backups,
            )

        return cls(
            project_root=config.project_root_path,
            validator=validator,
            rate_limiter=rate_limiter,
            sink=sink,
        )

    def evaluate(
        self,
        payload: dict[str, Any] | CommandExecutionRequest,
        *,
        actor: str = "anonymous",
    ) -> GateDecision:
        """Run the admission pipeline without writing an audit event."""
        parsed = parse_request(payload)
        if isinstance(parsed, Rejected):
            return GateDecision(result=parsed)

        request = parsed.to_validation_request()
        timeout = request.timeout_seconds

        if self.rate_limiter is not None:
            limit = self.rate_limiter.check(actor)
            if not limit.allowed:
                reason = limit.reason or "rate limit exceeded"
                if limit.retry_after is not None:
                    reason = f"{reason} (retry in {limit.retry_after:.0f}s)"
                return GateDecision(
                    result=Rejected(RejectionCode.RATE_LIMITED, reason),
                    program=request.program,
                    timeout_seconds=timeout,
                )

        result = self.validator.validate(request.program, request.args)
        if isinstance(result, Rejected):
            return GateDecision(result=result, program=request.program, timeout_seconds=timeout)

        cwd_result, cwd = resolve_working_directory(request.working_directory, self.project_root)
        if isinstance(cwd_result, Rejected):
            return GateDecision(result=cwd_result, program=request.program, timeout_seconds=timeout)

        return GateDecision(
            result=result,
            program=request.program,
            working_directory=cwd,
            timeout_seconds=timeout,
        )

    async def review(
        self,
        payload: dict[str, Any] | CommandExecutionRequest,
        *,
        actor: str = "anonymous",
    ) -> GateDecision:
        """Evaluate a request and record the decision in the audit log."""
        started = time.perf_counter()
        decision = self.evaluate(payload, actor=actor)
        latency_ms = (time.perf_counter() - started) * 1000

        if decision.allowed:
            logger.info("Command accepted for {}: {}", actor, redact_text(" ".join(decision.argv)))
        else:
            logger.warning(
                "Command rejected for {} ({}): {}",
                actor,
                decision.result.code.value,
                redact_text(decision.result.reason),
            )

        if self.sink is not None:
            await self._audit(decision, payload, actor=actor, latency_ms=latency_ms)
        return decision

    async def _audit(
        self,
        decision: GateDecision,
        payload: dict[str, Any] | CommandExecutionRequest,
        *,
        actor: str,
        latency_ms: float,
    ) -> None:
        if isinstance(payload, CommandExecutionRequest):
            args = list(payload.args)
        else:
            raw_args = payload.get("args") if isinstance(payload, dict) else None
            args = [str(a) for a in raw_args] if isinstance(raw_args, list) else []

        rejected = isinstance(decision.result, Rejected)
        event = DiagnosticEvent(
            name="command.rejected" if rejected else "command.accepted",
            component="gate",
            severity="warning" if rejected else "info",
            actor=actor,
            program=decision.program,
            status="rejected" if rejected else "accepted",
            latency_ms=round(latency_ms, 3),
            error_code=decision.result.code.value if rejected else None,
            error_message=decision.result.reason if rejected else None,
            attrs={
                "args": args,
                "working_directory": decision.working_directory,
                "timeout_seconds": decision.timeout_seconds,
            },
        )
        try:
            await self.sink.emit(event)
        except OSError:
            logger.exception("Failed to write audit event {}", event.event_id)
