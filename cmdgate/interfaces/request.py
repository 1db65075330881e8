"""Shape validation for incoming command-execution requests.

Runs before the policy engine: a payload that is not even well-formed never
reaches the allowlist.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from cmdgate.core.types import (
    DEFAULT_TIMEOUT_MS,
    MAX_TIMEOUT_MS,
    MIN_TIMEOUT_MS,
    Rejected,
    RejectionCode,
    ValidationRequest,
)


class CommandExecutionRequest(BaseModel):
    """Payload accepted by the command-execution endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    command: StrictStr = Field(min_length=1, max_length=100)
    args: list[StrictStr] = Field(default_factory=list)
    working_directory: StrictStr | None = Field(default=None, alias="workingDirectory")
    timeout: StrictInt = Field(default=DEFAULT_TIMEOUT_MS, ge=MIN_TIMEOUT_MS, le=MAX_TIMEOUT_MS)

    def to_validation_request(self) -> ValidationRequest:
        return ValidationRequest(
            program=self.command,
            args=tuple(self.args),
            working_directory=self.working_directory,
            timeout_ms=self.timeout,
        )


def _format_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(item) for item in error.get("loc", ())) or "request"
        parts.append(f"{loc}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def parse_request(
    payload: dict[str, Any] | CommandExecutionRequest,
) -> CommandExecutionRequest | Rejected:
    """Validate a raw payload, returning the model or a ``MALFORMED_REQUEST`` rejection."""
    if isinstance(payload, CommandExecutionRequest):
        return payload
    if not isinstance(payload, dict):
        return Rejected(RejectionCode.MALFORMED_REQUEST, "invalid request data: expected an object")
    try:
        return CommandExecutionRequest.model_validate(payload)
    except ValidationError as e:
        return Rejected(RejectionCode.MALFORMED_REQUEST, f"invalid request data: {_format_errors(e)}")
