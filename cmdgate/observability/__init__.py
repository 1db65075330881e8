"""Observability helpers for audit logging, redaction and health."""

from cmdgate.observability.health import collect_health_snapshot
from cmdgate.observability.logging_sink import JsonlLoggingSink
from cmdgate.observability.redaction import REDACTED, redact_payload

__all__ = ["JsonlLoggingSink", "REDACTED", "collect_health_snapshot", "redact_payload"]
