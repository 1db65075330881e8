"""Redaction helpers for audit payloads.

Arguments end up in the audit trail verbatim, so secrets passed as
``--token=...`` style flags are masked before anything is written.
"""

from __future__ import annotations

import re
from typing import Any

REDACTED = "***REDACTED***"

_SENSITIVE_KEYWORDS = (
    "token",
    "secret",
    "password",
    "passwd",
    "api_key",
    "apikey",
    "authorization",
    "cookie",
    "private_key",
)

_BEARER_RE = re.compile(r"(?i)\bBearer\s+[A-Za-z0-9._\-]+\b")
_FLAG_VALUE_RE = re.compile(r"^(-{1,2}[A-Za-z0-9_\-]+=)(.+)$")
# Same flags embedded in free text, such as a quoted rejection reason.
_EMBEDDED_FLAG_RE = re.compile(r"(?<![\w-])(-{1,2}([A-Za-z0-9_\-]+)=)[^\s'\"]+")
_SECRET_VALUE_PATTERNS = (
    re.compile(r"\bsk-[A-Za-z0-9]{8,}\b"),
    re.compile(r"\bnpm_[A-Za-z0-9]{20,}\b"),
    re.compile(r"\bgh[pousr]_[A-Za-z0-9]{20,}\b"),
)


def _is_sensitive_key(key: str | None) -> bool:
    if not key:
        return False
    normalized = key.lower().replace("-", "_")
    return any(token in normalized for token in _SENSITIVE_KEYWORDS)


def _mask_embedded_flag(match: re.Match[str]) -> str:
    if _is_sensitive_key(match.group(2)):
        return f"{match.group(1)}{REDACTED}"
    return match.group(0)


def redact_text(text: str) -> str:
    """Mask secrets in a single string (an argument or a log message)."""
    flag = _FLAG_VALUE_RE.match(text)
    if flag and _is_sensitive_key(flag.group(1).lstrip("-").rstrip("=")):
        return f"{flag.group(1)}{REDACTED}"

    redacted = _EMBEDDED_FLAG_RE.sub(_mask_embedded_flag, text)
    redacted = _BEARER_RE.sub(f"Bearer {REDACTED}", redacted)
    for pattern in _SECRET_VALUE_PATTERNS:
        redacted = pattern.sub(REDACTED, redacted)
    return redacted


def _redact(value: Any, key: str | None = None) -> Any:
    if _is_sensitive_key(key):
        return REDACTED

    if isinstance(value, dict):
        return {k: _redact(v, str(k)) for k, v in value.items()}

    if isinstance(value, list):
        return [_redact(item, key) for item in value]

    if isinstance(value, tuple):
        return tuple(_redact(item, key) for item in value)

    if isinstance(value, str):
        return redact_text(value)

    return value


def redact_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """Return a redacted copy of the audit payload."""
    return _redact(payload)
