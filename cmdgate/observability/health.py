"""Health surface for the gate: is it configured to make decisions?"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from cmdgate.config.loader import get_audit_log_path
from cmdgate.config.schema import Config
from cmdgate.core.types import CommandSpec
from cmdgate.policy.commands import COMMAND_TABLE
from cmdgate.policy.patterns import compile_patterns

_CRITICAL_COMPONENTS = {"config", "project_root", "command_table"}
_STATUS_ORDER = {"ok": 0, "unknown": 1, "degraded": 2, "failed": 3}


def _worst(a: str, b: str) -> str:
    return a if _STATUS_ORDER.get(a, 99) >= _STATUS_ORDER.get(b, 99) else b


@dataclass(slots=True)
class HealthEvidence:
    """Component-level health status with optional machine details."""

    component: str
    status: str
    summary: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self, *, deep: bool = False) -> dict[str, Any]:
        payload = {
            "component": self.component,
            "status": self.status,
            "summary": self.summary,
        }
        if deep:
            payload["details"] = self.details
        return payload


@dataclass(slots=True)
class HealthSnapshot:
    """Top-level health snapshot."""

    liveness: str
    readiness: str
    degraded: bool
    generated_at: str
    evidence: list[HealthEvidence] = field(default_factory=list)

    def to_dict(self, *, deep: bool = False) -> dict[str, Any]:
        return {
            "liveness": self.liveness,
            "readiness": self.readiness,
            "degraded": self.degraded,
            "generated_at": self.generated_at,
            "evidence": [item.to_dict(deep=deep) for item in self.evidence],
        }


def _config_evidence(config: Config, config_path: Path | None) -> HealthEvidence:
    details: dict[str, Any] = {
        "path": str(config_path) if config_path else None,
        "extra_patterns": len(compile_patterns(config.policy.extra_patterns)),
    }
    if config_path is not None and not config_path.exists():
        return HealthEvidence("config", "ok", "No config file, using defaults", details)
    return HealthEvidence("config", "ok", "Config loaded", details)


def _project_root_evidence(config: Config) -> HealthEvidence:
    root = config.project_root_path
    details = {"project_root": str(root)}
    if not root.is_absolute():
        return HealthEvidence("project_root", "failed", "Project root must be absolute", details)
    if not root.is_dir():
        return HealthEvidence("project_root", "failed", "Project root does not exist", details)
    return HealthEvidence("project_root", "ok", f"Project root: {root}", details)


def _command_table_evidence(commands: Mapping[str, CommandSpec]) -> HealthEvidence:
    details = {
        "commands": sorted(commands),
        "free_form": sorted(
            f"{spec.name} {sub}".strip()
            for spec in commands.values()
            for sub, allowed in spec.args_by_subcommand.items()
            if not allowed and spec.max_args > 0
        ),
    }
    if not commands:
        return HealthEvidence("command_table", "failed", "No commands are whitelisted", details)
    return HealthEvidence(
        "command_table", "ok", f"{len(commands)} commands whitelisted", details
    )


def _audit_evidence(config: Config) -> HealthEvidence:
    if not config.audit.enabled:
        return HealthEvidence("audit_log", "degraded", "Audit log disabled")

    path = get_audit_log_path(config)
    details = {"path": str(path)}
    parent = path.parent
    while not parent.exists() and parent != parent.parent:
        parent = parent.parent
    if not os.access(parent, os.W_OK):
        return HealthEvidence("audit_log", "degraded", "Audit log location is not writable", details)
    return HealthEvidence("audit_log", "ok", f"Audit log: {path}", details)


def collect_health_snapshot(
    *,
    config: Config,
    config_path: Path | None = None,
    commands: Mapping[str, CommandSpec] = COMMAND_TABLE,
) -> HealthSnapshot:
    """Aggregate component evidence into liveness/readiness."""
    evidence = [
        _config_evidence(config, config_path),
        _project_root_evidence(config),
        _command_table_evidence(commands),
        _audit_evidence(config),
    ]

    readiness = "ok"
    degraded = False
    for item in evidence:
        if item.component in _CRITICAL_COMPONENTS:
            readiness = _worst(readiness, item.status)
        if item.status in {"degraded", "failed"}:
            degraded = True

    return HealthSnapshot(
        liveness="ok",
        readiness=readiness,
        degraded=degraded,
        generated_at=datetime.now(timezone.utc).isoformat(),
        evidence=evidence,
    )
