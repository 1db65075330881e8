"""Configuration schema for cmdgate."""

from __future__ import annotations

import os
import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Base(BaseModel):
    """Config models accept both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuditConfig(Base):
    """Append-only JSONL audit trail of gate decisions."""

    enabled: bool = True
    path: str = ""  # empty means <data dir>/logs/audit.jsonl
    rotate_bytes: int = Field(default=5 * 1024 * 1024, gt=0)
    max_backups: int = Field(default=3, ge=0)


class RateLimitConfig(Base):
    """Per-actor command budget with lockout after repeated violations."""

    enabled: bool = True
    max_commands_per_window: int = Field(default=10, gt=0)
    window_seconds: float = Field(default=60.0, gt=0)
    max_violations: int = Field(default=3, gt=0)
    lockout_seconds: float = Field(default=15 * 60.0, gt=0)


class PolicyConfig(Base):
    """Deployment additions to the built-in pattern library."""

    extra_patterns: dict[str, str] = Field(default_factory=dict)

    @field_validator("extra_patterns")
    @classmethod
    def patterns_compile(cls, v: dict[str, str]) -> dict[str, str]:
        for category, pattern in v.items():
            try:
                re.compile(pattern, re.IGNORECASE)
            except re.error as e:
                raise ValueError(f"extra pattern {category!r} does not compile: {e}") from e
        return v


class Config(Base):
    """Root configuration."""

    project_root: str = ""  # empty means the current working directory
    log_level: str = "INFO"
    audit: AuditConfig = Field(default_factory=AuditConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    policy: PolicyConfig = Field(default_factory=PolicyConfig)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level

    @property
    def project_root_path(self) -> Path:
        return Path(self.project_root).expanduser() if self.project_root else Path(os.getcwd())
