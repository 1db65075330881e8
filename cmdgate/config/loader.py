"""Configuration loading and saving."""

from __future__ import annotations

import json
import os
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from cmdgate.config.schema import Config

CONFIG_ENV_VAR = "CMDGATE_CONFIG"


class ConfigError(Exception):
    """Raised when a config file exists but cannot be used."""


def get_data_dir() -> Path:
    """Directory holding config and logs (``~/.cmdgate``)."""
    return Path.home() / ".cmdgate"


def get_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return get_data_dir() / "config.json"


def get_audit_log_path(config: Config) -> Path:
    if config.audit.path:
        return Path(config.audit.path).expanduser()
    return get_data_dir() / "logs" / "audit.jsonl"


def load_config(config_path: Path | None = None) -> Config:
    """Load config from disk, falling back to defaults when no file exists."""
    path = config_path or get_config_path()
    if not path.exists():
        logger.debug("No config at {}, using defaults", path)
        return Config()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config {path}: {e}") from e


def save_config(config: Config, config_path: Path | None = None) -> Path:
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = config.model_dump(by_alias=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path
