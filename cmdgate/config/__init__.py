"""Configuration module for cmdgate."""

from cmdgate.config.loader import ConfigError, get_config_path, load_config
from cmdgate.config.schema import Config

__all__ = ["Config", "ConfigError", "load_config", "get_config_path"]
