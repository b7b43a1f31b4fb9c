"""Persistent CLI configuration: model, defaults and load/save helpers."""

from .constants import DEFAULT_API_URL, DEFAULT_CONFIG_FILENAME
from .store import CliConfig, default_config_path, load_config, save_config

__all__ = [
    "CliConfig",
    "DEFAULT_API_URL",
    "DEFAULT_CONFIG_FILENAME",
    "default_config_path",
    "load_config",
    "save_config",
]
