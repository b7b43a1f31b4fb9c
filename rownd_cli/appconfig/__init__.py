"""Application configuration: remote document, local TOML file and the merge between them."""

from .merge import ChangeSet, compute_change_set, merge_app_config
from .projection import LocalAppConfig, generate_toml_content, read_toml, write_toml
from .remote import fetch_app_config, normalize_app_config, validate_app_config

__all__ = [
    "ChangeSet",
    "LocalAppConfig",
    "compute_change_set",
    "fetch_app_config",
    "generate_toml_content",
    "merge_app_config",
    "normalize_app_config",
    "read_toml",
    "validate_app_config",
    "write_toml",
]
