"""Persistent CLI configuration.

The config is a single JSON document in the user's home directory. It is
loaded once per invocation into an explicit ``CliConfig`` object that
commands receive through their context, and written back wholesale by
``save_config`` after every mutation.

There is no locking and no atomic rename: two CLI processes sharing the
same file race, and the last writer wins. A crash mid-write can leave a
truncated file, which ``load_config`` then ignores with a warning.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from rownd_cli.exceptions import ConfigFileError
from rownd_cli.utils.logger import get_logger

from .constants import (
    DEFAULT_ANALYZER_URL,
    DEFAULT_API_URL,
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_DEMO_URL,
    ENV_ANALYZER_API_KEY,
    ENV_ANALYZER_API_SECRET,
    ENV_ANALYZER_URL,
    ENV_API_URL,
    ENV_CONFIG_PATH,
    ENV_DEMO_URL,
    SECRET_KEYS,
)

logger = get_logger(__name__)


def _env(name: str, default: str) -> Any:
    return lambda: os.environ.get(name) or default


class CliConfig(BaseModel):
    """In-memory view of the persisted config file.

    Keys are stored in camelCase on disk (``apiUrl``, ``refreshToken``...)
    and accepted in either case when loading.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    api_url: str = Field(default_factory=_env(ENV_API_URL, DEFAULT_API_URL))
    token: str | None = None
    refresh_token: str | None = None
    selected_account_id: str | None = None
    selected_app_id: str | None = None
    analyzer_url: str = Field(
        default_factory=_env(ENV_ANALYZER_URL, DEFAULT_ANALYZER_URL)
    )
    analyzer_api_key: str = Field(default_factory=_env(ENV_ANALYZER_API_KEY, ""))
    analyzer_api_secret: str = Field(
        default_factory=_env(ENV_ANALYZER_API_SECRET, "")
    )
    demo_url: str = Field(default_factory=_env(ENV_DEMO_URL, DEFAULT_DEMO_URL))

    def redacted(self) -> dict[str, Any]:
        """Return a snake_case dict with secrets masked, for display."""
        data = self.model_dump()
        for key in SECRET_KEYS:
            value = data.get(key)
            if value:
                data[key] = value[:6] + "..." if len(value) > 10 else "***"
        return data


def default_config_path() -> Path:
    override = os.environ.get(ENV_CONFIG_PATH)
    if override:
        return Path(override).expanduser()
    return Path.home() / DEFAULT_CONFIG_FILENAME


def load_config(path: str | Path | None = None) -> CliConfig:
    """Load the config file, falling back to defaults when absent or unreadable."""
    config_path = Path(path) if path else default_config_path()
    if not config_path.exists():
        logger.debug(
            "No saved configuration, using defaults",
            event="rownd.config.defaults",
            path=str(config_path),
        )
        return CliConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("config file must contain a JSON object")
        config = CliConfig.model_validate(data)
    except (OSError, ValueError) as exc:
        logger.warning(
            "Failed to load config, using defaults",
            event="rownd.config.load_failed",
            path=str(config_path),
            error=str(exc),
        )
        return CliConfig()

    logger.debug(
        "Loaded existing configuration",
        event="rownd.config.loaded",
        path=str(config_path),
    )
    return config


def save_config(config: CliConfig, path: str | Path | None = None) -> None:
    """Overwrite the config file with the current in-memory state."""
    config_path = Path(path) if path else default_config_path()
    payload = config.model_dump(by_alias=True, exclude_none=True)
    try:
        config_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except OSError as exc:
        raise ConfigFileError(
            f"Failed to save config to {config_path}: {exc}"
        ) from exc
    logger.debug(
        "Configuration saved", event="rownd.config.saved", path=str(config_path)
    )
