"""Application credentials kept in the working directory.

Two files live next to the project: ``.rownd-credentials.json`` holds the
app key/secret pair used for OIDC client management, and ``.env`` holds the
identifiers written when an app is created.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values
from pydantic import BaseModel, ValidationError

from rownd_cli.exceptions import InvalidConfigError, MissingAppCredentialsError
from rownd_cli.utils.logger import get_logger

from .constants import APP_CREDENTIALS_FILENAME, ENV_APP_KEY, ENV_FILENAME

logger = get_logger(__name__)


class AppCredentials(BaseModel):
    app_key: str
    app_secret: str


def load_app_credentials(path: str | Path = APP_CREDENTIALS_FILENAME) -> AppCredentials:
    cred_path = Path(path)
    if not cred_path.exists():
        raise MissingAppCredentialsError(
            f"App credentials not found in {cred_path}"
        )
    try:
        return AppCredentials.model_validate_json(cred_path.read_text(encoding="utf-8"))
    except ValidationError as exc:
        raise InvalidConfigError(f"Invalid credentials file {cred_path}: {exc}") from exc


def save_app_credentials(
    credentials: AppCredentials, path: str | Path = APP_CREDENTIALS_FILENAME
) -> None:
    Path(path).write_text(
        json.dumps(credentials.model_dump(), indent=2), encoding="utf-8"
    )


def write_env_file(values: Mapping[str, str], path: str | Path = ENV_FILENAME) -> None:
    """Write KEY=VALUE lines, replacing any existing file."""
    content = "\n".join(f"{key}={value}" for key, value in values.items())
    Path(path).write_text(content + "\n", encoding="utf-8")


def read_env_file(path: str | Path = ENV_FILENAME) -> dict[str, str]:
    env_path = Path(path)
    if not env_path.exists():
        return {}
    return {k: v for k, v in dotenv_values(env_path).items() if v is not None}


def resolve_app_key(env_path: str | Path = ENV_FILENAME) -> str:
    """Find the app key in the process environment, then in the .env file."""
    app_key = os.environ.get(ENV_APP_KEY)
    if app_key:
        return app_key
    app_key = read_env_file(env_path).get(ENV_APP_KEY)
    if not app_key:
        logger.debug(
            "App key not found", event="rownd.credentials.app_key_missing", path=str(env_path)
        )
        raise MissingAppCredentialsError(
            f"No app key found. Please ensure {ENV_APP_KEY} is set in your {ENV_FILENAME} file",
            hint="rownd app create <name>",
        )
    return app_key
