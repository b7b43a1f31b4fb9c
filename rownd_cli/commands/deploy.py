"""``rownd app deploy`` and ``rownd app deploy-json``."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from rownd_cli.appconfig import (
    compute_change_set,
    fetch_app_config,
    merge_app_config,
    read_toml,
)
from rownd_cli.config.constants import TOML_FILENAME
from rownd_cli.context import CommandContext
from rownd_cli.exceptions import InvalidConfigError, MissingConfigFileError
from rownd_cli.utils.logger import get_logger

logger = get_logger(__name__)


def deploy_config(ctx: CommandContext, path: str | Path = TOML_FILENAME) -> int:
    """Merge the local TOML into the remote app config and PUT it if changed."""
    app_id = ctx.require_app()
    # Local validation happens before any request is made.
    local = read_toml(ctx.path(path))

    ctx.out("Fetching current configuration...")
    remote = fetch_app_config(ctx.api, app_id)
    merged = merge_app_config(remote, local)
    changes = compute_change_set(remote, merged)
    logger.debug(
        "Computed configuration changes",
        event="rownd.deploy.changes",
        app_id=app_id,
        changed=changes.as_dict(),
    )

    if not changes.has_changes:
        ctx.out("No changes detected in configuration")
        return 0

    ctx.out("Deploying configuration changes...")
    for section, changed in changes.as_dict().items():
        if changed:
            ctx.out(f"  - {section}")
    ctx.api.put(f"applications/{app_id}", json=merged, action="deploy config")
    ctx.out("Configuration deployed successfully")
    return 0


def load_json_document(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise MissingConfigFileError(str(path))
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise InvalidConfigError(f"Failed to parse {path}: {exc}") from exc
    if not isinstance(document, dict):
        raise InvalidConfigError(f"{path} must contain a JSON object")
    return document


def deploy_json_config(ctx: CommandContext, path: str | Path) -> int:
    """PATCH a raw JSON document onto the selected app, without merging."""
    app_id = ctx.require_app()
    ctx.out("Reading JSON configuration...")
    document = load_json_document(ctx.path(path))
    ctx.out("Deploying configuration...")
    ctx.api.patch(f"applications/{app_id}", json=document, action="deploy config")
    ctx.out("Configuration deployed successfully")
    return 0


def cmd_deploy(ctx: CommandContext, args: argparse.Namespace) -> int:
    return deploy_config(ctx, args.file)


def cmd_deploy_json(ctx: CommandContext, args: argparse.Namespace) -> int:
    return deploy_json_config(ctx, args.path)
