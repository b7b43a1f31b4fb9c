"""``rownd app pull``: write the remote configuration to ``rownd.toml``."""

from __future__ import annotations

import argparse
from pathlib import Path

from rownd_cli.appconfig import fetch_app_config, write_toml
from rownd_cli.config.constants import TOML_FILENAME
from rownd_cli.context import CommandContext
from rownd_cli.utils.logger import get_logger

logger = get_logger(__name__)


def write_app_toml(
    ctx: CommandContext, app_id: str, path: str | Path = TOML_FILENAME
) -> Path:
    doc = fetch_app_config(ctx.api, app_id)
    toml_path = write_toml(doc, ctx.path(path))
    logger.info(
        "Wrote local configuration",
        event="rownd.pull.written",
        app_id=app_id,
        path=str(toml_path),
    )
    ctx.out(f"Updated {toml_path.name} with latest configuration")
    return toml_path


def pull_config(ctx: CommandContext, path: str | Path = TOML_FILENAME) -> int:
    app_id = ctx.require_app()
    ctx.out("Fetching latest configuration from Rownd...")
    write_app_toml(ctx, app_id, path)
    ctx.out("Local configuration updated successfully")
    return 0


def cmd_pull(ctx: CommandContext, args: argparse.Namespace) -> int:
    return pull_config(ctx, args.file)
