"""``rownd app analyze-website``: derive a configuration from a live website."""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import requests

from rownd_cli.context import CommandContext
from rownd_cli.exceptions import AnalysisError, RowndCliError
from rownd_cli.utils.logger import get_logger

from .deploy import deploy_json_config
from .images import LOGO_TYPES, upload_image

logger = get_logger(__name__)


@dataclass
class LogoUploadTally:
    """Outcome of uploading one logo URL as every logo type."""

    results: dict[str, bool] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> int:
        return sum(1 for ok in self.results.values() if ok)

    @property
    def attempted(self) -> int:
        return len(self.results)


def upload_logos(
    ctx: CommandContext, logo_url: str, types: tuple[str, ...] = LOGO_TYPES
) -> LogoUploadTally:
    """Upload ``logo_url`` as each type. A failed type does not stop the rest."""
    tally = LogoUploadTally()
    for logo_type in types:
        try:
            upload_image(ctx, logo_url, logo_type)
        except (RowndCliError, requests.RequestException) as exc:
            reason = exc.message if isinstance(exc, RowndCliError) else str(exc)
            logger.warning(
                "Logo upload failed",
                event="rownd.analyze.logo_failed",
                logo_type=logo_type,
                error=reason,
            )
            ctx.out(f"Failed to upload {logo_type} logo: {reason}")
            tally.results[logo_type] = False
            tally.errors[logo_type] = reason
        else:
            tally.results[logo_type] = True
    ctx.out(f"\nLogo upload summary: {tally.succeeded}/{len(types)} successful")
    return tally


def _timestamp() -> str:
    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return now.replace("+00:00", "Z").replace(":", "-").replace(".", "-")


def _logo_url(analysis: dict[str, Any]) -> str | None:
    logo = ((analysis.get("analysis") or {}).get("features") or {}).get("logo") or {}
    url = logo.get("url") if isinstance(logo, dict) else None
    return url or None


def _write_json(path: Path, payload: Any) -> None:
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def analyze_website(
    ctx: CommandContext, url: str, name: str, *, upload_logo: bool = True
) -> LogoUploadTally | None:
    """Analyze ``url``, deploy the suggested config and upload the logo.

    Returns the logo tally, or None when no logo was uploaded.
    """
    app_id = ctx.require_app()

    ctx.out("Fetching current app configuration...")
    current = ctx.api.get(f"applications/{app_id}", action="fetch app config")

    ctx.out("Analyzing website...")
    analysis = ctx.analyzer.analyze(url, name, current)

    stamp = _timestamp()
    analysis_path = ctx.path(f"analysis-{stamp}.json")
    _write_json(analysis_path, analysis)
    ctx.out(f"Full analysis saved to: {analysis_path}")

    if not analysis.get("config"):
        raise AnalysisError("No Rownd configuration found in analysis")
    config_path = ctx.path(f"rownd-config-{stamp}.json")
    _write_json(config_path, analysis["config"])
    ctx.out(f"Configuration extracted to: {config_path}")

    deploy_json_config(ctx, config_path)

    logo_url = _logo_url(analysis)
    if not logo_url:
        ctx.out("\nNo logo found in analysis")
        return None
    if not upload_logo:
        ctx.out(f"\nLogo found at {logo_url}; skipping upload")
        return None
    ctx.out(f"\nLogo detected at {logo_url}, starting uploads...")
    return upload_logos(ctx, logo_url)


def cmd_analyze(ctx: CommandContext, args: argparse.Namespace) -> int:
    analyze_website(ctx, args.url, args.name, upload_logo=not args.skip_logo)
    return 0
