"""``rownd create-demo`` and ``rownd bootstrap-demo``."""

from __future__ import annotations

import argparse
from typing import Any

from rownd_cli.config.constants import DEFAULT_CONSOLE_URL, ENV_APP_KEY, ENV_FILENAME
from rownd_cli.config.credentials import read_env_file, resolve_app_key
from rownd_cli.context import CommandContext
from rownd_cli.exceptions import MissingAppCredentialsError
from rownd_cli.utils.logger import get_logger

from .analyze import analyze_website
from .apps import create_app

logger = get_logger(__name__)


def create_demo(ctx: CommandContext, website: str) -> dict[str, Any]:
    app_id = ctx.require_app()
    app_key = resolve_app_key(ctx.path(ENV_FILENAME))
    ctx.out(f"Creating demo with app key: {app_key[:10]}...")

    demo = ctx.analyzer.create_demo(website, app_key)
    logger.info(
        "Demo created",
        event="rownd.demo.created",
        app_id=app_id,
        demo_id=demo.get("demoId"),
    )
    ctx.out("Demo created successfully!")
    ctx.out(f"\nDemo URL: {demo.get('demoUrl')}")
    ctx.out(f"Demo ID: {demo.get('demoId')}")
    ctx.out(f"Expires: {demo.get('expiresHuman')}")
    ctx.out(f"Rownd App: {DEFAULT_CONSOLE_URL}/home/{app_id}")
    return demo


def bootstrap_demo(
    ctx: CommandContext, website: str, app_name: str, *, upload_logo: bool = True
) -> dict[str, Any]:
    """Create an app, configure it from ``website`` and spin up a demo."""
    ctx.out("Creating Rownd app...")
    create_app(ctx, app_name)

    if not read_env_file(ctx.path(ENV_FILENAME)).get(ENV_APP_KEY):
        raise MissingAppCredentialsError(
            "App creation did not generate an app key", hint="rownd key create"
        )

    ctx.out("Analyzing website and configuring app...")
    analyze_website(ctx, website, app_name, upload_logo=upload_logo)

    ctx.out("Creating demo website...")
    demo = create_demo(ctx, website)
    ctx.out("Demo bootstrap complete!")
    return demo


def cmd_create_demo(ctx: CommandContext, args: argparse.Namespace) -> int:
    create_demo(ctx, args.website)
    return 0


def cmd_bootstrap_demo(ctx: CommandContext, args: argparse.Namespace) -> int:
    bootstrap_demo(ctx, args.website, args.name, upload_logo=not args.skip_logo)
    return 0


def register(sub: argparse._SubParsersAction) -> None:
    p_demo = sub.add_parser("create-demo", help="Create a demo site for the selected app")
    p_demo.add_argument("website")
    p_demo.set_defaults(func=cmd_create_demo)

    p_boot = sub.add_parser(
        "bootstrap-demo", help="Create an app, configure it from a website and demo it"
    )
    p_boot.add_argument("website")
    p_boot.add_argument("name")
    p_boot.add_argument("--skip-logo", action="store_true")
    p_boot.set_defaults(func=cmd_bootstrap_demo)
