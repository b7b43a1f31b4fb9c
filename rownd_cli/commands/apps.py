"""``rownd app ...`` and ``rownd key create``."""

from __future__ import annotations

import argparse
import re
import secrets
from typing import Any

from rownd_cli.config.constants import ENV_FILENAME
from rownd_cli.config.credentials import write_env_file
from rownd_cli.context import CommandContext
from rownd_cli.exceptions import RequestFailedError
from rownd_cli.utils.logger import get_logger

from . import analyze, deploy, pull
from .selection import choose, print_listing

logger = get_logger(__name__)

DEFAULT_KEY_NAME = "CLI generated"


def generate_subdomain(name: str) -> str:
    """Slug of the app name (at most 20 chars) plus six random hex chars."""
    slug = re.sub(r"[^a-z0-9]", "-", name.lower())
    slug = re.sub(r"-+", "-", slug).strip("-")[:20]
    return f"{slug}-{secrets.token_hex(3)}"


def default_app_payload(name: str, account_id: str, subdomain: str) -> dict[str, Any]:
    return {
        "name": name,
        "account": account_id,
        "description": "",
        "hub": {
            "customizations": {
                "rounded_corners": True,
                "visual_swoops": True,
                "blur_background": True,
                "dark_mode": "auto",
            },
            "auth": {
                "sign_in_methods": {
                    "email": {"enabled": True},
                    "phone": {"enabled": False},
                    "apple": {"enabled": False, "client_id": ""},
                    "google": {
                        "enabled": False,
                        "client_id": "",
                        "client_secret": "",
                        "ios_client_id": "",
                        "scopes": [],
                    },
                    "crypto_wallet": {"enabled": False},
                    "passkeys": {
                        "enabled": False,
                        "registration_prompt_frequency": "14d",
                    },
                    "anonymous": {"enabled": True},
                },
                "show_app_icon": False,
            },
        },
        "subdomain": subdomain,
        "profile_storage_version": "v2",
    }


def create_api_key(
    ctx: CommandContext, app_id: str, name: str = DEFAULT_KEY_NAME
) -> dict[str, Any]:
    key = ctx.api.post(
        f"applications/{app_id}/creds", json={"name": name}, action="create API key"
    )
    if not isinstance(key, dict) or not key.get("client_id"):
        raise RequestFailedError(200, str(key), action="create API key")
    logger.info("API key created", event="rownd.key.created", app_id=app_id)
    return key


def create_key(ctx: CommandContext, name: str = DEFAULT_KEY_NAME) -> int:
    app_id = ctx.require_app()
    ctx.out(f"\nCreating API key for app {app_id}...")
    key = create_api_key(ctx, app_id, name)
    ctx.out("\nSuccessfully created API key")
    ctx.out("\nAPI Key Credentials:")
    ctx.out("-------------------")
    ctx.out(f"App Key: {key.get('client_id')}")
    ctx.out(f"App Secret: {key.get('secret')}")
    if key.get("created_at"):
        ctx.out(f"Created At: {key['created_at']}")
    return 0


def create_app(ctx: CommandContext, name: str) -> dict[str, Any]:
    """Create an app, select it, mint a key, write ``.env`` and pull the TOML.

    Returns the created application document.
    """
    account_id = ctx.require_account()
    subdomain = generate_subdomain(name)
    ctx.out(
        f'Creating app "{name}" with subdomain "{subdomain}" '
        f"for account {account_id}..."
    )
    app = ctx.api.post(
        "applications",
        json=default_app_payload(name, account_id, subdomain),
        action="create app",
    )
    app_id = app["id"]
    ctx.out(f"\nSuccessfully created app: {app.get('name', name)} ({app_id})")
    ctx.out(f" Subdomain: {subdomain}")

    ctx.update_config(selected_app_id=app_id)
    ctx.out("Set as current app")

    ctx.out("\nCreating API key...")
    key = create_api_key(ctx, app_id)
    write_env_file(
        {
            "ROWND_APP_ID": app_id,
            "ROWND_SUBDOMAIN": subdomain,
            "ROWND_APP_KEY": key["client_id"],
            "ROWND_APP_SECRET": key.get("secret", ""),
        },
        ctx.path(ENV_FILENAME),
    )
    ctx.out(f"\nCreated {ENV_FILENAME} file with app credentials")
    ctx.out("\nApp Credentials:")
    ctx.out("----------------")
    ctx.out(f"App ID: {app_id}")
    ctx.out(f"Subdomain: {subdomain}")
    ctx.out(f"App Key: {key['client_id']}")
    ctx.out(f"App Secret: {key.get('secret', '')}")

    pull.write_app_toml(ctx, app_id)
    logger.info(
        "App created", event="rownd.app.created", app_id=app_id, subdomain=subdomain
    )
    return app


def fetch_apps(ctx: CommandContext) -> list[dict[str, Any]]:
    account_id = ctx.require_account()
    result = ctx.api.get(
        f"accounts/{account_id}/applications", action="fetch apps"
    ) or {}
    logger.debug(
        "Fetched apps",
        event="rownd.app.listed",
        account_id=account_id,
        total=result.get("total_results"),
    )
    return list(result.get("results") or [])


def list_apps(ctx: CommandContext) -> int:
    apps = fetch_apps(ctx)
    if not apps:
        ctx.out("No apps found")
        return 0
    print_listing(ctx, "Available Apps", apps, ctx.config.selected_app_id)
    ctx.out("\n* indicates currently selected app")
    return 0


def select_app(ctx: CommandContext, index: int | None = None) -> int:
    apps = fetch_apps(ctx)
    if not apps:
        ctx.out("No apps found")
        return 0
    app = choose(
        ctx, "Available Apps", apps, ctx.config.selected_app_id, noun="app", index=index
    )
    if app is None:
        return 1
    ctx.update_config(selected_app_id=app["id"])
    ctx.out(f"\nSelected app: {app.get('name')} ({app['id']})")
    pull.write_app_toml(ctx, app["id"])
    return 0


def cmd_create(ctx: CommandContext, args: argparse.Namespace) -> int:
    create_app(ctx, args.name)
    return 0


def cmd_list(ctx: CommandContext, args: argparse.Namespace) -> int:
    return list_apps(ctx)


def cmd_select(ctx: CommandContext, args: argparse.Namespace) -> int:
    return select_app(ctx, index=args.index)


def cmd_key_create(ctx: CommandContext, args: argparse.Namespace) -> int:
    return create_key(ctx, args.name)


def register(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("app", help="Manage applications")
    app_sub = p.add_subparsers(dest="app_cmd", required=True)

    p_create = app_sub.add_parser("create", help="Create a new application")
    p_create.add_argument("name")
    p_create.set_defaults(func=cmd_create)

    p_list = app_sub.add_parser("list", help="List apps in the selected account")
    p_list.set_defaults(func=cmd_list)

    p_select = app_sub.add_parser("select", help="Select an app to work with")
    p_select.add_argument(
        "--index", type=int, help="Number from the listing; skips the prompt"
    )
    p_select.set_defaults(func=cmd_select)

    p_pull = app_sub.add_parser("pull", help="Pull app configuration into rownd.toml")
    p_pull.add_argument("--file", "-f", default="rownd.toml")
    p_pull.set_defaults(func=pull.cmd_pull)

    p_deploy = app_sub.add_parser("deploy", help="Deploy rownd.toml to the selected app")
    p_deploy.add_argument("--file", "-f", default="rownd.toml")
    p_deploy.set_defaults(func=deploy.cmd_deploy)

    p_json = app_sub.add_parser(
        "deploy-json", help="Deploy a raw JSON configuration document"
    )
    p_json.add_argument("path")
    p_json.set_defaults(func=deploy.cmd_deploy_json)

    p_analyze = app_sub.add_parser(
        "analyze-website", help="Analyze a website and apply the suggested config"
    )
    p_analyze.add_argument("url")
    p_analyze.add_argument("name")
    p_analyze.add_argument(
        "--skip-logo", action="store_true", help="Do not upload the detected logo"
    )
    p_analyze.set_defaults(func=analyze.cmd_analyze)

    p_key = sub.add_parser("key", help="Manage API keys")
    key_sub = p_key.add_subparsers(dest="key_cmd", required=True)
    p_key_create = key_sub.add_parser("create", help="Create an API key for the selected app")
    p_key_create.add_argument("--name", default=DEFAULT_KEY_NAME)
    p_key_create.set_defaults(func=cmd_key_create)
