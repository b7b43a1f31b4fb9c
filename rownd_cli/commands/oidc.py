"""``rownd oidc ...``: manage OIDC client registrations through YAML files.

Requests here authenticate with the app key/secret pair stored in
``.rownd-credentials.json`` (see ``rownd oidc key-create``), not with the
user's bearer token.
"""

from __future__ import annotations

import argparse
import re
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from rownd_cli.config.constants import APP_CREDENTIALS_FILENAME
from rownd_cli.config.credentials import AppCredentials, save_app_credentials
from rownd_cli.context import CommandContext
from rownd_cli.exceptions import InvalidConfigError, MissingConfigFileError
from rownd_cli.utils.logger import get_logger

from .apps import create_api_key

logger = get_logger(__name__)

OIDC_KEY_NAME = "OIDC CLI Key"

# Fields copied from the provider's discovery document into _metadata.endpoints
ENDPOINT_FIELDS = (
    "issuer",
    "authorization_endpoint",
    "token_endpoint",
    "userinfo_endpoint",
    "jwks_uri",
    "end_session_endpoint",
    "registration_endpoint",
    "scopes_supported",
    "response_types_supported",
    "grant_types_supported",
    "subject_types_supported",
    "id_token_signing_alg_values_supported",
    "token_endpoint_auth_methods_supported",
)


def template_filename(name: str) -> str:
    return re.sub(r"\s+", "_", name).lower() + "_oidc.yaml"


def client_template(name: str) -> dict[str, Any]:
    return {
        "name": name,
        "description": f"{name} OIDC Provider",
        "config": {
            "allowed_origins": ["https://example.com"],
            "redirect_uris": ["https://example.com/callback"],
            "post_logout_uris": ["https://example.com/logout"],
        },
    }


def _dump(data: dict[str, Any]) -> str:
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)


def load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise MissingConfigFileError(str(path))
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise InvalidConfigError(f"Failed to parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidConfigError(f"{path} must contain a YAML mapping")
    return data


def render_client_yaml(client: dict[str, Any]) -> str:
    """Server response as YAML: read-only metadata first, editable fields after."""
    document = {
        "_metadata": {
            "id": client.get("id"),
            "app_id": client.get("app_id"),
            "created_at": client.get("created_at"),
            "credentials": [
                {"client_id": cred.get("client_id"), "secret": cred.get("secret")}
                for cred in client.get("credentials") or []
            ],
        },
        "name": client.get("name"),
        "description": client.get("description"),
        "config": client.get("config"),
    }
    header = (
        f"# OIDC Client ID: {client.get('id')}\n"
        f"# App ID: {client.get('app_id')}\n"
        f"# Created: {client.get('created_at')}\n"
    )
    return header + _dump(document)


def create_template(ctx: CommandContext, name: str) -> Path:
    path = ctx.path(template_filename(name))
    path.write_text(_dump(client_template(name)), encoding="utf-8")
    ctx.out(f"Created OIDC configuration file: {path.name}")
    return path


def push_client(ctx: CommandContext, yaml_path: str | Path) -> dict[str, Any]:
    """Create or update the client described by ``yaml_path`` and rewrite it."""
    app_id = ctx.require_app()
    path = ctx.path(yaml_path)
    document = load_yaml(path)
    payload = {
        "name": document.get("name"),
        "description": document.get("description"),
        "config": document.get("config"),
    }
    client_id = (document.get("_metadata") or {}).get("id")
    client = ctx.app_key_client()
    if client_id:
        response = client.request(
            "PUT",
            f"applications/{app_id}/oidc-clients/{client_id}",
            json=payload,
            action="update OIDC client",
        )
    else:
        response = client.request(
            "POST",
            f"applications/{app_id}/oidc-clients",
            json=payload,
            action="create OIDC client",
        )

    path.write_text(render_client_yaml(response), encoding="utf-8")
    logger.info(
        "OIDC client pushed",
        event="rownd.oidc.pushed",
        app_id=app_id,
        client_id=response.get("id"),
        created_new=not client_id,
    )
    if client_id:
        ctx.out("OIDC configuration updated successfully")
    else:
        credentials = response.get("credentials") or [{}]
        ctx.out("OIDC configuration created successfully")
        ctx.out(f"Client ID: {response.get('id')}")
        ctx.out(f"Client Secret: {credentials[0].get('secret')}")
    return response


def _created_date(value: Any) -> str:
    if not value:
        return ""
    try:
        return datetime.fromisoformat(str(value)).date().isoformat()
    except ValueError:
        return str(value)


def list_clients(ctx: CommandContext) -> int:
    app_id = ctx.require_app()
    response = ctx.app_key_client().request(
        "GET", f"applications/{app_id}/oidc-clients", action="fetch OIDC clients"
    ) or {}
    rows = [
        (str(c.get("name", "")), str(c.get("id", "")), _created_date(c.get("created_at")))
        for c in response.get("results") or []
    ]
    if not rows:
        ctx.out("No OIDC clients found")
        return 0
    headers = ("name", "id", "created")
    widths = [max(len(h), *(len(r[i]) for r in rows)) for i, h in enumerate(headers)]
    ctx.out("  ".join(h.ljust(w) for h, w in zip(headers, widths)))
    ctx.out("  ".join("-" * w for w in widths))
    for row in rows:
        ctx.out("  ".join(v.ljust(w) for v, w in zip(row, widths)))
    return 0


def get_client(ctx: CommandContext, client_id: str) -> Path:
    app_id = ctx.require_app()
    response = ctx.app_key_client().request(
        "GET",
        f"applications/{app_id}/oidc-clients/{client_id}",
        action="fetch OIDC client",
    )
    path = ctx.path(f"{response.get('name')}_OIDC.yaml")
    path.write_text(_dump(response), encoding="utf-8")
    ctx.out(f"Configuration saved to {path.name}")
    return path


def create_credentials(ctx: CommandContext) -> AppCredentials:
    app_id = ctx.require_app()
    key = create_api_key(ctx, app_id, OIDC_KEY_NAME)
    credentials = AppCredentials(app_key=key["client_id"], app_secret=key.get("secret", ""))
    save_app_credentials(credentials, ctx.path(APP_CREDENTIALS_FILENAME))
    ctx.out(f"App credentials saved to {APP_CREDENTIALS_FILENAME}")
    return credentials


def add_endpoints(ctx: CommandContext, yaml_path: str | Path) -> dict[str, Any]:
    """Store the provider's discovery endpoints under ``_metadata.endpoints``."""
    path = ctx.path(yaml_path)
    document = load_yaml(path)
    metadata = document.get("_metadata") or {}
    app_id = metadata.get("app_id")
    if not app_id:
        raise InvalidConfigError(
            "YAML file must contain app_id in _metadata. Please push configuration first.",
            hint="rownd oidc push <yaml>",
        )

    discovery = ctx.api.get_public(
        f"oidc/{app_id}/.well-known/openid-configuration",
        action="fetch OIDC endpoints",
    ) or {}
    endpoints = {key: discovery.get(key) for key in ENDPOINT_FIELDS}
    document["_metadata"] = {**metadata, "endpoints": endpoints}
    path.write_text(_dump(document), encoding="utf-8")

    ctx.out("OIDC endpoints added to configuration")
    ctx.out("\nKey Endpoints:")
    ctx.out("-------------")
    ctx.out(f"Authorization: {endpoints['authorization_endpoint']}")
    ctx.out(f"Token: {endpoints['token_endpoint']}")
    ctx.out(f"UserInfo: {endpoints['userinfo_endpoint']}")
    ctx.out(f"JWKS: {endpoints['jwks_uri']}")
    return endpoints


def cmd_create(ctx: CommandContext, args: argparse.Namespace) -> int:
    create_template(ctx, args.name)
    return 0


def cmd_push(ctx: CommandContext, args: argparse.Namespace) -> int:
    push_client(ctx, args.yaml_path)
    return 0


def cmd_list(ctx: CommandContext, args: argparse.Namespace) -> int:
    return list_clients(ctx)


def cmd_get(ctx: CommandContext, args: argparse.Namespace) -> int:
    get_client(ctx, args.client_id)
    return 0


def cmd_key_create(ctx: CommandContext, args: argparse.Namespace) -> int:
    create_credentials(ctx)
    return 0


def cmd_endpoints(ctx: CommandContext, args: argparse.Namespace) -> int:
    add_endpoints(ctx, args.yaml_path)
    return 0


def register(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("oidc", help="Manage OIDC client configurations")
    oidc_sub = p.add_subparsers(dest="oidc_cmd", required=True)

    p_create = oidc_sub.add_parser("create", help="Create a new OIDC configuration YAML file")
    p_create.add_argument("name")
    p_create.set_defaults(func=cmd_create)

    p_push = oidc_sub.add_parser("push", help="Push OIDC configuration from YAML file")
    p_push.add_argument("yaml_path")
    p_push.set_defaults(func=cmd_push)

    p_list = oidc_sub.add_parser("list", help="List all OIDC configurations")
    p_list.set_defaults(func=cmd_list)

    p_get = oidc_sub.add_parser("get", help="Save an OIDC configuration to YAML")
    p_get.add_argument("client_id")
    p_get.set_defaults(func=cmd_get)

    p_key = oidc_sub.add_parser("key-create", help="Create and store app credentials")
    p_key.set_defaults(func=cmd_key_create)

    p_endpoints = oidc_sub.add_parser(
        "endpoints", help="Fetch OIDC endpoints and add them to a YAML file"
    )
    p_endpoints.add_argument("yaml_path")
    p_endpoints.set_defaults(func=cmd_endpoints)
