"""``rownd set-schema``: install the default user-data schema."""

from __future__ import annotations

import argparse
from typing import Any

from rownd_cli.context import CommandContext
from rownd_cli.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SCHEMA_FIELDS = (
    ("email", "Email"),
    ("nick_name", "Nick name"),
    ("first_name", "First name"),
    ("last_name", "Last name"),
    ("phone_number", "Phone number"),
    ("zip_code", "Zip code"),
)


def default_schema() -> dict[str, Any]:
    return {
        "user_verification_fields": ["email"],
        "schema": {
            key: {
                "type": "string",
                "required": False,
                "data_category": "pii_basic",
                "display_name": display_name,
                "owned_by": "user",
                "user_visible": True,
            }
            for key, display_name in DEFAULT_SCHEMA_FIELDS
        },
    }


def set_schema(ctx: CommandContext, app_id: str | None = None) -> int:
    app_id = app_id or ctx.require_app()
    ctx.out("Setting app schema...")
    ctx.api.put(
        f"applications/{app_id}/schema", json=default_schema(), action="set schema"
    )
    logger.info("Schema set", event="rownd.schema.set", app_id=app_id)
    ctx.out("Schema set successfully")
    return 0


def cmd_set_schema(ctx: CommandContext, args: argparse.Namespace) -> int:
    return set_schema(ctx, args.app_id)


def register(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("set-schema", help="Set the default user data schema")
    p.add_argument("--app-id", help="App to update (defaults to the selected app)")
    p.set_defaults(func=cmd_set_schema)
