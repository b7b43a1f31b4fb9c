"""``rownd config ...``: edit the persisted CLI configuration."""

from __future__ import annotations

import argparse

from rownd_cli.auth.token_manager import REFRESH_TOKEN_CACHE_KEY
from rownd_cli.config.constants import SETTABLE_KEYS
from rownd_cli.context import CommandContext
from rownd_cli.exceptions import InvalidConfigError
from rownd_cli.utils.logger import get_logger

logger = get_logger(__name__)


def set_token(ctx: CommandContext, token: str) -> int:
    ctx.update_config(token=token)
    ctx.out("Token saved successfully")
    return 0


def set_refresh_token(ctx: CommandContext, refresh_token: str) -> int:
    ctx.update_config(refresh_token=refresh_token)
    ctx.token_manager.cache.delete(REFRESH_TOKEN_CACHE_KEY)
    ctx.out("Refresh token saved successfully")
    return 0


def set_value(ctx: CommandContext, key: str, value: str) -> int:
    """Set any persisted key; camelCase names are accepted too."""
    field = _field_name(key)
    if field not in SETTABLE_KEYS:
        raise InvalidConfigError(
            f"Unknown config key '{key}'. Valid keys: {', '.join(SETTABLE_KEYS)}"
        )
    ctx.update_config(**{field: value})
    logger.debug("Config value updated", event="rownd.config.set", key=field)
    ctx.out(f"Set {field}")
    return 0


def show(ctx: CommandContext) -> int:
    ctx.out(f"Config file: {ctx.config_path}")
    for key, value in ctx.config.redacted().items():
        ctx.out(f"  {key}: {value if value not in (None, '') else '-'}")
    return 0


def _field_name(key: str) -> str:
    out = []
    for ch in key.replace("-", "_"):
        if ch.isupper():
            out.append("_" + ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def cmd_set_token(ctx: CommandContext, args: argparse.Namespace) -> int:
    return set_token(ctx, args.token)


def cmd_set_refresh_token(ctx: CommandContext, args: argparse.Namespace) -> int:
    return set_refresh_token(ctx, args.refresh_token)


def cmd_set(ctx: CommandContext, args: argparse.Namespace) -> int:
    return set_value(ctx, args.key, args.value)


def cmd_show(ctx: CommandContext, args: argparse.Namespace) -> int:
    return show(ctx)


def register(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("config", help="Manage CLI configuration")
    config_sub = p.add_subparsers(dest="config_cmd", required=True)

    p_token = config_sub.add_parser("set-token", help="Set the API access token")
    p_token.add_argument("token")
    p_token.set_defaults(func=cmd_set_token)

    p_refresh = config_sub.add_parser(
        "set-refresh-token", help="Set the refresh token used to renew access"
    )
    p_refresh.add_argument("refresh_token")
    p_refresh.set_defaults(func=cmd_set_refresh_token)

    p_set = config_sub.add_parser("set", help="Set a configuration value")
    p_set.add_argument("key", help=f"One of: {', '.join(SETTABLE_KEYS)}")
    p_set.add_argument("value")
    p_set.set_defaults(func=cmd_set)

    p_show = config_sub.add_parser("show", help="Show the current configuration")
    p_show.set_defaults(func=cmd_show)
