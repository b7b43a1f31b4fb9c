"""``rownd account ...``"""

from __future__ import annotations

import argparse
from typing import Any

from rownd_cli.context import CommandContext
from rownd_cli.utils.logger import get_logger

from .selection import choose, print_listing

logger = get_logger(__name__)


def fetch_accounts(ctx: CommandContext) -> list[dict[str, Any]]:
    result = ctx.api.get("accounts", action="fetch accounts") or {}
    return list(result.get("results") or [])


def list_accounts(ctx: CommandContext) -> int:
    accounts = fetch_accounts(ctx)
    if not accounts:
        ctx.out("No accounts found")
        return 0
    print_listing(ctx, "Available Accounts", accounts, ctx.config.selected_account_id)
    ctx.out("\n* indicates currently selected account")
    return 0


def select_account(ctx: CommandContext, index: int | None = None) -> int:
    accounts = fetch_accounts(ctx)
    if not accounts:
        ctx.out("No accounts found")
        return 0
    account = choose(
        ctx,
        "Available Accounts",
        accounts,
        ctx.config.selected_account_id,
        noun="account",
        index=index,
    )
    if account is None:
        return 1
    ctx.update_config(selected_account_id=account["id"])
    logger.info(
        "Account selected", event="rownd.account.selected", account_id=account["id"]
    )
    ctx.out(f"\nSelected account: {account.get('name')} ({account['id']})")
    return 0


def cmd_list(ctx: CommandContext, args: argparse.Namespace) -> int:
    return list_accounts(ctx)


def cmd_select(ctx: CommandContext, args: argparse.Namespace) -> int:
    return select_account(ctx, index=args.index)


def register(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("account", help="Manage accounts")
    account_sub = p.add_subparsers(dest="account_cmd", required=True)

    p_list = account_sub.add_parser("list", help="List available accounts")
    p_list.set_defaults(func=cmd_list)

    p_select = account_sub.add_parser("select", help="Select an account to work with")
    p_select.add_argument(
        "--index", type=int, help="Number from the listing; skips the prompt"
    )
    p_select.set_defaults(func=cmd_select)
