from __future__ import annotations

import argparse
import logging
import sys
from typing import Protocol, cast

import requests

from rownd_cli import __version__
from rownd_cli.commands import (
    accounts,
    apps,
    config_cmd,
    demo,
    images,
    oidc,
    schema,
)
from rownd_cli.config.constants import DEFAULT_REQUEST_TIMEOUT
from rownd_cli.context import CommandContext, build_context
from rownd_cli.exceptions import RowndCliError
from rownd_cli.utils.logger import configure, get_logger, logging_context

logger = get_logger(__name__)


class _Cmd(Protocol):
    def __call__(self, ctx: CommandContext, args: argparse.Namespace) -> int: ...


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="rownd", description="CLI for managing Rownd apps")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument(
        "--config",
        "-c",
        default=None,
        help="Path to config file (default: ~/.rownd-cli-config.json)",
    )
    p.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_REQUEST_TIMEOUT,
        help="HTTP request timeout in seconds",
    )
    p.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    config_cmd.register(sub)
    accounts.register(sub)
    apps.register(sub)
    images.register(sub)
    schema.register(sub)
    oidc.register(sub)
    demo.register(sub)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure(level=logging.DEBUG if args.verbose else logging.WARNING)

    func = cast(_Cmd, getattr(args, "func"))
    try:
        ctx = build_context(args)
        with logging_context(command=args.cmd):
            return func(ctx, args)
    except RowndCliError as exc:
        logger.debug(
            "Command failed",
            event="rownd.cli.failed",
            command=args.cmd,
            error_type=type(exc).__name__,
        )
        print(f"Error: {exc.message}", file=sys.stderr)
        if exc.hint:
            print(f"Try: {exc.hint}", file=sys.stderr)
        return exc.exit_code
    except requests.RequestException as exc:
        print(f"Error: network request failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
