"""Per-invocation state shared by every command handler."""

from __future__ import annotations

import argparse
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import requests

from rownd_cli.api.analyzer import AnalyzerClient
from rownd_cli.api.client import ApiClient, AppKeyClient
from rownd_cli.api.http import build_session
from rownd_cli.auth.token_manager import TokenManager
from rownd_cli.config.constants import APP_CREDENTIALS_FILENAME, DEFAULT_REQUEST_TIMEOUT
from rownd_cli.config.credentials import load_app_credentials
from rownd_cli.config.store import CliConfig, default_config_path, load_config, save_config
from rownd_cli.exceptions import NoAccountSelectedError, NoAppSelectedError


@dataclass
class CommandContext:
    """Config, clients and terminal I/O for one CLI invocation.

    ``prompt`` and ``out`` default to ``input`` and ``print`` and are
    replaced in tests.
    """

    config: CliConfig
    config_path: Path
    session: requests.Session
    token_manager: TokenManager
    api: ApiClient
    analyzer: AnalyzerClient
    cwd: Path = field(default_factory=Path.cwd)
    timeout: float = DEFAULT_REQUEST_TIMEOUT
    prompt: Callable[[str], str] = input
    out: Callable[..., Any] = print

    def path(self, name: str | Path) -> Path:
        """Resolve a working-directory relative path."""
        p = Path(name)
        return p if p.is_absolute() else self.cwd / p

    def update_config(self, **changes: Any) -> None:
        for key, value in changes.items():
            setattr(self.config, key, value)
        save_config(self.config, self.config_path)

    def require_account(self) -> str:
        if not self.config.selected_account_id:
            raise NoAccountSelectedError()
        return self.config.selected_account_id

    def require_app(self) -> str:
        if not self.config.selected_app_id:
            raise NoAppSelectedError()
        return self.config.selected_app_id

    def app_key_client(self) -> AppKeyClient:
        credentials = load_app_credentials(self.path(APP_CREDENTIALS_FILENAME))
        return AppKeyClient(
            self.config, credentials, session=self.session, timeout=self.timeout
        )


def create_context(
    config: CliConfig,
    config_path: Path,
    *,
    session: requests.Session | None = None,
    cwd: Path | None = None,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
    **overrides: Any,
) -> CommandContext:
    """Wire a context around an already loaded config."""
    session = session or build_session()
    token_manager = TokenManager(
        config, config_path=config_path, session=session, timeout=timeout
    )
    return CommandContext(
        config=config,
        config_path=config_path,
        session=session,
        token_manager=token_manager,
        api=ApiClient(config, token_manager, session=session, timeout=timeout),
        analyzer=AnalyzerClient(config, session=session, timeout=timeout),
        cwd=cwd or Path.cwd(),
        timeout=timeout,
        **overrides,
    )


def build_context(args: argparse.Namespace) -> CommandContext:
    config_path = Path(args.config) if getattr(args, "config", None) else default_config_path()
    config = load_config(config_path)
    return create_context(
        config, config_path, timeout=getattr(args, "timeout", DEFAULT_REQUEST_TIMEOUT)
    )
