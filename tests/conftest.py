"""
Shared fixtures for the rownd CLI tests.

No network is used anywhere: every component takes a session, and tests
hand it a ``FakeSession`` that records requests and answers them from a
responder function.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from rownd_cli.context import CommandContext, create_context
from tests.fakes import FakeResp, FakeSession, Output, build_config


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path: Path):
    for name in (
        "ROWND_CLI_CONFIG",
        "ROWND_API_URL",
        "ROWND_ANALYZER_URL",
        "ROWND_ANALYZER_API_KEY",
        "ROWND_ANALYZER_API_SECRET",
        "ROWND_DEMO_URL",
        "ROWND_APP_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def make_ctx(tmp_path: Path, fake_session: FakeSession):
    """Factory for a CommandContext wired to ``fake_session`` and ``tmp_path``."""

    def _make(
        responder: Callable[..., FakeResp] | None = None,
        *,
        prompt: Callable[[str], str] | None = None,
        **config_overrides: Any,
    ) -> CommandContext:
        if responder is not None:
            fake_session.responder = responder
        overrides: dict[str, Any] = {"out": Output()}
        if prompt is not None:
            overrides["prompt"] = prompt
        return create_context(
            build_config(**config_overrides),
            tmp_path / "rownd-cli-config.json",
            session=fake_session,  # type: ignore[arg-type]
            cwd=tmp_path,
            **overrides,
        )

    return _make
