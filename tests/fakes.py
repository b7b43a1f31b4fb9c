"""Fake HTTP plumbing and sample documents shared by the tests."""

from __future__ import annotations

import base64
import json
import time
from collections.abc import Callable
from typing import Any

from rownd_cli.config.store import CliConfig

API_URL = "https://api.test"
ANALYZER_URL = "https://analyzer.test"
DEMO_URL = "https://demo.test/create-demo"


class FakeResp:
    def __init__(
        self,
        status_code: int = 200,
        data: Any = None,
        *,
        text: str | None = None,
        content: bytes | None = None,
    ):
        self.status_code = status_code
        self._data = data
        if text is None:
            text = "" if data is None else json.dumps(data)
        self.text = text
        self.content = content if content is not None else text.encode()

    def json(self) -> Any:
        if self._data is None:
            return json.loads(self.text)
        return self._data


class FakeSession:
    """Stands in for requests.Session; only ``request`` is used by the CLI."""

    def __init__(self, responder: Callable[..., FakeResp] | None = None):
        self.responder = responder or (lambda method, url, **kw: FakeResp(200, {}))
        self.calls: list[dict[str, Any]] = []
        self.headers: dict[str, str] = {}

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResp:
        self.calls.append({"method": method, "url": url, **kwargs})
        return self.responder(method, url, **kwargs)

    def calls_to(self, method: str, suffix: str) -> list[dict[str, Any]]:
        return [
            c for c in self.calls if c["method"] == method and c["url"].endswith(suffix)
        ]


def make_jwt(seconds_from_now: float, *, now: float | None = None) -> str:
    base = time.time() if now is None else now
    payload = {"exp": int(base + seconds_from_now), "sub": "user-1"}
    b = base64.urlsafe_b64encode(json.dumps(payload).encode()).rstrip(b"=")
    return "h." + b.decode("ascii") + ".s"


class Output:
    """Collects what a command prints through ``ctx.out``."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def __call__(self, *args: Any) -> None:
        self.lines.append(" ".join(str(a) for a in args))

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


def build_config(**overrides: Any) -> CliConfig:
    values: dict[str, Any] = {
        "api_url": API_URL,
        "token": make_jwt(3600),
        "refresh_token": "refresh-1",
        "selected_account_id": "acc-1",
        "selected_app_id": "app-1",
        "analyzer_url": ANALYZER_URL,
        "analyzer_api_key": "ak",
        "analyzer_api_secret": "as",
        "demo_url": DEMO_URL,
    }
    values.update(overrides)
    return CliConfig(**values)


def remote_app(**hub_overrides: Any) -> dict[str, Any]:
    """A realistic application document as the API returns it."""
    hub: dict[str, Any] = {
        "allowed_web_origins": ["https://a.example"],
        "customizations": {
            "rounded_corners": True,
            "visual_swoops": True,
            "blur_background": True,
            "dark_mode": "auto",
        },
        "auth": {
            "show_app_icon": False,
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
                "passkeys": {"enabled": False, "registration_prompt_frequency": "14d"},
                "anonymous": {"enabled": True},
            },
        },
    }
    hub.update(hub_overrides)
    return {
        "id": "app-1",
        "name": "Demo App",
        "description": "",
        "subdomain": "demo-app-abc123",
        "config": {"hub": hub},
    }


LOCAL_TOML = """
[app]
name = "Demo App"

[domains]
trusted = "https://a.example"

[hub.customizations]
dark_mode = "auto"

[hub.auth]

[hub.auth.sign_in_methods]
email.enabled = true
"""
