"""Small helpers shared by every HTTP caller."""

from __future__ import annotations

from typing import Any

import requests

from rownd_cli import __version__

USER_AGENT = f"rownd-cli/{__version__}"


def build_session() -> requests.Session:
    """Create the single HTTP session used for one CLI invocation."""
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    return session


def is_success(response: Any) -> bool:
    return 200 <= int(response.status_code) < 300


def decode_json(response: Any) -> Any:
    """Return the JSON body, or None for an empty body."""
    if not response.text or not response.text.strip():
        return None
    return response.json()


def join_url(base: str, endpoint: str) -> str:
    return f"{base.rstrip('/')}/{endpoint.lstrip('/')}"
