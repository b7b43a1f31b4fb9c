"""
Projection between the remote application document and ``rownd.toml``.

``generate_toml_content`` renders a human-editable file from the server's
document; disabled methods are written as commented-out stanzas so every
option stays discoverable. ``read_toml`` parses an edited file back into a
``LocalAppConfig`` that only records what the file actually states, so the
merge can tell "disabled" apart from "not mentioned".
"""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rownd_cli.config.constants import TOML_FILENAME
from rownd_cli.exceptions import InvalidConfigError, MissingTomlError
from rownd_cli.utils.logger import get_logger

from .models import (
    KNOWN_METHODS,
    SignInMethod,
    default_method,
    method_to_dict,
    parse_method,
)
from .remote import get_hub, get_origins, get_sign_in_methods

logger = get_logger(__name__)


@dataclass
class LocalAppConfig:
    """What a local ``rownd.toml`` says, with unset values left as None."""

    name: str | None = None
    description: str | None = None
    allowed_web_origins: list[str] | None = None
    customizations: dict[str, Any] = field(default_factory=dict)
    show_app_icon: bool | None = None
    sign_in_methods: dict[str, SignInMethod] = field(default_factory=dict)
    mobile: dict[str, Any] | None = None

    def to_document(self) -> dict[str, Any]:
        """Render as an API-shaped document covering all known methods."""
        methods = {
            key: method_to_dict(self.sign_in_methods.get(key) or default_method(key))
            for key in KNOWN_METHODS
        }
        hub: dict[str, Any] = {
            "customizations": dict(self.customizations),
            "auth": {
                "show_app_icon": bool(self.show_app_icon),
                "sign_in_methods": methods,
            },
        }
        if self.allowed_web_origins is not None:
            hub["allowed_web_origins"] = list(self.allowed_web_origins)
        return {
            "name": self.name or "",
            "description": self.description or "",
            "config": {"hub": hub},
        }


def normalize_origins(value: Any) -> list[str]:
    """Accept a TOML array or a comma-separated string; return a trimmed list."""
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, list):
        items = value
    else:
        raise InvalidConfigError(
            "allowed_web_origins must be a list or a comma-separated string"
        )
    return [str(item).strip() for item in items if str(item).strip()]


def _missing_sections(data: dict[str, Any]) -> list[str]:
    hub = data.get("hub") if isinstance(data.get("hub"), dict) else {}
    missing = []
    if "auth" not in hub and "auth" not in data:
        missing.append("auth")
    if "customizations" not in hub and "customizations" not in data:
        missing.append("customizations")
    if "mobile" not in data and "hub" not in data:
        missing.append("mobile/hub")
    if "domains" not in data:
        missing.append("domains")
    return missing


def _table(value: Any, where: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidConfigError(f"[{where}] must be a table")
    return value


def parse_toml_document(data: dict[str, Any]) -> LocalAppConfig:
    """Validate a parsed TOML mapping and convert it to a LocalAppConfig."""
    app = _table(data.get("app"), "app")
    name = app.get("name")
    if not isinstance(name, str) or not name.strip():
        raise InvalidConfigError("TOML must contain app.name")

    missing = _missing_sections(data)
    if missing:
        raise InvalidConfigError(
            "Missing required configuration sections in rownd.toml: "
            + ", ".join(missing)
        )

    hub = _table(data.get("hub"), "hub")
    auth = _table(hub.get("auth", data.get("auth")), "auth")
    customizations = _table(
        hub.get("customizations", data.get("customizations")), "customizations"
    )
    domains = _table(data.get("domains"), "domains")

    origins: list[str] | None = None
    if "allowed_web_origins" in app:
        origins = normalize_origins(app["allowed_web_origins"])
    elif "trusted" in domains:
        origins = normalize_origins(domains["trusted"])

    raw_methods = _table(auth.get("sign_in_methods"), "auth.sign_in_methods")
    methods: dict[str, SignInMethod] = {}
    for key, raw in raw_methods.items():
        if key not in KNOWN_METHODS:
            logger.warning(
                "Ignoring unknown sign-in method",
                event="rownd.toml.unknown_method",
                method=key,
            )
            continue
        methods[key] = parse_method(key, raw)

    show_app_icon = auth.get("show_app_icon")
    if show_app_icon is not None and not isinstance(show_app_icon, bool):
        raise InvalidConfigError("auth.show_app_icon must be a boolean")

    description = app.get("description")
    return LocalAppConfig(
        name=name,
        description=description if isinstance(description, str) else None,
        allowed_web_origins=origins,
        customizations=dict(customizations),
        show_app_icon=show_app_icon,
        sign_in_methods=methods,
        mobile=_table(data.get("mobile"), "mobile") or None,
    )


def parse_toml(content: str, source: str = TOML_FILENAME) -> LocalAppConfig:
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise InvalidConfigError(f"Failed to parse {source}: {exc}") from exc
    return parse_toml_document(data)


def read_toml(path: str | Path = TOML_FILENAME) -> LocalAppConfig:
    toml_path = Path(path)
    if not toml_path.exists():
        raise MissingTomlError(str(toml_path))
    local = parse_toml(toml_path.read_text(encoding="utf-8"), source=str(toml_path))
    logger.debug(
        "Parsed local configuration",
        event="rownd.toml.parsed",
        path=str(toml_path),
        methods=sorted(local.sign_in_methods),
    )
    return local


def _s(value: Any) -> str:
    """Render a TOML basic string (JSON escapes are a valid subset)."""
    return json.dumps("" if value is None else str(value), ensure_ascii=False)


def _b(value: Any) -> str:
    return "true" if value else "false"


def _method(methods: dict[str, Any], key: str) -> dict[str, Any]:
    entry = methods.get(key)
    return entry if isinstance(entry, dict) else {}


def generate_toml_content(doc: dict[str, Any]) -> str:
    """Render the remote document as an editable rownd.toml."""
    hub = get_hub(doc)
    methods = get_sign_in_methods(doc)
    origins = get_origins(doc)
    lines: list[str] = ["# Rownd Application Configuration", ""]

    lines += [
        "# Application name as it appears in the Rownd console",
        "[app]",
        f"name = {_s(doc.get('name'))}",
        "",
        "# Allowed web origins may also be set here, as a list or a comma-separated string",
        '# allowed_web_origins = "https://example.com, https://test.example.com"',
        "",
        "# Allowed Web Origins (comma-separated list of domains)",
        "[domains]",
    ]
    if origins:
        lines.append(f"trusted = {_s(', '.join(origins))}")
    else:
        lines.append('# trusted = "https://example.com, https://test.example.com"')

    lines += ["", "# Visual customizations for the Rownd hub", "[hub.customizations]"]
    customizations = hub.get("customizations") or {}
    for key in ("rounded_corners", "visual_swoops", "blur_background"):
        if customizations.get(key) is not None:
            lines.append(f"{key} = {_b(customizations[key])}")
    if customizations.get("dark_mode") is not None:
        lines.append(f"dark_mode = {_s(customizations['dark_mode'])}")

    auth = hub.get("auth") or {}
    lines += [
        "",
        "# Authentication configuration",
        "[hub.auth]",
        f"show_app_icon = {_b(auth.get('show_app_icon'))}",
        "",
        "# Sign-in method configuration",
        "[hub.auth.sign_in_methods]",
    ]

    for key, title in (
        ("email", "Email authentication"),
        ("anonymous", "Guest user access (no authentication required)"),
        ("phone", "Phone number authentication"),
    ):
        lines += ["", f"# {title}"]
        if _method(methods, key).get("enabled"):
            lines.append(f"{key}.enabled = true")
        else:
            lines.append(f"# {key}.enabled = false")

    apple = _method(methods, "apple")
    lines += ["", "# Apple Sign In"]
    if apple.get("enabled"):
        lines += [
            "[hub.auth.sign_in_methods.apple]",
            "enabled = true",
            f"client_id = {_s(apple.get('client_id'))}",
        ]
    else:
        lines += [
            "# [hub.auth.sign_in_methods.apple]",
            "# enabled = false",
            '# client_id = ""',
        ]

    google = _method(methods, "google")
    lines += ["", "# Google Sign In"]
    if google.get("enabled"):
        lines += [
            "[hub.auth.sign_in_methods.google]",
            "enabled = true",
            f"client_id = {_s(google.get('client_id'))}",
            f"client_secret = {_s(google.get('client_secret'))}",
        ]
        if google.get("ios_client_id"):
            lines.append(f"ios_client_id = {_s(google['ios_client_id'])}")
        if google.get("scopes"):
            scopes = ", ".join(_s(scope) for scope in google["scopes"])
            lines.append(f"scopes = [{scopes}]")
    else:
        lines += [
            "# [hub.auth.sign_in_methods.google]",
            "# enabled = false",
            '# client_id = ""',
            '# client_secret = ""',
        ]

    lines += ["", "# Cryptocurrency wallet authentication"]
    if _method(methods, "crypto_wallet").get("enabled"):
        lines += ["[hub.auth.sign_in_methods.crypto_wallet]", "enabled = true"]
    else:
        lines += ["# [hub.auth.sign_in_methods.crypto_wallet]", "# enabled = false"]

    passkeys = _method(methods, "passkeys")
    lines += ["", "# Passkeys"]
    if passkeys.get("enabled"):
        lines += ["[hub.auth.sign_in_methods.passkeys]", "enabled = true"]
        if passkeys.get("registration_prompt_frequency"):
            lines.append(
                "registration_prompt_frequency = "
                + _s(passkeys["registration_prompt_frequency"])
            )
    else:
        lines += [
            "# [hub.auth.sign_in_methods.passkeys]",
            "# enabled = false",
            '# registration_prompt_frequency = "14d"',
        ]

    return "\n".join(lines) + "\n"


def write_toml(doc: dict[str, Any], path: str | Path = TOML_FILENAME) -> Path:
    toml_path = Path(path)
    toml_path.write_text(generate_toml_content(doc), encoding="utf-8")
    return toml_path


__all__ = [
    "LocalAppConfig",
    "generate_toml_content",
    "normalize_origins",
    "parse_toml",
    "parse_toml_document",
    "read_toml",
    "write_toml",
]
