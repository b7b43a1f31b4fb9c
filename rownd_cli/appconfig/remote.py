"""Fetching and normalising the remote application configuration document."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from rownd_cli.exceptions import InvalidConfigError
from rownd_cli.utils.logger import get_logger

from .models import KNOWN_METHODS, METHOD_DEFAULTS

if TYPE_CHECKING:
    from rownd_cli.api.client import ApiClient

logger = get_logger(__name__)


def validate_app_config(doc: Any) -> list[str]:
    """Return a list of structural problems; empty when the shape is usable."""
    issues: list[str] = []
    if not isinstance(doc, dict):
        return ["document is not an object"]
    if not isinstance(doc.get("name"), str):
        issues.append("name is not a string")
    config = doc.get("config")
    if not isinstance(config, dict) or not isinstance(config.get("hub"), dict):
        issues.append("missing config.hub")
        return issues

    auth = config["hub"].get("auth")
    if auth is not None:
        if not isinstance(auth, dict):
            issues.append("config.hub.auth is not an object")
        elif auth.get("sign_in_methods") is not None and not isinstance(
            auth["sign_in_methods"], dict
        ):
            issues.append("config.hub.auth.sign_in_methods is not an object")
    origins = config["hub"].get("allowed_web_origins")
    if origins is not None and not isinstance(origins, list):
        issues.append("config.hub.allowed_web_origins is not a list")
    return issues


def normalize_app_config(doc: dict[str, Any]) -> dict[str, Any]:
    """Return a copy with the hub auth structure present and all methods covered.

    Missing methods get their defaults; present methods without an
    ``enabled`` flag get ``enabled = false``. Nothing else is touched.
    """
    normalized = copy.deepcopy(doc)
    hub = normalized.setdefault("config", {}).setdefault("hub", {})
    auth = hub.get("auth")
    if not isinstance(auth, dict):
        auth = hub["auth"] = {}
    methods = auth.get("sign_in_methods")
    if not isinstance(methods, dict):
        methods = auth["sign_in_methods"] = {}

    for key in KNOWN_METHODS:
        entry = methods.get(key)
        if not isinstance(entry, dict):
            methods[key] = copy.deepcopy(METHOD_DEFAULTS[key])
        elif "enabled" not in entry:
            entry["enabled"] = False
    return normalized


def get_hub(doc: dict[str, Any]) -> dict[str, Any]:
    return (doc.get("config") or {}).get("hub") or {}


def get_sign_in_methods(doc: dict[str, Any]) -> dict[str, Any]:
    return (get_hub(doc).get("auth") or {}).get("sign_in_methods") or {}


def get_origins(doc: dict[str, Any]) -> list[str] | None:
    return get_hub(doc).get("allowed_web_origins")


def fetch_app_config(api: ApiClient, app_id: str) -> dict[str, Any]:
    """GET the application and return it validated and normalised."""
    doc = api.get(f"applications/{app_id}", action="fetch app config")
    issues = validate_app_config(doc)
    if issues:
        logger.debug(
            "Rejected app config from server",
            event="rownd.appconfig.invalid_remote",
            app_id=app_id,
            issues=issues,
        )
        raise InvalidConfigError(
            "Invalid app configuration received from server: " + "; ".join(issues)
        )
    return normalize_app_config(doc)
