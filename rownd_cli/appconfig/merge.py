"""Overlay a local ``rownd.toml`` onto the remote document and diff the result."""

from __future__ import annotations

import copy
from dataclasses import asdict, dataclass
from typing import Any

from pydantic import ValidationError

from rownd_cli.exceptions import InvalidConfigError

from .models import KNOWN_METHODS, METHOD_MODELS, method_to_dict, overlay_method
from .projection import LocalAppConfig
from .remote import get_hub, get_origins, get_sign_in_methods, normalize_app_config


@dataclass(frozen=True)
class ChangeSet:
    name: bool = False
    origins: bool = False
    auth: bool = False
    customizations: bool = False

    @property
    def has_changes(self) -> bool:
        return self.name or self.origins or self.auth or self.customizations

    def as_dict(self) -> dict[str, bool]:
        return asdict(self)


def merge_app_config(remote: dict[str, Any], local: LocalAppConfig) -> dict[str, Any]:
    """Return a new document: the remote one with the local settings applied.

    The remote document is not modified. Fields the local file does not
    mention keep their remote values.
    """
    merged = normalize_app_config(copy.deepcopy(remote))
    hub = merged["config"]["hub"]
    auth = hub["auth"]

    if local.name:
        merged["name"] = local.name

    if local.allowed_web_origins is not None:
        hub["allowed_web_origins"] = list(local.allowed_web_origins)

    methods = auth["sign_in_methods"]
    for key, local_method in local.sign_in_methods.items():
        try:
            remote_method = METHOD_MODELS[key].model_validate(methods[key])
        except ValidationError as exc:
            raise InvalidConfigError(
                f"Remote sign-in method '{key}' is malformed: {exc}"
            ) from exc
        methods[key] = method_to_dict(overlay_method(remote_method, local_method))

    if local.customizations:
        customizations = hub.get("customizations")
        if not isinstance(customizations, dict):
            customizations = hub["customizations"] = {}
        customizations.update(copy.deepcopy(local.customizations))

    if local.show_app_icon is not None:
        auth["show_app_icon"] = local.show_app_icon

    return merged


def _methods_differ(before: dict[str, Any], after: dict[str, Any]) -> bool:
    keys = set(before) | set(after) | set(KNOWN_METHODS)
    return any((before.get(key) or {}) != (after.get(key) or {}) for key in keys)


def compute_change_set(remote: dict[str, Any], merged: dict[str, Any]) -> ChangeSet:
    """Compare the normalised remote document with a merged one."""
    remote = normalize_app_config(remote)
    remote_auth = get_hub(remote).get("auth") or {}
    merged_auth = get_hub(merged).get("auth") or {}
    return ChangeSet(
        name=remote.get("name") != merged.get("name"),
        origins=(get_origins(remote) or []) != (get_origins(merged) or []),
        auth=_methods_differ(get_sign_in_methods(remote), get_sign_in_methods(merged))
        or remote_auth.get("show_app_icon") != merged_auth.get("show_app_icon"),
        customizations=(get_hub(remote).get("customizations") or {})
        != (get_hub(merged).get("customizations") or {}),
    )
