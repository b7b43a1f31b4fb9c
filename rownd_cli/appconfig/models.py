"""Typed sign-in method table.

Each method the hub supports has its own model so that every overlay rule
in the merge is an explicit branch. Unknown fields sent by the server are
kept as model extras and survive a merge untouched.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from rownd_cli.exceptions import InvalidConfigError

KNOWN_METHODS: tuple[str, ...] = (
    "email",
    "phone",
    "apple",
    "google",
    "crypto_wallet",
    "passkeys",
    "anonymous",
)

DEFAULT_PASSKEY_PROMPT_FREQUENCY = "14d"


class SignInMethod(BaseModel):
    model_config = ConfigDict(extra="allow")

    enabled: bool = False


class EmailMethod(SignInMethod):
    pass


class PhoneMethod(SignInMethod):
    pass


class AppleMethod(SignInMethod):
    client_id: str | None = None


class GoogleMethod(SignInMethod):
    client_id: str | None = None
    client_secret: str | None = None
    ios_client_id: str | None = None
    scopes: list[str] | None = None


class CryptoWalletMethod(SignInMethod):
    pass


class PasskeysMethod(SignInMethod):
    registration_prompt_frequency: str | None = None


class AnonymousMethod(SignInMethod):
    pass


METHOD_MODELS: dict[str, type[SignInMethod]] = {
    "email": EmailMethod,
    "phone": PhoneMethod,
    "apple": AppleMethod,
    "google": GoogleMethod,
    "crypto_wallet": CryptoWalletMethod,
    "passkeys": PasskeysMethod,
    "anonymous": AnonymousMethod,
}

# Values a method carries when neither the server nor the local file has it.
METHOD_DEFAULTS: dict[str, dict[str, Any]] = {
    "email": {"enabled": False},
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
    "passkeys": {
        "enabled": False,
        "registration_prompt_frequency": DEFAULT_PASSKEY_PROMPT_FREQUENCY,
    },
    "anonymous": {"enabled": False},
}


def default_method(key: str) -> SignInMethod:
    return METHOD_MODELS[key].model_validate(METHOD_DEFAULTS[key])


def parse_method(key: str, raw: Any) -> SignInMethod:
    """Build the typed model for ``key``.

    A bare boolean is accepted as shorthand for ``{enabled = <bool>}``.
    """
    if isinstance(raw, bool):
        raw = {"enabled": raw}
    if not isinstance(raw, dict):
        raise InvalidConfigError(
            f"Sign-in method '{key}' must be a table, got {type(raw).__name__}"
        )
    try:
        return METHOD_MODELS[key].model_validate(raw)
    except ValidationError as exc:
        raise InvalidConfigError(f"Invalid sign-in method '{key}': {exc}") from exc


def method_to_dict(method: SignInMethod) -> dict[str, Any]:
    """Dump only the fields that were actually provided, plus extras."""
    data = method.model_dump()
    extras = method.model_extra or {}
    return {
        k: v for k, v in data.items() if k in method.model_fields_set or k in extras
    }


def _explicit(method: SignInMethod, field: str) -> Any:
    """Return a locally set, non-empty field value, else None."""
    if field not in method.model_fields_set:
        return None
    value = getattr(method, field)
    if value in ("", []):
        return None
    return value


def overlay_method(remote: SignInMethod, local: SignInMethod) -> SignInMethod:
    """Apply the local file's settings for one method onto the remote entry.

    ``enabled`` is taken from the local side whenever the file states it.
    Method-specific fields are taken only when the file sets them to a
    non-empty value; every other remote field is preserved.
    """
    updates: dict[str, Any] = {}
    if "enabled" in local.model_fields_set:
        updates["enabled"] = local.enabled

    if isinstance(remote, AppleMethod):
        fields: tuple[str, ...] = ("client_id",)
    elif isinstance(remote, GoogleMethod):
        fields = ("client_id", "client_secret", "ios_client_id", "scopes")
    elif isinstance(remote, PasskeysMethod):
        fields = ("registration_prompt_frequency",)
    else:
        fields = ()

    for field in fields:
        value = _explicit(local, field)
        if value is not None:
            updates[field] = value

    if not updates:
        return remote
    return type(remote).model_validate({**method_to_dict(remote), **updates})
