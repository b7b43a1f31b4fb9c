"""Tests for overlaying local settings on the remote document."""

import copy

import pytest

from rownd_cli.appconfig.merge import compute_change_set, merge_app_config
from rownd_cli.appconfig.models import KNOWN_METHODS, parse_method
from rownd_cli.appconfig.projection import LocalAppConfig
from rownd_cli.appconfig.remote import normalize_app_config, validate_app_config
from rownd_cli.exceptions import InvalidConfigError
from tests.fakes import remote_app


def _methods(doc):
    return doc["config"]["hub"]["auth"]["sign_in_methods"]


def test_empty_local_config_is_identity():
    remote = normalize_app_config(remote_app())
    merged = merge_app_config(remote, LocalAppConfig())

    assert merged == remote
    assert compute_change_set(remote, merged).has_changes is False


def test_merge_does_not_mutate_remote():
    remote = normalize_app_config(remote_app())
    snapshot = copy.deepcopy(remote)
    merge_app_config(
        remote,
        LocalAppConfig(
            name="Renamed",
            allowed_web_origins=["https://b.example"],
            sign_in_methods={"phone": parse_method("phone", {"enabled": True})},
        ),
    )
    assert remote == snapshot


def test_origins_only_change():
    remote = normalize_app_config(remote_app(allowed_web_origins=["https://a"]))
    local = LocalAppConfig(
        name="Demo App", allowed_web_origins=["https://a", "https://b"]
    )

    merged = merge_app_config(remote, local)
    changes = compute_change_set(remote, merged)

    assert merged["config"]["hub"]["allowed_web_origins"] == ["https://a", "https://b"]
    assert changes.origins is True
    assert changes.name is False
    assert changes.auth is False
    assert changes.customizations is False


def test_origin_order_matters():
    remote = normalize_app_config(remote_app(allowed_web_origins=["https://a", "https://b"]))
    merged = merge_app_config(
        remote, LocalAppConfig(allowed_web_origins=["https://b", "https://a"])
    )
    assert compute_change_set(remote, merged).origins is True


def test_google_overlay_keeps_remote_secret():
    remote = remote_app()
    _methods(remote)["google"] = {
        "enabled": False,
        "client_id": "",
        "client_secret": "s3cr3t",
        "scopes": ["openid"],
        "server_only_field": 7,
    }
    remote = normalize_app_config(remote)
    local = LocalAppConfig(
        sign_in_methods={
            "google": parse_method("google", {"enabled": True, "client_id": "X"})
        }
    )

    merged = merge_app_config(remote, local)
    google = _methods(merged)["google"]

    assert google == {
        "enabled": True,
        "client_id": "X",
        "client_secret": "s3cr3t",
        "scopes": ["openid"],
        "server_only_field": 7,
    }
    assert compute_change_set(remote, merged).auth is True


def test_empty_local_fields_do_not_clear_remote_values():
    remote = remote_app()
    _methods(remote)["apple"] = {"enabled": True, "client_id": "com.example.app"}
    remote = normalize_app_config(remote)
    local = LocalAppConfig(
        sign_in_methods={
            "apple": parse_method("apple", {"enabled": True, "client_id": ""})
        }
    )

    merged = merge_app_config(remote, local)
    assert _methods(merged)["apple"]["client_id"] == "com.example.app"
    assert compute_change_set(remote, merged).auth is False


def test_methods_absent_locally_are_left_alone():
    remote = normalize_app_config(remote_app())
    local = LocalAppConfig(
        sign_in_methods={"email": parse_method("email", {"enabled": False})}
    )
    merged = merge_app_config(remote, local)

    assert _methods(merged)["email"]["enabled"] is False
    assert _methods(merged)["anonymous"]["enabled"] is True
    assert set(_methods(merged)) >= set(KNOWN_METHODS)


def test_customizations_and_icon_are_overlaid():
    remote = normalize_app_config(remote_app())
    merged = merge_app_config(
        remote,
        LocalAppConfig(customizations={"dark_mode": "enabled"}, show_app_icon=True),
    )
    hub = merged["config"]["hub"]
    assert hub["customizations"]["dark_mode"] == "enabled"
    assert hub["customizations"]["rounded_corners"] is True
    assert hub["auth"]["show_app_icon"] is True

    changes = compute_change_set(remote, merged)
    assert changes.customizations is True
    assert changes.auth is True


def test_normalize_fills_all_methods_and_preserves_unknown_fields():
    doc = remote_app()
    doc["config"]["hub"]["auth"]["sign_in_methods"] = {"email": {"otp": True}}
    doc["config"]["hub"]["unknown_setting"] = {"a": 1}

    normalized = normalize_app_config(doc)

    assert set(_methods(normalized)) == set(KNOWN_METHODS)
    assert _methods(normalized)["email"] == {"otp": True, "enabled": False}
    assert _methods(normalized)["passkeys"]["registration_prompt_frequency"] == "14d"
    assert normalized["config"]["hub"]["unknown_setting"] == {"a": 1}
    assert "enabled" not in doc["config"]["hub"]["auth"]["sign_in_methods"]["email"]


def test_validate_reports_structural_problems():
    assert validate_app_config(remote_app()) == []
    assert validate_app_config([]) == ["document is not an object"]
    assert "missing config.hub" in validate_app_config({"name": "x", "config": {}})


@pytest.mark.parametrize(
    "key,remote_method",
    [
        ("apple", {"enabled": False, "client_id": 12345}),
        ("email", {"enabled": None}),
    ],
)
def test_malformed_remote_method_is_invalid_config(key, remote_method):
    remote = remote_app()
    _methods(remote)[key] = remote_method
    local = LocalAppConfig(sign_in_methods={key: parse_method(key, {"enabled": True})})

    with pytest.raises(InvalidConfigError, match=key):
        merge_app_config(remote, local)
