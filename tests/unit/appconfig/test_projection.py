"""Tests for rendering rownd.toml from the remote document and parsing it back."""

import tomllib

import pytest

from rownd_cli.appconfig.models import KNOWN_METHODS, GoogleMethod
from rownd_cli.appconfig.projection import (
    generate_toml_content,
    normalize_origins,
    parse_toml,
    read_toml,
    write_toml,
)
from rownd_cli.appconfig.remote import normalize_app_config
from rownd_cli.exceptions import InvalidConfigError, MissingTomlError
from tests.fakes import LOCAL_TOML, remote_app


def _methods(doc):
    return doc["config"]["hub"]["auth"]["sign_in_methods"]


@pytest.mark.parametrize(
    "enabled",
    [
        set(),
        {"email"},
        {"email", "anonymous"},
        {"phone", "apple", "google"},
        {"crypto_wallet", "passkeys"},
        set(KNOWN_METHODS),
    ],
)
def test_enabled_flags_survive_projection_round_trip(enabled):
    doc = normalize_app_config(remote_app())
    for key, method in _methods(doc).items():
        method["enabled"] = key in enabled

    parsed = parse_toml(generate_toml_content(doc)).to_document()

    for key in KNOWN_METHODS:
        assert _methods(parsed)[key]["enabled"] is (key in enabled), key


def test_generated_file_is_valid_toml_with_expected_sections():
    doc = remote_app(allowed_web_origins=["https://a.example", "https://b.example"])
    data = tomllib.loads(generate_toml_content(doc))

    assert data["app"]["name"] == "Demo App"
    assert data["domains"]["trusted"] == "https://a.example, https://b.example"
    assert data["hub"]["customizations"]["dark_mode"] == "auto"
    assert data["hub"]["auth"]["show_app_icon"] is False
    assert data["hub"]["auth"]["sign_in_methods"]["email"] == {"enabled": True}
    assert "apple" not in data["hub"]["auth"]["sign_in_methods"]


def test_missing_origins_render_commented_example():
    content = generate_toml_content(remote_app(allowed_web_origins=[]))
    assert '# trusted = "https://example.com, https://test.example.com"' in content
    assert "trusted" not in tomllib.loads(content)["domains"]


def test_enabled_google_emits_credentials_and_optional_fields():
    doc = remote_app()
    _methods(doc)["google"] = {
        "enabled": True,
        "client_id": "gid",
        "scopes": ["openid", "email"],
    }
    data = tomllib.loads(generate_toml_content(doc))
    google = data["hub"]["auth"]["sign_in_methods"]["google"]
    assert google == {
        "enabled": True,
        "client_id": "gid",
        "client_secret": "",
        "scopes": ["openid", "email"],
    }


def test_strings_are_escaped():
    doc = remote_app()
    doc["name"] = 'Quote " and \\ backslash'
    assert tomllib.loads(generate_toml_content(doc))["app"]["name"] == doc["name"]


def test_parse_accepts_origins_as_array_under_app():
    content = LOCAL_TOML.replace(
        'name = "Demo App"',
        'name = "Demo App"\nallowed_web_origins = [" https://x.example ", ""]',
    )
    local = parse_toml(content)
    assert local.allowed_web_origins == ["https://x.example"]


def test_normalize_origins_accepts_comma_string():
    assert normalize_origins("https://a, https://b ,,") == ["https://a", "https://b"]
    with pytest.raises(InvalidConfigError):
        normalize_origins(42)


def test_missing_domains_section_is_rejected():
    content = LOCAL_TOML.replace('[domains]\ntrusted = "https://a.example"\n', "")
    with pytest.raises(InvalidConfigError) as exc:
        parse_toml(content)
    assert "domains" in exc.value.message


def test_missing_app_name_is_rejected():
    with pytest.raises(InvalidConfigError):
        parse_toml(LOCAL_TOML.replace('name = "Demo App"', ""))


def test_unparseable_file_is_invalid_config():
    with pytest.raises(InvalidConfigError):
        parse_toml("[app\nname = ")


def test_bare_boolean_method_and_typed_fields():
    content = LOCAL_TOML + (
        "phone = true\n\n[hub.auth.sign_in_methods.google]\n"
        'enabled = true\nclient_id = "gid"\n'
    )
    local = parse_toml(content)
    assert local.sign_in_methods["phone"].enabled is True
    google = local.sign_in_methods["google"]
    assert isinstance(google, GoogleMethod)
    assert google.client_id == "gid"
    assert "client_secret" not in google.model_fields_set


def test_read_toml_missing_file_points_at_pull(tmp_path):
    with pytest.raises(MissingTomlError) as exc:
        read_toml(tmp_path / "rownd.toml")
    assert exc.value.hint == "rownd app pull"


def test_write_then_read_round_trip(tmp_path):
    path = write_toml(remote_app(), tmp_path / "rownd.toml")
    local = read_toml(path)
    assert local.name == "Demo App"
    assert local.allowed_web_origins == ["https://a.example"]
    assert local.sign_in_methods["anonymous"].enabled is True
