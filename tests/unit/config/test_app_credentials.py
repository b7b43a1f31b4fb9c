"""Tests for the working-directory credential files."""

import pytest

from rownd_cli.config.credentials import (
    AppCredentials,
    load_app_credentials,
    read_env_file,
    resolve_app_key,
    save_app_credentials,
    write_env_file,
)
from rownd_cli.exceptions import InvalidConfigError, MissingAppCredentialsError


def test_credentials_round_trip(tmp_path):
    path = tmp_path / ".rownd-credentials.json"
    save_app_credentials(AppCredentials(app_key="k", app_secret="s"), path)
    assert load_app_credentials(path) == AppCredentials(app_key="k", app_secret="s")


def test_missing_credentials_point_at_key_create(tmp_path):
    with pytest.raises(MissingAppCredentialsError) as exc:
        load_app_credentials(tmp_path / ".rownd-credentials.json")
    assert exc.value.hint == "rownd oidc key-create"


def test_invalid_credentials_file(tmp_path):
    path = tmp_path / ".rownd-credentials.json"
    path.write_text('{"app_key": "k"}')
    with pytest.raises(InvalidConfigError):
        load_app_credentials(path)


def test_env_file_round_trip(tmp_path):
    path = tmp_path / ".env"
    write_env_file({"ROWND_APP_ID": "app-1", "ROWND_APP_KEY": "key-1"}, path)
    assert read_env_file(path) == {"ROWND_APP_ID": "app-1", "ROWND_APP_KEY": "key-1"}


def test_resolve_app_key_prefers_environment(monkeypatch, tmp_path):
    path = tmp_path / ".env"
    write_env_file({"ROWND_APP_KEY": "from-file"}, path)
    assert resolve_app_key(path) == "from-file"

    monkeypatch.setenv("ROWND_APP_KEY", "from-env")
    assert resolve_app_key(path) == "from-env"


def test_resolve_app_key_missing(tmp_path):
    with pytest.raises(MissingAppCredentialsError):
        resolve_app_key(tmp_path / ".env")
