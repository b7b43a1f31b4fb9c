"""Tests for the bearer-token client's 401 handling and error mapping."""

import pytest

from rownd_cli.api.client import ApiClient, AppKeyClient
from rownd_cli.api.http import USER_AGENT, build_session
from rownd_cli.auth.token_manager import TokenManager
from rownd_cli.config.credentials import AppCredentials
from rownd_cli.exceptions import AuthenticationError, RequestFailedError
from tests.fakes import FakeResp, FakeSession, build_config, make_jwt

TOKEN_ENDPOINT = "https://api.test/oauth/token"


class _Server:
    """Answers discovery and token requests; app requests follow a script."""

    def __init__(self, app_responses, token_status=200):
        self.app_responses = list(app_responses)
        self.token_status = token_status
        self.issued = make_jwt(3600)

    def __call__(self, method, url, **kwargs):
        if url.endswith("oauth-authorization-server"):
            return FakeResp(200, {"token_endpoint": TOKEN_ENDPOINT})
        if url == TOKEN_ENDPOINT:
            if self.token_status != 200:
                return FakeResp(self.token_status, text="invalid_grant")
            return FakeResp(200, {"access_token": self.issued})
        return self.app_responses.pop(0)


def _client(tmp_path, server):
    session = FakeSession(server)
    config = build_config()
    manager = TokenManager(config, config_path=tmp_path / "cfg.json", session=session)
    return ApiClient(config, manager, session=session), session


def test_success_returns_decoded_body(tmp_path):
    client, session = _client(tmp_path, _Server([FakeResp(200, {"id": "app-1"})]))

    assert client.get("applications/app-1") == {"id": "app-1"}
    call = session.calls[0]
    assert call["url"] == "https://api.test/applications/app-1"
    assert call["headers"]["Authorization"].startswith("Bearer ")
    assert call["timeout"] == 30


def test_401_refreshes_once_and_retries_once(tmp_path):
    server = _Server([FakeResp(401, text="expired"), FakeResp(200, {"ok": True})])
    client, session = _client(tmp_path, server)

    assert client.get("accounts") == {"ok": True}

    assert len(session.calls_to("POST", "/oauth/token")) == 1
    app_calls = session.calls_to("GET", "/accounts")
    assert len(app_calls) == 2
    assert app_calls[1]["headers"]["Authorization"] == f"Bearer {server.issued}"


def test_second_401_raises_authentication_error(tmp_path):
    server = _Server([FakeResp(401, text="no"), FakeResp(401, text="still no")])
    client, session = _client(tmp_path, server)

    with pytest.raises(AuthenticationError) as exc:
        client.get("accounts")
    assert "rownd config set-token <token>" in exc.value.message
    assert len(session.calls_to("GET", "/accounts")) == 2


def test_failed_refresh_raises_authentication_error(tmp_path):
    client, session = _client(
        tmp_path, _Server([FakeResp(401, text="no")], token_status=400)
    )
    with pytest.raises(AuthenticationError):
        client.get("accounts")
    assert len(session.calls_to("GET", "/accounts")) == 1


def test_other_errors_keep_server_body(tmp_path):
    client, _ = _client(
        tmp_path, _Server([FakeResp(422, text='{"message":"bad subdomain"}')])
    )
    with pytest.raises(RequestFailedError) as exc:
        client.post("applications", json={"name": "x"}, action="create app")
    assert exc.value.status_code == 422
    assert exc.value.body == '{"message":"bad subdomain"}'
    assert exc.value.message.startswith("Failed to create app (422)")


def test_empty_body_returns_none(tmp_path):
    client, _ = _client(tmp_path, _Server([FakeResp(204, text="")]))
    assert client.patch("applications/app-1", json={}) is None


def test_app_key_client_sends_app_credentials():
    session = FakeSession(lambda method, url, **kw: FakeResp(200, {"results": []}))
    client = AppKeyClient(
        build_config(),
        AppCredentials(app_key="key-1", app_secret="secret-1"),
        session=session,
    )

    assert client.request("GET", "applications/app-1/oidc-clients") == {"results": []}
    headers = session.calls[0]["headers"]
    assert headers["x-rownd-app-key"] == "key-1"
    assert headers["x-rownd-app-secret"] == "secret-1"
    assert "Authorization" not in headers


def test_build_session_sets_user_agent_and_honours_proxy_env():
    session = build_session()
    assert session.headers["User-Agent"] == USER_AGENT
    assert session.trust_env is True
