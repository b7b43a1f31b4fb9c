"""Clients for the Rownd REST API.

``ApiClient`` authenticates with the OAuth bearer token from the
``TokenManager`` and retries exactly once after a 401. ``AppKeyClient``
authenticates with an application key/secret pair and is used for OIDC
client management.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import requests

from rownd_cli.config.constants import DEFAULT_REQUEST_TIMEOUT
from rownd_cli.config.credentials import AppCredentials
from rownd_cli.config.store import CliConfig
from rownd_cli.exceptions import (
    SET_TOKEN_HINT,
    AuthenticationError,
    RequestFailedError,
    RowndCliError,
)
from rownd_cli.utils.logger import get_logger

from .http import build_session, decode_json, is_success, join_url

if TYPE_CHECKING:
    from rownd_cli.auth.token_manager import TokenManager

logger = get_logger(__name__)


def _body(response: Any) -> Any:
    try:
        return decode_json(response)
    except ValueError:
        return response.text


class ApiClient:
    """Bearer-token client with a single transparent retry on 401."""

    def __init__(
        self,
        config: CliConfig,
        token_manager: TokenManager,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.config = config
        self.token_manager = token_manager
        self._session = session or build_session()
        self._timeout = timeout

    def url(self, endpoint: str) -> str:
        return join_url(self.config.api_url, endpoint)

    def _send(
        self,
        method: str,
        url: str,
        token: str,
        *,
        json: Any = None,
        data: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        merged = {"Authorization": f"Bearer {token}"}
        if json is not None:
            merged["Content-Type"] = "application/json"
        merged.update(headers or {})
        return self._session.request(
            method,
            url,
            json=json,
            data=data,
            headers=merged,
            timeout=self._timeout,
        )

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        data: Any = None,
        headers: dict[str, str] | None = None,
        action: str | None = None,
    ) -> Any:
        """Issue one authenticated request and return the decoded body.

        ``action`` is a short verb phrase ("fetch app config") used to
        prefix the error message when the server rejects the request.
        """
        url = self.url(endpoint)
        token = self.token_manager.get_valid_token()
        resp = self._send(method, url, token, json=json, data=data, headers=headers)

        if resp.status_code == 401:
            logger.info(
                "Token rejected, attempting refresh",
                event="rownd.api.unauthorized",
                method=method,
                url=url,
            )
            try:
                token = self.token_manager.force_refresh_token()
            except RowndCliError as exc:
                raise AuthenticationError(
                    f"Authentication failed: {exc.message}. "
                    f"Please re-authenticate using: {SET_TOKEN_HINT}"
                ) from exc
            resp = self._send(method, url, token, json=json, data=data, headers=headers)
            if resp.status_code == 401:
                raise AuthenticationError(
                    "Authentication failed after token refresh. "
                    f"Please re-authenticate using: {SET_TOKEN_HINT}"
                )

        if not is_success(resp):
            logger.debug(
                "API request failed",
                event="rownd.api.request_failed",
                method=method,
                url=url,
                status_code=resp.status_code,
            )
            raise RequestFailedError(resp.status_code, resp.text, action=action)
        return _body(resp)

    def get(self, endpoint: str, **kwargs: Any) -> Any:
        return self.request("GET", endpoint, **kwargs)

    def post(self, endpoint: str, **kwargs: Any) -> Any:
        return self.request("POST", endpoint, **kwargs)

    def put(self, endpoint: str, **kwargs: Any) -> Any:
        return self.request("PUT", endpoint, **kwargs)

    def patch(self, endpoint: str, **kwargs: Any) -> Any:
        return self.request("PATCH", endpoint, **kwargs)

    def get_public(self, endpoint: str, *, action: str | None = None) -> Any:
        """GET without credentials (well-known documents)."""
        url = self.url(endpoint)
        resp = self._session.request("GET", url, timeout=self._timeout)
        if not is_success(resp):
            raise RequestFailedError(resp.status_code, resp.text, action=action)
        return _body(resp)


class AppKeyClient:
    """Client authenticated by an application key/secret pair."""

    def __init__(
        self,
        config: CliConfig,
        credentials: AppCredentials,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.config = config
        self.credentials = credentials
        self._session = session or build_session()
        self._timeout = timeout

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        action: str | None = None,
    ) -> Any:
        url = join_url(self.config.api_url, endpoint)
        headers = {
            "x-rownd-app-key": self.credentials.app_key,
            "x-rownd-app-secret": self.credentials.app_secret,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        logger.debug(
            "App-key request", event="rownd.api.app_key_request", method=method, url=url
        )
        resp = self._session.request(
            method, url, json=json, headers=headers, timeout=self._timeout
        )
        if not is_success(resp):
            raise RequestFailedError(resp.status_code, resp.text, action=action)
        return _body(resp)
