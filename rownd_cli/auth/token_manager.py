"""
Access/refresh token lifecycle for the Rownd API.

The manager is constructed once per invocation and handed to every
component that needs a bearer token. It discovers the OAuth token endpoint
from the API's authorization-server metadata, judges whether the stored
access token is still fresh, and exchanges the refresh token for a new
access token when it is not.

Tokens are read without signature verification: they come from the same
service the CLI is about to call, and only the ``exp`` claim is used.
"""

from __future__ import annotations

import base64
import json
import time
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

import requests
from pydantic import BaseModel, ConfigDict, ValidationError

from rownd_cli.api.http import build_session, decode_json, is_success, join_url
from rownd_cli.config.constants import (
    DEFAULT_REQUEST_TIMEOUT,
    OAUTH_DISCOVERY_PATH,
    TOKEN_REFRESH_LEEWAY_SECONDS,
)
from rownd_cli.config.store import CliConfig, save_config
from rownd_cli.exceptions import (
    DiscoveryError,
    NoRefreshTokenError,
    NoTokenError,
    RefreshExchangeError,
)
from rownd_cli.utils.cache import MemoryCache
from rownd_cli.utils.logger import get_logger

logger = get_logger(__name__)

REFRESH_TOKEN_CACHE_KEY = "refresh_token"


class TokenManagerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    DISCOVERING = "discovering"
    READY = "ready"


class OAuthServerMetadata(BaseModel):
    """Subset of RFC 8414 authorization server metadata the CLI relies on."""

    model_config = ConfigDict(extra="allow")

    issuer: str | None = None
    token_endpoint: str
    jwks_uri: str | None = None


def parse_jwt_exp(token: str) -> int | None:
    """Return the ``exp`` claim of a JWT, or None if it cannot be read."""
    try:
        parts = token.split(".")
        if len(parts) < 2:
            return None
        payload_b64 = parts[1]
        padding = "=" * ((4 - len(payload_b64) % 4) % 4)
        payload_bytes = base64.urlsafe_b64decode((payload_b64 + padding).encode("ascii"))
        payload = json.loads(payload_bytes.decode("utf-8"))
        exp = payload.get("exp") if isinstance(payload, dict) else None
        if isinstance(exp, bool):
            return None
        if isinstance(exp, int | float):
            return int(exp)
    except (ValueError, UnicodeError, OverflowError):
        logger.debug("Failed to parse exp from JWT", exc_info=True)
    return None


class TokenManager:
    """Produces a currently valid bearer token, refreshing it when needed."""

    def __init__(
        self,
        config: CliConfig,
        *,
        config_path: str | Path | None = None,
        session: requests.Session | None = None,
        cache: MemoryCache[str, str] | None = None,
        clock: Callable[[], float] = time.time,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.config = config
        self.config_path = config_path
        self._session = session or build_session()
        self.cache: MemoryCache[str, str] = cache if cache is not None else MemoryCache()
        self._clock = clock
        self._timeout = timeout
        self.metadata: OAuthServerMetadata | None = None
        self.state = TokenManagerState.UNINITIALIZED

    @property
    def discovery_url(self) -> str:
        return join_url(self.config.api_url, OAUTH_DISCOVERY_PATH)

    def init(self) -> None:
        """Fetch OAuth server metadata once.

        A failure is logged and swallowed; the next refresh attempt reports
        it as a DiscoveryError.
        """
        if self.metadata is not None:
            return
        self.state = TokenManagerState.DISCOVERING
        try:
            self.metadata = self._discover()
        except DiscoveryError as exc:
            logger.error(
                "Failed to fetch OAuth configuration",
                event="rownd.token.discovery_failed",
                url=self.discovery_url,
                error=exc.message,
            )
            self.state = TokenManagerState.UNINITIALIZED
            return
        self.state = TokenManagerState.READY
        logger.debug(
            "OAuth endpoints discovered",
            event="rownd.token.discovered",
            token_endpoint=self.metadata.token_endpoint,
        )

    def _discover(self) -> OAuthServerMetadata:
        try:
            resp = self._session.request(
                "GET", self.discovery_url, timeout=self._timeout
            )
        except requests.RequestException as exc:
            raise DiscoveryError(f"Could not reach {self.discovery_url}: {exc}") from exc
        if not is_success(resp):
            raise DiscoveryError(
                f"Discovery request returned {resp.status_code}: {resp.text}"
            )
        try:
            return OAuthServerMetadata.model_validate(decode_json(resp))
        except (ValueError, ValidationError) as exc:
            raise DiscoveryError(f"Invalid OAuth server metadata: {exc}") from exc

    def get_valid_token(self) -> str:
        """Return the stored access token, refreshing it if it expires soon."""
        current = self.config.token
        if not current:
            raise NoTokenError()

        exp = parse_jwt_exp(current)
        if exp is None:
            logger.info(
                "Token has no readable expiry, attempting refresh",
                event="rownd.token.undecodable",
            )
            return self.force_refresh_token()

        remaining = exp - self._clock()
        if remaining <= TOKEN_REFRESH_LEEWAY_SECONDS:
            logger.info(
                "Token expiring soon, refreshing",
                event="rownd.token.expiring",
                seconds_left=int(remaining),
            )
            return self.force_refresh_token()
        return current

    def force_refresh_token(self) -> str:
        """Exchange the refresh token for a new access token, unconditionally."""
        if self.metadata is None:
            self.init()

        refresh_token = self.cache.get(REFRESH_TOKEN_CACHE_KEY) or self.config.refresh_token
        if not refresh_token:
            raise NoRefreshTokenError()

        if self.metadata is None:
            raise DiscoveryError(
                f"OAuth server metadata unavailable from {self.discovery_url}"
            )

        endpoint = self.metadata.token_endpoint
        logger.debug(
            "Attempting to refresh tokens",
            event="rownd.token.refresh_attempt",
            token_endpoint=endpoint,
        )
        try:
            resp = self._session.request(
                "POST",
                endpoint,
                json={"grant_type": "refresh_token", "refresh_token": refresh_token},
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise RefreshExchangeError(str(exc)) from exc

        if not is_success(resp):
            raise RefreshExchangeError(resp.text, status_code=resp.status_code)

        try:
            tokens: Any = decode_json(resp)
        except ValueError as exc:
            raise RefreshExchangeError(resp.text, status_code=resp.status_code) from exc
        access_token = tokens.get("access_token") if isinstance(tokens, dict) else None
        if not access_token:
            raise RefreshExchangeError(resp.text, status_code=resp.status_code)

        self._save_tokens(access_token, tokens.get("refresh_token"))
        return access_token

    def _save_tokens(self, access_token: str, refresh_token: str | None) -> None:
        self.config.token = access_token
        if refresh_token:
            self.config.refresh_token = refresh_token
            self.cache.set(REFRESH_TOKEN_CACHE_KEY, refresh_token)
        save_config(self.config, self.config_path)
        logger.info(
            "Access token refreshed",
            event="rownd.token.refreshed",
            refresh_token_rotated=bool(refresh_token),
        )
