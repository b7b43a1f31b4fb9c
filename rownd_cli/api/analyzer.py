"""Client for the website-analyzer, image-processing and demo services.

These services authenticate with a static API key/secret pair from the CLI
config, never with the OAuth token.
"""

from __future__ import annotations

from typing import Any

import requests

from rownd_cli.config.constants import DEFAULT_REQUEST_TIMEOUT
from rownd_cli.config.store import CliConfig
from rownd_cli.exceptions import (
    AnalysisError,
    ImageProcessingError,
    RequestFailedError,
)
from rownd_cli.utils.logger import get_logger

from .http import build_session, decode_json, is_success, join_url

logger = get_logger(__name__)


class AnalyzerClient:
    def __init__(
        self,
        config: CliConfig,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.config = config
        self._session = session or build_session()
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.config.analyzer_api_key,
            "x-api-secret": self.config.analyzer_api_secret,
        }

    def _post(self, url: str, payload: dict[str, Any]) -> Any:
        logger.debug("Analyzer request", event="rownd.analyzer.request", url=url)
        return self._session.request(
            "POST", url, json=payload, headers=self._headers(), timeout=self._timeout
        )

    def analyze(
        self, url: str, app_name: str, current_config: dict[str, Any]
    ) -> dict[str, Any]:
        """Analyze a website and return the suggested app configuration."""
        resp = self._post(
            join_url(self.config.analyzer_url, "api/analyze"),
            {"url": url, "name": app_name, "currentConfig": current_config},
        )
        if not is_success(resp):
            raise AnalysisError(f"Analysis failed: {resp.text}")
        try:
            result = decode_json(resp)
        except ValueError as exc:
            raise AnalysisError(f"Analysis returned invalid JSON: {resp.text}") from exc
        if not isinstance(result, dict):
            raise AnalysisError("Analysis returned an unexpected payload")
        return result

    def process_image(self, image_url: str, filename: str) -> bytes:
        """Fetch and normalise a remote image; returns the processed bytes."""
        resp = self._post(
            join_url(self.config.analyzer_url, "api/image/process"),
            {"imageUrl": image_url, "file-name": filename},
        )
        if not is_success(resp):
            raise ImageProcessingError(f"Image processing failed: {resp.text}")
        return resp.content

    def create_demo(self, website: str, app_key: str) -> dict[str, Any]:
        resp = self._post(
            self.config.demo_url, {"website": website, "rowndAppKey": app_key}
        )
        if not is_success(resp):
            raise RequestFailedError(resp.status_code, resp.text, action="create demo")
        return decode_json(resp) or {}
