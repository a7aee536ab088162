"""HTTP client for the HabitWire REST API."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

URL_ENV = "HABITWIRE_URL"
API_KEY_ENV = "HABITWIRE_API_KEY"

_DEFAULT_TIMEOUT = 30.0


class ConfigError(Exception):
    """Raised when the client cannot be configured from the environment."""


class UsageError(Exception):
    """Raised for invalid command-line input the parser cannot catch."""


class RequestFailed(Exception):
    """Raised when the request never produced a usable HTTP response."""


class ApiError(Exception):
    """Raised when the API returns a status >= 400."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"API error (status {status_code}): {detail}")


class HabitWireClient:
    """Bearer-authenticated client rooted at ``HABITWIRE_URL``."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = _DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_env(cls) -> HabitWireClient:
        base_url = os.environ.get(URL_ENV, "")
        if not base_url:
            raise ConfigError(f"{URL_ENV} environment variable is required")
        api_key = os.environ.get(API_KEY_ENV, "")
        if not api_key:
            raise ConfigError(f"{API_KEY_ENV} environment variable is required")
        return cls(base_url, api_key)

    def close(self) -> None:
        self._client.close()

    def request(
        self,
        method: str,
        endpoint: str,
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        logger.debug("%s %s", method, endpoint)
        try:
            resp = self._client.request(
                method,
                self._base_url + endpoint,
                json=body,
                params=params,
            )
        except httpx.HTTPError as exc:
            raise RequestFailed(f"request failed: {exc}") from exc

        if resp.status_code >= 400:
            raise ApiError(resp.status_code, resp.text)
        return resp

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return _json(self.request("GET", endpoint, params=params))

    def get_text(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> str:
        return self.request("GET", endpoint, params=params).text

    def post(self, endpoint: str, body: Any = None) -> Any:
        return _json(self.request("POST", endpoint, body))

    def delete(self, endpoint: str) -> None:
        self.request("DELETE", endpoint)


def _json(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError as exc:
        raise RequestFailed(f"failed to parse response: {exc}") from exc
