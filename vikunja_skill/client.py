"""HTTP client for the Vikunja REST API.

Thin synchronous wrapper around :class:`httpx.Client` that adds bearer
authentication and turns HTTP error statuses into :class:`ApiError`.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

URL_ENV = "VIKUNJA_URL"
TOKEN_ENV = "VIKUNJA_TOKEN"

# Timeout for every API call (seconds).
_DEFAULT_TIMEOUT = 30.0


class ConfigError(Exception):
    """Raised when the client cannot be configured from the environment."""


class UsageError(Exception):
    """Raised for invalid command-line input the parser cannot catch."""


class RequestFailed(Exception):
    """Raised when the request never produced an HTTP response."""


class ApiError(Exception):
    """Raised when the API returns a status >= 400."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"API error (status {status_code}): {detail}")


class VikunjaClient:
    """HTTP client for the Vikunja API.

    Parameters
    ----------
    base_url:
        API root including the version prefix, e.g.
        ``https://vikunja.example.com/api/v1``.
    token:
        API token sent as ``Authorization: Bearer``.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = _DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_env(cls) -> VikunjaClient:
        """Create a client from ``VIKUNJA_URL`` and ``VIKUNJA_TOKEN``."""
        base_url = os.environ.get(URL_ENV, "")
        if not base_url:
            raise ConfigError(f"{URL_ENV} environment variable is required")
        token = os.environ.get(TOKEN_ENV, "")
        if not token:
            raise ConfigError(f"{TOKEN_ENV} environment variable is required")
        return cls(base_url, token)

    def close(self) -> None:
        self._client.close()

    def request(
        self,
        method: str,
        endpoint: str,
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Perform a request against ``base_url + endpoint``."""
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

    def post(self, endpoint: str, body: Any = None) -> Any:
        return _json(self.request("POST", endpoint, body))

    def put(self, endpoint: str, body: Any = None) -> Any:
        return _json(self.request("PUT", endpoint, body))

    def delete(self, endpoint: str) -> None:
        self.request("DELETE", endpoint)


def _json(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError as exc:
        raise RequestFailed(f"failed to parse response: {exc}") from exc
