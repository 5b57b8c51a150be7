"""HTTP transport for Freebox appliance endpoints."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import aiohttp

from .errors import (
    FreeboxConnectionError,
    FreeboxResponseError,
    FreeboxTimeout,
)
from .protocol import API_VERSION_PATH, unwrap_envelope

_LOGGER = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 10.0


class FreeboxTransport(Protocol):
    """Capability used by the registrar, session manager and API client.

    ``request`` issues a GET when ``body`` is None and a POST otherwise,
    and returns the unwrapped ``result`` of the response envelope.
    """

    base_url: str | None

    @property
    def root_url(self) -> str: ...

    async def fetch_api_version(self) -> dict[str, Any]: ...

    async def request(
        self,
        path: str,
        body: dict[str, Any] | None = None,
        *,
        headers: dict[str, str] | None = None,
    ) -> Any: ...


class FreeboxHttpClient:
    """HTTP client wrapper for Freebox API endpoints."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        host: str,
        port: int,
        *,
        scheme: str = "http",
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._session = session
        self._host = host
        self._port = port
        self._scheme = scheme
        self._timeout = timeout
        self.base_url: str | None = None

    @property
    def root_url(self) -> str:
        return f"{self._scheme}://{self._host}:{self._port}"

    def _client_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self._timeout)

    async def fetch_api_version(self) -> dict[str, Any]:
        """Fetch the public, unauthenticated ``/api_version`` document."""
        url = f"{self.root_url}{API_VERSION_PATH}"
        try:
            async with self._session.get(
                url,
                timeout=self._client_timeout(),
            ) as resp:
                if resp.status != 200:
                    raise FreeboxResponseError(
                        resp.status, "api_version request failed with non-200 response"
                    )
                try:
                    data = await resp.json(content_type=None)
                except ValueError as err:
                    raise FreeboxResponseError(
                        resp.status, "api_version response is not JSON"
                    ) from err
                if not isinstance(data, dict):
                    raise FreeboxResponseError(
                        resp.status, "api_version response is not an object"
                    )
                return data
        except TimeoutError as err:
            raise FreeboxTimeout("api_version request timed out") from err
        except aiohttp.ClientError as err:
            raise FreeboxConnectionError("Failed to fetch api_version") from err

    async def request(
        self,
        path: str,
        body: dict[str, Any] | None = None,
        *,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Call ``base_url + path`` and unwrap the response envelope.

        Raises:
            FreeboxTimeout: If the request times out.
            FreeboxConnectionError: If the network request fails or the base
                URL is not known yet.
            FreeboxResponseError: On non-2xx status or a failed envelope.
        """
        if self.base_url is None:
            raise FreeboxConnectionError("API base URL unknown, run discovery first")

        url = f"{self.base_url}{path}"
        method = "GET" if body is None else "POST"
        _LOGGER.debug("[%s:%s] %s %s", self._host, self._port, method, path)

        try:
            if body is None:
                ctx = self._session.get(
                    url,
                    headers=headers or {},
                    timeout=self._client_timeout(),
                )
            else:
                ctx = self._session.post(
                    url,
                    json=body,
                    headers=headers or {},
                    timeout=self._client_timeout(),
                )
            async with ctx as resp:
                try:
                    data = await resp.json(content_type=None)
                except ValueError:
                    data = None

                if not 200 <= resp.status < 300:
                    error_code = None
                    message = None
                    if isinstance(data, dict):
                        error_code = data.get("error_code")
                        message = data.get("msg")
                    raise FreeboxResponseError(
                        resp.status,
                        message or f"{method} {path} failed with HTTP {resp.status}",
                        error_code=error_code,
                    )
                return unwrap_envelope(data, status=resp.status)
        except TimeoutError as err:
            raise FreeboxTimeout(f"{method} {path} timed out") from err
        except aiohttp.ClientError as err:
            raise FreeboxConnectionError(f"{method} {path} failed") from err
