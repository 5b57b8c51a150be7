"""Test FreeboxHttpClient request building and error mapping."""

from __future__ import annotations

from unittest.mock import MagicMock

import aiohttp
import pytest

from freebox_core import FreeboxHttpClient
from freebox_core.errors import (
    FreeboxConnectionError,
    FreeboxResponseError,
    FreeboxTimeout,
)

from .conftest import API_VERSION, create_mock_response


def _client(mock_session: MagicMock, **kwargs) -> FreeboxHttpClient:
    client = FreeboxHttpClient(mock_session, "192.168.1.254", 80, **kwargs)
    client.base_url = "http://192.168.1.254:80/api/v8"
    return client


class TestFetchApiVersion:
    """Test the unauthenticated discovery request."""

    async def test_returns_raw_document(self, mock_session: MagicMock) -> None:
        client = FreeboxHttpClient(mock_session, "192.168.1.254", 80)
        mock_session.get.return_value = create_mock_response(json_data=API_VERSION)

        data = await client.fetch_api_version()

        assert data == API_VERSION
        assert mock_session.get.call_args.args[0] == "http://192.168.1.254:80/api_version"
        assert "headers" not in mock_session.get.call_args.kwargs

    async def test_non_200_raises_response_error(self, mock_session: MagicMock) -> None:
        client = FreeboxHttpClient(mock_session, "192.168.1.254", 80)
        mock_session.get.return_value = create_mock_response(status=404)

        with pytest.raises(FreeboxResponseError) as exc_info:
            await client.fetch_api_version()

        assert exc_info.value.status == 404

    async def test_timeout_raises_freebox_timeout(self, mock_session: MagicMock) -> None:
        client = FreeboxHttpClient(mock_session, "192.168.1.254", 80)
        mock_session.get.side_effect = TimeoutError("Request timed out")

        with pytest.raises(FreeboxTimeout, match="api_version request timed out"):
            await client.fetch_api_version()

    async def test_client_error_raises_connection_error(
        self, mock_session: MagicMock
    ) -> None:
        client = FreeboxHttpClient(mock_session, "192.168.1.254", 80)
        mock_session.get.side_effect = aiohttp.ClientError("Connection refused")

        with pytest.raises(FreeboxConnectionError, match="Failed to fetch api_version"):
            await client.fetch_api_version()


class TestRequest:
    """Test enveloped API requests."""

    async def test_without_body_issues_get(self, mock_session: MagicMock) -> None:
        client = _client(mock_session)
        mock_session.get.return_value = create_mock_response(
            json_data={"success": True, "result": {"logged_in": False}}
        )

        result = await client.request("/login")

        assert result == {"logged_in": False}
        mock_session.post.assert_not_called()
        assert mock_session.get.call_args.args[0] == "http://192.168.1.254:80/api/v8/login"
        assert mock_session.get.call_args.kwargs["headers"] == {}

    async def test_with_body_issues_post(self, mock_session: MagicMock) -> None:
        client = _client(mock_session)
        mock_session.post.return_value = create_mock_response(
            json_data={"success": True, "result": {"track_id": 1}}
        )

        result = await client.request("/login/authorize", {"app_id": "x"})

        assert result == {"track_id": 1}
        mock_session.get.assert_not_called()
        assert mock_session.post.call_args.kwargs["json"] == {"app_id": "x"}

    async def test_empty_body_is_still_a_post(self, mock_session: MagicMock) -> None:
        client = _client(mock_session)
        mock_session.post.return_value = create_mock_response(json_data={"success": True})

        result = await client.request("/login/logout", {})

        assert result is None
        mock_session.post.assert_called_once()

    async def test_headers_are_forwarded(self, mock_session: MagicMock) -> None:
        client = _client(mock_session)
        mock_session.get.return_value = create_mock_response(
            json_data={"success": True, "result": []}
        )

        await client.request("/connection", headers={"X-Fbx-App-Auth": "tok"})

        assert mock_session.get.call_args.kwargs["headers"] == {"X-Fbx-App-Auth": "tok"}

    async def test_uses_configured_timeout(self, mock_session: MagicMock) -> None:
        client = _client(mock_session, timeout=3.0)
        mock_session.get.return_value = create_mock_response(
            json_data={"success": True, "result": {}}
        )

        await client.request("/login")

        timeout = mock_session.get.call_args.kwargs.get("timeout")
        assert timeout is not None
        assert timeout.total == 3.0

    async def test_failed_envelope_raises_with_error_code(
        self, mock_session: MagicMock
    ) -> None:
        client = _client(mock_session)
        mock_session.get.return_value = create_mock_response(
            status=403,
            json_data={
                "success": False,
                "error_code": "auth_required",
                "msg": "Invalid session token, or not session token sent",
            },
        )

        with pytest.raises(FreeboxResponseError) as exc_info:
            await client.request("/connection")

        assert exc_info.value.status == 403
        assert exc_info.value.error_code == "auth_required"
        assert exc_info.value.is_auth_failure

    async def test_non_2xx_without_json_raises(self, mock_session: MagicMock) -> None:
        client = _client(mock_session)
        mock_session.get.return_value = create_mock_response(
            status=502, json_error=ValueError("not json")
        )

        with pytest.raises(FreeboxResponseError, match="HTTP 502") as exc_info:
            await client.request("/connection")

        assert exc_info.value.error_code is None

    async def test_malformed_envelope_raises(self, mock_session: MagicMock) -> None:
        client = _client(mock_session)
        mock_session.get.return_value = create_mock_response(json_data=["nope"])

        with pytest.raises(FreeboxResponseError, match="Malformed"):
            await client.request("/connection")

    async def test_without_base_url_raises(self, mock_session: MagicMock) -> None:
        client = FreeboxHttpClient(mock_session, "192.168.1.254", 80)

        with pytest.raises(FreeboxConnectionError, match="run discovery first"):
            await client.request("/login")

        mock_session.get.assert_not_called()

    async def test_timeout_raises_freebox_timeout(self, mock_session: MagicMock) -> None:
        client = _client(mock_session)
        mock_session.post.side_effect = TimeoutError("Request timed out")

        with pytest.raises(FreeboxTimeout, match="POST /login/session timed out"):
            await client.request("/login/session", {"password": "x"})

    async def test_client_error_raises_connection_error(
        self, mock_session: MagicMock
    ) -> None:
        client = _client(mock_session)
        mock_session.get.side_effect = aiohttp.ClientError("Connection refused")

        with pytest.raises(FreeboxConnectionError, match="GET /login failed"):
            await client.request("/login")
