"""Wire helpers for the Freebox HTTP API."""

from __future__ import annotations

from typing import Any, Final

from .errors import FreeboxDiscoveryError, FreeboxResponseError
from .models import AppIdentity, DeviceIdentity

AUTH_HEADER: Final = "X-Fbx-App-Auth"

API_VERSION_PATH: Final = "/api_version"
AUTHORIZE_PATH: Final = "/login/authorize"
LOGIN_PATH: Final = "/login"
SESSION_PATH: Final = "/login/session"
LOGOUT_PATH: Final = "/login/logout"

CONNECTED_DEVICES_PATH: Final = "/lan/browser/pub"
CONNECTION_STATUS_PATH: Final = "/connection"

DEFAULT_API_BASE_URL: Final = "/api/"


def authorize_status_path(track_id: str) -> str:
    """Path of the authorization status for a pending request."""
    return f"{AUTHORIZE_PATH}/{track_id}"


def build_authorize_request(app: AppIdentity) -> dict[str, str]:
    """Build the body of the authorization request."""
    return {
        "app_id": app.app_id,
        "app_name": app.app_name,
        "app_version": app.app_version,
        "device_name": app.device_name,
    }


def build_session_request(app: AppIdentity, password: str) -> dict[str, str]:
    """Build the body of the open-session request."""
    return {
        "app_id": app.app_id,
        "app_version": app.app_version,
        "password": password,
    }


def auth_headers(session_token: str) -> dict[str, str]:
    return {AUTH_HEADER: session_token}


def unwrap_envelope(data: Any, *, status: int = 200) -> Any:
    """Return the ``result`` of an API response envelope.

    Envelopes look like ``{"success": true, "result": ...}`` or
    ``{"success": false, "error_code": "...", "msg": "..."}``.

    Raises:
        FreeboxResponseError: If the call failed or the envelope is malformed.
    """
    if not isinstance(data, dict):
        raise FreeboxResponseError(status, "Malformed response envelope")

    if data.get("success") is False:
        error_code = data.get("error_code")
        message = data.get("msg") or f"API error {error_code or 'unknown'}"
        raise FreeboxResponseError(status, message, error_code=error_code)

    if "result" not in data:
        if data.get("success") is True:
            return None
        raise FreeboxResponseError(status, "Malformed response envelope")

    return data["result"]


def parse_device_identity(root_url: str, data: Any) -> DeviceIdentity:
    """Build the device identity from an ``/api_version`` response.

    The versioned base URL is ``root_url + api_base_url + "v" + major``,
    where ``major`` is the part of ``api_version`` before the first dot.

    Raises:
        FreeboxDiscoveryError: If a required field is missing.
    """
    if not isinstance(data, dict) or "uid" not in data:
        raise FreeboxDiscoveryError("No uid in api_version response")

    api_version = data.get("api_version")
    if not api_version:
        raise FreeboxDiscoveryError("No api_version in api_version response")

    major = str(api_version).split(".", 1)[0]
    api_base_url = data.get("api_base_url") or DEFAULT_API_BASE_URL

    return DeviceIdentity(
        uid=str(data["uid"]),
        device_name=data.get("device_name", ""),
        device_type=data.get("device_type", ""),
        base_url=f"{root_url}{api_base_url}v{major}",
    )
