"""Signed API calls against a paired Freebox."""

from __future__ import annotations

import logging
from typing import Any

from .errors import (
    FreeboxCallError,
    FreeboxClientError,
    FreeboxConnectionError,
    FreeboxNotAuthorizedError,
    FreeboxTimeout,
)
from .events import StatusEmitter
from .http import FreeboxTransport
from .models import ApplianceState, StatusEvent
from .protocol import CONNECTED_DEVICES_PATH, CONNECTION_STATUS_PATH, auth_headers
from .session import SessionManager

_LOGGER = logging.getLogger(__name__)


class AuthorizedApiClient:
    """Perform signed calls, opening a session first when needed."""

    def __init__(
        self,
        transport: FreeboxTransport,
        state: ApplianceState,
        sessions: SessionManager,
        emitter: StatusEmitter,
        *,
        label: str = "freebox",
    ) -> None:
        self._transport = transport
        self._state = state
        self._sessions = sessions
        self._emitter = emitter
        self._label = label

    @property
    def status_changed(self) -> StatusEmitter:
        return self._emitter

    async def call(self, path: str, body: dict[str, Any] | None = None) -> Any:
        """Call an authenticated endpoint and return its ``result``.

        GET is used without a body, POST with one. Failures are not retried
        and never trigger a new login; use ``SessionManager.invalidate`` to
        force one.

        Raises:
            FreeboxNotAuthorizedError: If the application is not granted yet.
            FreeboxSessionError: If no session could be opened.
            FreeboxCallError: If the signed request fails.
        """
        if self._state.device is None or not self._state.application.is_granted:
            raise FreeboxNotAuthorizedError("Application is not authorized yet")

        await self._sessions.ensure_session()

        try:
            return await self._transport.request(
                path, body, headers=auth_headers(self._state.session.session_token)
            )
        except (FreeboxTimeout, FreeboxConnectionError) as err:
            _LOGGER.warning("[%s] Freebox unreachable: %s", self._label, err)
            self._emitter.emit(StatusEvent.DISCONNECTED)
            raise FreeboxCallError(f"Call to {path} failed: {err}") from err
        except FreeboxClientError as err:
            _LOGGER.error("[%s] Call to %s failed: %s", self._label, path, err)
            raise FreeboxCallError(f"Call to {path} failed: {err}") from err

    async def fetch_connected_devices(self) -> Any:
        """List hosts seen on the LAN browser."""
        return await self.call(CONNECTED_DEVICES_PATH)

    async def fetch_connection_status(self) -> Any:
        """Fetch the WAN connection status."""
        return await self.call(CONNECTION_STATUS_PATH)
