"""Session management for authorized Freebox API calls.

A session is opened with a challenge-response login:
- Query the login status, which carries a fresh challenge
- Sign the challenge with the app token (HMAC-SHA1, hex)
- Open a session and keep its token and permissions

The appliance may drop a session at any time; the login status is
therefore queried again before every authorized call.
"""

from __future__ import annotations

import asyncio
import logging

from .errors import FreeboxClientError, FreeboxSessionError
from .events import StatusEmitter
from .http import FreeboxTransport
from .models import AppIdentity, ApplianceState, StatusEvent
from .protocol import (
    LOGIN_PATH,
    LOGOUT_PATH,
    SESSION_PATH,
    auth_headers,
    build_session_request,
)
from .signing import sign_challenge

_LOGGER = logging.getLogger(__name__)


class SessionManager:
    """Guarantee a usable session token before every authorized call."""

    def __init__(
        self,
        transport: FreeboxTransport,
        state: ApplianceState,
        emitter: StatusEmitter,
        *,
        app: AppIdentity | None = None,
        label: str = "freebox",
    ) -> None:
        self._transport = transport
        self._state = state
        self._emitter = emitter
        self._app = app or AppIdentity()
        self._label = label

        self._refresh_task: asyncio.Task[None] | None = None

    @property
    def session_token(self) -> str:
        return self._state.session.session_token

    @property
    def permissions(self) -> dict[str, bool]:
        return dict(self._state.session.permissions)

    def has_permission(self, name: str) -> bool:
        """Check a permission granted with the current session."""
        return bool(self._state.session.permissions.get(name))

    async def ensure_session(self) -> None:
        """Open a session unless the appliance reports one as active.

        Concurrent callers share the refresh already in flight, so at most
        one login happens at a time.

        Raises:
            FreeboxSessionError: If the login status or open-session request
                fails. Session state is left as it was.
        """
        # No await between the check and the assignment.
        task = self._refresh_task
        if task is None or task.done():
            task = asyncio.create_task(self._refresh())
            self._refresh_task = task
            task.add_done_callback(self._refresh_done)
        await asyncio.shield(task)

    def _refresh_done(self, task: asyncio.Task[None]) -> None:
        if self._refresh_task is task:
            self._refresh_task = None
        # Callers may all have been cancelled; mark the failure as retrieved.
        if not task.cancelled():
            task.exception()

    async def logout(self) -> None:
        """Close the current session; failures are logged, never raised."""
        session = self._state.session
        if not session.is_open:
            _LOGGER.debug("[%s] Logout skipped: no session", self._label)
            return

        try:
            await self._transport.request(
                LOGOUT_PATH, {}, headers=auth_headers(session.session_token)
            )
        except FreeboxClientError as err:
            _LOGGER.warning("[%s] Logout failed: %s", self._label, err)
            session.clear()
            return

        session.clear()
        _LOGGER.info("[%s] Session closed", self._label)
        self._emitter.emit(StatusEvent.SESSION_CLOSED)

    def invalidate(self) -> None:
        """Forget the local session so the next call logs in again."""
        self._state.session.clear()

    async def _refresh(self) -> None:
        try:
            status = await self._transport.request(LOGIN_PATH)
        except FreeboxClientError as err:
            _LOGGER.error("[%s] Login status request failed: %s", self._label, err)
            raise FreeboxSessionError(f"Login status request failed: {err}") from err

        if not isinstance(status, dict):
            raise FreeboxSessionError("Malformed login status response")
        if status.get("logged_in"):
            return

        challenge = status.get("challenge")
        if not challenge:
            raise FreeboxSessionError("No challenge in login status response")

        app_token = self._state.application.app_token
        if not app_token:
            raise FreeboxSessionError("No application token, register the app first")

        body = build_session_request(self._app, sign_challenge(app_token, challenge))
        try:
            result = await self._transport.request(SESSION_PATH, body)
        except FreeboxClientError as err:
            _LOGGER.error("[%s] Open session request failed: %s", self._label, err)
            raise FreeboxSessionError(f"Open session request failed: {err}") from err

        if not isinstance(result, dict) or not result.get("session_token"):
            raise FreeboxSessionError("No session_token in open session response")

        permissions = result.get("permissions") or {}
        if not isinstance(permissions, dict):
            raise FreeboxSessionError("Malformed permissions in open session response")

        self._state.session.commit(result["session_token"], permissions)
        _LOGGER.info("[%s] Session opened", self._label)
        self._emitter.emit(StatusEvent.SESSION_OPENED)
