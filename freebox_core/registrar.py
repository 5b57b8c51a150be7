"""Application registration with a Freebox appliance.

Registration is a one-time pairing handshake:
- Discover the appliance and its versioned API base URL
- Request an app token and track id
- Poll the authorization status while the user confirms on the appliance
- Persist the credentials once access is granted

A message is displayed on the appliance asking the user to grant or deny
access to the requesting application. Until then the status is pending.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from .config import PollBackoff
from .credentials import CredentialStore, StoredCredentials
from .errors import (
    CredentialStoreError,
    FreeboxClientError,
    FreeboxDiscoveryError,
    FreeboxRegistrationError,
)
from .events import StatusEmitter
from .http import FreeboxTransport
from .models import (
    AppIdentity,
    ApplianceState,
    AuthorizationStatus,
    DeviceIdentity,
    StatusEvent,
)
from .protocol import (
    AUTHORIZE_PATH,
    authorize_status_path,
    build_authorize_request,
    parse_device_identity,
)

_LOGGER = logging.getLogger(__name__)


class RegistrarState(Enum):
    """Phases of the pairing state machine."""

    NO_CREDENTIALS = "no_credentials"
    AWAITING_FIRST_GRANT_REQUEST = "awaiting_first_grant_request"
    POLLING = "polling"
    GRANTED = "granted"
    DENIED = "denied"
    UNKNOWN = "unknown"
    TIMED_OUT = "timed_out"


class ApplicationRegistrar:
    """Drive discovery and the pairing handshake for one appliance.

    Usage:
        registrar = ApplicationRegistrar(transport, state, emitter, store, store_key="fbx:80")
        registrar.restore()
        await registrar.discover()
        await registrar.register()
    """

    def __init__(
        self,
        transport: FreeboxTransport,
        state: ApplianceState,
        emitter: StatusEmitter,
        store: CredentialStore,
        *,
        store_key: str,
        app: AppIdentity | None = None,
        backoff: PollBackoff | None = None,
        max_poll_attempts: int | None = None,
        label: str = "freebox",
    ) -> None:
        self._transport = transport
        self._state = state
        self._emitter = emitter
        self._store = store
        self._store_key = store_key
        self._app = app or AppIdentity()
        self._backoff = backoff or PollBackoff()
        self._max_poll_attempts = max_poll_attempts
        self._label = label

        self._phase = self._initial_phase()
        self._cancelled = asyncio.Event()

    @property
    def state(self) -> RegistrarState:
        return self._phase

    def _initial_phase(self) -> RegistrarState:
        application = self._state.application
        if application.is_granted:
            return RegistrarState.GRANTED
        if application.track_id:
            return RegistrarState.POLLING
        return RegistrarState.NO_CREDENTIALS

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def restore(self) -> bool:
        """Load previously granted credentials from the credential store.

        Restored credentials are polled once more before use; no new
        authorization is requested for them.

        Returns:
            True if credentials were found.
        """
        stored = self._store.load(self._store_key)
        if stored is None:
            return False

        application = self._state.application
        application.app_token = stored.app_token
        application.track_id = stored.track_id
        application.status = AuthorizationStatus.UNSET
        self._phase = RegistrarState.POLLING
        _LOGGER.debug("[%s] Restored application credentials", self._label)
        return True

    async def discover(self) -> DeviceIdentity:
        """Learn the appliance identity and API base URL.

        Raises:
            FreeboxDiscoveryError: If the version endpoint is unreachable or
                its response lacks a required field.
        """
        root_url = self._transport.root_url
        _LOGGER.info("[%s] Connecting to freebox at %s", self._label, root_url)
        try:
            data = await self._transport.fetch_api_version()
            device = parse_device_identity(root_url, data)
        except FreeboxDiscoveryError as err:
            _LOGGER.error("[%s] Freebox discovery error: %s", self._label, err)
            self._emitter.emit(StatusEvent.APPLICATION_ERROR)
            raise
        except FreeboxClientError as err:
            _LOGGER.error("[%s] Freebox %s error: %s", self._label, root_url, err)
            self._emitter.emit(StatusEvent.APPLICATION_ERROR)
            raise FreeboxDiscoveryError(f"Freebox unreachable at {root_url}") from err

        self._state.device = device
        self._transport.base_url = device.base_url
        _LOGGER.info(
            "[%s] Found %s (%s), API at %s",
            self._label,
            device.device_name or "freebox",
            device.uid,
            device.base_url,
        )
        return device

    async def register(self) -> RegistrarState:
        """Run the pairing state machine until it settles.

        Returns the final phase: GRANTED on success, DENIED or UNKNOWN on
        refusal, or the current phase if polling was cancelled.

        Raises:
            FreeboxRegistrationError: If a request fails or polling gives up.
                The phase is left unchanged so the caller may call again.
        """
        if self._state.device is None:
            raise FreeboxRegistrationError("Freebox not discovered yet")
        if self._phase is RegistrarState.GRANTED:
            return self._phase

        if self._cancelled.is_set():
            _LOGGER.info("[%s] Registration cancelled before start", self._label)
            return self._phase

        application = self._state.application
        polls = 0

        try:
            while not self._cancelled.is_set():
                if not application.track_id:
                    await self._request_authorization()
                    polls = 0

                status = await self._query_status()
                polls += 1

                if status is AuthorizationStatus.PENDING:
                    _LOGGER.info(
                        "[%s] The app is not accepted yet, confirm it on the Freebox",
                        self._label,
                    )
                    application.status = status
                    self._phase = RegistrarState.POLLING
                    self._emitter.emit(StatusEvent.APPLICATION_PENDING)
                    if (
                        self._max_poll_attempts is not None
                        and polls >= self._max_poll_attempts
                    ):
                        raise FreeboxRegistrationError(
                            f"Authorization still pending after {polls} polls"
                        )
                    await self._wait(self._backoff.delay(polls))
                    continue

                if status is AuthorizationStatus.GRANTED:
                    self._grant()
                    return self._phase

                if status is AuthorizationStatus.TIMEOUT:
                    _LOGGER.info(
                        "[%s] Application not registered in time, sending another request",
                        self._label,
                    )
                    self._discard()
                    self._phase = RegistrarState.TIMED_OUT
                    self._emitter.emit(StatusEvent.APPLICATION_TIMEOUT)
                    continue

                _LOGGER.error(
                    "[%s] Register application failed, status is %s. Deleting credentials",
                    self._label,
                    status.value,
                )
                self._discard()
                self._phase = (
                    RegistrarState.DENIED
                    if status is AuthorizationStatus.DENIED
                    else RegistrarState.UNKNOWN
                )
                self._emitter.emit(StatusEvent.APPLICATION_UNKNOWN)
                return self._phase
        except FreeboxRegistrationError:
            raise
        except FreeboxClientError as err:
            _LOGGER.error("[%s] Registration request failed: %s", self._label, err)
            raise FreeboxRegistrationError(f"Registration request failed: {err}") from err

        _LOGGER.info("[%s] Registration polling cancelled", self._label)
        return self._phase

    def cancel(self) -> None:
        """Stop the polling loop at its next wait.

        Cancellation holds, including for a later ``register`` call, until
        ``resume`` is called.
        """
        self._cancelled.set()

    def resume(self) -> None:
        """Allow ``register`` to run again after ``cancel``."""
        self._cancelled.clear()

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    async def _request_authorization(self) -> None:
        result = await self._transport.request(
            AUTHORIZE_PATH, build_authorize_request(self._app)
        )
        if not isinstance(result, dict) or not result.get("app_token") or (
            result.get("track_id") is None
        ):
            raise FreeboxRegistrationError("Authorize response lacks app_token or track_id")

        application = self._state.application
        application.app_token = result["app_token"]
        application.track_id = str(result["track_id"])
        application.status = AuthorizationStatus.UNSET
        self._phase = RegistrarState.AWAITING_FIRST_GRANT_REQUEST
        _LOGGER.info(
            "[%s] Authorization requested (track id %s)",
            self._label,
            application.track_id,
        )

    async def _query_status(self) -> AuthorizationStatus:
        application = self._state.application
        result = await self._transport.request(
            authorize_status_path(application.track_id)
        )
        if not isinstance(result, dict) or "status" not in result:
            raise FreeboxRegistrationError("Authorization status response lacks status")
        return AuthorizationStatus.parse(result["status"])

    def _grant(self) -> None:
        application = self._state.application
        try:
            self._store.save(
                self._store_key,
                StoredCredentials(
                    app_token=application.app_token, track_id=application.track_id
                ),
            )
        except CredentialStoreError as err:
            _LOGGER.error("[%s] Could not persist credentials: %s", self._label, err)
            raise FreeboxRegistrationError("Could not persist granted credentials") from err

        application.status = AuthorizationStatus.GRANTED
        self._phase = RegistrarState.GRANTED
        _LOGGER.info("[%s] Application registered", self._label)
        self._emitter.emit(StatusEvent.APPLICATION_GRANTED)

    def _discard(self) -> None:
        try:
            self._store.delete(self._store_key)
        except CredentialStoreError as err:
            _LOGGER.error("[%s] Could not delete credentials: %s", self._label, err)
            raise FreeboxRegistrationError("Could not delete stored credentials") from err
        self._state.reset_pairing()

    async def _wait(self, delay: float) -> None:
        if delay <= 0:
            await asyncio.sleep(0)
            return
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=delay)
        except TimeoutError:
            pass
