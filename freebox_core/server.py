"""High-level entry point for one configured Freebox.

FreeboxServer owns the state of a single appliance endpoint and wires
discovery, registration, session handling and signed calls together.

Usage:
    async with aiohttp.ClientSession() as http:
        async with FreeboxServer(FreeboxConfig(host="192.168.1.254"), http) as fbx:
            devices = await fbx.call("/lan/browser/pub")
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from .client import AuthorizedApiClient
from .config import FreeboxConfig
from .credentials import CredentialStore, KeyringCredentialStore
from .events import StatusCallback, StatusEmitter
from .http import FreeboxHttpClient, FreeboxTransport
from .models import ApplianceState, StatusEvent
from .registrar import ApplicationRegistrar, RegistrarState
from .session import SessionManager

_LOGGER = logging.getLogger(__name__)


class FreeboxServer:
    """Authorization and session lifecycle for one appliance."""

    def __init__(
        self,
        config: FreeboxConfig,
        session: aiohttp.ClientSession,
        *,
        store: CredentialStore | None = None,
        transport: FreeboxTransport | None = None,
    ) -> None:
        """Initialize the server.

        Args:
            config: Appliance settings
            session: aiohttp session used for every request
            store: Credential store (system keyring by default)
            transport: Override of the HTTP transport, mainly for tests
        """
        self.config = config
        self.state = ApplianceState()
        self.transport = transport if transport is not None else FreeboxHttpClient(
            session,
            config.host,
            config.port,
            scheme=config.scheme,
            timeout=config.request_timeout,
        )
        self._emitter = StatusEmitter()
        self._store = store if store is not None else KeyringCredentialStore()

        self.registrar = ApplicationRegistrar(
            self.transport,
            self.state,
            self._emitter,
            self._store,
            store_key=config.store_key,
            app=config.app,
            backoff=config.poll_backoff,
            max_poll_attempts=config.max_poll_attempts,
            label=config.label,
        )
        self.sessions = SessionManager(
            self.transport,
            self.state,
            self._emitter,
            app=config.app,
            label=config.label,
        )
        self.api = AuthorizedApiClient(
            self.transport,
            self.state,
            self.sessions,
            self._emitter,
            label=config.label,
        )

    @property
    def status_changed(self) -> StatusEmitter:
        return self._emitter

    def on_status_changed(
        self, callback: StatusCallback, event: StatusEvent | None = None
    ) -> Callable[[], None]:
        """Register a status callback; returns the unsubscribe function."""
        return self._emitter.subscribe(callback, event)

    @property
    def is_authorized(self) -> bool:
        return self.registrar.state is RegistrarState.GRANTED

    async def start(self) -> RegistrarState:
        """Discover the appliance and pair with it unless already granted.

        Calling start again after a failure restarts the whole flow,
        beginning with discovery. A ``close`` made while start is running
        stops it before the next request.
        """
        self.registrar.resume()
        if self.registrar.state is not RegistrarState.GRANTED:
            self.registrar.restore()
        await self.registrar.discover()
        if self.registrar.state is RegistrarState.GRANTED:
            return self.registrar.state
        return await self.registrar.register()

    async def call(self, path: str, body: dict[str, Any] | None = None) -> Any:
        """Perform a signed call; see ``AuthorizedApiClient.call``."""
        return await self.api.call(path, body)

    async def close(self) -> None:
        """Stop polling and close the session."""
        _LOGGER.info("[%s] Closing", self.config.label)
        self.registrar.cancel()
        await self.sessions.logout()

    async def __aenter__(self) -> FreeboxServer:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
