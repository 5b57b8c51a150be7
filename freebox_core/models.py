"""State models for one Freebox appliance endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class AuthorizationStatus(Enum):
    """Authorization status of the registered application.

    Values mirror the ``status`` field returned by the authorize-status
    endpoint. ``UNKNOWN`` covers any value the appliance reports that is
    not listed here.
    """

    UNSET = ""
    PENDING = "pending"
    GRANTED = "granted"
    TIMEOUT = "timeout"
    DENIED = "denied"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> AuthorizationStatus:
        """Parse a status string, mapping unrecognised values to UNKNOWN."""
        if value == "":
            return cls.UNKNOWN
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class StatusEvent(Enum):
    """Status changes broadcast to observers."""

    APPLICATION_PENDING = "application.pending"
    APPLICATION_GRANTED = "application.granted"
    APPLICATION_TIMEOUT = "application.timeout"
    APPLICATION_UNKNOWN = "application.unknown"
    APPLICATION_ERROR = "application.error"
    SESSION_OPENED = "session.opened"
    SESSION_CLOSED = "session.closed"
    DISCONNECTED = "disconnected"


@dataclass(frozen=True)
class AppIdentity:
    """Identity presented to the appliance when requesting authorization."""

    app_id: str = "node-red-contrib-freebox"
    app_name: str = "node-red Freebox API"
    app_version: str = "0.0.1"
    device_name: str = "Node-red"


@dataclass(frozen=True)
class DeviceIdentity:
    """Appliance identity learned from the public version endpoint.

    Attributes:
        uid: Appliance unique identifier.
        device_name: Human readable model name.
        device_type: Hardware type string.
        base_url: Versioned API root, e.g. ``http://host:80/api/v8``.
    """

    uid: str
    device_name: str
    device_type: str
    base_url: str


@dataclass
class ApplicationCredentials:
    """Application token and pairing handle for this installation."""

    app_token: str = field(default="", repr=False)
    track_id: str = ""
    status: AuthorizationStatus = AuthorizationStatus.UNSET

    @property
    def is_granted(self) -> bool:
        return self.status is AuthorizationStatus.GRANTED

    def clear(self) -> None:
        self.app_token = ""
        self.track_id = ""
        self.status = AuthorizationStatus.UNSET


@dataclass
class SessionState:
    """Session token and permissions of the current login."""

    session_token: str = field(default="", repr=False)
    permissions: dict[str, bool] = field(default_factory=dict)

    @property
    def is_open(self) -> bool:
        return bool(self.session_token)

    def commit(self, session_token: str, permissions: dict[str, bool]) -> None:
        """Replace token and permissions together."""
        self.session_token, self.permissions = session_token, dict(permissions)

    def clear(self) -> None:
        self.session_token = ""
        self.permissions = {}


@dataclass
class ApplianceState:
    """All mutable state owned by one configured appliance endpoint.

    The registrar, session manager and API client share a single instance
    by reference; nothing here is shared across endpoints.
    """

    device: DeviceIdentity | None = None
    application: ApplicationCredentials = field(default_factory=ApplicationCredentials)
    session: SessionState = field(default_factory=SessionState)

    def reset_pairing(self) -> None:
        """Forget application and session state."""
        self.application.clear()
        self.session.clear()
