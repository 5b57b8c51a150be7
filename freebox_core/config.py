"""Configuration for one Freebox appliance endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigLoadError
from .models import AppIdentity


@dataclass(frozen=True)
class PollBackoff:
    """Delay schedule between authorization status polls.

    Attributes:
        interval: Delay before the second poll (seconds).
        factor: Multiplier applied after every pending answer.
        max_interval: Upper bound for a single delay (seconds).
    """

    interval: float = 1.0
    factor: float = 1.5
    max_interval: float = 10.0

    def delay(self, attempt: int) -> float:
        """Delay after the given (1-based) pending poll."""
        if self.interval <= 0:
            return 0.0
        return min(self.interval * (self.factor ** max(attempt - 1, 0)), self.max_interval)


@dataclass(frozen=True)
class FreeboxConfig:
    """Settings for one configured appliance.

    Attributes:
        host: Appliance hostname or IP.
        port: Appliance HTTP port.
        scheme: URL scheme used for every request.
        app: Identity sent when requesting authorization.
        request_timeout: Total timeout of each HTTP request (seconds).
        poll_backoff: Delay schedule while authorization is pending.
        max_poll_attempts: Polls per track id before giving up (None = no limit).
        credential_key: Key of this endpoint in the credential store.
    """

    host: str
    port: int = 80
    scheme: str = "http"
    app: AppIdentity = field(default_factory=AppIdentity)
    request_timeout: float = 10.0
    poll_backoff: PollBackoff = field(default_factory=PollBackoff)
    max_poll_attempts: int | None = None
    credential_key: str | None = None

    @property
    def store_key(self) -> str:
        return self.credential_key or f"{self.host}:{self.port}"

    @property
    def label(self) -> str:
        return f"{self.host}:{self.port}"


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file with error handling."""
    if not path.exists():
        raise ConfigLoadError(f"File not found: {path}")
    with path.open() as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as err:
            raise ConfigLoadError(f"Invalid YAML in {path}: {err}") from err
    if not isinstance(data, dict):
        raise ConfigLoadError(f"Expected a mapping in {path}")
    return data


def config_from_dict(data: dict[str, Any]) -> FreeboxConfig:
    """Build a config from a parsed mapping.

    Raises:
        ConfigLoadError: If ``host`` is missing or a value has the wrong type.
    """
    if not data.get("host"):
        raise ConfigLoadError("Missing required field: host")

    app_data = data.get("app") or {}
    poll_data = data.get("polling") or {}
    try:
        app = AppIdentity(**app_data)
        backoff = PollBackoff(
            interval=float(poll_data.get("interval", 1.0)),
            factor=float(poll_data.get("factor", 1.5)),
            max_interval=float(poll_data.get("max_interval", 10.0)),
        )
        max_attempts = poll_data.get("max_attempts")
        return FreeboxConfig(
            host=str(data["host"]),
            port=int(data.get("port", 80)),
            scheme=str(data.get("scheme", "http")),
            app=app,
            request_timeout=float(data.get("request_timeout", 10.0)),
            poll_backoff=backoff,
            max_poll_attempts=int(max_attempts) if max_attempts is not None else None,
            credential_key=data.get("credential_key"),
        )
    except (TypeError, ValueError) as err:
        raise ConfigLoadError(f"Invalid configuration: {err}") from err


def load_config(path: Path) -> FreeboxConfig:
    """Load an appliance configuration from a YAML file."""
    return config_from_dict(_load_yaml(path))
