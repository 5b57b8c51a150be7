"""Pytest configuration and fixtures for freebox_core tests."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from freebox_core.config import PollBackoff
from freebox_core.credentials import MemoryCredentialStore
from freebox_core.events import StatusEmitter
from freebox_core.models import ApplianceState, StatusEvent

API_VERSION = {
    "uid": "abc",
    "device_name": "Freebox Server",
    "device_type": "FreeboxServer1,2",
    "api_base_url": "/api/",
    "api_version": "8.0",
}


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp ClientSession."""
    import aiohttp

    return MagicMock(spec=aiohttp.ClientSession)


def create_mock_response(
    status: int = 200,
    json_data: Any = None,
    json_error: Exception | None = None,
) -> AsyncMock:
    """Create a configured mock response.

    Args:
        status: HTTP status code
        json_data: Data to return from json() call
        json_error: Exception raised by json() instead

    Returns:
        Configured AsyncMock response
    """
    response = AsyncMock()
    response.status = status

    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data

    response.__aenter__.return_value = response
    response.__aexit__.return_value = None

    return response


@dataclass
class RecordedCall:
    """One request seen by FakeTransport."""

    path: str
    body: dict[str, Any] | None
    headers: dict[str, str]

    @property
    def method(self) -> str:
        return "GET" if self.body is None else "POST"


@dataclass
class FakeTransport:
    """Scripted transport: each path answers from its queue of results.

    The last queued result of a path is repeated; queued exceptions are
    raised instead of returned.
    """

    api_version: Any = field(default_factory=lambda: dict(API_VERSION))
    host: str = "192.168.1.254"
    port: int = 80
    base_url: str | None = None
    responses: dict[str, list[Any]] = field(default_factory=dict)
    calls: list[RecordedCall] = field(default_factory=list)
    api_version_calls: int = 0

    @property
    def root_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def queue(self, path: str, *results: Any) -> None:
        self.responses.setdefault(path, []).extend(results)

    def calls_to(self, path: str) -> list[RecordedCall]:
        return [c for c in self.calls if c.path == path]

    async def fetch_api_version(self) -> dict[str, Any]:
        self.api_version_calls += 1
        await asyncio.sleep(0)
        if isinstance(self.api_version, Exception):
            raise self.api_version
        return self.api_version

    async def request(
        self,
        path: str,
        body: dict[str, Any] | None = None,
        *,
        headers: dict[str, str] | None = None,
    ) -> Any:
        self.calls.append(RecordedCall(path, body, dict(headers or {})))
        await asyncio.sleep(0)
        pending = self.responses.get(path)
        if not pending:
            raise AssertionError(f"Unexpected request to {path}")
        result = pending.pop(0) if len(pending) > 1 else pending[0]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def state() -> ApplianceState:
    return ApplianceState()


@pytest.fixture
def store() -> MemoryCredentialStore:
    return MemoryCredentialStore()


@pytest.fixture
def events() -> list[StatusEvent]:
    return []


@pytest.fixture
def emitter(events: list[StatusEvent]) -> StatusEmitter:
    emitter = StatusEmitter()
    emitter.subscribe(events.append)
    return emitter


@pytest.fixture
def no_backoff() -> PollBackoff:
    return PollBackoff(interval=0.0)
