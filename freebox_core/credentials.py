"""Credential stores for the granted application token and track id."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Protocol

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from .errors import CredentialStoreError

SERVICE_NAME = "freebox-core"


@dataclass(frozen=True)
class StoredCredentials:
    """Application credentials as persisted between restarts."""

    app_token: str = field(repr=False)
    track_id: str


class CredentialStore(Protocol):
    """Secret store keyed by a stable per-configuration identifier."""

    def load(self, key: str) -> StoredCredentials | None: ...

    def save(self, key: str, credentials: StoredCredentials) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryCredentialStore:
    """In-process store, useful for embedding and tests."""

    def __init__(self) -> None:
        self._entries: dict[str, StoredCredentials] = {}

    def load(self, key: str) -> StoredCredentials | None:
        return self._entries.get(key)

    def save(self, key: str, credentials: StoredCredentials) -> None:
        self._entries[key] = credentials

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)


def _decode(raw: str | None) -> StoredCredentials | None:
    if not raw:
        return None
    try:
        data = json.loads(raw)
        return StoredCredentials(app_token=data["token"], track_id=data["trackId"])
    except (ValueError, KeyError, TypeError) as exc:
        raise CredentialStoreError("stored Freebox credentials are corrupt") from exc


class KeyringCredentialStore:
    """Store credentials in the system keyring as a JSON document."""

    def __init__(self, service_name: str = SERVICE_NAME) -> None:
        self._service_name = service_name

    def load(self, key: str) -> StoredCredentials | None:
        try:
            raw = keyring.get_password(self._service_name, key)
        except KeyringError as exc:
            raise CredentialStoreError("failed to load credentials from keyring") from exc
        return _decode(raw)

    def save(self, key: str, credentials: StoredCredentials) -> None:
        raw = json.dumps({"token": credentials.app_token, "trackId": credentials.track_id})
        try:
            keyring.set_password(self._service_name, key, raw)
        except KeyringError as exc:
            raise CredentialStoreError("failed to write credentials to keyring") from exc

    def delete(self, key: str) -> None:
        try:
            keyring.delete_password(self._service_name, key)
        except PasswordDeleteError:
            return
        except KeyringError as exc:
            raise CredentialStoreError("failed to delete credentials from keyring") from exc
