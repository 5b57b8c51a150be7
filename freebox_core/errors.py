"""Client error types for Freebox appliance interactions."""

from __future__ import annotations

AUTH_ERROR_CODES: frozenset[str] = frozenset(
    {"auth_required", "invalid_session", "invalid_token", "pending_token"}
)


class FreeboxClientError(Exception):
    """Base error for Freebox client failures."""


class FreeboxTimeout(FreeboxClientError):
    """Timeout while communicating with the appliance."""


class FreeboxConnectionError(FreeboxClientError):
    """Network connection to the appliance failed."""


class FreeboxResponseError(FreeboxClientError):
    """HTTP or envelope error returned by the appliance."""

    def __init__(
        self, status: int, message: str, *, error_code: str | None = None
    ) -> None:
        super().__init__(message)
        self.status = status
        self.error_code = error_code

    @property
    def is_auth_failure(self) -> bool:
        """True when the appliance rejected the session or app token."""
        return self.status in (401, 403) or self.error_code in AUTH_ERROR_CODES


class FreeboxDiscoveryError(FreeboxClientError):
    """The public version endpoint was unreachable or incomplete."""


class FreeboxRegistrationError(FreeboxClientError):
    """Authorize or authorization-status request failed."""


class FreeboxSessionError(FreeboxClientError):
    """Login status or open-session request failed."""


class FreeboxCallError(FreeboxClientError):
    """A signed API call failed."""


class FreeboxNotAuthorizedError(FreeboxClientError):
    """An authorized call was attempted before the application was granted."""


class ConfigLoadError(Exception):
    """Configuration file is missing or invalid."""


class CredentialStoreError(Exception):
    """The credential backend could not read or write credentials."""
