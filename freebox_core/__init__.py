"""Authorization and session core for the Freebox local HTTP API."""

__version__ = "0.1.0"

from .client import AuthorizedApiClient
from .config import FreeboxConfig, PollBackoff, load_config
from .credentials import (
    CredentialStore,
    KeyringCredentialStore,
    MemoryCredentialStore,
    StoredCredentials,
)
from .errors import (
    ConfigLoadError,
    CredentialStoreError,
    FreeboxCallError,
    FreeboxClientError,
    FreeboxConnectionError,
    FreeboxDiscoveryError,
    FreeboxNotAuthorizedError,
    FreeboxRegistrationError,
    FreeboxResponseError,
    FreeboxSessionError,
    FreeboxTimeout,
)
from .events import StatusEmitter
from .http import FreeboxHttpClient, FreeboxTransport
from .models import (
    AppIdentity,
    ApplianceState,
    ApplicationCredentials,
    AuthorizationStatus,
    DeviceIdentity,
    SessionState,
    StatusEvent,
)
from .registrar import ApplicationRegistrar, RegistrarState
from .server import FreeboxServer
from .session import SessionManager
from .signing import sign_challenge

__all__ = [
    "AppIdentity",
    "ApplianceState",
    "ApplicationCredentials",
    "ApplicationRegistrar",
    "AuthorizationStatus",
    "AuthorizedApiClient",
    "ConfigLoadError",
    "CredentialStore",
    "CredentialStoreError",
    "DeviceIdentity",
    "FreeboxCallError",
    "FreeboxClientError",
    "FreeboxConfig",
    "FreeboxConnectionError",
    "FreeboxDiscoveryError",
    "FreeboxHttpClient",
    "FreeboxNotAuthorizedError",
    "FreeboxRegistrationError",
    "FreeboxResponseError",
    "FreeboxServer",
    "FreeboxSessionError",
    "FreeboxTimeout",
    "FreeboxTransport",
    "KeyringCredentialStore",
    "MemoryCredentialStore",
    "PollBackoff",
    "RegistrarState",
    "SessionManager",
    "SessionState",
    "StatusEmitter",
    "StatusEvent",
    "StoredCredentials",
    "__version__",
    "load_config",
    "sign_challenge",
]
