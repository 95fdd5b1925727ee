"""
Freebox API Library
===================

Python client for the Freebox router's local management API: find the
router on the local network, pair an application with it, and open
authenticated sessions.

Quick Start:
    Find the router and pair a new application (someone has to press the
    button on the router's front panel):

    >>> from freebox_api import AuthorizationStatus, FreeboxClient, discover
    >>> device = discover("http")[0]
    >>> client = FreeboxClient(device, app_id="fr.example.app", app_name="Example")
    >>> token = client.request_authorization()
    >>> client.track_authorization_progress(token.track_id).status
    <AuthorizationStatus.PENDING: 'pending'>

    Open a session with the stored app token:

    >>> client = FreeboxClient(device, app_id="fr.example.app", app_token=token.app_token,
    ...                        signing_key_source="app-token")
    >>> session = client.login()
    >>> client.connection_status(session.session_token).state
    'up'

Error Handling:
    >>> from freebox_api import FreeboxAPIError
    >>> try:
    ...     client.login()
    ... except FreeboxAPIError as e:
    ...     print(f"Refused: {e.error_code}")

This is an unofficial library not affiliated with Free or Iliad.

License: MIT
"""

from .client.auth import SigningKeySource, compute_session_password
from .client.main import FreeboxClient
from .discovery import HTTPDiscovery, MDNSDiscovery, discover
from .exceptions import (
    FreeboxAPIError,
    FreeboxAuthenticationError,
    FreeboxConfigurationError,
    FreeboxConnectionError,
    FreeboxDiscoveryError,
    FreeboxError,
    FreeboxHTTPError,
    FreeboxParsingError,
    FreeboxTimeoutError,
)
from .models import (
    AppPermission,
    AuthorizationProgress,
    AuthorizationStatus,
    AuthorizationToken,
    Challenge,
    ConnectionLog,
    ConnectionStatus,
    DeviceDescriptor,
    DiscoverProtocol,
    Session,
)

# Version information
__version__ = "1.0.0"
__license__ = "MIT"

# Public API
__all__ = [
    "AppPermission",
    "AuthorizationProgress",
    "AuthorizationStatus",
    "AuthorizationToken",
    "Challenge",
    "ConnectionLog",
    "ConnectionStatus",
    "DeviceDescriptor",
    "DiscoverProtocol",
    "FreeboxAPIError",
    "FreeboxAuthenticationError",
    "FreeboxClient",
    "FreeboxConfigurationError",
    "FreeboxConnectionError",
    "FreeboxDiscoveryError",
    "FreeboxError",
    "FreeboxHTTPError",
    "FreeboxParsingError",
    "FreeboxTimeoutError",
    "HTTPDiscovery",
    "MDNSDiscovery",
    "Session",
    "SigningKeySource",
    "__license__",
    "__version__",
    "compute_session_password",
    "discover",
]
