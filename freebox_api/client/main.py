"""
Main Freebox API Client
=======================

This module contains the client facade tying a discovered device to the
pairing flow, the login handshake and the connection endpoints.

"""

import logging
from typing import Optional, Union

from freebox_api.client.auth import AuthorizationFlow, ChallengeSession, SigningKeySource
from freebox_api.client.connection import ConnectionEndpoint
from freebox_api.client.http import FreeboxRequestHandler
from freebox_api.exceptions import FreeboxConfigurationError
from freebox_api.models import (
    AuthorizationProgress,
    AuthorizationToken,
    Challenge,
    ConnectionLog,
    ConnectionStatus,
    DeviceDescriptor,
    Session,
)

logger = logging.getLogger("freebox-api")


class FreeboxClient:
    """
    Client for one Freebox, identified by a DeviceDescriptor.

    The client holds configuration only. Session tokens are returned to the
    caller and passed back explicitly, so session lifetime stays with the
    caller (the router expires sessions on its own; re-run login when a call
    fails with FreeboxAuthenticationError).

    Examples:
        First-time pairing:

        >>> client = FreeboxClient(device, app_id="fr.example.app", app_name="Example")
        >>> token = client.request_authorization()
        >>> client.track_authorization_progress(token.track_id).status
        <AuthorizationStatus.PENDING: 'pending'>

        Later logins:

        >>> client = FreeboxClient(device, app_id="fr.example.app", app_token=stored_token,
        ...                        signing_key_source=SigningKeySource.APP_TOKEN)
        >>> session = client.login()
        >>> status = client.connection_status(session.session_token)
        >>> client.close_session(session.session_token)
    """

    def __init__(
        self,
        device: DeviceDescriptor,
        app_id: str,
        app_name: str = "freebox-api",
        app_version: str = "1.0.0",
        device_name: str = "freebox-api",
        app_token: Optional[str] = None,
        signing_key_source: SigningKeySource = SigningKeySource.APP_ID,
        timeout: tuple = (3, 12),
        verify: Union[bool, str] = True,
    ):
        """
        Initialize the client.

        Args:
            device: Router to talk to
            app_id: Application identifier
            app_name: Application display name (pairing only)
            app_version: Application version (pairing only)
            device_name: Name of this machine (pairing only)
            app_token: App token from a granted pairing
            signing_key_source: Which credential signs login challenges
            timeout: (connect_timeout, read_timeout) in seconds
            verify: TLS verification flag or CA bundle path
        """
        signing_key_source = SigningKeySource(signing_key_source)
        if signing_key_source is SigningKeySource.APP_TOKEN and not app_token:
            raise FreeboxConfigurationError(
                "Signing with the app token requires app_token",
                details={"parameter": "signing_key_source", "value": signing_key_source.value},
            )

        self.device = device
        self.app_id = app_id
        self.app_name = app_name
        self.app_version = app_version
        self.device_name = device_name
        self.app_token = app_token
        self.signing_key_source = signing_key_source

        handler = FreeboxRequestHandler(device.base_url, timeout=timeout, verify=verify)
        self.authorization = AuthorizationFlow(handler)
        self.sessions = ChallengeSession(handler)
        self.connection = ConnectionEndpoint(handler)

        logger.debug(f"FreeboxClient initialized for {device.base_url} (signing with {signing_key_source.value})")

    @property
    def signing_key(self) -> str:
        if self.signing_key_source is SigningKeySource.APP_TOKEN:
            return self.app_token or ""
        return self.app_id

    def request_authorization(self) -> AuthorizationToken:
        return self.authorization.request_authorization(self.app_id, self.app_name, self.app_version, self.device_name)

    def track_authorization_progress(self, track_id: int) -> AuthorizationProgress:
        return self.authorization.track_authorization_progress(track_id)

    def get_challenge(self) -> Challenge:
        return self.sessions.get_challenge()

    def open_session(self, challenge: str) -> Session:
        return self.sessions.open_session(self.app_id, challenge, signing_key=self.signing_key)

    def login(self) -> Session:
        """Fetch a fresh challenge and open a session with it."""
        challenge = self.get_challenge()
        return self.open_session(challenge.challenge)

    def close_session(self, session_token: str) -> None:
        self.sessions.close_session(session_token)

    def connection_status(self, session_token: str) -> ConnectionStatus:
        return self.connection.status(session_token)

    def connection_logs(self, session_token: str) -> list[ConnectionLog]:
        return self.connection.logs(session_token)
